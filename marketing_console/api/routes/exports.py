"""
Dashboard CSV export API.

Endpoints:
- GET /api/exports/top-pages - top-pages.csv
- GET /api/exports/top-messages - top-messages.csv
- GET /api/exports/top-products - top-products.csv
- GET /api/exports/attribution - attribution-<dimension>.csv

Every endpoint takes the same filter parameters as /api/dashboard, so the
file holds exactly the rows the dashboard shows.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from marketing_console.api.deps import get_clock, get_rules, get_store
from marketing_console.api.routes.dashboard import compute_dashboard, parse_dashboard_query
from marketing_console.components.analytics import DashboardQuery
from marketing_console.components.export import (
    CsvExport,
    export_attribution,
    export_top_messages,
    export_top_pages,
    export_top_products,
)
from marketing_console.core.ports.store import EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Helper Functions ---


def csv_response(export: CsvExport, rules: Rules) -> StreamingResponse:
    """Stream a CSV export as a file download."""
    logger.info("exporting %s (%d rows)", export.filename, export.row_count)
    return StreamingResponse(
        iter([export.encode()]),
        media_type=rules.exports.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# --- Routes ---


@router.get("/top-pages", summary="Export top pages to CSV")
def export_top_pages_csv(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    output = compute_dashboard(query, account_id, store, rules, clock)
    return csv_response(export_top_pages(output.top_pages), rules)


@router.get("/top-messages", summary="Export top messages to CSV")
def export_top_messages_csv(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    output = compute_dashboard(query, account_id, store, rules, clock)
    return csv_response(export_top_messages(output.top_messages), rules)


@router.get("/top-products", summary="Export top products to CSV")
def export_top_products_csv(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    output = compute_dashboard(query, account_id, store, rules, clock)
    return csv_response(export_top_products(output.top_products), rules)


@router.get("/attribution", summary="Export attribution rows to CSV")
def export_attribution_csv(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    output = compute_dashboard(query, account_id, store, rules, clock)
    return csv_response(
        export_attribution(output.attribution, query.attribution_dimension), rules
    )
