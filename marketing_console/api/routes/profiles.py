"""
Profiles API.

Endpoints:
- GET /api/profiles - Search profiles (paged)
- GET /api/profiles/export - Filtered (or selected) profiles as CSV
- POST /api/profiles/import - Insert profiles from CSV text
- GET /api/profiles/{id}/export - One profile with every contact field as CSV
- GET /api/profiles/{id}/events/export - A profile's events as CSV
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from marketing_console.api.deps import get_rules, get_store
from marketing_console.api.routes.dashboard import account_match
from marketing_console.api.routes.exports import csv_response
from marketing_console.api.schemas import (
    ErrorResponse,
    ProfileImportRequest,
    ProfileImportResponse,
    ProfileListResponse,
    ProfileResponse,
)
from marketing_console.components.export import (
    export_profile,
    export_profile_events,
    export_profiles,
    profile_rows_from_csv,
)
from marketing_console.components.filtering import ProfileFilter, filter_profiles, paginate
from marketing_console.core.ports.store import EntityNotFoundError, EntityStorePort
from marketing_console.domain.entities import Event, Profile, full_name
from marketing_console.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_profile(store: EntityStorePort, profile_id: str) -> Profile:
    try:
        return store.get(Profile, profile_id)
    except EntityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile not found: {profile_id}",
        ) from None


@router.get("", response_model=ProfileListResponse)
def search_profiles(
    search: str = Query("", description="Name, email, phone or device id"),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=500),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
) -> ProfileListResponse:
    profiles = store.select_matches(
        Profile, account_match(account_id), order_by="created_at", descending=True
    )
    sliced = paginate(filter_profiles(profiles, ProfileFilter(search=search)), page, page_size)
    return ProfileListResponse(
        profiles=[
            ProfileResponse(
                id=p.id,
                name=full_name(p),
                email=p.email,
                phone=p.phone,
                device_id=p.device_id,
                created_at=p.created_at,
            )
            for p in sliced.rows
        ],
        page=sliced.page,
        page_size=sliced.page_size,
        total_rows=sliced.total_rows,
        total_pages=sliced.total_pages,
    )


@router.get("/export", summary="Export profiles to CSV")
def export_profiles_csv(
    search: str = Query(""),
    ids: list[str] | None = Query(None, description="Export only these profile ids"),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> StreamingResponse:
    """Selected profiles when ids are given, otherwise the whole filtered list."""
    profiles = filter_profiles(
        store.select_matches(
            Profile, account_match(account_id), order_by="created_at", descending=True
        ),
        ProfileFilter(search=search),
    )
    if ids:
        wanted = set(ids)
        profiles = [p for p in profiles if p.id in wanted]
    return csv_response(export_profiles(profiles, selected=bool(ids)), rules)


@router.post(
    "/import",
    response_model=ProfileImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import profiles from CSV",
)
def import_profiles_csv(
    request: ProfileImportRequest,
    store: EntityStorePort = Depends(get_store),
) -> ProfileImportResponse:
    """
    Insert one profile per data row.

    A row the store rejects is skipped and counted; the other rows are kept.
    """
    profile_ids: list[str] = []
    skipped = 0
    for values in profile_rows_from_csv(request.content, request.account_id):
        try:
            profile = store.insert(Profile, values)
        except ValueError as e:
            skipped += 1
            logger.warning("skipping profile import row: %s", e)
            continue
        profile_ids.append(profile.id)

    logger.info("imported %d profile(s), %d skipped", len(profile_ids), skipped)
    return ProfileImportResponse(
        imported=len(profile_ids), skipped=skipped, profile_ids=profile_ids
    )


@router.get(
    "/{profile_id}/export",
    summary="Export one profile to CSV",
    responses={404: {"model": ErrorResponse}},
)
def export_profile_csv(
    profile_id: str,
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> StreamingResponse:
    return csv_response(export_profile(_get_profile(store, profile_id)), rules)


@router.get(
    "/{profile_id}/events/export",
    summary="Export a profile's events to CSV",
    responses={404: {"model": ErrorResponse}},
)
def export_profile_events_csv(
    profile_id: str,
    event_type: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> StreamingResponse:
    """Newest first; optionally restricted to one event type."""
    _get_profile(store, profile_id)
    match: dict[str, str] = {"profile_id": profile_id}
    if event_type:
        match["event_type"] = event_type
    events = store.select_matches(Event, match, order_by="occurred_at", descending=True)
    return csv_response(export_profile_events(events, profile_id), rules)
