"""
Export component - CSV formatting, per-table export builders and profile import.
"""

from ._csv import escape_field, export_filename, format_csv, format_row, to_text
from ._import import (
    PROFILE_HEADER_ALIASES,
    parse_csv,
    profile_rows_from_csv,
    profile_values,
)
from .component import (
    build_export,
    export_attribution,
    export_decisions,
    export_profile,
    export_profile_events,
    export_profiles,
    export_segment_members,
    export_top_messages,
    export_top_pages,
    export_top_products,
)
from .models import CSV_MEDIA_TYPE, CsvExport

__all__ = [
    # Formatter
    "escape_field",
    "export_filename",
    "format_csv",
    "format_row",
    "to_text",
    # Import
    "PROFILE_HEADER_ALIASES",
    "parse_csv",
    "profile_rows_from_csv",
    "profile_values",
    # Builders
    "build_export",
    "export_attribution",
    "export_decisions",
    "export_profile",
    "export_profile_events",
    "export_profiles",
    "export_segment_members",
    "export_top_messages",
    "export_top_pages",
    "export_top_products",
    # Models
    "CSV_MEDIA_TYPE",
    "CsvExport",
]
