"""Marketing decisioning console: analytics, attribution, list filtering and exports."""

__version__ = "0.1.0"
