"""Domain entities and timestamp helpers."""
