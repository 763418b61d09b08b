"""Core ports shared by components, services and adapters."""
