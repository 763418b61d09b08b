# marketing-console: ports (protocol interfaces)
# Abstract interfaces for adapters; no implementations here

from marketing_console.core.ports.store import EntityNotFoundError, EntityStorePort, RecordT
from marketing_console.core.ports.time import TimePort

__all__ = [
    "EntityNotFoundError",
    "EntityStorePort",
    "RecordT",
    "TimePort",
]
