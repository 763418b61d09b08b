import logging
import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from marketing_console.adapters.clock import SystemClock
from marketing_console.adapters.memory_store import InMemoryEntityStore, load_snapshot
from marketing_console.core.ports.store import EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.rules.loader import load_rules
from marketing_console.rules.models import Rules
from marketing_console.services.agents import AgentService

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("CONSOLE_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        snapshot = os.environ.get("CONSOLE_SNAPSHOT_PATH")
        self.snapshot_path = Path(snapshot) if snapshot else None


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    # A missing rules file means defaults; a broken one is still an error.
    if not settings.rules_path.exists():
        logger.warning("Rules file %s not found, using defaults", settings.rules_path)
        return Rules()
    return load_rules(settings.rules_path)


# --- Clock ---
_clock_instance: SystemClock | None = None


def get_clock(rules: Rules = Depends(get_rules)) -> TimePort:
    """Get clock singleton in the configured analytics timezone."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock(rules.analytics.timezone)
    return _clock_instance


# --- Store ---
_store_instance: InMemoryEntityStore | None = None


def get_store(
    settings: Settings = Depends(get_settings),
    clock: TimePort = Depends(get_clock),
) -> EntityStorePort:
    """Get entity store singleton, seeded from the snapshot when configured."""
    global _store_instance
    if _store_instance is None:
        if settings.snapshot_path is not None:
            _store_instance = load_snapshot(settings.snapshot_path, time_port=clock)
        else:
            logger.info("No CONSOLE_SNAPSHOT_PATH set, starting with an empty store")
            _store_instance = InMemoryEntityStore(time_port=clock)
    return _store_instance


def reset_singletons() -> None:
    """Drop cached store and clock (for testing)."""
    global _clock_instance, _store_instance
    _clock_instance = None
    _store_instance = None
    get_settings.cache_clear()
    get_rules.cache_clear()


# --- Services ---
def get_agent_service(
    store: EntityStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> AgentService:
    return AgentService(store, clock)
