import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketing_console import __version__
from marketing_console.api.deps import get_rules, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules on startup (fail-fast)
    try:
        rules = get_rules(settings)
    except (FileNotFoundError, ValueError):
        logger.critical("Rules load failed from %s", settings.rules_path, exc_info=True)
        raise
    logger.info(
        "Rules loaded from %s (timezone %s)", settings.rules_path, rules.analytics.timezone
    )

    yield


app = FastAPI(
    title="Marketing Console API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from marketing_console.api.routes import (  # noqa: E402
    agents,
    dashboard,
    exports,
    profiles,
    segments,
)

app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(exports.router, prefix="/api/exports", tags=["Exports"])
app.include_router(agents.router, prefix="/api/agents", tags=["Agents"])
app.include_router(segments.router, prefix="/api/segments", tags=["Segments"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "marketing-console"}
