import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trailmark.api.deps import get_event_store, get_settings
from trailmark.rules.loader import load_rules

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("trailmark")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and open the event store on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        get_event_store(settings)
        logger.info(
            "Rules %s loaded from %s (store=%s)",
            rules.project.rules_version,
            settings.rules_path,
            settings.store_backend,
        )
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Trailmark Analytics API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from trailmark.api.routes import (  # noqa: E402
    collect,
    custom_events,
    events,
    funnels,
    insights,
    privacy,
    reports,
)

app.include_router(collect.router, prefix="/api", tags=["Collect"])
app.include_router(reports.router, prefix="/api/projects", tags=["Reports"])
app.include_router(funnels.router, prefix="/api/projects", tags=["Funnels"])
app.include_router(custom_events.router, prefix="/api/projects", tags=["Custom Events"])
app.include_router(events.router, prefix="/api/projects", tags=["Events"])
app.include_router(privacy.router, prefix="/api/projects", tags=["Privacy"])
app.include_router(insights.router, prefix="/api/projects", tags=["Insights"])


# CORS: the tracking beacon posts from any site
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "trailmark"}


def serve() -> None:
    """Run the API under uvicorn on TRAILMARK_HOST:TRAILMARK_PORT."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve()
