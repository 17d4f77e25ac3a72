"""FastAPI Application Entry Point.

Configures the app, lifespan, CORS, the design routes and static serving of
downloaded assets.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ..config import ASSETS_ROOT, ASSETS_URL_PREFIX, CORS_ORIGINS
from ..logging_config import configure_logging

logger = logging.getLogger("design_pipeline.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and warn about missing integrations."""
    configure_logging()

    from .. import config
    if not config.FIGMA_TOKEN:
        logger.warning(
            "FIGMA_TOKEN not set, /api/v2/design endpoints will be unavailable. "
            "Set FIGMA_TOKEN in the environment to enable Figma integration."
        )

    yield


app = FastAPI(title="Design Pipeline API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from .routes.design import router as design_router  # noqa: E402

app.include_router(design_router)

# Asset paths returned in assetMap resolve here
app.mount(
    ASSETS_URL_PREFIX.rstrip("/") or "/assets",
    StaticFiles(directory=ASSETS_ROOT, check_dir=False),
    name="assets",
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok"}
