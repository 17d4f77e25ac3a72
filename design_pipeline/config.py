"""Pipeline configuration constants: single source of truth for all env vars."""

import os

# Figma REST API: Personal Access Token for design file access
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN", "")
FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com")

# Asset staging area: per-group folders are created under ASSETS_ROOT and
# exposed to the web layer under ASSETS_URL_PREFIX
ASSETS_ROOT = os.getenv("ASSETS_ROOT", os.path.join("public", "assets", "images"))
ASSETS_URL_PREFIX = os.getenv("ASSETS_URL_PREFIX", "/assets/images")

# Optional directory for per-phase JSON snapshots (debugging only)
PIPELINE_SNAPSHOT_DIR = os.getenv("PIPELINE_SNAPSHOT_DIR", "")

# Server binding, used by `python -m design_pipeline.app`
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# CORS: comma-separated origins
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
