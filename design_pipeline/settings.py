"""Pipeline runtime settings: tunable parameters for fetching and negotiation.

All values read from environment variables with defaults matching the
documented retry and size policies. Import from here instead of hardcoding.

Infrastructure config (token, API base, asset root) stays in
design_pipeline/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


# =====================================================================
# HTTP Client (Figma API)
# =====================================================================

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 60.0)
FIGMA_HTTP_MAX_CONNECTIONS = _int("FIGMA_HTTP_MAX_CONNECTIONS", 10)
FIGMA_HTTP_MAX_KEEPALIVE = _int("FIGMA_HTTP_MAX_KEEPALIVE", 5)


# =====================================================================
# Rate-limit backoff (linear: attempt * step, capped)
# =====================================================================

RATE_LIMIT_BACKOFF_STEP = _float("RATE_LIMIT_BACKOFF_STEP", 10.0)
RATE_LIMIT_BACKOFF_CAP = _float("RATE_LIMIT_BACKOFF_CAP", 60.0)


# =====================================================================
# Per-node asset batch
# =====================================================================

# Retries after the first call for the batch URL-resolution request
ASSET_RESOLVE_MAX_RETRIES = _int("ASSET_RESOLVE_MAX_RETRIES", 3)

# Retries after the first call for a single asset's byte download
ASSET_DOWNLOAD_MAX_RETRIES = _int("ASSET_DOWNLOAD_MAX_RETRIES", 2)

# Max simultaneous in-flight asset downloads
ASSET_DOWNLOAD_CONCURRENCY = _int("ASSET_DOWNLOAD_CONCURRENCY", 5)

# Render scale requested for per-node assets
ASSET_RENDER_SCALE = _float("ASSET_RENDER_SCALE", 2.0)


# =====================================================================
# Whole-frame rendering (scale negotiation)
# =====================================================================

# Retries after the first call for each scale attempt
FRAME_RENDER_MAX_RETRIES = _int("FRAME_RENDER_MAX_RETRIES", 10)

# Payload ceiling; above it the next lower scale is requested
FRAME_MAX_BYTES = _int("FRAME_MAX_BYTES", 3 * 1024 * 1024)

# Pause between scale attempts (seconds)
FRAME_SCALE_STEP_DELAY = _float("FRAME_SCALE_STEP_DELAY", 1.0)

# Scales tried in order; the last one is accepted regardless of size
FRAME_SCALES = (2.0, 1.0, 0.5)
