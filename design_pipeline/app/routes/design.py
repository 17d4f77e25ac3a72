"""Design extraction API endpoints.

Thin HTTP wrappers over the pipeline: one endpoint runs the full extraction
for a Figma node, the other renders a whole frame with scale negotiation.
Both require FIGMA_TOKEN.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...assets.fetcher import AssetFetcher
from ...integrations.figma_client import FigmaClient, FigmaClientError
from ...pipeline import extract_from_figma, parse_figma_url

logger = logging.getLogger("design_pipeline.api.design")

router = APIRouter(prefix="/api/v2/design", tags=["design"])


# --- Schemas ---


class ExtractRequest(BaseModel):
    """Request for POST /api/v2/design/extract."""

    figma_url: str = Field(
        ...,
        description=(
            "Figma URL, e.g. https://www.figma.com/design/{fileKey}/{name}?node-id={nodeId}"
        ),
    )
    group_label: Optional[str] = Field(
        None,
        description="Asset folder label. Defaults to the root node's name.",
    )


class ExtractResponse(BaseModel):
    """Response for POST /api/v2/design/extract."""

    tokenSummary: Dict[str, Any]
    componentSummary: Dict[str, Any]
    assetMap: Dict[str, str] = Field(default_factory=dict)
    annotatedTree: Optional[Dict[str, Any]] = None


class FrameImageRequest(BaseModel):
    """Request for POST /api/v2/design/frame-image."""

    figma_url: str


class FrameImageResponse(BaseModel):
    """Response for POST /api/v2/design/frame-image."""

    node_id: str
    scale: float
    tried_scales: List[float] = Field(default_factory=list)
    size_bytes: int
    image: str = Field(..., description="Base64-encoded PNG")


# --- Helpers ---


def _require_token() -> str:
    from ... import config
    if not config.FIGMA_TOKEN:
        raise HTTPException(
            status_code=400,
            detail=(
                "Figma integration not configured. "
                "Set FIGMA_TOKEN environment variable with a valid Figma Personal Access Token. "
                "See: https://www.figma.com/developers/api#access-tokens"
            ),
        )
    return config.FIGMA_TOKEN


def _parse_url(url: str):
    try:
        return parse_figma_url(url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --- Endpoints ---


@router.post("/extract", response_model=ExtractResponse)
async def extract_design(payload: ExtractRequest):
    """Extract tokens, components and image assets from a Figma node.

    Upstream failures degrade to empty summaries rather than an error.

    Usage:
        POST /api/v2/design/extract
        { "figma_url": "https://www.figma.com/design/6kGd851.../Landing?node-id=2172-2255" }
    """
    token = _require_token()
    file_key, node_id = _parse_url(payload.figma_url)

    logger.info(f"extract: file={file_key}, node={node_id}, group={payload.group_label}")
    async with FigmaClient(token=token) as client:
        result = await extract_from_figma(
            client, file_key, node_id, group_label=payload.group_label
        )
    return result.to_payload()


@router.post("/frame-image", response_model=FrameImageResponse)
async def render_frame_image(payload: FrameImageRequest):
    """Render a whole frame as PNG, lowering the scale until it fits the size ceiling."""
    token = _require_token()
    file_key, node_id = _parse_url(payload.figma_url)

    async with FigmaClient(token=token) as client:
        try:
            frame = await AssetFetcher(client).fetch_frame_image(file_key, node_id)
        except FigmaClientError as e:
            logger.error(f"frame-image: render failed for {file_key}/{node_id}: {e}")
            raise HTTPException(status_code=502, detail=f"Figma API error: {e}")

    return FrameImageResponse(
        node_id=frame.node_id,
        scale=frame.scale,
        tried_scales=frame.tried_scales,
        size_bytes=frame.size_bytes,
        image=base64.b64encode(frame.content).decode("ascii"),
    )
