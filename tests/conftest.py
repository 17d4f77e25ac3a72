"""Shared fixtures: raw Figma node trees and a stubbed Figma client.

Trees are returned as fresh dicts per test, shaped like the `document`
object of GET /v1/files/:key/nodes.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


def _bbox(x: float, y: float, w: float, h: float) -> Dict[str, float]:
    return {"x": x, "y": y, "width": w, "height": h}


def _solid(r: float, g: float, b: float, **extra: Any) -> Dict[str, Any]:
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": 1}, **extra}


def _text(node_id: str, name: str, y: float, x: float = 0, size: float = 16) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": name,
        "type": "TEXT",
        "characters": name,
        "absoluteBoundingBox": _bbox(x, y, 80, 24),
        "style": {
            "fontFamily": "Inter",
            "fontWeight": 400,
            "fontSize": size,
            "lineHeightPx": 24,
        },
        "fills": [_solid(0.1, 0.1, 0.1)],
    }


@pytest.fixture
def landing_tree() -> Dict[str, Any]:
    """Page with one nav bar, one button and one image node."""
    return {
        "id": "1:1",
        "name": "Landing Page",
        "type": "FRAME",
        "absoluteBoundingBox": _bbox(0, 0, 1440, 1024),
        "fills": [_solid(1, 1, 1)],
        "children": [
            {
                "id": "1:2",
                "name": "Top Nav",
                "type": "FRAME",
                "layoutMode": "HORIZONTAL",
                "itemSpacing": 24,
                "paddingTop": 16,
                "paddingRight": 32,
                "paddingBottom": 16,
                "paddingLeft": 32,
                "absoluteBoundingBox": _bbox(0, 0, 1440, 80),
                "fills": [_solid(1, 1, 1)],
                "children": [
                    _text("1:3", "Home", 28, x=32),
                    _text("1:4", "About", 28, x=136),
                    _text("1:5", "Contact", 28, x=240),
                ],
            },
            {
                "id": "2:1",
                "name": "Primary Button",
                "type": "FRAME",
                "cornerRadius": 8,
                "absoluteBoundingBox": _bbox(640, 400, 160, 48),
                "fills": [_solid(0, 0.4, 1)],
                "children": [_text("2:2", "Get started", 412, x=660)],
            },
            {
                "id": "3:1",
                "name": "Hero Image",
                "type": "RECTANGLE",
                "absoluteBoundingBox": _bbox(420, 500, 600, 400),
                "fills": [{"type": "IMAGE", "imageRef": "abc123", "scaleMode": "FILL"}],
            },
        ],
    }


@pytest.fixture
def figma_client() -> MagicMock:
    """Stand-in for FigmaClient with async API methods."""
    client = MagicMock()
    client.get_node_images = AsyncMock(return_value={})
    client.download_image = AsyncMock(return_value=b"\x89PNG")
    client.get_node_document = AsyncMock(return_value={})
    return client


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Back-off sleep that records requested delays instead of waiting."""
    return AsyncMock(return_value=None)


@pytest_asyncio.fixture
async def api_client(tmp_path, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI routes."""
    monkeypatch.setattr("design_pipeline.config.FIGMA_TOKEN", "fake-token")
    from design_pipeline.app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
