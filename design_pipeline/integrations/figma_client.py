"""Figma REST API client for the design extraction pipeline.

Fetches node trees and rendered image URLs from Figma files using Personal
Access Token (PAT) authentication, and downloads the rendered bytes.

Environment:
    FIGMA_TOKEN: Figma Personal Access Token (used when no token= is passed)

Usage:
    async with FigmaClient(token="...") as client:
        doc = await client.get_node_document("6kGd851qaAX4TiL44vpIrO", "16650:538")
        urls = await client.get_node_images("6kGd851qaAX4TiL44vpIrO", ["16650:539"])
        png = await client.download_image(urls["16650:539"])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import FIGMA_API_BASE, FIGMA_TOKEN
from ..settings import (
    FIGMA_HTTP_MAX_CONNECTIONS,
    FIGMA_HTTP_MAX_KEEPALIVE,
    FIGMA_HTTP_TIMEOUT,
)

logger = logging.getLogger("design_pipeline.integrations.figma")


class FigmaClientError(Exception):
    """Raised when a Figma API call or image download fails.

    Attributes:
        status_code: HTTP status, or None for timeouts / connection errors.
        retryable: True for rate limits, 5xx, timeouts and connection errors.
        rate_limited: True for HTTP 429.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class UpstreamUnavailableError(FigmaClientError):
    """The requested node subtree could not be fetched at all."""


def _format_scale(scale: float) -> str:
    return f"{scale:g}"


def _raise_for_status(resp: httpx.Response, what: str) -> None:
    if resp.status_code == 200:
        return
    if resp.status_code == 403:
        raise FigmaClientError(
            "Figma API returned 403 Forbidden. Check that the token is valid "
            "and has file_content:read scope.",
            status_code=403,
        )
    if resp.status_code == 404:
        raise FigmaClientError(f"Figma resource not found: {what}", status_code=404)
    if resp.status_code == 429:
        raise FigmaClientError(
            "Figma API rate limit exceeded. Retry later.",
            status_code=429,
            retryable=True,
        )
    raise FigmaClientError(
        f"Figma API error {resp.status_code}: {resp.text[:200]}",
        status_code=resp.status_code,
        retryable=resp.status_code >= 500,
    )


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT. Falls back to FIGMA_TOKEN env var.
        timeout: HTTP request timeout in seconds, applied to every call.
        api_base: API root URL.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = FIGMA_HTTP_TIMEOUT,
        api_base: str = FIGMA_API_BASE,
    ):
        self._token = token or FIGMA_TOKEN
        if not self._token:
            raise FigmaClientError(
                "Figma token not configured. Set FIGMA_TOKEN environment variable "
                "or pass token= to FigmaClient()."
            )
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._api_base = api_base

    async def __aenter__(self) -> "FigmaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._api_base,
                headers={"X-FIGMA-TOKEN": self._token},
                timeout=self._timeout,
                limits=httpx.Limits(
                    max_connections=FIGMA_HTTP_MAX_CONNECTIONS,
                    max_keepalive_connections=FIGMA_HTTP_MAX_KEEPALIVE,
                ),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make a GET request to the Figma API."""
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Figma API timeout: {path}", retryable=True) from e
        except httpx.TransportError as e:
            raise FigmaClientError(
                f"Figma API connection error: {path}", retryable=True
            ) from e
        except httpx.HTTPError as e:
            raise FigmaClientError(f"Figma API request failed: {path}: {e}") from e

        _raise_for_status(resp, path)
        try:
            data = resp.json()
        except ValueError as e:
            raise FigmaClientError(f"Figma API returned invalid JSON: {path}") from e
        if not isinstance(data, dict):
            raise FigmaClientError(f"Figma API returned unexpected payload: {path}")
        return data

    # ------------------------------------------------------------------
    # Core API methods
    # ------------------------------------------------------------------

    async def get_file_nodes(
        self,
        file_key: str,
        node_ids: List[str],
    ) -> Dict[str, Any]:
        """Fetch specific nodes from a Figma file.

        GET /v1/files/:key/nodes?ids=...
        """
        ids_param = ",".join(node_ids)
        data = await self._get(f"/v1/files/{file_key}/nodes", params={"ids": ids_param})
        logger.info(
            f"get_file_nodes: file={file_key}, requested={len(node_ids)}, "
            f"returned={len(data.get('nodes') or {})}"
        )
        return data

    async def get_node_document(self, file_key: str, node_id: str) -> Dict[str, Any]:
        """Fetch one node subtree and return its `document` dict.

        Raises:
            UpstreamUnavailableError: the response has no document for node_id.
        """
        data = await self.get_file_nodes(file_key, [node_id])
        entry = (data.get("nodes") or {}).get(node_id) or {}
        document = entry.get("document")
        if not isinstance(document, dict):
            raise UpstreamUnavailableError(
                f"Figma returned no document for node {node_id} in file {file_key}"
            )
        return document

    async def get_node_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = "png",
        scale: float = 2,
        use_absolute_bounds: bool = False,
    ) -> Dict[str, Optional[str]]:
        """Render nodes via Figma's image export API, one request for the batch.

        GET /v1/images/:key?ids=...&format=png&scale=2

        Returns node_id → transient download URL (None where rendering failed).
        """
        params: Dict[str, str] = {
            "ids": ",".join(node_ids),
            "format": fmt,
            "scale": _format_scale(scale),
        }
        if use_absolute_bounds:
            params["use_absolute_bounds"] = "true"

        data = await self._get(f"/v1/images/{file_key}", params=params)

        if data.get("err"):
            raise FigmaClientError(f"Figma image render error: {data['err']}")

        images = data.get("images") or {}
        logger.info(
            f"get_node_images: file={file_key}, requested={len(node_ids)}, "
            f"scale={_format_scale(scale)}, rendered={sum(1 for v in images.values() if v)}"
        )
        return images

    async def download_image(self, url: str) -> bytes:
        """Download rendered image bytes from a (pre-signed) render URL."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as dl_client:
                resp = await dl_client.get(url)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Image download timeout: {url}", retryable=True) from e
        except httpx.TransportError as e:
            raise FigmaClientError(
                f"Image download connection error: {url}", retryable=True
            ) from e
        except httpx.HTTPError as e:
            raise FigmaClientError(f"Image download failed: {url}: {e}") from e

        _raise_for_status(resp, url)
        return resp.content
