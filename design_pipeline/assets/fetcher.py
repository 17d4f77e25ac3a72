"""Image asset fetching for per-node batches and whole-frame renders.

Two independent paths:

1. fetch_assets(): one /v1/images call resolves every image node to a render
   URL, then each URL is downloaded concurrently (bounded by a semaphore) and
   written to {assets_root}/{folder}/{safe_id}.png. A missing URL or a failed
   download only drops that asset; a batch that exhausts its retry budget
   yields an empty map.

2. fetch_frame_image(): renders one node at scale 2, falling back to 1 and
   then 0.5 while the payload exceeds the size ceiling. The last scale is
   accepted as-is. Failure after all attempts raises FigmaClientError.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import Dict, List, Optional, Sequence

from ..config import ASSETS_ROOT, ASSETS_URL_PREFIX
from ..integrations.figma_client import FigmaClient, FigmaClientError
from ..integrations.retry import Sleep, call_with_backoff
from ..models import AssetRecord, AssetTarget, FrameImage
from ..settings import (
    ASSET_DOWNLOAD_CONCURRENCY,
    ASSET_DOWNLOAD_MAX_RETRIES,
    ASSET_RENDER_SCALE,
    ASSET_RESOLVE_MAX_RETRIES,
    FRAME_MAX_BYTES,
    FRAME_RENDER_MAX_RETRIES,
    FRAME_SCALE_STEP_DELAY,
    FRAME_SCALES,
)

logger = logging.getLogger("design_pipeline.assets")

IMAGE_EXTENSION = "png"

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def safe_node_filename(node_id: str) -> str:
    """'12:34' → '12-34.png'; instance ids like 'I1:2;3:4' → 'I1-2-3-4.png'."""
    return f"{_UNSAFE_FILENAME_RE.sub('-', node_id)}.{IMAGE_EXTENSION}"


def asset_folder_name(file_key: str, group_label: Optional[str] = None) -> str:
    """Folder for a batch: sanitized, lower-cased group label, else the file key."""
    if group_label:
        return _NON_ALNUM_RE.sub("_", group_label).lower()
    return _UNSAFE_FILENAME_RE.sub("_", file_key)


def _write_bytes(path: str, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)


class AssetFetcher:
    """Resolves, downloads and stages image assets for one Figma file.

    Args:
        client: Authenticated FigmaClient.
        assets_root: Writable directory that holds one sub-folder per group.
        url_prefix: Web path under which assets_root is served.
        concurrency: Max simultaneous downloads.
        sleep: Awaitable used for back-off waits (injectable for tests).
    """

    def __init__(
        self,
        client: FigmaClient,
        assets_root: str = ASSETS_ROOT,
        url_prefix: str = ASSETS_URL_PREFIX,
        *,
        concurrency: int = ASSET_DOWNLOAD_CONCURRENCY,
        resolve_max_retries: int = ASSET_RESOLVE_MAX_RETRIES,
        download_max_retries: int = ASSET_DOWNLOAD_MAX_RETRIES,
        frame_max_retries: int = FRAME_RENDER_MAX_RETRIES,
        frame_max_bytes: int = FRAME_MAX_BYTES,
        frame_scales: Sequence[float] = FRAME_SCALES,
        scale_step_delay: float = FRAME_SCALE_STEP_DELAY,
        sleep: Optional[Sleep] = None,
    ):
        self.client = client
        self.assets_root = assets_root
        self.url_prefix = url_prefix.rstrip("/")
        self.concurrency = max(1, concurrency)
        self.resolve_max_retries = resolve_max_retries
        self.download_max_retries = download_max_retries
        self.frame_max_retries = frame_max_retries
        self.frame_max_bytes = frame_max_bytes
        self.frame_scales = tuple(frame_scales)
        self.scale_step_delay = scale_step_delay
        self._sleep = sleep or asyncio.sleep

    # ------------------------------------------------------------------
    # Per-node asset batch
    # ------------------------------------------------------------------

    async def resolve_image_urls(
        self, file_key: str, node_ids: List[str]
    ) -> Dict[str, Optional[str]]:
        """Resolve all node ids to render URLs in a single request (with back-off).

        Raises:
            FigmaClientError: once the retry budget is exhausted.
        """
        return await call_with_backoff(
            lambda: self.client.get_node_images(
                file_key,
                node_ids,
                fmt=IMAGE_EXTENSION,
                scale=ASSET_RENDER_SCALE,
                use_absolute_bounds=True,
            ),
            max_retries=self.resolve_max_retries,
            sleep=self._sleep,
            label="resolve_image_urls",
        )

    async def download_assets(
        self,
        file_key: str,
        targets: Sequence[AssetTarget],
        group_label: Optional[str] = None,
    ) -> List[AssetRecord]:
        """Resolve and download every target; one AssetRecord per target.

        Raises:
            FigmaClientError: the batch URL resolution exhausted its budget.
            OSError: the staging folder could not be created.
        """
        if not targets:
            return []

        logger.info(f"download_assets: fetching download URLs for {len(targets)} images")
        urls = await self.resolve_image_urls(file_key, [t.node_id for t in targets])

        folder = asset_folder_name(file_key, group_label)
        target_dir = os.path.join(self.assets_root, folder)
        os.makedirs(target_dir, exist_ok=True)

        sem = asyncio.Semaphore(self.concurrency)

        async def _download_one(target: AssetTarget) -> AssetRecord:
            record = AssetRecord(
                node_id=target.node_id, name=target.name, url=urls.get(target.node_id)
            )
            if not record.url:
                record.error = "no render URL"
                logger.warning(f"download_assets: No image URL for node {target.node_id}")
                return record

            filename = safe_node_filename(target.node_id)
            try:
                async with sem:
                    content = await call_with_backoff(
                        lambda: self.client.download_image(record.url),
                        max_retries=self.download_max_retries,
                        sleep=self._sleep,
                        label=f"download {target.node_id}",
                    )
                await asyncio.to_thread(_write_bytes, os.path.join(target_dir, filename), content)
            except (FigmaClientError, OSError) as e:
                record.error = str(e)
                logger.warning(
                    f"download_assets: Failed to download image for node {target.node_id}: {e}"
                )
                return record

            record.size_bytes = len(content)
            record.local_path = f"{self.url_prefix}/{folder}/{filename}"
            logger.info(
                f"download_assets: {target.node_id} → {record.local_path} "
                f"({record.size_bytes} bytes)"
            )
            return record

        records = await asyncio.gather(*[_download_one(t) for t in targets])
        saved = sum(1 for r in records if r.ok)
        logger.info(f"download_assets: {saved}/{len(targets)} assets saved to {target_dir}")
        return list(records)

    async def fetch_assets(
        self,
        file_key: str,
        targets: Sequence[AssetTarget],
        group_label: Optional[str] = None,
    ) -> Dict[str, str]:
        """Build the node_id → local web path map. Never raises for transport
        or staging-folder errors.

        An empty target list returns {} without any network call.
        """
        if not targets:
            return {}
        try:
            records = await self.download_assets(file_key, targets, group_label)
        except FigmaClientError as e:
            logger.error(f"fetch_assets: batch failed, no assets available: {e}")
            return {}
        except OSError as e:
            logger.error(f"fetch_assets: cannot create asset folder, no assets available: {e}")
            return {}
        return {r.node_id: r.local_path for r in records if r.local_path}

    # ------------------------------------------------------------------
    # Whole-frame rendering
    # ------------------------------------------------------------------

    async def _render_once(self, file_key: str, node_id: str, scale: float) -> bytes:
        urls = await self.client.get_node_images(file_key, [node_id], fmt=IMAGE_EXTENSION, scale=scale)
        url = urls.get(node_id)
        if not url:
            raise FigmaClientError(f"Could not generate image from Figma node {node_id}.")
        return await self.client.download_image(url)

    async def fetch_frame_image(self, file_key: str, node_id: str) -> FrameImage:
        """Render one node, lowering the scale while the payload is over the ceiling.

        Each scale attempt is retried under the frame back-off budget.

        Raises:
            FigmaClientError: a scale attempt failed after all retries.
        """
        tried: List[float] = []
        content = b""
        for i, scale in enumerate(self.frame_scales):
            if i > 0:
                await self._sleep(self.scale_step_delay)
            logger.info(f"fetch_frame_image: rendering {node_id} at scale {scale:g}")
            content = await call_with_backoff(
                lambda: self._render_once(file_key, node_id, scale),
                max_retries=self.frame_max_retries,
                sleep=self._sleep,
                label=f"fetch_frame_image scale={scale:g}",
            )
            tried.append(scale)
            if len(content) <= self.frame_max_bytes:
                break
            if i < len(self.frame_scales) - 1:
                logger.warning(
                    f"fetch_frame_image: {len(content)} bytes exceeds "
                    f"{self.frame_max_bytes} at scale {scale:g}, trying a lower scale"
                )
            else:
                logger.warning(
                    f"fetch_frame_image: {len(content)} bytes still over the ceiling "
                    f"at scale {scale:g}, accepting lowest resolution"
                )

        return FrameImage(node_id=node_id, content=content, scale=tried[-1], tried_scales=tried)
