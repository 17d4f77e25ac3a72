"""Design extraction pipeline entry point.

Raw Figma node JSON in; token summary, component summary, asset map and an
annotated tree out. The three extraction passes are independent reads of the
same tree; only the annotator produces a (new) tree.

Usage:
    async with FigmaClient(token=token) as client:
        result = await extract_from_figma(client, file_key, node_id)
        payload = result.to_payload()
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from .assets.annotator import annotate_tree
from .assets.fetcher import AssetFetcher
from .assets.locator import locate_image_nodes
from .extraction.components import detect_components
from .extraction.tokens import extract_design_tokens
from .integrations.figma_client import FigmaClient, FigmaClientError
from .models import DesignNode, PipelineResult
from .observers import PipelineObserver, default_observer

logger = logging.getLogger("design_pipeline.pipeline")

_FILE_PATH_KINDS = ("design", "file")
_FILE_KEY_RE = re.compile(r"^[A-Za-z0-9]+$")


# --- Figma URL Parsing ---


def _is_figma_host(host: Optional[str]) -> bool:
    host = (host or "").lower()
    return host == "figma.com" or host.endswith(".figma.com")


def parse_figma_url(url: str) -> Tuple[str, str]:
    """Split a Figma design link into (file_key, node_id).

    Both /design/ and /file/ links work, with or without the trailing page
    name. The node-id query value is percent-decoded and its '-' separator
    turned into the API's ':' ('16650-538' → '16650:538').

    Raises:
        ValueError: not a Figma file link, or no node-id to extract from.
    """
    parsed = urlparse(url)
    segments = [s for s in parsed.path.split("/") if s]
    if (
        not _is_figma_host(parsed.hostname)
        or len(segments) < 2
        or segments[0] not in _FILE_PATH_KINDS
        or not _FILE_KEY_RE.match(segments[1])
    ):
        raise ValueError(
            f"Invalid Figma URL: {url!r}. Expected "
            "https://www.figma.com/design/{fileKey}/...?node-id={nodeId}"
        )

    node_values = parse_qs(parsed.query).get("node-id")
    if not node_values or not node_values[0]:
        raise ValueError("Figma URL must include a node-id parameter pointing to a frame.")

    node_id = node_values[0]
    if ":" not in node_id:
        node_id = node_id.replace("-", ":")
    return segments[1], node_id


# --- Pipeline ---


async def load_design_tree(
    client: FigmaClient, file_key: str, node_id: str
) -> Optional[Dict[str, Any]]:
    """Fetch a node subtree, or None when the upstream is unavailable (degraded mode)."""
    try:
        return await client.get_node_document(file_key, node_id)
    except FigmaClientError as e:
        logger.warning(
            f"load_design_tree: node data unavailable for {file_key}/{node_id}, "
            f"continuing without it: {e}"
        )
        return None


async def run_pipeline(
    raw_tree: Optional[Dict[str, Any]],
    file_key: str,
    *,
    fetcher: AssetFetcher,
    group_label: Optional[str] = None,
    observer: Optional[PipelineObserver] = None,
) -> PipelineResult:
    """Run token extraction, component detection and asset staging over one tree.

    A missing tree produces empty summaries, an empty asset map and no
    annotated tree. Asset batch failures are absorbed by the fetcher.
    """
    observer = observer or default_observer()
    root = DesignNode.from_api(raw_tree)
    observer.on_phase("raw_tree", root)

    tokens = extract_design_tokens(root)
    observer.on_phase("tokens", tokens)

    components = detect_components(root)
    observer.on_phase("components", components)

    targets = locate_image_nodes(root)
    observer.on_phase("asset_targets", targets)

    asset_map = await fetcher.fetch_assets(file_key, targets, group_label)
    observer.on_phase("assets", asset_map)

    annotated = annotate_tree(root, asset_map)
    observer.on_phase("annotated_tree", annotated)

    logger.info(
        f"run_pipeline: file={file_key}, colors={len(tokens.colors)}, "
        f"components={sum(components.counts.values())}, "
        f"assets={len(asset_map)}/{len(targets)}"
    )
    return PipelineResult(
        token_summary=tokens,
        component_summary=components,
        asset_map=asset_map,
        annotated_tree=annotated,
    )


async def extract_from_figma(
    client: FigmaClient,
    file_key: str,
    node_id: str,
    *,
    group_label: Optional[str] = None,
    fetcher: Optional[AssetFetcher] = None,
    observer: Optional[PipelineObserver] = None,
) -> PipelineResult:
    """Fetch a node subtree and run the pipeline on it.

    The asset folder defaults to the root node's name (e.g. 'Hero Section' →
    'hero_section').
    """
    raw_tree = await load_design_tree(client, file_key, node_id)
    if group_label is None and raw_tree is not None:
        group_label = raw_tree.get("name") or None
    return await run_pipeline(
        raw_tree,
        file_key,
        fetcher=fetcher or AssetFetcher(client),
        group_label=group_label,
        observer=observer,
    )
