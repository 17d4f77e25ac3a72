"""Phase observers for the extraction pipeline.

The pipeline reports each intermediate result to an observer instead of
writing debug files itself. Production runs use NullObserver; set
PIPELINE_SNAPSHOT_DIR to get a SnapshotObserver that dumps every phase as
JSON.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, is_dataclass
from typing import Any, Protocol

from pydantic import BaseModel

from .config import PIPELINE_SNAPSHOT_DIR
from .models import DesignNode

logger = logging.getLogger("design_pipeline.observers")


class PipelineObserver(Protocol):
    """Receives (phase, payload) after each pipeline phase completes.

    Phases: raw_tree, tokens, components, asset_targets, assets, annotated_tree.
    Observers must not mutate the payload.
    """

    def on_phase(self, phase: str, payload: Any) -> None:
        ...


class NullObserver:
    def on_phase(self, phase: str, payload: Any) -> None:
        return None


def to_jsonable(payload: Any) -> Any:
    """Convert pipeline payloads (models, dataclasses, named tuples) to JSON data."""
    if isinstance(payload, DesignNode):
        return payload.to_api_dict()
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True, mode="json")
    if is_dataclass(payload) and not isinstance(payload, type):
        return asdict(payload)
    if isinstance(payload, tuple) and hasattr(payload, "_asdict"):
        return payload._asdict()
    if isinstance(payload, dict):
        return {str(k): to_jsonable(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [to_jsonable(v) for v in payload]
    if isinstance(payload, bytes):
        return f"<{len(payload)} bytes>"
    return payload


class SnapshotObserver:
    """Writes each phase payload to {directory}/{phase}.json."""

    def __init__(self, directory: str):
        self.directory = directory

    def on_phase(self, phase: str, payload: Any) -> None:
        path = os.path.join(self.directory, f"{phase}.json")
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(to_jsonable(payload), f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"SnapshotObserver: failed to write {path}: {e}")
            return
        logger.debug(f"SnapshotObserver: wrote {path}")


def default_observer() -> PipelineObserver:
    if PIPELINE_SNAPSHOT_DIR:
        return SnapshotObserver(PIPELINE_SNAPSHOT_DIR)
    return NullObserver()
