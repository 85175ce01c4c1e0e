from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from .letterbox import PAD_COLOR
from .mapping import BOX_UNITS, PIXELS


@dataclass(frozen=True)
class PipelineConfig:
    """
    Per-invocation settings for the detection pipeline.

    - target_size: side of the square model input canvas
    - conf_threshold: a candidate needs a best class score strictly above this
    - iou_threshold: same-class boxes with IoU >= this are suppressed
    - box_units: "pixels" or "normalized" detector output coordinates
    - max_detections: cap on returned detections; None keeps all
    - class_ids: optional class ids to keep; None keeps all
    - clip_boxes: clamp mapped boxes to the original image bounds
    """

    target_size: int = 1280
    conf_threshold: float = 0.4
    iou_threshold: float = 0.45
    pad_color: Tuple[int, int, int] = PAD_COLOR
    box_units: str = PIXELS
    max_detections: Optional[int] = None
    class_ids: Optional[Sequence[int]] = None
    clip_boxes: bool = False

    def __post_init__(self) -> None:
        if self.target_size <= 0:
            raise ValueError("target_size must be > 0")
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if len(self.pad_color) != 3 or any(not 0 <= c <= 255 for c in self.pad_color):
            raise ValueError("pad_color must be three values in [0, 255]")
        object.__setattr__(self, "pad_color", tuple(self.pad_color))
        if self.box_units not in BOX_UNITS:
            raise ValueError(f"box_units must be one of {BOX_UNITS}")
        if self.max_detections is not None and self.max_detections <= 0:
            raise ValueError("max_detections must be > 0")
        if self.class_ids is not None:
            if any(isinstance(c, bool) or not isinstance(c, int) for c in self.class_ids):
                raise ValueError("class_ids must contain integers")
            object.__setattr__(self, "class_ids", tuple(self.class_ids))


_ALLOWED_KEYS = {
    "target_size",
    "conf_threshold",
    "iou_threshold",
    "pad_color",
    "box_units",
    "max_detections",
    "class_ids",
    "clip_boxes",
}


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _require_int_list(payload: Dict[str, Any], key: str) -> Tuple[int, ...]:
    value = payload[key]
    if not isinstance(value, list) or any(isinstance(v, bool) or not isinstance(v, int) for v in value):
        raise ValueError(f"{key} must be a list of integers")
    return tuple(value)


def config_from_dict(payload: Dict[str, Any]) -> PipelineConfig:
    unknown = sorted(set(payload.keys()) - _ALLOWED_KEYS)
    if unknown:
        raise ValueError(f"Unknown pipeline config keys: {unknown}")

    kwargs: Dict[str, Any] = {}
    if "target_size" in payload:
        kwargs["target_size"] = _require_int(payload, "target_size")
    for key in ("conf_threshold", "iou_threshold"):
        if key in payload:
            kwargs[key] = _require_number(payload, key)
    if "pad_color" in payload:
        color = _require_int_list(payload, "pad_color")
        if len(color) != 3:
            raise ValueError("pad_color must have exactly three values")
        kwargs["pad_color"] = color
    if "box_units" in payload:
        if not isinstance(payload["box_units"], str):
            raise ValueError("box_units must be a string")
        kwargs["box_units"] = payload["box_units"]
    if payload.get("max_detections") is not None:
        kwargs["max_detections"] = _require_int(payload, "max_detections")
    if payload.get("class_ids") is not None:
        kwargs["class_ids"] = _require_int_list(payload, "class_ids")
    if "clip_boxes" in payload:
        if not isinstance(payload["clip_boxes"], bool):
            raise ValueError("clip_boxes must be a boolean")
        kwargs["clip_boxes"] = payload["clip_boxes"]
    return PipelineConfig(**kwargs)


def load_pipeline_config(path: Path) -> PipelineConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pipeline config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid pipeline config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Pipeline config must be a JSON object")
    return config_from_dict(payload)
