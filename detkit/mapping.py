"""
Map boxes from the letterboxed model input back to the original image.

Two output conventions exist among detector exports:

- ``"pixels"``: boxes are already in pixels of the padded canvas
  (0..target_size), as with Ultralytics YOLOv8 ONNX exports. Mapping is
  ``x / scale``.
- ``"normalized"``: boxes are in 0..1 canvas units. Mapping is
  ``x * target_size / scale``.

Picking the wrong one silently produces boxes off by a factor of
``target_size``, so the choice is explicit in PipelineConfig.
Padding is anchored top-left, so no offset is subtracted.
"""

from dataclasses import replace
from typing import Iterable, List

from .types import Detection, LetterboxParams

PIXELS = "pixels"
NORMALIZED = "normalized"
BOX_UNITS = (PIXELS, NORMALIZED)


def map_coordinate(value: float, params: LetterboxParams, box_units: str = PIXELS) -> float:
    if box_units == PIXELS:
        return value / params.scale
    if box_units == NORMALIZED:
        return value * params.target_size / params.scale
    raise ValueError(f"box_units must be one of {BOX_UNITS}, got {box_units!r}")


def _clamp(value: float, upper: float) -> float:
    return min(max(value, 0.0), upper)


def to_original(
    det: Detection,
    params: LetterboxParams,
    box_units: str = PIXELS,
    clip: bool = False,
) -> Detection:
    """
    Return a copy of `det` in original-image coordinates.

    With `clip=True` corners are clamped to [0, width] x [0, height].
    """

    x1, y1, x2, y2 = (map_coordinate(v, params, box_units) for v in det.as_xyxy())
    if clip:
        w, h = params.orig_size
        x1, x2 = _clamp(x1, w), _clamp(x2, w)
        y1, y2 = _clamp(y1, h), _clamp(y2, h)
    return replace(det, x1=x1, y1=y1, x2=x2, y2=y2)


def map_detections(
    detections: Iterable[Detection],
    params: LetterboxParams,
    box_units: str = PIXELS,
    clip: bool = False,
) -> List[Detection]:
    return [to_original(d, params, box_units=box_units, clip=clip) for d in detections]
