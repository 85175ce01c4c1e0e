from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from .types import Detection

RED: Tuple[int, int, int] = (255, 0, 0)
WHITE: Tuple[int, int, int] = (255, 255, 255)


def format_detection(det: Detection) -> str:
    """
    One console line per detection: class, score, corners and centroid.
    """

    cx, cy = det.center()
    return (
        f"Class={det.class_id}, Score={det.score:.4f}, "
        f"BBox=({det.x1:.1f},{det.y1:.1f},{det.x2:.1f},{det.y2:.1f}) "
        f"Centroid=({cx:.1f},{cy:.1f})"
    )


def label_for(det: Detection, class_names: Optional[Dict[int, str]] = None) -> str:
    name = class_names.get(det.class_id, str(det.class_id)) if class_names else str(det.class_id)
    return f"Class {name} ({det.score:.2%})"


def draw_detections(
    image_rgb: np.ndarray,
    detections: Iterable[Detection],
    *,
    class_names: Optional[Dict[int, str]] = None,
    color: Tuple[int, int, int] = RED,
    box_thickness: int = 2,
    font_scale: float = 0.5,
    font_thickness: int = 1,
) -> np.ndarray:
    """
    Draw boxes and labels on a copy of an RGB image.

    Detections must already be in the image's own coordinates. Labels go
    above the box, or inside it when there is no room above.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    if image_rgb is None or not hasattr(image_rgb, "shape"):
        raise TypeError("image_rgb must be a NumPy array (RGB).")
    if image_rgb.ndim != 3 or image_rgb.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_rgb, 'shape', None)}")

    out = image_rgb.copy()
    h, w = out.shape[:2]

    for det in detections:
        x1, y1, x2, y2 = det.as_xyxy()
        x1i = int(np.clip(round(x1), 0, w - 1))
        y1i = int(np.clip(round(y1), 0, h - 1))
        x2i = int(np.clip(round(x2), 0, w - 1))
        y2i = int(np.clip(round(y2), 0, h - 1))

        cv2.rectangle(out, (x1i, y1i), (x2i, y2i), color, thickness=box_thickness)

        label = label_for(det, class_names)
        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, font_thickness)
        y_text = y1i - baseline
        if y_text - th < 0:
            y_text = min(y1i + th, h - 1)

        cv2.putText(
            out,
            label,
            (x1i, y_text),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            WHITE,
            thickness=font_thickness,
            lineType=cv2.LINE_AA,
        )

    return out
