import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from .types import Detection

logger = logging.getLogger(__name__)


def box_area(d: Detection) -> float:
    return d.area()


def intersection_area(a: Detection, b: Detection) -> float:
    ix1 = max(a.x1, b.x1)
    iy1 = max(a.y1, b.y1)
    ix2 = min(a.x2, b.x2)
    iy2 = min(a.y2, b.y2)
    return max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)


def iou(a: Detection, b: Detection) -> float:
    """
    Intersection-over-Union of two boxes. A zero union yields 0.0.
    """

    inter = intersection_area(a, b)
    union = box_area(a) + box_area(b) - inter
    if union == 0:
        return 0.0
    return inter / union


def nms_indices(boxes: np.ndarray, scores: np.ndarray, iou_threshold: float) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).

    Returns indices of kept boxes in selection order. Equal scores keep their
    input order; a box is dropped when its IoU with a kept box is >= iou_threshold.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    boxes = np.asarray(boxes, dtype=np.float64)
    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = np.maximum(0.0, x2 - x1) * np.maximum(0.0, y2 - y1)

    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable")
    keep = []

    while order.size > 0:
        i = order[0]
        keep.append(i)
        rest = order[1:]

        xx1 = np.maximum(x1[i], x1[rest])
        yy1 = np.maximum(y1[i], y1[rest])
        xx2 = np.minimum(x2[i], x2[rest])
        yy2 = np.minimum(y2[i], y2[rest])

        inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
        union = areas[i] + areas[rest] - inter
        overlap = np.divide(inter, union, out=np.zeros_like(inter), where=union != 0)

        order = rest[overlap < iou_threshold]

    return np.array(keep, dtype=np.int64)


def class_aware_nms(
    detections: Sequence[Detection],
    iou_threshold: float,
    max_detections: Optional[int] = None,
) -> List[Detection]:
    """
    Per-class NMS. Boxes of different classes never suppress each other.

    Classes are processed in order of first appearance and the result is the
    concatenation of each class's survivors. The input is not modified.
    With `max_detections`, only the highest-scoring survivors are returned.
    """

    groups: Dict[int, List[Detection]] = {}
    for det in detections:
        groups.setdefault(det.class_id, []).append(det)

    kept: List[Detection] = []
    for cls, dets in groups.items():
        boxes = np.array([d.as_xyxy() for d in dets], dtype=np.float64)
        scores = np.array([d.score for d in dets], dtype=np.float64)
        keep_local = nms_indices(boxes, scores, iou_threshold)
        kept.extend(dets[i] for i in keep_local)
        logger.debug("class %d: kept %d of %d", cls, len(keep_local), len(dets))

    if max_detections is not None and len(kept) > max_detections:
        kept = sorted(kept, key=lambda d: d.score, reverse=True)[:max_detections]
    return kept
