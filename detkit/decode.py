import logging
from typing import List

import numpy as np

from .types import Detection

logger = logging.getLogger(__name__)

# Channels 0-3 hold cx, cy, w, h; class scores start here.
NUM_BOX_CHANNELS = 4


def flat_index(channel: int, column: int, num_boxes: int) -> int:
    """
    Position of (channel, column) in the row-major flattened (1, C, N) output.
    """

    return channel * num_boxes + column


def _as_channels_by_boxes(output: np.ndarray) -> np.ndarray:
    p = np.asarray(output)
    if p.ndim == 3:
        if p.shape[0] != 1:
            raise ValueError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
        p = p[0]
    if p.ndim != 2:
        raise ValueError(f"Unsupported detector output shape: {np.shape(output)}; expected (1, C, N)")
    if p.shape[0] < NUM_BOX_CHANNELS + 1:
        raise ValueError(
            f"Detector output has {p.shape[0]} channels; need 4 box channels plus at least one class score"
        )
    return p


def decode_output(output: np.ndarray, conf_threshold: float) -> List[Detection]:
    """
    Turn a raw (1, C, N) detector output into candidate detections.

    Each of the N columns holds [cx, cy, w, h, score_0, ..., score_{C-5}].
    A column becomes a Detection when its best class score is strictly greater
    than `conf_threshold`; ties between classes go to the lowest class id.
    NaN class scores never win a column. Candidates keep column order and are
    not sorted. `conf_threshold` must lie in [0, 1].
    """

    if not 0.0 <= conf_threshold <= 1.0:
        raise ValueError(f"conf_threshold must be in [0, 1], got {conf_threshold}")

    p = _as_channels_by_boxes(output)
    num_boxes = p.shape[1]
    if num_boxes == 0:
        return []

    class_scores = p[NUM_BOX_CHANNELS:, :]
    class_scores = np.where(np.isnan(class_scores), -np.inf, class_scores)
    # argmax returns the first maximum, so equal scores favour the lower class id.
    class_ids = np.argmax(class_scores, axis=0)
    scores = class_scores[class_ids, np.arange(num_boxes)]

    keep = np.flatnonzero(scores > conf_threshold)

    cx, cy, w, h = p[0:NUM_BOX_CHANNELS, :]
    candidates = [
        Detection(
            x1=float(cx[i] - w[i] / 2),
            y1=float(cy[i] - h[i] / 2),
            x2=float(cx[i] + w[i] / 2),
            y2=float(cy[i] + h[i] / 2),
            score=float(scores[i]),
            class_id=int(class_ids[i]),
        )
        for i in keep
    ]
    logger.debug("decoded %d/%d columns above conf %.3f", len(candidates), num_boxes, conf_threshold)
    return candidates
