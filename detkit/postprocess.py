import logging
from typing import List

import numpy as np

from .config import PipelineConfig
from .decode import decode_output
from .mapping import map_detections
from .nms import class_aware_nms
from .types import Detection, LetterboxParams

logger = logging.getLogger(__name__)


class DetectionPostprocessor:
    """
    Post-process for a single (1, C, N) detector output:

    decode + confidence filter -> optional class filter -> class-aware NMS
    -> map back to original image coordinates.

    Every stage builds a new list; inputs are never edited in place.
    """

    def __init__(self, cfg: PipelineConfig = PipelineConfig()):
        self.cfg = cfg

    def process(self, output: np.ndarray, params: LetterboxParams) -> List[Detection]:
        """
        Convert raw model output into detections in original image coordinates.

        Args:
            output: detector output for one image, shape (1, C, N)
            params: letterbox parameters recorded during preprocessing
        """

        candidates = decode_output(output, self.cfg.conf_threshold)
        if not candidates:
            return []

        if self.cfg.class_ids is not None:
            wanted = set(self.cfg.class_ids)
            candidates = [d for d in candidates if d.class_id in wanted]

        kept = class_aware_nms(candidates, self.cfg.iou_threshold, max_detections=self.cfg.max_detections)
        logger.debug("nms kept %d of %d candidates", len(kept), len(candidates))

        return map_detections(kept, params, box_units=self.cfg.box_units, clip=self.cfg.clip_boxes)
