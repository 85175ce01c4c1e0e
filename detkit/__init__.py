"""
Single-image detection post-processing around a pretrained detector.

Letterbox an RGB image into a square model input, decode the (1, C, N)
detector output, run class-aware NMS and map boxes back to the original
image. Only NumPy and OpenCV are needed; inference runtimes are optional.
"""

from .types import Detection, LetterboxParams
from .letterbox import LetterboxResult, compute_scale, letterbox, to_input_tensor
from .decode import decode_output, flat_index
from .nms import box_area, class_aware_nms, intersection_area, iou, nms_indices
from .mapping import NORMALIZED, PIXELS, map_detections, to_original
from .config import PipelineConfig, config_from_dict, load_pipeline_config
from .postprocess import DetectionPostprocessor
from .runtime import DetectionPipeline, PipelineResult, PreprocessResult, load_pipeline
from .metadata import load_class_names
from .visualize import draw_detections, format_detection

__all__ = [
    "Detection",
    "LetterboxParams",
    "LetterboxResult",
    "compute_scale",
    "letterbox",
    "to_input_tensor",
    "decode_output",
    "flat_index",
    "box_area",
    "class_aware_nms",
    "intersection_area",
    "iou",
    "nms_indices",
    "NORMALIZED",
    "PIXELS",
    "map_detections",
    "to_original",
    "PipelineConfig",
    "config_from_dict",
    "load_pipeline_config",
    "DetectionPostprocessor",
    "DetectionPipeline",
    "PipelineResult",
    "PreprocessResult",
    "load_pipeline",
    "load_class_names",
    "draw_detections",
    "format_detection",
]
