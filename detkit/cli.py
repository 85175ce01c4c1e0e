from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .config import PipelineConfig, load_pipeline_config
from .mapping import BOX_UNITS
from .metadata import load_class_names
from .runtime import load_pipeline
from .visualize import draw_detections, format_detection

logger = logging.getLogger(__name__)


def read_image_rgb(path: Path) -> np.ndarray:
    import cv2  # type: ignore

    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {path}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def write_image_rgb(path: Path, image_rgb: np.ndarray) -> None:
    import cv2  # type: ignore

    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR)):
        raise ValueError(f"Could not write image to path: {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect objects in one image with a letterboxed detector.")
    parser.add_argument("image", type=Path, help="Input image path.")
    parser.add_argument("--model", type=Path, required=True, help="Model path (.onnx or TorchScript).")
    parser.add_argument("--backend", choices=["onnxruntime", "torchscript"], default=None)
    parser.add_argument("--config", type=Path, default=None, help="JSON pipeline config.")
    parser.add_argument("--size", dest="target_size", type=int, default=None, help="Square model input size.")
    parser.add_argument("--conf", dest="conf_threshold", type=float, default=None, help="Confidence threshold.")
    parser.add_argument("--iou", dest="iou_threshold", type=float, default=None, help="NMS IoU threshold.")
    parser.add_argument("--box-units", dest="box_units", choices=list(BOX_UNITS), default=None)
    parser.add_argument("--max-det", dest="max_detections", type=int, default=None)
    parser.add_argument("--names", type=Path, default=None, help="Class names file for labels.")
    parser.add_argument("--output", type=Path, default=None, help="Write the annotated original image here.")
    parser.add_argument("--save-input", type=Path, default=None, help="Write the padded model input here.")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def resolve_config(args: argparse.Namespace) -> PipelineConfig:
    """
    Config file values first, then any flag given on the command line.
    """

    cfg = load_pipeline_config(args.config) if args.config is not None else PipelineConfig()
    overrides = {
        key: getattr(args, key)
        for key in ("target_size", "conf_threshold", "iou_threshold", "box_units", "max_detections")
        if getattr(args, key) is not None
    }
    return replace(cfg, **overrides) if overrides else cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="[%(asctime)s][%(levelname)s][%(name)s] %(message)s")

    cfg = resolve_config(args)
    image = read_image_rgb(args.image)
    pipeline = load_pipeline(args.model, backend=args.backend, config=cfg)

    result = pipeline.run(image)
    detections = result.detections
    logger.info("%d detections", len(detections))

    for det in detections:
        print(format_detection(det))

    if args.output is not None:
        class_names = load_class_names(args.names) if args.names is not None else None
        write_image_rgb(args.output, draw_detections(image, detections, class_names=class_names))
    if args.save_input is not None:
        write_image_rgb(args.save_input, result.preprocess.image)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
