from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .config import PipelineConfig
from .letterbox import letterbox, to_input_tensor
from .postprocess import DetectionPostprocessor
from .types import Detection, LetterboxParams

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
InferFn = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    image: np.ndarray
    params: LetterboxParams


@dataclass(frozen=True)
class PipelineResult:
    detections: List[Detection]
    preprocess: PreprocessResult


class DetectionPipeline:
    """
    Single-image pipeline: letterbox -> inference -> post-process.

    Expects RGB images as `np.ndarray` (H, W, 3) and returns `Detection`s in
    original image coordinates. `infer_fn` is treated as an opaque blocking
    call from a (1, 3, S, S) float tensor to a (1, C, N) output.
    The pipeline holds no per-image state, so separate instances or calls on
    separate images do not interfere.
    """

    def __init__(
        self,
        infer_fn: InferFn,
        config: PipelineConfig = PipelineConfig(),
        *,
        backend: Optional[object] = None,
        backend_name: Optional[str] = None,
    ):
        self._infer_fn = infer_fn
        self.config = config
        self.backend = backend
        self.backend_name = backend_name
        self.post = DetectionPostprocessor(config)

    def preprocess(self, image_rgb: np.ndarray) -> PreprocessResult:
        boxed = letterbox(image_rgb, target_size=self.config.target_size, color=self.config.pad_color)
        blob = to_input_tensor(boxed.image)
        return PreprocessResult(blob=blob, image=boxed.image, params=boxed.params)

    def run(self, image_rgb: np.ndarray) -> PipelineResult:
        prep = self.preprocess(image_rgb)
        logger.debug(
            "letterbox %dx%d -> %d (scale %.4f)",
            prep.params.orig_width,
            prep.params.orig_height,
            prep.params.target_size,
            prep.params.scale,
        )
        output = self._infer_fn(prep.blob)
        detections = self.post.process(output, prep.params)
        return PipelineResult(detections=detections, preprocess=prep)

    def __call__(self, image_rgb: np.ndarray) -> List[Detection]:
        return self.run(image_rgb).detections


def load_pipeline(
    model_path: PathLike,
    *,
    backend: Optional[str] = None,
    config: PipelineConfig = PipelineConfig(),
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
    torch_output_index: int = 0,
) -> DetectionPipeline:
    """
    Create a pipeline for a model on disk.

        pipe = load_pipeline("onnx_models/yolov8n.onnx")

    Args:
        model_path: path to the model file
        backend: "onnxruntime" or "torchscript"; None infers it from the extension
        config: pipeline settings (input size, thresholds, box units)
    """

    resolved = Path(model_path).expanduser().resolve()
    chosen = backend
    if chosen is None:
        suffix = resolved.suffix.lower()
        if suffix == ".onnx":
            chosen = "onnxruntime"
        elif suffix in {".torchscript", ".ts", ".pt"}:
            chosen = "torchscript"
        else:
            raise ValueError(
                f"Could not infer backend from extension '{suffix}'. Pass backend=... explicitly."
            )

    chosen = chosen.lower()
    logger.info("loading %s model %s", chosen, resolved)
    if chosen == "onnxruntime":
        from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

        ort_backend = OnnxRuntimeBackend(
            resolved,
            OnnxRuntimeBackendConfig(
                providers=onnx_providers,
                input_name=onnx_input_name,
                output_name=onnx_output_name,
            ),
        )
        return DetectionPipeline(ort_backend.infer, config, backend=ort_backend, backend_name="onnxruntime")

    if chosen == "torchscript":
        from .backends.torchscript_backend import TorchScriptBackend, TorchScriptBackendConfig

        ts_backend = TorchScriptBackend(resolved, TorchScriptBackendConfig(output_index=torch_output_index))
        return DetectionPipeline(ts_backend.infer, config, backend=ts_backend, backend_name="torchscript")

    raise ValueError(f"Unsupported backend: {backend!r}")
