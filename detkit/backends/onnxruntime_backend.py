from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Ultralytics exports name their only input "images".
DEFAULT_INPUT_NAME = "images"


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    - providers: ORT execution providers; None uses CPUExecutionProvider
    - input_name/output_name: override the auto-selected I/O names
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None


class OnnxRuntimeBackend:
    """
    ONNX Runtime session wrapper.

    Takes the (1, 3, S, S) float32 blob and returns the first (or configured)
    output as a NumPy array, typically (1, 4 + num_classes, num_boxes).
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install detkit[onnx]`."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        providers = list(cfg.providers) if cfg.providers is not None else ["CPUExecutionProvider"]
        self.session = ort.InferenceSession(str(self.model_path), providers=providers)

        input_names = [i.name for i in self.session.get_inputs()]
        if cfg.input_name is not None:
            self.input_name = cfg.input_name
        elif DEFAULT_INPUT_NAME in input_names:
            self.input_name = DEFAULT_INPUT_NAME
        else:
            self.input_name = input_names[0]
        self.output_name = cfg.output_name or self.session.get_outputs()[0].name
        logger.debug("onnx session ready: input=%s output=%s", self.input_name, self.output_name)

    def infer(self, blob: np.ndarray) -> np.ndarray:
        outputs = self.session.run([self.output_name], {self.input_name: np.asarray(blob, dtype=np.float32)})
        return np.asarray(outputs[0])
