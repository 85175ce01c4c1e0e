from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .types import LetterboxParams

# Neutral mid-gray used for the padded area.
PAD_COLOR: Tuple[int, int, int] = (128, 128, 128)


@dataclass(frozen=True)
class LetterboxResult:
    image: np.ndarray
    params: LetterboxParams


def _check_image(image: np.ndarray) -> None:
    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array (RGB).")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image, 'shape', None)}")


def compute_scale(width: int, height: int, target_size: int) -> float:
    """
    Uniform scale factor that fits a (width, height) image inside a square canvas.
    """

    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if target_size <= 0:
        raise ValueError(f"target_size must be > 0, got {target_size}")
    return min(target_size / width, target_size / height)


def letterbox(
    image: np.ndarray,
    target_size: int = 1280,
    color: Tuple[int, int, int] = PAD_COLOR,
) -> LetterboxResult:
    """
    Resize an image uniformly and pad it to a `target_size` square canvas.

    The resized image is anchored at the top-left corner; padding is only
    added on the right and bottom. The input image is never modified.

    Returns:
        LetterboxResult with the padded canvas and the LetterboxParams needed
        to map boxes back to the original image.
    """
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for letterbox(). Install with `pip install opencv-python`.") from e

    _check_image(image)
    h, w = image.shape[:2]
    scale = compute_scale(w, h, target_size)

    # At least one axis lands exactly on target_size.
    resized_w = min(target_size, max(1, int(round(w * scale))))
    resized_h = min(target_size, max(1, int(round(h * scale))))

    if (w, h) != (resized_w, resized_h):
        resized = cv2.resize(image, (resized_w, resized_h), interpolation=cv2.INTER_LINEAR)
    else:
        resized = image

    right = target_size - resized_w
    bottom = target_size - resized_h
    padded = cv2.copyMakeBorder(resized, 0, bottom, 0, right, cv2.BORDER_CONSTANT, value=color)

    params = LetterboxParams(
        scale=scale,
        target_size=target_size,
        orig_width=w,
        orig_height=h,
        resized_width=resized_w,
        resized_height=resized_h,
    )
    return LetterboxResult(image=padded, params=params)


def to_input_tensor(image_rgb: np.ndarray) -> np.ndarray:
    """
    HWC uint8 RGB canvas -> (1, 3, H, W) float32 tensor with values in [0, 1].
    """

    _check_image(image_rgb)
    blob = image_rgb.astype(np.float32) / 255.0
    blob = np.transpose(blob, (2, 0, 1))[None, ...]
    return np.ascontiguousarray(blob)
