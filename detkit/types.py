from dataclasses import dataclass
from typing import Tuple


@dataclass
class Detection:
    """
    One bounding box with its class and confidence.

    Coordinates are in model-input space until mapped back with
    `detkit.mapping.to_original`, and in original-image space afterwards.
    Corner order is not enforced; use `area()` for a clamped area.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    score: float
    class_id: int

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    def area(self) -> float:
        # Negative extents count as zero.
        return max(0.0, self.x2 - self.x1) * max(0.0, self.y2 - self.y1)

    def center(self) -> Tuple[float, float]:
        return (self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2


@dataclass(frozen=True)
class LetterboxParams:
    """
    Forward mapping recorded by `letterbox()`.

    The resized image sits flush against the top-left corner of the square
    canvas, so inverting only needs a division by `scale`.
    """

    scale: float
    target_size: int
    orig_width: int
    orig_height: int
    resized_width: int
    resized_height: int

    @property
    def pad_origin(self) -> Tuple[int, int]:
        return (0, 0)

    @property
    def orig_size(self) -> Tuple[int, int]:
        return self.orig_width, self.orig_height
