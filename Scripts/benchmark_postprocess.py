from __future__ import annotations

import argparse
import statistics
import time
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from detkit import LetterboxParams, class_aware_nms, compute_scale, decode_output, map_detections


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p95_ms: float


def _percentile(sorted_values: List[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("No values provided.")
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    # Linear interpolation between closest ranks.
    pos = (q / 100.0) * (len(sorted_values) - 1)
    lo = int(np.floor(pos))
    hi = int(np.ceil(pos))
    t = pos - lo
    return float(sorted_values[lo] * (1.0 - t) + sorted_values[hi] * t)


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms = sorted(v * 1000.0 for v in values_s)
    return TimingSummary(
        n=len(ms),
        mean_ms=float(statistics.fmean(ms)),
        p50_ms=_percentile(ms, 50.0),
        p95_ms=_percentile(ms, 95.0),
    )


def synthetic_output(num_boxes: int, num_classes: int, size: int, seed: int = 0) -> np.ndarray:
    """
    Random (1, 4 + num_classes, num_boxes) output in canvas pixel units.
    """

    rng = np.random.default_rng(seed)
    p = np.zeros((4 + num_classes, num_boxes), dtype=np.float32)
    p[0:2] = rng.uniform(0, size, size=(2, num_boxes))
    p[2:4] = rng.uniform(8, size / 4, size=(2, num_boxes))
    p[4:] = rng.uniform(0.0, 1.0, size=(num_classes, num_boxes)) ** 4
    return p[None, ...]


def main() -> int:
    parser = argparse.ArgumentParser(description="Time decode / NMS / mapping on a synthetic detector output.")
    parser.add_argument("--boxes", type=int, default=33600, help="Columns in the output (33600 for a 1280 input).")
    parser.add_argument("--classes", type=int, default=80)
    parser.add_argument("--size", type=int, default=1280, help="Square model input size.")
    parser.add_argument("--width", type=int, default=1920, help="Original image width.")
    parser.add_argument("--height", type=int, default=1080, help="Original image height.")
    parser.add_argument("--conf", type=float, default=0.4)
    parser.add_argument("--iou", type=float, default=0.45)
    parser.add_argument("--repeats", type=int, default=20)
    args = parser.parse_args()

    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")

    output = synthetic_output(args.boxes, args.classes, args.size)
    scale = compute_scale(args.width, args.height, args.size)
    params = LetterboxParams(
        scale=scale,
        target_size=args.size,
        orig_width=args.width,
        orig_height=args.height,
        resized_width=int(round(args.width * scale)),
        resized_height=int(round(args.height * scale)),
    )

    timings: Dict[str, List[float]] = {"decode": [], "nms": [], "map": []}
    counts = (0, 0)
    for _ in range(args.repeats):
        t0 = time.perf_counter()
        candidates = decode_output(output, args.conf)
        t1 = time.perf_counter()
        kept = class_aware_nms(candidates, args.iou)
        t2 = time.perf_counter()
        map_detections(kept, params)
        t3 = time.perf_counter()

        timings["decode"].append(t1 - t0)
        timings["nms"].append(t2 - t1)
        timings["map"].append(t3 - t2)
        counts = (len(candidates), len(kept))

    print(f"candidates={counts[0]} kept={counts[1]}")
    for label, values in timings.items():
        s = _summarize_ms(values)
        print(f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms p95={s.p95_ms:.3f}ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
