from __future__ import annotations

import argparse
import statistics
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from detect_kit import BoxDecoder, DecoderConfig  # noqa: E402


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p95_ms: float


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms = np.sort(np.asarray(values_s, dtype=np.float64) * 1000.0)
    return TimingSummary(
        n=int(ms.size),
        mean_ms=float(statistics.fmean(ms)),
        p50_ms=float(np.percentile(ms, 50.0)),
        p95_ms=float(np.percentile(ms, 95.0)),
    )


def _synthetic_output(rng: np.random.Generator, num_classes: int, anchors: int, size: int) -> np.ndarray:
    """Random YOLOv8-shaped output: mostly low scores with a few confident anchors."""

    out = np.empty((1, 4 + num_classes, anchors), dtype=np.float32)
    out[0, 0:2] = rng.uniform(0, size, size=(2, anchors))
    out[0, 2:4] = rng.uniform(4, size / 3, size=(2, anchors))
    out[0, 4:] = rng.beta(0.3, 8.0, size=(num_classes, anchors))
    return out


def main() -> int:
    parser = argparse.ArgumentParser(description="Time box decoding + NMS on synthetic YOLOv8 output.")
    parser.add_argument("--anchors", type=int, default=8400, help="Anchor count (8400 for 640x640 YOLOv8).")
    parser.add_argument("--classes", type=int, default=80, help="Class count.")
    parser.add_argument("--imgsz", type=int, default=640, help="Model input size.")
    parser.add_argument("--repeats", type=int, default=5, help="Timed runs per configuration.")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the synthetic tensor.")
    args = parser.parse_args()

    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")

    rng = np.random.default_rng(args.seed)
    preds = _synthetic_output(rng, args.classes, args.anchors, args.imgsz)
    orig = (1920, 1280)
    size = (args.imgsz, args.imgsz)

    configs = {
        "glitch (iou=10.0, conf=0.01)": DecoderConfig(num_classes=args.classes),
        "detector (iou=0.45, conf=0.25)": DecoderConfig(num_classes=args.classes, iou_threshold=0.45, score_threshold=0.25),
    }
    for label, cfg in configs.items():
        decoder = BoxDecoder(cfg)
        times: List[float] = []
        n_boxes = 0
        for _ in range(args.repeats):
            t0 = time.perf_counter()
            n_boxes = len(decoder.process(preds, orig_size=orig, input_size=size))
            times.append(time.perf_counter() - t0)
        s = _summarize_ms(times)
        print(f"{label}: boxes={n_boxes} n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms p95={s.p95_ms:.3f}ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
