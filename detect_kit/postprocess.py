from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .errors import ShapeMismatch
from .nms import NMSConfig, batched_nms
from .types import CandidateBox

COCO_NUM_CLASSES = 80


@dataclass(frozen=True)
class DecoderConfig:
    """
    Box decoding + suppression settings.

    Defaults reproduce the glitch profile: with `iou_threshold` above 1.0
    suppression never fires and every anchor over `score_threshold` becomes
    a detection (lots of near-duplicates, which is the intended look).
    Use ~0.45 for conventional detection output.
    """

    num_classes: int = COCO_NUM_CLASSES
    iou_threshold: float = 10.0
    score_threshold: float = 0.01
    max_per_class: Optional[int] = None

    def __post_init__(self) -> None:
        if self.num_classes <= 0:
            raise ValueError("num_classes must be > 0")
        if self.iou_threshold < 0:
            raise ValueError("iou_threshold must be >= 0")
        if self.max_per_class is not None and self.max_per_class <= 0:
            raise ValueError("max_per_class must be > 0 when set")


class BoxDecoder:
    """
    Decoder untuk output YOLOv8 (anchor-free) dengan layout `[1, 4 + C, A]`:
    baris 0..3 = cx, cy, w, h (pixel input model), sisanya = score per kelas.

    Output adalah `CandidateBox` di koordinat gambar original, hanya untuk
    pasangan (kelas, anchor) yang lolos NMS.
    """

    def __init__(self, cfg: DecoderConfig = DecoderConfig()):
        self.cfg = cfg

    def process(
        self,
        preds: np.ndarray,
        orig_size: Tuple[int, int],
        input_size: Tuple[int, int],
    ) -> List[CandidateBox]:
        """
        Args:
            preds: raw model output for a single image, shape (1, 4 + C, A)
            orig_size: (width, height) of the original image
            input_size: (width, height) the image was resized to for the model
        """

        boxes_cxcywh, class_scores = self._decode(preds)
        if boxes_cxcywh.shape[0] == 0:
            return []

        boxes_xyxy = cxcywh_to_xyxy(boxes_cxcywh)
        selected = batched_nms(
            boxes_xyxy,
            class_scores,
            NMSConfig(
                iou_threshold=self.cfg.iou_threshold,
                score_threshold=self.cfg.score_threshold,
                max_per_class=self.cfg.max_per_class,
            ),
        )
        if not selected:
            return []

        scale = scale_factors(orig_size, input_size)
        out: List[CandidateBox] = []
        for cls, idx in selected:
            left, top, width, height = self._scale_box(boxes_cxcywh[idx], scale)
            out.append(
                CandidateBox(
                    left=left,
                    top=top,
                    width=width,
                    height=height,
                    class_id=int(cls),
                    score=float(class_scores[cls, idx]),
                )
            )
        return out

    # ------------------------------------------------------------------ #
    # Helper internal
    # ------------------------------------------------------------------ #
    def _decode(self, preds: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Split the raw tensor into (A, 4) cxcywh boxes and (C, A) class scores.
        """

        p = np.asarray(preds)
        if p.ndim != 3:
            raise ShapeMismatch(f"Expected model output of rank 3 (1, 4 + C, A), got shape {p.shape}")
        if p.shape[0] != 1:
            raise ShapeMismatch(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")

        expected_attrs = 4 + self.cfg.num_classes
        if p.shape[1] != expected_attrs:
            raise ShapeMismatch(
                f"Expected {expected_attrs} box attributes (4 + {self.cfg.num_classes} classes), got shape {p.shape}"
            )

        p = p[0].astype(np.float64)
        boxes = p[0:4, :].T  # (A, 4) as cx, cy, w, h
        class_scores = p[4:, :]  # (C, A)
        return boxes, class_scores

    @staticmethod
    def _scale_box(box_cxcywh: np.ndarray, scale: Tuple[float, float]) -> Tuple[int, int, int, int]:
        """
        Model-space cxcywh -> original-space (left, top, width, height).

        Coordinates truncate toward zero and saturate at 0; the extent is
        inclusive (`right - left - 1`) and floored at 0.
        """

        scale_x, scale_y = scale
        left, top, right, bottom = scaled_xyxy(box_cxcywh, scale_x, scale_y)
        width = max(0, _to_pixel(right - left) - 1)
        height = max(0, _to_pixel(bottom - top) - 1)
        return _to_pixel(left), _to_pixel(top), width, height


def cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
    cx, cy, w_box, h_box = boxes.T
    x1 = cx - 0.5 * w_box
    y1 = cy - 0.5 * h_box
    x2 = cx + 0.5 * w_box
    y2 = cy + 0.5 * h_box
    return np.stack([x1, y1, x2, y2], axis=1)


def scaled_xyxy(box_cxcywh: np.ndarray, scale_x: float, scale_y: float) -> Tuple[float, float, float, float]:
    cx, cy, w_box, h_box = (float(v) for v in box_cxcywh)
    # Negative sizes would invert the box; treat them as empty.
    w_box = max(0.0, w_box)
    h_box = max(0.0, h_box)
    left = (cx - 0.5 * w_box) * scale_x
    top = (cy - 0.5 * h_box) * scale_y
    right = (cx + 0.5 * w_box) * scale_x
    bottom = (cy + 0.5 * h_box) * scale_y
    return left, top, right, bottom


def scale_factors(orig_size: Tuple[int, int], input_size: Tuple[int, int]) -> Tuple[float, float]:
    """(scale_x, scale_y) = original / model input, per axis."""

    orig_w, orig_h = orig_size
    in_w, in_h = input_size
    if in_w <= 0 or in_h <= 0:
        raise ValueError(f"input_size must be positive, got {input_size}")
    return float(orig_w) / float(in_w), float(orig_h) / float(in_h)


def _to_pixel(value: float) -> int:
    if not np.isfinite(value) or value <= 0:
        return 0
    return int(value)
