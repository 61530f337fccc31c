from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class NMSConfig:
    """
    Thresholds for greedy non-maximum suppression.

    Note: an `iou_threshold` at or above 1.0 never suppresses anything, so
    overlapping near-duplicates all survive. That is a valid (if noisy)
    configuration, not an error.
    """

    iou_threshold: float = 0.45
    score_threshold: float = 0.0
    # None = no cap per class
    max_per_class: Optional[int] = None


def box_iou(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    """
    IoU of one xyxy box against an (N, 4) array of xyxy boxes.
    Pairs with an empty union get IoU 0.
    """

    xx1 = np.maximum(box[0], others[:, 0])
    yy1 = np.maximum(box[1], others[:, 1])
    xx2 = np.minimum(box[2], others[:, 2])
    yy2 = np.minimum(box[3], others[:, 3])

    w = np.maximum(0.0, xx2 - xx1)
    h = np.maximum(0.0, yy2 - yy1)
    inter = w * h

    area = max(0.0, float(box[2] - box[0])) * max(0.0, float(box[3] - box[1]))
    areas = np.maximum(0.0, others[:, 2] - others[:, 0]) * np.maximum(0.0, others[:, 3] - others[:, 1])
    union = area + areas - inter
    return np.where(union > 0, inter / np.where(union > 0, union, 1.0), 0.0)


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Single-class NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of kept boxes, highest score first (ties: lower index first).
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    boxes = np.asarray(boxes, dtype=np.float64)
    scores = np.asarray(scores, dtype=np.float64)

    candidates = np.flatnonzero(scores >= cfg.score_threshold)
    # lexsort: last key is primary -> score descending, then index ascending
    order = candidates[np.lexsort((candidates, -scores[candidates]))]

    # IoU never exceeds 1.0, nothing can be suppressed
    if cfg.iou_threshold >= 1.0:
        return order[: cfg.max_per_class].astype(np.int64)

    keep: List[int] = []

    while order.size > 0:
        if cfg.max_per_class is not None and len(keep) >= cfg.max_per_class:
            break
        i = int(order[0])
        keep.append(i)

        rest = order[1:]
        if rest.size == 0:
            break
        iou = box_iou(boxes[i], boxes[rest])
        order = rest[iou <= cfg.iou_threshold]

    return np.array(keep, dtype=np.int64)


def batched_nms(boxes: np.ndarray, class_scores: np.ndarray, cfg: NMSConfig) -> List[Tuple[int, int]]:
    """
    Per-class NMS over a shared set of boxes.

    Args:
        boxes: (A, 4) xyxy boxes, one per anchor
        class_scores: (C, A) score of every class for every anchor

    Returns:
        (class_id, box_index) pairs, classes ascending, score descending within a class.
        Boxes of different classes never suppress each other, so one anchor can be
        selected for several classes.
    """

    class_scores = np.asarray(class_scores)
    if class_scores.ndim != 2:
        raise ValueError(f"class_scores must be (C, A), got shape {class_scores.shape}")
    if boxes.shape[0] != class_scores.shape[1]:
        raise ValueError(
            f"boxes/scores anchor count differ: {boxes.shape[0]} vs {class_scores.shape[1]}"
        )

    selected: List[Tuple[int, int]] = []
    for cls in range(class_scores.shape[0]):
        keep = nms(boxes, class_scores[cls], cfg)
        selected.extend((cls, int(idx)) for idx in keep)
    return selected
