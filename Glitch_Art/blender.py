"""
Canvas blender: fold all composites into one canvas, brightest channel wins,
then burn in the labels.

The per-pixel rule is a plain per-channel maximum. An older version counted
contributing pixels but always divided by 1, so the output was never an
average; that maximum is what existing outputs look like and is kept as is.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from .compositor import CompositeImage
from .text import LABEL_COLOR_RGBA, TextStyle, draw_text

# Opaque black means "no contribution" (edge-detection holes).
BACKGROUND_SENTINEL: Tuple[int, int, int, int] = (0, 0, 0, 255)


def canvas_size(composites: Sequence[CompositeImage]) -> Tuple[int, int]:
    """(width, height): smallest width and smallest height across composites."""

    if not composites:
        raise ValueError("At least one composite image is required")
    return min(c.width for c in composites), min(c.height for c in composites)


def tile_sample(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Sample `pixels` at (x mod w, y mod h) for every canvas coordinate."""

    src_h, src_w = pixels.shape[:2]
    ys = np.arange(height) % src_h
    xs = np.arange(width) % src_w
    return pixels[ys[:, None], xs[None, :]]


def blend_pixels(composites: Sequence[CompositeImage], size: Optional[Tuple[int, int]] = None) -> np.ndarray:
    if not composites:
        raise ValueError("At least one composite image is required")
    width, height = size if size is not None else canvas_size(composites)
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {(width, height)}")

    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    alpha = np.full((height, width), 255, dtype=np.uint8)
    sentinel = np.asarray(BACKGROUND_SENTINEL, dtype=np.uint8)

    for comp in composites:
        if comp.width == 0 or comp.height == 0:
            raise ValueError("Composite images must not be empty")
        sampled = tile_sample(comp.pixels, width, height)
        contributes = np.any(sampled != sentinel, axis=-1)
        rgb = np.where(contributes[:, :, None], np.maximum(rgb, sampled[:, :, :3]), rgb)
        alpha = np.where(contributes, sampled[:, :, 3], alpha)

    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :, :3] = rgb
    canvas[:, :, 3] = alpha
    return canvas


def burn_labels(
    canvas: np.ndarray,
    composites: Sequence[CompositeImage],
    text_style: TextStyle,
    color: Tuple[int, int, int, int] = LABEL_COLOR_RGBA,
) -> None:
    # composite order, then detection order within a composite
    for comp in composites:
        for label in comp.labels:
            draw_text(canvas, label.text, label.x, label.y, text_style, color)


def blend_composites(
    composites: Sequence[CompositeImage],
    *,
    size: Optional[Tuple[int, int]] = None,
    text_style: TextStyle = TextStyle(),
    draw_labels: bool = True,
) -> np.ndarray:
    """
    Final RGBA canvas of `size` (default: `canvas_size(composites)`).
    """

    canvas = blend_pixels(composites, size)
    if draw_labels:
        burn_labels(canvas, composites, text_style)
    return canvas
