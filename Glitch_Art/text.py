from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

LABEL_COLOR_RGBA: Tuple[int, int, int, int] = (255, 0, 0, 255)


@dataclass(frozen=True)
class TextStyle:
    """
    Label font. `size` is the glyph height in pixels; glyphs are stretched
    horizontally by `aspect`.
    """

    size: float = 60.0
    aspect: float = 1.5
    thickness: int = 2
    font: int = cv2.FONT_HERSHEY_SIMPLEX

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("text size must be > 0")
        if self.aspect <= 0:
            raise ValueError("text aspect must be > 0")
        if self.thickness < 1:
            raise ValueError("text thickness must be >= 1")

    @property
    def font_scale(self) -> float:
        return cv2.getFontScaleFromHeight(self.font, int(round(self.size)), self.thickness)

    def render_mask(self, text: str) -> np.ndarray:
        """
        Coverage mask (float32, 0..1) of `text`, already stretched.
        """

        (tw, th), baseline = cv2.getTextSize(text, self.font, self.font_scale, self.thickness)
        h = th + baseline
        if tw <= 0 or h <= 0:
            return np.zeros((0, 0), dtype=np.float32)
        mask = np.zeros((h, tw), dtype=np.uint8)
        cv2.putText(mask, text, (0, th), self.font, self.font_scale, 255, self.thickness, cv2.LINE_AA)
        stretched_w = max(1, int(round(tw * self.aspect)))
        mask = cv2.resize(mask, (stretched_w, h), interpolation=cv2.INTER_LINEAR)
        return mask.astype(np.float32) / 255.0

    def measure(self, text: str) -> Tuple[int, int]:
        """(width, height) of the rendered text in pixels."""

        mask = self.render_mask(text)
        return int(mask.shape[1]), int(mask.shape[0])


def draw_text(
    canvas: np.ndarray,
    text: str,
    x: int,
    y: int,
    style: TextStyle,
    color: Tuple[int, int, int, int] = LABEL_COLOR_RGBA,
) -> None:
    """
    Draw `text` with its top-left at (x, y) onto an RGBA canvas in place.
    Parts outside the canvas are clipped; (x, y) may be negative.
    """

    mask = style.render_mask(text)
    if mask.size == 0:
        return

    ch, cw = canvas.shape[:2]
    mh, mw = mask.shape
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(cw, x + mw), min(ch, y + mh)
    if x0 >= x1 or y0 >= y1:
        return

    cov = mask[y0 - y : y1 - y, x0 - x : x1 - x][:, :, None]
    region = canvas[y0:y1, x0:x1].astype(np.float32)
    blended = region * (1.0 - cov) + np.asarray(color, dtype=np.float32) * cov
    canvas[y0:y1, x0:x1] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
