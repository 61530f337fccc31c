"""
Snippet compositor: paste crops of detected objects from the original photo
onto its edge image and work out where each label goes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence

import numpy as np

from detect_kit.metadata import class_label
from detect_kit.types import Detection

from .edges import gray_to_rgba, to_rgba
from .text import TextStyle


class CompositeKind(str, Enum):
    RAW = "RAW"
    EDGE = "EDGE"


@dataclass(frozen=True)
class SnippetConfig:
    max_snippet_width: int = 600
    max_snippet_height: int = 600

    def __post_init__(self) -> None:
        if self.max_snippet_width < 0:
            raise ValueError("max_snippet_width must be >= 0")
        if self.max_snippet_height < 0:
            raise ValueError("max_snippet_height must be >= 0")


class LabelPlacement(NamedTuple):
    text: str
    x: int
    y: int


@dataclass
class Snippet:
    image_crop: np.ndarray
    anchor_x: int
    anchor_y: int
    label: str
    label_x: int
    label_y: int

    @property
    def width(self) -> int:
        return int(self.image_crop.shape[1])

    @property
    def height(self) -> int:
        return int(self.image_crop.shape[0])


@dataclass
class CompositeImage:
    kind: CompositeKind
    pixels: np.ndarray  # (H, W, 4) RGBA uint8
    labels: List[LabelPlacement] = field(default_factory=list)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def clamp_extent(pos: int, size: int, max_size: int, limit: int) -> int:
    return max(0, min(max_size, size, limit - pos))


def iter_snippets(
    original_rgba: np.ndarray,
    detections: Sequence[Detection],
    *,
    class_names: Optional[Dict[int, str]],
    cfg: SnippetConfig,
    text_style: TextStyle,
) -> Iterator[Snippet]:
    """
    Yield one bounded snippet per detection that starts inside the image.

    Detections whose top-left lies outside the image are dropped silently.
    """

    img_h, img_w = original_rgba.shape[:2]
    for det in detections:
        x, y = int(det.left), int(det.top)
        if x < 0 or y < 0 or x >= img_w or y >= img_h:
            continue

        width = clamp_extent(x, int(det.width), cfg.max_snippet_width, img_w)
        height = clamp_extent(y, int(det.height), cfg.max_snippet_height, img_h)
        crop = original_rgba[y : y + height, x : x + width].copy()

        label = class_label(class_names, int(det.class_id))
        text_w, text_h = text_style.measure(label)
        yield Snippet(
            image_crop=crop,
            anchor_x=x,
            anchor_y=y,
            label=label,
            label_x=(x + width // 2) - text_w // 2,
            label_y=(y + height // 2) - text_h // 2,
        )


def paste_snippet(canvas: np.ndarray, snippet: Snippet) -> None:
    """Opaque overlay; zero-size snippets are a no-op."""

    h, w = snippet.height, snippet.width
    if h == 0 or w == 0:
        return
    y, x = snippet.anchor_y, snippet.anchor_x
    canvas[y : y + h, x : x + w] = snippet.image_crop


def compose_snippets(
    original: np.ndarray,
    edges: Optional[np.ndarray],
    detections: Sequence[Detection],
    *,
    class_names: Optional[Dict[int, str]] = None,
    cfg: SnippetConfig = SnippetConfig(),
    text_style: TextStyle = TextStyle(),
) -> CompositeImage:
    """
    Build the composite for one source image.

    Args:
        original: RGB(A) photo the snippets are cut from
        edges: single-channel edge image of the same size, or None to paste
               onto the original itself (RAW composite)
        detections: pasted in order, so later snippets overwrite earlier
                    ones where they overlap
    """

    original_rgba = to_rgba(original)
    if edges is None:
        kind = CompositeKind.RAW
        canvas = original_rgba.copy()
    else:
        if edges.shape[:2] != original_rgba.shape[:2]:
            raise ValueError(
                f"Edge image size {edges.shape[:2]} does not match original {original_rgba.shape[:2]}"
            )
        kind = CompositeKind.EDGE
        canvas = gray_to_rgba(edges) if edges.ndim == 2 else to_rgba(edges)

    labels: List[LabelPlacement] = []
    for snippet in iter_snippets(
        original_rgba,
        detections,
        class_names=class_names,
        cfg=cfg,
        text_style=text_style,
    ):
        paste_snippet(canvas, snippet)
        labels.append(LabelPlacement(snippet.label, snippet.label_x, snippet.label_y))

    return CompositeImage(kind=kind, pixels=canvas, labels=labels)
