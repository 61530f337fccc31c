"""
Glitch pipeline: per image edge detection -> detection -> snippet composite,
then one blend over all composites.

Everything the stages need (thresholds, font, detector) lives on the
`GlitchPipeline` instance; there is no module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple, get_args

import numpy as np
from tqdm import tqdm

from detect_kit.errors import DetectionError
from detect_kit.postprocess import DecoderConfig
from detect_kit.types import Detection

from .blender import blend_composites
from .compositor import CompositeImage, SnippetConfig, compose_snippets
from .config import GlitchProfile
from .edges import DEFAULT_EDGE_THRESHOLD, sobel_edges
from .text import TextStyle

OnError = Literal["abort", "skip"]
ON_ERROR_CHOICES: Tuple[str, ...] = get_args(OnError)


@dataclass(frozen=True)
class PipelineConfig:
    snippet: SnippetConfig = SnippetConfig()
    text_style: TextStyle = TextStyle()
    edge_threshold: int = DEFAULT_EDGE_THRESHOLD
    # False = paste snippets onto the photo itself (RAW composites)
    use_edges: bool = True
    draw_labels: bool = True
    on_error: OnError = "abort"

    def __post_init__(self) -> None:
        if self.on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {list(ON_ERROR_CHOICES)}, got {self.on_error!r}")

    @classmethod
    def from_profile(cls, profile: GlitchProfile, **overrides) -> "PipelineConfig":
        base = cls(
            snippet=SnippetConfig(
                max_snippet_width=profile.max_snippet_width,
                max_snippet_height=profile.max_snippet_height,
            ),
            text_style=TextStyle(size=profile.text_size),
            edge_threshold=profile.edge_threshold,
        )
        if not overrides:
            return base
        return replace(base, **overrides)


def decoder_config_from_profile(profile: GlitchProfile) -> DecoderConfig:
    return DecoderConfig(iou_threshold=profile.iou_threshold, score_threshold=profile.score_threshold)


@dataclass
class GlitchResult:
    canvas: np.ndarray
    detection_counts: List[Optional[int]] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)


class GlitchPipeline:
    def __init__(
        self,
        detector: Callable[[np.ndarray], List[Detection]],
        cfg: PipelineConfig = PipelineConfig(),
        *,
        class_names: Optional[Dict[int, str]] = None,
    ):
        self.detector = detector
        self.cfg = cfg
        self.class_names = class_names

    def compose(self, image_rgb: np.ndarray) -> Tuple[CompositeImage, int]:
        """Composite for one image plus its detection count."""

        edges = sobel_edges(image_rgb, self.cfg.edge_threshold) if self.cfg.use_edges else None
        detections = self.detector(image_rgb)
        composite = compose_snippets(
            image_rgb,
            edges,
            detections,
            class_names=self.class_names,
            cfg=self.cfg.snippet,
            text_style=self.cfg.text_style,
        )
        return composite, len(detections)

    def run(self, images: Sequence[np.ndarray], *, progress: bool = False) -> GlitchResult:
        if not images:
            raise ValueError("At least one image is required")

        print("Applying glitch art transformation...")
        composites: List[CompositeImage] = []
        counts: List[Optional[int]] = []
        skipped: List[Tuple[int, str]] = []

        indexed = list(enumerate(images, start=1))
        pbar = tqdm(indexed, desc="glitch", unit="img") if progress else None
        try:
            for i, image in (pbar if pbar is not None else indexed):
                try:
                    composite, n_dets = self.compose(image)
                except DetectionError as exc:
                    if self.cfg.on_error == "abort":
                        raise
                    print(f"WARNING: Skipping image {i}: {exc}")
                    skipped.append((i, str(exc)))
                    counts.append(None)
                    continue
                composites.append(composite)
                counts.append(n_dets)
                if pbar is None:
                    print(f"Glitch art transformation applied to image {i} ({n_dets} detections)")
        finally:
            if pbar is not None:
                pbar.close()

        if not composites:
            raise RuntimeError("Every image was skipped; nothing to blend.")
        print("Glitch art transformation applied successfully.")

        print("Combining glitched images...")
        canvas = blend_composites(
            composites,
            text_style=self.cfg.text_style,
            draw_labels=self.cfg.draw_labels,
        )
        print("Glitched images combined successfully.")
        return GlitchResult(canvas=canvas, detection_counts=counts, skipped=skipped)
