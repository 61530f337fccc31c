"""
Glitch compositor built on top of `detect_kit`.

`detect_kit` owns model I/O and box decoding; this package owns the art:
- edge images + pasted object snippets per photo (compositor)
- brightest-wins blend of all photos + red labels (blender)
- profile / run config, runner
"""

from __future__ import annotations

from .blender import BACKGROUND_SENTINEL, blend_composites, canvas_size
from .compositor import CompositeImage, CompositeKind, LabelPlacement, Snippet, SnippetConfig, compose_snippets
from .config import GlitchProfile, load_glitch_profile
from .edges import sobel_edges
from .pipeline import GlitchPipeline, GlitchResult, PipelineConfig
from .text import TextStyle, draw_text

__all__ = [
    "BACKGROUND_SENTINEL",
    "blend_composites",
    "canvas_size",
    "CompositeImage",
    "CompositeKind",
    "LabelPlacement",
    "Snippet",
    "SnippetConfig",
    "compose_snippets",
    "GlitchProfile",
    "load_glitch_profile",
    "sobel_edges",
    "GlitchPipeline",
    "GlitchResult",
    "PipelineConfig",
    "TextStyle",
    "draw_text",
]
