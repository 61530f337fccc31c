from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from detect_kit.runtime import DEFAULT_INPUT_SIZE

from .edges import DEFAULT_EDGE_THRESHOLD


@dataclass(frozen=True)
class GlitchProfile:
    """
    Tunables for one glitch run. Defaults match the original look:
    `iou_threshold=10.0` disables suppression entirely (every anchor over
    `score_threshold` becomes a snippet).
    """

    schema_version: int = 1
    max_snippet_width: int = 600
    max_snippet_height: int = 600
    text_size: float = 60.0
    iou_threshold: float = 10.0
    score_threshold: float = 0.01
    edge_threshold: int = DEFAULT_EDGE_THRESHOLD
    # (height, width); None = models without a fixed input size are rejected
    input_fallback: Optional[Tuple[int, int]] = DEFAULT_INPUT_SIZE
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.schema_version != 1:
            raise ValueError("glitch_profile schema_version must be 1")
        if self.max_snippet_width < 0:
            raise ValueError("max_snippet_width must be >= 0")
        if self.max_snippet_height < 0:
            raise ValueError("max_snippet_height must be >= 0")
        if self.text_size <= 0:
            raise ValueError("text_size must be > 0")
        if self.iou_threshold < 0:
            raise ValueError("iou_threshold must be >= 0")
        if not (0.0 <= self.score_threshold <= 1.0):
            raise ValueError("score_threshold must be within [0, 1]")
        if not (0 <= self.edge_threshold <= 255):
            raise ValueError("edge_threshold must be within [0, 255]")
        if self.input_fallback is not None:
            if len(self.input_fallback) != 2 or any(int(v) < 32 for v in self.input_fallback):
                raise ValueError("input_fallback must be [height, width] with both >= 32")


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _parse_input_fallback(value: Any) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    if (
        not isinstance(value, list)
        or len(value) != 2
        or any(isinstance(v, bool) or not isinstance(v, int) for v in value)
    ):
        raise ValueError("input_fallback must be null or [height, width] integers")
    return int(value[0]), int(value[1])


def load_glitch_profile(path: Path) -> GlitchProfile:
    if not path.exists():
        raise FileNotFoundError(f"Glitch profile not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid glitch profile JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Glitch profile must be a JSON object")

    allowed = {
        "schema_version",
        "max_snippet_width",
        "max_snippet_height",
        "text_size",
        "iou_threshold",
        "score_threshold",
        "edge_threshold",
        "input_fallback",
        "notes",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown glitch profile keys: {unknown}")
    if "schema_version" not in payload:
        raise ValueError("Missing required key: schema_version")

    kwargs: Dict[str, Any] = {"schema_version": _require_int(payload, "schema_version")}
    for key in ("max_snippet_width", "max_snippet_height", "edge_threshold"):
        if key in payload:
            kwargs[key] = _require_int(payload, key)
    for key in ("text_size", "iou_threshold", "score_threshold"):
        if key in payload:
            kwargs[key] = _require_number(payload, key)
    if "input_fallback" in payload:
        kwargs["input_fallback"] = _parse_input_fallback(payload["input_fallback"])

    notes = payload.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise ValueError("notes must be a string if provided")
    kwargs["notes"] = notes

    return GlitchProfile(**kwargs)
