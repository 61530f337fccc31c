from __future__ import annotations

import argparse
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from detect_kit import coco_class_names, load_class_names, load_detector

from .config import GlitchProfile, load_glitch_profile
from .image_io import load_images, save_canvas
from .pipeline import ON_ERROR_CHOICES, GlitchPipeline, PipelineConfig, decoder_config_from_profile
from .reporting import write_run_config
from .run_config import apply_run_config, explicit_dests, load_run_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Blend a batch of photos into one edge/snippet glitch composite.",
        allow_abbrev=False,
    )
    parser.add_argument("images", nargs="*", help="Input images (or 'images' in --config).")
    parser.add_argument("--config", default=None, help="JSON run config; explicit CLI flags win over it.")
    parser.add_argument("--profile", default=None, help="JSON glitch profile (thresholds, snippet size, text size).")
    parser.add_argument("--model", default="yolov8.onnx", help="Path to a YOLOv8 ONNX model.")
    parser.add_argument("--metadata", default=None, help="Optional class metadata yaml (names mapping). Default: COCO.")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CUDAExecutionProvider,CPUExecutionProvider".',
    )
    parser.add_argument("--conf", type=float, default=None, help="Score threshold (overrides profile).")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for NMS (overrides profile).")
    parser.add_argument("--max-snippet-width", type=int, default=None, help="Max snippet width (overrides profile).")
    parser.add_argument("--max-snippet-height", type=int, default=None, help="Max snippet height (overrides profile).")
    parser.add_argument("--text-size", type=float, default=None, help="Label height in px (overrides profile).")
    parser.add_argument("--raw", action="store_true", help="Paste snippets onto the photos instead of edge images.")
    parser.add_argument("--no-labels", action="store_true", help="Skip drawing labels on the final canvas.")
    parser.add_argument(
        "--on-error",
        choices=ON_ERROR_CHOICES,
        default="abort",
        help="What to do when an image's model output is unusable.",
    )
    parser.add_argument("--out-dir", default=".", help="Directory for the output image and run_config.json.")
    parser.add_argument("--out-name", default=None, help="Output file name (default: output-<epoch>.webp).")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar instead of per-image lines.")
    return parser


def _parse_ort_providers(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    parts = [p.strip().strip("'\"`") for p in str(raw).split(",")]
    return [p for p in parts if p] or None


def resolve_profile(args: argparse.Namespace) -> GlitchProfile:
    profile = load_glitch_profile(Path(args.profile)) if args.profile else GlitchProfile()
    overrides: Dict[str, object] = {}
    if args.conf is not None:
        overrides["score_threshold"] = float(args.conf)
    if args.iou is not None:
        overrides["iou_threshold"] = float(args.iou)
    if args.max_snippet_width is not None:
        overrides["max_snippet_width"] = int(args.max_snippet_width)
    if args.max_snippet_height is not None:
        overrides["max_snippet_height"] = int(args.max_snippet_height)
    if args.text_size is not None:
        overrides["text_size"] = float(args.text_size)
    return replace(profile, **overrides) if overrides else profile


def run_glitch(args: argparse.Namespace, *, config_path: Optional[Path] = None) -> int:
    if not args.images:
        raise ValueError("No input images given (pass paths or set 'images' in --config).")

    profile = resolve_profile(args)
    if profile.iou_threshold >= 1.0:
        print(
            f"Note: iou_threshold={profile.iou_threshold} never suppresses; "
            "overlapping near-duplicate detections will all be composited."
        )

    images, _ = load_images(args.images)

    class_names = load_class_names(args.metadata) if args.metadata else coco_class_names()

    print("Setting up object detection model...")
    detector = load_detector(
        args.model,
        decoder_cfg=replace(decoder_config_from_profile(profile), num_classes=len(class_names)),
        input_fallback=profile.input_fallback,
        onnx_providers=_parse_ort_providers(args.onnx_providers),
    )
    print(f"Object detection model loaded successfully (input {detector.input_hw[1]}x{detector.input_hw[0]}).")

    pipeline = GlitchPipeline(
        detector,
        PipelineConfig.from_profile(
            profile,
            use_edges=not bool(args.raw),
            draw_labels=not bool(args.no_labels),
            on_error=args.on_error,
        ),
        class_names=class_names,
    )
    result = pipeline.run(images, progress=bool(args.progress))
    # sized from the composites that survived, not from every input
    canvas_h, canvas_w = result.canvas.shape[:2]
    print(f"Canvas size: {canvas_w}x{canvas_h}")

    print("Saving final image...")
    out_dir = Path(args.out_dir)
    out_path = save_canvas(result.canvas, out_dir, args.out_name)
    print(f"Final image saved as {out_path}")

    run_config: Dict[str, object] = {
        "args": dict(vars(args)),
        "config_path": str(config_path) if config_path else None,
        "profile": asdict(profile),
        "images": [
            {"path": str(p), "detections": n}
            for p, n in zip(args.images, result.detection_counts)
        ],
        "skipped": [{"index": i, "error": msg} for i, msg in result.skipped],
        "output": str(out_path),
    }
    run_config_path = write_run_config(out_dir=out_dir, run_config=run_config)
    print(f"Wrote run config: {run_config_path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = Path(args.config) if args.config else None
    if config_path is not None:
        payload = load_run_config(config_path)
        cli_dests = explicit_dests(parser, argv, args)
        apply_run_config(args=args, payload=payload, cli_dests=cli_dests, parser=parser)
    return run_glitch(args, config_path=config_path)
