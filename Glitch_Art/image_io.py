from __future__ import annotations

import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

PathLike = Union[str, Path]


def read_image_rgb(path: PathLike) -> np.ndarray:
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {path}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def load_images(paths: Sequence[PathLike]) -> Tuple[List[np.ndarray], Tuple[int, int]]:
    """
    Load every image as RGB. Returns the images and (min_width, min_height).
    """

    if not paths:
        raise ValueError("At least one image path is required")

    print("Loading images...")
    images: List[np.ndarray] = []
    min_w = min_h = None
    for i, path in enumerate(paths, start=1):
        print(f"Loading image {i}: {path}")
        img = read_image_rgb(path)
        h, w = img.shape[:2]
        print(f"Image {i}: {path} ({w}x{h})")
        min_w = w if min_w is None else min(min_w, w)
        min_h = h if min_h is None else min(min_h, h)
        images.append(img)
    print("Images loaded successfully.")
    return images, (int(min_w), int(min_h))


def default_output_name(now: Optional[float] = None) -> str:
    ts = int(now if now is not None else time.time())
    return f"output-{ts}.webp"


def save_canvas(canvas_rgba: np.ndarray, out_dir: PathLike, filename: Optional[str] = None) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / (filename or default_output_name())
    bgra = cv2.cvtColor(canvas_rgba, cv2.COLOR_RGBA2BGRA)
    ok = cv2.imwrite(str(path), bgra)
    if not ok:
        raise RuntimeError(f"Failed to write output image: {path}")
    return path
