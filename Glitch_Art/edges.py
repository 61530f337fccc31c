from __future__ import annotations

import cv2
import numpy as np

DEFAULT_EDGE_THRESHOLD = 40


def sobel_edges(image_rgb: np.ndarray, threshold: int = DEFAULT_EDGE_THRESHOLD) -> np.ndarray:
    """
    Single-channel Sobel magnitude image, same width/height as the input.

    Magnitudes are clamped to 255; anything below `threshold` becomes 0 so
    flat regions turn into black holes for the blend step.
    """

    if image_rgb.ndim == 3:
        gray = cv2.cvtColor(np.ascontiguousarray(image_rgb[:, :, :3]), cv2.COLOR_RGB2GRAY)
    elif image_rgb.ndim == 2:
        gray = image_rgb
    else:
        raise ValueError(f"Expected image shape (H, W[, C]), got {image_rgb.shape}")

    gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3)
    magnitude = np.clip(cv2.magnitude(gx, gy), 0, 255).astype(np.uint8)
    magnitude[magnitude < threshold] = 0
    return magnitude


def gray_to_rgba(gray: np.ndarray) -> np.ndarray:
    rgba = np.empty(gray.shape[:2] + (4,), dtype=np.uint8)
    rgba[:, :, :3] = gray[:, :, None]
    rgba[:, :, 3] = 255
    return rgba


def to_rgba(image: np.ndarray) -> np.ndarray:
    """RGB/RGBA/gray uint8 -> owned RGBA copy (opaque alpha when missing)."""

    if image.ndim == 2:
        return gray_to_rgba(image)
    if image.ndim == 3 and image.shape[2] == 4:
        return image.astype(np.uint8, copy=True)
    if image.ndim == 3 and image.shape[2] == 3:
        rgba = np.empty(image.shape[:2] + (4,), dtype=np.uint8)
        rgba[:, :, :3] = image
        rgba[:, :, 3] = 255
        return rgba
    raise ValueError(f"Unsupported image shape {image.shape}")
