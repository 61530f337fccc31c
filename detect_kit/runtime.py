from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from .errors import ModelContractViolation
from .postprocess import BoxDecoder, DecoderConfig
from .types import CandidateBox


PathLike = Union[str, Path]

# (height, width) used when the model leaves its input resolution dynamic
DEFAULT_INPUT_SIZE: Tuple[int, int] = (640, 640)


def resolve_input_size(
    input_shape: Optional[Sequence[Any]],
    fallback: Optional[Tuple[int, int]] = DEFAULT_INPUT_SIZE,
) -> Tuple[int, int]:
    """
    Read (height, width) from an NCHW input declaration.

    Dynamic dims (strings/None/non-positive) fall back to `fallback`; with
    `fallback=None` they raise `ModelContractViolation` instead of guessing.
    """

    if input_shape is None:
        raise ModelContractViolation("Model does not declare an input shape")

    dims = list(input_shape)
    if len(dims) == 4:
        h, w = dims[2], dims[3]
        if _is_fixed(h) and _is_fixed(w):
            return int(h), int(w)

    if fallback is None:
        raise ModelContractViolation(
            f"Model input shape {dims} has no fixed height/width and no fallback input size is configured"
        )
    fh, fw = fallback
    return int(fh), int(fw)


def _is_fixed(dim: Any) -> bool:
    return isinstance(dim, (int, np.integer)) and not isinstance(dim, bool) and int(dim) > 0


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    orig_size: Tuple[int, int]
    input_size: Tuple[int, int]


def preprocess(image_rgb: np.ndarray, input_hw: Tuple[int, int]) -> PreprocessResult:
    """
    Stretch-resize an RGB image to the model resolution (no letterbox padding),
    normalize to [0, 1], HWC -> CHW, add batch.
    """

    if image_rgb is None or not hasattr(image_rgb, "shape"):
        raise TypeError("image_rgb must be a NumPy array (RGB).")
    if image_rgb.ndim != 3 or image_rgb.shape[2] not in (3, 4):
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_rgb, 'shape', None)}")

    orig_h, orig_w = image_rgb.shape[:2]
    in_h, in_w = input_hw
    img = np.ascontiguousarray(image_rgb[:, :, :3])
    if (orig_w, orig_h) != (in_w, in_h):
        img = cv2.resize(img, (in_w, in_h), interpolation=cv2.INTER_LINEAR)

    blob = img.astype(np.float32) / 255.0
    blob = np.transpose(blob, (2, 0, 1))[None, ...]
    return PreprocessResult(blob=np.ascontiguousarray(blob), orig_size=(orig_w, orig_h), input_size=(in_w, in_h))


class ObjectDetector:
    """
    Plug-and-play pipeline: preprocess (resize) -> inference -> decode + NMS.

    Expects RGB images as `np.ndarray` and returns `CandidateBox` detections in
    original image coordinates.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        *,
        input_shape: Optional[Sequence[Any]] = None,
        input_fallback: Optional[Tuple[int, int]] = DEFAULT_INPUT_SIZE,
        backend: Optional[object] = None,
        backend_name: Optional[str] = None,
        decoder_cfg: DecoderConfig = DecoderConfig(),
    ):
        self._infer_fn = infer_fn
        self.backend = backend
        self.backend_name = backend_name
        self.input_hw = resolve_input_size(input_shape, input_fallback)
        self.decoder = BoxDecoder(decoder_cfg)

    def __call__(self, image_rgb: np.ndarray) -> List[CandidateBox]:
        prep = preprocess(image_rgb, self.input_hw)
        preds = self._infer_fn(prep.blob)
        return self.decoder.process(preds, orig_size=prep.orig_size, input_size=prep.input_size)


def load_detector(
    model_path: PathLike,
    *,
    decoder_cfg: DecoderConfig = DecoderConfig(),
    input_fallback: Optional[Tuple[int, int]] = DEFAULT_INPUT_SIZE,
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = "images",
    onnx_output_name: Optional[str] = "output0",
) -> ObjectDetector:
    """
    Create a detector for an ONNX model on disk.

        detector = load_detector("yolov8.onnx")
        boxes = detector(image_rgb)
    """

    resolved = Path(model_path)
    if resolved.suffix.lower() != ".onnx":
        raise ValueError(f"Unsupported model format '{resolved.suffix}'. Export the model to ONNX.")

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

    ort_backend = OnnxRuntimeBackend(
        resolved,
        OnnxRuntimeBackendConfig(
            providers=onnx_providers,
            input_name=onnx_input_name,
            output_name=onnx_output_name,
        ),
    )
    return ObjectDetector(
        ort_backend.infer,
        input_shape=ort_backend.input_shape,
        input_fallback=input_fallback,
        backend=ort_backend,
        backend_name="onnxruntime",
        decoder_cfg=decoder_cfg,
    )
