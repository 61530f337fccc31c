"""
YOLOv8 output decoding for the glitch compositor.

Framework-agnostic post-processing (box decode + per-class NMS) on NumPy
arrays, plus a thin ONNX Runtime detector. Only NumPy is needed for the
decode path; OpenCV is used for resizing and onnxruntime for inference.
"""

from .errors import DetectionError, ModelContractViolation, ShapeMismatch
from .types import CandidateBox, Detection
from .nms import NMSConfig, batched_nms, box_iou, nms
from .postprocess import BoxDecoder, DecoderConfig
from .runtime import DEFAULT_INPUT_SIZE, ObjectDetector, load_detector, preprocess, resolve_input_size
from .metadata import COCO_CLASS_NAMES, class_label, coco_class_names, load_class_names

__all__ = [
    "DetectionError",
    "ModelContractViolation",
    "ShapeMismatch",
    "CandidateBox",
    "Detection",
    "NMSConfig",
    "batched_nms",
    "box_iou",
    "nms",
    "BoxDecoder",
    "DecoderConfig",
    "DEFAULT_INPUT_SIZE",
    "ObjectDetector",
    "load_detector",
    "preprocess",
    "resolve_input_size",
    "COCO_CLASS_NAMES",
    "class_label",
    "coco_class_names",
    "load_class_names",
]
