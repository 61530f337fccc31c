from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np


PathLike = Union[str, Path]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_name: YOLOv8 exports use "images" / "output0"; when the
      model has no node with that name the first input/output is used instead
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = "images"
    output_name: Optional[str] = "output0"


class OnnxRuntimeBackend:
    """
    Minimal ONNX Runtime backend.

    Expects an NCHW float32 blob shaped (1, 3, H, W).
    Returns the primary output as a NumPy array.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self._ort = ort
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)

        inputs = self.session.get_inputs()
        outputs = self.session.get_outputs()
        self.input_name = _pick_name([i.name for i in inputs], cfg.input_name)
        self.output_name = _pick_name([o.name for o in outputs], cfg.output_name)
        self._input_meta = next(i for i in inputs if i.name == self.input_name)

    @property
    def input_shape(self) -> List[Any]:
        """
        Declared input shape. Fixed dims are ints, dynamic dims are strings or None.
        """
        return list(self._input_meta.shape)

    @property
    def providers_in_use(self) -> Sequence[str]:
        # ORT returns providers in priority order for this session.
        return tuple(self.session.get_providers())

    @property
    def available_providers(self) -> Sequence[str]:
        return tuple(self._ort.get_available_providers())

    def infer(self, blob: np.ndarray, extra_inputs: Optional[Dict[str, Any]] = None) -> np.ndarray:
        inputs: Dict[str, Any] = {self.input_name: blob}
        if extra_inputs:
            inputs.update(extra_inputs)
        outputs = self.session.run([self.output_name], inputs)
        return outputs[0]


def _pick_name(available: Sequence[str], wanted: Optional[str]) -> str:
    if not available:
        raise RuntimeError("Model exposes no inputs/outputs")
    if wanted and wanted in available:
        return wanted
    return available[0]
