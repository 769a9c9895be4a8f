from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from offline_stt.domain.errors import InferenceError
from offline_stt.utils.logger import Logger

if TYPE_CHECKING:
    from onnxruntime import InferenceSession


class OnnxInferenceEngine:
    """CPU ONNX Runtime session for the acoustic model.

    The model maps `input` `[batch, samples]` to `output` `[batch, frames, labels]`;
    `run` returns the transposed `[labels, frames, batch]` layout.
    """

    def __init__(
        self,
        model_path: str | Path,
        *,
        input_name: str = "input",
        output_name: str = "output",
        logger: Logger | None = None,
    ) -> None:
        self.model_path = Path(model_path)
        self.input_name = input_name
        self.output_name = output_name
        self._logger = logger

        try:
            import onnxruntime as ort
        except ModuleNotFoundError as e:
            raise InferenceError(
                "ONNX inference requires 'onnxruntime'. "
                "Install it with: pip install 'offline-stt[onnx]'"
            ) from e

        if not self.model_path.is_file():
            raise InferenceError(f"Model file not found: {self.model_path}")

        try:
            self._session: InferenceSession = ort.InferenceSession(
                str(self.model_path),
                providers=["CPUExecutionProvider"],
            )
        except Exception as e:
            raise InferenceError(f"Failed to load ONNX model {self.model_path}: {e}") from e

        self._log(f"[ONNX] Loaded model {self.model_path.name}")

    def run(self, batch: np.ndarray) -> np.ndarray:
        inputs = {self.input_name: np.ascontiguousarray(batch, dtype=np.float32)}
        try:
            (output,) = self._session.run([self.output_name], inputs)
        except Exception as e:
            raise InferenceError(f"ONNX inference failed: {e}") from e

        return np.asarray(output).T

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log(message)
