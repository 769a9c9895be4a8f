from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from offline_stt.application.audio_pipeline import read_audio
from offline_stt.application.label_decoder import LabelDecoder
from offline_stt.application.port.inference_engine import InferenceEngine
from offline_stt.domain.errors import ShapeMismatchError
from offline_stt.utils.logger import Logger
from offline_stt.utils.text import append_text_file, truncate_text_file

AudioReader = Callable[[Path, int], np.ndarray]


def best_paths(scores: np.ndarray, *, label_count: int, batch_size: int) -> list[np.ndarray]:
    """Reduce `[label_count, frame_count, batch_size]` scores to one path per batch item.

    Ties go to the lowest label index.
    """
    scores = np.asarray(scores)
    if scores.ndim != 3:
        raise ShapeMismatchError(
            f"Expected 3-D scores [labels, frames, batch], got shape {scores.shape}."
        )
    if scores.shape[0] != label_count:
        raise ShapeMismatchError(
            f"Inference returned {scores.shape[0]} labels, vocabulary has {label_count}."
        )
    if scores.shape[2] != batch_size:
        raise ShapeMismatchError(
            f"Inference returned {scores.shape[2]} batch items, submitted {batch_size}."
        )

    argmax = np.argmax(scores, axis=0)
    return [argmax[:, item] for item in range(batch_size)]


@dataclass
class TranscriptionService:
    engine: InferenceEngine
    decoder: LabelDecoder
    sample_rate: int = 16_000
    batch_size: int = 10
    max_sequence_length: int = 172_800
    logger: Logger | None = None
    audio_reader: AudioReader | None = field(default=None, repr=False)

    def pad_batch(self, batch: Sequence[np.ndarray]) -> np.ndarray:
        padded = np.zeros((len(batch), self.max_sequence_length), dtype=np.float32)
        for i, samples in enumerate(batch):
            samples = np.asarray(samples, dtype=np.float32).reshape(-1)
            if samples.size > self.max_sequence_length:
                raise ShapeMismatchError(
                    f"Sequence of {samples.size} samples exceeds max_sequence_length "
                    f"{self.max_sequence_length}."
                )
            padded[i, : samples.size] = samples
        return padded

    def infer(self, batch: Sequence[np.ndarray]) -> list[str]:
        """Transcribe up to `batch_size` sample sequences in one engine call."""
        if not batch:
            return []

        scores = self.engine.run(self.pad_batch(batch))
        paths = best_paths(
            scores,
            label_count=len(self.decoder.vocabulary),
            batch_size=len(batch),
        )
        return [self.decoder.decode(path) for path in paths]

    def transcribe_files(self, inputs: Iterable[str | Path], output_dir: str | Path) -> list[Path]:
        """Write `<output_dir>/<stem>.txt` for every input, in chunk order.

        The first failure aborts the remaining work; files written so far are
        left as they are.
        """
        output_dir = Path(output_dir)
        outputs: list[Path] = []
        batch: list[np.ndarray] = []
        batch_outputs: list[Path] = []

        for input_path in inputs:
            input_path = Path(input_path)
            samples = self._read_audio(input_path)

            output = output_dir / f"{input_path.stem}.txt"
            truncate_text_file(output)
            outputs.append(output)

            chunks = 0
            for start in range(0, samples.size, self.max_sequence_length):
                batch.append(samples[start : start + self.max_sequence_length])
                batch_outputs.append(output)
                chunks += 1
                if len(batch) == self.batch_size:
                    self._process_batch(batch, batch_outputs)
                    batch = []
                    batch_outputs = []

            self._log(f"[STT] {input_path.name}: {samples.size} samples in {chunks} chunk(s)")

        if batch:
            self._process_batch(batch, batch_outputs)
        return outputs

    def _process_batch(self, batch: Sequence[np.ndarray], outputs: Sequence[Path]) -> None:
        self._debug(f"[STT] Running batch of {len(batch)} chunk(s)")
        for text, output in zip(self.infer(batch), outputs):
            append_text_file(output, text)

    def _read_audio(self, path: Path) -> np.ndarray:
        if self.audio_reader is not None:
            return self.audio_reader(path, self.sample_rate)
        return read_audio(path, self.sample_rate, logger=self.logger)

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log(message)

    def _debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)
