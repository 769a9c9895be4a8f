from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import numpy as np
import soundfile as sf
from scipy.io.wavfile import write

from offline_stt.domain.errors import AudioIOError, FormatError
from offline_stt.domain.vo.sample import Sample, SampleBlock, SampleFormat
from offline_stt.utils.logger import Logger

SUBTYPE_FORMATS: dict[str, SampleFormat] = {
    "PCM_16": SampleFormat.S16,
    "PCM_32": SampleFormat.S32,
    "FLOAT": SampleFormat.F32,
}


class WavSource:
    """Buffered reader over a WAVE container.

    Unsupported encodings are reported when the first sample is requested,
    not when the file is opened.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        block_frames: int = 4096,
        logger: Logger | None = None,
    ) -> None:
        self.path = Path(path)
        self.block_frames = block_frames
        self._logger = logger

        try:
            self._file = sf.SoundFile(str(self.path), mode="r")
        except (sf.LibsndfileError, OSError, RuntimeError) as e:
            raise AudioIOError(f"Failed to open WAV file {self.path}: {e}") from e

        self._format = SUBTYPE_FORMATS.get(self._file.subtype)
        self._consumed = False

        self._log(
            f"[WAV] {self.path.name}: rate={self.sample_rate}, channels={self.channels}, "
            f"frames={self.duration}, subtype={self._file.subtype}"
        )

    @property
    def sample_rate(self) -> int:
        return int(self._file.samplerate)

    @property
    def channels(self) -> int:
        return int(self._file.channels)

    @property
    def duration(self) -> int:
        return int(self._file.frames)

    @property
    def subtype(self) -> str:
        return str(self._file.subtype)

    def blocks(self) -> Iterator[SampleBlock]:
        if self._consumed:
            return
        self._consumed = True

        try:
            if self._format is None:
                raise FormatError(
                    f"Unsupported WAV sample encoding {self._file.subtype!r} in {self.path}."
                )

            while True:
                try:
                    data = self._file.read(
                        self.block_frames,
                        dtype=self._format.dtype.name,
                        always_2d=True,
                    )
                except (sf.LibsndfileError, RuntimeError) as e:
                    raise AudioIOError(f"Failed to read WAV file {self.path}: {e}") from e

                if data.shape[0] == 0:
                    return
                # (frames, channels) in C order is already frame-interleaved.
                yield SampleBlock(self._format, np.ascontiguousarray(data).reshape(-1))
        finally:
            self.close()

    def __iter__(self) -> Iterator[Sample]:
        for block in self.blocks():
            yield from block.samples()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "WavSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.debug(message)


def write_wav(path: str | Path, samples: np.ndarray, sample_rate: int) -> None:
    """Write mono float samples as a 1-channel, 32-bit IEEE float WAV file."""
    audio = np.asarray(samples, dtype=np.float32).reshape(-1)
    try:
        write(str(path), sample_rate, audio)
    except OSError as e:
        raise AudioIOError(f"Failed to write WAV file {path}: {e}") from e
