from __future__ import annotations

from pathlib import Path

import numpy as np

from offline_stt.application.downmixer import downmix
from offline_stt.application.port.audio_stream import AudioStream
from offline_stt.application.resampler import SincResampler
from offline_stt.domain.errors import FormatError
from offline_stt.infrastructure.audio.wav_source import WavSource, write_wav
from offline_stt.infrastructure.audio.webm_source import WebmSource
from offline_stt.utils.logger import Logger

WAV_EXTENSIONS = frozenset({"wav"})
WEBM_EXTENSIONS = frozenset({"webm", "weba"})


def open_audio_stream(path: str | Path, *, logger: Logger | None = None) -> AudioStream:
    """Pick a source by file extension. Fails before touching the file."""
    path = Path(path)
    extension = path.suffix[1:]
    if not extension:
        raise FormatError(f"Missing extension: {path}")

    if extension in WAV_EXTENSIONS:
        return WavSource(path, logger=logger)
    if extension in WEBM_EXTENSIONS:
        return WebmSource.from_path(path, logger=logger)
    raise FormatError(f"Unsupported extension {extension!r}: {path}")


def read_audio_stream(
    stream: AudioStream,
    target_sample_rate: int,
    *,
    resampler: SincResampler | None = None,
) -> np.ndarray:
    sample_rate = stream.sample_rate
    try:
        samples = downmix(stream)
    finally:
        stream.close()
    if sample_rate == target_sample_rate:
        return samples

    resampler = resampler or SincResampler()
    return resampler.resample(samples, sample_rate, target_sample_rate)


def read_audio(
    path: str | Path,
    target_sample_rate: int,
    *,
    logger: Logger | None = None,
) -> np.ndarray:
    """Decode `path` into mono float32 samples at `target_sample_rate`."""
    stream = open_audio_stream(path, logger=logger)
    samples = read_audio_stream(
        stream,
        target_sample_rate,
        resampler=SincResampler(logger=logger),
    )
    if logger:
        logger.debug(
            f"[PIPELINE] {Path(path).name}: {samples.size} samples at {target_sample_rate} Hz"
        )
    return samples


def transcode_audio(
    input_path: str | Path,
    output_path: str | Path,
    target_sample_rate: int,
    *,
    logger: Logger | None = None,
) -> None:
    """Write the normalized audio of `input_path` to a mono float WAV for inspection."""
    samples = read_audio(input_path, target_sample_rate, logger=logger)
    write_wav(output_path, samples, target_sample_rate)
    if logger:
        logger.log(f"[PIPELINE] Transcoded {input_path} -> {output_path}")
