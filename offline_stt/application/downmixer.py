from __future__ import annotations

import numpy as np

from offline_stt.application.port.audio_stream import AudioStream
from offline_stt.domain.errors import ChannelFrameError


def downmix(stream: AudioStream) -> np.ndarray:
    """Average each interleaved multichannel frame of `stream` into one mono float."""
    channels = stream.channels
    if channels < 1:
        raise ChannelFrameError(f"Invalid channel count {channels}.")

    samples = _collect_float_samples(stream, capacity=stream.duration * channels)

    if samples.size % channels:
        raise ChannelFrameError(
            f"Stream ended mid-frame: {samples.size} samples is not a multiple of "
            f"{channels} channels."
        )
    if channels == 1:
        return samples

    return samples.reshape(-1, channels).mean(axis=1, dtype=np.float32)


def _collect_float_samples(stream: AudioStream, *, capacity: int) -> np.ndarray:
    if capacity <= 0:
        parts = [block.to_float() for block in stream.blocks()]
        if not parts:
            return np.empty(0, dtype=np.float32)
        return np.concatenate(parts).astype(np.float32, copy=False)

    buffer = np.empty(capacity, dtype=np.float32)
    filled = 0
    overflow: list[np.ndarray] = []
    for block in stream.blocks():
        data = block.to_float()
        take = min(data.size, capacity - filled)
        buffer[filled : filled + take] = data[:take]
        filled += take
        if take < data.size:
            overflow.append(data[take:])

    if overflow:
        return np.concatenate([buffer[:filled], *overflow]).astype(np.float32, copy=False)
    return buffer[:filled]
