from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import av
import numpy as np
from av.error import FFmpegError

from offline_stt.domain.errors import AudioIOError, CodecError, FormatError, MalformedContainerError
from offline_stt.domain.vo.sample import SampleFormat
from offline_stt.infrastructure.audio.webm_source import (
    END_OF_STREAM,
    Codec,
    DecodedFrame,
    DemuxEvent,
    Packet,
    StreamInfo,
)

# Planar and packed layouts share the sample type; planar frames are interleaved.
FRAME_FORMATS: dict[str, SampleFormat] = {
    "s16": SampleFormat.S16,
    "s16p": SampleFormat.S16,
    "flt": SampleFormat.F32,
    "fltp": SampleFormat.F32,
}


class PyAVDemuxer:
    """Matroska/WebM demuxer backed by FFmpeg through PyAV."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        if not self.path.is_file():
            raise AudioIOError(f"Audio file not found: {self.path}")

        try:
            self._container = av.open(str(self.path), mode="r", format="matroska")
        except FFmpegError as e:
            raise MalformedContainerError(
                f"Cannot parse the format headers of {self.path}: {e}"
            ) from e

        self._streams = [_describe_stream(stream) for stream in self._container.streams]
        self._packets: Iterator[Any] = self._container.demux()

    @property
    def streams(self) -> Sequence[StreamInfo]:
        return self._streams

    def read_event(self) -> DemuxEvent:
        while True:
            try:
                packet = next(self._packets)
            except StopIteration:
                return END_OF_STREAM
            except FFmpegError as e:
                raise MalformedContainerError(f"Failed to read packet from {self.path}: {e}") from e

            # PyAV yields an empty flush packet per stream once demuxing is done.
            if packet.size == 0:
                continue
            return Packet(stream_index=packet.stream.index, payload=packet)

    def close(self) -> None:
        self._container.close()


class PyAVCodecDecoder:
    def __init__(self, codec: Codec) -> None:
        self.codec = codec
        try:
            self._context = av.CodecContext.create(codec.value, "r")
        except (FFmpegError, ValueError) as e:
            raise CodecError(f"No {codec.value} decoder available: {e}") from e

    def set_extradata(self, extradata: bytes) -> None:
        self._context.extradata = extradata

    def configure(self, stream: StreamInfo) -> None:
        try:
            if stream.sample_rate:
                self._context.sample_rate = stream.sample_rate
            self._context.open()
        except (FFmpegError, ValueError) as e:
            raise CodecError(f"Codec configure failed for {self.codec.value}: {e}") from e

    def decode(self, packet: Packet) -> DecodedFrame:
        try:
            frames = self._context.decode(packet.payload)
        except FFmpegError as e:
            raise CodecError(f"Failed to decode {self.codec.value} packet: {e}") from e
        return decoded_frame_from_av(frames)


def decoded_frame_from_av(frames: Sequence[Any]) -> DecodedFrame:
    """Merge the audio frames produced by one packet into one interleaved buffer."""
    if not frames:
        return DecodedFrame(SampleFormat.F32, np.empty(0, dtype=np.float32))

    sample_format: SampleFormat | None = None
    parts: list[np.ndarray] = []
    for frame in frames:
        name = frame.format.name
        frame_format = FRAME_FORMATS.get(name)
        if frame_format is None:
            raise FormatError(f"unsupported sample format {name}")
        if sample_format is not None and frame_format is not sample_format:
            raise CodecError(f"Decoder switched sample format mid-packet to {name}.")
        sample_format = frame_format

        data = np.asarray(frame.to_ndarray())
        if frame.format.is_planar:
            # (channels, samples) -> (samples, channels)
            data = data.T
        parts.append(data.reshape(-1))

    buffer = np.concatenate(parts).astype(sample_format.dtype, copy=False)
    return DecodedFrame(sample_format, buffer)


def _describe_stream(stream: Any) -> StreamInfo:
    context = stream.codec_context
    codec_id = context.name if context is not None else None
    if stream.type != "audio" or context is None:
        return StreamInfo(index=stream.index, kind=stream.type, codec_id=codec_id)

    return StreamInfo(
        index=stream.index,
        kind="audio",
        codec_id=codec_id,
        sample_rate=int(context.sample_rate or 0),
        channels=int(context.channels or 0),
        extradata=context.extradata or None,
    )
