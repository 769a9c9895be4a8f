from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final, Protocol

import numpy as np

from offline_stt.domain.errors import CodecError, MalformedContainerError
from offline_stt.domain.vo.sample import Sample, SampleBlock, SampleFormat
from offline_stt.utils.logger import Logger


class Codec(Enum):
    OPUS = "opus"
    VORBIS = "vorbis"

    @staticmethod
    def from_codec_id(codec_id: str | None) -> "Codec | None":
        if not codec_id:
            return None
        try:
            return Codec(codec_id.lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class StreamInfo:
    index: int
    kind: str
    codec_id: str | None
    sample_rate: int = 0
    channels: int = 0
    extradata: bytes | None = None


@dataclass(frozen=True)
class Packet:
    stream_index: int
    payload: Any = None


class _EndOfStream:
    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM: Final = _EndOfStream()

DemuxEvent = Packet | _EndOfStream


@dataclass(frozen=True, eq=False)
class DecodedFrame:
    """Decoded audio with all channels interleaved in one linear buffer."""

    format: SampleFormat
    buffer: np.ndarray

    @property
    def total(self) -> int:
        return int(self.buffer.size)

    def sample_at(self, cursor: int) -> Sample:
        return Sample(self.format, self.buffer[cursor].item())

    def block_from(self, cursor: int) -> SampleBlock:
        return SampleBlock(self.format, self.buffer[cursor:])


class Demuxer(Protocol):
    @property
    def streams(self) -> Sequence[StreamInfo]: ...

    def read_event(self) -> DemuxEvent: ...

    def close(self) -> None: ...


class CodecDecoder(Protocol):
    def set_extradata(self, extradata: bytes) -> None: ...

    def configure(self, stream: StreamInfo) -> None: ...

    def decode(self, packet: Packet) -> DecodedFrame: ...


DecoderFactory = Callable[[Codec], CodecDecoder]


@dataclass(frozen=True)
class AwaitingPacket:
    pass


@dataclass
class EmittingFrame:
    frame: DecodedFrame
    cursor: int = 0

    @property
    def total(self) -> int:
        return self.frame.total


@dataclass(frozen=True)
class Finished:
    pass


DecodeState = AwaitingPacket | EmittingFrame | Finished


def select_audio_stream(
    streams: Sequence[StreamInfo],
    *,
    logger: Logger | None = None,
) -> tuple[StreamInfo, Codec]:
    """Return the first audio stream carrying a supported codec."""
    for stream in streams:
        if stream.kind != "audio":
            _log(logger, f"[WEBM] Skipping non audio stream #{stream.index} ({stream.kind}).")
            continue
        if stream.codec_id is None:
            _log(logger, f"[WEBM] Skipping audio stream #{stream.index} without codec id.")
            continue
        codec = Codec.from_codec_id(stream.codec_id)
        if codec is None:
            _log(
                logger,
                f"[WEBM] Skipping audio stream #{stream.index} with unsupported codec id "
                f"{stream.codec_id!r}.",
            )
            continue
        return stream, codec

    raise MalformedContainerError("no supported audio stream found")


class WebmSource:
    """Audio samples decoded from the first supported stream of a Matroska container.

    Decoding is an explicit two-state machine: in `AwaitingPacket` the next
    container event is read and a packet of the selected stream is decoded
    into a frame; in `EmittingFrame` samples are read from that frame at the
    cursor until it reaches the frame's total, which returns to
    `AwaitingPacket`. End of stream moves to `Finished`.
    """

    def __init__(
        self,
        *,
        demuxer: Demuxer,
        decoder_factory: DecoderFactory,
        logger: Logger | None = None,
    ) -> None:
        self.demuxer = demuxer
        self.logger = logger
        self.state: DecodeState = AwaitingPacket()
        self._closed = False

        self.stream, self.codec = select_audio_stream(demuxer.streams, logger=logger)
        self._decoder = decoder_factory(self.codec)

        try:
            if self.stream.extradata:
                self._decoder.set_extradata(self.stream.extradata)
            self._decoder.configure(self.stream)
        except CodecError:
            raise
        except Exception as e:
            raise CodecError(f"Codec configure failed: {e}") from e

        _log(
            logger,
            f"[WEBM] Using stream #{self.stream.index}: codec={self.codec.value}, "
            f"rate={self.stream.sample_rate}, channels={self.stream.channels}",
        )

    @classmethod
    def from_path(cls, path: str | Path, *, logger: Logger | None = None) -> "WebmSource":
        from offline_stt.infrastructure.audio.pyav import PyAVCodecDecoder, PyAVDemuxer

        demuxer = PyAVDemuxer(path)
        try:
            return cls(demuxer=demuxer, decoder_factory=PyAVCodecDecoder, logger=logger)
        except Exception:
            demuxer.close()
            raise

    @property
    def sample_rate(self) -> int:
        return self.stream.sample_rate

    @property
    def channels(self) -> int:
        return self.stream.channels

    @property
    def duration(self) -> int:
        # Matroska does not declare the total number of audio frames up front.
        return 0

    def step(self) -> DecodeState:
        """Run one `AwaitingPacket` transition and return the new state."""
        if not isinstance(self.state, AwaitingPacket):
            return self.state

        event = self.demuxer.read_event()
        if isinstance(event, _EndOfStream):
            self.close()
        elif event.stream_index == self.stream.index:
            self.state = EmittingFrame(self._decoder.decode(event))
        return self.state

    def next_sample(self) -> Sample | None:
        while True:
            state = self.state
            if isinstance(state, Finished):
                return None
            if isinstance(state, EmittingFrame):
                if state.cursor < state.total:
                    sample = state.frame.sample_at(state.cursor)
                    state.cursor += 1
                    return sample
                self.state = AwaitingPacket()
                continue
            self.step()

    def next_block(self) -> SampleBlock | None:
        """Like `next_sample`, but emits the rest of the current frame at once."""
        while True:
            state = self.state
            if isinstance(state, Finished):
                return None
            if isinstance(state, EmittingFrame):
                if state.cursor < state.total:
                    block = state.frame.block_from(state.cursor)
                    state.cursor = state.total
                    return block
                self.state = AwaitingPacket()
                continue
            self.step()

    def blocks(self) -> Iterator[SampleBlock]:
        while (block := self.next_block()) is not None:
            yield block

    def __iter__(self) -> Iterator[Sample]:
        while (sample := self.next_sample()) is not None:
            yield sample

    def close(self) -> None:
        """Release the container. Later reads report end of stream."""
        self.state = Finished()
        if not self._closed:
            self._closed = True
            self.demuxer.close()

    def __enter__(self) -> "WebmSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _log(logger: Logger | None, message: str) -> None:
    if logger:
        logger.log(message)
