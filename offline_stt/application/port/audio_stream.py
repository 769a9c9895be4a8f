from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from offline_stt.domain.vo.sample import Sample, SampleBlock


class AudioStream(Protocol):
    """Lazy, single-use producer of channel-interleaved samples.

    Every `channels` consecutive samples form one multichannel frame.
    `duration` is a frame-count hint; 0 means unknown.
    """

    @property
    def sample_rate(self) -> int: ...

    @property
    def channels(self) -> int: ...

    @property
    def duration(self) -> int: ...

    def blocks(self) -> Iterator[SampleBlock]: ...

    def __iter__(self) -> Iterator[Sample]: ...

    def close(self) -> None: ...