from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

import numpy as np


class SampleFormat(Enum):
    S16 = "s16"
    S32 = "s32"
    F32 = "f32"

    @property
    def dtype(self) -> np.dtype:
        return _DTYPES[self]

    @property
    def scale(self) -> float:
        """Divisor that maps a raw sample of this format into [-1, 1]."""
        return _SCALES[self]


_DTYPES: dict[SampleFormat, np.dtype] = {
    SampleFormat.S16: np.dtype(np.int16),
    SampleFormat.S32: np.dtype(np.int32),
    SampleFormat.F32: np.dtype(np.float32),
}

_SCALES: dict[SampleFormat, float] = {
    SampleFormat.S16: float(np.iinfo(np.int16).max),
    SampleFormat.S32: float(np.iinfo(np.int32).max),
    SampleFormat.F32: 1.0,
}


@dataclass(frozen=True)
class Sample:
    format: SampleFormat
    value: int | float

    @classmethod
    def s16(cls, value: int) -> "Sample":
        return cls(SampleFormat.S16, int(value))

    @classmethod
    def s32(cls, value: int) -> "Sample":
        return cls(SampleFormat.S32, int(value))

    @classmethod
    def f32(cls, value: float) -> "Sample":
        return cls(SampleFormat.F32, float(value))

    def to_float(self) -> float:
        # Floats are assumed to be normalized already.
        if self.format is SampleFormat.F32:
            return float(np.float32(self.value))
        return float(np.float32(self.value) / np.float32(self.format.scale))


@dataclass(frozen=True, eq=False)
class SampleBlock:
    """A run of consecutive channel-interleaved samples sharing one format."""

    format: SampleFormat
    data: np.ndarray

    def __post_init__(self) -> None:
        data = np.asarray(self.data).reshape(-1)
        if data.dtype != self.format.dtype:
            data = data.astype(self.format.dtype)
        object.__setattr__(self, "data", data)

    def __len__(self) -> int:
        return int(self.data.size)

    def to_float(self) -> np.ndarray:
        if self.format is SampleFormat.F32:
            return self.data
        return self.data.astype(np.float32) / np.float32(self.format.scale)

    def samples(self) -> Iterator[Sample]:
        for value in self.data.tolist():
            yield Sample(self.format, value)
