from __future__ import annotations

from collections.abc import Sequence

from offline_stt.domain.errors import DecoderConfigError, ShapeMismatchError
from offline_stt.domain.vo.vocabulary import Vocabulary

BLANK = "_"
SENTINEL = "2"
JOINER = "$"


class LabelDecoder:
    """Turns a best-label path (one index per time frame) into text.

    Blank labels produce nothing. The sentinel label "2" repeats the previous
    unit behind a joiner marker, or emits a space if nothing was produced yet.
    Adjacent equal units are then collapsed, and joiners removed.
    Stateless between calls, so one instance can be shared.
    """

    def __init__(self, vocabulary: Vocabulary) -> None:
        blank_index = vocabulary.index(BLANK)
        sentinel_index = vocabulary.index(SENTINEL)
        if blank_index is None or sentinel_index is None:
            raise DecoderConfigError(
                f"Vocabulary must contain the blank {BLANK!r} and sentinel {SENTINEL!r} labels."
            )

        self.vocabulary = vocabulary
        self.blank_index = blank_index
        self.sentinel_index = sentinel_index

    @property
    def labels(self) -> tuple[str, ...]:
        return self.vocabulary.labels

    def units(self, path: Sequence[int]) -> list[str]:
        units: list[str] = []
        size = len(self.vocabulary)
        for raw_index in path:
            index = int(raw_index)
            if index == self.sentinel_index:
                if not units:
                    units.append(" ")
                else:
                    previous = units[-1]
                    units.append(JOINER)
                    units.append(previous)
            elif index != self.blank_index:
                if not 0 <= index < size:
                    raise ShapeMismatchError(
                        f"Label index {index} is outside the vocabulary of size {size}."
                    )
                units.append(self.vocabulary[index])
        return units

    def decode(self, path: Sequence[int]) -> str:
        pieces: list[str] = []
        last: str | None = None
        for unit in self.units(path):
            if unit == last:
                continue
            last = unit
            pieces.append(unit)
        return "".join(pieces).replace(JOINER, "").strip()
