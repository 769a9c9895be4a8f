from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from offline_stt.domain.errors import DecoderConfigError
from offline_stt.utils.text import read_text_file


@dataclass(frozen=True)
class Vocabulary:
    """Ordered, immutable set of label strings produced by the acoustic model."""

    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        labels = tuple(self.labels)
        if len(set(labels)) != len(labels):
            raise DecoderConfigError("Vocabulary labels must be unique.")
        object.__setattr__(self, "labels", labels)

    @staticmethod
    def of(labels: Iterable[str]) -> "Vocabulary":
        return Vocabulary(labels=tuple(labels))

    @staticmethod
    def from_json(text: str) -> "Vocabulary":
        try:
            labels = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecoderConfigError(f"Invalid labels JSON: {e}") from e

        if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
            raise DecoderConfigError("Labels JSON must be an array of strings.")
        return Vocabulary.of(labels)

    @staticmethod
    def from_path(path: str | Path) -> "Vocabulary":
        return Vocabulary.from_json(read_text_file(str(path)))

    def index(self, label: str) -> int | None:
        try:
            return self.labels.index(label)
        except ValueError:
            return None

    def __getitem__(self, index: int) -> str:
        return self.labels[index]

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels)
