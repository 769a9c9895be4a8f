from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable


class Logger:
    def __init__(
        self,
        *,
        log_dir: Path = Path("logs"),
        on_emit: Callable[[str], None] | None = None,
        verbose: bool = False,
    ):
        self.log_dir = log_dir
        self.verbose = verbose
        self._on_emit: Callable[[str], None] | None = None

        # (is_debug, message) pairs, in emission order.
        self._lines: list[tuple[bool, str]] = []
        self._started_at = datetime.now()

        # Set via property to keep replay behavior consistent.
        self.on_emit = on_emit

    @property
    def on_emit(self) -> Callable[[str], None] | None:
        return self._on_emit

    @on_emit.setter
    def on_emit(self, callback: Callable[[str], None] | None) -> None:
        # Only replay buffered logs when the first subscriber is attached.
        should_replay = self._on_emit is None and callback is not None
        self._on_emit = callback

        if should_replay:
            for is_debug, line in self._lines:
                if self.verbose or not is_debug:
                    callback(line)

    @property
    def lines(self) -> list[str]:
        return [line for _, line in self._lines]

    def log(self, message: str) -> None:
        self._append(message, is_debug=False)

    def debug(self, message: str) -> None:
        """Buffer a diagnostic line; it is only emitted in verbose mode."""
        self._append(message, is_debug=True)

    def save(self) -> Path:
        self.log_dir.mkdir(parents=True, exist_ok=True)

        filename = self._started_at.strftime("%Y-%m-%d_%H-%M-%S.txt")
        path = self.log_dir / filename

        path.write_text("\n".join(self.lines), encoding="utf-8")
        return path

    def _append(self, message: str, *, is_debug: bool) -> None:
        if not message:
            return

        self._lines.append((is_debug, message))

        if self._on_emit and (self.verbose or not is_debug):
            self._on_emit(message)
