from __future__ import annotations

from pathlib import Path


def read_text_file(path: str) -> str:
    return Path(path).read_text(encoding="utf-8").strip()


def truncate_text_file(path: Path) -> None:
    """Create `path` (and its parent directory) or empty it if it exists."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")


def append_text_file(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(text)
