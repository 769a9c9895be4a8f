from __future__ import annotations

from pathlib import Path


def load_dotenv(env_file: str | None) -> bool:
    """Load `STT_*` settings from a dotenv file if it exists.

    Variables already present in the environment win over the file.
    Returns whether a file was loaded.
    """

    if not env_file or not Path(env_file).is_file():
        return False

    from dotenv import load_dotenv as dotenv_load_dotenv

    return bool(dotenv_load_dotenv(env_file, override=False))
