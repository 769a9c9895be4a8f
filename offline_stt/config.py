from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_SAMPLE_RATE = 16_000
DEFAULT_BATCH_SIZE = 10
DEFAULT_MAX_SEQUENCE_LENGTH = 172_800


@dataclass(frozen=True)
class ModelConfig:
    model_path: Path | None = None
    labels_path: Path | None = None


@dataclass(frozen=True)
class AudioConfig:
    sample_rate: int = DEFAULT_SAMPLE_RATE


@dataclass(frozen=True)
class BatchConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    max_sequence_length: int = DEFAULT_MAX_SEQUENCE_LENGTH


@dataclass(frozen=True)
class AppConfig:
    model: ModelConfig = ModelConfig()
    audio: AudioConfig = AudioConfig()
    batch: BatchConfig = BatchConfig()
    output_dir: Path = Path(".")
    log_dir: Path = Path("logs")

    @staticmethod
    def from_env() -> "AppConfig":
        model_path = os.getenv("STT_MODEL_PATH") or None
        labels_path = os.getenv("STT_LABELS_PATH") or None

        return AppConfig(
            model=ModelConfig(
                model_path=Path(model_path) if model_path else None,
                labels_path=Path(labels_path) if labels_path else None,
            ),
            audio=AudioConfig(
                sample_rate=_positive_int_env("STT_SAMPLE_RATE", DEFAULT_SAMPLE_RATE),
            ),
            batch=BatchConfig(
                batch_size=_positive_int_env("STT_BATCH_SIZE", DEFAULT_BATCH_SIZE),
                max_sequence_length=_positive_int_env(
                    "STT_MAX_SEQUENCE_LENGTH", DEFAULT_MAX_SEQUENCE_LENGTH
                ),
            ),
            output_dir=Path(os.getenv("STT_OUTPUT_DIR") or "."),
            log_dir=Path(os.getenv("STT_LOG_DIR") or "logs"),
        )

    def with_overrides(
        self,
        *,
        model_path: str | None = None,
        labels_path: str | None = None,
        output_dir: str | None = None,
    ) -> "AppConfig":
        """Return a copy with CLI-provided values applied on top of the environment."""
        model = replace(
            self.model,
            model_path=Path(model_path) if model_path else self.model.model_path,
            labels_path=Path(labels_path) if labels_path else self.model.labels_path,
        )
        return replace(
            self,
            model=model,
            output_dir=Path(output_dir) if output_dir else self.output_dir,
        )


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive.")
    return value
