from __future__ import annotations

from dataclasses import dataclass

from offline_stt.application.label_decoder import LabelDecoder
from offline_stt.application.port.inference_engine import InferenceEngine
from offline_stt.application.transcription_service import TranscriptionService
from offline_stt.config import AppConfig
from offline_stt.domain.vo.vocabulary import Vocabulary
from offline_stt.utils.logger import Logger


@dataclass(frozen=True)
class AppContainer:
    config: AppConfig
    logger: Logger
    vocabulary: Vocabulary
    decoder: LabelDecoder
    engine: InferenceEngine
    transcription_service: TranscriptionService


def build_container(
    config: AppConfig,
    *,
    logger: Logger | None = None,
    vocabulary: Vocabulary | None = None,
    engine: InferenceEngine | None = None,
) -> AppContainer:
    logger = logger or Logger(log_dir=config.log_dir)

    if vocabulary is None:
        if config.model.labels_path is None:
            raise ValueError("STT_LABELS_PATH (or --labels) is required.")
        vocabulary = Vocabulary.from_path(config.model.labels_path)

    decoder = LabelDecoder(vocabulary)

    if engine is None:
        if config.model.model_path is None:
            raise ValueError("STT_MODEL_PATH (or --model) is required.")

        from offline_stt.infrastructure.onnx.inference_engine import OnnxInferenceEngine

        engine = OnnxInferenceEngine(config.model.model_path, logger=logger)

    transcription_service = TranscriptionService(
        engine=engine,
        decoder=decoder,
        sample_rate=config.audio.sample_rate,
        batch_size=config.batch.batch_size,
        max_sequence_length=config.batch.max_sequence_length,
        logger=logger,
    )

    return AppContainer(
        config=config,
        logger=logger,
        vocabulary=vocabulary,
        decoder=decoder,
        engine=engine,
        transcription_service=transcription_service,
    )
