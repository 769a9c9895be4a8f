from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_sys_path() -> None:
	# Allow running both:
	# - python -m offline_stt.main
	# - python offline_stt/main.py
	if __package__:
		return
	repo_root = str(Path(__file__).resolve().parents[1])
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


def _print_error(message: str) -> None:
	print(message, file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	_ensure_repo_root_on_sys_path()

	from offline_stt.application.audio_pipeline import transcode_audio
	from offline_stt.config import AppConfig
	from offline_stt.di_container import build_container
	from offline_stt.domain.errors import (
		AudioIOError,
		ChannelFrameError,
		CodecError,
		DecoderConfigError,
		FormatError,
		InferenceError,
		MalformedContainerError,
		ShapeMismatchError,
	)
	from offline_stt.utils.args import parse_args
	from offline_stt.utils.env import load_dotenv
	from offline_stt.utils.logger import Logger

	args = parse_args(sys.argv[1:] if argv is None else argv)
	load_dotenv(args.env_file)

	try:
		config = AppConfig.from_env().with_overrides(
			model_path=args.model,
			labels_path=args.labels,
			output_dir=args.output_dir,
		)
	except ValueError as exc:
		_print_error(f"Config error: {exc}")
		return 2

	logger = Logger(log_dir=config.log_dir, on_emit=_print_error, verbose=args.verbose)

	try:
		if args.transcode:
			if len(args.input) != 1:
				_print_error("--transcode takes exactly one --input.")
				return 2
			transcode_audio(
				args.input[0],
				args.transcode,
				config.audio.sample_rate,
				logger=logger,
			)
			return 0

		container = build_container(config, logger=logger)
		outputs = container.transcription_service.transcribe_files(args.input, config.output_dir)
		for output in outputs:
			print(output)
		return 0
	except (ValueError, DecoderConfigError) as exc:
		_print_error(f"Config error: {exc}")
		return 2
	except (
		AudioIOError,
		FormatError,
		MalformedContainerError,
		CodecError,
		ChannelFrameError,
	) as exc:
		_print_error(f"Audio error: {exc}")
		return 3
	except (InferenceError, ShapeMismatchError) as exc:
		_print_error(f"Inference error: {exc}")
		return 4
	finally:
		if args.save_log:
			logger.save()


if __name__ == "__main__":
	raise SystemExit(main())
