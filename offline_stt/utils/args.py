from __future__ import annotations

import argparse


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Transcribe WAV/WebM audio files with an offline acoustic model."
    )
    parser.add_argument(
        "-i",
        "--input",
        action="append",
        default=[],
        required=True,
        help="Input audio file (.wav, .webm, .weba). Repeat for several files.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Directory for <input-stem>.txt transcripts (default: STT_OUTPUT_DIR or '.').",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env). Use empty to disable.",
    )
    parser.add_argument("--model", default=None, help="ONNX model path (overrides STT_MODEL_PATH).")
    parser.add_argument(
        "--labels",
        default=None,
        help="JSON labels path (overrides STT_LABELS_PATH).",
    )
    parser.add_argument(
        "--transcode",
        metavar="OUTPUT_WAV",
        default=None,
        help="Write the normalized audio of the single input to a float WAV instead of transcribing.",
    )
    parser.add_argument("--verbose", action="store_true", help="Print debug diagnostics.")
    parser.add_argument(
        "--save-log",
        action="store_true",
        help="Write the session log to STT_LOG_DIR when done.",
    )
    return parser.parse_args(argv)
