from __future__ import annotations


class TranscriptionError(RuntimeError):
    """Base class for every failure raised by the transcription pipeline."""


class FormatError(TranscriptionError):
    """Raised for unknown file extensions or unsupported sample encodings."""


class AudioIOError(TranscriptionError, OSError):
    """Raised when an input file cannot be opened or read."""


class MalformedContainerError(TranscriptionError):
    """Raised when container headers are unreadable or hold no usable audio stream."""


class CodecError(TranscriptionError):
    """Raised when a codec decoder cannot be configured or fails to decode."""


class ChannelFrameError(TranscriptionError):
    """Raised when an audio stream ends in the middle of a multichannel frame."""


class ShapeMismatchError(TranscriptionError):
    """Raised when inference input or output does not match the expected shape."""


class DecoderConfigError(TranscriptionError):
    """Raised when a vocabulary cannot be used for label decoding."""


class InferenceError(TranscriptionError):
    """Raised when the inference engine is unavailable or fails to run."""
