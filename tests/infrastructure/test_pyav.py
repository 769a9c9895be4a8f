"""Tests for the PyAV demuxer and decoder against files encoded by FFmpeg."""
from __future__ import annotations

import tempfile
import unittest
from fractions import Fraction
from pathlib import Path

import av
import numpy as np

from offline_stt.application.audio_pipeline import open_audio_stream, read_audio
from offline_stt.domain.errors import AudioIOError, MalformedContainerError
from offline_stt.infrastructure.audio.pyav import PyAVDemuxer
from offline_stt.infrastructure.audio.webm_source import Codec, WebmSource


def write_tone(path: Path, codec: str, rate: int, *, seconds: float = 1.0, options=None) -> None:
    """Encode a 440 Hz stereo tone at half scale into a WebM file."""
    container = av.open(str(path), mode="w", format="webm")
    stream = container.add_stream(codec, rate=rate, options=options or {})
    stream.codec_context.layout = "stereo"

    total = int(rate * seconds)
    t = np.arange(total) / rate
    tone = (0.5 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
    planes = np.stack([tone, tone])

    for start in range(0, total, 960):
        frame = av.AudioFrame.from_ndarray(
            np.ascontiguousarray(planes[:, start : start + 960]),
            format="fltp",
            layout="stereo",
        )
        frame.sample_rate = rate
        frame.time_base = Fraction(1, rate)
        frame.pts = start
        for packet in stream.encode(frame):
            container.mux(packet)
    for packet in stream.encode(None):
        container.mux(packet)
    container.close()


class TestPyAVWebm(unittest.TestCase):
    """Test cases for the WebM path through FFmpeg."""

    def setUp(self):
        """Set up test fixtures."""
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _require_encoder(self, name: str) -> None:
        try:
            av.Codec(name, "w")
        except ValueError:
            self.skipTest(f"FFmpeg build has no {name} encoder")

    def test_opus_webm(self):
        """Test that a stereo Opus track opens and normalizes to 16 kHz mono."""
        self._require_encoder("libopus")
        path = self.tmp / "tone.webm"
        write_tone(path, "libopus", 48_000)

        stream = open_audio_stream(path)
        self.assertIsInstance(stream, WebmSource)
        self.assertIs(stream.codec, Codec.OPUS)
        self.assertEqual(stream.sample_rate, 48_000)
        self.assertEqual(stream.channels, 2)
        stream.close()

        samples = read_audio(path, 16_000)
        self.assertEqual(samples.dtype, np.float32)
        self.assertLess(abs(samples.size - 16_000), 400)
        self.assertAlmostEqual(float(np.max(np.abs(samples))), 0.5, delta=0.1)

    def test_vorbis_weba(self):
        """Test that a stereo Vorbis track passes its setup headers to the decoder."""
        self._require_encoder("vorbis")
        path = self.tmp / "tone.weba"
        write_tone(path, "vorbis", 44_100, options={"strict": "-2"})

        with open_audio_stream(path) as stream:
            self.assertIs(stream.codec, Codec.VORBIS)
            self.assertEqual(stream.sample_rate, 44_100)
            self.assertEqual(stream.channels, 2)
            self.assertTrue(stream.stream.extradata)

        samples = read_audio(path, 16_000)
        self.assertLess(abs(samples.size - 16_000), 400)
        self.assertAlmostEqual(float(np.max(np.abs(samples))), 0.5, delta=0.1)

    def test_missing_file(self):
        """Test that a missing file is an I/O error."""
        with self.assertRaises(AudioIOError):
            PyAVDemuxer(self.tmp / "missing.webm")

    def test_not_a_container(self):
        """Test that garbage bytes fail header parsing."""
        path = self.tmp / "garbage.webm"
        path.write_bytes(b"this is not a matroska file" * 8)
        with self.assertRaises(MalformedContainerError):
            PyAVDemuxer(path)


if __name__ == "__main__":
    unittest.main()
