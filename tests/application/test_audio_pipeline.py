"""Unit tests for the audio ingestion pipeline."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import numpy as np
from scipy.io.wavfile import write

from offline_stt.application.audio_pipeline import (
    open_audio_stream,
    read_audio,
    read_audio_stream,
    transcode_audio,
)
from offline_stt.domain.errors import ChannelFrameError, FormatError
from offline_stt.infrastructure.audio.wav_source import WavSource


class TestOpenAudioStream(unittest.TestCase):
    """Test cases for extension dispatch."""

    def test_unsupported_extension(self):
        """Test that .mp3 is rejected before any file access."""
        with self.assertRaisesRegex(FormatError, "mp3"):
            open_audio_stream("does/not/exist.mp3")

    def test_missing_extension(self):
        """Test that a path without extension is rejected before any file access."""
        with self.assertRaisesRegex(FormatError, "Missing extension"):
            open_audio_stream("does/not/exist")

    def test_extension_is_case_sensitive(self):
        """Test that upper-case suffixes are not recognized."""
        for name in ("does/not/exist.WAV", "does/not/exist.WebM"):
            with self.subTest(name=name):
                with self.assertRaises(FormatError):
                    open_audio_stream(name)

    def test_wav_dispatch(self):
        """Test that .wav opens a WavSource."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "clip.wav"
            write(path, 16_000, np.zeros(4, dtype=np.int16))
            stream = open_audio_stream(path)
            self.assertIsInstance(stream, WavSource)
            stream.close()

    def test_webm_and_weba_dispatch(self):
        """Test that .webm and .weba go to the container source."""
        for name in ("clip.webm", "clip.weba"):
            with self.subTest(name=name):
                with patch(
                    "offline_stt.application.audio_pipeline.WebmSource.from_path",
                    return_value="webm-source",
                ) as from_path:
                    self.assertEqual(open_audio_stream(name), "webm-source")
                from_path.assert_called_once()


class TestReadAudio(unittest.TestCase):
    """Test cases for read_audio and transcode_audio."""

    def setUp(self):
        """Set up test fixtures."""
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_matching_rate_is_not_resampled(self):
        """Test that a 16 kHz mono file is only normalized."""
        path = self.tmp / "mono.wav"
        write(path, 16_000, np.array([32767, 0, -32767], dtype=np.int16))

        with patch("offline_stt.application.resampler.SincResampler.resample") as resample:
            samples = read_audio(path, 16_000)
        resample.assert_not_called()
        np.testing.assert_allclose(samples, [1.0, 0.0, -1.0])

    def test_stereo_is_downmixed(self):
        """Test that stereo frames are averaged."""
        path = self.tmp / "stereo.wav"
        write(path, 16_000, np.array([[0.5, 0.25], [-1.0, 1.0]], dtype=np.float32))
        np.testing.assert_allclose(read_audio(path, 16_000), [0.375, 0.0])

    def test_other_rate_is_resampled(self):
        """Test that an 8 kHz file comes out at 16 kHz length."""
        path = self.tmp / "8k.wav"
        write(path, 8_000, np.zeros(800, dtype=np.int16))
        samples = read_audio(path, 16_000)
        self.assertEqual(samples.size, 1600)
        self.assertEqual(samples.dtype, np.float32)

    def test_partial_frame_stream(self):
        """Test that a stream ending mid-frame fails and is still closed."""

        class OddStream:
            sample_rate = 16_000
            channels = 2
            duration = 0
            closed = False

            def blocks(self):
                from offline_stt.domain.vo.sample import SampleBlock, SampleFormat

                yield SampleBlock(SampleFormat.S16, np.array([1, 2, 3], dtype=np.int16))

            def close(self):
                self.closed = True

        stream = OddStream()
        with self.assertRaises(ChannelFrameError):
            read_audio_stream(stream, 16_000)
        self.assertTrue(stream.closed)

    def test_transcode_round_trip(self):
        """Test that the transcoded WAV reads back as the normalized buffer."""
        source = self.tmp / "in.wav"
        output = self.tmp / "out.wav"
        write(source, 16_000, np.array([[1000, 3000], [-2000, 0]], dtype=np.int16))

        transcode_audio(source, output, 16_000)

        expected = read_audio(source, 16_000)
        stream = WavSource(output)
        self.assertEqual(stream.channels, 1)
        self.assertEqual(stream.subtype, "FLOAT")
        stream.close()
        np.testing.assert_allclose(read_audio(output, 16_000), expected, atol=1e-7)


if __name__ == "__main__":
    unittest.main()
