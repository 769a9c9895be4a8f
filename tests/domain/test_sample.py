"""Unit tests for Sample and SampleBlock."""
from __future__ import annotations

import unittest

import numpy as np

from offline_stt.domain.vo.sample import Sample, SampleBlock, SampleFormat


class TestSample(unittest.TestCase):
    """Test cases for Sample normalization."""

    def test_s16_divides_by_type_maximum(self):
        """Test that 16-bit samples are scaled by 32767."""
        self.assertEqual(Sample.s16(32767).to_float(), 1.0)
        self.assertEqual(Sample.s16(-32767).to_float(), -1.0)
        self.assertEqual(Sample.s16(0).to_float(), 0.0)
        self.assertAlmostEqual(Sample.s16(16384).to_float(), 16384 / 32767, places=6)

    def test_s32_divides_by_type_maximum(self):
        """Test that 32-bit integer samples are scaled by 2147483647."""
        self.assertAlmostEqual(Sample.s32(2**30).to_float(), 0.5, places=6)
        self.assertAlmostEqual(Sample.s32(-(2**31) + 1).to_float(), -1.0, places=6)

    def test_f32_passes_through(self):
        """Test that float samples are assumed to be normalized."""
        self.assertEqual(Sample.f32(0.25).to_float(), 0.25)
        self.assertEqual(Sample.f32(-1.0).to_float(), -1.0)

    def test_samples_are_values(self):
        """Test that equal samples compare equal and are hashable."""
        self.assertEqual(Sample.s16(5), Sample(SampleFormat.S16, 5))
        self.assertEqual(len({Sample.s16(5), Sample.s16(5)}), 1)


class TestSampleBlock(unittest.TestCase):
    """Test cases for SampleBlock."""

    def test_to_float_matches_scalar_conversion(self):
        """Test that vectorized conversion agrees with Sample.to_float."""
        block = SampleBlock(SampleFormat.S16, np.array([0, 32767, -16384], dtype=np.int16))
        expected = [sample.to_float() for sample in block.samples()]
        np.testing.assert_allclose(block.to_float(), expected, rtol=1e-6)
        self.assertEqual(block.to_float().dtype, np.float32)

    def test_data_is_flattened_and_cast(self):
        """Test that block data is stored as a 1-D array of the format dtype."""
        block = SampleBlock(SampleFormat.S32, np.array([[1, 2], [3, 4]]))
        self.assertEqual(block.data.dtype, np.int32)
        self.assertEqual(block.data.tolist(), [1, 2, 3, 4])
        self.assertEqual(len(block), 4)

    def test_samples_iterates_in_order(self):
        """Test that samples() yields tagged values in buffer order."""
        block = SampleBlock(SampleFormat.F32, np.array([0.5, -0.5], dtype=np.float32))
        self.assertEqual(list(block.samples()), [Sample.f32(0.5), Sample.f32(-0.5)])


if __name__ == "__main__":
    unittest.main()
