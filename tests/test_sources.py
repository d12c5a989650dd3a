import unittest

import numpy as np
import pytest
import soundfile as sf

from violin_tuner.audio.sources import SineWaveSource, WavFileSource
from violin_tuner.exceptions import AcquisitionError, InvalidParameterError


class TestSineWaveSource(unittest.TestCase):
    def test_blocks_are_fixed_size_int16(self):
        with SineWaveSource(440.0, block_size=1024) as source:
            block = source.read_block()
        self.assertEqual(block.shape, (1024,))
        self.assertEqual(block.dtype, np.int16)

    def test_blocks_are_phase_continuous(self):
        with SineWaveSource(293.66, block_size=512) as source:
            joined = np.concatenate([source.read_block(), source.read_block()])
        with SineWaveSource(293.66, block_size=1024) as source:
            whole = source.read_block()
        np.testing.assert_array_equal(joined, whole)

    def test_finite_source_is_exhausted(self):
        source = SineWaveSource(196.0, block_size=256, num_blocks=2)
        source.open()
        self.assertIsNotNone(source.read_block())
        self.assertIsNotNone(source.read_block())
        self.assertIsNone(source.read_block())

        # Reopening starts over
        source.close()
        source.open()
        self.assertIsNotNone(source.read_block())
        source.close()

    def test_read_requires_open(self):
        source = SineWaveSource(440.0)
        with self.assertRaises(AcquisitionError):
            source.read_block()

    def test_close_is_idempotent(self):
        source = SineWaveSource(440.0)
        source.close()
        source.open()
        source.close()
        source.close()
        self.assertFalse(source.is_open)

    def test_zero_frequency_is_silence(self):
        with SineWaveSource(0.0, block_size=128) as source:
            self.assertFalse(source.read_block().any())

    def test_invalid_geometry(self):
        with self.assertRaises(InvalidParameterError):
            SineWaveSource(440.0, sample_rate=0)
        with self.assertRaises(InvalidParameterError):
            SineWaveSource(440.0, block_size=1)
        with self.assertRaises(InvalidParameterError):
            SineWaveSource(440.0, amplitude=1.5)


@pytest.fixture
def wav_path(tmp_path):
    path = tmp_path / "ramp.wav"
    samples = np.arange(1, 2501, dtype=np.int16)
    sf.write(str(path), samples, 8000, subtype="PCM_16")
    return path


def test_wav_blocks_and_padding(wav_path):
    source = WavFileSource(str(wav_path), block_size=1000)
    assert source.sample_rate == 8000
    assert source.channels == 1

    with source:
        blocks = [source.read_block() for _ in range(3)]
        assert source.read_block() is None

    assert all(len(block) == 1000 for block in blocks)
    assert blocks[0][0] == 1
    assert blocks[2][499] == 2500
    assert not blocks[2][500:].any()


def test_wav_loop_wraps_around(wav_path):
    with WavFileSource(str(wav_path), block_size=1000, loop=True) as source:
        for _ in range(3):
            source.read_block()
        block = source.read_block()
    assert block[0] == 1


def test_wav_stereo_uses_first_channel(tmp_path):
    path = tmp_path / "stereo.wav"
    left = np.full(64, 1000, dtype=np.int16)
    right = np.full(64, -1000, dtype=np.int16)
    sf.write(str(path), np.column_stack([left, right]), 44100, subtype="PCM_16")

    with WavFileSource(str(path), block_size=64) as source:
        block = source.read_block()
    assert source.channels == 2
    assert (block == 1000).all()


def test_wav_gain_clips(wav_path):
    with WavFileSource(str(wav_path), block_size=2500, gain=100.0) as source:
        block = source.read_block()
    assert block[0] == 100
    assert block.max() == 32767


def test_missing_file_raises_acquisition_error(tmp_path):
    with pytest.raises(AcquisitionError):
        WavFileSource(str(tmp_path / "missing.wav"))
