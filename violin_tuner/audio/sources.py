"""Sample sources that do not need audio hardware."""

from __future__ import annotations
import time
from abc import ABC
from typing import Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..exceptions import AcquisitionError, InvalidParameterError
from ..core.interfaces import ISampleSource

logger = get_logger(__name__)

INT16_MAX = 32767


class SampleSource(ISampleSource, ABC):
    """Base class holding the block geometry and open/closed state."""

    def __init__(self, sample_rate: int, block_size: int) -> None:
        if sample_rate <= 0:
            raise InvalidParameterError(f"Sample rate must be positive, got {sample_rate}")
        if block_size < 2:
            raise InvalidParameterError(f"Block size must be at least 2, got {block_size}")
        self._sample_rate = int(sample_rate)
        self._block_size = int(block_size)
        self._open = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def is_open(self) -> bool:
        return self._open

    def _require_open(self) -> None:
        if not self._open:
            raise AcquisitionError(f"{type(self).__name__} is not open")

    def __enter__(self) -> "SampleSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SineWaveSource(SampleSource):
    """Synthetic test signal: a pure sine at a fixed frequency.

    Blocks are phase-continuous. With ``num_blocks`` set the source is
    exhausted after that many blocks, otherwise it runs until closed.
    """

    def __init__(
        self,
        frequency: float,
        sample_rate: int = 44100,
        block_size: int = 4096,
        amplitude: float = 0.5,
        num_blocks: Optional[int] = None,
        realtime: bool = False,
    ) -> None:
        super().__init__(sample_rate, block_size)
        if frequency < 0:
            raise InvalidParameterError(f"Frequency must not be negative, got {frequency}")
        if not 0.0 <= amplitude <= 1.0:
            raise InvalidParameterError(f"Amplitude must be within [0, 1], got {amplitude}")
        self.frequency = frequency
        self.amplitude = amplitude
        self.num_blocks = num_blocks
        self.realtime = realtime
        self._position = 0
        self._blocks_read = 0

    def open(self) -> None:
        self._position = 0
        self._blocks_read = 0
        self._open = True

    def read_block(self) -> Optional[np.ndarray]:
        self._require_open()
        if self.num_blocks is not None and self._blocks_read >= self.num_blocks:
            return None

        indices = np.arange(self._position, self._position + self._block_size)
        phase = 2 * np.pi * self.frequency * indices / self._sample_rate
        block = np.round(np.sin(phase) * self.amplitude * INT16_MAX).astype(np.int16)

        self._position += self._block_size
        self._blocks_read += 1

        if self.realtime:
            # Simulate real-time capture speed
            time.sleep(self._block_size / self._sample_rate)
        return block

    def close(self) -> None:
        self._open = False


class WavFileSource(SampleSource):
    """Provides blocks of audio read from a sound file (WAV, FLAC, ...).

    Multi-channel files are reduced to their first channel. The last partial
    block is zero-padded to full length.
    """

    def __init__(
        self,
        file_path: str,
        block_size: int = 4096,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = False,
    ) -> None:
        try:
            with sf.SoundFile(file_path) as f:
                sample_rate = f.samplerate
                self._channels = f.channels
        except (sf.LibsndfileError, OSError) as e:
            raise AcquisitionError(f"Cannot read audio file {file_path}: {e}") from e

        super().__init__(sample_rate, block_size)
        self._file_path = file_path
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._file: Optional[sf.SoundFile] = None

    @property
    def channels(self) -> int:
        return self._channels

    def open(self) -> None:
        if self._open:
            return
        try:
            self._file = sf.SoundFile(self._file_path)
        except (sf.LibsndfileError, OSError) as e:
            raise AcquisitionError(f"Cannot open audio file {self._file_path}: {e}") from e
        self._open = True
        logger.info(
            f"Opened {self._file_path}: {self._sample_rate} Hz, {self._channels} channel(s)"
        )

    def read_block(self) -> Optional[np.ndarray]:
        self._require_open()
        data = self._file.read(self._block_size, dtype="int16", always_2d=True)
        if len(data) == 0 and self._loop:
            self._file.seek(0)
            data = self._file.read(self._block_size, dtype="int16", always_2d=True)
        if len(data) == 0:
            return None

        block = np.zeros(self._block_size, dtype=np.int16)
        block[: len(data)] = data[:, 0]

        # Apply gain if specified
        if self._gain != 1.0:
            scaled = block.astype(np.float64) * self._gain
            block = np.clip(scaled, -INT16_MAX - 1, INT16_MAX).astype(np.int16)

        if self._realtime:
            time.sleep(self._block_size / self._sample_rate)
        return block

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
        self._open = False
