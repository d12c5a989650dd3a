"""Defines the core interfaces for the violin tuner."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable, Sequence, Union

import numpy as np

from ..tuning_types import TuningResult

SampleBlock = Union[np.ndarray, Sequence[int]]


class ISampleSource(ABC):
    """Interface for anything that delivers fixed-size blocks of mono samples."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the delivered blocks in Hz."""
        pass

    @property
    @abstractmethod
    def block_size(self) -> int:
        """The number of samples in every block."""
        pass

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying audio resource."""
        pass

    @abstractmethod
    def read_block(self) -> Optional[np.ndarray]:
        """Block until the next int16 block is available, or return None when exhausted."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying audio resource. Safe to call repeatedly."""
        pass


class IPitchEstimator(ABC):
    """Interface for pitch estimation algorithms."""

    @abstractmethod
    def estimate(self, samples: SampleBlock, sample_rate: int) -> float:
        """Return the fundamental frequency in Hz, or 0.0 if none was found."""
        pass


class ITuningService(ABC):
    """Interface for the service that turns an audio stream into tuning results."""

    @abstractmethod
    def start(
        self,
        on_result: Callable[[TuningResult], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        """Start listening."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop listening."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the service is listening."""
        pass
