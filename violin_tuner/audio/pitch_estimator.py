"""Time-domain autocorrelation pitch estimation."""

from __future__ import annotations
import numpy as np
from typing import ClassVar, TypeAlias

from ..logger import get_logger
from ..exceptions import InvalidParameterError
from ..core.interfaces import IPitchEstimator, SampleBlock

logger = get_logger(__name__)

Frequency: TypeAlias = float

FULL_SCALE: float = 32768.0  # Magnitude of the most negative int16 sample
MAX_FREQUENCY: float = 800.0  # Hz - shortest period scanned
MIN_FREQUENCY: float = 80.0  # Hz - longest period scanned
UNDETECTED: Frequency = 0.0


def candidate_periods(sample_rate: int, block_length: int) -> range:
    """Return the candidate periods, in samples, scanned for a block.

    The window is ``[sample_rate // 800, min(sample_rate // 80, block_length // 2)]``.
    The upper bound keeps at least half of the block overlapping for every lag.
    The range is empty when the block is too short for the lowest period, and
    never contains a period of zero.

    Args:
        sample_rate: Sample rate in Hz
        block_length: Number of samples in the block

    Returns:
        range: Candidate periods in increasing order
    """
    min_period = max(int(sample_rate // MAX_FREQUENCY), 1)
    max_period = min(int(sample_rate // MIN_FREQUENCY), block_length // 2)
    return range(min_period, max_period + 1)


def _validate(samples: SampleBlock, sample_rate: int) -> np.ndarray:
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)):
        raise InvalidParameterError(f"Sample rate must be an integer, got {sample_rate!r}")
    if sample_rate <= 0:
        raise InvalidParameterError(f"Sample rate must be positive, got {sample_rate}")

    block = np.asarray(samples)
    if block.ndim != 1:
        raise InvalidParameterError(
            f"Expected a mono block (1-D), got shape {block.shape}"
        )
    if block.size < 2:
        raise InvalidParameterError(
            f"Block must contain at least 2 samples, got {block.size}"
        )
    return block


def estimate_pitch(
    samples: SampleBlock, sample_rate: int, normalize_by_overlap: bool = False
) -> Frequency:
    """Estimate the dominant frequency of a block of 16-bit samples.

    Each candidate period ``p`` is scored with the raw autocorrelation
    ``sum(x[i] * x[i + p])`` over the overlapping samples. The highest score
    wins; ties keep the shorter period. Scores that are not positive never
    win, so silence and non-periodic noise come back as 0.

    Args:
        samples: 1-D sequence of signed 16-bit samples
        sample_rate: Sample rate in Hz
        normalize_by_overlap: Divide each score by its overlap length. This
            removes the preference for short lags that the raw sum has, at the
            cost of favouring subharmonics of a clean tone.

    Returns:
        float: The estimated frequency in Hz, or 0.0 if no pitch was found

    Raises:
        InvalidParameterError: If the sample rate is not positive or the block
            is not 1-D with at least two samples
    """
    block = _validate(samples, sample_rate)
    periods = candidate_periods(sample_rate, block.size)
    if len(periods) == 0:
        logger.debug(
            f"Block of {block.size} samples too short to scan at {sample_rate} Hz"
        )
        return UNDETECTED

    normalized = block.astype(np.float64) / FULL_SCALE

    best_period = 0
    max_correlation = 0.0
    for period in periods:
        overlap = block.size - period
        correlation = float(np.dot(normalized[:overlap], normalized[period:]))
        if normalize_by_overlap:
            correlation /= overlap

        # Strictly greater, so the first (shortest) period wins a tie
        if correlation > max_correlation:
            max_correlation = correlation
            best_period = period

    if best_period > 0:
        return sample_rate / best_period
    return UNDETECTED


class AutocorrelationPitchEstimator(IPitchEstimator):
    """Stateless pitch estimator scanning 80-800 Hz with autocorrelation."""

    FULL_SCALE: ClassVar[float] = FULL_SCALE
    MIN_FREQUENCY: ClassVar[float] = MIN_FREQUENCY
    MAX_FREQUENCY: ClassVar[float] = MAX_FREQUENCY

    def __init__(self, normalize_by_overlap: bool = False) -> None:
        self.normalize_by_overlap = normalize_by_overlap

    def estimate(self, samples: SampleBlock, sample_rate: int) -> Frequency:
        return estimate_pitch(
            samples, sample_rate, normalize_by_overlap=self.normalize_by_overlap
        )

    def __repr__(self):
        return f"AutocorrelationPitchEstimator(normalize_by_overlap={self.normalize_by_overlap})"
