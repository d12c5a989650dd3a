"""Reference tone synthesis."""

from __future__ import annotations
import numpy as np

from ..exceptions import InvalidParameterError

DEFAULT_DURATION_MS = 2000
DEFAULT_SAMPLE_RATE = 44100


def synthesize_tone(
    frequency: float,
    duration_ms: int = DEFAULT_DURATION_MS,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    amplitude: float = 1.0,
) -> np.ndarray:
    """Generate a sine wave as 16-bit samples.

    Args:
        frequency: Tone frequency in Hz
        duration_ms: Length of the tone in milliseconds
        sample_rate: Sample rate in Hz
        amplitude: Peak level relative to full scale, within (0, 1]

    Returns:
        np.ndarray: ``duration_ms * sample_rate // 1000`` int16 samples
    """
    if frequency <= 0:
        raise InvalidParameterError(f"Tone frequency must be positive, got {frequency}")
    if duration_ms <= 0:
        raise InvalidParameterError(f"Tone duration must be positive, got {duration_ms}")
    if sample_rate <= 0:
        raise InvalidParameterError(f"Sample rate must be positive, got {sample_rate}")
    if not 0.0 < amplitude <= 1.0:
        raise InvalidParameterError(f"Amplitude must be within (0, 1], got {amplitude}")

    num_samples = (duration_ms * sample_rate) // 1000
    indices = np.arange(num_samples)
    wave = np.sin(2 * np.pi * frequency * indices / sample_rate) * 32767 * amplitude
    # Truncate towards zero like an integer cast
    return wave.astype(np.int16)
