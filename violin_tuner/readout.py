"""Text helpers for presenting tuning results."""

from typing import Optional

from .tuning_types import ReferenceString, TuningResult, TuningStatus

DIAL_RANGE_CENTS = 50.0


def format_status(result: TuningResult) -> str:
    """Describe a result the way the tuner display does.

    Examples:
        >>> format_status(TuningResult(440.0, 0.0, TuningStatus.IN_TUNE))  # 'IN TUNE'
        >>> format_status(TuningResult(443.0, 11.8, TuningStatus.SHARP))  # 'SHARP (+11 cents)'
    """
    # Whole cents, truncated towards zero
    cents = int(result.cents_deviation)
    if result.status is TuningStatus.IN_TUNE:
        return "IN TUNE"
    if result.status is TuningStatus.SHARP:
        return f"SHARP (+{cents} cents)"
    return f"FLAT ({cents} cents)"


def dial_position(cents: float, dial_range: float = DIAL_RANGE_CENTS) -> float:
    """Map a deviation onto a gauge, clamped to +/- ``dial_range`` cents.

    Returns:
        float: -1.0 (fully flat) to 1.0 (fully sharp), 0.0 in the centre
    """
    clamped = max(-dial_range, min(dial_range, cents))
    return clamped / dial_range


def format_reading(reference: ReferenceString, result: Optional[TuningResult]) -> str:
    """One-line readout for the terminal."""
    target = f"{reference.name} target {reference.frequency:.2f} Hz"
    if result is None:
        return f"{target} | listening..."

    width = 20
    needle = int(round((dial_position(result.cents_deviation) + 1) / 2 * width))
    gauge = "".join("|" if i == needle else "-" for i in range(width + 1))
    return (
        f"{target} | {result.frequency_hz:7.2f} Hz "
        f"{result.cents_deviation:+6.1f} cents [{gauge}] {format_status(result)}"
    )
