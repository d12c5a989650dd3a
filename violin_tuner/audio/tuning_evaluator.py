"""Conversion of frequency estimates into tuning verdicts."""

from __future__ import annotations
import math
from typing import ClassVar, Optional

from ..exceptions import InvalidParameterError
from ..tuning_types import TuningResult, TuningStatus

CENTS_PER_OCTAVE: float = 1200.0
IN_TUNE_CENTS: float = 5.0

# Float noise allowed when deciding whether a reading sits exactly on the
# in-tune boundary; such readings are classified outside the tuned zone.
_BOUNDARY_TOLERANCE = 1e-9


def _check_target(target: float) -> None:
    if not math.isfinite(target) or target <= 0:
        raise InvalidParameterError(
            f"Reference frequency must be a positive number, got {target}"
        )


def cents_deviation(estimated: float, target: float) -> float:
    """Return the interval from ``target`` to ``estimated`` in cents.

    Raises:
        InvalidParameterError: If either frequency is not positive
    """
    _check_target(target)
    if not math.isfinite(estimated) or estimated <= 0:
        raise InvalidParameterError(
            f"Cents are only defined for a detected frequency, got {estimated}"
        )
    return CENTS_PER_OCTAVE * math.log2(estimated / target)


def classify(cents: float, in_tune_cents: float = IN_TUNE_CENTS) -> TuningStatus:
    """Classify a deviation. ``|cents| < in_tune_cents`` is in tune; the boundary itself is not."""
    magnitude = abs(cents)
    on_boundary = math.isclose(
        magnitude, in_tune_cents, rel_tol=0.0, abs_tol=_BOUNDARY_TOLERANCE
    )
    if magnitude < in_tune_cents and not on_boundary:
        return TuningStatus.IN_TUNE
    return TuningStatus.SHARP if cents > 0 else TuningStatus.FLAT


def evaluate(
    estimated: float, target: float, in_tune_cents: float = IN_TUNE_CENTS
) -> Optional[TuningResult]:
    """Evaluate a pitch estimate against a reference frequency.

    Args:
        estimated: Estimated frequency in Hz; 0 means nothing was detected
        target: Reference frequency in Hz
        in_tune_cents: Half-width of the in-tune zone

    Returns:
        TuningResult, or None when ``estimated`` is 0 (no reading)

    Raises:
        InvalidParameterError: If ``target`` is not positive or ``estimated``
            is negative or not finite
    """
    _check_target(target)
    if not math.isfinite(estimated) or estimated < 0:
        raise InvalidParameterError(f"Invalid frequency estimate: {estimated}")
    if estimated == 0:
        return None

    cents = cents_deviation(estimated, target)
    return TuningResult(
        frequency_hz=float(estimated),
        cents_deviation=cents,
        status=classify(cents, in_tune_cents),
    )


class TuningEvaluator:
    """Evaluates estimates against whichever reference the caller passes in."""

    DEFAULT_IN_TUNE_CENTS: ClassVar[float] = IN_TUNE_CENTS

    def __init__(self, in_tune_cents: float = IN_TUNE_CENTS) -> None:
        if not math.isfinite(in_tune_cents) or in_tune_cents <= 0:
            raise InvalidParameterError(
                f"In-tune threshold must be positive, got {in_tune_cents}"
            )
        self.in_tune_cents = in_tune_cents

    def evaluate(self, estimated: float, target: float) -> Optional[TuningResult]:
        return evaluate(estimated, target, self.in_tune_cents)
