"""Type definitions for the violin tuner."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .exceptions import InvalidParameterError


@dataclass(frozen=True)
class ReferenceString:
    """A fixed target pitch the instrument is tuned against."""

    name: str  # 'G', 'D', 'A' or 'E'
    frequency: float  # Hz

    def __str__(self):
        return f"{self.name} ({self.frequency:.2f} Hz)"


class ViolinString(Enum):
    """The four open violin strings, lowest first."""

    G = ReferenceString("G", 196.0)
    D = ReferenceString("D", 293.66)
    A = ReferenceString("A", 440.0)
    E = ReferenceString("E", 659.25)

    @property
    def reference(self) -> ReferenceString:
        return self.value

    @property
    def frequency(self) -> float:
        return self.value.frequency

    @classmethod
    def lookup(cls, name: Union[str, "ViolinString"]) -> "ViolinString":
        """Find a string by its name, case-insensitively.

        Raises:
            InvalidParameterError: If the name is not one of G, D, A, E
        """
        if isinstance(name, cls):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise InvalidParameterError(
                f"Unknown string '{name}', expected one of "
                f"{', '.join(s.name for s in cls)}"
            ) from None


# Static lookup table of reference pitches keyed by name
REFERENCE_STRINGS = {string.name: string.reference for string in ViolinString}


class TuningStatus(Enum):
    """Tuning verdict relative to the selected reference."""

    FLAT = "flat"
    IN_TUNE = "in_tune"
    SHARP = "sharp"


@dataclass(frozen=True)
class TuningResult:
    """A frequency estimate evaluated against a reference pitch."""

    frequency_hz: float  # Estimated frequency, always > 0
    cents_deviation: float  # 1200 * log2(estimate / target)
    status: TuningStatus

    def __repr__(self):
        return (
            f"TuningResult(freq={self.frequency_hz:.2f}, "
            f"cents={self.cents_deviation:+.1f}, status={self.status.name})"
        )
