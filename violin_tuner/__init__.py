"""Violin tuner: autocorrelation pitch detection and tuning evaluation."""

from .exceptions import TunerError, InvalidParameterError, AcquisitionError
from .tuning_types import (
    ReferenceString,
    ViolinString,
    REFERENCE_STRINGS,
    TuningStatus,
    TuningResult,
)
from .audio.pitch_estimator import estimate_pitch, AutocorrelationPitchEstimator
from .audio.tuning_evaluator import cents_deviation, classify, evaluate, TuningEvaluator

__version__ = "0.1.0"

__all__ = [
    "TunerError",
    "InvalidParameterError",
    "AcquisitionError",
    "ReferenceString",
    "ViolinString",
    "REFERENCE_STRINGS",
    "TuningStatus",
    "TuningResult",
    "estimate_pitch",
    "AutocorrelationPitchEstimator",
    "cents_deviation",
    "classify",
    "evaluate",
    "TuningEvaluator",
]
