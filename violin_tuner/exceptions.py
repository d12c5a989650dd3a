"""Exception types raised by the violin tuner."""


class TunerError(Exception):
    """Base class for all violin tuner errors."""


class InvalidParameterError(TunerError, ValueError):
    """Raised when the estimator or evaluator receives an unusable argument."""


class AcquisitionError(TunerError):
    """Raised when a sample source cannot deliver audio.

    This is distinct from silence: a source that raises this never
    produced a block at all.
    """
