"""Core components for the violin tuner."""

# Import interfaces for easier access
from .interfaces import (
    ISampleSource,
    IPitchEstimator,
    ITuningService,
)

__all__ = ["ISampleSource", "IPitchEstimator", "ITuningService"]
