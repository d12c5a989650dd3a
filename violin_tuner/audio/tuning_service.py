"""Tuning service that ties a sample source to the estimator and evaluator."""

from __future__ import annotations
import threading
from typing import Optional, Callable

import numpy as np

from ..logger import get_logger
from ..tuning_types import ReferenceString, TuningResult
from ..core.interfaces import ISampleSource, IPitchEstimator, ITuningService
from .pitch_estimator import AutocorrelationPitchEstimator
from .tuning_evaluator import TuningEvaluator

logger = get_logger(__name__)


class TuningService(ITuningService):
    """Runs acquisition on a producer thread and reports tuning results.

    Each block is estimated and evaluated inline on the producer thread, so
    results reach ``on_result`` in the order the blocks were captured.
    Blocks without a detectable pitch produce no callback. The callbacks run
    on the producer thread; consumers that own state on another thread should
    hand results over through a queue.

    The active reference is fetched from ``reference_provider`` for every
    block, so the consumer may switch strings while listening.
    """

    JOIN_TIMEOUT = 5.0  # seconds

    def __init__(
        self,
        source: ISampleSource,
        reference_provider: Callable[[], ReferenceString],
        estimator: Optional[IPitchEstimator] = None,
        evaluator: Optional[TuningEvaluator] = None,
    ) -> None:
        """Initialize the tuning service.

        Args:
            source: Where sample blocks come from
            reference_provider: Returns the reference string to evaluate against
            estimator: Pitch estimator, or None for the autocorrelation default
            evaluator: Tuning evaluator, or None for the 5 cent default
        """
        self._source = source
        self._reference_provider = reference_provider
        self._estimator = estimator or AutocorrelationPitchEstimator()
        self._evaluator = evaluator or TuningEvaluator()

        self._on_result: Optional[Callable[[TuningResult], None]] = None
        self._on_error: Optional[Callable[[Exception], None]] = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._blocks_processed = 0

    @property
    def source(self) -> ISampleSource:
        return self._source

    @property
    def blocks_processed(self) -> int:
        return self._blocks_processed

    def start(
        self,
        on_result: Callable[[TuningResult], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        """Open the source and start the producer thread.

        Args:
            on_result: Called once per block that yields a pitch
            on_error: Called if acquisition fails after starting

        Returns:
            True if started, False if the service was already running

        Raises:
            AcquisitionError: If the source cannot be opened
        """
        with self._lock:
            if self.is_running():
                logger.warning("Tuning service already running")
                return False

            # Wait for a producer that stopped itself to release the source
            previous = self._thread
            if previous is not None and previous is not threading.current_thread():
                previous.join(self.JOIN_TIMEOUT)

            self._on_result = on_result
            self._on_error = on_error
            self._source.open()
            self._stop_event.clear()
            self._blocks_processed = 0
            self._thread = threading.Thread(
                target=self._run, name="tuning-producer", daemon=True
            )
            self._thread.start()

        logger.info(
            f"Tuning service started at {self._source.sample_rate} Hz, "
            f"{self._source.block_size} samples per block"
        )
        return True

    def stop(self) -> None:
        """Stop at the next block boundary. No-op when already stopped."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()

        # The producer may stop itself from a result callback; it exits once
        # the callback returns and is joined by the next start or stop
        if thread is threading.current_thread():
            return

        thread.join(self.JOIN_TIMEOUT)
        if thread.is_alive():
            logger.warning("Producer thread did not finish within timeout")

        with self._lock:
            if self._thread is thread:
                self._thread = None
        logger.info("Tuning service stopped")

    def is_running(self) -> bool:
        thread = self._thread
        return (
            thread is not None and thread.is_alive() and not self._stop_event.is_set()
        )

    def process_block(self, block: np.ndarray) -> Optional[TuningResult]:
        """Estimate and evaluate one block against the current reference.

        Returns:
            TuningResult, or None if no pitch was detected
        """
        frequency = self._estimator.estimate(block, self._source.sample_rate)
        self._blocks_processed += 1
        if frequency <= 0:
            logger.debug("No pitch detected in block")
            return None

        reference = self._reference_provider()
        result = self._evaluator.evaluate(frequency, reference.frequency)
        logger.debug(f"{reference.name}: {result}")
        return result

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                block = self._source.read_block()
                if block is None:
                    logger.info("Sample source exhausted")
                    break

                result = self.process_block(block)
                if result is not None and self._on_result:
                    self._on_result(result)
        except Exception as e:
            logger.error(f"Acquisition stopped by error: {e}", exc_info=True)
            if self._on_error:
                self._on_error(e)
        finally:
            self._source.close()
            self._stop_event.set()
