"""Consumer-side state for an interactive tuning session."""

from __future__ import annotations
import queue
import threading
from typing import Callable, List, Optional, Union

from .logger import get_logger
from .exceptions import InvalidParameterError
from .tuning_types import ReferenceString, TuningResult, ViolinString
from .core.interfaces import ISampleSource, IPitchEstimator
from .audio.tuning_evaluator import TuningEvaluator
from .audio.tuning_service import TuningService

logger = get_logger(__name__)


class TunerSession:
    """Owns the listening flag, the selected string and the latest result.

    Results arrive on the tuning service's producer thread and are queued;
    ``process_events`` applies them from the consumer's own loop, in order.
    A timer stops listening automatically after ``auto_stop_seconds``.
    """

    DEFAULT_AUTO_STOP_SECONDS = 30.0

    def __init__(
        self,
        source: ISampleSource,
        default_string: Union[str, ViolinString] = ViolinString.A,
        auto_stop_seconds: Optional[float] = DEFAULT_AUTO_STOP_SECONDS,
        estimator: Optional[IPitchEstimator] = None,
        evaluator: Optional[TuningEvaluator] = None,
        listener: Optional[Callable[[TuningResult], None]] = None,
    ) -> None:
        """Initialize the session.

        Args:
            source: Sample source to listen to
            default_string: String selected at start-up
            auto_stop_seconds: Listening time limit, or None to disable
            estimator: Pitch estimator passed to the tuning service
            evaluator: Tuning evaluator, also used when re-evaluating on string change
            listener: Called from ``process_events`` with every applied result
        """
        if auto_stop_seconds is not None and auto_stop_seconds <= 0:
            raise InvalidParameterError(
                f"Auto-stop time must be positive, got {auto_stop_seconds}"
            )
        self.selected_string = ViolinString.lookup(default_string)
        self.auto_stop_seconds = auto_stop_seconds
        self.listener = listener
        self.latest_result: Optional[TuningResult] = None
        self.last_error: Optional[Exception] = None
        self.auto_stopped = False

        self._evaluator = evaluator or TuningEvaluator()
        self._service = TuningService(
            source,
            reference_provider=lambda: self.selected_string.reference,
            estimator=estimator,
            evaluator=self._evaluator,
        )
        self._listening = False
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self.event_queue: "queue.Queue[Union[TuningResult, Exception]]" = queue.Queue()

    @property
    def reference(self) -> ReferenceString:
        return self.selected_string.reference

    @property
    def service(self) -> TuningService:
        return self._service

    @property
    def evaluator(self) -> TuningEvaluator:
        return self._evaluator

    def is_listening(self) -> bool:
        return self._listening

    def select_string(self, string: Union[str, ViolinString]) -> ViolinString:
        """Select the reference string and re-evaluate the retained reading."""
        self.selected_string = ViolinString.lookup(string)
        if self.latest_result is not None:
            self.latest_result = self._evaluator.evaluate(
                self.latest_result.frequency_hz, self.selected_string.frequency
            )
        logger.info(f"Selected string {self.selected_string.reference}")
        return self.selected_string

    def start_listening(self) -> bool:
        """Start listening.

        Returns:
            True if listening started, False if already listening

        Raises:
            AcquisitionError: If the sample source cannot be opened
        """
        with self._lock:
            if self._listening:
                return False

            self.auto_stopped = False
            self.last_error = None
            self._listening = True
            try:
                self._service.start(self.result_callback, self.error_callback)
            except Exception:
                self._listening = False
                raise

            if self.auto_stop_seconds is not None:
                self._timer = threading.Timer(self.auto_stop_seconds, self._auto_stop)
                self._timer.daemon = True
                self._timer.start()

        logger.info(f"Listening for {self.selected_string.reference}")
        return True

    def stop_listening(self) -> None:
        """Stop listening. Safe to call when already stopped."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._listening:
                return
            self._listening = False
        self._service.stop()
        logger.info("Stopped listening")

    def toggle_listening(self) -> bool:
        """Start if stopped, stop if listening. Returns the new listening state."""
        if self._listening:
            self.stop_listening()
        else:
            self.start_listening()
        return self._listening

    def _auto_stop(self) -> None:
        with self._lock:
            if not self._listening:
                return
            self.auto_stopped = True
        logger.info(f"Auto-stopping after {self.auto_stop_seconds:.0f} seconds of listening")
        self.stop_listening()

    def result_callback(self, result: TuningResult) -> None:
        """Receives results on the producer thread and queues them."""
        if not self._listening:
            return
        self.event_queue.put(result)

    def error_callback(self, error: Exception) -> None:
        """Receives acquisition failures on the producer thread and queues them."""
        self.event_queue.put(error)

    def process_events(self) -> List[TuningResult]:
        """Apply queued results in arrival order. Call from the consumer's loop.

        Returns:
            The results applied by this call
        """
        # A finite source (e.g. a file) ends the stream on its own; check
        # before draining so its last results are still applied
        finished = self._listening and not self._service.is_running()

        applied = []
        try:
            # Process all available events in the queue without blocking
            while True:
                event = self.event_queue.get_nowait()
                if isinstance(event, Exception):
                    self._handle_error(event)
                    continue
                self.latest_result = event
                applied.append(event)
                if self.listener:
                    self.listener(event)
        except queue.Empty:
            pass

        if finished:
            logger.info("Sample source finished")
            self.stop_listening()
        return applied

    def _handle_error(self, error: Exception) -> None:
        logger.error(f"Audio acquisition failed: {error}")
        self.last_error = error
        self.stop_listening()
