import time
import unittest

from violin_tuner.audio.sources import SampleSource, SineWaveSource
from violin_tuner.exceptions import AcquisitionError, InvalidParameterError
from violin_tuner.tuner_session import TunerSession
from violin_tuner.tuning_types import TuningStatus, ViolinString


class BrokenSource(SampleSource):
    """Opens fine, then fails on the first read."""

    def __init__(self):
        super().__init__(44100, 4096)

    def open(self):
        self._open = True

    def read_block(self):
        raise AcquisitionError("device busy")

    def close(self):
        self._open = False


def pump(session, timeout=3.0, until=None):
    """Run the consumer loop until the condition holds or the session stops."""
    applied = []
    deadline = time.time() + timeout
    while time.time() < deadline:
        applied.extend(session.process_events())
        if until is not None and until(applied):
            break
        if until is None and not session.is_listening():
            break
        time.sleep(0.01)
    return applied


class TestTunerSession(unittest.TestCase):
    def test_results_applied_in_consumer_loop(self):
        heard = []
        session = TunerSession(
            SineWaveSource(440.0, num_blocks=3), auto_stop_seconds=None, listener=heard.append
        )
        self.assertTrue(session.start_listening())
        applied = pump(session)

        self.assertEqual(len(applied), 3)
        self.assertEqual(heard, applied)
        self.assertIs(session.latest_result, applied[-1])
        self.assertEqual(session.latest_result.status, TuningStatus.IN_TUNE)
        # The finite source ended the session
        self.assertFalse(session.is_listening())

    def test_silence_keeps_previous_result(self):
        session = TunerSession(SineWaveSource(0.0, num_blocks=3), auto_stop_seconds=None)
        session.start_listening()
        self.assertEqual(pump(session), [])
        self.assertIsNone(session.latest_result)

    def test_select_string_reevaluates_reading(self):
        session = TunerSession(SineWaveSource(440.0, num_blocks=1), auto_stop_seconds=None)
        session.start_listening()
        pump(session)
        self.assertEqual(session.latest_result.status, TuningStatus.IN_TUNE)

        session.select_string("E")
        self.assertIs(session.selected_string, ViolinString.E)
        self.assertEqual(session.latest_result.status, TuningStatus.FLAT)
        self.assertAlmostEqual(session.latest_result.frequency_hz, 441.0)

    def test_stop_is_idempotent(self):
        session = TunerSession(SineWaveSource(440.0, realtime=True), auto_stop_seconds=None)
        session.stop_listening()
        self.assertTrue(session.toggle_listening())
        self.assertFalse(session.start_listening())
        self.assertFalse(session.toggle_listening())
        session.stop_listening()
        self.assertFalse(session.is_listening())
        self.assertFalse(session.service.is_running())

    def test_auto_stop(self):
        session = TunerSession(SineWaveSource(440.0, realtime=True), auto_stop_seconds=0.3)
        session.start_listening()
        deadline = time.time() + 3.0
        while session.is_listening() and time.time() < deadline:
            session.process_events()
            time.sleep(0.02)

        self.assertFalse(session.is_listening())
        self.assertTrue(session.auto_stopped)
        self.assertFalse(session.service.is_running())

    def test_manual_stop_cancels_auto_stop(self):
        session = TunerSession(SineWaveSource(440.0, realtime=True), auto_stop_seconds=0.2)
        session.start_listening()
        session.stop_listening()
        time.sleep(0.4)
        self.assertFalse(session.auto_stopped)

    def test_acquisition_failure_is_not_silence(self):
        session = TunerSession(BrokenSource(), auto_stop_seconds=None)
        session.start_listening()
        pump(session)

        self.assertFalse(session.is_listening())
        self.assertIsInstance(session.last_error, AcquisitionError)
        self.assertIsNone(session.latest_result)

    def test_invalid_settings(self):
        with self.assertRaises(InvalidParameterError):
            TunerSession(SineWaveSource(440.0), default_string="B")
        with self.assertRaises(InvalidParameterError):
            TunerSession(SineWaveSource(440.0), auto_stop_seconds=0)


if __name__ == "__main__":
    unittest.main()
