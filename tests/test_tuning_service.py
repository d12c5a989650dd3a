import threading
import time
import unittest

import numpy as np

from violin_tuner.audio.sources import SampleSource, SineWaveSource
from violin_tuner.audio.tuning_service import TuningService
from violin_tuner.exceptions import AcquisitionError
from violin_tuner.tuning_types import TuningStatus, ViolinString

SAMPLE_RATE = 44100


def sine(frequency, length=4096):
    with SineWaveSource(frequency, SAMPLE_RATE, length) as source:
        return source.read_block()


class ScriptedSource(SampleSource):
    """Plays back a fixed list of blocks, then reports exhaustion."""

    def __init__(self, blocks, fail_after=None, fail_on_open=False):
        super().__init__(SAMPLE_RATE, len(blocks[0]) if blocks else 4096)
        self.blocks = list(blocks)
        self.fail_after = fail_after
        self.fail_on_open = fail_on_open
        self.open_count = 0
        self.close_count = 0
        self._index = 0

    def open(self):
        if self.fail_on_open:
            raise AcquisitionError("microphone permission denied")
        self.open_count += 1
        self._index = 0
        self._open = True

    def read_block(self):
        self._require_open()
        if self.fail_after is not None and self._index >= self.fail_after:
            raise AcquisitionError("device disconnected")
        if self._index >= len(self.blocks):
            return None
        block = self.blocks[self._index]
        self._index += 1
        return block

    def close(self):
        self.close_count += 1
        self._open = False


def wait_until_stopped(service, timeout=5.0):
    deadline = time.time() + timeout
    while service.is_running() and time.time() < deadline:
        time.sleep(0.01)
    # Let the producer finish its cleanup
    if service._thread is not None:
        service._thread.join(timeout)


def a_string():
    return ViolinString.A.reference


class TestProcessBlock(unittest.TestCase):
    def test_in_tune_block(self):
        service = TuningService(SineWaveSource(440.0), a_string)
        result = service.process_block(sine(440.0))
        self.assertEqual(result.status, TuningStatus.IN_TUNE)
        self.assertAlmostEqual(result.frequency_hz, 441.0)

    def test_silent_block_gives_nothing(self):
        service = TuningService(SineWaveSource(0.0), a_string)
        self.assertIsNone(service.process_block(np.zeros(4096, dtype=np.int16)))

    def test_reference_read_for_every_block(self):
        selected = [ViolinString.A]
        service = TuningService(SineWaveSource(440.0), lambda: selected[0].reference)
        block = sine(440.0)

        self.assertEqual(service.process_block(block).status, TuningStatus.IN_TUNE)
        selected[0] = ViolinString.E
        self.assertEqual(service.process_block(block).status, TuningStatus.FLAT)
        selected[0] = ViolinString.D
        self.assertEqual(service.process_block(block).status, TuningStatus.SHARP)


class TestLifecycle(unittest.TestCase):
    def test_results_follow_block_order(self):
        frequencies = [196.0, 293.66, 440.0, 659.25]
        source = ScriptedSource([sine(f) for f in frequencies])
        results = []

        service = TuningService(source, a_string)
        self.assertTrue(service.start(results.append))
        wait_until_stopped(service)

        self.assertEqual(len(results), 4)
        for result, frequency in zip(results, frequencies):
            self.assertAlmostEqual(result.frequency_hz, frequency, delta=frequency * 0.01)
        self.assertEqual(source.close_count, 1)
        self.assertEqual(service.blocks_processed, 4)

    def test_silent_blocks_are_skipped(self):
        silence = np.zeros(4096, dtype=np.int16)
        source = ScriptedSource([silence, sine(440.0), silence])
        results = []

        service = TuningService(source, a_string)
        service.start(results.append)
        wait_until_stopped(service)

        self.assertEqual(len(results), 1)
        self.assertEqual(service.blocks_processed, 3)

    def test_stop_when_never_started(self):
        service = TuningService(SineWaveSource(440.0), a_string)
        service.stop()
        service.stop()
        self.assertFalse(service.is_running())

    def test_stop_twice_and_restart(self):
        source = SineWaveSource(440.0, realtime=True)
        results = []
        service = TuningService(source, a_string)

        service.start(results.append)
        self.assertTrue(service.is_running())
        self.assertFalse(service.start(results.append))
        time.sleep(0.3)
        service.stop()
        service.stop()
        self.assertFalse(service.is_running())
        self.assertFalse(source.is_open)

        count = len(results)
        self.assertGreater(count, 0)
        time.sleep(0.2)
        self.assertEqual(len(results), count)

        service.start(results.append)
        time.sleep(0.3)
        service.stop()
        self.assertGreater(len(results), count)

    def test_open_failure_propagates(self):
        service = TuningService(ScriptedSource([sine(440.0)], fail_on_open=True), a_string)
        with self.assertRaises(AcquisitionError):
            service.start(lambda result: None)
        self.assertFalse(service.is_running())

    def test_read_failure_reported(self):
        source = ScriptedSource([sine(440.0)] * 3, fail_after=2)
        results, errors = [], []

        service = TuningService(source, a_string)
        service.start(results.append, errors.append)
        wait_until_stopped(service)

        self.assertEqual(len(results), 2)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], AcquisitionError)
        self.assertFalse(source.is_open)

    def test_stop_from_result_callback(self):
        source = SineWaveSource(440.0)
        results = []
        service = TuningService(source, a_string)
        done = threading.Event()

        def on_result(result):
            results.append(result)
            service.stop()
            done.set()

        service.start(on_result)
        self.assertTrue(done.wait(5.0))
        wait_until_stopped(service)

        self.assertEqual(len(results), 1)
        self.assertFalse(service.is_running())
