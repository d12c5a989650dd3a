"""Fire-and-forget playback of reference tones."""

from __future__ import annotations
import threading

import sounddevice as sd
from typing import Optional

from ..logger import get_logger
from .tone import synthesize_tone, DEFAULT_DURATION_MS, DEFAULT_SAMPLE_RATE

logger = get_logger(__name__)


class TonePlayer:
    """Plays a sine tone on an output device without blocking the caller."""

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        amplitude: float = 1.0,
    ) -> None:
        self._device_id = device_id
        self._sample_rate = sample_rate
        self._amplitude = amplitude

    def play(self, frequency: float, duration_ms: int = DEFAULT_DURATION_MS) -> threading.Thread:
        """Start playing a tone and return the playback thread.

        The output stream is held only for the duration of the tone.
        """
        samples = synthesize_tone(
            frequency, duration_ms, self._sample_rate, self._amplitude
        )
        thread = threading.Thread(
            target=self._write, args=(samples, frequency), name="tone-player", daemon=True
        )
        thread.start()
        return thread

    def _write(self, samples, frequency: float) -> None:
        try:
            with sd.OutputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                channels=1,
                dtype="int16",
            ) as stream:
                logger.info(f"Playing {frequency:.2f} Hz for {len(samples) / self._sample_rate:.1f}s")
                stream.write(samples.reshape(-1, 1))
        except sd.PortAudioError as e:
            logger.error(f"Could not play tone at {frequency:.2f} Hz: {e}")
