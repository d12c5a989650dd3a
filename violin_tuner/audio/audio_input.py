"""Live microphone input using the sounddevice library."""

from __future__ import annotations
import numpy as np
import sounddevice as sd
from typing import Optional, Dict, Any, List, ClassVar

from ..logger import get_logger
from ..exceptions import AcquisitionError
from .sources import SampleSource

logger = get_logger(__name__)


class SoundDeviceInput(SampleSource):
    """Blocking reader over a sounddevice input stream."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 4096  # Samples per block handed to the estimator
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Block size in frames, or None for default (4096)
            channels: Number of channels to capture, or None for default (1).
                Only the first channel is passed on.
        """
        super().__init__(
            sample_rate or self.SAMPLE_RATE, frames_per_buffer or self.FRAMES_PER_BUFFER
        )
        self._device_id = device_id
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None

    @property
    def device_id(self) -> Optional[int]:
        return self._device_id

    def open(self) -> None:
        """Open and start the input stream.

        Raises:
            AcquisitionError: If the device is missing, busy, or rejects the settings
        """
        if self._open:
            return

        try:
            sd.check_input_settings(
                device=self._device_id,
                channels=self._channels,
                samplerate=self._sample_rate,
                dtype="int16",
            )
            self._stream = sd.InputStream(
                device=self._device_id,
                channels=self._channels,
                samplerate=self._sample_rate,
                blocksize=self._block_size,
                dtype="int16",
            )
            self._stream.start()
        except Exception as e:
            logger.error(f"Could not open audio input device {self._device_id}: {e}")
            if self._stream is not None:
                self._stream.close()
                self._stream = None
            raise AcquisitionError(f"Audio input unavailable: {e}") from e

        self._open = True
        logger.info(
            f"Audio input started: device={self._device_id}, rate={self._sample_rate}Hz, "
            f"block={self._block_size}"
        )

    def read_block(self) -> Optional[np.ndarray]:
        self._require_open()
        data, overflowed = self._stream.read(self._block_size)
        if overflowed:
            logger.warning("Audio input overflow, samples were dropped")

        # Extract mono audio data (take first channel if multi-channel)
        return np.ascontiguousarray(data[:, 0])

    def close(self) -> None:
        if self._stream is None:
            self._open = False
            return

        try:
            self._stream.stop()
            self._stream.close()
            logger.info("Audio input stopped")
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._stream = None
            self._open = False


def describe_devices() -> List[Dict[str, Any]]:
    """List audio devices with the input sample rates they accept.

    Returns:
        One dict per device with its index, name, channel counts, default
        sample rate, and the supported input rates from a fixed candidate list
    """
    devices = []
    for index, device in enumerate(sd.query_devices()):
        supported = []
        if device["max_input_channels"] > 0:
            for rate in [8000, 16000, 22050, 44100, 48000, 96000]:
                try:
                    sd.check_input_settings(device=index, samplerate=rate, channels=1)
                    supported.append(rate)
                except Exception as e:
                    logger.debug(f"Device {index} rejects {rate} Hz: {e}")
        devices.append(
            {
                "index": index,
                "name": device["name"],
                "max_input_channels": device["max_input_channels"],
                "max_output_channels": device["max_output_channels"],
                "default_samplerate": device["default_samplerate"],
                "supported_input_rates": supported,
            }
        )
    return devices
