"""Factory for creating violin tuner components from configuration."""

from typing import Optional

from ..logger import get_logger
from ..audio.pitch_estimator import AutocorrelationPitchEstimator
from ..audio.tuning_evaluator import TuningEvaluator
from ..audio.sources import SineWaveSource, WavFileSource
from ..tuner_session import TunerSession
from .config import ConfigManager
from .interfaces import ISampleSource

logger = get_logger(__name__)


class ComponentFactory:
    """Factory for creating violin tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

    def create_audio_input(self, **kwargs) -> ISampleSource:
        """Create a live microphone source from the ``audio_input`` section.

        Args:
            **kwargs: Overrides for the configured values
        """
        # sounddevice needs PortAudio, so only import it when a device is requested
        from ..audio.audio_input import SoundDeviceInput

        config = self.config_manager.get_config("audio_input")
        config.update({k: v for k, v in kwargs.items() if v is not None})

        instance = SoundDeviceInput(**config)
        logger.info(f"Created audio input on device {config.get('device_id')}")
        return instance

    def create_file_source(self, file_path: str, realtime: bool = False) -> ISampleSource:
        """Create a source reading from an audio file, with the configured block size."""
        config = self.config_manager.get_config("audio_input")
        instance = WavFileSource(
            file_path, block_size=config["frames_per_buffer"], realtime=realtime
        )
        logger.info(f"Created file source for {file_path}")
        return instance

    def create_sine_source(self, frequency: float, **kwargs) -> ISampleSource:
        """Create a synthetic sine source at the configured sample rate and block size."""
        config = self.config_manager.get_config("audio_input")
        params = {
            "sample_rate": config["sample_rate"],
            "block_size": config["frames_per_buffer"],
        }
        params.update(kwargs)
        return SineWaveSource(frequency, **params)

    def create_session(self, source: ISampleSource, **kwargs) -> TunerSession:
        """Create a tuner session from the ``tuner`` section.

        Args:
            source: Sample source to listen to
            **kwargs: Overrides for ``default_string``, ``auto_stop_seconds``
                and ``listener``
        """
        config = self.config_manager.get_config("tuner")
        estimator = AutocorrelationPitchEstimator(
            normalize_by_overlap=config["normalize_by_overlap"]
        )
        evaluator = TuningEvaluator(in_tune_cents=config["in_tune_cents"])

        params = {
            "default_string": config["default_string"],
            "auto_stop_seconds": config["auto_stop_seconds"],
        }
        params.update(kwargs)

        session = TunerSession(
            source, estimator=estimator, evaluator=evaluator, **params
        )
        logger.info(f"Created tuner session for string {session.selected_string.name}")
        return session

    def create_tone_player(self, device_id: Optional[int] = None):
        """Create a tone player from the ``tone`` section."""
        from ..audio.tone_player import TonePlayer

        config = self.config_manager.get_config("tone")
        return TonePlayer(
            device_id=device_id,
            sample_rate=config["sample_rate"],
            amplitude=config["amplitude"],
        )
