"""Sounddevice-backed playback of the end-of-session cue."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .tone import SAMPLE_RATE_HZ, SoundError, generate_beep, load_wav, volume_fraction


class SoundDeviceChime:
    """Plays a WAV file, or a generated beep, on a selected output device."""
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        sample_rate_hz: int = SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger(__name__)

    def play(self, volume_percent: int, sound_file: Optional[str] = None) -> None:
        volume = volume_fraction(volume_percent)
        wav, sample_rate_hz = self._load(sound_file, volume)

        try:
            sd.play(wav, samplerate=sample_rate_hz, device=self._output_device_index)
        except Exception as error:
            raise SoundError(f"Audio playback failed: {error}") from error

    def _load(self, sound_file: Optional[str], volume: float) -> tuple[np.ndarray, int]:
        if sound_file:
            try:
                wav, sample_rate_hz = load_wav(sound_file)
                return wav * volume, sample_rate_hz
            except SoundError as error:
                self._logger.warning("%s; playing fallback beep", error)
        return generate_beep(volume, sample_rate_hz=self._sample_rate_hz), self._sample_rate_hz
