"""PCM helpers for the end-of-session cue: WAV loading and a fallback beep."""

from __future__ import annotations

import wave
from pathlib import Path

import numpy as np

SAMPLE_RATE_HZ = 44100
BEEP_FREQUENCY_HZ = 1000.0
BEEP_SECONDS = 1.0
BEEP_FLOOR_GAIN = 0.0001

_SAMPLE_DTYPES = {1: np.uint8, 2: np.int16, 4: np.int32}


class SoundError(Exception):
    """Raised when a sound cue cannot be loaded or played."""


def volume_fraction(volume_percent: float) -> float:
    return max(0.0, min(1.0, float(volume_percent or 0) / 100.0))


def generate_beep(
    volume: float,
    *,
    sample_rate_hz: int = SAMPLE_RATE_HZ,
    frequency_hz: float = BEEP_FREQUENCY_HZ,
    seconds: float = BEEP_SECONDS,
) -> np.ndarray:
    """Sine beep that decays exponentially from ``volume`` to silence."""
    sample_count = int(sample_rate_hz * seconds)
    t = np.arange(sample_count, dtype=np.float32) / float(sample_rate_hz)
    if volume <= 0:
        return np.zeros(sample_count, dtype=np.float32)

    floor = min(BEEP_FLOOR_GAIN, volume)
    envelope = volume * np.power(floor / volume, t / seconds)
    wave_data = np.sin(2.0 * np.pi * frequency_hz * t) * envelope
    return wave_data.astype(np.float32)


def load_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """Read a PCM WAV file as mono float32 samples in [-1, 1]."""
    try:
        with wave.open(str(path), "rb") as reader:
            channels = reader.getnchannels()
            sample_width = reader.getsampwidth()
            sample_rate_hz = reader.getframerate()
            frames = reader.readframes(reader.getnframes())
    except (OSError, EOFError, wave.Error) as error:
        raise SoundError(f"Failed to read sound file {path}: {error}") from error

    dtype = _SAMPLE_DTYPES.get(sample_width)
    if dtype is None:
        raise SoundError(f"Unsupported WAV sample width: {sample_width} bytes")

    samples = np.frombuffer(frames, dtype=dtype).astype(np.float32)
    if sample_width == 1:
        samples = (samples - 128.0) / 128.0
    else:
        samples = samples / float(np.iinfo(dtype).max)

    if channels > 1:
        samples = samples.reshape(-1, channels).mean(axis=1)
    if len(samples) == 0:
        raise SoundError(f"Sound file is empty: {path}")
    return samples.astype(np.float32), sample_rate_hz
