"""End-of-session sound cue.

``SoundDeviceChime`` lives in ``sound.output`` and is imported explicitly, so
importing this package does not require a PortAudio installation.
"""

from .tone import SoundError, generate_beep, load_wav, volume_fraction

__all__ = [
    "SoundError",
    "generate_beep",
    "load_wav",
    "volume_fraction",
]
