import tempfile
import unittest
import wave
from pathlib import Path

import numpy as np

from sound import SoundError, generate_beep, load_wav, volume_fraction


class SoundToneTests(unittest.TestCase):
    def test_volume_fraction_clamps_percentages(self) -> None:
        self.assertEqual(0.0, volume_fraction(-20))
        self.assertEqual(0.5, volume_fraction(50))
        self.assertEqual(1.0, volume_fraction(250))

    def test_beep_decays_from_volume_to_near_silence(self) -> None:
        beep = generate_beep(0.8, sample_rate_hz=8000)

        self.assertEqual(8000, len(beep))
        self.assertEqual(np.float32, beep.dtype)
        self.assertLessEqual(float(np.max(np.abs(beep))), 0.8 + 1e-6)
        self.assertLess(float(np.max(np.abs(beep[-100:]))), 0.001)
        self.assertGreater(float(np.max(np.abs(beep[:100]))), 0.5)

    def test_zero_volume_beep_is_silent(self) -> None:
        beep = generate_beep(0.0, sample_rate_hz=8000)
        self.assertFalse(np.any(beep))

    def test_load_wav_mixes_stereo_to_mono_floats(self) -> None:
        frames = np.array([[16384, -16384], [32767, 32767]], dtype=np.int16)
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "chime.wav"
            with wave.open(str(path), "wb") as writer:
                writer.setnchannels(2)
                writer.setsampwidth(2)
                writer.setframerate(22050)
                writer.writeframes(frames.tobytes())

            samples, sample_rate_hz = load_wav(path)

        self.assertEqual(22050, sample_rate_hz)
        self.assertEqual(2, len(samples))
        self.assertAlmostEqual(0.0, float(samples[0]), places=4)
        self.assertAlmostEqual(1.0, float(samples[1]), places=4)

    def test_load_wav_raises_sound_error_for_unreadable_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "broken.wav"
            path.write_bytes(b"not a wav")
            with self.assertRaises(SoundError):
                load_wav(path)


if __name__ == "__main__":
    unittest.main()
