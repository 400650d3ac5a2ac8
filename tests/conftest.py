import io

import numpy as np
import pytest
import soundfile as sf

from bandsplit.config import Config


def _tone(frequency: float, seconds: float, sample_rate: int, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


@pytest.fixture
def tone():
    """Factory for a mono sine tone as float32 samples."""
    return _tone


@pytest.fixture
def wav_bytes():
    """Factory that encodes (samples,) or (samples, channels) arrays as 16-bit WAV bytes."""

    def _make(frames: np.ndarray, sample_rate: int = 44100) -> bytes:
        buffer = io.BytesIO()
        sf.write(buffer, frames, sample_rate, format="WAV", subtype="PCM_16")
        return buffer.getvalue()

    return _make


@pytest.fixture
def mixed_mono_wav(wav_bytes):
    """Half a second of 100 Hz + 1 kHz + 5 kHz at 44.1 kHz, mono."""
    sample_rate = 44100
    mix = (
        _tone(100, 0.5, sample_rate, 0.3)
        + _tone(1000, 0.5, sample_rate, 0.3)
        + _tone(5000, 0.5, sample_rate, 0.3)
    )
    return wav_bytes(mix, sample_rate)


@pytest.fixture
def config() -> Config:
    """Defaults with a small worker pool so tests do not depend on CPU count."""
    return Config(max_workers=2)
