"""Core audio types shared by the separators and the pipeline."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Sequence

import numpy as np
import numpy.typing as npt

from ..errors import HandleReleased, ShapeMismatch
from ..processor.wav_encoder import encode_wav

if TYPE_CHECKING:
    from .metadata import SeparationMetadata

FloatArray = npt.NDArray[np.float32]


class TrackKind(str, Enum):
    """Standardized track types produced by separation."""

    VOCALS = "vocals"
    INSTRUMENTAL = "instrumental"
    DRUMS = "drums"
    BASS = "bass"
    OTHER = "other"
    CHANNEL = "channel"
    LOW_FREQUENCY = "low_frequency"
    HIGH_FREQUENCY = "high_frequency"
    # Custom recipe ids that do not name one of the above
    BAND = "band"

    @classmethod
    def for_recipe(cls, recipe_id: str) -> TrackKind:
        """Map a band recipe id onto a track kind."""
        try:
            return cls(recipe_id)
        except ValueError:
            return cls.BAND


class SeparationMode(str, Enum):
    """How the input is split into tracks."""

    CHANNEL_SPLIT = "channel_split"
    BAND_SPLIT = "band_split"


class PipelineState(str, Enum):
    """Lifecycle of one separation request."""

    IDLE = "idle"
    DECODING = "decoding"
    FILTERING = "filtering"
    ENCODING = "encoding"
    READY = "ready"
    FAILED = "failed"


def _as_channel(samples: npt.ArrayLike) -> FloatArray:
    array = np.array(samples, dtype=np.float32, copy=True)
    if array.ndim != 1:
        raise ShapeMismatch(f"Channel data must be one-dimensional, got shape {array.shape}")
    array.flags.writeable = False
    return array


def _check_channels(channels: Sequence[FloatArray]) -> int:
    if not channels:
        raise ShapeMismatch("Audio must have at least one channel")
    lengths = {len(channel) for channel in channels}
    if len(lengths) != 1:
        raise ShapeMismatch(f"Channel lengths differ: {sorted(lengths)}")
    return lengths.pop()


@dataclass(frozen=True)
class DecodedAudio:
    """Decoded input audio: one float32 array per channel, all of equal length.

    Arrays are copied and made read-only on construction, so a DecodedAudio
    can be shared between worker threads without locking.
    """

    sample_rate: int
    channel_data: tuple[FloatArray, ...]

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ShapeMismatch(f"Sample rate must be positive, got {self.sample_rate}")
        channels = tuple(_as_channel(channel) for channel in self.channel_data)
        _ = _check_channels(channels)
        object.__setattr__(self, "channel_data", channels)

    @classmethod
    def from_interleaved(cls, frames: npt.ArrayLike, sample_rate: int) -> DecodedAudio:
        """Build from a (samples,) or (samples, channels) array as soundfile returns."""
        array = np.asarray(frames, dtype=np.float32)
        if array.ndim == 1:
            return cls(sample_rate, (array,))
        if array.ndim != 2:
            raise ShapeMismatch(f"Expected 1-D or 2-D audio, got shape {array.shape}")
        return cls(sample_rate, tuple(array[:, i] for i in range(array.shape[1])))

    @property
    def number_of_channels(self) -> int:
        return len(self.channel_data)

    @property
    def length_in_samples(self) -> int:
        return len(self.channel_data[0])

    @property
    def duration_seconds(self) -> float:
        return self.length_in_samples / self.sample_rate

    def channel(self, index: int) -> DecodedAudio:
        """Return a mono DecodedAudio holding only the given channel."""
        return DecodedAudio(self.sample_rate, (self.channel_data[index],))


class Track:
    """One named output of a separation.

    The encoded WAV bytes are produced on first access and cached. After
    release() the sample and byte buffers are dropped and any further access
    raises HandleReleased.
    """

    def __init__(
        self,
        id: str,
        display_name: str,
        kind: TrackKind,
        samples: Sequence[npt.ArrayLike],
        sample_rate: int,
        waveform: list[float],
        volume: float = 1.0,
    ):
        self.id = id
        self.display_name = display_name
        self.kind = kind
        self.sample_rate = sample_rate
        self.waveform = list(waveform)
        self.volume = volume
        self._samples: tuple[FloatArray, ...] | None = tuple(_as_channel(s) for s in samples)
        self._length = _check_channels(self._samples)
        self._encoded: bytes | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.duration_seconds:.2f}s"
        return f"Track(id={self.id!r}, kind={self.kind.value}, {state})"

    @property
    def released(self) -> bool:
        return self._samples is None

    @property
    def samples(self) -> tuple[FloatArray, ...]:
        if self._samples is None:
            raise HandleReleased(f"Track '{self.id}' has been released")
        return self._samples

    @property
    def number_of_channels(self) -> int:
        return len(self.samples)

    @property
    def length_in_samples(self) -> int:
        return self._length

    @property
    def duration_seconds(self) -> float:
        return self._length / self.sample_rate

    @property
    def encoded_bytes(self) -> bytes:
        """The track serialized as a 16-bit PCM WAV container."""
        with self._lock:
            samples = self.samples
            if self._encoded is None:
                self._encoded = encode_wav(samples, self.sample_rate)
            return self._encoded

    def release(self) -> None:
        """Drop the sample and encoded buffers. Safe to call more than once."""
        with self._lock:
            self._samples = None
            self._encoded = None


@dataclass
class SeparationResult:
    """Output of one separation request; owns every track it holds.

    Use as a context manager, or call release() when done, so that the
    encoded buffers are dropped on every exit path.
    """

    tracks: list[Track]
    mode: SeparationMode
    sample_rate: int
    total_duration_seconds: float
    original_handle: str
    quality_score: float | None = None
    _released: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.tracks:
            raise ShapeMismatch("A separation result must contain at least one track")
        expected = round(self.total_duration_seconds * self.sample_rate)
        for track in self.tracks:
            if track.length_in_samples != expected or track.sample_rate != self.sample_rate:
                raise ShapeMismatch(
                    f"Track '{track.id}' has {track.length_in_samples} samples at "
                    + f"{track.sample_rate} Hz, expected {expected} at {self.sample_rate} Hz"
                )

    def __enter__(self) -> SeparationResult:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._released

    def get_track(self, track_id: str) -> Track | None:
        """Get a track by id."""
        return next((track for track in self.tracks if track.id == track_id), None)

    def track_ids(self) -> list[str]:
        return [track.id for track in self.tracks]

    def release(self) -> None:
        """Release every track. Safe to call more than once."""
        for track in self.tracks:
            track.release()
        self._released = True

    def to_metadata(self) -> SeparationMetadata:
        """Serializable summary of this result (no loudness measurement)."""
        if self._released:
            raise HandleReleased("Separation result has been released")

        from ..processor.audio_metadata_analyzer import AudioMetadataAnalyzer

        return AudioMetadataAnalyzer(measure_loudness=False).create_separation_metadata(self)
