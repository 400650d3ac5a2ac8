"""Serializable metadata for separation results.

These Pydantic models are the JSON view of a SeparationResult, written to
metadata.json next to the track files.
"""

from __future__ import annotations

from pydantic import BaseModel


class TrackMetadata(BaseModel):
    """Metadata for a single track."""

    id: str
    display_name: str
    kind: str
    channels: int
    sample_rate: int
    duration_seconds: float
    volume: float
    peak_amplitude: float
    measured_lufs: float | None = None  # None when too short or silent
    encoded_size_bytes: int
    waveform: list[float]
    audio_file: str | None = None  # Relative path (e.g., "vocals.wav")
    waveform_file: str | None = None  # Relative path (e.g., "vocals_waveform.png")


class SeparationMetadata(BaseModel):
    """Metadata for all tracks of one separation."""

    mode: str
    original_handle: str
    total_duration_seconds: float
    quality_score: float | None = None
    tracks: list[TrackMetadata]
