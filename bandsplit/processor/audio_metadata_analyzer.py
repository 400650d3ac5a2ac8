import logging
import math

import numpy as np

from ..models.metadata import SeparationMetadata, TrackMetadata
from ..models.protocols import SeparationResult, Track

logger = logging.getLogger(__name__)

# pyloudnorm gates on 400 ms blocks; shorter signals cannot be measured
LOUDNESS_BLOCK_SECONDS = 0.4


class AudioMetadataAnalyzer:
    """Utility class for analyzing tracks and creating separation metadata."""

    def __init__(self, measure_loudness: bool = True):
        self.measure_loudness = measure_loudness

    def peak_amplitude(self, track: Track) -> float:
        """Largest absolute sample across all channels of a track."""
        if track.length_in_samples == 0:
            return 0.0
        return float(max(np.max(np.abs(channel)) for channel in track.samples))

    def integrated_loudness(self, track: Track) -> float | None:
        """Integrated loudness in LUFS, or None if it cannot be measured.

        Returns None for tracks shorter than one gating block and for
        silent tracks (pyloudnorm reports -inf for those).
        """
        import pyloudnorm as pyln

        if track.duration_seconds < LOUDNESS_BLOCK_SECONDS:
            return None

        meter = pyln.Meter(track.sample_rate)
        data = np.column_stack(track.samples).astype(np.float64)
        if data.shape[1] == 1:
            data = data[:, 0]

        loudness = float(meter.integrated_loudness(data))
        return loudness if math.isfinite(loudness) else None

    def create_track_metadata(self, track: Track) -> TrackMetadata:
        """Create metadata for a single track."""
        peak = self.peak_amplitude(track)
        lufs = self.integrated_loudness(track) if self.measure_loudness else None

        if lufs is not None:
            logger.info(f"  {track.id}: {lufs:.1f} LUFS, peak: {peak:.3f}")
        else:
            logger.debug(f"  {track.id}: peak: {peak:.3f} (loudness not measured)")

        return TrackMetadata(
            id=track.id,
            display_name=track.display_name,
            kind=track.kind.value,
            channels=track.number_of_channels,
            sample_rate=track.sample_rate,
            duration_seconds=track.duration_seconds,
            volume=track.volume,
            peak_amplitude=round(peak, 4),
            measured_lufs=round(lufs, 2) if lufs is not None else None,
            encoded_size_bytes=len(track.encoded_bytes),
            waveform=track.waveform,
        )

    def create_separation_metadata(self, result: SeparationResult) -> SeparationMetadata:
        """Create metadata for every track of a separation result."""
        return SeparationMetadata(
            mode=result.mode.value,
            original_handle=result.original_handle,
            total_duration_seconds=result.total_duration_seconds,
            quality_score=result.quality_score,
            tracks=[self.create_track_metadata(track) for track in result.tracks],
        )


# Global instance for convenience
_analyzer = None


def get_metadata_analyzer() -> AudioMetadataAnalyzer:
    """Get the global metadata analyzer instance."""
    global _analyzer
    if _analyzer is None:
        _analyzer = AudioMetadataAnalyzer()
    return _analyzer
