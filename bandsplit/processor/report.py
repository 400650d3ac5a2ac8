"""Plain-text separation report."""

from __future__ import annotations

from datetime import datetime

from ..models.metadata import SeparationMetadata

RULE = "=" * 52


def generate_separation_report(
    metadata: SeparationMetadata, created_at: datetime | None = None
) -> str:
    """Render a human-readable summary of a separation.

    Args:
        metadata: Metadata of the separation (see SeparationResult.to_metadata)
        created_at: Timestamp printed at the end (defaults to now)
    """
    created_at = created_at or datetime.now()
    lines = [
        RULE,
        "AUDIO TRACK SEPARATION REPORT".center(len(RULE)),
        RULE,
        "",
        f"Mode: {metadata.mode}",
        f"Total duration: {metadata.total_duration_seconds:.2f} seconds",
        f"Tracks: {len(metadata.tracks)}",
    ]
    if metadata.quality_score is not None:
        lines.append(f"Quality score (simulated): {metadata.quality_score:.2f}")

    lines += ["", RULE, "Extracted tracks:", RULE, ""]
    for index, track in enumerate(metadata.tracks, start=1):
        lines.append(f"{index}. {track.display_name} [{track.id}]")
        lines.append(f"   Kind: {track.kind}")
        lines.append(f"   Duration: {track.duration_seconds:.2f} seconds")
        lines.append(f"   Peak amplitude: {track.peak_amplitude:.3f}")
        if track.measured_lufs is not None:
            lines.append(f"   Loudness: {track.measured_lufs:.1f} LUFS")
        if track.audio_file:
            lines.append(f"   File: {track.audio_file}")
        lines.append("")

    lines += [
        RULE,
        "Notes:",
        RULE,
        "- Bands are frequency splits, not isolated sources.",
        "- Every track is a 16-bit PCM WAV unless converted.",
        "",
        f"Created: {created_at.isoformat(timespec='seconds')}",
    ]
    return "\n".join(lines) + "\n"
