"""Writing separation results to disk.

Each track becomes an audio file plus a waveform PNG; the directory also gets
metadata.json and report.txt.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import AudioFormat, OutputConfig
from ..errors import HandleReleased
from ..models.metadata import SeparationMetadata
from ..models.protocols import SeparationResult
from .audio_metadata_analyzer import get_metadata_analyzer
from .report import generate_separation_report
from .waveform_generator import WaveformGenerator

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"
REPORT_FILENAME = "report.txt"


def write_separation(
    result: SeparationResult,
    output_dir: Path,
    output_config: OutputConfig | None = None,
    delete_intermediate_wavs: bool = True,
) -> SeparationMetadata:
    """Write every track of result into output_dir.

    Args:
        result: A separation result that has not been released
        output_dir: Directory to write into (created if needed)
        output_config: Output format; WAV unless given
        delete_intermediate_wavs: Remove the WAV after converting to another format

    Returns:
        The metadata written to metadata.json

    Raises:
        HandleReleased: If result was already released
        subprocess.CalledProcessError: If format conversion fails
    """
    if result.released:
        raise HandleReleased("Cannot write a released separation result")

    output_config = output_config or OutputConfig()
    output_dir.mkdir(parents=True, exist_ok=True)

    metadata = get_metadata_analyzer().create_separation_metadata(result)
    max_peak = max((max(t.waveform, default=0.0) for t in metadata.tracks), default=0.0)
    waveform_generator = WaveformGenerator()

    for track, track_meta in zip(result.tracks, metadata.tracks):
        wav_path = output_dir / f"{track.id}.wav"
        _ = wav_path.write_bytes(track.encoded_bytes)
        audio_path = wav_path

        if output_config.format != AudioFormat.WAV:
            audio_path = output_dir / f"{track.id}.{output_config.format.value}"
            _ = output_config.convert(wav_path, audio_path)
            if delete_intermediate_wavs:
                wav_path.unlink(missing_ok=True)

        waveform_path = output_dir / f"{track.id}_waveform.png"
        waveform_generator.render_png(track.waveform, waveform_path, max_peak=max_peak)

        track_meta.audio_file = audio_path.name
        track_meta.waveform_file = waveform_path.name
        logger.info(f"  → {track.id}: {audio_path.name}")

    _ = (output_dir / METADATA_FILENAME).write_text(metadata.model_dump_json(indent=2))
    _ = (output_dir / REPORT_FILENAME).write_text(generate_separation_report(metadata))

    return metadata
