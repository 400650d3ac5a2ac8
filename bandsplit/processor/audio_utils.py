"""Audio decoding and extraction utilities.

Decoding uses soundfile (libsndfile) on in-memory bytes. Containers that
libsndfile cannot read, such as WebM or MP4 audio, are decoded through
ffmpeg/ffprobe when those tools are on PATH.
"""

from __future__ import annotations

import io
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

import numpy as np
import soundfile as sf  # pyright: ignore[reportMissingTypeStubs]

from ..errors import AudioExtractionError, DecodeError
from ..models.protocols import DecodedAudio

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".mkv", ".webm", ".avi", ".m4v"})


def is_tool_available(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def _probe_stream(audio_path: Path, entry: str) -> str:
    """Read one field of the first audio stream with ffprobe.

    Raises:
        subprocess.CalledProcessError: If ffprobe fails
    """
    cmd = [
        "ffprobe",
        "-v",
        "error",
        "-select_streams",
        "a:0",
        "-show_entries",
        f"stream={entry}",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(audio_path),
    ]
    result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


def get_sample_rate(audio_path: Path) -> int:
    """Sample rate of the first audio stream.

    Raises:
        subprocess.CalledProcessError: If ffprobe fails
        ValueError: If the stream has no sample rate
    """
    return int(_probe_stream(audio_path, "sample_rate"))


def get_channels(audio_path: Path) -> int:
    """Channel count of the first audio stream.

    Raises:
        subprocess.CalledProcessError: If ffprobe fails
        ValueError: If the stream has no channel count
    """
    return int(_probe_stream(audio_path, "channels"))


def read_audio(audio_path: Path) -> tuple[np.ndarray, int]:
    """Decode any ffmpeg-readable file to float32 samples.

    Returns:
        (frames, sample_rate), frames shaped (samples, channels)

    Raises:
        subprocess.CalledProcessError: If ffprobe or ffmpeg fails
        ValueError: If the stream cannot be probed
    """
    sample_rate = get_sample_rate(audio_path)
    channels = get_channels(audio_path)

    # Raw 32-bit float little-endian PCM on stdout
    cmd = ["ffmpeg", "-v", "error", "-i", str(audio_path)]
    cmd += ["-f", "f32le", "-acodec", "pcm_f32le", "-"]
    result = subprocess.run(cmd, check=True, capture_output=True)
    frames = np.frombuffer(result.stdout, dtype="<f4").reshape(-1, channels)
    return frames, sample_rate


def convert_audio(
    input_path: Path,
    output_path: Path,
    bitrate: str | None = None,
    codec: str | None = None,
) -> None:
    """Transcode a file with ffmpeg, overwriting output_path.

    Args:
        input_path: Source file
        output_path: Destination; the container follows its extension
        bitrate: e.g. "192k" (optional)
        codec: e.g. "libopus" or "aac" (optional)

    Raises:
        subprocess.CalledProcessError: If ffmpeg fails
    """
    cmd = ["ffmpeg", "-y", "-hide_banner", "-loglevel", "error", "-i", str(input_path)]
    if codec is not None:
        cmd += ["-c:a", codec]
    if bitrate is not None:
        cmd += ["-b:a", bitrate]
    cmd.append(str(output_path))

    logger.debug("Converting %s -> %s", input_path.name, output_path.name)
    _ = subprocess.run(cmd, check=True, capture_output=True, text=True)


def _decode_with_ffmpeg(data: bytes) -> DecodedAudio:
    with tempfile.TemporaryDirectory(prefix="bandsplit_") as tmp_dir:
        input_path = Path(tmp_dir) / "input"
        _ = input_path.write_bytes(data)
        audio, sample_rate = read_audio(input_path)
    return DecodedAudio.from_interleaved(audio, sample_rate)


def decode_audio(data: bytes) -> DecodedAudio:
    """Decode an audio byte stream into per-channel float samples.

    Args:
        data: Raw bytes of an audio container (WAV, FLAC, OGG, MP3, ...)

    Returns:
        DecodedAudio with one float32 array per channel

    Raises:
        DecodeError: If the bytes cannot be decoded or contain no samples
    """
    if not data:
        raise DecodeError("Input is empty")

    try:
        frames, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        audio = DecodedAudio.from_interleaved(frames, int(sample_rate))
    except (RuntimeError, ValueError, TypeError) as e:
        if not (is_tool_available("ffmpeg") and is_tool_available("ffprobe")):
            raise DecodeError(f"Could not decode audio: {e}") from e

        logger.debug("soundfile could not decode input (%s), trying ffmpeg", e)
        try:
            audio = _decode_with_ffmpeg(data)
        except (subprocess.CalledProcessError, ValueError) as ffmpeg_error:
            raise DecodeError(f"Could not decode audio: {ffmpeg_error}") from ffmpeg_error

    if audio.length_in_samples == 0:
        raise DecodeError("Decoded audio contains no samples")

    logger.debug(
        "Decoded %d channel(s), %d samples at %d Hz",
        audio.number_of_channels,
        audio.length_in_samples,
        audio.sample_rate,
    )
    return audio


def extract_audio(video_path: Path) -> bytes:
    """Extract the first audio stream of a video file as 16-bit PCM WAV bytes.

    Raises:
        AudioExtractionError: If ffmpeg is missing, the file has no audio
            stream, or extraction fails
    """
    if not is_tool_available("ffmpeg"):
        raise AudioExtractionError("ffmpeg executable not found in PATH")
    if not video_path.is_file():
        raise AudioExtractionError(f"Video file not found: {video_path}")

    with tempfile.TemporaryDirectory(prefix="bandsplit_") as tmp_dir:
        wav_path = Path(tmp_dir) / f"{video_path.stem}.wav"
        cmd = [
            "ffmpeg",
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(video_path),
            "-vn",
            "-acodec",
            "pcm_s16le",
            str(wav_path),
        ]
        try:
            _ = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else "Unknown error"
            raise AudioExtractionError(
                f"Failed to extract audio from {video_path.name}: {error_msg}"
            ) from e

        if not wav_path.exists():
            raise AudioExtractionError(f"ffmpeg produced no audio for {video_path.name}")
        return wav_path.read_bytes()
