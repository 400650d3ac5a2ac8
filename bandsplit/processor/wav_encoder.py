"""Canonical 16-bit PCM WAV serialization.

Layout (all integers little-endian):

    0   "RIFF"      4   36 + data size   8   "WAVE"
    12  "fmt "      16  16 (fmt size)    20  1 (PCM)
    22  channels    24  sample rate      28  byte rate = rate * channels * 2
    32  block align = channels * 2       34  16 (bits per sample)
    36  "data"      40  data size        44  interleaved int16 samples
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING, NamedTuple, Sequence

import numpy as np
import numpy.typing as npt

from ..errors import DecodeError, ProcessingError, ShapeMismatch

if TYPE_CHECKING:
    from ..models.protocols import DecodedAudio

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT_TAG = 1

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class WavHeader(NamedTuple):
    """Fields of a canonical 44-byte WAV header."""

    chunk_size: int
    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int


def float_to_int16(samples: npt.ArrayLike) -> npt.NDArray[np.int16]:
    """Clamp to [-1, 1], then scale negatives by 32768 and the rest by 32767.

    The asymmetric scale maps -1.0 to -32768 and 1.0 to 32767; the cast
    truncates toward zero. NaN samples are written as silence.
    """
    data = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    clamped = np.clip(data, -1.0, 1.0)
    scaled = np.where(clamped < 0, clamped * 32768.0, clamped * 32767.0)
    return scaled.astype(np.int16)


def build_header(num_channels: int, sample_rate: int, data_size: int) -> bytes:
    """Pack the 44-byte header for the given format and payload size."""
    block_align = num_channels * BYTES_PER_SAMPLE
    return _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        num_channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


def encode_wav(channels: Sequence[npt.ArrayLike], sample_rate: int) -> bytes:
    """Serialize per-channel float samples into a WAV container.

    Args:
        channels: One sample sequence per channel, all of equal length
        sample_rate: Samples per second

    Returns:
        Header followed by frame-interleaved little-endian int16 samples

    Raises:
        ShapeMismatch: If there are no channels or their lengths differ
        ProcessingError: If sample_rate is not positive
    """
    if sample_rate <= 0:
        raise ProcessingError(f"Sample rate must be positive, got {sample_rate}")
    if len(channels) == 0:
        raise ShapeMismatch("Cannot encode audio with zero channels")

    arrays = [np.asarray(channel) for channel in channels]
    lengths = {len(array) for array in arrays}
    if len(lengths) != 1:
        raise ShapeMismatch(f"Channel lengths differ: {sorted(lengths)}")

    # (samples, channels) row-major order is the interleaved frame order
    frames = np.column_stack([float_to_int16(array) for array in arrays])
    payload = frames.astype("<i2").tobytes()

    return build_header(len(arrays), sample_rate, len(payload)) + payload


def encode_decoded(audio: DecodedAudio) -> bytes:
    """Encode every channel of a DecodedAudio."""
    return encode_wav(audio.channel_data, audio.sample_rate)


def parse_wav_header(data: bytes) -> WavHeader:
    """Read back the header written by encode_wav.

    Raises:
        DecodeError: If data is not a canonical 44-byte-header PCM WAV
    """
    if len(data) < HEADER_SIZE:
        raise DecodeError(f"WAV data too short for a header ({len(data)} bytes)")

    fields = _HEADER.unpack_from(data)
    riff, chunk_size, wave, fmt, fmt_size = fields[:5]
    if (riff, wave, fmt, fields[11]) != (b"RIFF", b"WAVE", b"fmt ", b"data") or fmt_size != 16:
        raise DecodeError("Not a canonical PCM WAV header")

    return WavHeader(
        chunk_size=chunk_size,
        audio_format=fields[5],
        num_channels=fields[6],
        sample_rate=fields[7],
        byte_rate=fields[8],
        block_align=fields[9],
        bits_per_sample=fields[10],
        data_size=fields[12],
    )
