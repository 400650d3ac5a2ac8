import struct
import warnings

import numpy as np
import pytest

from bandsplit.errors import DecodeError, ProcessingError, ShapeMismatch
from bandsplit.models.protocols import DecodedAudio
from bandsplit.processor.wav_encoder import (
    HEADER_SIZE,
    encode_decoded,
    encode_wav,
    float_to_int16,
    parse_wav_header,
)


def _payload(data: bytes) -> np.ndarray:
    return np.frombuffer(data[HEADER_SIZE:], dtype="<i2")


def test_header_fields_stereo():
    left = np.zeros(10, dtype=np.float32)
    right = np.zeros(10, dtype=np.float32)
    data = encode_wav([left, right], 48000)

    assert data[0:4] == b"RIFF"
    assert data[8:12] == b"WAVE"
    assert data[12:16] == b"fmt "
    assert data[36:40] == b"data"

    header = parse_wav_header(data)
    assert header.audio_format == 1
    assert header.num_channels == 2
    assert header.sample_rate == 48000
    assert header.byte_rate == 48000 * 2 * 2
    assert header.block_align == 4
    assert header.bits_per_sample == 16
    assert header.data_size == 10 * 2 * 2
    assert header.chunk_size == 36 + header.data_size
    assert len(data) == HEADER_SIZE + header.data_size


def test_clamping_and_asymmetric_scaling():
    data = encode_wav([np.array([-1.5, -1.0, 0.0, 1.0, 1.5])], 8000)
    assert _payload(data).tolist() == [-32768, -32768, 0, 32767, 32767]


def test_conversion_truncates_toward_zero():
    assert float_to_int16([0.5, -0.5]).tolist() == [16383, -16384]


def test_samples_are_interleaved_by_frame():
    left = np.array([0.1, 0.2, 0.3])
    right = np.array([-0.1, -0.2, -0.3])
    values = _payload(encode_wav([left, right], 8000))

    assert values[0::2].tolist() == float_to_int16(left).tolist()
    assert values[1::2].tolist() == float_to_int16(right).tolist()


def test_little_endian_payload():
    data = encode_wav([np.array([1.0])], 8000)
    assert data[HEADER_SIZE:] == struct.pack("<h", 32767)


def test_empty_input_is_header_only():
    data = encode_wav([np.array([], dtype=np.float32)], 44100)
    header = parse_wav_header(data)

    assert len(data) == HEADER_SIZE
    assert header.data_size == 0
    assert header.chunk_size == 36


def test_mono_block_align():
    header = parse_wav_header(encode_wav([np.zeros(4)], 22050))
    assert header.num_channels == 1
    assert header.block_align == 2
    assert header.byte_rate == 22050 * 2


def test_mismatched_channel_lengths_rejected():
    with pytest.raises(ShapeMismatch):
        encode_wav([np.zeros(4), np.zeros(5)], 44100)


def test_zero_channels_rejected():
    with pytest.raises(ShapeMismatch):
        encode_wav([], 44100)


def test_non_positive_sample_rate_rejected():
    with pytest.raises(ProcessingError):
        encode_wav([np.zeros(4)], 0)


def test_parse_rejects_non_wav():
    with pytest.raises(DecodeError):
        parse_wav_header(b"not a wav file at all, definitely not one, no sir!")

    with pytest.raises(DecodeError):
        parse_wav_header(b"RIFF")


def test_encode_decoded_audio():
    audio = DecodedAudio(16000, (np.zeros(8), np.ones(8)))
    data = encode_decoded(audio)

    assert parse_wav_header(data).num_channels == 2
    assert _payload(data)[1::2].tolist() == [32767] * 8


def test_nan_samples_encode_as_silence():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        values = float_to_int16([np.nan, 0.5, np.inf, -np.inf])

    assert values.tolist() == [0, 16383, 32767, -32768]
