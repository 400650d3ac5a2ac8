import numpy as np
import pytest

from bandsplit.errors import HandleReleased, ShapeMismatch
from bandsplit.models.protocols import (
    DecodedAudio,
    SeparationMode,
    SeparationResult,
    Track,
    TrackKind,
)
from bandsplit.processor.wav_encoder import HEADER_SIZE, parse_wav_header


def _track(track_id="channel-0", length=100, channels=1, sample_rate=1000):
    return Track(
        id=track_id,
        display_name="Main audio",
        kind=TrackKind.CHANNEL,
        samples=[np.zeros(length)] * channels,
        sample_rate=sample_rate,
        waveform=[0.0] * 10,
    )


def test_decoded_audio_properties():
    audio = DecodedAudio(48000, (np.zeros(24000), np.ones(24000)))

    assert audio.number_of_channels == 2
    assert audio.length_in_samples == 24000
    assert audio.duration_seconds == pytest.approx(0.5)
    assert audio.channel_data[0].dtype == np.float32


def test_decoded_audio_rejects_mismatched_channels():
    with pytest.raises(ShapeMismatch):
        DecodedAudio(44100, (np.zeros(10), np.zeros(11)))


def test_decoded_audio_rejects_bad_input():
    with pytest.raises(ShapeMismatch):
        DecodedAudio(44100, ())
    with pytest.raises(ShapeMismatch):
        DecodedAudio(0, (np.zeros(10),))


def test_decoded_audio_is_read_only_copy():
    source = np.zeros(10, dtype=np.float32)
    audio = DecodedAudio(8000, (source,))
    source[0] = 1.0

    assert audio.channel_data[0][0] == 0.0
    with pytest.raises(ValueError):
        audio.channel_data[0][0] = 1.0


def test_from_interleaved_splits_columns():
    frames = np.array([[0.1, -0.1], [0.2, -0.2], [0.3, -0.3]])
    audio = DecodedAudio.from_interleaved(frames, 8000)

    assert audio.number_of_channels == 2
    np.testing.assert_allclose(audio.channel_data[1], [-0.1, -0.2, -0.3], atol=1e-7)
    assert audio.channel(1).number_of_channels == 1


def test_from_interleaved_mono():
    audio = DecodedAudio.from_interleaved(np.zeros(5), 8000)
    assert audio.number_of_channels == 1


def test_track_encodes_lazily_and_caches():
    track = _track(length=100, channels=2, sample_rate=8000)

    data = track.encoded_bytes
    assert data is track.encoded_bytes
    assert len(data) == HEADER_SIZE + 100 * 2 * 2
    assert parse_wav_header(data).num_channels == 2


def test_released_track_refuses_access():
    track = _track()
    track.release()
    track.release()

    assert track.released
    with pytest.raises(HandleReleased):
        _ = track.samples
    with pytest.raises(HandleReleased):
        _ = track.encoded_bytes


def test_track_kind_for_recipe():
    assert TrackKind.for_recipe("vocals") is TrackKind.VOCALS
    assert TrackKind.for_recipe("sub-bass") is TrackKind.BAND


def test_result_requires_tracks():
    with pytest.raises(ShapeMismatch):
        SeparationResult(
            tracks=[],
            mode=SeparationMode.CHANNEL_SPLIT,
            sample_rate=1000,
            total_duration_seconds=0.1,
            original_handle="abc",
        )


def test_result_requires_equal_track_lengths():
    with pytest.raises(ShapeMismatch):
        SeparationResult(
            tracks=[_track("a", length=100), _track("b", length=99)],
            mode=SeparationMode.CHANNEL_SPLIT,
            sample_rate=1000,
            total_duration_seconds=0.1,
            original_handle="abc",
        )


def test_result_context_manager_releases_tracks():
    tracks = [_track("a"), _track("b")]
    with SeparationResult(
        tracks=tracks,
        mode=SeparationMode.CHANNEL_SPLIT,
        sample_rate=1000,
        total_duration_seconds=0.1,
        original_handle="abc",
    ) as result:
        assert result.track_ids() == ["a", "b"]
        assert result.get_track("b") is tracks[1]
        assert result.get_track("missing") is None

    assert result.released
    assert all(track.released for track in tracks)
    with pytest.raises(HandleReleased):
        result.to_metadata()


def test_result_metadata():
    result = SeparationResult(
        tracks=[_track("a")],
        mode=SeparationMode.CHANNEL_SPLIT,
        sample_rate=1000,
        total_duration_seconds=0.1,
        original_handle="abc",
    )
    metadata = result.to_metadata()

    assert metadata.mode == "channel_split"
    assert metadata.tracks[0].id == "a"
    assert metadata.tracks[0].encoded_size_bytes == HEADER_SIZE + 200
    assert metadata.tracks[0].measured_lufs is None
