from pathlib import Path

import pytest

from bandsplit.models.registry import get_available_modes, get_separator_class
from bandsplit.utils import compute_bytes_hash, derive_output_name


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("My Song.wav", "My_Song"),
        ("  live @ venue (2024).mp4", "live_venue_2024"),
        ("take-2__final.flac", "take-2_final"),
        ("???.wav", "unnamed"),
    ],
)
def test_derive_output_name(filename, expected):
    assert derive_output_name(Path(filename)) == expected


def test_bytes_hash_is_stable():
    assert compute_bytes_hash(b"abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_registry_modes():
    assert get_available_modes() == ["channel_split", "band_split"]
    assert get_separator_class("band_split").__name__ == "BandSplitSeparator"
