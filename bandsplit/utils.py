"""Shared utility functions."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path


def compute_bytes_hash(data: bytes) -> str:
    """SHA256 hex digest of an input buffer, used as its opaque handle."""
    return hashlib.sha256(data).hexdigest()


def derive_output_name(file_path: Path) -> str:
    """Folder name for a separation's output, derived from the input filename.

    Args:
        file_path: Path to the input audio or video file

    Returns:
        The file stem with runs of characters other than letters, digits,
        "-" and "_" collapsed to a single underscore, or "unnamed" if
        nothing is left
    """
    name = re.sub(r"[^\w-]+", "_", file_path.stem)
    name = re.sub(r"_{2,}", "_", name).strip("_")
    return name or "unnamed"
