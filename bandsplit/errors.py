"""Exception types raised by the separation pipeline."""

from __future__ import annotations


class BandsplitError(Exception):
    """Base class for all bandsplit errors."""


class DecodeError(BandsplitError):
    """Input bytes could not be parsed as audio."""


class AudioExtractionError(DecodeError):
    """Audio could not be extracted from a video container."""


class ShapeMismatch(BandsplitError, ValueError):
    """Channel arrays disagree on length, or no channels were given."""


class ProcessingError(BandsplitError):
    """A filter or encode step failed. The whole request is aborted."""


class InsufficientSamples(BandsplitError, ValueError):
    """Too few samples for the requested number of waveform buckets."""

    def __init__(self, length: int, buckets: int):
        self.length = length
        self.buckets = buckets
        super().__init__(
            f"Cannot summarize {length} samples into {buckets} buckets "
            + "(need at least one sample per bucket)"
        )


class SeparationCancelled(BandsplitError):
    """The caller cancelled the request before it completed."""


class HandleReleased(BandsplitError):
    """A track or result was used after release()."""
