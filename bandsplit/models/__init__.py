"""bandsplit separation models package."""

from .atomic_models import BandSplitSeparator, ChannelSplitSeparator
from .audio_separator_base import AudioSeparator, TrackPlan
from .metadata import SeparationMetadata, TrackMetadata
from .protocols import (
    DecodedAudio,
    PipelineState,
    SeparationMode,
    SeparationResult,
    Track,
    TrackKind,
)
from .registry import get_available_modes, get_separator_class

__all__ = [
    "AudioSeparator",
    "BandSplitSeparator",
    "ChannelSplitSeparator",
    "DecodedAudio",
    "PipelineState",
    "SeparationMetadata",
    "SeparationMode",
    "SeparationResult",
    "Track",
    "TrackKind",
    "TrackMetadata",
    "TrackPlan",
    "get_available_modes",
    "get_separator_class",
]
