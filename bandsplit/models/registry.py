"""Registry mapping separation modes to separator classes."""

from __future__ import annotations

from types import MappingProxyType

from .atomic_models import BandSplitSeparator, ChannelSplitSeparator
from .audio_separator_base import AudioSeparator
from .protocols import SeparationMode

_SEPARATOR_REGISTRY_DICT: dict[SeparationMode, type[AudioSeparator]] = {
    SeparationMode.CHANNEL_SPLIT: ChannelSplitSeparator,
    SeparationMode.BAND_SPLIT: BandSplitSeparator,
}

# Frozen mapping for immutability and type safety
SEPARATOR_REGISTRY: MappingProxyType[SeparationMode, type[AudioSeparator]] = MappingProxyType(
    _SEPARATOR_REGISTRY_DICT
)


def get_separator_class(mode: SeparationMode | str) -> type[AudioSeparator]:
    """Get separator class by mode with validation.

    Args:
        mode: A SeparationMode or its string value (e.g. "band_split")

    Raises:
        ValueError: If mode is not registered
    """
    try:
        key = SeparationMode(mode)
    except ValueError:
        available = ", ".join(m.value for m in SEPARATOR_REGISTRY)
        raise ValueError(f"Unknown separation mode '{mode}'. Available modes: {available}")
    return SEPARATOR_REGISTRY[key]


def get_available_modes() -> list[str]:
    """Get list of all registered mode names."""
    return [mode.value for mode in SEPARATOR_REGISTRY]
