"""Channel and frequency-band separators."""

from __future__ import annotations

import logging
from functools import partial

from ..config import FilterKind, FilterSpec, FilterTopology, WaveformSource
from ..processor.filters import (
    MONO_SPLIT_CUTOFF_HZ,
    apply_filter,
    apply_high_pass,
    apply_low_pass,
)
from .audio_separator_base import AudioSeparator, TrackPlan, as_channels
from .protocols import DecodedAudio, FloatArray, TrackKind

logger = logging.getLogger(__name__)


class ChannelSplitSeparator(AudioSeparator):
    """One mono track per physical channel.

    Mono input yields a single "Main audio" track. With
    config.mono_frequency_split enabled, mono input additionally gets
    low/high frequency tracks split at 300 Hz with the single-pole filters.
    """

    @property
    def model_name(self) -> str:
        return "channel_split"

    def plan(self, audio: DecodedAudio) -> list[TrackPlan]:
        channels = audio.channel_data
        plans = [
            TrackPlan(
                id=f"channel-{index}",
                display_name="Main audio" if len(channels) == 1 else f"Channel {index + 1}",
                kind=TrackKind.CHANNEL,
                render=partial(as_channels, channel),
            )
            for index, channel in enumerate(channels)
        ]

        if len(channels) == 1 and self.config.mono_frequency_split:
            # Fails loudly when 300 Hz is above Nyquist for this input
            FilterSpec(kind=FilterKind.LOWPASS, cutoff_hz=MONO_SPLIT_CUTOFF_HZ).validate_for(
                audio.sample_rate
            )
            mono = channels[0]
            plans.append(
                TrackPlan(
                    id="low-freq",
                    display_name="Low frequencies (deep voices)",
                    kind=TrackKind.LOW_FREQUENCY,
                    render=lambda: (apply_low_pass(mono, audio.sample_rate, MONO_SPLIT_CUTOFF_HZ),),
                )
            )
            plans.append(
                TrackPlan(
                    id="high-freq",
                    display_name="High frequencies (sharp voices)",
                    kind=TrackKind.HIGH_FREQUENCY,
                    render=lambda: (
                        apply_high_pass(mono, audio.sample_rate, MONO_SPLIT_CUTOFF_HZ),
                    ),
                )
            )

        return plans


class BandSplitSeparator(AudioSeparator):
    """Cosmetic five-way split (vocals, instrumental, drums, bass, other).

    Every band is filtered from channel 0 of the input; other channels are
    ignored and every output track is mono. The bands come from the selected
    recipe set in the configuration and are frequency bands, not isolated
    sources.
    """

    @property
    def model_name(self) -> str:
        return "band_split"

    def plan(self, audio: DecodedAudio) -> list[TrackPlan]:
        recipes = self.config.get_recipes()
        for recipe in recipes:
            recipe.filter.validate_for(audio.sample_rate)

        if audio.number_of_channels > 1:
            logger.info(
                "Band split uses channel 0 of %d; other channels are ignored",
                audio.number_of_channels,
            )

        reference = audio.channel_data[0]
        waveform_samples = (
            reference if self.config.waveform_source is WaveformSource.ORIGINAL else None
        )
        topology = self.config.filter_topology

        return [
            TrackPlan(
                id=recipe.id,
                display_name=recipe.display_name,
                kind=TrackKind.for_recipe(recipe.id),
                render=partial(
                    self._render_band, recipe.filter, reference, audio.sample_rate, topology
                ),
                waveform_samples=waveform_samples,
            )
            for recipe in recipes
        ]

    @staticmethod
    def _render_band(
        spec: FilterSpec, reference: FloatArray, sample_rate: int, topology: FilterTopology
    ) -> tuple[FloatArray, ...]:
        return (apply_filter(spec, reference, sample_rate, topology),)
