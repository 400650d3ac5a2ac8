# pyright: reportExplicitAny=false
"""Configuration management for bandsplit."""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import ProcessingError

DEFAULT_CONFIG_PATH = "bandsplit.yaml"
CONFIG_PATH_ENV_VAR = "BANDSPLIT_CONFIG"


class AudioFormat(str, Enum):
    """Supported audio output formats."""

    WAV = "wav"
    OPUS = "opus"
    AAC = "aac"


class FilterKind(str, Enum):
    """Frequency-selective filter shapes used by band recipes."""

    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    NOTCH = "notch"


class FilterTopology(str, Enum):
    """How a FilterSpec is realised.

    SINGLE_POLE reproduces the first-order recurrences exactly, approximating
    band-pass and notch from low/high-pass stages. BIQUAD uses second-order
    sections and honours the resonance (Q) of every spec.
    """

    SINGLE_POLE = "single_pole"
    BIQUAD = "biquad"


class WaveformSource(str, Enum):
    """Which samples a band-split track's waveform summary is computed from."""

    FILTERED = "filtered"
    ORIGINAL = "original"


class OutputConfig(BaseModel):
    """Output format configuration."""

    format: AudioFormat = AudioFormat.WAV
    bitrate: int = 192

    @field_validator("bitrate")
    @classmethod
    def validate_bitrate(cls, v: int) -> int:
        """Validate bitrate is within acceptable range."""
        if not 32 <= v <= 256:
            raise ValueError(f"Bitrate must be between 32 and 256 kbps, got {v}")
        return v

    def convert(self, source_path: Path, dest_path: Path) -> Path:
        """Convert a WAV file to the configured format using ffmpeg.

        Args:
            source_path: WAV file written by the encoder
            dest_path: Destination path (extension should match the format)

        Returns:
            The destination path
        """
        from .processor.audio_utils import convert_audio

        codec = {AudioFormat.OPUS: "libopus", AudioFormat.AAC: "aac"}.get(self.format)
        bitrate = f"{self.bitrate}k" if codec is not None else None
        convert_audio(source_path, dest_path, bitrate=bitrate, codec=codec)
        return dest_path


class FilterSpec(BaseModel):
    """A named band-extraction recipe's filter parameters."""

    kind: FilterKind
    cutoff_hz: float = Field(..., gt=0, description="Corner or centre frequency in Hz")
    resonance: float = Field(default=1.0, gt=0, description="Q; ignored by single-pole stages")

    def validate_for(self, sample_rate: int) -> None:
        """Check the cutoff against the Nyquist frequency of sample_rate.

        Raises:
            ProcessingError: If the filter would be degenerate at this rate
        """
        if sample_rate <= 0:
            raise ProcessingError(f"Sample rate must be positive, got {sample_rate}")
        nyquist = sample_rate / 2
        if not 0 < self.cutoff_hz < nyquist:
            raise ProcessingError(
                f"{self.kind.value} cutoff {self.cutoff_hz} Hz must be between 0 and "
                + f"the Nyquist frequency ({nyquist} Hz)"
            )


class BandRecipe(BaseModel):
    """One output track of a band split: identifier, label and filter."""

    id: str = Field(..., min_length=1)
    display_name: str
    filter: FilterSpec


DEFAULT_BAND_RECIPES: tuple[BandRecipe, ...] = (
    BandRecipe(
        id="vocals",
        display_name="Vocals",
        filter=FilterSpec(kind=FilterKind.BANDPASS, cutoff_hz=1000.0, resonance=1.0),
    ),
    BandRecipe(
        id="instrumental",
        display_name="Instrumental",
        filter=FilterSpec(kind=FilterKind.NOTCH, cutoff_hz=1000.0, resonance=1.0),
    ),
    BandRecipe(
        id="drums",
        display_name="Drums",
        filter=FilterSpec(kind=FilterKind.HIGHPASS, cutoff_hz=200.0, resonance=0.7),
    ),
    BandRecipe(
        id="bass",
        display_name="Bass",
        filter=FilterSpec(kind=FilterKind.LOWPASS, cutoff_hz=250.0, resonance=1.0),
    ),
    BandRecipe(
        id="other",
        display_name="Other",
        filter=FilterSpec(kind=FilterKind.HIGHPASS, cutoff_hz=3000.0, resonance=1.0),
    ),
)


def _default_recipes() -> dict[str, list[BandRecipe]]:
    return {"default": [recipe.model_copy() for recipe in DEFAULT_BAND_RECIPES]}


class Config(BaseModel):
    """Global configuration."""

    waveform_buckets: int = Field(default=100, ge=1, description="Waveform summary length")
    max_workers: int | None = Field(
        default=None, ge=1, description="Worker threads for filter/encode steps (None = CPU count)"
    )
    filter_topology: FilterTopology = FilterTopology.SINGLE_POLE
    waveform_source: WaveformSource = WaveformSource.FILTERED
    mono_frequency_split: bool = Field(
        default=False, description="Append low/high frequency tracks to mono channel splits"
    )
    recipe: str = Field(default="default", description="Recipe set used by band splits")
    recipes: dict[str, list[BandRecipe]] = Field(default_factory=_default_recipes)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def validate_recipes(self) -> Config:
        """Validate that the selected recipe set exists and ids are unique."""
        if self.recipe not in self.recipes:
            available = ", ".join(sorted(self.recipes)) or "(none)"
            raise ValueError(f"Unknown recipe set '{self.recipe}'. Available: {available}")

        for name, recipes in self.recipes.items():
            if not recipes:
                raise ValueError(f"Recipe set '{name}' is empty")
            ids = [recipe.id for recipe in recipes]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(
                    f"Recipe set '{name}' has duplicate track ids: {', '.join(duplicates)}"
                )

        return self

    @classmethod
    def _collect_required_env_vars(cls, data: Any, collected: set[str] | None = None) -> set[str]:
        """Recursively collect all ${VAR_NAME} references from config data.

        Args:
            data: YAML data structure (dict, list, str, etc.)
            collected: Set of variable names found so far

        Returns:
            Set of all environment variable names referenced in config
        """
        if collected is None:
            collected = set()

        if isinstance(data, dict):
            for v in data.values():
                cls._collect_required_env_vars(v, collected)
        elif isinstance(data, list):
            for item in data:
                cls._collect_required_env_vars(item, collected)
        elif isinstance(data, str):
            pattern = r"\$\{([^}]+)\}"
            matches = re.findall(pattern, data)
            collected.update(matches)

        return collected

    @classmethod
    def _substitute_env_vars(cls, data: Any) -> Any:
        """Recursively substitute ${VAR_NAME} with environment variables.

        Raises:
            ValueError: If referenced environment variable is not set
        """
        if isinstance(data, dict):
            return {k: cls._substitute_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.getenv(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' referenced in config but not set"
                    )
                return value

            return re.sub(pattern, replace_var, data)
        else:
            return data

    @classmethod
    def load(cls, config_path: str | Path = DEFAULT_CONFIG_PATH) -> Config:
        """Load configuration from YAML file.

        Note: Assumes environment variables are already loaded (e.g., via load_dotenv()).
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, "r") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        missing_vars = [
            var for var in cls._collect_required_env_vars(data) if var not in os.environ
        ]
        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(sorted(missing_vars))}\n"
                + "Please set these in your .env file or environment."
            )

        data = cls._substitute_env_vars(data)

        # Custom recipe sets are added alongside the built-in "default" set
        if "recipes" in data:
            recipes = _default_recipes()
            recipes.update(data["recipes"] or {})
            data["recipes"] = recipes

        return cls.model_validate(data)

    def get_recipes(self, name: str | None = None) -> list[BandRecipe]:
        """Get a recipe set by name (defaults to the selected one)."""
        name = name or self.recipe
        recipes = self.recipes.get(name)
        if recipes is None:
            raise ValueError(f"Unknown recipe set '{name}'")
        return recipes


# Global config instance
_config: Config | None = None


def load_config(config_path: str | Path | None = None) -> Config:
    """Load and cache the global configuration.

    Without an explicit path, $BANDSPLIT_CONFIG or ./bandsplit.yaml is used if
    present; otherwise the built-in defaults apply.
    """
    global _config
    if config_path is None:
        config_path = os.getenv(CONFIG_PATH_ENV_VAR)
        if config_path is None and Path(DEFAULT_CONFIG_PATH).exists():
            config_path = DEFAULT_CONFIG_PATH

    _config = Config.load(config_path) if config_path is not None else Config()
    return _config


def get_config() -> Config:
    """Get the cached configuration (loads if not already loaded)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
