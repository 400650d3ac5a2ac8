"""Audio channel and frequency-band separation."""

__version__ = "0.1.0"

from .config import Config, FilterKind, FilterSpec, FilterTopology, get_config, load_config
from .errors import (
    AudioExtractionError,
    BandsplitError,
    DecodeError,
    HandleReleased,
    InsufficientSamples,
    ProcessingError,
    SeparationCancelled,
    ShapeMismatch,
)
from .models.protocols import DecodedAudio, PipelineState, SeparationMode, SeparationResult, Track
from .processor.audio_utils import decode_audio, extract_audio
from .processor.filters import apply_filter, apply_high_pass, apply_low_pass
from .processor.waveform_generator import summarize
from .processor.wav_encoder import encode_wav
from .separator import AudioSeparationPipeline, separate

__all__ = [
    "AudioExtractionError",
    "AudioSeparationPipeline",
    "BandsplitError",
    "Config",
    "DecodeError",
    "DecodedAudio",
    "FilterKind",
    "FilterSpec",
    "FilterTopology",
    "HandleReleased",
    "InsufficientSamples",
    "PipelineState",
    "ProcessingError",
    "SeparationCancelled",
    "SeparationMode",
    "SeparationResult",
    "ShapeMismatch",
    "Track",
    "__version__",
    "apply_filter",
    "apply_high_pass",
    "apply_low_pass",
    "decode_audio",
    "encode_wav",
    "extract_audio",
    "get_config",
    "load_config",
    "separate",
    "summarize",
]
