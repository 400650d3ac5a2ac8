"""Simulated analysis services.

Voice matching, manipulation detection, AI-content detection and quality
estimation are not implemented. They sit behind the MockAnalysisService
protocol so a real implementation can replace them without touching
callers. RandomMockAnalysisService fabricates plausible values from a seeded
generator. UnavailableAnalysisService refuses every call.
"""

from __future__ import annotations

import math
import random
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from ..models.protocols import SeparationResult

VOICE_FEATURES = 64
TIMBRE_COEFFICIENTS = 13
VOICE_MATCH_THRESHOLD = 65.0


class VoiceCharacteristics(BaseModel):
    pitch: float  # Hz
    tempo: float  # Speed multiplier
    energy: float = Field(ge=0, le=1)
    timbre: list[float]


class VoicePrint(BaseModel):
    id: str
    features: list[float]
    characteristics: VoiceCharacteristics


class VoiceMatchResult(BaseModel):
    is_match: bool
    confidence: float
    similarity: float  # Percent
    details: str


class ManipulationEffect(BaseModel):
    type: str
    severity: str  # "low", "medium" or "high"
    location: str
    confidence: float
    description: str


class ManipulationDetectionResult(BaseModel):
    is_manipulated: bool
    manipulation_percentage: float
    confidence: float
    detected_effects: list[ManipulationEffect]
    original_estimate: str


class AIDetectionResult(BaseModel):
    is_ai_generated: bool
    confidence: float
    indicators: list[str]


@runtime_checkable
class MockAnalysisService(Protocol):
    """Interface of the simulated analysis services."""

    def extract_voice_print(self, audio: bytes) -> VoicePrint: ...

    def compare_voices(self, first: VoicePrint, second: VoicePrint) -> VoiceMatchResult: ...

    def detect_audio_manipulation(self, audio: bytes) -> ManipulationDetectionResult: ...

    def detect_ai_generation(self, media: bytes) -> AIDetectionResult: ...

    def estimate_quality(self, result: SeparationResult) -> float: ...


def compare_voices(first: VoicePrint, second: VoicePrint) -> VoiceMatchResult:
    """Weighted similarity between two voice prints.

    Features count 40%, pitch 20%, tempo 10%, energy 10% and timbre 20%.
    A similarity of 65% or more is a match.
    """
    distance = math.dist(first.features, second.features)
    pitch_diff = abs(first.characteristics.pitch - second.characteristics.pitch)
    tempo_diff = abs(first.characteristics.tempo - second.characteristics.tempo)
    energy_diff = abs(first.characteristics.energy - second.characteristics.energy)
    timbre_distance = math.dist(first.characteristics.timbre, second.characteristics.timbre)

    # Features and timbre coefficients lie in [-1, 1]
    feature_similarity = (1 - distance / math.sqrt(len(first.features) * 4)) * 100
    pitch_similarity = max(0.0, (1 - pitch_diff / 200) * 100)
    tempo_similarity = max(0.0, (1 - tempo_diff / 2) * 100)
    energy_similarity = (1 - energy_diff) * 100
    timbre_similarity = (1 - timbre_distance / math.sqrt(len(first.characteristics.timbre) * 4)) * 100

    similarity = (
        feature_similarity * 0.4
        + pitch_similarity * 0.2
        + tempo_similarity * 0.1
        + energy_similarity * 0.1
        + timbre_similarity * 0.2
    )

    if similarity >= 90:
        details = "Near-certain voice match: same speaker"
    elif similarity >= 80:
        details = "Very strong voice match: most likely the same speaker"
    elif similarity >= VOICE_MATCH_THRESHOLD:
        details = "Good voice match: probably the same speaker"
    elif similarity >= 45:
        details = "Moderate similarity: possibly the same speaker"
    else:
        details = "No voice match: different speakers"

    return VoiceMatchResult(
        is_match=similarity >= VOICE_MATCH_THRESHOLD,
        confidence=similarity / 100,
        similarity=similarity,
        details=details,
    )


_MANIPULATION_EFFECTS: list[tuple[str, str, str, float, str]] = [
    ("pitch_shift", "high", "entire clip", 0.87, "Pitch raised or lowered from the original"),
    ("time_stretch", "medium", "entire clip", 0.82, "Playback speed changed"),
    ("noise_reduction", "low", "entire clip", 0.79, "Background noise filter applied"),
    ("splice", "high", "multiple points", 0.85, "Segments cut and joined from different takes"),
    ("gain_change", "low", "entire clip", 0.76, "Overall level raised or lowered"),
    ("reverb", "medium", "selected passages", 0.81, "Echo or reverb added"),
    ("compression", "medium", "entire clip", 0.89, "Dynamic range compressed"),
    ("equalization", "high", "entire clip", 0.84, "Frequency balance (EQ) altered"),
    ("synthetic_voice", "high", "selected passages", 0.72, "Possible AI-generated passages"),
]


class RandomMockAnalysisService:
    """Fabricates analysis results from a seeded random generator.

    None of the returned values are measurements. With a fixed seed the
    sequence of results is reproducible, which is what tests rely on.
    """

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)
        self._prints = 0

    def extract_voice_print(self, audio: bytes) -> VoicePrint:
        rng = self._random
        self._prints += 1
        return VoicePrint(
            id=f"voice-{self._prints}",
            features=[rng.uniform(-1, 1) for _ in range(VOICE_FEATURES)],
            characteristics=VoiceCharacteristics(
                pitch=80 + rng.random() * 200,
                tempo=0.5 + rng.random() * 1.5,
                energy=rng.random(),
                timbre=[rng.uniform(-1, 1) for _ in range(TIMBRE_COEFFICIENTS)],
            ),
        )

    def compare_voices(self, first: VoicePrint, second: VoicePrint) -> VoiceMatchResult:
        return compare_voices(first, second)

    def detect_audio_manipulation(self, audio: bytes) -> ManipulationDetectionResult:
        rng = self._random
        percentage = rng.random() * 100
        is_manipulated = percentage > 20

        count = min(int(percentage / 100 * 6) + 1, len(_MANIPULATION_EFFECTS))
        effects = [
            ManipulationEffect(
                type=name,
                severity=severity,
                location=location,
                confidence=min(1.0, base + rng.random() * (1 - base)),
                description=description,
            )
            for name, severity, location, base, description in rng.sample(
                _MANIPULATION_EFFECTS, count
            )
        ]

        return ManipulationDetectionResult(
            is_manipulated=is_manipulated,
            manipulation_percentage=percentage,
            confidence=0.78 + rng.random() * 0.21,
            detected_effects=effects,
            original_estimate=(
                "Audio differs noticeably from the original"
                if is_manipulated
                else "Audio is close to the original"
            ),
        )

    def detect_ai_generation(self, media: bytes) -> AIDetectionResult:
        rng = self._random
        score = rng.random()
        indicators = ["spectral smoothness", "missing room tone", "uniform breath noise"]
        return AIDetectionResult(
            is_ai_generated=score > 0.5,
            confidence=0.6 + rng.random() * 0.35,
            indicators=rng.sample(indicators, rng.randint(0, len(indicators))),
        )

    def estimate_quality(self, result: SeparationResult) -> float:
        return 0.85 + self._random.random() * 0.14


class UnavailableAnalysisService:
    """Analysis service that refuses every request."""

    def _unavailable(self, name: str) -> NotImplementedError:
        return NotImplementedError(f"{name} is not implemented")

    def extract_voice_print(self, audio: bytes) -> VoicePrint:
        raise self._unavailable("Voice print extraction")

    def compare_voices(self, first: VoicePrint, second: VoicePrint) -> VoiceMatchResult:
        raise self._unavailable("Voice comparison")

    def detect_audio_manipulation(self, audio: bytes) -> ManipulationDetectionResult:
        raise self._unavailable("Manipulation detection")

    def detect_ai_generation(self, media: bytes) -> AIDetectionResult:
        raise self._unavailable("AI-content detection")

    def estimate_quality(self, result: SeparationResult) -> float:
        raise self._unavailable("Separation quality estimation")
