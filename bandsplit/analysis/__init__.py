"""Simulated analysis service boundary."""

from .mock import (
    AIDetectionResult,
    ManipulationDetectionResult,
    ManipulationEffect,
    MockAnalysisService,
    RandomMockAnalysisService,
    UnavailableAnalysisService,
    VoiceCharacteristics,
    VoiceMatchResult,
    VoicePrint,
    compare_voices,
)

__all__ = [
    "AIDetectionResult",
    "ManipulationDetectionResult",
    "ManipulationEffect",
    "MockAnalysisService",
    "RandomMockAnalysisService",
    "UnavailableAnalysisService",
    "VoiceCharacteristics",
    "VoiceMatchResult",
    "VoicePrint",
    "compare_voices",
]
