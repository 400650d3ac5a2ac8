"""High-level separation pipeline: decode, split into tracks, encode."""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path

from .analysis.mock import MockAnalysisService
from .config import Config, get_config
from .errors import ProcessingError, SeparationCancelled
from .models.protocols import PipelineState, SeparationMode, SeparationResult
from .models.registry import get_separator_class
from .processor.audio_utils import VIDEO_EXTENSIONS, decode_audio, extract_audio
from .utils import compute_bytes_hash

logger = logging.getLogger(__name__)


class AudioSeparationPipeline:
    """Runs separation requests and tracks their state.

    States move IDLE -> DECODING -> FILTERING -> ENCODING -> READY, or to
    FAILED from any step. A pipeline instance handles one request at a time;
    create one per concurrent request (they share no mutable state).
    """

    config: Config
    analysis_service: MockAnalysisService | None
    state: PipelineState

    def __init__(
        self,
        config: Config | None = None,
        analysis_service: MockAnalysisService | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Configuration to use (defaults to the global config)
            analysis_service: When given, fills SeparationResult.quality_score
        """
        self.config = config or get_config()
        self.analysis_service = analysis_service
        self.state = PipelineState.IDLE

    def _set_state(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s -> %s", self.state.value, state.value)
        self.state = state

    def separate(
        self,
        input_bytes: bytes,
        mode: SeparationMode | str = SeparationMode.BAND_SPLIT,
        cancel_event: threading.Event | None = None,
    ) -> SeparationResult:
        """Decode input_bytes and split it into tracks.

        Args:
            input_bytes: Raw bytes of an audio container
            mode: channel_split or band_split
            cancel_event: When set before encoding begins, the request is abandoned

        Returns:
            SeparationResult owning every track; release it when done

        Raises:
            DecodeError: If the input cannot be decoded
            ProcessingError: If any filter or encode step fails
            InsufficientSamples: If the input is shorter than the waveform length
            SeparationCancelled: If cancel_event was set
        """
        self.state = PipelineState.IDLE
        separator = get_separator_class(mode)(self.config)

        try:
            if cancel_event is not None and cancel_event.is_set():
                raise SeparationCancelled("Separation cancelled before decoding")

            self._set_state(PipelineState.DECODING)
            audio = decode_audio(input_bytes)
            logger.info(
                "Separating %.2fs of audio (%d channel(s), %d Hz) with %s",
                audio.duration_seconds,
                audio.number_of_channels,
                audio.sample_rate,
                separator.model_name,
            )

            tracks = separator.separate(audio, cancel_event=cancel_event, on_state=self._set_state)
            result = SeparationResult(
                tracks=tracks,
                mode=SeparationMode(mode),
                sample_rate=audio.sample_rate,
                total_duration_seconds=audio.duration_seconds,
                original_handle=compute_bytes_hash(input_bytes),
            )

            if self.analysis_service is not None:
                try:
                    result.quality_score = self.analysis_service.estimate_quality(result)
                except Exception as e:
                    result.release()
                    raise ProcessingError(f"Quality estimation failed: {e}") from e

        except BaseException:
            self._set_state(PipelineState.FAILED)
            raise

        self._set_state(PipelineState.READY)
        logger.info(f"  ✓ Separation complete! Produced {len(result.tracks)} track(s)")
        return result

    async def separate_async(
        self,
        input_bytes: bytes,
        mode: SeparationMode | str = SeparationMode.BAND_SPLIT,
        cancel_event: threading.Event | None = None,
    ) -> SeparationResult:
        """Run separate() in a worker thread.

        Cancelling the awaiting task sets the cancel event, so the worker
        stops at its next checkpoint and releases any partial work. A result
        that completes after cancellation is released as well.
        """
        event = cancel_event or threading.Event()
        lock = threading.Lock()
        finished: list[SeparationResult] = []

        def _run() -> SeparationResult:
            result = self.separate(input_bytes, mode, event)
            with lock:
                finished.append(result)
                # Nobody is waiting for a result that finished after cancellation
                if event.is_set():
                    result.release()
            return result

        try:
            return await asyncio.to_thread(_run)
        except asyncio.CancelledError:
            with lock:
                event.set()
                for result in finished:
                    result.release()
            raise

    def separate_file(
        self,
        input_path: Path,
        mode: SeparationMode | str = SeparationMode.BAND_SPLIT,
        cancel_event: threading.Event | None = None,
    ) -> SeparationResult:
        """Separate an audio file, extracting the audio track first for video files.

        Raises:
            AudioExtractionError: If audio cannot be extracted from a video file
            OSError: If the file cannot be read
        """
        self.state = PipelineState.IDLE
        try:
            if input_path.suffix.lower() in VIDEO_EXTENSIONS:
                logger.info(f"Extracting audio from {input_path.name}...")
                data = extract_audio(input_path)
            else:
                data = input_path.read_bytes()
        except BaseException:
            self._set_state(PipelineState.FAILED)
            raise
        return self.separate(data, mode, cancel_event)


def separate(
    input_bytes: bytes,
    mode: SeparationMode | str = SeparationMode.BAND_SPLIT,
    config: Config | None = None,
) -> SeparationResult:
    """Separate input_bytes with a fresh pipeline."""
    return AudioSeparationPipeline(config).separate(input_bytes, mode)
