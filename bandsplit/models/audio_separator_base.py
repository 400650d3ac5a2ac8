"""Abstract base class for separators that derive tracks from decoded audio."""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

import numpy as np

from ..config import Config
from ..errors import InsufficientSamples, ProcessingError, SeparationCancelled
from ..processor.waveform_generator import summarize
from .protocols import DecodedAudio, FloatArray, PipelineState, Track, TrackKind

logger = logging.getLogger(__name__)

StateCallback = Callable[[PipelineState], None]


@dataclass(frozen=True)
class TrackPlan:
    """How to produce one output track.

    render returns the track's per-channel samples. When waveform_samples is
    set the waveform is summarized from it instead of the rendered channel 0.
    """

    id: str
    display_name: str
    kind: TrackKind
    render: Callable[[], tuple[FloatArray, ...]]
    waveform_samples: FloatArray | None = None


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SeparationCancelled("Separation cancelled")


class AudioSeparator(ABC):
    """Abstract base class for separators.

    Subclasses implement:
    - model_name: identifier of the separation mode
    - plan: the ordered list of tracks to derive from an input

    separate() runs the plans in two phases on a thread pool: first every
    track is rendered (filtered) and summarized, then every track is encoded.
    Output order always follows plan order.
    """

    config: Config

    def __init__(self, config: Config):
        self.config = config

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of this separator."""
        ...

    @abstractmethod
    def plan(self, audio: DecodedAudio) -> list[TrackPlan]:
        """Describe the tracks to derive from audio, in output order.

        Raises:
            ProcessingError: If a track cannot be produced for this input
        """
        ...

    def _worker_count(self, jobs: int) -> int:
        limit = self.config.max_workers or os.cpu_count() or 1
        return max(1, min(limit, jobs))

    def _render_track(
        self, plan: TrackPlan, sample_rate: int, cancel_event: threading.Event | None
    ) -> Track:
        _check_cancelled(cancel_event)
        try:
            samples = plan.render()
            waveform_source = (
                plan.waveform_samples if plan.waveform_samples is not None else samples[0]
            )
            waveform = summarize(waveform_source, self.config.waveform_buckets)
            return Track(
                id=plan.id,
                display_name=plan.display_name,
                kind=plan.kind,
                samples=samples,
                sample_rate=sample_rate,
                waveform=waveform,
            )
        except (ProcessingError, InsufficientSamples, SeparationCancelled):
            raise
        except Exception as e:
            raise ProcessingError(f"Track '{plan.id}' failed: {e}") from e

    @staticmethod
    def _encode_track(track: Track) -> Track:
        try:
            encoded = track.encoded_bytes
        except ProcessingError:
            raise
        except Exception as e:
            raise ProcessingError(f"Encoding track '{track.id}' failed: {e}") from e
        logger.debug("Encoded %s (%d bytes)", track.id, len(encoded))
        return track

    def _run_all(self, pool: ThreadPoolExecutor, futures: list[Future[Track]]) -> list[Track]:
        """Collect results in submission order, releasing finished work on failure."""
        try:
            return [future.result() for future in futures]
        except BaseException:
            pool.shutdown(wait=True, cancel_futures=True)
            for future in futures:
                if future.done() and not future.cancelled() and future.exception() is None:
                    future.result().release()
            raise

    def separate(
        self,
        audio: DecodedAudio,
        cancel_event: threading.Event | None = None,
        on_state: StateCallback | None = None,
    ) -> list[Track]:
        """Derive, summarize and encode every planned track.

        Args:
            audio: Decoded input
            cancel_event: Checked before each filter step and before encoding
            on_state: Called on entering the FILTERING and ENCODING states

        Returns:
            Tracks in plan order, each already encoded

        Raises:
            ProcessingError: If any track fails; no tracks are returned
            InsufficientSamples: If the input is shorter than the waveform
            SeparationCancelled: If cancel_event was set before encoding began
        """
        plans = self.plan(audio)
        if not plans:
            raise ProcessingError(f"{self.model_name} produced no tracks for this input")

        workers = self._worker_count(len(plans))
        logger.debug("%s: %d track(s) on %d worker(s)", self.model_name, len(plans), workers)

        if on_state is not None:
            on_state(PipelineState.FILTERING)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bandsplit") as pool:
            futures = [
                pool.submit(self._render_track, plan, audio.sample_rate, cancel_event)
                for plan in plans
            ]
            tracks = self._run_all(pool, futures)

            try:
                _check_cancelled(cancel_event)
                if on_state is not None:
                    on_state(PipelineState.ENCODING)
                tracks = self._run_all(
                    pool, [pool.submit(self._encode_track, track) for track in tracks]
                )
            except BaseException:
                for track in tracks:
                    track.release()
                raise

        return tracks


def as_channels(*channels: np.ndarray) -> tuple[FloatArray, ...]:
    """Helper for render callables: coerce arrays to float32 channel tuples."""
    return tuple(np.asarray(channel, dtype=np.float32) for channel in channels)
