"""Frequency-band filter bank.

The single-pole stages reproduce these recurrences exactly, with
rc = 1 / (2 * pi * cutoff) and dt = 1 / sample_rate:

    low-pass   alpha = dt / (rc + dt)   y[i] = y[i-1] + alpha * (x[i] - y[i-1])
    high-pass  alpha = rc / (rc + dt)   y[i] = alpha * (y[i-1] + x[i] - x[i-1])

with y[0] = x[0] in both cases. Band-pass and notch have no single-pole form;
they are approximated from low/high-pass stages at constant-Q band edges
(see band_edges). These bands are cosmetic: they split a mix by frequency
and do not isolate real sources.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import numpy.typing as npt
from scipy import signal

from ..config import FilterKind, FilterSpec, FilterTopology
from ..errors import ProcessingError

logger = logging.getLogger(__name__)

# Corner frequency of the low/high split appended to mono channel splits
MONO_SPLIT_CUTOFF_HZ = 300.0


def _time_constants(sample_rate: int, cutoff_hz: float) -> tuple[float, float]:
    rc = 1.0 / (2 * math.pi * cutoff_hz)
    dt = 1.0 / sample_rate
    return rc, dt


def apply_low_pass(
    samples: npt.ArrayLike, sample_rate: int, cutoff_hz: float
) -> npt.NDArray[np.float32]:
    """Single-pole low-pass. Output has the same length as the input."""
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return np.zeros(0, dtype=np.float32)

    rc, dt = _time_constants(sample_rate, cutoff_hz)
    alpha = dt / (rc + dt)

    # y[i] = alpha * x[i] + (1 - alpha) * y[i-1]; zi makes y[0] == x[0]
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = signal.lfilter([alpha], [1.0, alpha - 1.0], x, zi=zi)
    return y.astype(np.float32)


def apply_high_pass(
    samples: npt.ArrayLike, sample_rate: int, cutoff_hz: float
) -> npt.NDArray[np.float32]:
    """Single-pole high-pass. Output has the same length as the input."""
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return np.zeros(0, dtype=np.float32)

    rc, dt = _time_constants(sample_rate, cutoff_hz)
    alpha = rc / (rc + dt)

    # y[i] = alpha * x[i] - alpha * x[i-1] + alpha * y[i-1]; zi makes y[0] == x[0]
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = signal.lfilter([alpha, -alpha], [1.0, -alpha], x, zi=zi)
    return y.astype(np.float32)


def band_edges(center_hz: float, resonance: float) -> tuple[float, float]:
    """Lower and upper edges of a constant-Q band around center_hz.

    The edges are geometric around the centre (low * high == center**2) and
    high - low == center / Q, so both stay positive for any Q > 0.
    """
    half = 1.0 / (2.0 * resonance)
    root = math.sqrt(1.0 + half * half)
    return center_hz * (root - half), center_hz * (root + half)


def _single_pole_band_pass(
    x: npt.NDArray[np.float64], sample_rate: int, spec: FilterSpec
) -> npt.NDArray[np.float32]:
    low, high = band_edges(spec.cutoff_hz, spec.resonance)
    high = min(high, sample_rate / 2 * 0.999)
    return apply_low_pass(apply_high_pass(x, sample_rate, low), sample_rate, high)


def _biquad(spec: FilterSpec, sample_rate: int) -> tuple[npt.NDArray[np.float64], ...]:
    match spec.kind:
        case FilterKind.LOWPASS:
            return signal.butter(2, spec.cutoff_hz, btype="lowpass", fs=sample_rate)
        case FilterKind.HIGHPASS:
            return signal.butter(2, spec.cutoff_hz, btype="highpass", fs=sample_rate)
        case FilterKind.BANDPASS:
            return signal.iirpeak(spec.cutoff_hz, spec.resonance, fs=sample_rate)
        case FilterKind.NOTCH:
            return signal.iirnotch(spec.cutoff_hz, spec.resonance, fs=sample_rate)


def apply_filter(
    spec: FilterSpec,
    samples: npt.ArrayLike,
    sample_rate: int,
    topology: FilterTopology = FilterTopology.SINGLE_POLE,
) -> npt.NDArray[np.float32]:
    """Apply one band recipe's filter to a single channel.

    Args:
        spec: Filter kind, cutoff and resonance
        samples: One channel of float samples
        sample_rate: Samples per second
        topology: Single-pole recurrences (default) or second-order sections

    Returns:
        Filtered float32 samples, same length as the input

    Raises:
        ProcessingError: If the cutoff is not strictly between 0 and Nyquist,
            or the filter produced non-finite output
    """
    spec.validate_for(sample_rate)
    x = np.asarray(samples, dtype=np.float64)
    logger.debug(
        "Applying %s %s filter at %.1f Hz (Q=%.2f) to %d samples",
        topology.value,
        spec.kind.value,
        spec.cutoff_hz,
        spec.resonance,
        x.size,
    )

    if topology is FilterTopology.BIQUAD:
        if x.size == 0:
            return np.zeros(0, dtype=np.float32)
        b, a = _biquad(spec, sample_rate)
        output = signal.lfilter(b, a, x).astype(np.float32)
    else:
        match spec.kind:
            case FilterKind.LOWPASS:
                output = apply_low_pass(x, sample_rate, spec.cutoff_hz)
            case FilterKind.HIGHPASS:
                output = apply_high_pass(x, sample_rate, spec.cutoff_hz)
            case FilterKind.BANDPASS:
                output = _single_pole_band_pass(x, sample_rate, spec)
            case FilterKind.NOTCH:
                output = (x - _single_pole_band_pass(x, sample_rate, spec)).astype(np.float32)

    if not np.all(np.isfinite(output)):
        raise ProcessingError(f"{spec.kind.value} filter produced non-finite samples")
    return output
