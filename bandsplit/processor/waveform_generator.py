from pathlib import Path

import numpy as np
import numpy.typing as npt

from ..errors import InsufficientSamples

DEFAULT_BUCKETS = 100


def summarize(samples: npt.ArrayLike, buckets: int = DEFAULT_BUCKETS) -> list[float]:
    """Downsample a channel into `buckets` mean absolute amplitudes.

    Samples are split into `buckets` contiguous blocks of len // buckets
    samples; trailing samples that do not fill a block are dropped. Samples
    are clamped to [-1, 1] first (NaN counts as silence), so every value
    lies in [0, 1].

    Raises:
        ValueError: If buckets is not positive
        InsufficientSamples: If there are fewer samples than buckets
    """
    if buckets <= 0:
        raise ValueError(f"Bucket count must be positive, got {buckets}")

    data = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    audio = np.abs(np.clip(data, -1.0, 1.0))
    block_size = len(audio) // buckets
    if block_size == 0:
        raise InsufficientSamples(len(audio), buckets)

    blocks = audio[: block_size * buckets].reshape(buckets, block_size)
    return [float(v) for v in blocks.mean(axis=1)]


class WaveformGenerator:
    """Renders grayscale PNG waveform images from waveform summaries.

    Waveforms are rendered white on a transparent background so a frontend
    can apply color via CSS filters or canvas compositing operations.
    """

    DEFAULT_WIDTH: int = 800
    DEFAULT_HEIGHT: int = 128
    AMPLITUDE_EPSILON: float = 0.001  # Threshold below which we treat amplitude as zero

    def _scale_waveform(self, waveform: list[float], max_peak: float) -> npt.NDArray[np.float64]:
        """Normalize to max_peak, then apply a perceptual (logarithmic) curve."""
        data = np.asarray(waveform, dtype=np.float64)
        if max_peak > 0:
            data = data / max_peak

        # log10(1 + 9x) maps [0, 1] onto [0, 1] while lifting quiet passages
        data = np.log10(1 + 9 * np.clip(data, 0.0, 1.0))
        return np.where(data < self.AMPLITUDE_EPSILON, 0.0, data)

    def render_png(
        self,
        waveform: list[float],
        output_path: Path,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        max_peak: float = 1.0,
    ) -> None:
        """Render a waveform summary as a symmetric bar image.

        Args:
            waveform: Bucket amplitudes in [0, 1] (see summarize)
            output_path: Where to save the PNG
            width: Image width in pixels
            height: Image height in pixels
            max_peak: Largest bucket across all tracks, for consistent scaling
        """
        from PIL import Image, ImageDraw

        img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img, "RGBA")

        data = self._scale_waveform(waveform, max_peak)
        if data.size == 0:
            img.save(output_path, "PNG", optimize=True)
            return

        center_y = height // 2
        scale = height / 2
        bar_width = width / data.size

        for i, value in enumerate(data):
            if value == 0:
                continue
            x0 = int(i * bar_width)
            x1 = max(x0, int((i + 1) * bar_width) - 1)
            extent = int(value * scale)
            draw.rectangle(
                [(x0, center_y - extent), (x1, center_y + extent)],
                fill=(255, 255, 255, 255),
            )

        img.save(output_path, "PNG", optimize=True)
