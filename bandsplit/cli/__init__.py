"""CLI entrypoint for bandsplit."""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path

import typer
from dotenv import load_dotenv

from .. import __version__
from ..config import AudioFormat, load_config
from ..errors import BandsplitError
from ..models.protocols import SeparationMode
from ..processor.audio_utils import extract_audio
from ..processor.core import write_separation
from ..processor.wav_encoder import parse_wav_header
from ..separator import AudioSeparationPipeline
from ..utils import derive_output_name

app = typer.Typer(
    name="bandsplit",
    help="Split audio into channel or frequency-band tracks",
    no_args_is_help=True,
)


class ModeOption(str, Enum):
    """Separation modes as spelled on the command line."""

    BAND_SPLIT = "band-split"
    CHANNEL_SPLIT = "channel-split"

    def to_mode(self) -> SeparationMode:
        return SeparationMode(self.value.replace("-", "_"))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


@app.command("version")
def version() -> None:
    """Print the current version of bandsplit."""
    typer.echo(f"bandsplit version {__version__}")


@app.command("separate")
def separate(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio or video file"),
    mode: ModeOption = typer.Option(ModeOption.BAND_SPLIT, "--mode", "-m"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (default: ./<input name>)"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    output_format: AudioFormat | None = typer.Option(None, "--format", "-f"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Separate a file into tracks and write them with waveforms and a report."""
    _configure_logging(verbose)
    try:
        config = load_config(config_path)
        if output_format is not None:
            config.output.format = output_format

        output_dir = output or Path(derive_output_name(input_file))
        typer.echo(f"Separating {input_file.name} ({mode.value})...")

        pipeline = AudioSeparationPipeline(config)
        with pipeline.separate_file(input_file, mode.to_mode()) as result:
            metadata = write_separation(result, output_dir, config.output)
    except (BandsplitError, ValueError, OSError, subprocess.CalledProcessError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for track in metadata.tracks:
        typer.echo(f"  ✓ {track.display_name}: {track.audio_file}")
    typer.echo(f"✓ Wrote {len(metadata.tracks)} track(s) to {output_dir}")


@app.command("extract")
def extract(
    video_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    output_file: Path = typer.Argument(..., dir_okay=False),
) -> None:
    """Extract the audio of a video file into a WAV file."""
    try:
        data = extract_audio(video_file)
    except BandsplitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    _ = output_file.write_bytes(data)
    typer.echo(f"✓ Extracted audio to {output_file} ({len(data)} bytes)")


@app.command("inspect")
def inspect(wav_file: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Print the header fields of a PCM WAV file."""
    try:
        header = parse_wav_header(wav_file.read_bytes())
    except BandsplitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for name, value in header._asdict().items():
        typer.echo(f"{name}: {value}")


@app.command("recipes")
def recipes(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """List the configured band-split recipes."""
    try:
        config = load_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for name, recipe_set in config.recipes.items():
        marker = " (selected)" if name == config.recipe else ""
        typer.echo(f"{name}{marker}:")
        for recipe in recipe_set:
            spec = recipe.filter
            typer.echo(
                f"  {recipe.id}: {spec.kind.value} @ {spec.cutoff_hz:g} Hz, Q={spec.resonance:g}"
            )


def main() -> None:
    """Main CLI entrypoint."""
    # Load .env file if it exists (doesn't override existing env vars)
    _ = load_dotenv()
    app()


if __name__ == "__main__":
    main()
