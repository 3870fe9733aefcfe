#!/usr/bin/env python3
"""
CLI for the audiogate upload validator.

This is the main entry point that assembles all subcommands from the
audiogate/cli/ modules.
"""

from pathlib import Path

import typer

from audiogate import __version__
from audiogate.cli.common import Icons, console, ffmpeg_available, ui
from audiogate.cli.validate import validate_app
from audiogate.config import get_settings, reload_settings
from audiogate.logging import configure_from_settings
from audiogate.quality.models import CLIPPING_THRESHOLD_DBTP

# Create main app
app = typer.Typer(
    name="audiogate",
    help="🎵 Audio upload validation and distribution tier gating",
    rich_markup_mode="rich",
)

# Register sub-apps
app.add_typer(validate_app, name="validate")


@app.callback()
def main(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Validate audio uploads before they enter the upload pipeline."""
    settings = reload_settings(config) if config else get_settings()
    level = "debug" if verbose or settings.debug else None
    configure_from_settings(settings.logging, level=level)


@app.command()
def status():
    """Show ffmpeg availability and the effective validation thresholds."""
    settings = get_settings()

    ui.header("audiogate", subtitle=f"Validator status · v{__version__}", icon=Icons.MUSIC)

    # Loudness tool
    ui.section("Loudness measurement", icon=Icons.SPEAKER)
    if not settings.loudness.enabled:
        ui.warning("Loudness measurement disabled in settings")
    elif ffmpeg_available():
        ui.success(f"ffmpeg available: [bold]{settings.loudness.ffmpeg_path}[/bold]")
    else:
        ui.warning(
            f"ffmpeg not found: {settings.loudness.ffmpeg_path}",
            details="Uploads will be validated without loudness data",
        )

    # Thresholds
    audio = settings.audio
    ui.section("Audio thresholds", icon=Icons.GEAR)
    console.print(
        ui.key_value_table(
            {
                "File size": f"{audio.min_file_size_bytes // 1024} KB to {audio.max_file_size_bytes / 1024**3:g} GB",
                "Duration": f"{audio.min_duration_seconds:g} s to {audio.max_duration_seconds / 3600:g} h",
                "Min sample rate": f"{audio.min_sample_rate_hz:,} Hz",
                "Standard rates": ", ".join(f"{rate:,}" for rate in audio.standard_sample_rates),
                "Min bit depth": f"{audio.min_bit_depth_lossless}-bit (lossless)",
                "Min bitrate": f"{audio.min_bitrate_kbps_lossy} kbps (lossy)",
                "Max channels": audio.max_channels,
                "Premium bar": f"{audio.premium_min_bit_depth}-bit / {audio.premium_min_sample_rate_hz:,} Hz",
            }
        )
    )

    loudness = settings.loudness
    ui.section("Loudness targets", icon=Icons.SPEAKER)
    table = ui.create_table(columns=["Platform", "Target", "Tolerance"])
    for name, target in loudness.platforms.items():
        table.add_row(name.title(), f"{target.target_lufs:g} LUFS", f"±{target.tolerance_lu:g} LU")
    console.print(table)
    ui.muted(
        f"Clipping above {CLIPPING_THRESHOLD_DBTP:g} dBTP, "
        f"true peak ceiling {loudness.true_peak_ceiling_dbtp:g} dBTP, "
        f"timeout {loudness.timeout_seconds:g} s"
    )

    # Formats
    ui.section("Formats", icon=Icons.FILE)
    formats = settings.formats.formats
    distribution = [ext for ext, spec in formats.items() if spec.distribution]
    legacy_only = [ext for ext, spec in formats.items() if not spec.distribution]
    console.print(f"  {Icons.BULLET} Distribution: [accent]{' '.join(distribution)}[/accent]")
    if legacy_only:
        console.print(f"  {Icons.BULLET} Legacy pre-check only: [muted]{' '.join(legacy_only)}[/muted]")
    console.print(f"  {Icons.BULLET} Cover art: [accent]{' '.join(settings.cover_art.formats)}[/accent]")
    console.print()


if __name__ == "__main__":
    app()
