"""
Validation CLI commands.

Commands for checking uploads before they reach the upload pipeline:
- audio: Full distribution validation with tier verdict
- cover: Cover art format and size check
- check: Legacy coarse pre-check (size + extension)
"""

from pathlib import Path

import typer

from audiogate.output import OutputFormat, get_formatter
from audiogate.quality import ValidationOptions
from audiogate.utils.logging import log_warning

from .common import Icons, console, ffmpeg_available, get_service, logger, read_upload, run_async, ui


# Create Validate sub-app
validate_app = typer.Typer(help="🎧 Validate audio and cover art uploads")


@validate_app.command("audio")
def validate_audio(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio file to validate"),
    skip_loudness: bool = typer.Option(False, "--skip-loudness", help="Skip the ffmpeg loudness measurement"),
    mono: bool = typer.Option(True, "--mono/--no-mono", help="Accept mono as a warning, or reject it"),
    min_bitrate: int | None = typer.Option(
        None, "--min-bitrate", min=1, help="Minimum bitrate for lossy formats in kbps (default from config)"
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the report to a file"),
):
    """
    Validate an audio file for distribution.

    Prints the quality tier (Rejected, Boptone Only, Distribution Ready,
    Boptone Premium) with every issue found. Exits with status 1 when the
    file would be rejected.
    """
    data = read_upload(file)
    options = ValidationOptions(skip_loudness=skip_loudness, allow_mono=mono, min_mp3_bitrate_kbps=min_bitrate)
    service = get_service()

    if not skip_loudness and not ffmpeg_available():
        log_warning("ffmpeg not found; loudness will not be measured", logger=logger)

    interactive = output_format == OutputFormat.TABLE and output is None
    if interactive:
        with ui.spinner(f"Validating {file.name}..."):
            result = run_async(service.validate_for_distribution(data, file.name, options))
    else:
        result = run_async(service.validate_for_distribution(data, file.name, options))

    get_formatter(output_format, output=output, console=console).format_result(result, file.name).output()

    if output is not None:
        ui.success(f"Report saved to [bold]{output}[/bold]")

    if not result.is_uploadable:
        raise typer.Exit(1)


@validate_app.command("cover")
def validate_cover(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Cover art image"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Validate cover art format and size."""
    result = get_service().validate_cover_art(read_upload(file), file.name)

    if as_json:
        console.print_json(result.model_dump_json())
    else:
        ui.section(file.name, icon=Icons.IMAGE)
        for error in result.errors:
            ui.error(error)
        for warning in result.warnings:
            ui.warning(warning)
        if result.is_valid:
            ui.success(result.summary)
        else:
            ui.muted(result.summary)

    if not result.is_valid:
        raise typer.Exit(1)


@validate_app.command("check")
def validate_check(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio file to pre-check"),
    max_size_mb: float | None = typer.Option(
        None, "--max-size-mb", help="Size ceiling in MB (default from config, 500)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Run the coarse legacy pre-check (size ceiling, extension allowlist)."""
    result = get_service().validate_file(read_upload(file), file.name, max_size_mb)

    if as_json:
        console.print_json(result.model_dump_json())
    elif result.is_valid:
        ui.success(f"{file.name} accepted", details=f"{result.format} ({result.mime_type})")
    else:
        ui.error(f"{file.name} not accepted", details=result.error)

    if not result.is_valid:
        raise typer.Exit(1)
