"""
Loudness measurement via ffmpeg's ebur128 filter.

The measurer is a port: anything with an async ``measure(buffer, filename)``
returning a LoudnessReport (or None when unavailable) can be plugged into
the validator. The ffmpeg implementation never raises; a missing binary, a
non-zero exit, a timeout or unreadable output all yield None.
"""

import asyncio
import logging
import math
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..config import LoudnessSettings
from ..exceptions import LoudnessMeasurementError
from .formats import extension_of
from .models import CLIPPING_THRESHOLD_DBTP, LoudnessReport

logger = logging.getLogger(__name__)

# Summary block lines printed by ffmpeg's ebur128 filter
_NUMBER = r"([-+]?(?:\d+(?:\.\d+)?|inf))"
INTEGRATED_PATTERN = re.compile(rf"\bI:\s*{_NUMBER}\s*LUFS\b")
LOUDNESS_RANGE_PATTERN = re.compile(rf"\bLRA:\s*{_NUMBER}\s*LU\b")
TRUE_PEAK_PATTERN = re.compile(rf"True peak:\s*Peak:\s*{_NUMBER}\s*dBFS")


@dataclass(frozen=True)
class EbuR128Measurement:
    """Raw values read from ffmpeg output."""

    integrated_lufs: float | None = None
    true_peak_dbtp: float | None = None
    loudness_range: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.integrated_lufs is None and self.true_peak_dbtp is None


def _last_float(pattern: re.Pattern[str], text: str) -> float | None:
    matches = pattern.findall(text)
    if not matches:
        return None
    value = float(matches[-1])
    return value if math.isfinite(value) else None


def parse_ebur128_output(text: str) -> EbuR128Measurement:
    """
    Parse integrated loudness, true peak and loudness range from ebur128 output.

    The summary is printed last, so the last occurrence of each value wins
    over any per-frame log lines. Infinite values (silence) read as unknown.
    """
    text = text.replace("−", "-")
    return EbuR128Measurement(
        integrated_lufs=_last_float(INTEGRATED_PATTERN, text),
        true_peak_dbtp=_last_float(TRUE_PEAK_PATTERN, text),
        loudness_range=_last_float(LOUDNESS_RANGE_PATTERN, text),
    )


def loudness_recommendation(
    lufs: float | None,
    true_peak: float | None,
    settings: LoudnessSettings,
) -> str:
    """Single piece of mastering advice for a measurement."""
    target = settings.streaming_target_lufs
    ceiling = settings.true_peak_ceiling_dbtp

    if true_peak is not None and true_peak > CLIPPING_THRESHOLD_DBTP:
        return (
            f"Apply a true peak limiter (ceiling: {ceiling:.1f} dBTP) before re-exporting. "
            f"Current true peak: {true_peak:.1f} dBTP."
        )
    if lufs is None:
        return (
            f"Loudness could not be measured. Aim for {target:g} LUFS integrated "
            f"with a {ceiling:.1f} dBTP true peak ceiling."
        )
    if lufs > settings.loud_lufs:
        return (
            f"Your master ({lufs:.1f} LUFS) is louder than streaming targets. "
            f"DSPs will apply gain reduction. Consider re-mastering at {target:g} LUFS."
        )
    if lufs < settings.quiet_lufs:
        return (
            f"Your master ({lufs:.1f} LUFS) is quieter than streaming targets. "
            f"Consider re-mastering at {target:g} LUFS."
        )
    if abs(lufs - target) <= settings.optimal_window_lu:
        return f"Loudness ({lufs:.1f} LUFS) is within the optimal streaming range. No changes needed."
    return f"Loudness ({lufs:.1f} LUFS) is acceptable. Aim for {target:g} LUFS for optimal streaming playback."


def build_loudness_report(measurement: EbuR128Measurement, settings: LoudnessSettings) -> LoudnessReport:
    """Derive clipping, platform readiness and advice from a measurement."""
    lufs = measurement.integrated_lufs
    readiness = {name: target.is_ready(lufs) for name, target in settings.platforms.items()}

    return LoudnessReport(
        integrated_lufs=lufs,
        true_peak_dbtp=measurement.true_peak_dbtp,
        loudness_range=measurement.loudness_range,
        spotify_ready=readiness.get("spotify", False),
        apple_ready=readiness.get("apple", False),
        youtube_ready=readiness.get("youtube", False),
        platform_readiness=readiness,
        recommendation=loudness_recommendation(lufs, measurement.true_peak_dbtp, settings),
    )


@runtime_checkable
class LoudnessMeasurer(Protocol):
    """Port for the external loudness measurement."""

    async def measure(self, buffer: bytes, filename: str) -> LoudnessReport | None:
        """Measure loudness, or return None when measurement is unavailable."""
        ...


class FfmpegLoudnessMeasurer:
    """
    Measures EBU R128 loudness with ``ffmpeg -af ebur128=peak=true``.

    The upload is written to a private temporary directory that is removed on
    every exit path (success, failure, timeout or cancellation).

    Example:
        measurer = FfmpegLoudnessMeasurer.from_config(settings.loudness)
        report = await measurer.measure(data, "master.wav")
        if report is None:
            ...  # ffmpeg unavailable; upload continues without loudness data
    """

    def __init__(
        self,
        settings: LoudnessSettings | None = None,
        ffmpeg_path: str | None = None,
        timeout_seconds: float | None = None,
    ):
        self.settings = settings or LoudnessSettings()
        self.ffmpeg_path = ffmpeg_path or self.settings.ffmpeg_path
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else self.settings.timeout_seconds

    @classmethod
    def from_config(cls, config: LoudnessSettings) -> "FfmpegLoudnessMeasurer":
        """Create measurer from LoudnessSettings configuration."""
        return cls(settings=config)

    def is_available(self) -> bool:
        """Check if the ffmpeg executable can be found."""
        return shutil.which(self.ffmpeg_path) is not None

    def build_command(self, path: Path) -> list[str]:
        """ffmpeg argument vector for one measurement."""
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostats",
            "-nostdin",
            "-i",
            str(path),
            "-af",
            "ebur128=peak=true",
            "-f",
            "null",
            "-",
        ]

    async def measure(self, buffer: bytes, filename: str) -> LoudnessReport | None:
        try:
            measurement = await self.measure_raw(buffer, filename)
        except (LoudnessMeasurementError, OSError) as e:
            logger.warning("Loudness measurement failed (non-blocking): %s", e)
            return None

        logger.debug(
            "Measured %s: I=%s LUFS, TP=%s dBTP, LRA=%s LU",
            filename,
            measurement.integrated_lufs,
            measurement.true_peak_dbtp,
            measurement.loudness_range,
        )
        return build_loudness_report(measurement, self.settings)

    async def measure_raw(self, buffer: bytes, filename: str) -> EbuR128Measurement:
        """
        Run ffmpeg on the buffer and parse its summary.

        Raises:
            LoudnessMeasurementError: Tool missing, failed, timed out, or printed no summary
        """
        with tempfile.TemporaryDirectory(prefix="audiogate-loudness-") as tmpdir:
            path = Path(tmpdir) / f"upload{extension_of(filename)}"
            await asyncio.to_thread(path.write_bytes, buffer)
            output = await self._run(path, filename)

        measurement = parse_ebur128_output(output)
        if measurement.is_empty:
            raise LoudnessMeasurementError("No loudness summary in ffmpeg output", filename=filename, output=output)
        return measurement

    async def _run(self, path: Path, filename: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise LoudnessMeasurementError(f"{self.ffmpeg_path} not found", filename=filename) from None

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise LoudnessMeasurementError(
                f"ffmpeg timed out after {self.timeout_seconds:g}s", filename=filename
            ) from None
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        # ebur128 writes its summary to stderr
        output = stderr.decode("utf-8", errors="replace") + "\n" + stdout.decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise LoudnessMeasurementError(
                f"ffmpeg exited with status {process.returncode}",
                filename=filename,
                returncode=process.returncode,
                output=output,
            )
        return output
