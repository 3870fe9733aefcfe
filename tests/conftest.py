"""
Pytest configuration and shared fixtures.
"""

import io
import sys
import wave
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from audiogate.config import Settings
from audiogate.quality import AudioValidationService, LoudnessReport, ParsedAudioFormat

MB = 1024**2


def audio_bytes(size: int) -> bytes:
    """Payload of the given size; content is irrelevant when metadata is stubbed."""
    return b"\x00" * size


def wav_bytes(seconds: float, sample_rate: int = 44_100, bit_depth: int = 24, channels: int = 2) -> bytes:
    """A real PCM WAV file of silence, built with the standard wave module."""
    stream = io.BytesIO()
    with wave.open(stream, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(bit_depth // 8)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x00" * int(seconds * sample_rate) * channels * (bit_depth // 8))
    return stream.getvalue()


class StubParser:
    """MetadataParser returning a fixed result, or raising the given error."""

    def __init__(self, parsed: ParsedAudioFormat | None = None, error: Exception | None = None):
        self.parsed = parsed or ParsedAudioFormat()
        self.error = error
        self.calls: list[str] = []

    def parse(self, buffer: bytes, hint: str) -> ParsedAudioFormat:
        self.calls.append(hint)
        if self.error is not None:
            raise self.error
        return self.parsed


class StubMeasurer:
    """LoudnessMeasurer returning a fixed report (or None), counting calls."""

    def __init__(self, report: LoudnessReport | None = None, error: Exception | None = None):
        self.report = report
        self.error = error
        self.calls = 0

    async def measure(self, buffer: bytes, filename: str) -> LoudnessReport | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.report


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of any config.yaml on disk."""
    return Settings()


@pytest.fixture
def parsed_format() -> Callable[..., ParsedAudioFormat]:
    """Factory for parser output; defaults describe a clean 24-bit/44.1 kHz stereo master."""

    def _make(**overrides: Any) -> ParsedAudioFormat:
        values: dict[str, Any] = {
            "container": "FLAC",
            "codec": "FLAC",
            "sample_rate": 44_100,
            "bits_per_sample": 24,
            "number_of_channels": 2,
            "duration": 180.0,
            "lossless": True,
            "bitrate": None,
            "tool": None,
        }
        values.update(overrides)
        return ParsedAudioFormat(**values)

    return _make


@pytest.fixture
def loudness_report() -> Callable[..., LoudnessReport]:
    """Factory for loudness reports with an on-target default measurement."""

    def _make(**overrides: Any) -> LoudnessReport:
        values: dict[str, Any] = {
            "integrated_lufs": -14.0,
            "true_peak_dbtp": -1.5,
            "loudness_range": 6.0,
        }
        values.update(overrides)
        return LoudnessReport(**values)

    return _make


@pytest.fixture
def make_service(settings: Settings) -> Callable[..., AudioValidationService]:
    """Factory for a service wired to stub collaborators."""

    def _make(
        parsed: ParsedAudioFormat | None = None,
        parse_error: Exception | None = None,
        report: LoudnessReport | None = None,
        measurer: Any = None,
        config: Settings | None = None,
    ) -> AudioValidationService:
        return AudioValidationService(
            settings=config or settings,
            parser=StubParser(parsed, parse_error),
            measurer=measurer or StubMeasurer(report),
        )

    return _make
