"""
Audio metadata extraction using Mutagen.

The validator only needs the technical stream properties (duration, sample
rate, bit depth, channels, bitrate, codec, encoder). Tags are read only to
find the encoder name.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import mutagen
from mutagen import MutagenError
from pydantic import BaseModel, Field

from ..exceptions import MetadataExtractionError
from .formats import DetectedFormat
from .models import AudioTechnicalProfile

logger = logging.getLogger(__name__)

# Mutagen file types whose payload decodes bit-exactly
LOSSLESS_CONTAINERS = {"FLAC", "WAVE", "AIFF"}
LOSSLESS_MP4_CODECS = {"alac"}

# Tag keys that commonly carry the encoding tool, per tag flavour
ENCODER_TAG_KEYS = ("encoder", "ENCODER", "TSSE", "©too", "encoded_by")


class ParsedAudioFormat(BaseModel):
    """Stream properties reported by a metadata library."""

    container: str | None = Field(default=None, description="Container name (FLAC, WAVE, MP3, MP4, ...)")
    codec: str | None = Field(default=None)
    sample_rate: int | None = Field(default=None, description="Hz")
    bits_per_sample: int | None = Field(default=None)
    number_of_channels: int | None = Field(default=None)
    duration: float | None = Field(default=None, description="Seconds")
    lossless: bool | None = Field(default=None)
    bitrate: int | None = Field(default=None, description="Bits per second")
    tool: str | None = Field(default=None, description="Encoder/tool name")

    @property
    def bitrate_kbps(self) -> int | None:
        """Bitrate rounded to whole kbps, None when unknown."""
        if not self.bitrate:
            return None
        return round(self.bitrate / 1000)


@runtime_checkable
class MetadataParser(Protocol):
    """Port for the audio-metadata library."""

    def parse(self, buffer: bytes, hint: str) -> ParsedAudioFormat:
        """
        Read stream properties from an in-memory file.

        Args:
            buffer: Raw file bytes
            hint: Declared filename (helps container detection)

        Raises:
            Exception: Any failure; callers treat every exception as "unreadable"
        """
        ...


def _first_tag(tags: Any, keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty tag value among keys, as text."""
    if not tags:
        return None
    for key in keys:
        try:
            value = tags.get(key)
        except (KeyError, ValueError, TypeError):
            continue
        if value is None:
            continue
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


class MutagenMetadataParser:
    """
    MetadataParser backed by mutagen.

    Example:
        parser = MutagenMetadataParser()
        parsed = parser.parse(data, "mix.flac")
        print(parsed.sample_rate, parsed.bits_per_sample)
    """

    def parse(self, buffer: bytes, hint: str) -> ParsedAudioFormat:
        stream = io.BytesIO(buffer)
        # mutagen scores candidate types partly on the file name
        stream.name = hint  # type: ignore[attr-defined]

        try:
            audio = mutagen.File(stream)
        except MutagenError as e:
            raise MetadataExtractionError(f"Could not parse audio stream: {e}", filename=hint) from e

        if audio is None or getattr(audio, "info", None) is None:
            raise MetadataExtractionError("Unrecognised audio stream", filename=hint)

        info = audio.info
        container = type(audio).__name__.upper()
        codec = getattr(info, "codec_description", None) or getattr(info, "codec", None)
        bits = getattr(info, "bits_per_sample", None) or getattr(info, "sample_size", None)

        lossless = container in LOSSLESS_CONTAINERS
        if container == "MP4":
            lossless = str(getattr(info, "codec", "")).lower() in LOSSLESS_MP4_CODECS

        tool = getattr(info, "encoder_info", None) or _first_tag(audio.tags, ENCODER_TAG_KEYS)

        return ParsedAudioFormat(
            container=container,
            codec=str(codec) if codec else None,
            sample_rate=getattr(info, "sample_rate", None) or None,
            bits_per_sample=bits or None,
            number_of_channels=getattr(info, "channels", None),
            duration=getattr(info, "length", None),
            lossless=lossless,
            bitrate=getattr(info, "bitrate", None) or None,
            tool=tool or None,
        )


@dataclass(frozen=True)
class MetadataParsed:
    """Extraction succeeded; downstream checks run on the profile."""

    profile: AudioTechnicalProfile


@dataclass(frozen=True)
class MetadataFailed:
    """Extraction failed; every profile-dependent check is skipped."""

    reason: str


MetadataOutcome = MetadataParsed | MetadataFailed


class MetadataExtractor:
    """
    Builds the technical profile of an upload from a MetadataParser.

    Any exception from the parser is converted into ``MetadataFailed``; the
    caller decides what a failure means for the verdict.
    """

    def __init__(self, parser: MetadataParser | None = None):
        self.parser: MetadataParser = parser or MutagenMetadataParser()

    def extract(self, buffer: bytes, filename: str, detected: DetectedFormat) -> MetadataOutcome:
        """Parse the buffer and build an AudioTechnicalProfile."""
        try:
            parsed = self.parser.parse(buffer, filename)
        except Exception as e:
            logger.warning("Metadata parse failed for %s: %s", filename, e)
            return MetadataFailed(reason=str(e) or type(e).__name__)

        return MetadataParsed(profile=self.build_profile(parsed, len(buffer), detected))

    @staticmethod
    def build_profile(parsed: ParsedAudioFormat, file_size_bytes: int, detected: DetectedFormat) -> AudioTechnicalProfile:
        """Map parser output onto the profile, filling gaps from the format table."""
        return AudioTechnicalProfile(
            format=detected.format,
            mime_type=detected.mime_type,
            file_size_bytes=file_size_bytes,
            duration_seconds=parsed.duration or 0.0,
            sample_rate_hz=parsed.sample_rate or 0,
            bit_depth=parsed.bits_per_sample,
            channels=parsed.number_of_channels or 0,
            bitrate_kbps=parsed.bitrate_kbps,
            # Losslessness is a property of the declared format family
            is_lossless=detected.is_lossless,
            codec=parsed.codec or detected.codec,
            encoder=parsed.tool,
        )
