"""
Validation services.

Provides the upload-facing operations:
- Full distribution validation (tiered verdict with diagnostics)
- Cover art validation
- The coarse legacy pre-check used early in the upload flow

All three run over a single ``AudioValidationService`` so format tables and
thresholds come from one ``Settings`` value.
"""

import logging

from ..config import Settings, get_settings
from .analyzer import QualityAnalyzer
from .cover_art import CoverArtValidator
from .formats import FormatDetector, extension_of
from .loudness import FfmpegLoudnessMeasurer, LoudnessMeasurer
from .metadata import MetadataExtractor, MetadataFailed, MetadataParsed, MetadataParser
from .models import (
    AudioValidationResult,
    CoverArtValidationResult,
    LegacyAudioCheck,
    LoudnessReport,
    ValidationOptions,
)
from .results import ResultBuilder
from .rules import Findings, RuleEngine

logger = logging.getLogger(__name__)


class AudioValidationService:
    """
    Service for validating uploaded tracks and artwork.

    Collaborators are injected so tests (and other deployments) can replace
    the metadata library or the loudness tool.

    Example:
        service = AudioValidationService()
        result = await service.validate_for_distribution(data, "master.wav")
        print(result.quality_tier.label, result.summary)

        # Without ffmpeg
        result = await service.validate_for_distribution(data, "master.wav", skip_loudness=True)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        parser: MetadataParser | None = None,
        measurer: LoudnessMeasurer | None = None,
    ):
        self.settings = settings or get_settings()
        self.detector = FormatDetector.from_config(self.settings.formats)
        self.rules = RuleEngine(
            limits=self.settings.audio,
            loudness=self.settings.loudness,
            accepted_formats=self.detector.accepted_formats_text(),
        )
        self.extractor = MetadataExtractor(parser)
        self.measurer: LoudnessMeasurer = measurer or FfmpegLoudnessMeasurer.from_config(self.settings.loudness)
        self.builder = ResultBuilder(QualityAnalyzer.from_config(self.settings.audio))
        self.cover_art = CoverArtValidator.from_config(self.settings.cover_art)

    @staticmethod
    def resolve_options(
        options: ValidationOptions | None = None,
        skip_loudness: bool | None = None,
        allow_mono: bool | None = None,
        min_mp3_bitrate_kbps: int | None = None,
    ) -> ValidationOptions:
        """Merge keyword flags over an options object; unset flags keep their value."""
        options = options or ValidationOptions()
        overrides = {
            key: value
            for key, value in {
                "skip_loudness": skip_loudness,
                "allow_mono": allow_mono,
                "min_mp3_bitrate_kbps": min_mp3_bitrate_kbps,
            }.items()
            if value is not None
        }
        return options.model_copy(update=overrides) if overrides else options

    def should_measure_loudness(self, size_bytes: int, options: ValidationOptions) -> bool:
        if options.skip_loudness or not self.settings.loudness.enabled:
            return False
        return size_bytes <= self.settings.audio.max_file_size_bytes

    async def validate_for_distribution(
        self,
        buffer: bytes,
        filename: str,
        options: ValidationOptions | None = None,
        *,
        skip_loudness: bool | None = None,
        allow_mono: bool | None = None,
        min_mp3_bitrate_kbps: int | None = None,
    ) -> AudioValidationResult:
        """
        Validate an audio upload against distribution requirements.

        Every expected problem is reported as an issue; this never raises for
        a bad file. The loudness measurement is the only await point.

        Args:
            buffer: Raw file bytes
            filename: Declared filename (drives format detection)
            options: Validation switches
            skip_loudness: Override options.skip_loudness
            allow_mono: Override options.allow_mono
            min_mp3_bitrate_kbps: Override options.min_mp3_bitrate_kbps

        Returns:
            AudioValidationResult with tier, issues, profile and loudness report
        """
        options = self.resolve_options(options, skip_loudness, allow_mono, min_mp3_bitrate_kbps)
        findings = Findings()

        # Step 1: Format
        detected = self.detector.detect(filename)
        if detected is None:
            self.rules.check_format(extension_of(filename), findings)
            result = self.builder.build(findings)
            logger.debug("Rejected %s: unsupported format", filename)
            return result

        # Step 2: Size
        size_bytes = len(buffer)
        self.rules.check_size(size_bytes, findings)

        # Step 3: Metadata and profile checks
        profile = None
        outcome = self.extractor.extract(buffer, filename, detected)
        if isinstance(outcome, MetadataParsed):
            profile = outcome.profile
            self.rules.check_profile(
                profile,
                findings,
                allow_mono=options.allow_mono,
                min_bitrate_kbps=options.min_mp3_bitrate_kbps,
            )
        elif isinstance(outcome, MetadataFailed):
            self.rules.check_metadata_failure(outcome.reason, findings)

        # Step 4: Loudness
        loudness_report = None
        if self.should_measure_loudness(size_bytes, options):
            loudness_report = await self._measure_loudness(buffer, filename)
            if loudness_report is not None:
                self.rules.check_loudness(loudness_report, findings)

        result = self.builder.build(findings, profile, loudness_report)
        logger.debug(
            "Validated %s: %s (%d errors, %d warnings, %d info)",
            filename,
            result.quality_tier.value_name,
            len(result.errors),
            len(result.warnings),
            len(result.info),
        )
        return result

    async def _measure_loudness(self, buffer: bytes, filename: str) -> LoudnessReport | None:
        """Call the measurer; a failing measurer never fails the validation."""
        try:
            return await self.measurer.measure(buffer, filename)
        except Exception as e:
            logger.warning("Loudness measurement failed (non-blocking): %s", e)
            return None

    def validate_cover_art(self, buffer: bytes, filename: str) -> CoverArtValidationResult:
        """Validate cover art format and size."""
        return self.cover_art.validate(buffer, filename)

    def validate_file(self, buffer: bytes, filename: str, max_size_mb: float | None = None) -> LegacyAudioCheck:
        """
        Coarse pre-check: size ceiling first, then the extension allowlist.

        Accepts the legacy-only formats (OGG, WMA) that the distribution
        validator rejects.
        """
        if max_size_mb is None:
            max_size_mb = self.settings.formats.legacy_max_size_mb

        size_mb = len(buffer) / (1024**2)
        if size_mb > max_size_mb:
            return LegacyAudioCheck(
                is_valid=False,
                error=f"File size ({size_mb:.2f}MB) exceeds maximum allowed size ({max_size_mb:g}MB)",
            )

        detected = self.detector.lookup(filename)
        if detected is None:
            allowed = ", ".join(self.detector.legacy_extensions)
            return LegacyAudioCheck(
                is_valid=False,
                error=f"File format '{extension_of(filename)}' is not supported. Allowed formats: {allowed}",
            )

        return LegacyAudioCheck(is_valid=True, format=detected.legacy_name, mime_type=detected.mime_type)


# Default service instance, rebuilt when the global settings are reloaded
_service: AudioValidationService | None = None


def get_validation_service() -> AudioValidationService:
    """Get the service bound to the current global settings."""
    global _service
    settings = get_settings()
    if _service is None or _service.settings is not settings:
        _service = AudioValidationService(settings)
    return _service


async def validate_audio_for_distribution(
    buffer: bytes,
    filename: str,
    options: ValidationOptions | None = None,
    *,
    skip_loudness: bool | None = None,
    allow_mono: bool | None = None,
    min_mp3_bitrate_kbps: int | None = None,
) -> AudioValidationResult:
    """Validate an audio upload with the default service."""
    return await get_validation_service().validate_for_distribution(
        buffer,
        filename,
        options,
        skip_loudness=skip_loudness,
        allow_mono=allow_mono,
        min_mp3_bitrate_kbps=min_mp3_bitrate_kbps,
    )


def validate_cover_art(buffer: bytes, filename: str) -> CoverArtValidationResult:
    """Validate cover art with the default service."""
    return get_validation_service().validate_cover_art(buffer, filename)


def validate_audio_file(buffer: bytes, filename: str, max_size_mb: float | None = None) -> LegacyAudioCheck:
    """Legacy pre-check with the default service (500 MB ceiling unless given)."""
    return get_validation_service().validate_file(buffer, filename, max_size_mb)
