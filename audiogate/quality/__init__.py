"""
Audio quality validation module.

Provides format detection, metadata extraction, loudness measurement, rule
checks and tier classification for uploaded tracks, plus cover art checks.
"""

from .analyzer import QualityAnalyzer
from .cover_art import CoverArtValidator
from .formats import DetectedFormat, FormatDetector
from .loudness import FfmpegLoudnessMeasurer, LoudnessMeasurer, parse_ebur128_output
from .metadata import MetadataExtractor, MetadataParser, MutagenMetadataParser, ParsedAudioFormat
from .models import (
    AudioTechnicalProfile,
    AudioValidationResult,
    CoverArtValidationResult,
    IssueSeverity,
    LegacyAudioCheck,
    LoudnessReport,
    QualityTier,
    ValidationIssue,
    ValidationOptions,
)
from .results import ResultBuilder
from .rules import Findings, RuleEngine
from .services import (
    AudioValidationService,
    get_validation_service,
    validate_audio_file,
    validate_audio_for_distribution,
    validate_cover_art,
)

__all__ = [
    "QualityTier",
    "IssueSeverity",
    "ValidationIssue",
    "AudioTechnicalProfile",
    "LoudnessReport",
    "AudioValidationResult",
    "CoverArtValidationResult",
    "LegacyAudioCheck",
    "ValidationOptions",
    # Components
    "FormatDetector",
    "DetectedFormat",
    "MetadataExtractor",
    "MetadataParser",
    "MutagenMetadataParser",
    "ParsedAudioFormat",
    "LoudnessMeasurer",
    "FfmpegLoudnessMeasurer",
    "parse_ebur128_output",
    "RuleEngine",
    "Findings",
    "QualityAnalyzer",
    "ResultBuilder",
    "CoverArtValidator",
    # Services
    "AudioValidationService",
    "get_validation_service",
    "validate_audio_for_distribution",
    "validate_cover_art",
    "validate_audio_file",
]
