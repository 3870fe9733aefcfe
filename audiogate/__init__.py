"""
audiogate - audio upload validation and distribution tier gating.

Usage:
    from audiogate import validate_audio_for_distribution

    result = await validate_audio_for_distribution(data, "master.wav")
    if not result.is_uploadable:
        print(result.summary)
"""

from .exceptions import AudioGateError, LoudnessMeasurementError, MetadataExtractionError
from .quality import (
    AudioValidationResult,
    AudioValidationService,
    CoverArtValidationResult,
    LegacyAudioCheck,
    QualityTier,
    ValidationOptions,
    validate_audio_file,
    validate_audio_for_distribution,
    validate_cover_art,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "AudioGateError",
    "LoudnessMeasurementError",
    "MetadataExtractionError",
    "AudioValidationResult",
    "AudioValidationService",
    "CoverArtValidationResult",
    "LegacyAudioCheck",
    "QualityTier",
    "ValidationOptions",
    "validate_audio_file",
    "validate_audio_for_distribution",
    "validate_cover_art",
]
