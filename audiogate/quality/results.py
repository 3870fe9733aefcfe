"""
Assembly of the final validation result.
"""

from collections.abc import Iterable

from .analyzer import QualityAnalyzer
from .models import (
    AudioTechnicalProfile,
    AudioValidationResult,
    IssueSeverity,
    LoudnessReport,
    QualityTier,
    ValidationIssue,
)
from .rules import Findings


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeated strings, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


def build_summary(
    tier: QualityTier,
    errors: list[ValidationIssue],
    warnings: list[ValidationIssue],
    profile: AudioTechnicalProfile | None,
) -> str:
    """One-sentence verdict for the uploading artist, with the profile when known."""
    profile_text = profile.describe() if profile else ""

    if tier == QualityTier.BOPTONE_PREMIUM:
        lead = f"{profile_text}. " if profile_text else ""
        return (
            f"Boptone Premium quality. {lead}Hi-res lossless audio that sounds great on mobile, "
            "car audio, and all streaming platforms. Distribution ready."
        )
    if tier == QualityTier.DISTRIBUTION_READY:
        lead = f"{profile_text}. " if profile_text else ""
        return (
            f"Distribution ready. {lead}This track meets all DSP requirements "
            "and is eligible for global distribution."
        )

    tail = f" {profile_text}." if profile_text else ""
    if tier == QualityTier.BOPTONE_ONLY:
        return (
            "Uploadable to Boptone, but not yet ready for DSP distribution. "
            f"{_plural(len(warnings), 'issue')} to resolve before distributing to Spotify, "
            f"Apple Music, and other platforms.{tail}"
        )
    return (
        f"Upload rejected. {_plural(len(errors), 'critical issue')} must be fixed "
        f"before this track can be uploaded.{tail}"
    )


class ResultBuilder:
    """Partitions issues, classifies the tier and builds the summary."""

    def __init__(self, analyzer: QualityAnalyzer | None = None):
        self.analyzer = analyzer or QualityAnalyzer()

    def build(
        self,
        findings: Findings,
        profile: AudioTechnicalProfile | None = None,
        loudness_report: LoudnessReport | None = None,
    ) -> AudioValidationResult:
        issues = list(findings.issues)
        errors = [i for i in issues if i.severity == IssueSeverity.ERROR]
        warnings = [i for i in issues if i.severity == IssueSeverity.WARNING]
        info = [i for i in issues if i.severity == IssueSeverity.INFO]

        tier = self.analyzer.calculate_tier(errors, warnings, profile)

        return AudioValidationResult(
            quality_tier=tier,
            is_uploadable=not errors,
            is_distribution_ready=not errors and not warnings,
            issues=issues,
            errors=errors,
            warnings=warnings,
            info=info,
            technical_profile=profile,
            loudness_report=loudness_report,
            summary=build_summary(tier, errors, warnings, profile),
            recommendations=dedupe(findings.recommendations),
        )
