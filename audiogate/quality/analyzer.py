"""
Quality tier classification for validated uploads.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .models import AudioTechnicalProfile, QualityTier, ValidationIssue

if TYPE_CHECKING:
    from ..config import AudioLimitSettings

logger = logging.getLogger(__name__)

# Default hi-res bar for the premium tier - can be overridden via config
PREMIUM_MIN_BIT_DEPTH = 24
PREMIUM_MIN_SAMPLE_RATE_HZ = 96_000


class QualityAnalyzer:
    """
    Maps issue severities and the technical profile to a quality tier.

    Tier Logic (first match wins):
    ------------------------------
    REJECTED:
        - Any error

    BOPTONE_PREMIUM:
        - No warnings
        - AND lossless @ 24-bit+ / 96 kHz+

    DISTRIBUTION_READY:
        - No warnings (premium bar not met)

    BOPTONE_ONLY:
        - At least one warning

    Info-level issues never affect the tier.

    Example:
        analyzer = QualityAnalyzer.from_config(get_settings().audio)
        tier = analyzer.calculate_tier(errors, warnings, profile)
        print(f"{tier.emoji} {tier.label}")
    """

    def __init__(
        self,
        premium_min_bit_depth: int = PREMIUM_MIN_BIT_DEPTH,
        premium_min_sample_rate_hz: int = PREMIUM_MIN_SAMPLE_RATE_HZ,
    ):
        """
        Initialize analyzer with custom thresholds.

        Args:
            premium_min_bit_depth: Minimum bits per sample for premium (default 24)
            premium_min_sample_rate_hz: Minimum sample rate for premium (default 96000)
        """
        self.premium_min_bit_depth = premium_min_bit_depth
        self.premium_min_sample_rate_hz = premium_min_sample_rate_hz

    @classmethod
    def from_config(cls, config: "AudioLimitSettings") -> "QualityAnalyzer":
        """
        Create analyzer from AudioLimitSettings configuration.

        Example:
            from audiogate.config import get_settings
            analyzer = QualityAnalyzer.from_config(get_settings().audio)
        """
        return cls(
            premium_min_bit_depth=config.premium_min_bit_depth,
            premium_min_sample_rate_hz=config.premium_min_sample_rate_hz,
        )

    def meets_premium_bar(self, profile: AudioTechnicalProfile | None) -> bool:
        """Check if a profile is hi-res lossless."""
        if profile is None or not profile.is_lossless:
            return False
        return (profile.bit_depth or 0) >= self.premium_min_bit_depth and (
            profile.sample_rate_hz >= self.premium_min_sample_rate_hz
        )

    def calculate_tier(
        self,
        errors: Sequence[ValidationIssue],
        warnings: Sequence[ValidationIssue],
        profile: AudioTechnicalProfile | None,
    ) -> QualityTier:
        """
        Calculate quality tier from issue severities and the technical profile.

        Args:
            errors: Error-severity issues
            warnings: Warning-severity issues
            profile: Technical profile, None when metadata was unreadable

        Returns:
            Quality tier
        """
        # Rule 1: Any error blocks the upload
        if errors:
            return QualityTier.REJECTED

        # Rule 2: Warnings keep the track on the platform only
        if warnings:
            return QualityTier.BOPTONE_ONLY

        # Rule 3: Clean hi-res lossless
        if self.meets_premium_bar(profile):
            return QualityTier.BOPTONE_PREMIUM

        return QualityTier.DISTRIBUTION_READY
