"""
Validation rules for uploaded audio.

Each check looks at one property of the upload and appends zero or more
issues (and, for the actionable ones, a recommendation) to a shared
``Findings`` collector. Checks are independent of each other; the order in
which the pipeline runs them only affects the order issues are reported.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .formats import FormatDetector
from .models import CLIPPING_THRESHOLD_DBTP, AudioTechnicalProfile, IssueSeverity, LoudnessReport, ValidationIssue

if TYPE_CHECKING:
    from ..config import AudioLimitSettings, LoudnessSettings, Settings

logger = logging.getLogger(__name__)

# Recommendation texts shown to the uploading artist
REC_EXPORT_WAV = "Export your track as WAV (24-bit, 44.1kHz or 48kHz) for the best distribution quality."
REC_SPLIT_FILE = "Split the file into smaller segments or use a more efficient format."
REC_DURATION = "Tracks shorter than 30 seconds are rejected by Spotify, Apple Music, and most other DSPs."
REC_SAMPLE_RATE = "Re-export your track at 44.1kHz or 48kHz. Most DAWs default to 44.1kHz for music production."
REC_BIT_DEPTH = "Re-export your track at 24-bit for the best quality. 16-bit is the minimum accepted."
REC_STEREO = "Bounce a stereo (2-channel) master for the best listening experience on DSPs."
REC_LOSSLESS = "Export your master as a 24-bit WAV or FLAC at 44.1 kHz or 48 kHz for DSP distribution eligibility."
REC_LIMITER = "Apply a true peak limiter in your mastering chain. Set the ceiling to -1.0 dBTP before exporting."
REC_TOO_LOUD = (
    "Your master is significantly louder than streaming standards. "
    "Consider re-mastering at -14 LUFS for the best listener experience."
)
REC_TOO_QUIET = "Your master is significantly quieter than streaming standards. Consider re-mastering at -14 LUFS."


@dataclass
class Findings:
    """Append-only issue and recommendation collector for one validation run."""

    issues: list[ValidationIssue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def add(
        self,
        code: str,
        severity: IssueSeverity,
        field: str,
        message: str,
        value: str | int | float | None = None,
        requirement: str | None = None,
        recommendation: str | None = None,
    ) -> ValidationIssue:
        issue = ValidationIssue(
            code=code,
            severity=severity,
            field=field,
            message=message,
            value=value,
            requirement=requirement,
        )
        self.issues.append(issue)
        if recommendation:
            self.recommendations.append(recommendation)
        logger.debug("%s %s: %s", severity.value, code, message)
        return issue

    @property
    def has_errors(self) -> bool:
        return any(issue.is_error for issue in self.issues)


class RuleEngine:
    """
    Applies the distribution thresholds to an upload.

    Example:
        engine = RuleEngine.from_config(get_settings())
        findings = Findings()
        engine.check_size(len(data), findings)
        engine.check_profile(profile, findings, allow_mono=True)
    """

    def __init__(
        self,
        limits: "AudioLimitSettings",
        loudness: "LoudnessSettings",
        accepted_formats: str = "Accepted formats: WAV, FLAC, AIFF (preferred), MP3, M4A, AAC",
    ):
        self.limits = limits
        self.loudness = loudness
        self.accepted_formats = accepted_formats

    @classmethod
    def from_config(cls, settings: "Settings") -> "RuleEngine":
        """Create rule engine from the root Settings."""
        detector = FormatDetector.from_config(settings.formats)
        return cls(
            limits=settings.audio,
            loudness=settings.loudness,
            accepted_formats=detector.accepted_formats_text(),
        )

    # ------------------------------------------------------------------
    # Structural checks (no metadata needed)
    # ------------------------------------------------------------------

    def check_format(self, extension: str, findings: Findings) -> None:
        """Report an extension that is not accepted for distribution."""
        findings.add(
            "UNSUPPORTED_FORMAT",
            IssueSeverity.ERROR,
            "format",
            f'File format "{extension or "(none)"}" is not accepted for distribution.',
            value=extension,
            requirement=self.accepted_formats,
            recommendation=REC_EXPORT_WAV,
        )

    def check_size(self, size_bytes: int, findings: Findings) -> None:
        size_mb = size_bytes / (1024**2)
        max_gb = self.limits.max_file_size_bytes / (1024**3)

        if size_bytes > self.limits.max_file_size_bytes:
            findings.add(
                "FILE_TOO_LARGE",
                IssueSeverity.ERROR,
                "fileSize",
                f"File size ({size_mb:.0f} MB) exceeds the {max_gb:g} GB maximum.",
                value=round(size_mb, 2),
                requirement=f"Maximum file size: {max_gb:g} GB",
                recommendation=REC_SPLIT_FILE,
            )

        if size_bytes < self.limits.min_file_size_bytes:
            findings.add(
                "FILE_TOO_SMALL",
                IssueSeverity.ERROR,
                "fileSize",
                f"File size ({size_bytes / 1024:.1f} KB) is suspiciously small. The file may be corrupt or empty.",
                value=size_bytes,
                requirement=f"Minimum file size: {self.limits.min_file_size_bytes // 1024} KB",
            )

    def check_metadata_failure(self, reason: str, findings: Findings) -> None:
        """Unreadable metadata is reported but does not block the upload."""
        findings.add(
            "METADATA_PARSE_ERROR",
            IssueSeverity.WARNING,
            "metadata",
            "Could not read audio metadata from this file. "
            "The file may be corrupt or use an unsupported encoding.",
            value=reason,
        )

    # ------------------------------------------------------------------
    # Profile checks
    # ------------------------------------------------------------------

    def check_profile(
        self,
        profile: AudioTechnicalProfile,
        findings: Findings,
        allow_mono: bool = True,
        min_bitrate_kbps: int | None = None,
    ) -> None:
        """Run every check that needs the technical profile."""
        self.check_duration(profile, findings)
        self.check_sample_rate(profile, findings)
        self.check_bit_depth(profile, findings)
        self.check_channels(profile, findings, allow_mono=allow_mono)
        self.check_bitrate(profile, findings, min_bitrate_kbps=min_bitrate_kbps)
        self.check_format_class(profile, findings)

    def check_duration(self, profile: AudioTechnicalProfile, findings: Findings) -> None:
        duration = profile.duration_seconds
        if duration <= 0:
            # Not reported by the container
            return

        if duration < self.limits.min_duration_seconds:
            findings.add(
                "DURATION_TOO_SHORT",
                IssueSeverity.ERROR,
                "duration",
                f"Track duration ({duration:.1f}s) is below the "
                f"{self.limits.min_duration_seconds:g}-second minimum required by most DSPs.",
                value=duration,
                requirement=f"Minimum duration: {self.limits.min_duration_seconds:g} seconds",
                recommendation=REC_DURATION,
            )
        elif duration > self.limits.max_duration_seconds:
            max_hours = self.limits.max_duration_seconds / 3600
            findings.add(
                "DURATION_TOO_LONG",
                IssueSeverity.ERROR,
                "duration",
                f"Track duration ({duration / 3600:.1f} hours) exceeds the {max_hours:g}-hour maximum.",
                value=duration,
                requirement=f"Maximum duration: {max_hours:g} hours",
            )

    def check_sample_rate(self, profile: AudioTechnicalProfile, findings: Findings) -> None:
        rate = profile.sample_rate_hz
        if rate <= 0:
            return

        if rate < self.limits.min_sample_rate_hz:
            findings.add(
                "SAMPLE_RATE_TOO_LOW",
                IssueSeverity.ERROR,
                "sampleRate",
                f"Sample rate ({rate:,} Hz) is below the {self.limits.min_sample_rate_hz:,} Hz "
                "minimum required for DSP distribution.",
                value=rate,
                requirement=f"Minimum sample rate: {self.limits.min_sample_rate_hz:,} Hz",
                recommendation=REC_SAMPLE_RATE,
            )
        elif rate not in self.limits.standard_sample_rates:
            findings.add(
                "SAMPLE_RATE_NONSTANDARD",
                IssueSeverity.WARNING,
                "sampleRate",
                f"Sample rate ({rate:,} Hz) is non-standard. Some DSPs may reject it.",
                value=rate,
                requirement="Recommended: 44,100 Hz or 48,000 Hz",
            )

    def check_bit_depth(self, profile: AudioTechnicalProfile, findings: Findings) -> None:
        bits = profile.bit_depth
        if not profile.is_lossless or bits is None:
            return

        if bits < self.limits.min_bit_depth_lossless:
            findings.add(
                "BIT_DEPTH_TOO_LOW",
                IssueSeverity.ERROR,
                "bitDepth",
                f"Bit depth ({bits}-bit) is below the {self.limits.min_bit_depth_lossless}-bit "
                "minimum for lossless formats.",
                value=bits,
                requirement=f"Minimum bit depth for WAV/FLAC/AIFF: {self.limits.min_bit_depth_lossless}-bit",
                recommendation=REC_BIT_DEPTH,
            )
        elif bits == self.limits.min_bit_depth_lossless:
            findings.add(
                "BIT_DEPTH_ACCEPTABLE",
                IssueSeverity.INFO,
                "bitDepth",
                f"{bits}-bit depth meets the minimum requirement. "
                f"{self.limits.preferred_bit_depth}-bit is preferred for distribution.",
                value=bits,
                requirement=f"Preferred: {self.limits.preferred_bit_depth}-bit",
            )

    def check_channels(self, profile: AudioTechnicalProfile, findings: Findings, allow_mono: bool = True) -> None:
        channels = profile.channels

        if channels > self.limits.max_channels:
            findings.add(
                "TOO_MANY_CHANNELS",
                IssueSeverity.ERROR,
                "channels",
                f"{channels}-channel audio is not supported for standard distribution. "
                "Use stereo (2-channel) or submit a Dolby Atmos master separately.",
                value=channels,
                requirement=f"Maximum: {self.limits.max_channels} channels (stereo). Dolby Atmos handled separately.",
            )
        elif channels == 1 and not allow_mono:
            findings.add(
                "MONO_NOT_ALLOWED",
                IssueSeverity.ERROR,
                "channels",
                "Mono audio is not accepted for this distribution tier.",
                value=channels,
                requirement="Stereo (2-channel) required",
                recommendation=REC_STEREO,
            )
        elif channels == 1:
            findings.add(
                "MONO_AUDIO",
                IssueSeverity.WARNING,
                "channels",
                "This track is mono. Most DSPs accept mono, but stereo is strongly recommended "
                "for the best listening experience.",
                value=channels,
                requirement="Recommended: Stereo (2-channel)",
                recommendation=REC_STEREO,
            )

    def check_bitrate(
        self,
        profile: AudioTechnicalProfile,
        findings: Findings,
        min_bitrate_kbps: int | None = None,
    ) -> None:
        kbps = profile.bitrate_kbps
        if profile.is_lossless or kbps is None:
            return

        minimum = min_bitrate_kbps if min_bitrate_kbps is not None else self.limits.min_bitrate_kbps_lossy
        recommended = self.limits.recommended_bitrate_kbps_lossy

        if kbps < minimum:
            findings.add(
                "BITRATE_TOO_LOW",
                IssueSeverity.ERROR,
                "bitrate",
                f"Bitrate ({kbps} kbps) is below the {minimum} kbps minimum for lossy formats.",
                value=kbps,
                requirement=f"Minimum bitrate for MP3/AAC/M4A: {minimum} kbps",
                recommendation=(
                    f"Re-export your MP3 at {recommended} kbps. {minimum} kbps is the minimum accepted, "
                    f"but {recommended} kbps is strongly recommended."
                ),
            )
        if kbps < recommended:
            findings.add(
                "BITRATE_SUBOPTIMAL",
                IssueSeverity.INFO,
                "bitrate",
                f"Bitrate ({kbps} kbps) is acceptable but {recommended} kbps is recommended "
                "for the best quality on DSPs.",
                value=kbps,
                requirement=f"Recommended: {recommended} kbps",
            )

    def check_format_class(self, profile: AudioTechnicalProfile, findings: Findings) -> None:
        """Lossy sources never qualify for DSP distribution, however good the encode."""
        if profile.is_lossless:
            return

        findings.add(
            "LOSSY_FORMAT",
            IssueSeverity.WARNING,
            "format",
            f"{profile.format} is a lossy format. DSPs require lossless source files (WAV, FLAC, AIFF) "
            "for distribution. This track can be streamed on Boptone but cannot be submitted "
            "for global DSP distribution.",
            value=profile.format.lower(),
            requirement="Lossless source file required for DSP distribution (WAV, FLAC, or AIFF)",
            recommendation=REC_LOSSLESS,
        )

    # ------------------------------------------------------------------
    # Loudness checks
    # ------------------------------------------------------------------

    def check_loudness(self, report: LoudnessReport, findings: Findings) -> None:
        """Apply true peak and integrated loudness thresholds to a measurement."""
        settings = self.loudness
        peak = report.true_peak_dbtp

        if report.is_clipping and peak is not None:
            findings.add(
                "AUDIO_CLIPPING",
                IssueSeverity.ERROR,
                "truePeak",
                f"True peak ({peak:.1f} dBTP) exceeds {CLIPPING_THRESHOLD_DBTP:g} dBTP. "
                "This track is clipping and will sound distorted on DSPs.",
                value=peak,
                requirement=(
                    f"True peak must be below {CLIPPING_THRESHOLD_DBTP:.1f} dBTP "
                    f"(recommended: {settings.true_peak_ceiling_dbtp:.1f} dBTP)"
                ),
                recommendation=REC_LIMITER,
            )
        elif peak is not None and peak > settings.true_peak_ceiling_dbtp:
            findings.add(
                "TRUE_PEAK_HIGH",
                IssueSeverity.WARNING,
                "truePeak",
                f"True peak ({peak:.1f} dBTP) is above the recommended "
                f"{settings.true_peak_ceiling_dbtp:.1f} dBTP ceiling. "
                "Some DSPs may apply additional limiting.",
                value=peak,
                requirement=f"Recommended: {settings.true_peak_ceiling_dbtp:.1f} dBTP or lower",
            )

        lufs = report.integrated_lufs
        if lufs is None:
            return

        target = f"Recommended: {settings.streaming_target_lufs:g} LUFS for streaming"
        if lufs > settings.extremely_loud_lufs:
            findings.add(
                "LOUDNESS_EXTREMELY_HIGH",
                IssueSeverity.WARNING,
                "loudness",
                f"Integrated loudness ({lufs:.1f} LUFS) is extremely high. "
                "DSPs will apply heavy gain reduction, which may degrade audio quality.",
                value=lufs,
                requirement=target,
                recommendation=REC_TOO_LOUD,
            )
        elif lufs > settings.loud_lufs:
            findings.add(
                "LOUDNESS_HIGH",
                IssueSeverity.INFO,
                "loudness",
                f"Integrated loudness ({lufs:.1f} LUFS) is above streaming targets. "
                "DSPs will reduce the volume during playback.",
                value=lufs,
                requirement=target,
            )
        elif lufs < settings.quiet_lufs:
            findings.add(
                "LOUDNESS_TOO_LOW",
                IssueSeverity.WARNING,
                "loudness",
                f"Integrated loudness ({lufs:.1f} LUFS) is very low. "
                "The track may sound quiet compared to other music on DSPs.",
                value=lufs,
                requirement=target,
                recommendation=REC_TOO_QUIET,
            )
