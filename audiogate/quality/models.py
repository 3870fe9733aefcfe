"""
Validation data models.
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, Field, computed_field, field_serializer, model_validator

# Any true peak above full scale is clipping
CLIPPING_THRESHOLD_DBTP = 0.0


class QualityTier(IntEnum):
    """
    Distribution quality tiers.

    Higher number = better tier. Ordering is meaningful: a result is never
    placed in a tier better than its issue severities allow.
    """

    REJECTED = 0  # Upload blocked
    BOPTONE_ONLY = 1  # Streams on Boptone, not eligible for DSP delivery
    DISTRIBUTION_READY = 2  # Meets every DSP requirement
    BOPTONE_PREMIUM = 3  # Hi-res lossless (24-bit / 96 kHz+)

    @property
    def value_name(self) -> str:
        """Stable wire name (e.g. ``distribution_ready``)."""
        return self.name.lower()

    @property
    def label(self) -> str:
        """Human-readable tier label."""
        return {
            QualityTier.REJECTED: "Rejected",
            QualityTier.BOPTONE_ONLY: "Boptone Only",
            QualityTier.DISTRIBUTION_READY: "Distribution Ready",
            QualityTier.BOPTONE_PREMIUM: "Boptone Premium",
        }.get(self, "Unknown")

    @property
    def emoji(self) -> str:
        """Emoji indicator for tier."""
        return {
            QualityTier.REJECTED: "⛔",
            QualityTier.BOPTONE_ONLY: "🎧",
            QualityTier.DISTRIBUTION_READY: "✅",
            QualityTier.BOPTONE_PREMIUM: "💎",
        }.get(self, "❓")

    @classmethod
    def from_name(cls, name: str) -> "QualityTier":
        """Parse a wire name back into a tier."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown quality tier: {name!r}") from None


class IssueSeverity(str, Enum):
    """Severity of a validation issue."""

    ERROR = "error"  # Blocks upload
    WARNING = "warning"  # Uploadable, blocks DSP distribution
    INFO = "info"  # Advice only


class ValidationIssue(BaseModel):
    """A single finding produced by a validation check."""

    model_config = {"frozen": True}

    code: str = Field(description="Stable machine-readable code (e.g. DURATION_TOO_SHORT)")
    severity: IssueSeverity
    field: str = Field(description="Which property of the file the issue concerns")
    message: str = Field(description="Human-readable explanation")
    value: str | int | float | None = Field(default=None, description="Measured value, when relevant")
    requirement: str | None = Field(default=None, description="What the rule requires")

    @property
    def is_error(self) -> bool:
        return self.severity == IssueSeverity.ERROR


def channel_layout_for(channels: int) -> str:
    """Describe a channel count the way the upload UI shows it."""
    if channels == 1:
        return "Mono"
    if channels == 2:
        return "Stereo"
    return f"{channels} channels"


class AudioTechnicalProfile(BaseModel):
    """Immutable technical snapshot of an uploaded file, computed once per validation."""

    model_config = {"frozen": True}

    format: str = Field(description="Format display name (WAV, FLAC, MP3, ...)")
    mime_type: str
    file_size_bytes: int = Field(default=0)
    duration_seconds: float = Field(default=0.0, description="0 when the container does not report it")
    sample_rate_hz: int = Field(default=0, description="0 when the container does not report it")
    bit_depth: int | None = Field(default=None, description="Bits per sample (lossless formats)")
    channels: int = Field(default=0)
    bitrate_kbps: int | None = Field(default=None)
    is_lossless: bool = Field(default=False)
    codec: str | None = Field(default=None)
    encoder: str | None = Field(default=None, description="Encoder/tool that produced the file")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def file_size_mb(self) -> float:
        """Size in megabytes."""
        return self.file_size_bytes / (1024**2)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def channel_layout(self) -> str:
        """Channel layout label (Mono, Stereo, N channels)."""
        return channel_layout_for(self.channels)

    @property
    def duration_display(self) -> str:
        """Duration as m:ss, or 'unknown duration'."""
        if self.duration_seconds <= 0:
            return "unknown duration"
        minutes = int(self.duration_seconds // 60)
        seconds = round(self.duration_seconds % 60)
        if seconds == 60:
            minutes, seconds = minutes + 1, 0
        return f"{minutes}:{seconds:02d}"

    def describe(self) -> str:
        """One-line description, e.g. ``FLAC · 44,100 Hz · 24-bit · Stereo · 3:00``."""
        parts = [self.format, f"{self.sample_rate_hz:,} Hz"]
        if self.bit_depth:
            parts.append(f"{self.bit_depth}-bit")
        parts.append(self.channel_layout)
        parts.append(self.duration_display)
        return " · ".join(parts)


class LoudnessReport(BaseModel):
    """EBU R128 measurement summary with per-platform readiness."""

    model_config = {"frozen": True}

    integrated_lufs: float | None = Field(default=None, description="Integrated loudness (LUFS)")
    true_peak_dbtp: float | None = Field(default=None, description="True peak (dBTP)")
    loudness_range: float | None = Field(default=None, description="Loudness range (LU)")

    spotify_ready: bool = Field(default=False)
    apple_ready: bool = Field(default=False)
    youtube_ready: bool = Field(default=False)
    platform_readiness: dict[str, bool] = Field(
        default_factory=dict, description="Readiness for every configured platform"
    )
    recommendation: str = Field(default="")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_clipping(self) -> bool:
        """True peak above 0 dBTP. Unknown peak is never clipping."""
        return self.true_peak_dbtp is not None and self.true_peak_dbtp > CLIPPING_THRESHOLD_DBTP


class AudioValidationResult(BaseModel):
    """Full outcome of one distribution validation."""

    quality_tier: QualityTier = Field(description="Tier the track qualifies for")
    is_uploadable: bool = Field(description="No blocking errors")
    is_distribution_ready: bool = Field(description="No errors and no warnings")
    issues: list[ValidationIssue] = Field(default_factory=list, description="Every issue, in emission order")
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    info: list[ValidationIssue] = Field(default_factory=list)
    technical_profile: AudioTechnicalProfile | None = None
    loudness_report: LoudnessReport | None = None
    summary: str = ""
    recommendations: list[str] = Field(default_factory=list)

    @field_serializer("quality_tier")
    def _serialize_tier(self, tier: QualityTier) -> str:
        return tier.value_name

    @model_validator(mode="after")
    def _check_invariants(self) -> "AudioValidationResult":
        if self.is_uploadable != (len(self.errors) == 0):
            raise ValueError("is_uploadable must equal 'no errors'")
        if self.is_distribution_ready != (not self.errors and not self.warnings):
            raise ValueError("is_distribution_ready must equal 'no errors and no warnings'")
        if not self.is_uploadable and self.quality_tier != QualityTier.REJECTED:
            raise ValueError("non-uploadable results must be rejected")
        return self

    @property
    def issue_codes(self) -> list[str]:
        """Codes of all issues, in emission order."""
        return [issue.code for issue in self.issues]

    def has_issue(self, code: str) -> bool:
        """Whether an issue with this code was raised."""
        return any(issue.code == code for issue in self.issues)

    @property
    def tier_label(self) -> str:
        return self.quality_tier.label


class CoverArtValidationResult(BaseModel):
    """Outcome of cover art validation (independent of audio results)."""

    is_valid: bool
    is_distribution_ready: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    format: str | None = Field(default=None, description="Detected format (JPEG/PNG)")
    file_size_bytes: int = Field(default=0)
    width_px: int | None = Field(default=None, description="Not measured yet")
    height_px: int | None = Field(default=None, description="Not measured yet")
    summary: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def file_size_mb(self) -> float:
        """Size in megabytes."""
        return self.file_size_bytes / (1024**2)


class LegacyAudioCheck(BaseModel):
    """Coarse pre-check result used by the early upload step."""

    is_valid: bool
    error: str | None = None
    format: str | None = None
    mime_type: str | None = None


class ValidationOptions(BaseModel):
    """Per-call switches for distribution validation."""

    model_config = {"frozen": True}

    skip_loudness: bool = Field(default=False, description="Skip the ffmpeg loudness measurement")
    allow_mono: bool = Field(default=True, description="Mono is a warning (True) or an error (False)")
    min_mp3_bitrate_kbps: int | None = Field(
        default=None, description="Minimum lossy bitrate; None uses the configured default"
    )
