"""
Configuration management using pydantic-settings.
Loads from config.yaml, .env, and environment variables.

All thresholds the validator applies live here, so a single ``Settings``
value fully describes how a file is judged.
"""

from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file at module import
load_dotenv()


class AudioFormatSpec(BaseModel):
    """One row of the extension -> container/codec table."""

    model_config = {"frozen": True}

    format: str = Field(description="Display name (WAV, FLAC, ...)")
    mime_type: str = Field(description="MIME type reported to callers")
    codec: str = Field(description="Codec family assumed for the extension")
    is_lossless: bool = Field(default=False)
    distribution: bool = Field(
        default=True,
        description="Accepted by the distribution validator (False = legacy pre-check only)",
    )


def _default_formats() -> dict[str, AudioFormatSpec]:
    return {
        ".wav": AudioFormatSpec(format="WAV", mime_type="audio/wav", codec="pcm", is_lossless=True),
        ".flac": AudioFormatSpec(format="FLAC", mime_type="audio/flac", codec="flac", is_lossless=True),
        ".aiff": AudioFormatSpec(format="AIFF", mime_type="audio/aiff", codec="pcm", is_lossless=True),
        ".aif": AudioFormatSpec(format="AIFF", mime_type="audio/aiff", codec="pcm", is_lossless=True),
        ".mp3": AudioFormatSpec(format="MP3", mime_type="audio/mpeg", codec="mp3"),
        ".m4a": AudioFormatSpec(format="M4A", mime_type="audio/mp4", codec="aac"),
        ".aac": AudioFormatSpec(format="AAC", mime_type="audio/aac", codec="aac"),
        ".ogg": AudioFormatSpec(format="OGG", mime_type="audio/ogg", codec="vorbis", distribution=False),
        ".wma": AudioFormatSpec(format="WMA", mime_type="audio/x-ms-wma", codec="wma", distribution=False),
    }


class FormatSettings(BaseSettings):
    """Known audio extensions."""

    model_config = SettingsConfigDict(extra="ignore")

    formats: dict[str, AudioFormatSpec] = Field(
        default_factory=_default_formats,
        description="Lower-case extension (with dot) -> format spec",
    )
    legacy_max_size_mb: float = Field(default=500.0, description="Default ceiling for the legacy pre-check")


class AudioLimitSettings(BaseSettings):
    """Hard limits and quality bars for audio files."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIO_",
        extra="ignore",
    )

    max_file_size_bytes: int = Field(default=2 * 1024**3, description="2 GB upload ceiling")
    min_file_size_bytes: int = Field(default=50 * 1024, description="Below this the file is treated as corrupt")
    min_duration_seconds: float = Field(default=30.0)
    max_duration_seconds: float = Field(default=36_000.0, description="10 hours")
    min_sample_rate_hz: int = Field(default=44_100)
    standard_sample_rates: list[int] = Field(default_factory=lambda: [44_100, 48_000, 88_200, 96_000])
    min_bit_depth_lossless: int = Field(default=16)
    preferred_bit_depth: int = Field(default=24)
    min_bitrate_kbps_lossy: int = Field(default=128)
    recommended_bitrate_kbps_lossy: int = Field(default=320)
    max_channels: int = Field(default=2, description="Stereo max; Atmos masters are delivered separately")

    # Hi-res bar for the premium tier
    premium_min_bit_depth: int = Field(default=24)
    premium_min_sample_rate_hz: int = Field(default=96_000)


class PlatformLoudnessTarget(BaseModel):
    """Integrated loudness target for one streaming platform."""

    model_config = {"frozen": True}

    target_lufs: float
    tolerance_lu: float = 3.0

    def is_ready(self, lufs: float | None) -> bool:
        """Whether a measured loudness lands inside the target window."""
        return lufs is not None and abs(lufs - self.target_lufs) <= self.tolerance_lu


class LoudnessSettings(BaseSettings):
    """Loudness measurement (ffmpeg ebur128) settings and thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="LOUDNESS_",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Run the external measurement at all")
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable (name on PATH or absolute)")
    timeout_seconds: float = Field(default=120.0, description="Hard timeout for one measurement")

    true_peak_ceiling_dbtp: float = Field(default=-1.0)
    extremely_loud_lufs: float = Field(default=-6.0)
    loud_lufs: float = Field(default=-9.0)
    quiet_lufs: float = Field(default=-24.0)
    streaming_target_lufs: float = Field(default=-14.0)
    optimal_window_lu: float = Field(default=2.0)

    platforms: dict[str, PlatformLoudnessTarget] = Field(
        default_factory=lambda: {
            "spotify": PlatformLoudnessTarget(target_lufs=-14.0),
            "apple": PlatformLoudnessTarget(target_lufs=-16.0),
            "youtube": PlatformLoudnessTarget(target_lufs=-14.0),
            "amazon": PlatformLoudnessTarget(target_lufs=-14.0),
            "tidal": PlatformLoudnessTarget(target_lufs=-14.0),
            "deezer": PlatformLoudnessTarget(target_lufs=-15.0),
        },
        description="Platform name -> loudness target",
    )


class CoverArtSettings(BaseSettings):
    """Cover art format and size rules."""

    model_config = SettingsConfigDict(
        env_prefix="COVER_ART_",
        extra="ignore",
    )

    formats: dict[str, str] = Field(
        default_factory=lambda: {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG"},
        description="Accepted extension -> format name",
    )
    max_file_size_mb: float = Field(default=30.0)
    min_file_size_mb: float = Field(default=0.01)
    check_signature: bool = Field(default=False, description="Also confirm the content matches the extension")
    min_dimension_px: int = Field(default=3000)
    max_dimension_px: int = Field(default=6000)


class LoggingSettings(BaseSettings):
    """Logging output settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore",
    )

    level: str = Field(default="info")
    file_path: Path | None = Field(default=None, description="Optional log file")
    use_rich: bool = Field(default=True)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    formats: FormatSettings = Field(default_factory=FormatSettings)
    audio: AudioLimitSettings = Field(default_factory=AudioLimitSettings)
    loudness: LoudnessSettings = Field(default_factory=LoudnessSettings)
    cover_art: CoverArtSettings = Field(default_factory=CoverArtSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = Field(default=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from config.yaml and environment."""
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path("config.yaml")

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_content: Any = yaml.safe_load(f)
                yaml_config: dict[str, Any] = yaml_content or {}

            # Map yaml structure to settings
            if "formats" in yaml_config:
                config_data["formats"] = FormatSettings(**yaml_config["formats"])  # type: ignore
            if "audio" in yaml_config:
                config_data["audio"] = AudioLimitSettings(**yaml_config["audio"])  # type: ignore
            if "loudness" in yaml_config:
                config_data["loudness"] = LoudnessSettings(**yaml_config["loudness"])  # type: ignore
            if "cover_art" in yaml_config:
                config_data["cover_art"] = CoverArtSettings(**yaml_config["cover_art"])  # type: ignore
            if "logging" in yaml_config:
                config_data["logging"] = LoggingSettings(**yaml_config["logging"])  # type: ignore
            if "debug" in yaml_config:
                config_data["debug"] = yaml_config["debug"]

        return cls(**config_data)  # type: ignore


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Reload settings from config."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
