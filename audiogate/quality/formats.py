"""
Filename-based audio format detection.
"""

from dataclasses import dataclass
from pathlib import PurePath

from ..config import AudioFormatSpec, FormatSettings


@dataclass(frozen=True)
class DetectedFormat:
    """An extension resolved against the format table."""

    extension: str  # lower-case, with leading dot
    spec: AudioFormatSpec

    @property
    def format(self) -> str:
        return self.spec.format

    @property
    def mime_type(self) -> str:
        return self.spec.mime_type

    @property
    def codec(self) -> str:
        return self.spec.codec

    @property
    def is_lossless(self) -> bool:
        return self.spec.is_lossless

    @property
    def legacy_name(self) -> str:
        """Extension without the dot (``aif``, ``flac``), as the legacy check reports it."""
        return self.extension[1:]


def extension_of(filename: str) -> str:
    """
    Lower-cased extension of a filename, including the dot.

    Names without an extension, a bare ``"."`` and dot-files such as
    ``".flac"`` all give ``""``.
    """
    return PurePath(filename).suffix.lower() if filename else ""


class FormatDetector:
    """
    Maps a filename extension to a known container/codec family.

    Example:
        detector = FormatDetector.from_config(settings.formats)
        detected = detector.detect("Master.FLAC")
        if detected is None:
            ...  # UNSUPPORTED_FORMAT
    """

    def __init__(self, formats: dict[str, AudioFormatSpec]):
        self.formats = {ext.lower(): spec for ext, spec in formats.items()}

    @classmethod
    def from_config(cls, config: FormatSettings) -> "FormatDetector":
        """Create detector from FormatSettings configuration."""
        return cls(config.formats)

    def lookup(self, filename: str) -> DetectedFormat | None:
        """Resolve any known extension, including legacy-only ones."""
        ext = extension_of(filename)
        spec = self.formats.get(ext)
        if spec is None:
            return None
        return DetectedFormat(extension=ext, spec=spec)

    def detect(self, filename: str) -> DetectedFormat | None:
        """Resolve an extension accepted for distribution, or None."""
        detected = self.lookup(filename)
        if detected is None or not detected.spec.distribution:
            return None
        return detected

    @property
    def distribution_extensions(self) -> list[str]:
        return [ext for ext, spec in self.formats.items() if spec.distribution]

    @property
    def legacy_extensions(self) -> list[str]:
        return list(self.formats)

    def accepted_formats_text(self) -> str:
        """Requirement text listing accepted formats, lossless first."""
        names: list[str] = []
        for lossless in (True, False):
            for spec in self.formats.values():
                if spec.distribution and spec.is_lossless == lossless and spec.format not in names:
                    names.append(spec.format)
        lossless_names = {spec.format for spec in self.formats.values() if spec.is_lossless}
        labelled = [f"{name} (preferred)" if name in lossless_names else name for name in names]
        return "Accepted formats: " + ", ".join(labelled)
