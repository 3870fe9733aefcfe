"""
Cover art validation.

Checks the image format by extension and the file size. With
``check_signature`` enabled the leading bytes must also match the extension
(JPEG start-of-image marker, PNG magic prefix). Pixel
dimensions are verified later in the upload pipeline, so every accepted image
carries a warning saying so.
"""

import logging

from ..config import CoverArtSettings
from .formats import extension_of
from .models import CoverArtValidationResult

logger = logging.getLogger(__name__)

# Leading bytes per image format
IMAGE_SIGNATURES: dict[str, bytes] = {
    "JPEG": b"\xff\xd8",
    "PNG": b"\x89PNG",
}


def sniff_image_format(buffer: bytes) -> str | None:
    """Identify an image format from its signature, or None."""
    for name, signature in IMAGE_SIGNATURES.items():
        if buffer.startswith(signature):
            return name
    return None


class CoverArtValidator:
    """
    Validates cover art against DSP artwork requirements.

    Example:
        validator = CoverArtValidator.from_config(settings.cover_art)
        result = validator.validate(data, "cover.jpg")
        if not result.is_valid:
            print(result.summary)
    """

    def __init__(self, settings: CoverArtSettings | None = None):
        self.settings = settings or CoverArtSettings()

    @classmethod
    def from_config(cls, config: CoverArtSettings) -> "CoverArtValidator":
        """Create validator from CoverArtSettings configuration."""
        return cls(settings=config)

    @property
    def accepted_names(self) -> str:
        names = list(dict.fromkeys(self.settings.formats.values()))
        return " or ".join(names)

    def validate(self, buffer: bytes, filename: str) -> CoverArtValidationResult:
        settings = self.settings
        errors: list[str] = []
        warnings: list[str] = []

        size_bytes = len(buffer)
        size_mb = size_bytes / (1024**2)
        ext = extension_of(filename)

        # Format check
        detected_format = settings.formats.get(ext)
        if detected_format is None:
            errors.append(f'Cover art format "{ext}" is not accepted. Use {self.accepted_names}.')
        elif settings.check_signature and buffer:
            sniffed = sniff_image_format(buffer)
            if sniffed != detected_format:
                found = sniffed or "no recognised image signature"
                errors.append(
                    f'Cover art content does not match its "{ext}" extension (found {found}). '
                    f"Re-export the image as {detected_format}."
                )

        # File size check
        if size_mb > settings.max_file_size_mb:
            errors.append(
                f"Cover art file size ({size_mb:.1f} MB) exceeds the {settings.max_file_size_mb:g} MB maximum."
            )
        if size_mb < settings.min_file_size_mb:
            errors.append("Cover art file appears to be empty or corrupt.")

        if not errors:
            low, high = settings.min_dimension_px, settings.max_dimension_px
            warnings.append(
                f"Cover art dimensions will be verified during processing. Minimum: {low}×{low}px, "
                f"Maximum: {high}×{high}px, square (1:1) ratio required."
            )

        is_valid = not errors
        if is_valid:
            summary = (
                f"Cover art format accepted ({detected_format}, {size_mb:.1f} MB). "
                "Dimensions will be verified during processing."
            )
        else:
            summary = f"Cover art rejected: {errors[0]}"
            logger.debug("Cover art %s rejected with %d error(s)", filename, len(errors))

        return CoverArtValidationResult(
            is_valid=is_valid,
            is_distribution_ready=is_valid and not warnings,
            errors=errors,
            warnings=warnings,
            format=detected_format,
            file_size_bytes=size_bytes,
            summary=summary,
        )
