"""Tests for cover art validation."""

import pytest

from audiogate.config import CoverArtSettings
from audiogate.quality.cover_art import CoverArtValidator, sniff_image_format
from conftest import MB

JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * (2 * MB)
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * (2 * MB)


@pytest.fixture
def validator() -> CoverArtValidator:
    return CoverArtValidator.from_config(CoverArtSettings())


class TestSniffImageFormat:
    """Tests for sniff_image_format."""

    def test_jpeg(self):
        """Test JPEG signature."""
        assert sniff_image_format(JPEG) == "JPEG"

    def test_png(self):
        """Test PNG signature."""
        assert sniff_image_format(PNG) == "PNG"

    def test_unknown(self):
        """Test other content."""
        assert sniff_image_format(b"GIF89a") is None
        assert sniff_image_format(b"") is None


class TestCoverArtValidator:
    """Tests for CoverArtValidator class."""

    @pytest.mark.parametrize("filename", ["cover.jpg", "cover.JPEG"])
    def test_valid_jpeg(self, validator, filename):
        """Test a 2 MB JPEG is valid with a dimensions warning."""
        result = validator.validate(JPEG, filename)

        assert result.is_valid
        assert not result.is_distribution_ready
        assert result.format == "JPEG"
        assert result.errors == []
        assert len(result.warnings) == 1
        assert "3000×3000px" in result.warnings[0]
        assert result.summary == (
            "Cover art format accepted (JPEG, 2.0 MB). Dimensions will be verified during processing."
        )
        assert result.width_px is None

    def test_valid_png(self, validator):
        """Test a PNG is valid."""
        result = validator.validate(PNG, "art.png")
        assert result.is_valid
        assert result.format == "PNG"

    @pytest.mark.parametrize("filename", ["cover.gif", "cover.webp", "cover"])
    def test_unsupported_format(self, validator, filename):
        """Test other image formats are rejected."""
        result = validator.validate(JPEG, filename)

        assert not result.is_valid
        assert result.format is None
        assert "Use JPEG or PNG" in result.errors[0]
        assert result.warnings == []
        assert result.summary.startswith("Cover art rejected: ")

    def test_extension_only_by_default(self, validator):
        """Test content is not inspected unless signature checking is enabled."""
        assert validator.validate(PNG, "cover.jpg").is_valid
        assert validator.validate(b"\x00" * MB, "cover.png").is_valid

    @pytest.mark.parametrize(
        ("data", "filename", "expected"),
        [
            (b"\xff\xd8" + b"\x00" * (500 * 1024), "cover.jpg", "JPEG"),
            (b"\x89PNG" + b"\x00" * (500 * 1024), "cover.png", "PNG"),
        ],
    )
    def test_minimal_headers_accepted(self, data, filename, expected):
        """Test bare JPEG and PNG headers pass with and without sniffing."""
        for check_signature in (False, True):
            validator = CoverArtValidator(CoverArtSettings(check_signature=check_signature))
            result = validator.validate(data, filename)
            assert result.is_valid
            assert result.format == expected

    def test_signature_mismatch(self):
        """Test a PNG renamed to .jpg is rejected when sniffing."""
        validator = CoverArtValidator(CoverArtSettings(check_signature=True))
        result = validator.validate(PNG, "cover.jpg")

        assert not result.is_valid
        assert "found PNG" in result.errors[0]

    def test_signature_missing(self):
        """Test content without an image signature is rejected when sniffing."""
        validator = CoverArtValidator(CoverArtSettings(check_signature=True))
        result = validator.validate(b"GIF89a" + b"\x00" * MB, "cover.png")

        assert not result.is_valid
        assert "no recognised image signature" in result.errors[0]

    def test_too_large(self, validator):
        """Test images over 30 MB are rejected."""
        result = validator.validate(b"\xff\xd8\xff" + b"\x00" * (31 * MB), "huge.jpg")
        assert not result.is_valid
        assert "30 MB maximum" in result.errors[0]

    def test_too_small(self, validator):
        """Test near-empty images are rejected as corrupt."""
        result = validator.validate(b"\xff\xd8\xff\xe0", "tiny.jpg")
        assert not result.is_valid
        assert result.errors == ["Cover art file appears to be empty or corrupt."]

    def test_empty_file(self, validator):
        """Test an empty file reports only the size error."""
        result = validator.validate(b"", "empty.png")
        assert result.errors == ["Cover art file appears to be empty or corrupt."]

    def test_multiple_errors(self, validator):
        """Test format and size errors are both reported."""
        result = validator.validate(b"", "cover.bmp")
        assert len(result.errors) == 2
        assert result.summary == f"Cover art rejected: {result.errors[0]}"

    def test_file_size_mb(self, validator):
        """Test size is reported in bytes and MB."""
        result = validator.validate(JPEG, "cover.jpg")
        assert result.file_size_bytes == len(JPEG)
        assert round(result.file_size_mb, 1) == 2.0
