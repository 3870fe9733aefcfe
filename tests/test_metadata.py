"""Tests for metadata extraction."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from mutagen import MutagenError

from audiogate.config import FormatSettings
from audiogate.exceptions import MetadataExtractionError
from audiogate.quality.formats import FormatDetector
from audiogate.quality.metadata import (
    MetadataExtractor,
    MetadataFailed,
    MetadataParsed,
    MetadataParser,
    MutagenMetadataParser,
    ParsedAudioFormat,
)
from conftest import StubParser, wav_bytes


class FLAC:
    """Stand-in named like mutagen's FLAC file type."""

    def __init__(self, info, tags=None):
        self.info = info
        self.tags = tags


class MP4(FLAC):
    pass


class MP3(FLAC):
    pass


@pytest.fixture
def detector() -> FormatDetector:
    return FormatDetector.from_config(FormatSettings())


class TestParsedAudioFormat:
    """Tests for ParsedAudioFormat model."""

    def test_bitrate_kbps_rounds(self):
        """Test bits per second are rounded to kbps."""
        assert ParsedAudioFormat(bitrate=320_000).bitrate_kbps == 320
        assert ParsedAudioFormat(bitrate=127_600).bitrate_kbps == 128

    def test_bitrate_kbps_unknown(self):
        """Test missing or zero bitrate gives None."""
        assert ParsedAudioFormat().bitrate_kbps is None
        assert ParsedAudioFormat(bitrate=0).bitrate_kbps is None


class TestMutagenMetadataParser:
    """Tests for the mutagen-backed parser."""

    def test_is_metadata_parser(self):
        """Test parser satisfies the MetadataParser protocol."""
        assert isinstance(MutagenMetadataParser(), MetadataParser)

    def test_parse_flac(self):
        """Test FLAC stream properties are mapped."""
        info = SimpleNamespace(sample_rate=96_000, bits_per_sample=24, channels=2, length=200.5, bitrate=2_500_000)
        with patch("audiogate.quality.metadata.mutagen.File", return_value=FLAC(info, {"ENCODER": ["Logic Pro"]})):
            parsed = MutagenMetadataParser().parse(b"fLaC", "mix.flac")

        assert parsed.container == "FLAC"
        assert parsed.sample_rate == 96_000
        assert parsed.bits_per_sample == 24
        assert parsed.number_of_channels == 2
        assert parsed.duration == 200.5
        assert parsed.lossless is True
        assert parsed.bitrate_kbps == 2500
        assert parsed.tool == "Logic Pro"

    def test_parse_passes_filename_hint(self):
        """Test the in-memory stream carries the declared filename."""
        info = SimpleNamespace(sample_rate=44_100, channels=2, length=10.0)
        with patch("audiogate.quality.metadata.mutagen.File", return_value=FLAC(info)) as mock_file:
            MutagenMetadataParser().parse(b"data", "hint.flac")

        stream = mock_file.call_args.args[0]
        assert stream.name == "hint.flac"
        assert stream.read() == b"data"

    def test_parse_mp3_is_lossy(self):
        """Test MP3 is lossy and reports encoder info."""
        info = SimpleNamespace(sample_rate=44_100, channels=2, length=180.0, bitrate=320_000, encoder_info="LAME 3.100")
        with patch("audiogate.quality.metadata.mutagen.File", return_value=MP3(info)):
            parsed = MutagenMetadataParser().parse(b"ID3", "song.mp3")

        assert parsed.lossless is False
        assert parsed.bits_per_sample is None
        assert parsed.tool == "LAME 3.100"

    def test_parse_mp4_alac_is_lossless(self):
        """Test ALAC inside MP4 counts as lossless, AAC does not."""
        alac = SimpleNamespace(sample_rate=48_000, channels=2, length=60.0, codec="alac", bits_per_sample=24)
        aac = SimpleNamespace(sample_rate=48_000, channels=2, length=60.0, codec="mp4a.40.2")
        with patch("audiogate.quality.metadata.mutagen.File", return_value=MP4(alac)):
            assert MutagenMetadataParser().parse(b"", "a.m4a").lossless is True
        with patch("audiogate.quality.metadata.mutagen.File", return_value=MP4(aac)):
            assert MutagenMetadataParser().parse(b"", "a.m4a").lossless is False

    def test_parse_unrecognised_stream(self):
        """Test mutagen returning None raises MetadataExtractionError."""
        with patch("audiogate.quality.metadata.mutagen.File", return_value=None):
            with pytest.raises(MetadataExtractionError, match="Unrecognised audio stream"):
                MutagenMetadataParser().parse(b"garbage", "x.wav")

    def test_parse_real_wav(self):
        """Test a real 24-bit stereo WAV is read through mutagen."""
        parsed = MutagenMetadataParser().parse(wav_bytes(40.0), "master.wav")

        assert parsed.container == "WAVE"
        assert parsed.sample_rate == 44_100
        assert parsed.bits_per_sample == 24
        assert parsed.number_of_channels == 2
        assert parsed.duration == pytest.approx(40.0)
        assert parsed.lossless is True

    def test_parse_real_mono_wav(self):
        """Test a real 16-bit mono WAV at 48 kHz."""
        parsed = MutagenMetadataParser().parse(
            wav_bytes(2.5, sample_rate=48_000, bit_depth=16, channels=1), "voice.wav"
        )

        assert parsed.sample_rate == 48_000
        assert parsed.bits_per_sample == 16
        assert parsed.number_of_channels == 1
        assert parsed.duration == pytest.approx(2.5)

    def test_parse_truncated_wav(self):
        """Test bytes that are not audio raise MetadataExtractionError."""
        with pytest.raises(MetadataExtractionError):
            MutagenMetadataParser().parse(b"\x00" * 64, "broken.wav")

    def test_parse_mutagen_error(self):
        """Test mutagen errors are wrapped with the filename."""
        with patch("audiogate.quality.metadata.mutagen.File", side_effect=MutagenError("bad header")):
            with pytest.raises(MetadataExtractionError) as exc_info:
                MutagenMetadataParser().parse(b"garbage", "x.wav")

        assert exc_info.value.filename == "x.wav"
        assert "bad header" in str(exc_info.value)


class TestMetadataExtractor:
    """Tests for MetadataExtractor class."""

    def test_extract_builds_profile(self, detector, parsed_format):
        """Test a successful parse yields a profile with format table values."""
        extractor = MetadataExtractor(StubParser(parsed_format()))
        outcome = extractor.extract(b"x" * 1000, "mix.flac", detector.detect("mix.flac"))

        assert isinstance(outcome, MetadataParsed)
        profile = outcome.profile
        assert profile.format == "FLAC"
        assert profile.mime_type == "audio/flac"
        assert profile.file_size_bytes == 1000
        assert profile.sample_rate_hz == 44_100
        assert profile.bit_depth == 24
        assert profile.channel_layout == "Stereo"
        assert profile.is_lossless is True

    def test_extract_fills_gaps(self, detector):
        """Test missing values become zero and codec falls back to the format table."""
        extractor = MetadataExtractor(StubParser(ParsedAudioFormat()))
        outcome = extractor.extract(b"x", "a.mp3", detector.detect("a.mp3"))

        profile = outcome.profile
        assert profile.duration_seconds == 0.0
        assert profile.sample_rate_hz == 0
        assert profile.channels == 0
        assert profile.codec == "mp3"
        assert profile.bitrate_kbps is None

    def test_lossless_follows_declared_format(self, detector, parsed_format):
        """Test losslessness comes from the extension, not the parser."""
        extractor = MetadataExtractor(StubParser(parsed_format(lossless=False)))
        outcome = extractor.extract(b"x", "a.wav", detector.detect("a.wav"))
        assert outcome.profile.is_lossless is True

    def test_extract_failure(self, detector):
        """Test any parser exception becomes MetadataFailed."""
        extractor = MetadataExtractor(StubParser(error=RuntimeError("truncated")))
        outcome = extractor.extract(b"x", "a.wav", detector.detect("a.wav"))

        assert isinstance(outcome, MetadataFailed)
        assert outcome.reason == "truncated"

    def test_extract_failure_without_message(self, detector):
        """Test an exception without a message is reported by type name."""
        extractor = MetadataExtractor(StubParser(error=ValueError()))
        outcome = extractor.extract(b"x", "a.wav", detector.detect("a.wav"))
        assert outcome.reason == "ValueError"

    def test_default_parser_is_mutagen(self):
        """Test extractor defaults to the mutagen parser."""
        assert isinstance(MetadataExtractor().parser, MutagenMetadataParser)
