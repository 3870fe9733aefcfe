"""
Package exceptions.

None of these escape ``validate_audio_for_distribution``: collaborators raise
them and the pipeline turns them into issues or an absent loudness report.
"""


class AudioGateError(Exception):
    """Base exception for audiogate errors."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename

    def __str__(self) -> str:
        if self.filename:
            return f"{self.message} ({self.filename})"
        return self.message


class MetadataExtractionError(AudioGateError):
    """The audio metadata library could not read the stream."""

    pass


class LoudnessMeasurementError(AudioGateError):
    """The external loudness tool failed, timed out, or gave unreadable output."""

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        returncode: int | None = None,
        output: str | None = None,
    ) -> None:
        super().__init__(message, filename)
        self.returncode = returncode
        self.output = output
