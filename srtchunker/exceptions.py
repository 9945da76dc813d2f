"""Custom Exceptions for the srtchunker package."""

from typing import List, Optional


class SrtChunkerError(Exception):
    """Base class for exceptions in this package."""
    pass

class ConfigurationError(SrtChunkerError):
    """Exception raised for errors in configuration loading or validation."""
    pass

class MalformedTimecode(SrtChunkerError, ValueError):
    """A timecode string does not match HH:MM:SS,mmm or has an out-of-range field."""

    def __init__(self, value: str, reason: str = "does not match HH:MM:SS,mmm"):
        self.value = value
        self.reason = reason
        super().__init__(f"Malformed timecode {value!r}: {reason}")

class MalformedEntry(SrtChunkerError):
    """
    A subtitle block could not be turned into an entry.

    Never raised out of the parser: instances are collected on the parsed
    track so callers can report them.
    """

    def __init__(self, block_index: int, block: str, reason: str):
        self.block_index = block_index
        self.block = block
        self.reason = reason
        super().__init__(f"Block {block_index}: {reason}")

class EmptyTrack(SrtChunkerError):
    """No valid subtitle entry survived parsing."""

    def __init__(self, message: str = "No valid subtitle entries found", malformed: Optional[List[MalformedEntry]] = None):
        self.malformed = list(malformed or [])
        if self.malformed:
            message = f"{message} ({len(self.malformed)} malformed block(s) skipped)"
        super().__init__(message)

class EnrichmentFailure(SrtChunkerError):
    """A keyword or summary call failed for one chunk. Recorded, not raised."""

    def __init__(self, chunk_index: int, field: str, cause: BaseException):
        self.chunk_index = chunk_index
        self.field = field
        self.cause = cause
        super().__init__(f"Chunk {chunk_index}: {field} enrichment failed: {cause}")

class EnrichmentError(SrtChunkerError):
    """Exception raised by keyword/summary models (loading or inference)."""
    pass

class AudioExtractionError(SrtChunkerError):
    """Exception raised for errors during audio extraction."""
    pass

class TranscriptionError(SrtChunkerError):
    """Exception raised for errors during transcription."""
    pass

class VideoSearchError(SrtChunkerError):
    """Exception raised when the stock video search fails."""
    pass

class FormattingError(SrtChunkerError):
    """Exception raised for errors while reading or writing subtitle files."""
    pass

class FileSystemError(SrtChunkerError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
