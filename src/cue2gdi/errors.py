"""Conversion error taxonomy.

Every error is terminal for the disc being converted. Callers decide whether
to skip the disc and continue with the next one.
"""

from pathlib import Path
from typing import Optional


class ConversionError(Exception):
    """Base class for all disc conversion failures."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class MalformedCueSheet(ConversionError):
    """The CUE sheet cannot be parsed into a valid model."""

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        line_number: Optional[int] = None,
    ):
        super().__init__(message, path)
        self.line_number = line_number

    def __str__(self) -> str:
        location = ""
        if self.path is not None and self.line_number is not None:
            location = f" ({self.path}, line {self.line_number})"
        elif self.path is not None:
            location = f" ({self.path})"
        elif self.line_number is not None:
            location = f" (line {self.line_number})"
        return f"{self.message}{location}"


class SourceTrackFileMissing(ConversionError):
    """A data file referenced by the sheet cannot be opened."""


class TruncatedTrackData(ConversionError):
    """Offset arithmetic exceeds the actual length of a source file."""


class OutputWriteFailure(ConversionError):
    """A track file or the GDI table cannot be written."""
