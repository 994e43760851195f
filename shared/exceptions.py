"""
Exception hierarchy for deck processing.

Fatal errors (``CorruptArchive``, ``MissingRequiredInput``,
``SerializationFailure``) abort the request. ``SlidePartAbsent`` and
``PackagePartAbsent`` are recorded by the pipeline and processing continues.
"""

from __future__ import annotations


class DeckProcessingError(Exception):
    """Base class for all deck pipeline errors."""

    fatal: bool = True


class CorruptArchive(DeckProcessingError):
    """Raised when the uploaded bytes are not a readable zip container."""


class MissingRequiredInput(DeckProcessingError):
    """Raised when the deck or the script list was not supplied."""


class SerializationFailure(DeckProcessingError):
    """Raised when the updated archive cannot be written back to bytes."""


class SlidePartAbsent(DeckProcessingError):
    """A referenced slide number has no markup part in the archive."""

    fatal = False

    def __init__(self, slide_number: int, path: str):
        super().__init__(f"Slide {slide_number} has no markup part at {path}")
        self.slide_number = slide_number
        self.path = path


class PackagePartAbsent(DeckProcessingError):
    """A package-wide registry part is missing from the archive."""

    fatal = False

    def __init__(self, path: str):
        super().__init__(f"Package part {path} is missing")
        self.path = path


class ScriptGenerationError(Exception):
    """Raised when the script generation driver fails."""

    def __init__(self, message: str, status_code: int = 500, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.hint = hint
