"""
Enums and constants used across the application.
"""

from enum import Enum


class ScriptStyle(str, Enum):
    """Presentation styles available for script generation."""

    PROFESSIONAL = "professional"
    CASUAL = "casual"
    EDUCATIONAL = "educational"


class ScriptLength(str, Enum):
    """Script length presets (per-slide speaking time)."""

    SHORT = "beknopt"
    NORMAL = "normaal"
    EXTENDED = "uitgebreid"


class ExtractionMethod(str, Enum):
    """How the slide list returned by the extraction endpoint was produced."""

    STANDARD = "STANDARD_EXTRACTION"
    HYBRID = "HYBRID_EXTRACTION"
    AI_FULL_ANALYSIS = "AI_FULL_ANALYSIS"


class SlideState(str, Enum):
    """Per-slide progress through the mutation pipeline."""

    NO_NOTES = "no-notes"
    NOTES_ADDED = "notes-added"
    NOTES_AND_MEDIA_ADDED = "notes+media-added"
    FULLY_LINKED = "fully-linked"
    SKIPPED = "skipped"
