"""Deck mutation pipeline: archive access, slide text extraction, notes and audio write-back."""

from .archive import ArchiveStore
from .extractor import SlideTextExtractor
from .locator import PartLocator
from .notes import build_notes_part
from .patcher import SlidePatcher, patch_markup
from .pipeline import DeckPipeline
from .registry import PackageRegistry

__all__ = [
    "ArchiveStore",
    "DeckPipeline",
    "PackageRegistry",
    "PartLocator",
    "SlidePatcher",
    "SlideTextExtractor",
    "build_notes_part",
    "patch_markup",
]
