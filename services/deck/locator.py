"""Locate the slide, relationship and notes parts of a deck."""

from __future__ import annotations

import re

from shared.models import SlideReference

from .archive import ArchiveStore

SLIDES_DIR = "ppt/slides"
NOTES_DIR = "ppt/notesSlides"
MEDIA_DIR = "ppt/media"

_SLIDE_PART = re.compile(r"^ppt/slides/slide[^/]*\.xml$")
_SLIDE_NUMBER = re.compile(r"slide(\d+)\.xml$")


def slide_path(slide_number: int) -> str:
    return f"{SLIDES_DIR}/slide{slide_number}.xml"


def slide_rels_path(slide_number: int) -> str:
    return f"{SLIDES_DIR}/_rels/slide{slide_number}.xml.rels"


def notes_path(slide_number: int) -> str:
    return f"{NOTES_DIR}/notesSlide{slide_number}.xml"


def notes_rels_path(slide_number: int) -> str:
    return f"{NOTES_DIR}/_rels/notesSlide{slide_number}.xml.rels"


def media_path(filename: str) -> str:
    return f"{MEDIA_DIR}/{filename}"


def slide_number_from_path(path: str) -> int:
    """Numeric suffix of ``.../slideN.xml``; 0 when it cannot be parsed."""
    match = _SLIDE_NUMBER.search(path)
    if not match:
        return 0
    return int(match.group(1))


class PartLocator:
    """Enumerate slide parts in numeric (not lexical) order."""

    def __init__(self, archive: ArchiveStore) -> None:
        self.archive = archive

    def list_slides(self) -> list[SlideReference]:
        slides: list[SlideReference] = []
        for path in self.archive.paths():
            if not _SLIDE_PART.match(path):
                continue
            number = slide_number_from_path(path)
            rels = f"{SLIDES_DIR}/_rels/{path.rsplit('/', 1)[1]}.rels"
            slides.append(SlideReference(number=number, path=path, rels_path=rels))
        # sorted() is stable, so parts with an unparsable suffix keep archive order
        return sorted(slides, key=lambda ref: ref.number)

    def slide_count(self) -> int:
        return len(self.list_slides())

    def exists(self, path: str) -> bool:
        return self.archive.exists(path)

    def get(self, path: str) -> bytes | None:
        return self.archive.get(path)
