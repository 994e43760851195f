"""OOXML vocabulary shared by the deck pipeline.

Namespaces, relationship type URIs, content types, well-known part paths, the
reserved identifier table and small lxml helpers live here so every component
allocates ids and writes markup the same way.
"""

from __future__ import annotations

import base64

import lxml.etree as ET

# Namespaces
NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_P = "http://schemas.openxmlformats.org/presentationml/2006/main"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_P14 = "http://schemas.microsoft.com/office/powerpoint/2010/main"
NS_CT = "http://schemas.openxmlformats.org/package/2006/content-types"
NS_PR = "http://schemas.openxmlformats.org/package/2006/relationships"
NS = {"a": NS_A, "p": NS_P, "r": NS_R, "p14": NS_P14, "ct": NS_CT, "pr": NS_PR}

# Relationship types
_REL_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
REL_NOTES_SLIDE = f"{_REL_BASE}/notesSlide"
REL_NOTES_MASTER = f"{_REL_BASE}/notesMaster"
REL_SLIDE = f"{_REL_BASE}/slide"
REL_SLIDE_LAYOUT = f"{_REL_BASE}/slideLayout"
REL_AUDIO = f"{_REL_BASE}/audio"
REL_IMAGE = f"{_REL_BASE}/image"
REL_MEDIA = "http://schemas.microsoft.com/office/2007/relationships/media"

# Content types
CT_NOTES_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.notesSlide+xml"
MEDIA_CONTENT_TYPES = {
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "mp4": "audio/mp4",
    "wma": "audio/x-ms-wma",
    "png": "image/png",
}

# Well-known part paths
CONTENT_TYPES_PATH = "[Content_Types].xml"
PRESENTATION_PATH = "ppt/presentation.xml"
PRESENTATION_RELS_PATH = "ppt/_rels/presentation.xml.rels"
NOTES_MASTER_PATH = "ppt/notesMasters/notesMaster1.xml"
DEFAULT_SLIDE_LAYOUT_TARGET = "../slideLayouts/slideLayout1.xml"


class ReservedIds:
    """Identifier ranges reserved for parts and shapes this pipeline adds.

    Relationship ids are ``rId{offset + slide_number}``; the marker shape id is
    numeric. Offsets are spaced ``SPAN`` apart so no two ranges overlap for
    decks below ``SPAN`` slides.
    """

    SPAN = 1000
    PACKAGE_NOTES_REL = 1000
    SLIDE_NOTES_REL = 3000
    SLIDE_MEDIA_REL = 5000
    MARKER_IMAGE_REL = 6000
    SLIDE_AUDIO_REL = 7000
    MARKER_SHAPE = 8000

    @classmethod
    def _relationship_offsets(cls) -> list[int]:
        return [
            cls.PACKAGE_NOTES_REL,
            cls.SLIDE_NOTES_REL,
            cls.SLIDE_MEDIA_REL,
            cls.MARKER_IMAGE_REL,
            cls.SLIDE_AUDIO_REL,
        ]

    @classmethod
    def validate(cls) -> None:
        offsets = sorted(cls._relationship_offsets())
        for low, high in zip(offsets, offsets[1:]):
            if high - low < cls.SPAN:
                raise ValueError(f"Reserved relationship ranges {low} and {high} overlap")

    @staticmethod
    def _rel(offset: int, slide_number: int) -> str:
        return f"rId{offset + slide_number}"

    @classmethod
    def package_notes_rel(cls, slide_number: int) -> str:
        return cls._rel(cls.PACKAGE_NOTES_REL, slide_number)

    @classmethod
    def slide_notes_rel(cls, slide_number: int) -> str:
        return cls._rel(cls.SLIDE_NOTES_REL, slide_number)

    @classmethod
    def slide_media_rel(cls, slide_number: int) -> str:
        return cls._rel(cls.SLIDE_MEDIA_REL, slide_number)

    @classmethod
    def marker_image_rel(cls, slide_number: int) -> str:
        return cls._rel(cls.MARKER_IMAGE_REL, slide_number)

    @classmethod
    def slide_audio_rel(cls, slide_number: int) -> str:
        return cls._rel(cls.SLIDE_AUDIO_REL, slide_number)

    @classmethod
    def marker_shape_id(cls, slide_number: int) -> int:
        return cls.MARKER_SHAPE + slide_number


ReservedIds.validate()

# 1x1 transparent PNG used as the picture behind the audio marker
MARKER_ICON_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: str) -> str:
    """Escape the five predefined XML entities, ampersand first."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def qn(tag: str) -> str:
    """Expand a prefixed tag (``p:sld``) into Clark notation."""
    prefix, local = tag.split(":", 1)
    return f"{{{NS[prefix]}}}{local}"


def parse_xml(data: bytes | str, recover: bool = False) -> ET._Element:
    """Parse a part into an element tree root.

    Raises ``lxml.etree.XMLSyntaxError`` for malformed markup unless ``recover`` is set.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    parser = ET.XMLParser(resolve_entities=False, recover=recover, huge_tree=True)
    root = ET.fromstring(data, parser)
    if root is None:
        raise ET.XMLSyntaxError("empty document", None, 0, 0)
    return root


def serialize_xml(root: ET._Element) -> bytes:
    """Serialize a part root with the standalone declaration Office writes."""
    return ET.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)
