"""Keep the content-type registry and relationship parts consistent with added parts."""

from __future__ import annotations

import lxml.etree as ET

from shared.exceptions import PackagePartAbsent
from shared.utils import file_extension, setup_logging

from .archive import ArchiveStore
from .locator import notes_path, notes_rels_path, slide_path, slide_rels_path
from .ooxml import (
    CONTENT_TYPES_PATH,
    CT_NOTES_SLIDE,
    DEFAULT_SLIDE_LAYOUT_TARGET,
    MEDIA_CONTENT_TYPES,
    NOTES_MASTER_PATH,
    NS,
    NS_PR,
    PRESENTATION_RELS_PATH,
    REL_AUDIO,
    REL_IMAGE,
    REL_MEDIA,
    REL_NOTES_MASTER,
    REL_NOTES_SLIDE,
    REL_SLIDE,
    REL_SLIDE_LAYOUT,
    ReservedIds,
    parse_xml,
    qn,
    serialize_xml,
)

logger = setup_logging("package-registry")


def new_relationships_root() -> ET._Element:
    return ET.Element(f"{{{NS_PR}}}Relationships", nsmap={None: NS_PR})


def find_relationship(root: ET._Element, rel_type: str, target: str) -> ET._Element | None:
    for rel in root.findall("pr:Relationship", NS):
        if rel.get("Type") == rel_type and rel.get("Target") == target:
            return rel
    return None


def add_relationship(root: ET._Element, rel_id: str, rel_type: str, target: str) -> str:
    """Append a relationship unless the same (type, target) link already exists.

    Returns the id of the relationship that now carries the link. If
    ``rel_id`` is already used by another record, the next free ``rId`` above
    it is taken instead.
    """
    existing = find_relationship(root, rel_type, target)
    if existing is not None:
        return existing.get("Id")

    used = {rel.get("Id") for rel in root.findall("pr:Relationship", NS)}
    candidate = rel_id
    if candidate in used:
        number = int(rel_id[3:]) if rel_id[3:].isdigit() else ReservedIds.SPAN
        while f"rId{number}" in used:
            number += 1
        candidate = f"rId{number}"
        logger.warning("Relationship id %s already taken; using %s for %s", rel_id, candidate, target)

    ET.SubElement(root, f"{{{NS_PR}}}Relationship", Id=candidate, Type=rel_type, Target=target)
    return candidate


def add_default_content_type(root: ET._Element, extension: str, content_type: str) -> bool:
    """Declare ``extension`` once; skipped when a Default already carries the MIME string or the extension."""
    for default in root.findall("ct:Default", NS):
        if default.get("ContentType") == content_type:
            return False
        if (default.get("Extension") or "").lower() == extension.lower():
            return False
    ET.SubElement(root, qn("ct:Default"), Extension=extension, ContentType=content_type)
    return True


def add_override_content_type(root: ET._Element, part_name: str, content_type: str) -> bool:
    for override in root.findall("ct:Override", NS):
        if override.get("PartName") == part_name:
            return False
    ET.SubElement(root, qn("ct:Override"), PartName=part_name, ContentType=content_type)
    return True


class PackageRegistry:
    """Register notes and media parts in the package-level and slide-level registries.

    Every insertion appends to the end of the relevant root element; existing
    declarations are never reordered or removed. Missing package parts are
    recorded in ``missing_parts`` and the registration step is skipped.
    """

    def __init__(self, archive: ArchiveStore) -> None:
        self.archive = archive
        self.missing_parts: list[str] = []

    # -- part access -------------------------------------------------------

    def _load_package_part(self, path: str) -> ET._Element | None:
        data = self.archive.get(path)
        if data is None:
            if path not in self.missing_parts:
                self.missing_parts.append(path)
                logger.warning("%s; skipping registration", PackagePartAbsent(path))
            return None
        return parse_xml(data)

    def _load_or_create_slide_rels(self, slide_number: int) -> ET._Element:
        data = self.archive.get(slide_rels_path(slide_number))
        if data is not None:
            return parse_xml(data)
        # A slide without its layout relationship makes the deck unopenable
        root = new_relationships_root()
        ET.SubElement(
            root,
            f"{{{NS_PR}}}Relationship",
            Id="rId1",
            Type=REL_SLIDE_LAYOUT,
            Target=DEFAULT_SLIDE_LAYOUT_TARGET,
        )
        logger.info("Created relationship part for slide %s", slide_number)
        return root

    def _save(self, path: str, root: ET._Element) -> None:
        self.archive.put(path, serialize_xml(root))

    def _add_content_type_default(self, filename: str) -> None:
        extension = file_extension(filename)
        content_type = MEDIA_CONTENT_TYPES.get(extension)
        if content_type is None:
            logger.warning("No content type known for .%s media; leaving registry unchanged", extension)
            return
        root = self._load_package_part(CONTENT_TYPES_PATH)
        if root is not None and add_default_content_type(root, extension, content_type):
            self._save(CONTENT_TYPES_PATH, root)

    # -- registrations -----------------------------------------------------

    def register_notes_part(self, slide_number: int) -> str | None:
        """Declare the notes part's content type and link it from the package relationships.

        Returns the package relationship id, or None when the package
        relationship part is missing.
        """
        part_name = "/" + notes_path(slide_number)
        types_root = self._load_package_part(CONTENT_TYPES_PATH)
        if types_root is not None and add_override_content_type(types_root, part_name, CT_NOTES_SLIDE):
            self._save(CONTENT_TYPES_PATH, types_root)

        rels_root = self._load_package_part(PRESENTATION_RELS_PATH)
        if rels_root is None:
            return None
        rel_id = add_relationship(
            rels_root,
            ReservedIds.package_notes_rel(slide_number),
            REL_NOTES_SLIDE,
            f"notesSlides/notesSlide{slide_number}.xml",
        )
        self._save(PRESENTATION_RELS_PATH, rels_root)
        return rel_id

    def link_slide_to_notes(self, slide_number: int) -> None:
        """Point the slide at its notes part and write the notes part's own relationships."""
        slide_rels = self._load_or_create_slide_rels(slide_number)
        notes_target = f"../notesSlides/notesSlide{slide_number}.xml"
        current = slide_rels.find(f"pr:Relationship[@Type='{REL_NOTES_SLIDE}']", NS)
        if current is None:
            add_relationship(slide_rels, ReservedIds.slide_notes_rel(slide_number), REL_NOTES_SLIDE, notes_target)
            self._save(slide_rels_path(slide_number), slide_rels)
        elif current.get("Target") != notes_target:
            logger.warning(
                "Slide %s already links notes part %s; leaving it in place",
                slide_number,
                current.get("Target"),
            )

        notes_rels = new_relationships_root()
        add_relationship(notes_rels, "rId1", REL_SLIDE, f"../slides/slide{slide_number}.xml")
        if self.archive.exists(NOTES_MASTER_PATH):
            add_relationship(notes_rels, "rId2", REL_NOTES_MASTER, "../notesMasters/notesMaster1.xml")
        self._save(notes_rels_path(slide_number), notes_rels)

    def register_media_part(self, slide_number: int, filename: str) -> tuple[str, str]:
        """Declare the media extension and link the media file from the slide.

        Returns ``(audio_rel_id, media_rel_id)`` as written to the slide
        relationship part.
        """
        self._add_content_type_default(filename)

        target = f"../media/{filename}"
        slide_rels = self._load_or_create_slide_rels(slide_number)
        audio_rel = add_relationship(slide_rels, ReservedIds.slide_audio_rel(slide_number), REL_AUDIO, target)
        media_rel = add_relationship(slide_rels, ReservedIds.slide_media_rel(slide_number), REL_MEDIA, target)
        self._save(slide_rels_path(slide_number), slide_rels)
        return audio_rel, media_rel

    def register_marker_image(self, slide_number: int, filename: str) -> str:
        """Declare the marker icon and link it from the slide; returns the image relationship id."""
        self._add_content_type_default(filename)
        slide_rels = self._load_or_create_slide_rels(slide_number)
        image_rel = add_relationship(
            slide_rels, ReservedIds.marker_image_rel(slide_number), REL_IMAGE, f"../media/{filename}"
        )
        self._save(slide_rels_path(slide_number), slide_rels)
        return image_rel

    def is_fully_linked(self, slide_number: int, media_filename: str | None = None) -> bool:
        """Check that every registration for a slide is present in the archive."""
        if not self.archive.exists(notes_path(slide_number)) or not self.archive.exists(slide_path(slide_number)):
            return False
        types_data = self.archive.get(CONTENT_TYPES_PATH)
        rels_data = self.archive.get(PRESENTATION_RELS_PATH)
        if types_data is None or rels_data is None:
            return False
        types_root = parse_xml(types_data)
        part_names = {el.get("PartName") for el in types_root.findall("ct:Override", NS)}
        if "/" + notes_path(slide_number) not in part_names:
            return False
        notes_target = f"notesSlides/notesSlide{slide_number}.xml"
        if find_relationship(parse_xml(rels_data), REL_NOTES_SLIDE, notes_target) is None:
            return False
        if media_filename is None:
            return True
        slide_rels = self.archive.get(slide_rels_path(slide_number))
        content_type = MEDIA_CONTENT_TYPES.get(file_extension(media_filename))
        declared = {el.get("ContentType") for el in types_root.findall("ct:Default", NS)}
        return (
            self.archive.exists(f"ppt/media/{media_filename}")
            and slide_rels is not None
            and find_relationship(parse_xml(slide_rels), REL_AUDIO, f"../media/{media_filename}") is not None
            and content_type in declared
        )
