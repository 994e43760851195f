"""Tests for content-type and relationship bookkeeping."""

import lxml.etree as ET
import pytest

from services.deck.archive import ArchiveStore
from services.deck.ooxml import (
    CT_NOTES_SLIDE,
    NS,
    REL_AUDIO,
    REL_MEDIA,
    REL_NOTES_MASTER,
    REL_NOTES_SLIDE,
    REL_SLIDE,
    REL_SLIDE_LAYOUT,
    ReservedIds,
)
from services.deck.registry import (
    PackageRegistry,
    add_default_content_type,
    add_relationship,
    new_relationships_root,
)


def _relationships(archive: ArchiveStore, path: str) -> list[dict[str, str]]:
    root = ET.fromstring(archive.get(path))
    return [dict(rel.attrib) for rel in root.findall("pr:Relationship", NS)]


def _content_types(archive: ArchiveStore) -> ET._Element:
    return ET.fromstring(archive.get("[Content_Types].xml"))


@pytest.fixture
def archive(three_slide_deck) -> ArchiveStore:
    return ArchiveStore.load(three_slide_deck)


class TestRelationshipHelpers:
    def test_duplicate_link_returns_existing_id(self) -> None:
        root = new_relationships_root()
        first = add_relationship(root, "rId5", REL_AUDIO, "../media/a.wav")
        second = add_relationship(root, "rId9", REL_AUDIO, "../media/a.wav")

        assert first == second == "rId5"
        assert len(root) == 1

    def test_taken_id_moves_to_next_free_id(self) -> None:
        root = new_relationships_root()
        add_relationship(root, "rId7001", REL_SLIDE, "../slides/slide1.xml")
        add_relationship(root, "rId7002", REL_SLIDE, "../slides/slide2.xml")

        rel_id = add_relationship(root, "rId7001", REL_AUDIO, "../media/audio1.wav")

        assert rel_id == "rId7003"

    def test_default_content_type_dedup(self) -> None:
        root = ET.fromstring(
            b'<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            b'<Default Extension="WAV" ContentType="audio/x-wav"/></Types>'
        )

        assert add_default_content_type(root, "wav", "audio/wav") is False
        assert add_default_content_type(root, "png", "image/png") is True
        assert add_default_content_type(root, "png", "image/png") is False
        assert len(root) == 2

    def test_override_with_same_mime_does_not_declare_extension(self) -> None:
        root = ET.fromstring(
            b'<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            b'<Override PartName="/ppt/media/intro.mp3" ContentType="audio/mpeg"/></Types>'
        )

        assert add_default_content_type(root, "mp3", "audio/mpeg") is True
        defaults = root.findall("ct:Default", NS)
        assert [(el.get("Extension"), el.get("ContentType")) for el in defaults] == [("mp3", "audio/mpeg")]


class TestPackageRegistry:
    def test_register_notes_part(self, archive) -> None:
        registry = PackageRegistry(archive)

        rel_id = registry.register_notes_part(2)

        assert rel_id == ReservedIds.package_notes_rel(2) == "rId1002"
        overrides = _content_types(archive).findall("ct:Override", NS)
        notes = [o for o in overrides if o.get("PartName") == "/ppt/notesSlides/notesSlide2.xml"]
        assert len(notes) == 1
        assert notes[0].get("ContentType") == CT_NOTES_SLIDE
        assert {
            "Id": "rId1002",
            "Type": REL_NOTES_SLIDE,
            "Target": "notesSlides/notesSlide2.xml",
        } in _relationships(archive, "ppt/_rels/presentation.xml.rels")

    def test_register_notes_part_twice_is_idempotent(self, archive) -> None:
        registry = PackageRegistry(archive)
        registry.register_notes_part(1)
        types_before = archive.get("[Content_Types].xml")
        rels_before = archive.get("ppt/_rels/presentation.xml.rels")

        registry.register_notes_part(1)

        assert archive.get("[Content_Types].xml") == types_before
        assert archive.get("ppt/_rels/presentation.xml.rels") == rels_before

    def test_existing_declarations_keep_their_order(self, archive) -> None:
        before = [el.get("PartName") or el.get("Extension") for el in _content_types(archive)]

        PackageRegistry(archive).register_notes_part(3)

        after = [el.get("PartName") or el.get("Extension") for el in _content_types(archive)]
        assert after[: len(before)] == before
        assert after[-1] == "/ppt/notesSlides/notesSlide3.xml"

    def test_link_slide_to_notes_writes_both_directions(self, deck_factory, slide_factory) -> None:
        archive = ArchiveStore.load(deck_factory([slide_factory("Een")], notes_master=True))

        PackageRegistry(archive).link_slide_to_notes(1)

        slide_rels = _relationships(archive, "ppt/slides/_rels/slide1.xml.rels")
        notes_rels = _relationships(archive, "ppt/notesSlides/_rels/notesSlide1.xml.rels")
        assert {"Id": "rId3001", "Type": REL_NOTES_SLIDE, "Target": "../notesSlides/notesSlide1.xml"} in slide_rels
        assert {"Id": "rId1", "Type": REL_SLIDE, "Target": "../slides/slide1.xml"} in notes_rels
        assert {"Id": "rId2", "Type": REL_NOTES_MASTER, "Target": "../notesMasters/notesMaster1.xml"} in notes_rels

    def test_missing_slide_rels_are_created_with_layout(self, deck_factory, slide_factory) -> None:
        archive = ArchiveStore.load(deck_factory([slide_factory("Een")], slide_rels=False))

        PackageRegistry(archive).register_media_part(1, "audio1.wav")

        rels = _relationships(archive, "ppt/slides/_rels/slide1.xml.rels")
        assert rels[0] == {"Id": "rId1", "Type": REL_SLIDE_LAYOUT, "Target": "../slideLayouts/slideLayout1.xml"}

    def test_register_media_part_is_idempotent(self, archive) -> None:
        registry = PackageRegistry(archive)

        first = registry.register_media_part(1, "audio1.wav")
        second = registry.register_media_part(1, "audio1.wav")

        assert first == second == ("rId7001", "rId5001")
        rels = _relationships(archive, "ppt/slides/_rels/slide1.xml.rels")
        assert [rel["Type"] for rel in rels].count(REL_AUDIO) == 1
        assert [rel["Type"] for rel in rels].count(REL_MEDIA) == 1
        wav = [el for el in _content_types(archive) if el.get("ContentType") == "audio/wav"]
        assert len(wav) == 1
        assert wav[0].get("Extension") == "wav"

    def test_missing_content_types_is_recorded_not_fatal(self, deck_factory, slide_factory) -> None:
        archive = ArchiveStore.load(deck_factory([slide_factory("Een")], omit=("[Content_Types].xml",)))
        registry = PackageRegistry(archive)

        rel_id = registry.register_notes_part(1)
        registry.register_media_part(1, "audio1.wav")

        assert rel_id == "rId1001"
        assert registry.missing_parts == ["[Content_Types].xml"]
        assert "[Content_Types].xml" not in archive

    def test_missing_package_relationships_skip_registration(self, deck_factory, slide_factory) -> None:
        archive = ArchiveStore.load(
            deck_factory([slide_factory("Een")], omit=("ppt/_rels/presentation.xml.rels",))
        )
        registry = PackageRegistry(archive)

        assert registry.register_notes_part(1) is None
        assert registry.missing_parts == ["ppt/_rels/presentation.xml.rels"]

    def test_is_fully_linked(self, archive) -> None:
        registry = PackageRegistry(archive)
        assert registry.is_fully_linked(1) is False

        archive.put("ppt/notesSlides/notesSlide1.xml", b"<notes/>")
        registry.register_notes_part(1)
        registry.link_slide_to_notes(1)
        assert registry.is_fully_linked(1) is True

        assert registry.is_fully_linked(1, "audio1.wav") is False
        archive.put("ppt/media/audio1.wav", b"RIFF")
        registry.register_media_part(1, "audio1.wav")
        assert registry.is_fully_linked(1, "audio1.wav") is True
