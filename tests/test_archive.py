"""Tests for the in-memory deck archive."""

import io
import zipfile

import pytest

from services.deck.archive import ArchiveStore
from shared.exceptions import CorruptArchive, DeckProcessingError


class TestArchiveStore:
    def test_load_reads_every_part(self, three_slide_deck) -> None:
        archive = ArchiveStore.load(three_slide_deck)

        assert "ppt/slides/slide1.xml" in archive
        assert archive.exists("[Content_Types].xml")
        assert b"Introductie" in archive.get("ppt/slides/slide1.xml")
        assert archive.get("ppt/slides/slide9.xml") is None

    def test_load_rejects_garbage(self) -> None:
        with pytest.raises(CorruptArchive) as exc_info:
            ArchiveStore.load(b"this is not a zip file")
        assert exc_info.value.fatal is True
        assert isinstance(exc_info.value, DeckProcessingError)

    def test_load_rejects_empty_bytes(self) -> None:
        with pytest.raises(CorruptArchive):
            ArchiveStore.load(b"")

    def test_load_skips_directory_entries(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("ppt/", b"")
            archive.writestr("ppt/presentation.xml", b"<x/>")

        store = ArchiveStore.load(buffer.getvalue())

        assert store.paths() == ["ppt/presentation.xml"]

    def test_put_replaces_and_appends(self) -> None:
        store = ArchiveStore({"a.xml": b"1", "b.xml": b"2"})
        store.put("a.xml", "replaced")
        store.put("c.xml", b"3")

        assert store.paths() == ["a.xml", "b.xml", "c.xml"]
        assert store.get("a.xml") == b"replaced"
        assert store.get_text("a.xml") == "replaced"
        assert len(store) == 3

    def test_clone_is_independent(self) -> None:
        store = ArchiveStore({"a.xml": b"1"})
        staged = store.clone()
        staged.put("a.xml", b"changed")
        staged.put("b.xml", b"new")

        assert store.get("a.xml") == b"1"
        assert "b.xml" not in store

    def test_serialize_writes_content_types_first(self) -> None:
        store = ArchiveStore({"ppt/presentation.xml": b"<p/>", "[Content_Types].xml": b"<Types/>"})

        data = store.serialize()

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist()[0] == "[Content_Types].xml"
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in archive.infolist())
            assert archive.read("ppt/presentation.xml") == b"<p/>"

    def test_serialize_is_reproducible(self, three_slide_deck) -> None:
        store = ArchiveStore.load(three_slide_deck)

        assert store.serialize() == store.serialize()

    def test_round_trip_preserves_parts(self, three_slide_deck, deck_reader) -> None:
        original = deck_reader(three_slide_deck)

        rewritten = deck_reader(ArchiveStore.load(three_slide_deck).serialize())

        assert rewritten == original
