"""Deck pipeline: slide text extraction and notes/audio write-back."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import lxml.etree as ET

from services.slide_analysis.drivers.base import SlideAnalyzer
from shared.enums import ExtractionMethod, SlideState
from shared.exceptions import CorruptArchive, MissingRequiredInput, SlidePartAbsent
from shared.models import PipelineResult, ScriptEntry, SlideContent, SlideOutcome, SlideReference
from shared.utils import setup_logging

from .archive import ArchiveStore
from .extractor import SlideTextExtractor
from .locator import PartLocator, media_path, notes_path
from .notes import build_notes_part
from .ooxml import MARKER_ICON_PNG, PRESENTATION_PATH, PRESENTATION_RELS_PATH
from .patcher import SlidePatcher
from .registry import PackageRegistry

logger = setup_logging("deck-pipeline")


def detect_audio_extension(data: bytes, default: str = "wav") -> str:
    """Guess the container format of an audio clip from its leading bytes."""
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "wav"
    if data[:3] == b"ID3" or (len(data) > 1 and data[0] == 0xFF and data[1] & 0xE0 == 0xE0):
        return "mp3"
    if data[4:8] == b"ftyp":
        return "m4a"
    return default


def _normalize_scripts(scripts: Sequence[str | ScriptEntry | dict]) -> list[ScriptEntry]:
    entries: list[ScriptEntry] = []
    for index, item in enumerate(scripts):
        if isinstance(item, ScriptEntry):
            entries.append(item)
        elif isinstance(item, str):
            entries.append(ScriptEntry(slide_number=index + 1, script=item))
        else:
            number = item.get("slide_number") or item.get("slideNumber") or index + 1
            entries.append(ScriptEntry(slide_number=int(number), script=item.get("script") or ""))
    return entries


def _numbered_slides(archive: ArchiveStore) -> list[SlideReference]:
    refs = []
    for ref in PartLocator(archive).list_slides():
        if ref.number < 1:
            logger.warning("Ignoring slide part %s without a numeric suffix", ref.path)
            continue
        refs.append(ref)
    return refs


class DeckPipeline:
    """Sequence the deck components for one request.

    ``analyzer`` is an optional AI capability used only by
    :meth:`extract_slides_with_fallback`; the mutation path never calls it.
    """

    def __init__(
        self,
        analyzer: SlideAnalyzer | None = None,
        extractor: SlideTextExtractor | None = None,
    ) -> None:
        self.analyzer = analyzer
        self.extractor = extractor or SlideTextExtractor()

    @staticmethod
    def load(deck_bytes: bytes | None) -> ArchiveStore:
        if not deck_bytes:
            raise MissingRequiredInput("A presentation file is required")
        return ArchiveStore.load(deck_bytes)

    # -- extraction path ---------------------------------------------------

    def extract_slides(self, deck_bytes: bytes) -> list[SlideContent]:
        """Run the heuristic extractor over every slide, in slide-number order."""
        archive = self.load(deck_bytes)
        return self._extract_records(archive, _numbered_slides(archive))

    def _extract_records(self, archive: ArchiveStore, refs: list[SlideReference]) -> list[SlideContent]:
        return [self.extractor.extract(archive.get(ref.path), ref.number) for ref in refs]

    async def extract_slides_with_fallback(
        self, deck_bytes: bytes
    ) -> tuple[list[SlideContent], ExtractionMethod]:
        """Extract slides, asking the analyzer for slides whose text is too thin.

        Returns only slides with non-empty content. If none have any, the
        analyzer is asked to describe the whole deck from its structure.
        """
        archive = await asyncio.to_thread(self.load, deck_bytes)
        refs = _numbered_slides(archive)
        logger.info("Found %d slide parts", len(refs))
        records = await asyncio.to_thread(self._extract_records, archive, refs)

        slides: list[SlideContent] = []
        for ref, record in zip(refs, records):
            markup = archive.get(ref.path)
            if self.analyzer is not None and not self.extractor.is_sufficient(record):
                logger.info("Slide %s: heuristic extraction insufficient, using analyzer", ref.number)
                analysed = await self.analyzer.analyze_slide(
                    markup.decode("utf-8", errors="replace"), ref.number
                )
                if analysed is not None:
                    record = analysed
            slides.append(record)

        valid = [slide for slide in slides if slide.content.strip()]
        if not valid and refs and self.analyzer is not None:
            logger.warning("No usable slide text extracted; analysing the whole presentation")
            full = await self.analyzer.analyze_presentation(
                archive.get_text(PRESENTATION_PATH) or "",
                archive.get_text(PRESENTATION_RELS_PATH) or "",
                len(refs),
            )
            if full:
                return full, ExtractionMethod.AI_FULL_ANALYSIS

        method = ExtractionMethod.STANDARD if len(valid) == len(slides) else ExtractionMethod.HYBRID
        return valid, method

    # -- mutation path -----------------------------------------------------

    def add_scripts_and_audio(
        self,
        deck_bytes: bytes | None,
        scripts: Sequence[str | ScriptEntry | dict] | None,
        audio: Sequence[bytes | None] | None = None,
    ) -> tuple[bytes, PipelineResult]:
        """Write one notes part per script and embed optional audio per slide.

        ``audio[i]`` belongs to ``scripts[i]``. Scripts that reference a slide
        number with no markup part are skipped. The loaded archive is mutated
        through a staged copy that is serialized only when every step
        succeeded.

        Raises:
            MissingRequiredInput: deck or scripts missing.
            CorruptArchive: deck or one of its registry parts is unreadable.
            SerializationFailure: the updated container could not be written.
        """
        if not scripts:
            raise MissingRequiredInput("At least one slide script is required")
        source = self.load(deck_bytes)
        archive = source.clone()

        locator = PartLocator(archive)
        available = {ref.number for ref in locator.list_slides()}
        entries = _normalize_scripts(scripts)
        clips = list(audio or [])
        if len(entries) != len(available):
            logger.warning("Received %d scripts for %d slides", len(entries), len(available))

        registry = PackageRegistry(archive)
        patcher = SlidePatcher(archive)
        result = PipelineResult(total_slides=len(available))

        try:
            for index, entry in enumerate(entries):
                clip = clips[index] if index < len(clips) else None
                outcome = self._process_slide(archive, registry, patcher, entry, clip, available)
                result.slides.append(outcome)
                if outcome.state == SlideState.SKIPPED:
                    result.skipped_slides.append(entry.slide_number)
                    continue
                result.notes_written += 1
                if outcome.has_audio:
                    result.audio_embedded += 1
        except ET.XMLSyntaxError as exc:
            raise CorruptArchive(f"Presentation contains malformed package markup: {exc}") from exc

        result.warnings.extend(f"Package part {path} is missing" for path in registry.missing_parts)
        output = archive.serialize()
        logger.info(
            "Added %d notes and %d audio clips (%d slides skipped)",
            result.notes_written,
            result.audio_embedded,
            len(result.skipped_slides),
        )
        return output, result

    def _process_slide(
        self,
        archive: ArchiveStore,
        registry: PackageRegistry,
        patcher: SlidePatcher,
        entry: ScriptEntry,
        clip: bytes | None,
        available: set[int],
    ) -> SlideOutcome:
        number = entry.slide_number
        if number not in available:
            absent = SlidePartAbsent(number, f"ppt/slides/slide{number}.xml")
            logger.warning("%s; skipping script", absent)
            return SlideOutcome(slide_number=number, state=SlideState.SKIPPED, detail=str(absent))

        has_audio = bool(clip)
        archive.put(notes_path(number), build_notes_part(entry.script, number, has_audio=has_audio))
        registry.register_notes_part(number)
        registry.link_slide_to_notes(number)
        outcome = SlideOutcome(slide_number=number, state=SlideState.NOTES_ADDED)

        media_filename = None
        if has_audio:
            media_filename = f"audio{number}.{detect_audio_extension(clip)}"
            archive.put(media_path(media_filename), clip)
            audio_rel, media_rel = registry.register_media_part(number, media_filename)
            icon_filename = f"audio_icon{number}.png"
            archive.put(media_path(icon_filename), MARKER_ICON_PNG)
            image_rel = registry.register_marker_image(number, icon_filename)
            patcher.patch(number, audio_rel_id=audio_rel, media_rel_id=media_rel, image_rel_id=image_rel)
            outcome.has_audio = True
            outcome.state = SlideState.NOTES_AND_MEDIA_ADDED

        if registry.is_fully_linked(number, media_filename):
            outcome.state = SlideState.FULLY_LINKED
        return outcome
