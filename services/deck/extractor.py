"""Heuristic title/body extraction from slide markup.

Slides are structurally heterogeneous (placeholders, free shapes, tables,
groups), so extraction runs a cascade of strategies and falls through to the
next one while the body text is still too short to be useful:

1. all ``a:t`` runs in document order
2. title placeholder (``title`` / ``ctrTitle``) -> title, other runs -> body
3. otherwise first run -> title, remaining runs -> body
4. per-paragraph join, newline separated
5. per-shape join, newline separated
6. flat join of every run
"""

from __future__ import annotations

import re

import lxml.etree as ET

from shared.models import SlideContent
from shared.utils import config as service_config, setup_logging, truncate_with_ellipsis

from .ooxml import NS, parse_xml, qn

logger = setup_logging("slide-text-extractor")

TITLE_PLACEHOLDER_TYPES = {"title", "ctrTitle"}
_SENTENCE_BREAK = re.compile(r"[.!?]|[\n\r]")


def _run_texts(node: ET._Element) -> list[str]:
    texts: list[str] = []
    for t_el in node.iter(qn("a:t")):
        text = (t_el.text or "").strip()
        if text:
            texts.append(text)
    return texts


def _grouped_text(root: ET._Element, tag: str) -> str:
    """Join run texts inside each ``tag`` element, one line per element."""
    lines = []
    for element in root.iter(qn(tag)):
        line = " ".join(_run_texts(element))
        if line:
            lines.append(line)
    return "\n".join(lines)


def _placeholder_title(root: ET._Element) -> str:
    for sp in root.iter(qn("p:sp")):
        ph = sp.find("p:nvSpPr/p:nvPr/p:ph", NS)
        if ph is None or ph.get("type") not in TITLE_PLACEHOLDER_TYPES:
            continue
        texts = _run_texts(sp)
        if texts:
            return texts[0]
    return ""


class SlideTextExtractor:
    """Produce a ``SlideContent`` record for one slide; never raises on bad markup."""

    def __init__(
        self,
        min_content_length: int | None = None,
        fallback_content_length: int | None = None,
        ai_threshold: int | None = None,
    ) -> None:
        self.min_content_length = int(
            min_content_length
            if min_content_length is not None
            else service_config.get_pipeline_value("extraction.min_content_length", 10)
        )
        self.fallback_content_length = int(
            fallback_content_length
            if fallback_content_length is not None
            else service_config.get_pipeline_value("extraction.fallback_content_length", 5)
        )
        self.ai_threshold = int(
            ai_threshold
            if ai_threshold is not None
            else service_config.get_pipeline_value("extraction.ai_threshold", 20)
        )
        self.title_fragment_length = int(
            service_config.get_pipeline_value("extraction.title_fragment_length", 50)
        )
        self.max_title_length = int(service_config.get_pipeline_value("extraction.max_title_length", 100))

    def extract(self, slide_markup: bytes | str, slide_number: int) -> SlideContent:
        try:
            root = parse_xml(slide_markup, recover=True)
        except ET.XMLSyntaxError as exc:
            logger.warning("Slide %s markup could not be parsed: %s", slide_number, exc)
            return SlideContent(slide_number=slide_number, title=f"Slide {slide_number}", content="")

        runs = _run_texts(root)

        title = _placeholder_title(root)
        if title:
            content = " ".join(text for text in runs if text != title)
        elif runs:
            title = runs[0]
            content = " ".join(runs[1:])
        else:
            content = ""

        if len(content) < self.min_content_length:
            by_paragraph = _grouped_text(root, "a:p")
            if by_paragraph:
                content = by_paragraph

        if len(content) < self.min_content_length:
            by_shape = _grouped_text(root, "p:sp")
            if by_shape:
                content = by_shape

        if len(content) < self.fallback_content_length:
            content = " ".join(runs)

        if not title:
            title = self.title_from_content(content, slide_number)

        logger.debug(
            "Slide %s extracted: title=%r, content=%d chars", slide_number, title[:30], len(content)
        )
        return SlideContent(
            slide_number=slide_number,
            title=truncate_with_ellipsis(title, self.max_title_length),
            content=content,
        )

    def title_from_content(self, content: str, slide_number: int) -> str:
        if not content:
            return f"Slide {slide_number}"
        fragment = _SENTENCE_BREAK.split(content, maxsplit=1)[0][: self.title_fragment_length].strip()
        if len(fragment) < len(content):
            fragment += "..."
        return fragment

    def is_sufficient(self, record: SlideContent) -> bool:
        """Whether the heuristic result is good enough to skip AI analysis."""
        return len(record.content.strip()) >= self.ai_threshold
