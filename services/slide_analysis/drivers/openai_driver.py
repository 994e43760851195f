"""OpenAI driver for slide analysis using AsyncOpenAI."""

from __future__ import annotations

import json
import re
from typing import Any

from openai import OpenAIError

from shared.models import SlideContent
from shared.openai_client import create_openai_client, get_model_name
from shared.utils import config as service_config, setup_logging, truncate_with_ellipsis, validate_text_length

from .base import SlideAnalyzer

logger = setup_logging("slide-analysis-openai")

SLIDE_PROMPT = """Analyseer deze PowerPoint slide XML en extraheer de belangrijkste informatie:

SLIDE XML:
{markup}{truncated}

INSTRUCTIES:
1. Zoek naar alle tekstuele content in de slide
2. Identificeer wat de titel zou kunnen zijn (meestal de eerste of grootste tekst)
3. Verzamel alle andere tekstuele content als slide inhoud
4. Negeer XML tags en technische elementen
5. Geef een duidelijke, leesbare samenvatting

FORMAAT (JSON):
{{
  "slideNumber": {slide_number},
  "title": "Duidelijke slide titel (max 100 karakters)",
  "content": "Alle tekstuele content van de slide, gestructureerd en leesbaar"
}}

Geef ALLEEN de JSON terug, geen extra tekst."""

PRESENTATION_PROMPT = """Analyseer deze PowerPoint presentatie structuur en genereer slide informatie:

PRESENTATIE XML (eerste 3000 karakters):
{presentation}

RELATIES XML (eerste 2000 karakters):
{relationships}

AANTAL SLIDES: {slide_count}

INSTRUCTIES:
1. Genereer voor elke slide (1 tot {slide_count}) een logische titel en content
2. Gebruik de XML structuur om slide volgorde en relaties te begrijpen
3. Als er geen specifieke content te vinden is, maak dan generieke maar nuttige placeholders

FORMAAT (JSON Array):
[
  {{"slideNumber": 1, "title": "Slide titel", "content": "Slide content en beschrijving"}}
]

Geef ALLEEN de JSON array terug, geen extra tekst."""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def _slide_number(value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number >= 1 else fallback


class OpenAISlideAnalyzer(SlideAnalyzer):
    """Ask a chat model to read raw slide markup."""

    def __init__(self, client: Any | None = None, model: str | None = None):
        self._client = client
        self.model = get_model_name("analysis", model)
        self.markup_limit = int(service_config.get_pipeline_value("extraction.ai_markup_limit", 8000))

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_openai_client(async_client=True)
        return self._client

    async def _complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
        )
        content = response.choices[0].message.content
        return content.strip() if content else ""

    async def analyze_slide(self, slide_markup: str, slide_number: int) -> SlideContent | None:
        prompt = SLIDE_PROMPT.format(
            markup=validate_text_length(slide_markup, self.markup_limit),
            truncated=" ...[truncated]" if len(slide_markup) > self.markup_limit else "",
            slide_number=slide_number,
        )
        try:
            text = await self._complete(prompt)
        except (OpenAIError, ValueError) as exc:
            logger.error("Slide analysis failed for slide %s: %s", slide_number, exc)
            return None

        match = _JSON_OBJECT.search(text)
        if match:
            try:
                parsed = json.loads(match.group(0))
                return SlideContent(
                    slide_number=slide_number,
                    title=truncate_with_ellipsis(str(parsed.get("title") or f"Slide {slide_number}"), 100),
                    content=str(parsed.get("content") or ""),
                )
            except (json.JSONDecodeError, AttributeError):
                logger.warning("Could not parse analysis JSON for slide %s", slide_number)

        return SlideContent(
            slide_number=slide_number,
            title=f"Slide {slide_number} (AI Analyzed)",
            content=text[:1000],
        )

    async def analyze_presentation(
        self, presentation_xml: str, relationships_xml: str, slide_count: int
    ) -> list[SlideContent] | None:
        prompt = PRESENTATION_PROMPT.format(
            presentation=presentation_xml[:3000],
            relationships=relationships_xml[:2000],
            slide_count=slide_count,
        )
        try:
            text = await self._complete(prompt)
        except (OpenAIError, ValueError) as exc:
            logger.error("Presentation analysis failed: %s", exc)
            return None

        match = _JSON_ARRAY.search(text)
        if match:
            try:
                parsed = json.loads(match.group(0))
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list) and parsed:
                return [
                    SlideContent(
                        slide_number=_slide_number(item.get("slideNumber"), index + 1),
                        title=truncate_with_ellipsis(str(item.get("title") or f"Slide {index + 1}"), 100),
                        content=str(item.get("content") or ""),
                    )
                    for index, item in enumerate(parsed)
                    if isinstance(item, dict)
                ]
            logger.warning("Could not parse presentation analysis JSON")

        return [
            SlideContent(
                slide_number=number,
                title=f"Slide {number}",
                content=f"Content voor slide {number} - geanalyseerd door AI maar geen specifieke tekst gevonden.",
            )
            for number in range(1, slide_count + 1)
        ]
