"""Presentation script generation: prompt construction and response parsing."""

from __future__ import annotations

import re
import time

import openai

from shared.enums import ScriptLength, ScriptStyle
from shared.exceptions import ScriptGenerationError
from shared.models import (
    InformalConversionRequest,
    ScriptGenerationRequest,
    ScriptGenerationResponse,
    ScriptMetadata,
    SlideContent,
)
from shared.utils import config as service_config, setup_logging

from .drivers import OpenAIScriptDriver, ScriptGenerationDriver

STYLE_PROMPTS = {
    ScriptStyle.PROFESSIONAL: (
        "Schrijf een professioneel, zakelijk presentatiescript. Gebruik formele taal, "
        "duidelijke structuur en overtuigende argumenten."
    ),
    ScriptStyle.CASUAL: (
        "Schrijf een informeel, toegankelijk presentatiescript. Gebruik een vriendelijke toon, "
        "spreektaal en maak het persoonlijk."
    ),
    ScriptStyle.EDUCATIONAL: (
        "Schrijf een educatief presentatiescript. Leg concepten duidelijk uit, gebruik voorbeelden "
        "en zorg voor goede leerdoelen."
    ),
}

LENGTH_EMPHASIS = {
    ScriptLength.SHORT: "BELANGRIJK: Houd het zeer kort en krachtig. Ga direct to the point. Maximaal 80 woorden per slide.",
    ScriptLength.NORMAL: "BELANGRIJK: Geef voldoende detail maar blijf gefocust. Ongeveer 80-120 woorden per slide.",
    ScriptLength.EXTENDED: "BELANGRIJK: Geef uitgebreide uitleg, voorbeelden en context. Ongeveer 120-180 woorden per slide.",
}

DEFAULT_LENGTH_SETTINGS = {
    "beknopt": {"time_per_slide": "15-30 seconden", "word_count": "40-80 woorden", "description": "zeer korte, bondige scripts"},
    "normaal": {"time_per_slide": "30-45 seconden", "word_count": "80-120 woorden", "description": "standaard scripts"},
    "uitgebreid": {"time_per_slide": "45-60 seconden", "word_count": "120-180 woorden", "description": "uitgebreide, gedetailleerde scripts"},
}

INFORMAL_INSTRUCTION = (
    "BELANGRIJK: Gebruik ALTIJD de informele aanspreekvorm 'jij/jouw/je' in plaats van 'u/uw'. "
    "Spreek het publiek direct en persoonlijk aan."
)
FORMAL_INSTRUCTION = "Gebruik de formele aanspreekvorm 'u/uw' waar gepast."

GENERATE_PROMPT = """Je bent een expert presentatiescriptschrijver. Genereer een professioneel script voor een PowerPoint presentatie.

STIJL: {style_prompt}

SCRIPT LENGTE: {length_upper}
- Tijd per slide: {time_per_slide}
- Woordenaantal per slide: {word_count}
- Type: {description}

AANSPREEKVORM: {address}

SPECIFICATIES:
- Aantal slides: {slide_count}
- Taal: Nederlands
- Maak het script natuurlijk en spreekbaar

SLIDES INHOUD:
{slides}

INSTRUCTIES:
1. Genereer voor elke slide een apart script van {word_count}
2. Zorg voor vloeiende overgangen tussen slides
3. Begin met een sterke opening en eindig met een krachtige conclusie
4. Maak het script natuurlijk en spreekbaar
5. Voeg waar nodig pauzes en ademruimte toe
6. Gebruik de {style} stijl consequent
7. Houd rekening met de {length} lengte-instelling
8. {address}

{length_emphasis}

FORMAAT:
Geef het resultaat in deze structuur:

SLIDE 1 SCRIPT:
[Script voor slide 1]

SLIDE 2 SCRIPT:
[Script voor slide 2]

[etc. voor alle slides]

VOLLEDIG SCRIPT:
[Het complete script als één doorlopende tekst]
"""

INFORMAL_PROMPT = """Je bent een expert tekstbewerker. Converteer de volgende presentatiescripts naar de informele aanspreekvorm (tutoyeren).

INSTRUCTIES:
1. Vervang ALLE vormen van "u/uw/uzelf" door "jij/jouw/jezelf/je"
2. Pas werkwoordsvormen aan waar nodig (u bent → jij bent, u heeft → jij hebt, etc.)
3. Behoud de exacte inhoud, structuur en toon van het script
4. Maak het natuurlijk en vloeiend klinken
5. Behoud alle interpunctie en opmaak

SLIDES MET SCRIPTS:
{slides}

FORMAAT:
Geef het resultaat in deze exacte structuur:

SLIDE 1 SCRIPT:
[Geconverteerd script voor slide 1]

SLIDE 2 SCRIPT:
[Geconverteerd script voor slide 2]

[etc. voor alle slides]

VOLLEDIG SCRIPT:
[Het complete geconverteerde script als één doorlopende tekst]
"""

_SLIDE_SCRIPT = re.compile(r"SLIDE \d+ SCRIPT:\s*([\s\S]*?)(?=SLIDE \d+ SCRIPT:|VOLLEDIG SCRIPT:|\Z)")
_FULL_SCRIPT = re.compile(r"VOLLEDIG SCRIPT:\s*([\s\S]*)\Z")


def parse_script_response(text: str, slide_count: int, placeholder: str) -> tuple[list[str], str]:
    """Split a model response into one script per slide plus the full script.

    Missing slides are padded with ``placeholder`` (formatted with the
    1-based slide number); surplus sections are dropped so scripts stay
    aligned with slides.
    """
    scripts = [match.strip() for match in _SLIDE_SCRIPT.findall(text)]
    full_match = _FULL_SCRIPT.search(text)
    full_script = full_match.group(1).strip() if full_match else text

    while len(scripts) < slide_count:
        scripts.append(placeholder.format(number=len(scripts) + 1))
    return scripts[:slide_count], full_script


def classify_error(exc: Exception) -> ScriptGenerationError:
    """Map a driver failure onto an HTTP-ready error."""
    message = str(exc)
    lowered = message.lower()
    if isinstance(exc, (openai.APIConnectionError, TimeoutError)) or any(
        marker in lowered for marker in ("fetch failed", "network", "enotfound", "econnrefused", "timeout")
    ):
        return ScriptGenerationError(
            "Netwerkverbinding probleem",
            status_code=503,
            hint="Probeer het opnieuw. Als het probleem aanhoudt, controleer je firewall instellingen.",
        )
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)) or any(
        marker in lowered for marker in ("api key", "401", "403")
    ):
        return ScriptGenerationError(
            "API key probleem",
            status_code=401,
            hint="Controleer OPENAI_API_KEY en herstart de server.",
        )
    if isinstance(exc, openai.RateLimitError) or any(
        marker in lowered for marker in ("quota", "rate limit", "429", "resource_exhausted")
    ):
        return ScriptGenerationError(
            "API quota bereikt",
            status_code=429,
            hint="Wacht even of verhoog de limiet van je API plan.",
        )
    if isinstance(exc, openai.NotFoundError) or "model" in lowered or "404" in lowered:
        return ScriptGenerationError(
            "Model niet beschikbaar",
            status_code=503,
            hint="Probeer het over een paar minuten opnieuw.",
        )
    if "safety" in lowered or "blocked" in lowered or "content_filter" in lowered:
        return ScriptGenerationError(
            "Inhoud geblokkeerd",
            status_code=400,
            hint="Controleer je slide inhoud op mogelijk problematische tekst.",
        )
    return ScriptGenerationError(
        "Onbekende fout bij script generatie",
        status_code=500,
        hint="Probeer het opnieuw. Als het probleem aanhoudt, controleer je API configuratie.",
    )


class ScriptGenerationService:
    """Generate per-slide presentation scripts with an injected driver."""

    def __init__(self, driver: ScriptGenerationDriver | None = None, logger=None):
        self.logger = logger or setup_logging("script-generation-service")
        self.driver = driver or OpenAIScriptDriver()

    @staticmethod
    def length_settings(length: ScriptLength) -> dict[str, str]:
        configured = service_config.get_pipeline_value("scripts.lengths", None) or DEFAULT_LENGTH_SETTINGS
        return configured.get(length.value) or DEFAULT_LENGTH_SETTINGS[length.value]

    @staticmethod
    def _format_slides(slides: list[SlideContent]) -> str:
        return "\n".join(
            f"\nSlide {slide.slide_number}: {slide.title}\nInhoud: {slide.content}\n" for slide in slides
        )

    def build_prompt(self, request: ScriptGenerationRequest) -> str:
        settings = self.length_settings(request.length)
        address = INFORMAL_INSTRUCTION if request.use_informal else FORMAL_INSTRUCTION
        return GENERATE_PROMPT.format(
            style_prompt=STYLE_PROMPTS[request.style],
            style=request.style.value,
            length=request.length.value,
            length_upper=request.length.value.upper(),
            time_per_slide=settings["time_per_slide"],
            word_count=settings["word_count"],
            description=settings["description"],
            address=address,
            slide_count=len(request.slides),
            slides=self._format_slides(request.slides),
            length_emphasis=LENGTH_EMPHASIS[request.length],
        )

    async def _complete(self, prompt: str) -> str:
        try:
            return await self.driver.complete(
                prompt,
                temperature=float(service_config.get_pipeline_value("scripts.temperature", 0.7)),
                max_tokens=int(service_config.get_pipeline_value("scripts.max_tokens", 8000)),
            )
        except (openai.OpenAIError, ValueError, TimeoutError) as exc:
            self.logger.error("Script generation driver failed: %s", exc)
            raise classify_error(exc) from exc

    async def generate_scripts(self, request: ScriptGenerationRequest) -> ScriptGenerationResponse:
        start_time = time.time()
        text = await self._complete(self.build_prompt(request))
        scripts, full_script = parse_script_response(
            text, len(request.slides), "Script voor slide {number} wordt gegenereerd..."
        )
        settings = self.length_settings(request.length)
        self.logger.info(
            "Generated scripts for %d slides in %.2fs", len(request.slides), time.time() - start_time
        )
        return ScriptGenerationResponse(
            scripts=scripts,
            full_script=full_script,
            metadata=ScriptMetadata(
                total_slides=len(request.slides),
                style=request.style,
                length=request.length,
                use_informal=request.use_informal,
                estimated_time_per_slide=settings["time_per_slide"],
                words_per_slide=[len(script.split()) for script in scripts],
            ),
        )

    async def convert_informal(self, request: InformalConversionRequest) -> ScriptGenerationResponse:
        slides_block = "\n".join(
            f"\nSLIDE {entry.slide_number} SCRIPT:\n{entry.script or 'Geen script beschikbaar'}\n"
            for entry in request.slides
        )
        text = await self._complete(INFORMAL_PROMPT.format(slides=slides_block))
        scripts, full_script = parse_script_response(
            text, len(request.slides), "Geconverteerd script voor slide {number}..."
        )
        return ScriptGenerationResponse(scripts=scripts, full_script=full_script, converted=True)
