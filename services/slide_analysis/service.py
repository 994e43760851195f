"""Slide analysis service: provider selection and result caching."""

from __future__ import annotations

from shared.models import SlideContent
from shared.utils import Cache, config as service_config, generate_hash, setup_logging

from .drivers import OpenAISlideAnalyzer, SlideAnalyzer

logger = setup_logging("slide-analysis-service")


class CachedSlideAnalyzer(SlideAnalyzer):
    """Wrap a provider and reuse results for identical slide markup."""

    def __init__(self, provider: SlideAnalyzer, ttl: int = 3600) -> None:
        self.provider = provider
        self.cache = Cache(default_ttl=ttl)

    async def analyze_slide(self, slide_markup: str, slide_number: int) -> SlideContent | None:
        cache_key = generate_hash(f"{slide_number}:{slide_markup}")
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Analysis cache hit for slide %s", slide_number)
            return cached
        result = await self.provider.analyze_slide(slide_markup, slide_number)
        if result is not None:
            self.cache.set(cache_key, result)
        return result

    async def analyze_presentation(
        self, presentation_xml: str, relationships_xml: str, slide_count: int
    ) -> list[SlideContent] | None:
        return await self.provider.analyze_presentation(presentation_xml, relationships_xml, slide_count)


def load_slide_analyzer(provider_name: str | None = None) -> SlideAnalyzer | None:
    """Build the configured analyzer; ``none`` disables AI fallback."""
    name = (provider_name or service_config.get("slide_analysis_provider", "none") or "none").lower()
    providers: dict[str, type[SlideAnalyzer]] = {
        "openai": OpenAISlideAnalyzer,
    }
    if name == "none":
        return None
    provider_cls = providers.get(name)
    if provider_cls is None:
        logger.warning("Unknown slide analysis provider '%s', AI fallback disabled", name)
        return None
    return CachedSlideAnalyzer(provider_cls())
