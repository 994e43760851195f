"""Base class for AI slide analysers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.models import SlideContent


class SlideAnalyzer(ABC):
    """Recover slide text when heuristic extraction yields too little."""

    @abstractmethod
    async def analyze_slide(self, slide_markup: str, slide_number: int) -> SlideContent | None:
        """Return a record for one slide, or None when analysis is unavailable."""

    @abstractmethod
    async def analyze_presentation(
        self, presentation_xml: str, relationships_xml: str, slide_count: int
    ) -> list[SlideContent] | None:
        """Describe every slide from the deck structure alone."""
