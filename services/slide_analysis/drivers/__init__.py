"""Slide analysis driver registry."""

from .base import SlideAnalyzer
from .openai_driver import OpenAISlideAnalyzer

__all__ = [
    "SlideAnalyzer",
    "OpenAISlideAnalyzer",
]
