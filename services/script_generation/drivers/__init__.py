"""Script generation driver implementations."""

from .base import ScriptGenerationDriver
from .openai_driver import OpenAIScriptDriver

__all__ = [
    "ScriptGenerationDriver",
    "OpenAIScriptDriver",
]
