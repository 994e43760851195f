from abc import ABC, abstractmethod
from typing import Any


class ScriptGenerationDriver(ABC):
    """Abstract base class for script generation drivers."""

    @abstractmethod
    async def complete(self, prompt: str, **kwargs: Any) -> str:
        """Return the model's text response for ``prompt``."""
        pass
