"""Builder for OpenAI clients used by the script generation and slide analysis drivers.

Drivers receive a client from here instead of constructing one at import time,
so tests can hand them a fake.
"""

from __future__ import annotations

import os

from openai import AsyncOpenAI, OpenAI

from shared.utils import config


def create_openai_client(
    api_key: str | None = None,
    base_url: str | None = None,
    async_client: bool = True,
) -> AsyncOpenAI | OpenAI:
    """
    Create a direct OpenAI client.

    Args:
        api_key: OpenAI API key (auto-detected if None)
        base_url: Optional API base URL for OpenAI-compatible gateways
        async_client: Whether to return AsyncOpenAI (True) or sync OpenAI (False)

    Returns:
        Configured AsyncOpenAI or OpenAI client

    Raises:
        ValueError: If API key is not configured
    """
    api_key = api_key or config.get("openai_api_key") or os.getenv("OPENAI_API_KEY")
    base_url = base_url or config.get("openai_base_url") or None

    if not api_key:
        raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

    if async_client:
        return AsyncOpenAI(api_key=api_key, base_url=base_url)
    return OpenAI(api_key=api_key, base_url=base_url)


def get_model_name(purpose: str, model: str | None = None) -> str:
    """
    Resolve the model name for a purpose (``script`` or ``analysis``).

    Args:
        purpose: Which configured model to use
        model: Explicit model name (overrides config)
    """
    return model or config.get(f"{purpose}_model") or "gpt-4o-mini"
