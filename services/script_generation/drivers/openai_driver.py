"""OpenAI driver for script generation using AsyncOpenAI."""

from __future__ import annotations

from typing import Any

from shared.openai_client import create_openai_client, get_model_name

from .base import ScriptGenerationDriver


class OpenAIScriptDriver(ScriptGenerationDriver):
    """Direct OpenAI implementation using AsyncOpenAI client."""

    def __init__(self, client: Any | None = None, model: str | None = None):
        # Client is created on first use so the app starts without credentials
        self._client = client
        self.model = get_model_name("script", model)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_openai_client(async_client=True)
        return self._client

    async def complete(self, prompt: str, **kwargs: Any) -> str:
        response = await self.client.chat.completions.create(
            model=kwargs.get("model", self.model),
            messages=[
                {
                    "role": "system",
                    "content": "Je bent een expert presentatiescriptschrijver die natuurlijk, spreekbaar Nederlands schrijft.",
                },
                {"role": "user", "content": prompt},
            ],
            temperature=kwargs.get("temperature", 0.7),
            max_tokens=kwargs.get("max_tokens", 8000),
        )

        content = response.choices[0].message.content
        if content is not None:
            return content.strip()
        return ""
