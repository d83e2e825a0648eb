"""Async text generation client backed by Azure OpenAI."""

from __future__ import annotations

from typing import Optional

import httpx
from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from loguru import logger
from openai import AsyncAzureOpenAI, OpenAIError

from config.settings import Settings, settings as default_settings


class GenerationError(Exception):
    """Text generation failed or is unavailable."""


class TextGenerationClient:
    """Thin wrapper exposing ``complete(prompt, max_tokens, temperature)``.

    The underlying client is only built when an endpoint is configured;
    otherwise every call raises ``GenerationError`` so callers can fall
    back to templates.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[AsyncAzureOpenAI] = None,
    ) -> None:
        self._settings = config or default_settings
        self._client = client
        if self._client is None and self._settings.azure_openai_endpoint:
            self._client = self._build_client()

    def _build_client(self) -> AsyncAzureOpenAI:
        client_kwargs: dict = {
            "azure_endpoint": self._settings.azure_openai_endpoint,
            "api_version": self._settings.azure_openai_api_version,
        }
        if self._settings.azure_openai_api_key:
            client_kwargs["api_key"] = self._settings.azure_openai_api_key
        else:
            token_provider = get_bearer_token_provider(
                DefaultAzureCredential(), "https://cognitiveservices.azure.com/.default"
            )
            client_kwargs["azure_ad_token_provider"] = token_provider
        client_kwargs["http_client"] = httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.llm_timeout_seconds, connect=10.0)
        )
        logger.info(
            f"TextGenerationClient: using deployment {self._settings.azure_openai_deployment}"
        )
        return AsyncAzureOpenAI(**client_kwargs)

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Return the completion text for a single user prompt."""
        if self._client is None:
            raise GenerationError("text generation is not configured")

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.azure_openai_deployment,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens or self._settings.llm_max_tokens,
                temperature=(
                    self._settings.llm_temperature if temperature is None else temperature
                ),
            )
        except (OpenAIError, httpx.HTTPError) as exc:
            raise GenerationError(f"completion request failed: {exc}") from exc

        if not response.choices:
            raise GenerationError("completion returned no choices")
        text = response.choices[0].message.content or ""
        if not text.strip():
            raise GenerationError("completion returned empty text")
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
