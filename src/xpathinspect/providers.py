from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol, Sequence

import httpx

from .config import InspectorConfig, ProviderSettings
from .errors import ProviderError
from .models import ElementDescription
from .validation import clean_provider_output

logger = logging.getLogger("xpathinspect.providers")


def build_prompt(description: ElementDescription) -> str:
    attributes = json.dumps(
        [{"name": name, "value": value} for name, value in description.attributes],
        ensure_ascii=False,
    )
    return (
        "Generate a unique XPath for this HTML element:\n"
        f"Tag: {description.tag}\n"
        f"ID: {description.id or 'None'}\n"
        f"Classes: {description.class_name or 'None'}\n"
        f"Attributes: {attributes}\n"
        f"Text: {description.text or 'None'}\n"
        "\n"
        "Rules:\n"
        "1. XPath must be unique on the page\n"
        "2. Prefer IDs if unique\n"
        "3. Use stable attributes like data-testid, name, aria-label\n"
        "4. Avoid position-based selectors\n"
        "5. Return ONLY the XPath, no explanations\n"
        "\n"
        "XPath:"
    )


def build_short_prompt(description: ElementDescription) -> str:
    return (
        f"Generate a unique XPath for: tag={description.tag}, id={description.id}, "
        f"classes={description.class_name}. Return only XPath."
    )


class LocatorProvider(Protocol):
    name: str

    async def suggest(self, client: httpx.AsyncClient, description: ElementDescription) -> str: ...


class HuggingFaceProvider:
    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings
        self.name = settings.name

    async def suggest(self, client: httpx.AsyncClient, description: ElementDescription) -> str:
        prompt = build_prompt(description)
        headers: dict[str, str] = {}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        payload = {
            "inputs": prompt,
            "parameters": {"max_length": 100, "temperature": 0.1},
        }

        response = await client.post(self.settings.url, json=payload, headers=headers)
        if response.is_error:
            raise ProviderError(f"HuggingFace API failed with status: {response.status_code}")

        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(str(data["error"]))
        generated = _generated_text(data)
        if not generated:
            raise ProviderError("HuggingFace API returned no generated text.")
        return clean_provider_output(generated, prompt)


class OpenRouterProvider:
    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings
        self.name = settings.name

    async def suggest(self, client: httpx.AsyncClient, description: ElementDescription) -> str:
        if not self.settings.api_key:
            raise ProviderError("OpenRouter API key is not configured.")
        payload = {
            "model": self.settings.model,
            "messages": [{"role": "user", "content": build_short_prompt(description)}],
            "max_tokens": 50,
        }
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}

        response = await client.post(self.settings.url, json=payload, headers=headers)
        if response.is_error:
            raise ProviderError(f"OpenRouter API failed with status: {response.status_code}")

        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("OpenRouter API returned an unexpected payload.") from exc
        return clean_provider_output(str(content or ""))


class ProviderChain:
    """Asks each provider in order and stops at the first usable answer.

    Every provider gets the same timeout and the same failure handling; a
    failing provider is logged and skipped.
    """

    def __init__(
        self,
        providers: Sequence[LocatorProvider],
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.providers = list(providers)
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(
        cls,
        config: InspectorConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ProviderChain:
        return cls(
            [HuggingFaceProvider(config.huggingface), OpenRouterProvider(config.openrouter)],
            timeout=config.provider_timeout,
            transport=transport,
        )

    async def suggest(self, description: ElementDescription) -> str | None:
        if not self.providers:
            return None
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for provider in self.providers:
                suggestion = await self._attempt(provider, client, description)
                if suggestion:
                    return suggestion
        return None

    async def _attempt(
        self,
        provider: LocatorProvider,
        client: httpx.AsyncClient,
        description: ElementDescription,
    ) -> str | None:
        try:
            suggestion = await asyncio.wait_for(provider.suggest(client, description), timeout=self.timeout)
        except (httpx.HTTPError, ProviderError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning("Provider %s failed: %s", provider.name, exc)
            return None
        if not suggestion:
            logger.warning("Provider %s returned an empty locator.", provider.name)
            return None
        logger.info("Provider %s suggested %s", provider.name, suggestion)
        return suggestion


def _generated_text(data: Any) -> str:
    if isinstance(data, dict):
        return str(data.get("generated_text") or "")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return str(data[0].get("generated_text") or "")
    return ""
