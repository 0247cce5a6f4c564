"""LLM provider adapters.

Every backend is wrapped in an adapter exposing the same contract:

    text = await adapter.call(prompt)

The adapter owns the endpoint, the credential, the request payload and the
extraction of the generated text from the provider's response envelope. It
raises one of the ProviderError subclasses on failure.
"""

import re
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI

from recipegen.config import Settings
from recipegen.errors import (
    ProviderEmptyResponse,
    ProviderHttpError,
    ProviderNetworkError,
    ProviderNotConfigured,
    ProviderQuotaExceeded,
)
from recipegen.services.prompts import RECIPE_RESPONSE_SCHEMA, SYSTEM_PROMPT

RATE_LIMIT_WORDING = re.compile(
    r"rate.?limit|quota|resource.?exhausted|too many requests",
    re.IGNORECASE,
)


def is_rate_limited(status_code: int, body: str) -> bool:
    """Quota/rate-limit signal on a failed response."""
    return status_code == 429 or bool(RATE_LIMIT_WORDING.search(body or ""))


class ProviderAdapter:
    """Base class for one LLM backend."""

    name = "provider"
    display_name = "Provider"
    env_var = "API_KEY"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        # Only swapped out in tests
        self.transport = transport

    @property
    def api_key(self) -> Optional[str]:
        raise NotImplementedError

    @property
    def model(self) -> str:
        raise NotImplementedError

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def require_api_key(self) -> str:
        """Fail fast, before any network call, when the key is missing."""
        if not self.is_configured:
            raise ProviderNotConfigured(self.display_name, self.env_var)
        return self.api_key.strip()

    async def call(self, prompt: str) -> str:
        raise NotImplementedError

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name} model={self.model}>"


class HttpProviderAdapter(ProviderAdapter):
    """Adapter that talks to its backend with a single httpx POST."""

    def build_request(self, prompt: str, api_key: str) -> dict:
        """Keyword arguments for ``httpx.AsyncClient.post``."""
        raise NotImplementedError

    def extract_text(self, data: dict) -> str:
        raise NotImplementedError

    async def call(self, prompt: str) -> str:
        api_key = self.require_api_key()
        request = self.build_request(prompt, api_key)

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.llm_timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(**request)
        except httpx.TransportError as e:
            raise ProviderNetworkError(
                self.display_name,
                f"{self.display_name} unreachable ({e.__class__.__name__})",
                details=str(e),
            ) from e

        if not response.is_success:
            body = response.text
            if is_rate_limited(response.status_code, body):
                raise ProviderQuotaExceeded(self.display_name, response.status_code, body)
            raise ProviderHttpError(self.display_name, response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderEmptyResponse(self.display_name, "response was not JSON") from e

        text = self.extract_text(data) if isinstance(data, dict) else ""
        if not text or not text.strip():
            raise ProviderEmptyResponse(self.display_name)
        return text


class GeminiProvider(HttpProviderAdapter):
    """Google Gemini generateContent API (key passed as a query parameter)."""

    name = "gemini"
    display_name = "Gemini"
    env_var = "GEMINI_KEY"

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.gemini_api_key

    @property
    def model(self) -> str:
        return self.settings.gemini_model

    def build_request(self, prompt: str, api_key: str) -> dict:
        return {
            "url": f"{self.BASE_URL}/{self.model}:generateContent",
            "params": {"key": api_key},
            "headers": {"Content-Type": "application/json"},
            "json": {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": self.settings.llm_temperature,
                    "maxOutputTokens": self.settings.llm_max_output_tokens,
                    "responseMimeType": "application/json",
                    "responseSchema": RECIPE_RESPONSE_SCHEMA,
                },
            },
        }

    def extract_text(self, data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                raise ProviderEmptyResponse(self.display_name, f"blocked: {block_reason}")
            return ""

        candidate = candidates[0] if isinstance(candidates[0], dict) else {}
        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(
            part.get("text") or ""
            for part in parts
            if isinstance(part, dict)
        )


class ChatCompletionProvider(HttpProviderAdapter):
    """OpenAI-compatible /chat/completions endpoint with bearer auth."""

    BASE_URL = ""

    def headers(self, api_key: str) -> dict:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def build_request(self, prompt: str, api_key: str) -> dict:
        return {
            "url": f"{self.BASE_URL}/chat/completions",
            "headers": self.headers(api_key),
            "json": {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": self.settings.llm_temperature,
                "max_tokens": self.settings.llm_max_output_tokens,
            },
        }

    def extract_text(self, data: dict) -> str:
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        content = (choices[0].get("message") or {}).get("content")

        # Some gateways return content as a list of typed parts
        if isinstance(content, list):
            return "".join(
                part.get("text") or ""
                for part in content
                if isinstance(part, dict)
            )
        return content if isinstance(content, str) else ""


class GrokProvider(ChatCompletionProvider):
    """xAI Grok."""

    name = "grok"
    display_name = "Grok"
    env_var = "GROK_KEY"

    BASE_URL = "https://api.x.ai/v1"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.grok_api_key

    @property
    def model(self) -> str:
        return self.settings.grok_model


class OpenRouterProvider(ChatCompletionProvider):
    """OpenRouter gateway."""

    name = "openrouter"
    display_name = "OpenRouter"
    env_var = "OPENROUTER_API_KEY"

    BASE_URL = "https://openrouter.ai/api/v1"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.openrouter_api_key

    @property
    def model(self) -> str:
        return self.settings.openrouter_model

    def headers(self, api_key: str) -> dict:
        headers = super().headers(api_key)
        # OpenRouter specific headers
        headers["HTTP-Referer"] = "https://quick-recipe-generator.app"
        headers["X-Title"] = "Quick Recipe Generator"
        return headers


class OpenAIProvider(ProviderAdapter):
    """OpenAI chat completions through the official SDK."""

    name = "openai"
    display_name = "OpenAI"
    env_var = "OPENAI_API_KEY"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.openai_api_key

    @property
    def model(self) -> str:
        return self.settings.openai_model

    async def call(self, prompt: str) -> str:
        api_key = self.require_api_key()

        http_client = None
        if self.transport is not None:
            http_client = httpx.AsyncClient(transport=self.transport)

        # The fallback chain is the only retry policy
        client = AsyncOpenAI(
            api_key=api_key,
            timeout=self.settings.llm_timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

        try:
            async with client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self.settings.llm_temperature,
                    max_tokens=self.settings.llm_max_output_tokens,
                )
        except openai.RateLimitError as e:
            raise ProviderQuotaExceeded(self.display_name, e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise ProviderNetworkError(
                self.display_name,
                f"{self.display_name} unreachable ({e.__class__.__name__})",
                details=str(e),
            ) from e
        except openai.APIStatusError as e:
            body = e.response.text
            if is_rate_limited(e.status_code, body):
                raise ProviderQuotaExceeded(self.display_name, e.status_code, body) from e
            raise ProviderHttpError(self.display_name, e.status_code, body) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise ProviderEmptyResponse(self.display_name)
        return content


PROVIDERS = {
    GeminiProvider.name: GeminiProvider,
    GrokProvider.name: GrokProvider,
    OpenRouterProvider.name: OpenRouterProvider,
    OpenAIProvider.name: OpenAIProvider,
}


def build_providers(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[ProviderAdapter]:
    """All known providers, in the configured priority order."""
    adapters = []
    seen = set()
    for name in settings.provider_order:
        provider_cls = PROVIDERS.get(name)
        if provider_cls is None:
            print(f"⚠️ Unknown provider in PROVIDER_PRIORITY: {name}")
            continue
        if name in seen:
            continue
        seen.add(name)
        adapters.append(provider_cls(settings, transport=transport))
    return adapters
