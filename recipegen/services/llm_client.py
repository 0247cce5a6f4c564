"""LLM service for recipe generation with an ordered provider fallback chain."""

import time
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional

import sentry_sdk

from recipegen.config import Settings, get_settings
from recipegen.errors import (
    MODEL_OUTPUT_ERRORS,
    AllProvidersFailed,
    EmptyPrompt,
    NoProviderConfigured,
    ProviderQuotaExceeded,
    RecipeError,
)
from recipegen.models.recipe import Recipe
from recipegen.services.json_repair import parse_model_output
from recipegen.services.normalizer import normalize
from recipegen.services.prompts import build_prompt
from recipegen.services.providers import ProviderAdapter, build_providers


class AttemptOutcome(Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"  # move on to the next provider
    TERMINAL = "terminal"    # surface the error right away


@dataclass
class ProviderAttempt:
    """Result of trying one provider."""
    provider: str
    outcome: AttemptOutcome
    error: Optional[Exception] = None
    latency_seconds: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS

    @property
    def error_message(self) -> str:
        if self.error is None:
            return "ok"
        if isinstance(self.error, RecipeError):
            return self.error.message
        return f"{type(self.error).__name__}: {self.error}"


@dataclass
class GenerationResult:
    """Recipes plus the provider that produced them."""
    recipes: list[Recipe]
    provider: str
    attempts: list[ProviderAttempt] = field(default_factory=list)


class RecipeService:
    """
    Service for LLM-based recipe generation.

    Providers are tried one at a time in priority order (PROVIDER_PRIORITY).
    Any failure - HTTP error, quota, empty or unparseable output - moves on to
    the next enabled provider; the last provider's failure is surfaced as
    AllProvidersFailed.
    """

    def __init__(self, settings: Settings, providers: Optional[list[ProviderAdapter]] = None):
        self.settings = settings
        self.providers = providers if providers is not None else build_providers(settings)

    @property
    def enabled_providers(self) -> list[ProviderAdapter]:
        """Providers with a credential, highest priority first."""
        return [provider for provider in self.providers if provider.is_configured]

    async def generate(self, user_input: str) -> list[Recipe]:
        """Generate recipes for the user's ingredients. Never returns an empty list."""
        result = await self.generate_with_details(user_input)
        return result.recipes

    async def generate_with_details(self, user_input: str) -> GenerationResult:
        """
        Generate recipes and report which providers were tried.

        Args:
            user_input: Free text from the user (ingredients, cravings...)

        Returns:
            GenerationResult with at least one recipe

        Raises:
            EmptyPrompt: input is blank
            NoProviderConfigured: no provider has a credential
            AllProvidersFailed: every enabled provider failed
            MalformedModelOutput, InvalidResponseShape, NoValidRecipes:
                only when FALLBACK_ON_PARSE_ERROR is off
        """
        prompt_text = (user_input or "").strip()
        if not prompt_text:
            raise EmptyPrompt()

        providers = self.enabled_providers
        if not providers:
            raise NoProviderConfigured()

        print(f"🤖 Generating recipes...")
        print(f"📝 Prompt length: {len(prompt_text)} chars")
        print(f"🔗 Providers: {', '.join(provider.name for provider in providers)}")

        prompt = build_prompt(prompt_text)
        attempts: list[ProviderAttempt] = []

        for index, provider in enumerate(providers):
            if index == 0:
                print(f"🚀 Trying {provider.display_name}...")
            else:
                print(f"🔄 Falling back to {provider.display_name}...")

            start_time = time.time()
            try:
                recipes = await self._attempt(provider, prompt)
            except Exception as e:
                outcome = self._classify(e)
                attempts.append(ProviderAttempt(
                    provider=provider.name,
                    outcome=outcome,
                    error=e,
                    latency_seconds=time.time() - start_time,
                ))
                self._report_failure(provider, attempts[-1])
                if outcome is AttemptOutcome.TERMINAL:
                    raise
                continue

            latency = time.time() - start_time
            attempts.append(ProviderAttempt(
                provider=provider.name,
                outcome=AttemptOutcome.SUCCESS,
                latency_seconds=latency,
            ))
            print(f"✅ {len(recipes)} recipes from {provider.display_name}: {', '.join(r.title for r in recipes)}")
            failed = sum(not attempt.success for attempt in attempts)
            print(f"   Latency: {latency:.1f}s | Attempts: {len(attempts)} ({failed} failed)")

            return GenerationResult(recipes=recipes, provider=provider.name, attempts=attempts)

        last_error = attempts[-1].error
        error = AllProvidersFailed(attempts, last_error)
        print(f"❌ All providers failed: {error.details}")
        sentry_sdk.capture_message(
            "Recipe generation failed on every provider",
            level="warning",
            extras={
                "providers": error.providers,
                "errors": [attempt.error_message for attempt in attempts],
            },
            tags={
                "feature": "recipe_generation",
                "error_type": type(last_error).__name__,
            },
        )
        raise error from last_error

    async def _attempt(self, provider: ProviderAdapter, prompt: str) -> list[Recipe]:
        """Call one provider and run its output through the normalization pipeline."""
        raw_text = await provider.call(prompt)
        parsed = parse_model_output(raw_text)
        return normalize(parsed)

    def _classify(self, error: Exception) -> AttemptOutcome:
        if isinstance(error, MODEL_OUTPUT_ERRORS) and not self.settings.fallback_on_parse_error:
            return AttemptOutcome.TERMINAL
        return AttemptOutcome.RETRYABLE

    def _report_failure(self, provider: ProviderAdapter, attempt: ProviderAttempt):
        """Log a failed attempt; unexpected exceptions also go to Sentry."""
        error = attempt.error
        print(f"⚠️ {provider.display_name} failed: {attempt.error_message[:200]}")

        if isinstance(error, ProviderQuotaExceeded):
            print(f"   {provider.display_name} is rate limited (HTTP {error.status_code})")
        elif isinstance(error, RecipeError):
            if error.details:
                print(f"   Details: {error.details[:200]}")
        else:
            sentry_sdk.capture_exception(error)


@lru_cache
def get_recipe_service() -> RecipeService:
    """Get cached service built from the process settings."""
    return RecipeService(get_settings())


async def generate_recipes(prompt: str) -> list[Recipe]:
    """Generate recipes for a prompt with the process-wide configuration."""
    return await get_recipe_service().generate(prompt)
