"""Errors raised by the recipe generation pipeline.

Every error carries a user-facing ``message`` and an optional ``details``
string with diagnostics (truncated model output, HTTP bodies, ...) that is
only shown to developers.
"""

from typing import Optional

CONNECTIVITY_MESSAGE = "No internet or server unreachable. Check your connection."

# How much raw text we keep around for diagnostics
SNIPPET_LENGTH = 200


def truncate(text: str, limit: int = SNIPPET_LENGTH) -> str:
    """Shorten text for error messages and logs."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class RecipeError(Exception):
    """Base class for recipe generation failures."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class EmptyPrompt(RecipeError):
    default_message = "Please enter ingredients or a cooking prompt"


class NoProviderConfigured(RecipeError):
    default_message = (
        "No AI API key configured. Add GEMINI_KEY, GROK_KEY, "
        "OPENROUTER_API_KEY or OPENAI_API_KEY to your environment."
    )


# ============================================================
# Provider failures
# ============================================================

class ProviderError(RecipeError):
    """A single provider attempt failed."""

    def __init__(self, provider: str, message: Optional[str] = None, details: Optional[str] = None):
        self.provider = provider
        super().__init__(message, details)


class ProviderNotConfigured(ProviderError):
    def __init__(self, provider: str, env_var: str):
        self.env_var = env_var
        super().__init__(provider, f"{env_var} is not set")


class ProviderNetworkError(ProviderError):
    """The request never got an HTTP response (DNS, refused, timeout...)."""


class ProviderHttpError(ProviderError):
    def __init__(self, provider: str, status_code: int, body: str = "", message: Optional[str] = None):
        self.status_code = status_code
        self.body = truncate(body)
        super().__init__(
            provider,
            message or f"{provider} API error: {status_code} - {self.body}",
            details=self.body,
        )


class ProviderQuotaExceeded(ProviderHttpError):
    def __init__(self, provider: str, status_code: int = 429, body: str = ""):
        super().__init__(
            provider,
            status_code,
            body,
            message=(
                f"{provider} quota exceeded. Wait a minute and try again, "
                "or configure another AI provider as backup."
            ),
        )


class ProviderEmptyResponse(ProviderError):
    def __init__(self, provider: str, reason: Optional[str] = None):
        message = f"{provider} returned no text"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(provider, message)


# ============================================================
# Model output failures
# ============================================================

class MalformedModelOutput(RecipeError):
    def __init__(self, error: str, text: str):
        self.text = truncate(text)
        super().__init__(f"Invalid recipe JSON from AI: {error}", details=self.text)


class InvalidResponseShape(RecipeError):
    default_message = "AI did not return a JSON array"


class NoValidRecipes(RecipeError):
    def __init__(self, snippet: str = ""):
        super().__init__("No valid recipes in AI response", details=truncate(snippet))


# Errors caused by what the model wrote, rather than by the provider itself
MODEL_OUTPUT_ERRORS = (MalformedModelOutput, InvalidResponseShape, NoValidRecipes)


class AllProvidersFailed(RecipeError):
    """Every enabled provider was tried and none produced recipes."""

    def __init__(self, attempts: list, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        self.providers = [attempt.provider for attempt in attempts]

        if isinstance(last_error, ProviderNetworkError):
            message = CONNECTIVITY_MESSAGE
        elif isinstance(last_error, RecipeError):
            message = last_error.message
        else:
            message = str(last_error) or RecipeError.default_message

        summary = "; ".join(
            f"{attempt.provider}: {attempt.error_message}" for attempt in attempts
        )
        super().__init__(message, details=f"Tried {', '.join(self.providers)} - {summary}")
