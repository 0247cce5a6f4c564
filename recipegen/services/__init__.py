"""Services module for recipe generation."""

from .llm_client import RecipeService, GenerationResult, get_recipe_service, generate_recipes
from .providers import ProviderAdapter, build_providers

__all__ = [
    "RecipeService",
    "GenerationResult",
    "get_recipe_service",
    "generate_recipes",
    "ProviderAdapter",
    "build_providers",
]
