"""Health check endpoint."""

from fastapi import APIRouter, Depends

from recipegen.config import get_settings
from recipegen.models.schemas import HealthResponse
from recipegen.services.llm_client import RecipeService, get_recipe_service

router = APIRouter(tags=["health"])
settings = get_settings()


@router.get("/health", response_model=HealthResponse)
async def health_check(service: RecipeService = Depends(get_recipe_service)):
    """
    Health check endpoint.

    Reports which AI providers are configured, in fallback order.
    Unhealthy when none are, since every generation would fail.
    """
    providers = [provider.name for provider in service.enabled_providers]

    return HealthResponse(
        status="healthy" if providers else "unhealthy",
        environment=settings.environment,
        providers=providers,
    )
