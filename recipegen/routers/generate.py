"""Recipe generation API endpoint."""

import traceback

import sentry_sdk
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from recipegen.config import Settings, get_settings
from recipegen.errors import EmptyPrompt, RecipeError
from recipegen.models.schemas import ErrorResponse, GenerateRequest, GenerateResponse
from recipegen.services.llm_client import RecipeService, get_recipe_service

router = APIRouter(prefix="/api", tags=["generate"])


def error_response(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    """JSON error payload; details are dropped unless set."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details=details).model_dump(exclude_none=True),
    )


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(
    request: GenerateRequest,
    service: RecipeService = Depends(get_recipe_service),
    settings: Settings = Depends(get_settings),
):
    """
    Generate 2-3 quick recipes from the ingredients the user has.

    Returns 400 for an empty prompt and 500 when no provider could produce
    recipes. Error details are only included in development.
    """
    prompt = request.prompt.strip()
    if not prompt:
        return error_response(400, EmptyPrompt.default_message)

    try:
        recipes = await service.generate(prompt)
    except EmptyPrompt as e:
        return error_response(400, e.message)
    except RecipeError as e:
        print(f"❌ API Error: {e.message}")
        return error_response(500, e.message, e.details if settings.is_development else None)
    except Exception as e:
        print(f"❌ API Error: {e}")
        sentry_sdk.capture_exception(e)
        return error_response(
            500,
            "Failed to generate recipes",
            traceback.format_exc() if settings.is_development else None,
        )

    return GenerateResponse(recipes=recipes)
