from .recipe import Recipe
from .schemas import GenerateRequest, GenerateResponse, HealthResponse, ErrorResponse

__all__ = [
    "Recipe",
    "GenerateRequest",
    "GenerateResponse",
    "HealthResponse",
    "ErrorResponse",
]
