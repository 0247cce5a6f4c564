"""Pydantic schemas for API request/response validation.

These match the JSON the web frontend sends and renders:
- { prompt } in
- { recipes } or { error, details } out
"""

from pydantic import BaseModel
from typing import Optional

from .recipe import Recipe


# ============================================================
# Generation
# ============================================================

class GenerateRequest(BaseModel):
    """Request body for recipe generation."""
    prompt: str


class GenerateResponse(BaseModel):
    """Generated recipes, in the order the model returned them."""
    recipes: list[Recipe]


# ============================================================
# Utility Schemas
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    environment: str
    providers: list[str] = []


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    details: Optional[str] = None
