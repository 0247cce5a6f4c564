"""Recipe value object returned by the generation pipeline."""

from pydantic import BaseModel, field_validator


class Recipe(BaseModel):
    """
    A generated recipe.

    Frozen once built, with tuple list fields; the normalizer guarantees a
    title and at least one ingredient or step before constructing it.
    """
    title: str
    time: str
    ingredients: tuple[str, ...] = ()
    steps: tuple[str, ...] = ()
    tips: str = ""

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    class Config:
        frozen = True
