"""Map loosely-keyed model output onto the strict Recipe model."""

import json
import re
from typing import Any, Optional

from recipegen.errors import InvalidResponseShape, NoValidRecipes
from recipegen.models.recipe import Recipe

# Accepted keys per field, highest priority first (matched case-insensitively)
TITLE_KEYS = ("title", "name", "recipe")
TIME_KEYS = ("time", "duration", "cooking_time", "prep_time")
INGREDIENT_KEYS = ("ingredients", "ingredient")
STEP_KEYS = ("steps", "instructions", "method", "directions")
TIP_KEYS = ("tips", "tip", "notes", "note")

TIME_PLACEHOLDER = "Time not specified"
STEP_PLACEHOLDER = "Combine the ingredients and cook until done."

# Keys that hold the text of a step when the model sends objects
STEP_TEXT_KEYS = ("text", "instruction", "description", "step")

# "1. ", "2) ", "- ", "* ", "• " at the start of a line
LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s+")


def _lower_keys(item: dict) -> dict:
    """Lower-case keys; the first spelling of a key wins."""
    lowered = {}
    for key, value in item.items():
        lowered.setdefault(str(key).strip().lower(), value)
    return lowered


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value).strip()


def _first_text(fields: dict) -> str:
    """First non-numeric text value, for objects in a shape we don't know."""
    for value in fields.values():
        text = _text(value)
        if text and not text.isdigit():
            return text
    return ""


def _ingredient_line(item: dict) -> str:
    """Flatten {"quantity", "unit", "name", "notes"} into one line."""
    fields = _lower_keys(item)
    line = " ".join(
        part for part in (_text(fields.get("quantity")), _text(fields.get("unit")), _text(fields.get("name")))
        if part
    )
    if not line:
        return _first_text(fields)
    notes = _text(fields.get("notes"))
    if notes:
        line += f" ({notes})"
    return line


def _ingredient_entry(key: Any, value: Any) -> str:
    # {"rice": "1 cup"} -> "rice 1 cup"
    amount = _ingredient_line(value) if isinstance(value, dict) else _text(value)
    return " ".join(part for part in (_text(key), amount) if part)


def _step_line(item: dict) -> str:
    fields = _lower_keys(item)
    for key in STEP_TEXT_KEYS:
        text = _text(fields.get(key))
        if text and not text.isdigit():
            return text
    return _first_text(fields)


def _step_entry(key: Any, value: Any) -> str:
    # {"1": "Wash rice"} -> "Wash rice"; the keys only number the steps
    return _step_line(value) if isinstance(value, dict) else _text(value)


def _lines(value: Any, item_to_line, entry_to_line) -> list[str]:
    """Coerce a list-ish field into clean text lines."""
    if isinstance(value, str):
        raw_lines = [LIST_MARKER.sub("", line) for line in value.split("\n")]
        return [line.strip() for line in raw_lines if line.strip()]

    if isinstance(value, dict):
        lines = (entry_to_line(key, entry) for key, entry in value.items())
        return [line for line in lines if line]

    if not isinstance(value, list):
        text = _text(value)
        return [text] if text else []

    lines = []
    for entry in value:
        line = item_to_line(entry) if isinstance(entry, dict) else _text(entry)
        if line:
            lines.append(line)
    return lines


def _tips(value: Any) -> str:
    if isinstance(value, list):
        return " ".join(text for text in (_text(v) for v in value) if text)
    return _text(value)


def _first(fields: dict, keys: tuple, convert) -> Any:
    """Converted value of the first key that yields something non-empty."""
    for key in keys:
        if key in fields:
            converted = convert(fields[key])
            if converted:
                return converted
    return convert(None)


def normalize_recipe(item: dict) -> Optional[Recipe]:
    """Build a Recipe from one parsed object, or None if it isn't usable."""
    fields = _lower_keys(item)

    title = _first(fields, TITLE_KEYS, _text)
    if not title:
        return None

    ingredients = _first(fields, INGREDIENT_KEYS, lambda v: _lines(v, _ingredient_line, _ingredient_entry))
    steps = _first(fields, STEP_KEYS, lambda v: _lines(v, _step_line, _step_entry))
    if not ingredients and not steps:
        return None

    return Recipe(
        title=title,
        time=_first(fields, TIME_KEYS, _text) or TIME_PLACEHOLDER,
        ingredients=ingredients,
        steps=steps or (STEP_PLACEHOLDER,),
        tips=_first(fields, TIP_KEYS, _tips),
    )


def normalize(parsed: Any) -> list[Recipe]:
    """
    Turn the parsed model output into recipes.

    Raises:
        InvalidResponseShape: the top-level value is not a JSON array
        NoValidRecipes: no element survived normalization
    """
    if not isinstance(parsed, list):
        raise InvalidResponseShape(details=type(parsed).__name__)

    recipes = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        recipe = normalize_recipe(item)
        if recipe is not None:
            recipes.append(recipe)

    if not recipes:
        raise NoValidRecipes(json.dumps(parsed, ensure_ascii=False, default=str))

    return recipes
