import pydantic
import pytest

from recipegen.errors import InvalidResponseShape, NoValidRecipes
from recipegen.models.recipe import Recipe
from recipegen.services.normalizer import (
    STEP_PLACEHOLDER,
    TIME_PLACEHOLDER,
    normalize,
)


def test_full_recipe():
    recipes = normalize([{
        "title": "Dal Rice",
        "time": "20 mins",
        "ingredients": ["rice", "dal", "onion"],
        "steps": ["Cook rice", "Cook dal", "Mix"],
        "tips": "Add ghee",
    }])

    assert recipes == [Recipe(
        title="Dal Rice",
        time="20 mins",
        ingredients=["rice", "dal", "onion"],
        steps=["Cook rice", "Cook dal", "Mix"],
        tips="Add ghee",
    )]


def test_synonyms_and_case_insensitive_keys():
    recipes = normalize([{
        "Name": "Poha",
        "COOKING_TIME": "15 mins",
        "Ingredient": ["poha", "peanuts"],
        "Directions": ["Rinse", "Temper", "Mix"],
        "Notes": "Squeeze lemon",
    }])

    recipe = recipes[0]
    assert recipe.title == "Poha"
    assert recipe.time == "15 mins"
    assert recipe.ingredients == ("poha", "peanuts")
    assert recipe.steps == ("Rinse", "Temper", "Mix")
    assert recipe.tips == "Squeeze lemon"


def test_synonym_priority_order():
    recipe = normalize([{
        "recipe": "Third choice",
        "name": "Second choice",
        "title": "First choice",
        "method": ["from method"],
        "steps": ["from steps"],
    }])[0]

    assert recipe.title == "First choice"
    assert recipe.steps == ("from steps",)


def test_empty_higher_priority_key_falls_through():
    recipe = normalize([{"title": "", "name": "Upma", "steps": ["Roast rava"]}])[0]
    assert recipe.title == "Upma"


@pytest.mark.parametrize(
    "item",
    (
        {"time": "10 mins", "ingredients": ["a"], "steps": ["b"]},
        {"dish": "Khichdi", "ingredients": ["rice"], "steps": ["Cook"]},
        {"title": "   ", "ingredients": ["rice"], "steps": ["Cook"]},
        {"title": {"text": "nested"}, "ingredients": ["rice"]},
    ),
)
def test_items_without_title_are_excluded(item):
    keeper = {"title": "Keeper", "steps": ["Cook"]}
    recipes = normalize([item, keeper])
    assert [r.title for r in recipes] == ["Keeper"]


def test_non_object_elements_skipped():
    recipes = normalize(["text", 42, None, ["nested"], {"title": "Keeper", "steps": ["Cook"]}])
    assert len(recipes) == 1


def test_placeholders_for_missing_time_and_steps():
    recipe = normalize([{"title": "Sprout salad", "ingredients": ["sprouts", "onion"]}])[0]

    assert recipe.time == TIME_PLACEHOLDER
    assert recipe.steps == (STEP_PLACEHOLDER,)
    assert recipe.tips == ""


def test_recipe_without_ingredients_kept_when_it_has_steps():
    recipe = normalize([{"title": "Jeera water", "steps": ["Boil water with jeera"]}])[0]
    assert recipe.ingredients == ()
    assert recipe.steps == ("Boil water with jeera",)


def test_recipe_without_ingredients_or_steps_dropped():
    with pytest.raises(NoValidRecipes):
        normalize([{"title": "Nothing", "time": "5 mins", "tips": "?"}])


def test_string_fields_are_split_into_lines():
    recipe = normalize([{
        "title": "Lemon rice",
        "time": 15,
        "ingredients": "- rice\n- lemon\n\n- curry leaves",
        "steps": "1. Cook rice\n2) Temper leaves\n3. Mix with lemon",
        "tips": ["Use cold rice.", "Add peanuts."],
    }])[0]

    assert recipe.time == "15"
    assert recipe.ingredients == ("rice", "lemon", "curry leaves")
    assert recipe.steps == ("Cook rice", "Temper leaves", "Mix with lemon")
    assert recipe.tips == "Use cold rice. Add peanuts."


def test_structured_ingredients_and_steps_are_flattened():
    recipe = normalize([{
        "title": "Masala omelette",
        "ingredients": [
            {"quantity": "2", "unit": None, "name": "eggs"},
            {"Quantity": "1", "Unit": "small", "Name": "onion", "Notes": "chopped"},
            {"unit": "pinch"},
        ],
        "steps": [
            {"step": 1, "instruction": "Beat the eggs"},
            {"text": "Cook on low heat"},
        ],
    }])[0]

    assert recipe.ingredients == ("2 eggs", "1 small onion (chopped)", "pinch")
    assert recipe.steps == ("Beat the eggs", "Cook on low heat")


def test_order_is_preserved():
    recipes = normalize([
        {"title": "A", "steps": ["1"]},
        {"title": "B", "steps": ["2"]},
        {"title": "C", "steps": ["3"]},
    ])
    assert [r.title for r in recipes] == ["A", "B", "C"]


@pytest.mark.parametrize("parsed", ({"title": "X"}, "recipes", 3, None))
def test_non_array_rejected(parsed):
    with pytest.raises(InvalidResponseShape) as exc_info:
        normalize(parsed)
    assert exc_info.value.message == "AI did not return a JSON array"


def test_no_valid_recipes_has_snippet():
    parsed = [{"description": "x" * 500}]
    with pytest.raises(NoValidRecipes) as exc_info:
        normalize(parsed)

    error = exc_info.value
    assert error.message == "No valid recipes in AI response"
    assert error.details.startswith('[{"description": "xxx')
    assert len(error.details) <= 203


def test_empty_array_has_no_recipes():
    with pytest.raises(NoValidRecipes):
        normalize([])


def test_recipes_are_immutable():
    recipe = normalize([{"title": "Dal", "steps": ["Cook"]}])[0]
    with pytest.raises(pydantic.ValidationError):
        recipe.title = "Changed"
    assert isinstance(recipe.steps, tuple)
    assert isinstance(recipe.ingredients, tuple)
    with pytest.raises(AttributeError):
        recipe.steps.append("Eat")
    assert recipe.steps == ("Cook",)


def test_dict_valued_fields_are_flattened():
    recipe = normalize([{
        "title": "A",
        "ingredients": {"rice": "1 cup", "dal": "1/2 cup"},
        "steps": [{"item": "x"}],
    }])[0]

    assert recipe.ingredients == ("rice 1 cup", "dal 1/2 cup")
    assert recipe.steps == ("x",)


def test_steps_mapping_keeps_values_in_order():
    recipe = normalize([{
        "title": "Jeera rice",
        "steps": {"1": "Wash rice", "2": "Temper jeera", "3": "Cook together"},
    }])[0]

    assert recipe.steps == ("Wash rice", "Temper jeera", "Cook together")


def test_unknown_ingredient_shape_uses_first_text_value():
    recipe = normalize([{
        "title": "Curd rice",
        "ingredients": [{"id": 3, "label": "curd"}, {"amount": "1 cup", "item": "rice"}],
        "steps": ["Mix"],
    }])[0]

    assert recipe.ingredients == ("curd", "1 cup")
