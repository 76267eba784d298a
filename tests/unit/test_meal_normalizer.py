from __future__ import annotations

from recipe_box.services.meal_normalizer import (
    DEFAULT_DESCRIPTION,
    PLACEHOLDER_STEP,
    build_description,
    extract_ingredients,
    normalize_meal,
    split_steps,
)


def _meal(**overrides: object) -> dict[str, object]:
    meal: dict[str, object] = {
        "idMeal": "52772",
        "strMeal": "Teriyaki Chicken Casserole",
        "strCategory": "Chicken",
        "strArea": "Japanese",
        "strInstructions": "1. Preheat oven to 350F. 2. Combine soy sauce and sugar. 3. Bake.",
        "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
        "strTags": "Meat,Casserole",
        "strYoutube": "https://www.youtube.com/watch?v=4aZr5hZXP_s",
        "strSource": None,
        "strIngredient1": "soy sauce",
        "strMeasure1": "3/4 cup",
        "strIngredient2": "water",
        "strMeasure2": "",
        "strIngredient3": "null",
        "strMeasure3": "1 tbsp",
        "strIngredient4": "",
    }
    meal.update(overrides)
    return meal


class TestExtractIngredients:
    def test_measure_prefix_and_skips(self) -> None:
        assert extract_ingredients(_meal()) == ["3/4 cup soy sauce", "water"]

    def test_reads_all_twenty_slots(self) -> None:
        meal = {f"strIngredient{i}": f"item{i}" for i in range(1, 22)}
        ingredients = extract_ingredients(meal)
        assert len(ingredients) == 20
        assert ingredients[-1] == "item20"


class TestSplitSteps:
    def test_numbered(self) -> None:
        steps = split_steps("1. Preheat oven. 2. Mix. 3. Bake.")
        assert steps == ["Preheat oven.", "Mix.", "Bake."]

    def test_blank_line_paragraphs(self) -> None:
        assert split_steps("Chop onions\n\nFry them") == ["Chop onions", "Fry them"]

    def test_sentence_fallback_drops_short_fragments(self) -> None:
        steps = split_steps("Mix the flour and sugar. Stir. Bake for twenty minutes")
        assert steps == ["Mix the flour and sugar.", "Bake for twenty minutes."]

    def test_nothing_usable(self) -> None:
        assert split_steps("Stir. Eat.") == [PLACEHOLDER_STEP]
        assert split_steps(None) == [PLACEHOLDER_STEP]
        assert split_steps("   ") == [PLACEHOLDER_STEP]


class TestBuildDescription:
    def test_truncates_to_100_chars(self) -> None:
        assert build_description("x" * 250) == "x" * 100

    def test_missing(self) -> None:
        assert build_description(None) == DEFAULT_DESCRIPTION
        assert build_description("") == DEFAULT_DESCRIPTION


class TestNormalizeMeal:
    def test_full_payload(self) -> None:
        recipe = normalize_meal(_meal())
        assert recipe.id == "api_52772"
        assert recipe.external_id == "52772"
        assert recipe.title == "Teriyaki Chicken Casserole"
        assert recipe.category == "Chicken"
        assert recipe.area == "Japanese"
        assert recipe.cooking_time == 30
        assert recipe.source == "TheMealDB"
        assert recipe.tags == ["Meat", "Casserole"]
        assert recipe.source_url is None
        assert recipe.is_external is True
        assert len(recipe.steps) == 3

    def test_without_instructions_degrades(self) -> None:
        recipe = normalize_meal(_meal(strInstructions=None))
        assert recipe.description == DEFAULT_DESCRIPTION
        assert recipe.steps == [PLACEHOLDER_STEP]
        assert recipe.ingredients == ["3/4 cup soy sauce", "water"]

    def test_empty_payload_gets_defaults(self) -> None:
        recipe = normalize_meal({})
        assert recipe.id == "api_unknown"
        assert recipe.title == "Unknown Recipe"
        assert recipe.category == "General"
        assert recipe.area == "International"
        assert recipe.tags == []

    def test_non_mapping_never_raises(self) -> None:
        assert normalize_meal(None).id == "api_unknown"
        assert normalize_meal(["not", "a", "meal"]).title == "Unknown Recipe"
