from __future__ import annotations

import re
from typing import Any, Mapping

from recipe_box.app.domain.models import EXTERNAL_ID_PREFIX, ExternalRecipe

MAX_INGREDIENT_FIELDS = 20
DESCRIPTION_MAX_CHARS = 100
MIN_SENTENCE_CHARS = 10
DEFAULT_COOKING_TIME = 30

DEFAULT_TITLE = "Unknown Recipe"
DEFAULT_DESCRIPTION = "Delicious recipe from TheMealDB"
DEFAULT_CATEGORY = "General"
DEFAULT_AREA = "International"
PLACEHOLDER_STEP = "Follow the instructions in the description"
SOURCE_NAME = "TheMealDB"

STEP_BREAK_PATTERN = re.compile(r"\d+\.|\n\n|\r\n\r\n")


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "null":
        return None
    return text


def extract_ingredients(meal: Mapping[str, Any]) -> list[str]:
    ingredients: list[str] = []
    for index in range(1, MAX_INGREDIENT_FIELDS + 1):
        ingredient = _clean(meal.get(f"strIngredient{index}"))
        if not ingredient:
            continue
        measure = _clean(meal.get(f"strMeasure{index}"))
        ingredients.append(f"{measure} {ingredient}" if measure else ingredient)
    return ingredients


def split_steps(instructions: str | None) -> list[str]:
    """
    Turn a free-text instructions blob into ordered steps.

    Explicit numbering or blank-line paragraphs win when they produce more than
    one segment; otherwise sentences longer than MIN_SENTENCE_CHARS are used.
    """
    if not instructions or not instructions.strip():
        return [PLACEHOLDER_STEP]

    segments = [part.strip() for part in STEP_BREAK_PATTERN.split(instructions) if part.strip()]
    if len(segments) > 1:
        return segments

    sentences = [
        f"{part.strip()}."
        for part in instructions.split(".")
        if part.strip() and len(part.strip()) > MIN_SENTENCE_CHARS
    ]
    return sentences or [PLACEHOLDER_STEP]


def build_description(instructions: str | None) -> str:
    if not instructions or not instructions.strip():
        return DEFAULT_DESCRIPTION
    return instructions[:DESCRIPTION_MAX_CHARS]


def external_recipe_id(native_id: object) -> str:
    return f"{EXTERNAL_ID_PREFIX}{_clean(native_id) or 'unknown'}"


def normalize_meal(payload: object) -> ExternalRecipe:
    """Normalize one TheMealDB meal. Never raises; missing fields get defaults."""
    meal: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    instructions = meal.get("strInstructions")
    instructions = instructions if isinstance(instructions, str) else None
    tags = _clean(meal.get("strTags"))

    return ExternalRecipe(
        id=external_recipe_id(meal.get("idMeal")),
        title=_clean(meal.get("strMeal")) or DEFAULT_TITLE,
        description=build_description(instructions),
        image_url=_clean(meal.get("strMealThumb")) or "",
        ingredients=extract_ingredients(meal),
        steps=split_steps(instructions),
        cooking_time=DEFAULT_COOKING_TIME,
        category=_clean(meal.get("strCategory")) or DEFAULT_CATEGORY,
        area=_clean(meal.get("strArea")) or DEFAULT_AREA,
        source=SOURCE_NAME,
        external_id=_clean(meal.get("idMeal")),
        youtube_url=_clean(meal.get("strYoutube")),
        source_url=_clean(meal.get("strSource")),
        tags=[tag.strip() for tag in tags.split(",") if tag.strip()] if tags else [],
    )
