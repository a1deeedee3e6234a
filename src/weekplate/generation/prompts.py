"""Prompt templates for the generative backend."""

from __future__ import annotations

from typing import Iterable

from weekplate.models.recipe import PlanPreferences
from weekplate.models.schedule import Slot

PREFERENCES_BLOCK = (
    "Dietary Preferences: {dietary}\n"
    "Allergies: {allergies}\n"
    "Specific Requirements: {requirements}"
)

PLAN_PROMPT = (
    "Generate a 7-day dinner meal plan.\n"
    "{preferences}{facilities}\n"
    "Provide the meal plan as a JSON array with one object per day, Monday to Sunday. "
    "Each object has a 'day' property (e.g. \"Monday\") and a 'meals' object containing only "
    "a 'dinner' string. Example:\n"
    '[{{"day": "Monday", "meals": {{"dinner": "Salmon with roasted vegetables"}}}}]'
)

PLAN_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "day": {"type": "STRING"},
            "meals": {
                "type": "OBJECT",
                "properties": {"dinner": {"type": "STRING"}},
                "required": ["dinner"],
            },
        },
        "required": ["day", "meals"],
    },
}

REGENERATE_PROMPT = (
    "Generate a dinner meal for {day} for {servings} people.\n"
    "{preferences}{facilities}\n"
    "Provide only the dinner meal as a string. For example: \"Chicken Stir-fry with Brown Rice\""
)

DETAILS_PROMPT = (
    "Provide the ingredients list, cooking instructions, and an estimated calorie count per "
    "serving for '{title}' for {servings} people.\n"
    "Format as a JSON object with three keys:\n"
    "'ingredients' (an array of strings, one ingredient each, e.g. [\"2 chicken breasts\", \"1 cup rice\"]),\n"
    "'instructions' (a single string containing all cooking steps, clearly numbered),\n"
    "'calories' (a string with the estimated calories per serving, e.g. \"450 kcal\")."
)

CUSTOMIZE_PROMPT = (
    "Update the recipe for '{title}' for {servings} people{changes}.\n"
    "Provide the updated ingredients list, cooking instructions, and an estimated calorie count "
    "per serving. Format as a JSON object with the keys 'ingredients' (array of strings), "
    "'instructions' (string), 'calories' (string) and 'newMealName' (the updated dinner name, "
    "e.g. \"Tofu Stir-fry\" if chicken was replaced; keep the original name if it does not "
    "change significantly)."
)

DETAILS_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "ingredients": {"type": "ARRAY", "items": {"type": "STRING"}},
        "instructions": {"type": "STRING"},
        "calories": {"type": "STRING"},
    },
    "required": ["ingredients", "instructions", "calories"],
}

CUSTOMIZE_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        **DETAILS_RESPONSE_SCHEMA["properties"],
        "newMealName": {"type": "STRING"},
    },
    "required": ["ingredients", "instructions", "calories", "newMealName"],
}

SHOPPING_LIST_PROMPT = (
    "Based on the following dinner plan (including number of people per day) and user "
    "preferences, generate a simplified shopping list.\n"
    "Dinner Plan:\n{dinners}\n"
    "{preferences}\n\n"
    "Provide the shopping list as plain text formatted using markdown. "
    "Each item MUST include a clear quantity and unit. Example format:\n"
    "## Produce\n"
    "- 1 head broccoli\n"
    "- 2 large bell peppers\n"
    "## Meat & Seafood\n"
    "- 1 lb chicken breast"
)

IMAGE_PROMPT = (
    "A delicious, high-quality, professional food photograph of {title}, presented beautifully "
    "on a plate, suitable for a recipe card. Focus on the food, with a clean background."
)


def render_preferences(prefs: PlanPreferences) -> str:
    return PREFERENCES_BLOCK.format(
        dietary=prefs.dietary_preferences.strip() or "None",
        allergies=prefs.allergies.strip() or "None",
        requirements=prefs.specific_requirements.strip() or "None",
    )


def render_facilities(prefs: PlanPreferences, *, single: bool = False) -> str:
    if not prefs.limited_facilities or not prefs.facilities:
        return ""
    subject = "a meal" if single else "meals"
    return (
        f"\nCooking Facilities Available: {', '.join(prefs.facilities)}. "
        f"Please suggest {subject} that can be prepared using ONLY these facilities."
    )


def render_dinners(slots: Iterable[Slot]) -> str:
    return "\n".join(f"{slot.label}: {slot.title} for {slot.servings} people" for slot in slots)


__all__ = [
    "CUSTOMIZE_PROMPT",
    "CUSTOMIZE_RESPONSE_SCHEMA",
    "DETAILS_PROMPT",
    "DETAILS_RESPONSE_SCHEMA",
    "IMAGE_PROMPT",
    "PLAN_PROMPT",
    "PLAN_RESPONSE_SCHEMA",
    "REGENERATE_PROMPT",
    "SHOPPING_LIST_PROMPT",
    "render_dinners",
    "render_facilities",
    "render_preferences",
]
