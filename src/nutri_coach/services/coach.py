"""Coach service: meal analysis, food lookup and suggestions, recipes and chat."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from nutri_coach.domain.coach import (
    AnalyzedFoodItem,
    ChatMessage,
    FoodSuggestions,
    MealAnalysis,
    Recipe,
)
from nutri_coach.domain.meals import Confidence, FoodItem, QualityScore
from nutri_coach.domain.profile import UserProfile

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

_FOOD_ITEM_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "portion": {"type": "string"},
        "confidence": {"type": "string", "enum": ["High", "Medium", "Low"]},
    },
    "required": [
        "name",
        "calories",
        "protein",
        "carbs",
        "fat",
        "portion",
        "confidence",
    ],
    "additionalProperties": False,
}

MEAL_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "items": {"type": "array", "items": _FOOD_ITEM_SCHEMA},
        "qualityScore": {
            "type": "object",
            "properties": {
                "score": {"type": "number", "minimum": 0, "maximum": 100},
                "explanation": {"type": "string"},
                "suggestions": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["score", "explanation", "suggestions"],
            "additionalProperties": False,
        },
    },
    "required": ["items", "qualityScore"],
    "additionalProperties": False,
}

FOOD_LOOKUP_SCHEMA: dict[str, object] = _FOOD_ITEM_SCHEMA

FOOD_SUGGESTIONS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"suggestions": {"type": "array", "items": {"type": "string"}}},
    "required": ["suggestions"],
    "additionalProperties": False,
}

MAX_FOOD_SUGGESTIONS = 5

RECIPE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": {"type": "number"},
        "ingredients": {"type": "array", "items": {"type": "string"}},
        "instructions": {"type": "array", "items": {"type": "string"}},
        "macros": {
            "type": "object",
            "properties": {
                "protein": {"type": "number"},
                "carbs": {"type": "number"},
                "fat": {"type": "number"},
            },
            "required": ["protein", "carbs", "fat"],
            "additionalProperties": False,
        },
    },
    "required": ["name", "calories", "ingredients", "instructions", "macros"],
    "additionalProperties": False,
}

_ANALYSIS_PROMPT = (
    "Analyze this food image and identify every food item present. "
    "Estimate the portion, calories, protein (g), carbs (g) and fat (g) of each "
    "item. Rate the meal from 0-100 for whole-food ingredients, nutrient density "
    "and lack of processing, explain the score briefly and give 2-3 short "
    "suggestions to improve it."
)


class CoachClient(Protocol):
    """Interface for LLM calls used by the coach."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return structured output matching the schema."""

    async def chat(
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        """Return the assistant reply text."""


@dataclass
class CoachService:
    """Service that prepares coach prompts and validates results."""

    client: CoachClient
    model: str
    reasoning_effort: str | None
    store: bool
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def analyze_image(self, image_bytes: bytes) -> MealAnalysis:
        """Estimate food items and a quality score from a meal photo."""
        data_url = _to_data_url(image_bytes)
        raw = await self._call_with_retry(
            lambda: self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=_ANALYSIS_PROMPT,
                schema=MEAL_ANALYSIS_SCHEMA,
                schema_name="meal_analysis",
                image_data_url=data_url,
            ),
            action="analyze_image",
        )
        return MealAnalysis.model_validate(raw)

    async def lookup_food(self, food_name: str) -> FoodItem:
        """Estimate nutrition for a standard serving of a named food."""
        prompt = (
            f'Estimate nutrition for a standard serving of: "{food_name}". '
            "Return a specific item name, calories, protein (g), carbs (g), "
            "fat (g) and a portion description."
        )
        raw = await self._call_with_retry(
            lambda: self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=FOOD_LOOKUP_SCHEMA,
                schema_name="food_lookup",
            ),
            action="lookup_food",
        )
        return to_food_item(AnalyzedFoodItem.model_validate(raw))

    async def suggest_foods(self, query: str) -> list[str]:
        """Return up to five food names matching a partial query.

        Failures yield an empty list.
        """
        prompt = (
            f"List {MAX_FOOD_SUGGESTIONS} common food item names that match or "
            f'complete the search query: "{query}". Keep the names concise.'
        )
        try:
            raw = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=FOOD_SUGGESTIONS_SCHEMA,
                schema_name="food_suggestions",
            )
            result = FoodSuggestions.model_validate(raw)
        except Exception as exc:
            _logger.warning("Coach suggest_foods failed: %s", exc)
            return []
        names = [name.strip() for name in result.suggestions if name.strip()]
        return names[:MAX_FOOD_SUGGESTIONS]

    async def generate_recipe(self, ingredients: str, profile: UserProfile) -> Recipe:
        """Create a recipe from ingredients suited to the user's diet and goal."""
        prompt = (
            f"Create a healthy recipe using these ingredients: {ingredients}. "
            f"The user is {profile.dietary_preference.value}. "
            f"Their goal is {profile.goal.value}. "
            "Provide the recipe name, estimated calories per serving, "
            "ingredient list, instructions and macro nutrients."
        )
        raw = await self._call_with_retry(
            lambda: self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=RECIPE_SCHEMA,
                schema_name="recipe",
            ),
            action="generate_recipe",
        )
        return Recipe.model_validate(raw)

    async def reply(
        self, profile: UserProfile, history: list[ChatMessage], message: str
    ) -> str:
        """Answer a chat message given the previous turns."""
        messages = [turn.model_dump() for turn in history]
        messages.append({"role": "user", "content": message})
        return await self.client.chat(
            model=self.model,
            store=self.store,
            instructions=coach_instructions(profile),
            messages=messages,
        )

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Coach %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def coach_instructions(profile: UserProfile) -> str:
    """Build the system instruction describing the user to the coach."""
    return (
        "You are NutriAI, a friendly and knowledgeable nutrition coach.\n"
        "User context:\n"
        f"- Name: {profile.name}\n"
        f"- Age: {profile.age}\n"
        f"- Goal: {profile.goal.value} ({profile.target_weight_kg:g}kg target)\n"
        f"- Dietary preference: {profile.dietary_preference.value}\n"
        f"- Daily calorie target: {profile.macro_targets.calories} kcal\n"
        "Answer questions about food choices, suggest healthier alternatives "
        "that fit the user's diet, keep them motivated towards their goal, "
        "explain the meal quality score (whole foods score high, processed "
        "foods low) and write recipes on request. Be concise, encouraging "
        "and honest, and format lists clearly."
    )


def to_food_item(item: AnalyzedFoodItem) -> FoodItem:
    """Convert an analyzed item into a domain food item."""
    return FoodItem(
        name=item.name,
        calories=item.calories,
        protein_g=item.protein,
        carbs_g=item.carbs,
        fat_g=item.fat,
        portion=item.portion,
        confidence=Confidence(item.confidence),
    )


def to_quality_score(analysis: MealAnalysis) -> QualityScore:
    """Convert an analysis quality rating into a domain quality score."""
    return QualityScore(
        score=analysis.quality_score.score,
        explanation=analysis.quality_score.explanation,
        suggestions=list(analysis.quality_score.suggestions),
    )


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
