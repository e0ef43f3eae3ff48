"""Models for coach (LLM) results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AnalyzedFoodItem(BaseModel):
    """Single food item estimated by the coach."""

    name: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    portion: str
    confidence: Literal["High", "Medium", "Low"]


class AnalyzedQualityScore(BaseModel):
    """Meal quality rating returned with an analysis."""

    score: float = Field(ge=0.0, le=100.0)
    explanation: str
    suggestions: list[str]


class MealAnalysis(BaseModel):
    """Structured output for meal photo analysis."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[AnalyzedFoodItem]
    quality_score: AnalyzedQualityScore = Field(alias="qualityScore")


class FoodSuggestions(BaseModel):
    """Food names that complete a partial search query."""

    suggestions: list[str]


class RecipeMacros(BaseModel):
    """Per-serving macros of a recipe."""

    protein: float
    carbs: float
    fat: float


class Recipe(BaseModel):
    """Generated recipe."""

    name: str
    calories: float
    ingredients: list[str]
    instructions: list[str]
    macros: RecipeMacros


class ChatMessage(BaseModel):
    """One turn of a coach conversation."""

    role: Literal["user", "assistant"]
    content: str
