"""Domain models for meal logging."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID


class MealType(str, Enum):
    """Meal slot tag."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


class Confidence(str, Enum):
    """Estimate confidence reported by the analyzer."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class FoodItem:
    """A single food with its estimated macros."""

    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    portion: str
    confidence: Confidence = Confidence.MEDIUM


@dataclass(frozen=True)
class QualityScore:
    """0-100 rating of a meal with explanation and suggestions."""

    score: float
    explanation: str = ""
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Meal:
    """A logged meal with totals summed over its items."""

    id: UUID
    created_at: datetime
    meal_type: MealType
    items: list[FoodItem]
    total_calories: float
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    quality_score: QualityScore
    image_url: str | None = None


@dataclass(frozen=True)
class DailyLog:
    """Meals logged on one calendar day in the user's timezone."""

    day: date
    meals: list[Meal] = field(default_factory=list)
    weight_kg: float | None = None
