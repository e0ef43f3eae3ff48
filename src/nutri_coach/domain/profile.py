"""Profile domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from nutri_coach.domain.meals import FoodItem, QualityScore


class Gender(str, Enum):
    """Biological sex used by the BMR formula."""

    MALE = "Male"
    FEMALE = "Female"


class ActivityLevel(str, Enum):
    """Self-reported activity level."""

    SEDENTARY = "Sedentary"
    LIGHTLY_ACTIVE = "Lightly Active"
    MODERATELY_ACTIVE = "Moderately Active"
    VERY_ACTIVE = "Very Active"
    ATHLETE = "Athlete"


class GoalType(str, Enum):
    """Body composition goal."""

    LOSE_WEIGHT = "Lose Weight"
    MAINTAIN = "Maintain"
    GAIN_MUSCLE = "Gain Muscle"


class DietaryPreference(str, Enum):
    """Dietary preference passed to the coach."""

    NON_VEGETARIAN = "Non-Vegetarian"
    VEGETARIAN = "Vegetarian"


class Theme(str, Enum):
    """Display theme."""

    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class MacroTargets:
    """Daily calorie and macro gram targets."""

    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int


@dataclass(frozen=True)
class BadgeDefinition:
    """Static catalog entry for an achievement."""

    id: str
    name: str
    description: str
    icon: str


@dataclass(frozen=True)
class Badge:
    """An owned badge with its unlock time."""

    definition: BadgeDefinition
    unlocked_at: datetime

    @property
    def id(self) -> str:
        return self.definition.id


@dataclass(frozen=True)
class MealTemplate:
    """Reusable snapshot of food items."""

    id: UUID
    name: str
    items: list[FoodItem]
    total_calories: float
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    quality_score: QualityScore


@dataclass(frozen=True)
class UserProfile:
    """User biometrics, derived targets and gamification state."""

    id: UUID
    name: str
    age: int
    gender: Gender
    height_cm: float
    weight_kg: float
    target_weight_kg: float
    activity_level: ActivityLevel
    goal: GoalType
    dietary_preference: DietaryPreference
    bmr: float
    tdee: int
    macro_targets: MacroTargets
    badges: list[Badge] = field(default_factory=list)
    saved_templates: list[MealTemplate] = field(default_factory=list)
    theme: Theme = Theme.LIGHT
    timezone: str = "UTC"
