"""Pydantic models for API request payloads."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from nutri_coach.domain.coach import ChatMessage
from nutri_coach.domain.meals import Confidence, FoodItem, MealType, QualityScore
from nutri_coach.domain.profile import (
    ActivityLevel,
    DietaryPreference,
    Gender,
    GoalType,
)
from nutri_coach.services.nutrition import ProfileInput
from nutri_coach.services.users import MAX_PASSWORD_BYTES


class CredentialsPayload(BaseModel):
    """Username and password for register/login."""

    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=8)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class FoodItemPayload(BaseModel):
    """Food item as submitted by the client."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    portion: str = ""
    confidence: Confidence = Confidence.MEDIUM

    def to_domain(self) -> FoodItem:
        """Convert to a domain food item."""
        return FoodItem(
            name=self.name,
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            portion=self.portion,
            confidence=self.confidence,
        )


class QualityScorePayload(BaseModel):
    """Meal quality score as submitted by the client."""

    score: float = Field(ge=0, le=100)
    explanation: str = ""
    suggestions: list[str] = Field(default_factory=list)

    def to_domain(self) -> QualityScore:
        """Convert to a domain quality score."""
        return QualityScore(
            score=self.score,
            explanation=self.explanation,
            suggestions=list(self.suggestions),
        )


class MealPayload(BaseModel):
    """Meal-save request."""

    meal_type: MealType | None = None
    items: list[FoodItemPayload] = Field(min_length=1)
    quality_score: QualityScorePayload
    image_url: str | None = None


class TemplatePayload(BaseModel):
    """New meal template."""

    name: str = Field(min_length=1, max_length=80)
    items: list[FoodItemPayload] = Field(min_length=1)
    quality_score: QualityScorePayload


class TemplateRenamePayload(BaseModel):
    """Template rename request."""

    name: str = Field(min_length=1, max_length=80)


class OnboardingPayload(BaseModel):
    """Onboarding answers."""

    name: str = Field(min_length=1)
    age: int = Field(gt=0, lt=130)
    gender: Gender
    height_cm: float = Field(gt=0)
    weight_kg: float = Field(gt=0)
    target_weight_kg: float = Field(gt=0)
    activity_level: ActivityLevel
    goal: GoalType
    dietary_preference: DietaryPreference = DietaryPreference.NON_VEGETARIAN
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        return _validate_timezone(value)

    def to_input(self) -> ProfileInput:
        """Convert to calculator input."""
        return ProfileInput(
            name=self.name,
            age=self.age,
            gender=self.gender,
            height_cm=self.height_cm,
            weight_kg=self.weight_kg,
            target_weight_kg=self.target_weight_kg,
            activity_level=self.activity_level,
            goal=self.goal,
            dietary_preference=self.dietary_preference,
        )


class ProfileUpdatePayload(BaseModel):
    """Partial profile edit; omitted fields keep their values."""

    name: str | None = Field(default=None, min_length=1)
    age: int | None = Field(default=None, gt=0, lt=130)
    gender: Gender | None = None
    height_cm: float | None = Field(default=None, gt=0)
    weight_kg: float | None = Field(default=None, gt=0)
    target_weight_kg: float | None = Field(default=None, gt=0)
    activity_level: ActivityLevel | None = None
    goal: GoalType | None = None
    dietary_preference: DietaryPreference | None = None
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        return _validate_timezone(value)


class WeightPayload(BaseModel):
    """Body weight entry for today."""

    weight_kg: float = Field(gt=0)


class FoodLookupPayload(BaseModel):
    """Text food lookup."""

    food_name: str = Field(min_length=1)


class FoodSuggestionPayload(BaseModel):
    """Partial food name typed during manual entry."""

    query: str = Field(min_length=2, max_length=100)


class RecipePayload(BaseModel):
    """Recipe generation request."""

    ingredients: str = Field(min_length=1)


class ChatPayload(BaseModel):
    """Coach chat turn with previous history."""

    message: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)


def _validate_timezone(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


class ImagePayload(BaseModel):
    """Meal photo as base64 or a data URL."""

    image: str = Field(min_length=1)
