"""JSON-compatible encoding for profiles and logs."""

from datetime import UTC, date, datetime
from uuid import UUID

from nutri_coach.domain.meals import (
    Confidence,
    DailyLog,
    FoodItem,
    Meal,
    MealType,
    QualityScore,
)
from nutri_coach.domain.models import UserData
from nutri_coach.domain.profile import (
    ActivityLevel,
    Badge,
    BadgeDefinition,
    DietaryPreference,
    Gender,
    GoalType,
    MacroTargets,
    MealTemplate,
    Theme,
    UserProfile,
)


def encode_user_data(data: UserData) -> dict[str, object]:
    """Encode a user snapshot as a JSON-compatible dict."""
    return {
        "profile": encode_profile(data.profile) if data.profile else None,
        "logs": encode_logs(data.logs),
    }


def decode_user_data(payload: dict[str, object] | None) -> UserData:
    """Decode a stored snapshot; missing payloads yield an empty snapshot."""
    if not payload:
        return UserData()
    raw_profile = payload.get("profile")
    raw_logs = payload.get("logs") or []
    return UserData(
        profile=decode_profile(raw_profile) if isinstance(raw_profile, dict) else None,
        logs=decode_logs(raw_logs if isinstance(raw_logs, list) else []),
    )


def encode_profile(profile: UserProfile) -> dict[str, object]:
    """Encode a profile."""
    return {
        "id": str(profile.id),
        "name": profile.name,
        "age": profile.age,
        "gender": profile.gender.value,
        "height_cm": profile.height_cm,
        "weight_kg": profile.weight_kg,
        "target_weight_kg": profile.target_weight_kg,
        "activity_level": profile.activity_level.value,
        "goal": profile.goal.value,
        "dietary_preference": profile.dietary_preference.value,
        "bmr": profile.bmr,
        "tdee": profile.tdee,
        "macro_targets": {
            "calories": profile.macro_targets.calories,
            "protein_g": profile.macro_targets.protein_g,
            "carbs_g": profile.macro_targets.carbs_g,
            "fat_g": profile.macro_targets.fat_g,
        },
        "badges": [encode_badge(badge) for badge in profile.badges],
        "saved_templates": [
            _encode_template(template) for template in profile.saved_templates
        ],
        "theme": profile.theme.value,
        "timezone": profile.timezone,
    }


def decode_profile(payload: dict[str, object]) -> UserProfile:
    """Decode a profile."""
    targets = payload.get("macro_targets") or {}
    return UserProfile(
        id=UUID(str(payload["id"])),
        name=str(payload.get("name", "")),
        age=int(payload["age"]),
        gender=Gender(payload["gender"]),
        height_cm=float(payload["height_cm"]),
        weight_kg=float(payload["weight_kg"]),
        target_weight_kg=float(payload.get("target_weight_kg", payload["weight_kg"])),
        activity_level=ActivityLevel(payload["activity_level"]),
        goal=GoalType(payload["goal"]),
        dietary_preference=DietaryPreference(
            payload.get("dietary_preference", DietaryPreference.NON_VEGETARIAN.value)
        ),
        bmr=float(payload.get("bmr", 0.0)),
        tdee=int(payload.get("tdee", 0)),
        macro_targets=MacroTargets(
            calories=int(targets.get("calories", 0)),
            protein_g=int(targets.get("protein_g", 0)),
            carbs_g=int(targets.get("carbs_g", 0)),
            fat_g=int(targets.get("fat_g", 0)),
        ),
        badges=[_decode_badge(row) for row in payload.get("badges") or []],
        saved_templates=[
            _decode_template(row) for row in payload.get("saved_templates") or []
        ],
        theme=Theme(payload.get("theme", Theme.LIGHT.value)),
        timezone=str(payload.get("timezone") or "UTC"),
    )


def encode_logs(logs: list[DailyLog]) -> list[dict[str, object]]:
    """Encode day logs preserving their order."""
    return [encode_log(log) for log in logs]


def decode_logs(rows: list[dict[str, object]]) -> list[DailyLog]:
    """Decode day logs preserving their stored order."""
    return [decode_log(row) for row in rows]


def encode_log(log: DailyLog) -> dict[str, object]:
    """Encode a single day log."""
    return {
        "date": log.day.isoformat(),
        "meals": [encode_meal(meal) for meal in log.meals],
        "weight_kg": log.weight_kg,
    }


def decode_log(row: dict[str, object]) -> DailyLog:
    """Decode a single day log."""
    weight = row.get("weight_kg")
    return DailyLog(
        day=date.fromisoformat(str(row["date"])),
        meals=[decode_meal(meal) for meal in row.get("meals") or []],
        weight_kg=float(weight) if isinstance(weight, int | float) else None,
    )


def encode_meal(meal: Meal) -> dict[str, object]:
    """Encode a meal."""
    return {
        "id": str(meal.id),
        "created_at": meal.created_at.isoformat(),
        "meal_type": meal.meal_type.value,
        "items": [encode_food_item(item) for item in meal.items],
        "total_calories": meal.total_calories,
        "total_protein_g": meal.total_protein_g,
        "total_carbs_g": meal.total_carbs_g,
        "total_fat_g": meal.total_fat_g,
        "quality_score": _encode_quality(meal.quality_score),
        "image_url": meal.image_url,
    }


def decode_meal(row: dict[str, object]) -> Meal:
    """Decode a meal."""
    return Meal(
        id=UUID(str(row["id"])),
        created_at=parse_datetime(row["created_at"]),
        meal_type=MealType(row["meal_type"]),
        items=[decode_food_item(item) for item in row.get("items") or []],
        total_calories=float(row.get("total_calories", 0.0)),
        total_protein_g=float(row.get("total_protein_g", 0.0)),
        total_carbs_g=float(row.get("total_carbs_g", 0.0)),
        total_fat_g=float(row.get("total_fat_g", 0.0)),
        quality_score=_decode_quality(row.get("quality_score") or {}),
        image_url=row.get("image_url"),
    )


def encode_food_item(item: FoodItem) -> dict[str, object]:
    """Encode a food item."""
    return {
        "name": item.name,
        "calories": item.calories,
        "protein_g": item.protein_g,
        "carbs_g": item.carbs_g,
        "fat_g": item.fat_g,
        "portion": item.portion,
        "confidence": item.confidence.value,
    }


def decode_food_item(row: dict[str, object]) -> FoodItem:
    """Decode a food item."""
    return FoodItem(
        name=str(row.get("name", "")),
        calories=float(row.get("calories", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
        portion=str(row.get("portion", "")),
        confidence=Confidence(row.get("confidence", Confidence.MEDIUM.value)),
    )


def _encode_quality(quality: QualityScore) -> dict[str, object]:
    return {
        "score": quality.score,
        "explanation": quality.explanation,
        "suggestions": list(quality.suggestions),
    }


def _decode_quality(row: dict[str, object]) -> QualityScore:
    return QualityScore(
        score=float(row.get("score", 0.0)),
        explanation=str(row.get("explanation", "")),
        suggestions=[str(value) for value in row.get("suggestions") or []],
    )


def encode_badge(badge: Badge) -> dict[str, object]:
    """Encode an owned badge."""
    return {
        "id": badge.definition.id,
        "name": badge.definition.name,
        "description": badge.definition.description,
        "icon": badge.definition.icon,
        "unlocked_at": badge.unlocked_at.isoformat(),
    }


def _decode_badge(row: dict[str, object]) -> Badge:
    return Badge(
        definition=BadgeDefinition(
            id=str(row["id"]),
            name=str(row.get("name", "")),
            description=str(row.get("description", "")),
            icon=str(row.get("icon", "")),
        ),
        unlocked_at=parse_datetime(row["unlocked_at"]),
    )


def _encode_template(template: MealTemplate) -> dict[str, object]:
    return {
        "id": str(template.id),
        "name": template.name,
        "items": [encode_food_item(item) for item in template.items],
        "total_calories": template.total_calories,
        "total_protein_g": template.total_protein_g,
        "total_carbs_g": template.total_carbs_g,
        "total_fat_g": template.total_fat_g,
        "quality_score": _encode_quality(template.quality_score),
    }


def _decode_template(row: dict[str, object]) -> MealTemplate:
    return MealTemplate(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        items=[decode_food_item(item) for item in row.get("items") or []],
        total_calories=float(row.get("total_calories", 0.0)),
        total_protein_g=float(row.get("total_protein_g", 0.0)),
        total_carbs_g=float(row.get("total_carbs_g", 0.0)),
        total_fat_g=float(row.get("total_fat_g", 0.0)),
        quality_score=_decode_quality(row.get("quality_score") or {}),
    )


def parse_datetime(value: object) -> datetime:
    """Parse ISO timestamps, treating naive values as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
