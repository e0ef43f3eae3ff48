"""BMR, TDEE and macro target calculations."""

import math
from dataclasses import dataclass, replace
from uuid import UUID

from nutri_coach.domain.profile import (
    ActivityLevel,
    DietaryPreference,
    Gender,
    GoalType,
    MacroTargets,
    UserProfile,
)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


@dataclass(frozen=True)
class _GoalPlan:
    calorie_factor: float
    protein_ratio: float
    carbs_ratio: float
    fat_ratio: float


_GOAL_PLANS: dict[GoalType, _GoalPlan] = {
    GoalType.LOSE_WEIGHT: _GoalPlan(0.80, 0.35, 0.35, 0.30),
    GoalType.GAIN_MUSCLE: _GoalPlan(1.10, 0.30, 0.45, 0.25),
    GoalType.MAINTAIN: _GoalPlan(1.0, 0.25, 0.45, 0.30),
}

# Fields that feed the calculator; editing any of them refreshes targets.
BIOMETRIC_FIELDS = frozenset(
    {"weight_kg", "height_cm", "age", "gender", "activity_level", "goal"}
)


@dataclass(frozen=True)
class ProfileInput:
    """Onboarding answers."""

    name: str
    age: int
    gender: Gender
    height_cm: float
    weight_kg: float
    target_weight_kg: float
    activity_level: ActivityLevel
    goal: GoalType
    dietary_preference: DietaryPreference


def compute_bmr(
    weight_kg: float, height_cm: float, age: float, gender: Gender
) -> float:
    """Return resting kcal/day via Mifflin-St Jeor, unrounded."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return base + 5
    return base - 161


def compute_tdee(bmr: float, activity_level: ActivityLevel) -> int:
    """Scale BMR by the activity multiplier and round to whole kcal."""
    return _round_half_up(bmr * ACTIVITY_MULTIPLIERS[activity_level])


def compute_macro_targets(tdee: int, goal: GoalType) -> MacroTargets:
    """Return calorie and gram targets for a goal.

    Unknown goals fall back to the maintenance plan. Gram values are
    rounded independently, so their energy need not add up exactly to
    the calorie target.
    """
    plan = _GOAL_PLANS.get(goal, _GOAL_PLANS[GoalType.MAINTAIN])
    if goal in (GoalType.LOSE_WEIGHT, GoalType.GAIN_MUSCLE):
        calories = _round_half_up(tdee * plan.calorie_factor)
    else:
        calories = tdee
    return MacroTargets(
        calories=calories,
        protein_g=_round_half_up(calories * plan.protein_ratio / KCAL_PER_G_PROTEIN),
        carbs_g=_round_half_up(calories * plan.carbs_ratio / KCAL_PER_G_CARBS),
        fat_g=_round_half_up(calories * plan.fat_ratio / KCAL_PER_G_FAT),
    )


def build_profile(user_id: UUID, data: ProfileInput) -> UserProfile:
    """Create a profile with derived targets from onboarding answers."""
    bmr, tdee, targets = _derive(
        data.weight_kg,
        data.height_cm,
        data.age,
        data.gender,
        data.activity_level,
        data.goal,
    )
    return UserProfile(
        id=user_id,
        name=data.name,
        age=data.age,
        gender=data.gender,
        height_cm=data.height_cm,
        weight_kg=data.weight_kg,
        target_weight_kg=data.target_weight_kg,
        activity_level=data.activity_level,
        goal=data.goal,
        dietary_preference=data.dietary_preference,
        bmr=bmr,
        tdee=tdee,
        macro_targets=targets,
    )


def update_profile(profile: UserProfile, **changes: object) -> UserProfile:
    """Apply profile edits, recomputing targets when biometrics change."""
    changes.pop("bmr", None)
    changes.pop("tdee", None)
    changes.pop("macro_targets", None)
    updated = replace(profile, **changes)
    if BIOMETRIC_FIELDS.isdisjoint(changes):
        return updated
    bmr, tdee, targets = _derive(
        updated.weight_kg,
        updated.height_cm,
        updated.age,
        updated.gender,
        updated.activity_level,
        updated.goal,
    )
    return replace(updated, bmr=bmr, tdee=tdee, macro_targets=targets)


def _derive(  # noqa: PLR0913
    weight_kg: float,
    height_cm: float,
    age: float,
    gender: Gender,
    activity_level: ActivityLevel,
    goal: GoalType,
) -> tuple[float, int, MacroTargets]:
    bmr = compute_bmr(weight_kg, height_cm, age, gender)
    tdee = compute_tdee(bmr, activity_level)
    return bmr, tdee, compute_macro_targets(tdee, goal)


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)
