"""Tests for BMR, TDEE and macro target calculations."""

from dataclasses import replace
from uuid import uuid4

from nutri_coach.domain.profile import ActivityLevel, Gender, GoalType, Theme
from nutri_coach.services.nutrition import (
    build_profile,
    compute_bmr,
    compute_macro_targets,
    compute_tdee,
    update_profile,
)
from tests.conftest import sample_input


def test_compute_bmr_male_and_female_differ_by_166() -> None:
    male = compute_bmr(80, 180, 30, Gender.MALE)
    female = compute_bmr(80, 180, 30, Gender.FEMALE)

    assert male == 1780
    assert male - female == 166


def test_compute_bmr_linear_in_weight_and_decreasing_in_age() -> None:
    base = compute_bmr(70, 170, 40, Gender.FEMALE)

    assert compute_bmr(71, 170, 40, Gender.FEMALE) - base == 10
    assert compute_bmr(70, 171, 40, Gender.FEMALE) - base == 6.25
    assert compute_bmr(70, 170, 41, Gender.FEMALE) < base


def test_compute_tdee_sedentary_rounds_bmr_times_1_2() -> None:
    for bmr in (1780.0, 1614.0, 1501.3, 0.0):
        assert compute_tdee(bmr, ActivityLevel.SEDENTARY) == round(bmr * 1.2)


def test_compute_tdee_uses_activity_multiplier() -> None:
    assert compute_tdee(1000, ActivityLevel.ATHLETE) == 1900
    assert compute_tdee(1000, ActivityLevel.LIGHTLY_ACTIVE) == 1375


def test_maintain_keeps_calories_equal_to_tdee() -> None:
    targets = compute_macro_targets(2136, GoalType.MAINTAIN)

    assert targets.calories == 2136
    assert targets.protein_g == 134
    assert targets.carbs_g == 240
    assert targets.fat_g == 71


def test_lose_weight_applies_deficit_and_split() -> None:
    targets = compute_macro_targets(2136, GoalType.LOSE_WEIGHT)

    assert targets.calories == 1709
    assert targets.protein_g == 150
    assert targets.carbs_g == 150
    assert targets.fat_g == 57


def test_gain_muscle_applies_surplus_and_split() -> None:
    targets = compute_macro_targets(2136, GoalType.GAIN_MUSCLE)

    assert targets.calories == 2350
    assert targets.protein_g == 176
    assert targets.carbs_g == 264
    assert targets.fat_g == 65


def test_zero_tdee_yields_zero_targets() -> None:
    for goal in GoalType:
        targets = compute_macro_targets(0, goal)
        assert (targets.calories, targets.protein_g) == (0, 0)
        assert (targets.carbs_g, targets.fat_g) == (0, 0)


def test_build_profile_derives_targets() -> None:
    profile = build_profile(uuid4(), sample_input())

    assert profile.bmr == 1780
    assert profile.tdee == 2136
    assert profile.macro_targets.calories == 2136
    assert profile.badges == []
    assert profile.theme == Theme.LIGHT


def test_update_profile_recomputes_on_biometric_change() -> None:
    profile = build_profile(uuid4(), sample_input())

    updated = update_profile(profile, weight_kg=90)

    assert updated.weight_kg == 90
    assert updated.bmr == 1880
    assert updated.tdee == 2256
    assert updated.macro_targets.calories == 2256


def test_update_profile_keeps_targets_for_non_biometric_change() -> None:
    profile = replace(build_profile(uuid4(), sample_input()), tdee=1)

    updated = update_profile(profile, name="Sam", theme=Theme.DARK)

    assert updated.name == "Sam"
    assert updated.theme == Theme.DARK
    assert updated.tdee == 1


def test_update_profile_ignores_derived_fields() -> None:
    profile = build_profile(uuid4(), sample_input())

    updated = update_profile(profile, tdee=9999, goal=GoalType.LOSE_WEIGHT)

    assert updated.tdee == 2136
    assert updated.macro_targets.calories == 1709
