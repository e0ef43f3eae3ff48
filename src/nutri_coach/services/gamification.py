"""Logging streaks and achievement badges."""

from datetime import UTC, date, datetime, timedelta

from nutri_coach.domain.meals import DailyLog
from nutri_coach.domain.profile import Badge, BadgeDefinition, MacroTargets
from nutri_coach.services.logs import daily_totals, meal_count

FIRST_LOG = "first_log"
STREAK_3 = "streak_3"
STREAK_7 = "streak_7"
STREAK_14 = "streak_14"
QUALITY_80 = "quality_80"
PERFECT_DAY = "perfect_day"

BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(FIRST_LOG, "First Step", "Logged your first meal", "🌱"),
    BadgeDefinition(STREAK_3, "On Fire", "3-day logging streak", "🔥"),
    BadgeDefinition(STREAK_7, "Unstoppable", "7-day logging streak", "🚀"),
    BadgeDefinition(STREAK_14, "Habit Master", "14-day logging streak", "👑"),
    BadgeDefinition(
        QUALITY_80, "Clean Eater", "Logged a meal with 80+ quality score", "🥗"
    ),
    BadgeDefinition(
        PERFECT_DAY, "Perfect Day", "Hit all macro targets within 10%", "🎯"
    ),
)

_STREAK_THRESHOLDS = ((STREAK_3, 3), (STREAK_7, 7), (STREAK_14, 14))
QUALITY_THRESHOLD = 80
PERFECT_DAY_TOLERANCE = 0.10


def get_badge_definition(badge_id: str) -> BadgeDefinition | None:
    """Return the catalog entry for a badge id."""
    for definition in BADGE_CATALOG:
        if definition.id == badge_id:
            return definition
    return None


def calculate_streak(logs: list[DailyLog], today: date | None = None) -> int:
    """Count consecutive logged days ending today or yesterday.

    Only days with at least one meal count, so an empty entry for today
    neither extends nor breaks a streak that ends yesterday.
    """
    current = today or date.today()
    logged_days = sorted({log.day for log in logs if log.meals}, reverse=True)
    if not logged_days:
        return 0
    if logged_days[0] not in (current, current - timedelta(days=1)):
        return 0

    streak = 0
    expected = logged_days[0]
    for day in logged_days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def check_new_badges(
    logs: list[DailyLog],
    owned: list[Badge],
    streak: int,
    targets: MacroTargets | None = None,
    now: datetime | None = None,
) -> list[Badge]:
    """Return badges whose condition holds and that are not owned yet.

    Quality and perfect-day checks look at the last entry of ``logs`` by
    position, which is the most recently appended day. ``perfect_day`` is
    only evaluated when ``targets`` are given.
    """
    owned_ids = {badge.id for badge in owned}
    unlocked_at = now or datetime.now(tz=UTC)
    qualifying: list[str] = []

    if meal_count(logs) >= 1:
        qualifying.append(FIRST_LOG)
    for badge_id, threshold in _STREAK_THRESHOLDS:
        if streak >= threshold:
            qualifying.append(badge_id)

    latest = logs[-1] if logs else None
    if latest and any(
        meal.quality_score.score >= QUALITY_THRESHOLD for meal in latest.meals
    ):
        qualifying.append(QUALITY_80)
    if latest and targets and _is_perfect_day(latest, targets):
        qualifying.append(PERFECT_DAY)

    new_badges = []
    for badge_id in qualifying:
        if badge_id in owned_ids:
            continue
        definition = get_badge_definition(badge_id)
        if definition:
            new_badges.append(Badge(definition=definition, unlocked_at=unlocked_at))
    return new_badges


def merge_badges(owned: list[Badge], new: list[Badge]) -> list[Badge]:
    """Append new badges to the owned list, skipping ids already present."""
    merged = list(owned)
    seen = {badge.id for badge in owned}
    for badge in new:
        if badge.id in seen:
            continue
        merged.append(badge)
        seen.add(badge.id)
    return merged


def _is_perfect_day(log: DailyLog, targets: MacroTargets) -> bool:
    if not log.meals:
        return False
    totals = daily_totals(log)
    pairs = (
        (totals.calories, targets.calories),
        (totals.protein_g, targets.protein_g),
        (totals.carbs_g, targets.carbs_g),
        (totals.fat_g, targets.fat_g),
    )
    for actual, target in pairs:
        if target <= 0:
            return False
        if abs(actual - target) > target * PERFECT_DAY_TOLERANCE:
            return False
    return True
