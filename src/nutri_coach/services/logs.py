"""Day-indexed meal log aggregation.

Every function here returns new values; input lists and logs are never
mutated, so callers can detect changes by identity.
"""

from dataclasses import replace
from datetime import UTC, date, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

from nutri_coach.domain.meals import DailyLog, FoodItem, Meal, MealType, QualityScore
from nutri_coach.domain.stats import DailyTotals


def local_today(timezone_name: str) -> date:
    """Return the current calendar date in the given timezone."""
    return datetime.now(tz=ZoneInfo(timezone_name)).date()


def default_meal_type(timezone_name: str, now: datetime | None = None) -> MealType:
    """Pick the meal slot for the current local hour."""
    moment = now or datetime.now(tz=UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    hour = moment.astimezone(ZoneInfo(timezone_name)).hour
    if 4 <= hour < 11:
        return MealType.BREAKFAST
    if 11 <= hour < 17:
        return MealType.LUNCH
    if 17 <= hour < 22:
        return MealType.DINNER
    return MealType.SNACK


def build_meal(
    meal_type: MealType,
    items: list[FoodItem],
    quality_score: QualityScore,
    image_url: str | None = None,
    now: datetime | None = None,
) -> Meal:
    """Create a meal whose totals are the sum over its items."""
    return Meal(
        id=uuid4(),
        created_at=now or datetime.now(tz=UTC),
        meal_type=meal_type,
        items=list(items),
        total_calories=sum(item.calories for item in items),
        total_protein_g=sum(item.protein_g for item in items),
        total_carbs_g=sum(item.carbs_g for item in items),
        total_fat_g=sum(item.fat_g for item in items),
        quality_score=quality_score,
        image_url=image_url,
    )


def find_log(logs: list[DailyLog], day: date) -> DailyLog | None:
    """Return the log for a day, if present."""
    for log in logs:
        if log.day == day:
            return log
    return None


def is_day_empty(logs: list[DailyLog], day: date) -> bool:
    """Return True when the day has no entry or an entry without meals."""
    log = find_log(logs, day)
    return log is None or not log.meals


def append_meal(logs: list[DailyLog], meal: Meal, day: date) -> list[DailyLog]:
    """Append a meal to the day's log, creating the log at the end if missing."""
    updated: list[DailyLog] = []
    appended = False
    for log in logs:
        if log.day == day and not appended:
            updated.append(replace(log, meals=[*log.meals, meal]))
            appended = True
        else:
            updated.append(log)
    if not appended:
        updated.append(DailyLog(day=day, meals=[meal]))
    return updated


def ensure_today_entry(logs: list[DailyLog], today: date) -> list[DailyLog]:
    """Guarantee an entry exists for today, appending an empty one if needed."""
    if find_log(logs, today) is not None:
        return list(logs)
    return [*logs, DailyLog(day=today, meals=[])]


def record_weight(logs: list[DailyLog], day: date, weight_kg: float) -> list[DailyLog]:
    """Set the recorded body weight for a day."""
    if find_log(logs, day) is None:
        return [*logs, DailyLog(day=day, meals=[], weight_kg=weight_kg)]
    return [
        replace(log, weight_kg=weight_kg) if log.day == day else log for log in logs
    ]


def daily_totals(log: DailyLog) -> DailyTotals:
    """Sum meal totals for a day; an empty day sums to zero."""
    total = DailyTotals(day=log.day, calories=0, protein_g=0, carbs_g=0, fat_g=0)
    for meal in log.meals:
        total = DailyTotals(
            day=log.day,
            calories=total.calories + meal.total_calories,
            protein_g=total.protein_g + meal.total_protein_g,
            carbs_g=total.carbs_g + meal.total_carbs_g,
            fat_g=total.fat_g + meal.total_fat_g,
        )
    return total


def meal_count(logs: list[DailyLog]) -> int:
    """Return the number of meals across all logs."""
    return sum(len(log.meals) for log in logs)
