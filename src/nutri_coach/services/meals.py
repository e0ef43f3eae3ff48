"""Meal logging service."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from uuid import UUID

from nutri_coach.domain.meals import DailyLog, FoodItem, Meal, MealType, QualityScore
from nutri_coach.domain.models import UserData
from nutri_coach.domain.profile import Badge, UserProfile
from nutri_coach.domain.stats import DailyTotals
from nutri_coach.services.gamification import (
    calculate_streak,
    check_new_badges,
    merge_badges,
)
from nutri_coach.services.logs import (
    append_meal,
    build_meal,
    daily_totals,
    default_meal_type,
    ensure_today_entry,
    find_log,
    is_day_empty,
    local_today,
    record_weight,
)
from nutri_coach.services.user_data import UserDataStore

_logger = logging.getLogger(__name__)


class ProfileRequiredError(Exception):
    """Raised when an action needs a completed profile."""


@dataclass(frozen=True)
class MealSaveRequest:
    """Payload for logging a meal."""

    items: list[FoodItem]
    quality_score: QualityScore
    meal_type: MealType | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class MealSaveOutcome:
    """Result of a meal save, including gamification side effects."""

    profile: UserProfile
    logs: list[DailyLog]
    meal: Meal
    streak: int
    new_badges: list[Badge]
    first_meal_of_day: bool

    @property
    def highlighted_badge(self) -> Badge | None:
        """The badge to surface to the user, if any unlocked."""
        return self.new_badges[0] if self.new_badges else None

    @property
    def celebrate(self) -> bool:
        """True on the first meal of the day or when a badge unlocked."""
        return self.first_meal_of_day or bool(self.new_badges)


@dataclass(frozen=True)
class TodaySummary:
    """Today's log with totals and current streak."""

    log: DailyLog
    totals: DailyTotals
    streak: int


@dataclass
class MealLogService:
    """Service that appends meals and evaluates streaks and badges."""

    store: UserDataStore
    default_timezone: str = "UTC"

    def load_session(self, user_id: UUID) -> UserData:
        """Load a user's snapshot and make sure today's entry exists."""
        data = self.store.get(user_id)
        today = self._today(data.profile)
        if find_log(data.logs, today) is None:
            data = replace(data, logs=ensure_today_entry(data.logs, today))
            self.store.update(user_id, data)
        return data

    def save_meal(
        self, user_id: UUID, request: MealSaveRequest, now: datetime | None = None
    ) -> MealSaveOutcome:
        """Append a meal to today's log and unlock any earned badges."""
        data = self.store.get(user_id)
        profile = data.profile
        if profile is None:
            raise ProfileRequiredError("Complete onboarding before logging meals")

        today = self._today(profile)
        meal_type = request.meal_type
        if meal_type is None:
            meal_type = default_meal_type(profile.timezone, now)
        meal = build_meal(
            meal_type,
            request.items,
            request.quality_score,
            image_url=request.image_url,
            now=now,
        )
        logs = ensure_today_entry(data.logs, today)
        first_meal_of_day = is_day_empty(logs, today)
        logs = append_meal(logs, meal, today)

        streak = calculate_streak(logs, today)
        new_badges = check_new_badges(
            logs, profile.badges, streak, targets=profile.macro_targets, now=now
        )
        if new_badges:
            profile = replace(profile, badges=merge_badges(profile.badges, new_badges))
            _logger.info(
                "Unlocked badges: %s",
                ", ".join(badge.id for badge in new_badges),
                extra={"user_id": user_id},
            )

        self.store.update(user_id, UserData(profile=profile, logs=logs))
        return MealSaveOutcome(
            profile=profile,
            logs=logs,
            meal=meal,
            streak=streak,
            new_badges=new_badges,
            first_meal_of_day=first_meal_of_day,
        )

    def today(self, user_id: UUID) -> TodaySummary:
        """Return today's log, totals and streak."""
        data = self.load_session(user_id)
        today = self._today(data.profile)
        log = find_log(data.logs, today) or DailyLog(day=today)
        return TodaySummary(
            log=log,
            totals=daily_totals(log),
            streak=calculate_streak(data.logs, today),
        )

    def streak(self, user_id: UUID) -> int:
        """Return the current logging streak."""
        data = self.store.get(user_id)
        return calculate_streak(data.logs, self._today(data.profile))

    def record_weight(
        self, user_id: UUID, weight_kg: float, day: date | None = None
    ) -> list[DailyLog]:
        """Record body weight on a day (today by default)."""
        data = self.store.get(user_id)
        logs = record_weight(data.logs, day or self._today(data.profile), weight_kg)
        self.store.update(user_id, replace(data, logs=logs))
        return logs

    def _today(self, profile: UserProfile | None) -> date:
        timezone = profile.timezone if profile else self.default_timezone
        return local_today(timezone)
