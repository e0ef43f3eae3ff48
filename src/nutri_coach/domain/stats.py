"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyTotals:
    """Daily total macros."""

    day: date
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class PeriodSummary:
    """Aggregated totals for a period."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein_g: float
    avg_carbs_g: float
    avg_fat_g: float


@dataclass(frozen=True)
class HistoryRow:
    """A logged day with its totals and meal count."""

    totals: DailyTotals
    meal_count: int


@dataclass(frozen=True)
class TrendPoint:
    """Chart point for calories and body weight."""

    day: date
    calories: float
    weight_kg: float
