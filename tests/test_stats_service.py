"""Tests for progress statistics."""

from datetime import date

from nutri_coach.domain.meals import DailyLog
from nutri_coach.services.stats import ProgressService
from tests.conftest import make_meal


def _logs() -> list[DailyLog]:
    return [
        DailyLog(day=date(2024, 1, 1), meals=[make_meal(calories=400.5)]),
        DailyLog(day=date(2024, 1, 2), meals=[]),
        DailyLog(
            day=date(2024, 1, 3),
            meals=[make_meal(calories=500), make_meal(calories=700)],
            weight_kg=79.0,
        ),
    ]


def test_history_skips_empty_days_newest_first() -> None:
    rows = ProgressService().history(_logs())

    assert [row.totals.day for row in rows] == [date(2024, 1, 3), date(2024, 1, 1)]
    assert rows[0].meal_count == 2
    assert rows[0].totals.calories == 1200


def test_export_csv() -> None:
    csv_text = ProgressService().export_csv(_logs())

    lines = csv_text.splitlines()
    assert lines[0] == (
        "Date,Total Calories,Total Protein (g),Total Carbs (g),Total Fat (g),"
        "Meals Count"
    )
    assert lines[1] == "2024-01-03,1200,60,60,40,2"
    assert lines[2] == "2024-01-01,400.5,30,30,20,1"
    assert len(lines) == 3


def test_export_csv_without_logs_has_header_only() -> None:
    assert ProgressService().export_csv([]).splitlines() == [
        "Date,Total Calories,Total Protein (g),Total Carbs (g),Total Fat (g),"
        "Meals Count"
    ]


def test_get_week_starts_on_monday() -> None:
    summary = ProgressService().get_week(_logs(), date(2024, 1, 3))

    assert summary.daily[0].day == date(2024, 1, 1)
    assert len(summary.daily) == 7
    assert summary.avg_calories == (400.5 + 1200) / 7


def test_get_month_covers_every_day() -> None:
    summary = ProgressService().get_month(_logs(), date(2024, 1, 15))

    assert len(summary.daily) == 31
    assert summary.daily[-1].day == date(2024, 1, 31)
    assert summary.avg_protein_g == 90 / 31


def test_get_month_handles_december() -> None:
    summary = ProgressService().get_month([], date(2024, 12, 5))

    assert len(summary.daily) == 31
    assert summary.avg_calories == 0


def test_trend_falls_back_to_profile_weight() -> None:
    points = ProgressService().trend(_logs(), fallback_weight_kg=80.0)

    assert [point.weight_kg for point in points] == [80.0, 80.0, 79.0]
    assert points[2].calories == 1200
