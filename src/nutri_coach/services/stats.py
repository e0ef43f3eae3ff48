"""Progress statistics over day logs."""

import csv
import io
from datetime import date, timedelta

from nutri_coach.domain.meals import DailyLog
from nutri_coach.domain.stats import DailyTotals, HistoryRow, PeriodSummary, TrendPoint
from nutri_coach.services.logs import daily_totals, find_log

DECEMBER = 12

CSV_HEADERS = [
    "Date",
    "Total Calories",
    "Total Protein (g)",
    "Total Carbs (g)",
    "Total Fat (g)",
    "Meals Count",
]


class ProgressService:
    """Service for history, exports and period summaries."""

    def history(self, logs: list[DailyLog]) -> list[HistoryRow]:
        """Return days with at least one meal, newest first."""
        logged = sorted(
            (log for log in logs if log.meals), key=lambda log: log.day, reverse=True
        )
        return [
            HistoryRow(totals=daily_totals(log), meal_count=len(log.meals))
            for log in logged
        ]

    def export_csv(self, logs: list[DailyLog]) -> str:
        """Render the history as CSV text."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for row in self.history(logs):
            writer.writerow(
                [
                    row.totals.day.isoformat(),
                    _format_number(row.totals.calories),
                    _format_number(row.totals.protein_g),
                    _format_number(row.totals.carbs_g),
                    _format_number(row.totals.fat_g),
                    row.meal_count,
                ]
            )
        return buffer.getvalue()

    def get_week(self, logs: list[DailyLog], today: date) -> PeriodSummary:
        """Return week-to-date totals and averages (weeks start Monday)."""
        start = today - timedelta(days=today.weekday())
        return _aggregate_period(start, 7, logs)

    def get_month(self, logs: list[DailyLog], today: date) -> PeriodSummary:
        """Return month totals and averages."""
        start = today.replace(day=1)
        if start.month == DECEMBER:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return _aggregate_period(start, (end - start).days, logs)

    def trend(
        self, logs: list[DailyLog], fallback_weight_kg: float
    ) -> list[TrendPoint]:
        """Return chart points in log order; days without weight use the fallback."""
        return [
            TrendPoint(
                day=log.day,
                calories=daily_totals(log).calories,
                weight_kg=log.weight_kg or fallback_weight_kg,
            )
            for log in logs
        ]


def _aggregate_period(start: date, days: int, logs: list[DailyLog]) -> PeriodSummary:
    daily = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        log = find_log(logs, day)
        if log is None:
            daily.append(
                DailyTotals(day=day, calories=0, protein_g=0, carbs_g=0, fat_g=0)
            )
        else:
            daily.append(daily_totals(log))

    total_days = max(len(daily), 1)
    return PeriodSummary(
        daily=daily,
        avg_calories=sum(entry.calories for entry in daily) / total_days,
        avg_protein_g=sum(entry.protein_g for entry in daily) / total_days,
        avg_carbs_g=sum(entry.carbs_g for entry in daily) / total_days,
        avg_fat_g=sum(entry.fat_g for entry in daily) / total_days,
    )


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"
