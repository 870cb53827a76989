from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Sequence

from zeitkonto.errors import ConfigurationError
from zeitkonto.schemas import Booking, DailyValue, DayPlanConfig
from zeitkonto.services.daily_calc import evaluate_day
from zeitkonto.services.day_change import required_booking_window
from zeitkonto.settings import get_calculation_version, get_settings

logger = logging.getLogger("zeitkonto.recalc")

BookingLoader = Callable[[int, date, date], Sequence[Booking]]
DayPlanResolver = Callable[[int, date], DayPlanConfig | None]
SyntheticBookingSink = Callable[[Sequence[Booking]], None]


def iter_dates(date_from: date, date_to: date) -> list[date]:
    return [date_from + timedelta(days=offset) for offset in range((date_to - date_from).days + 1)]


def recalculate_range(
    employee_id: int,
    date_from: date,
    date_to: date,
    *,
    load_bookings: BookingLoader,
    resolve_day_plan: DayPlanResolver,
    calculation_version: int | None = None,
    calculated_at: datetime | None = None,
    save_synthetic_bookings: SyntheticBookingSink | None = None,
) -> list[DailyValue]:
    """Recalculate every day of ``date_from..date_to`` in ascending order.

    Days without a plan are skipped. The caller persists the returned values;
    auto-complete split bookings go to ``save_synthetic_bookings`` when given.
    """
    if date_to < date_from:
        raise ConfigurationError(
            "INVALID_DATE_RANGE",
            "date_to must not be before date_from",
            field="date_to",
        )

    max_days = get_settings().recalc_max_days
    day_count = (date_to - date_from).days + 1
    if day_count > max_days:
        raise ConfigurationError(
            "DATE_RANGE_TOO_LONG",
            f"Date range of {day_count} days exceeds the limit of {max_days}",
            field="date_to",
        )

    version = calculation_version if calculation_version is not None else get_calculation_version()
    stamp = calculated_at or datetime.now(timezone.utc)
    values: list[DailyValue] = []
    skipped = 0
    synthetic_saved = 0

    for day in iter_dates(date_from, date_to):
        plan = resolve_day_plan(employee_id, day)
        if plan is None:
            skipped += 1
            continue
        window_start, window_end = required_booking_window(day, plan.day_change_behavior)
        bookings = load_bookings(employee_id, window_start, window_end)
        result = evaluate_day(
            employee_id,
            day,
            bookings,
            plan,
            calculation_version=version,
            calculated_at=stamp,
        )
        values.append(result.value)
        if result.synthetic_bookings and save_synthetic_bookings is not None:
            save_synthetic_bookings(result.synthetic_bookings)
            synthetic_saved += len(result.synthetic_bookings)

    logger.info(
        "recalculate_range_done",
        extra={
            "employee_id": employee_id,
            "date_from": date_from.isoformat(),
            "date_to": date_to.isoformat(),
            "calculated": len(values),
            "skipped": skipped,
            "synthetic_saved": synthetic_saved,
            "days_with_errors": sum(1 for value in values if value.has_error),
        },
    )
    return values
