from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Sequence

from zeitkonto.models import (
    ERR_BELOW_MIN_WORK_TIME,
    ERR_EARLY_COME,
    ERR_EARLY_GO,
    ERR_LATE_COME,
    ERR_LATE_GO,
    ERR_MISSED_CORE_END,
    ERR_MISSED_CORE_START,
    ERR_MISSING_COME,
    ERR_MISSING_GO,
    ERR_NO_BOOKINGS,
    ERR_OVERLAPPING_BOOKINGS,
    WARN_NO_BOOKINGS_CREDITED,
    WARN_NO_BOOKINGS_DEDUCTED,
    WARN_WINDOW_CAPPED,
    BookingDirection,
    NoBookingBehavior,
)
from zeitkonto.schemas import Booking, DailyValue, DayPlanConfig, RoundingConfig
from zeitkonto.services.breaks import calculate_break_deduction, calculate_net_time, calculate_overtime_undertime
from zeitkonto.services.day_change import resolve_day_events
from zeitkonto.services.pairing import (
    DayEvent,
    calculate_gross_time,
    find_first_come,
    find_last_go,
    pair_events,
    to_clock_minute,
)
from zeitkonto.services.shift_detection import detect_shift
from zeitkonto.services.tolerance import (
    CappedTime,
    EffectiveTolerance,
    EvaluationWindow,
    aggregate_capping,
    cap_come,
    cap_go,
    cap_max_net_time,
    normalize_come,
    normalize_go,
    resolve_evaluation_window,
    resolve_tolerance,
    round_time,
)

logger = logging.getLogger("zeitkonto.daily_calc")


@dataclass(frozen=True)
class ProcessedEvents:
    validation: tuple[DayEvent, ...]
    capped: tuple[DayEvent, ...]
    capping_items: tuple[CappedTime, ...]


class _CodeSet:
    """Insertion-ordered set of error or warning codes."""

    def __init__(self) -> None:
        self._items: list[str] = []

    def add(self, code: str | None) -> None:
        if code and code not in self._items:
            self._items.append(code)

    def extend(self, codes: Sequence[str]) -> None:
        for code in codes:
            self.add(code)

    def to_list(self) -> list[str]:
        return list(self._items)


def _rounding_targets(events: Sequence[DayEvent]) -> tuple[str | None, str | None]:
    real = sorted((event for event in events if not event.synthetic), key=lambda event: (event.minute, event.booking_id))
    first_in = next((event.booking_id for event in real if event.direction == BookingDirection.IN), None)
    last_out = next((event.booking_id for event in reversed(real) if event.direction == BookingDirection.OUT), None)
    return first_in, last_out


def process_events(
    events: Sequence[DayEvent],
    *,
    window: EvaluationWindow,
    tolerance: EffectiveTolerance,
    rounding_come: RoundingConfig | None = None,
    rounding_go: RoundingConfig | None = None,
    round_all_bookings: bool = False,
) -> ProcessedEvents:
    """Normalize, round and cap every clock event of the day.

    Rounding only touches the first arrival and the last departure unless
    ``round_all_bookings`` is set. Synthetic auto-complete boundaries are
    kept as they are.
    """
    first_in_id, last_out_id = _rounding_targets(events)
    validation: list[DayEvent] = []
    capped: list[DayEvent] = []
    capping_items: list[CappedTime] = []

    for event in events:
        if event.synthetic:
            validation.append(event)
            capped.append(event)
            continue

        if event.direction == BookingDirection.IN:
            normalized = normalize_come(event.minute, window.come_from, tolerance)
            if round_all_bookings or event.booking_id == first_in_id:
                normalized = round_time(normalized, rounding_come)
            capped_minute, item = cap_come(
                normalized,
                window.come_from,
                come_minus=tolerance.come_minus,
                variable=tolerance.variable,
            )
        else:
            normalized = normalize_go(event.minute, window.expected_departure, tolerance)
            if round_all_bookings or event.booking_id == last_out_id:
                normalized = round_time(normalized, rounding_go)
            capped_minute, item = cap_go(normalized, window.go_to, go_plus=tolerance.go_plus)

        validation.append(
            DayEvent(booking_id=event.booking_id, direction=event.direction, minute=normalized, synthetic=event.synthetic)
        )
        capped.append(
            DayEvent(booking_id=event.booking_id, direction=event.direction, minute=capped_minute, synthetic=event.synthetic)
        )
        if item is not None:
            capping_items.append(item)

    return ProcessedEvents(
        validation=tuple(validation),
        capped=tuple(capped),
        capping_items=tuple(capping_items),
    )


def validate_time_window(
    minute: int,
    window_from: int | None,
    window_to: int | None,
    *,
    early_code: str,
    late_code: str,
) -> list[str]:
    codes: list[str] = []
    if window_from is not None and minute < window_from:
        codes.append(early_code)
    if window_to is not None and minute > window_to:
        codes.append(late_code)
    return codes


def validate_core_hours(
    first_come: int | None,
    last_go: int | None,
    core_start: int | None,
    core_end: int | None,
    *,
    check_start: bool = True,
    check_end: bool = True,
) -> list[str]:
    if core_start is None or core_end is None:
        return []
    codes: list[str] = []
    if check_start and (first_come is None or first_come > core_start):
        codes.append(ERR_MISSED_CORE_START)
    if check_end and (last_go is None or last_go < core_end):
        codes.append(ERR_MISSED_CORE_END)
    return codes


@dataclass(frozen=True)
class DayCalculation:
    value: DailyValue
    synthetic_bookings: tuple[Booking, ...]


def _edge_event(events: Sequence[DayEvent], direction: BookingDirection, *, last: bool) -> DayEvent | None:
    matching = [event for event in events if event.direction == direction]
    if not matching:
        return None
    pick = max if last else min
    return pick(matching, key=lambda event: (event.minute, event.booking_id))


def _no_booking_value(
    employee_id: int,
    value_date: date,
    plan: DayPlanConfig,
    *,
    warnings: Sequence[str],
    calculation_version: int,
    calculated_at: datetime,
) -> DailyValue:
    target = plan.target_time
    codes = _CodeSet()
    day_warnings = _CodeSet()
    day_warnings.extend(warnings)
    net = 0

    if plan.no_booking_behavior == NoBookingBehavior.ADOPT_TARGET:
        net = target
        day_warnings.add(WARN_NO_BOOKINGS_CREDITED)
    elif plan.no_booking_behavior == NoBookingBehavior.DEDUCT_TARGET:
        day_warnings.add(WARN_NO_BOOKINGS_DEDUCTED)
    else:
        codes.add(ERR_NO_BOOKINGS)

    overtime, undertime = calculate_overtime_undertime(net, target)
    error_codes = codes.to_list()
    return DailyValue(
        employee_id=employee_id,
        value_date=value_date,
        gross_time=net,
        net_time=net,
        target_time=target,
        overtime=overtime,
        undertime=undertime,
        has_error=bool(error_codes),
        error_codes=error_codes,
        warnings=day_warnings.to_list(),
        booking_count=0,
        plan_code=plan.code,
        calculated_at=calculated_at,
        calculation_version=calculation_version,
    )


def evaluate_day(
    employee_id: int,
    value_date: date,
    bookings: Sequence[Booking],
    plan: DayPlanConfig,
    *,
    calculation_version: int,
    calculated_at: datetime | None = None,
) -> DayCalculation:
    """Compute the daily value together with the auto-complete split bookings.

    ``bookings`` may cover the previous and next day as well; which of them
    count is decided by the plan's day-change behavior. Problems in the
    booking data never raise, they are reported as error codes on the result.
    The synthetic bookings are returned for the caller to store; ids are
    deterministic, so storing them again on a recalculation is an upsert.
    """
    calculated_at = calculated_at or datetime.now(timezone.utc)
    own_bookings = [booking for booking in bookings if booking.employee_id == employee_id]

    day = resolve_day_events(value_date, plan.day_change_behavior, own_bookings)
    errors = _CodeSet()
    warnings = _CodeSet()
    warnings.extend(day.warnings)

    if not day.events:
        value = _no_booking_value(
            employee_id,
            value_date,
            plan,
            warnings=warnings.to_list(),
            calculation_version=calculation_version,
            calculated_at=calculated_at,
        )
        return DayCalculation(value=value, synthetic_bookings=day.synthetic_bookings)

    if plan.has_shift_detection():
        real_events = [event for event in day.events if not event.synthetic]
        raw_first = find_first_come(real_events)
        raw_last = find_last_go(real_events)
        detection = detect_shift(
            plan,
            first_come=None if raw_first is None else to_clock_minute(raw_first),
            last_go=None if raw_last is None else to_clock_minute(raw_last),
        )
        errors.add(detection.error_code)
        plan = detection.plan

    starts_split = any(event.synthetic and event.direction == BookingDirection.IN for event in day.events)
    ends_split = any(event.synthetic and event.direction == BookingDirection.OUT for event in day.events)

    tolerance = resolve_tolerance(plan)
    window = resolve_evaluation_window(plan, starts_split=starts_split, ends_split=ends_split)
    processed = process_events(
        day.events,
        window=window,
        tolerance=tolerance,
        rounding_come=plan.rounding_come,
        rounding_go=plan.rounding_go,
        round_all_bookings=plan.round_all_bookings,
    )

    pairing = pair_events(processed.capped)
    warnings.extend(pairing.warnings)
    if pairing.unpaired_in_ids:
        errors.add(ERR_MISSING_GO)
    if pairing.unpaired_out_ids:
        errors.add(ERR_MISSING_COME)
    if pairing.has_overlap:
        errors.add(ERR_OVERLAPPING_BOOKINGS)

    first_event = _edge_event(processed.validation, BookingDirection.IN, last=False)
    last_event = _edge_event(processed.validation, BookingDirection.OUT, last=True)
    first_come = None if first_event is None else first_event.minute
    last_go = None if last_event is None else last_event.minute
    # A midnight boundary is not a clock event and is never judged against the windows.
    check_come = first_event is not None and not first_event.synthetic
    check_go = last_event is not None and not last_event.synthetic

    if check_come:
        errors.extend(
            validate_time_window(
                first_come, window.come_from, window.come_to, early_code=ERR_EARLY_COME, late_code=ERR_LATE_COME
            )
        )
    if check_go:
        errors.extend(
            validate_time_window(last_go, window.go_from, window.go_to, early_code=ERR_EARLY_GO, late_code=ERR_LATE_GO)
        )
    errors.extend(
        validate_core_hours(
            first_come,
            last_go,
            window.core_start,
            window.core_end,
            check_start=first_event is None or check_come,
            check_end=last_event is None or check_go,
        )
    )

    gross = calculate_gross_time(pairing.intervals)
    deduction = calculate_break_deduction(pairing.intervals, gross_minutes=gross, configs=plan.breaks)
    warnings.extend(deduction.warnings)

    uncapped_net = max(0, gross - deduction.deducted_minutes)
    net, net_warnings = calculate_net_time(gross, deduction.deducted_minutes, plan.max_net_work_time)
    warnings.extend(net_warnings)
    _, max_net_item = cap_max_net_time(uncapped_net, plan.max_net_work_time)

    if processed.capping_items:
        warnings.add(WARN_WINDOW_CAPPED)
    capping = aggregate_capping([*processed.capping_items, max_net_item])

    if plan.min_work_time is not None and net < plan.min_work_time:
        errors.add(ERR_BELOW_MIN_WORK_TIME)

    overtime, undertime = calculate_overtime_undertime(net, plan.target_time)
    error_codes = errors.to_list()

    logger.debug(
        "daily_value_calculated",
        extra={
            "employee_id": employee_id,
            "value_date": value_date.isoformat(),
            "plan_code": plan.code,
            "gross_time": gross,
            "net_time": net,
            "error_codes": error_codes,
        },
    )

    value = DailyValue(
        employee_id=employee_id,
        value_date=value_date,
        gross_time=gross,
        net_time=net,
        target_time=plan.target_time,
        overtime=overtime,
        undertime=undertime,
        break_time=deduction.deducted_minutes,
        capped_time=capping.total_capped,
        has_error=bool(error_codes),
        error_codes=error_codes,
        warnings=warnings.to_list(),
        first_come=None if first_come is None else to_clock_minute(first_come),
        last_go=None if last_go is None else to_clock_minute(last_go),
        booking_count=day.booking_count,
        plan_code=plan.code,
        calculated_at=calculated_at,
        calculation_version=calculation_version,
    )
    return DayCalculation(value=value, synthetic_bookings=day.synthetic_bookings)


def calculate_day(
    employee_id: int,
    value_date: date,
    bookings: Sequence[Booking],
    plan: DayPlanConfig,
    *,
    calculation_version: int,
    calculated_at: datetime | None = None,
) -> DailyValue:
    """Compute the daily value of one employee for ``value_date``."""
    return evaluate_day(
        employee_id,
        value_date,
        bookings,
        plan,
        calculation_version=calculation_version,
        calculated_at=calculated_at,
    ).value
