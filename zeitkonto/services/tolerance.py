from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from zeitkonto.models import MINUTES_PER_DAY, CappingSource, DayChangeBehavior, PlanType, RoundingType
from zeitkonto.schemas import DayPlanConfig, RoundingConfig


@dataclass(frozen=True)
class EffectiveTolerance:
    come_plus: int
    come_minus: int
    go_plus: int
    go_minus: int
    variable: bool


@dataclass(frozen=True)
class EvaluationWindow:
    come_from: int | None
    come_to: int | None
    go_from: int | None
    go_to: int | None
    core_start: int | None
    core_end: int | None

    @property
    def expected_departure(self) -> int | None:
        return self.go_to if self.go_to is not None else self.go_from


@dataclass(frozen=True)
class CappedTime:
    minutes: int
    source: CappingSource
    reason: str


@dataclass(frozen=True)
class CappingResult:
    total_capped: int
    items: tuple[CappedTime, ...]


def resolve_tolerance(plan: DayPlanConfig) -> EffectiveTolerance:
    tolerance = plan.tolerance
    if plan.plan_type == PlanType.FLEXTIME:
        # Flextime regulates actual hours: no early-arrival or early-leave credit.
        return EffectiveTolerance(
            come_plus=0,
            come_minus=tolerance.come_minus,
            go_plus=tolerance.go_plus,
            go_minus=0,
            variable=True,
        )
    return EffectiveTolerance(
        come_plus=tolerance.come_plus,
        come_minus=tolerance.come_minus,
        go_plus=tolerance.go_plus,
        go_minus=tolerance.go_minus,
        variable=plan.variable_work_time,
    )


def _shift(value: int | None, delta: int) -> int | None:
    return None if value is None else value + delta


def resolve_evaluation_window(
    plan: DayPlanConfig,
    *,
    starts_split: bool = False,
    ends_split: bool = False,
) -> EvaluationWindow:
    """Place the plan windows on the calculation day's minute axis.

    Night plans (departure before arrival) keep the departure on the next
    day unless the day holds the departure half of a shift. ``starts_split``
    and ``ends_split`` mark a day that begins or ends with an auto-complete
    boundary; a day with both only holds real events of its own date.
    """
    if plan.day_change_behavior == DayChangeBehavior.AT_DEPARTURE or (starts_split and not ends_split):
        anchor = "departure"
    elif starts_split and ends_split:
        anchor = "calendar"
    else:
        anchor = "arrival"

    come_from, come_to = plan.come_from, plan.come_to
    go_from, go_to = plan.go_from, plan.go_to
    core_start, core_end = plan.core_start, plan.core_end

    expected_go = go_to if go_to is not None else go_from
    if come_from is not None and expected_go is not None and expected_go < come_from:
        # Night plan: the departure window belongs to the following calendar day.
        if anchor == "departure":
            come_from = _shift(come_from, -MINUTES_PER_DAY)
            come_to = _shift(come_to, -MINUTES_PER_DAY)
        elif anchor == "arrival":
            go_from = _shift(go_from, MINUTES_PER_DAY)
            go_to = _shift(go_to, MINUTES_PER_DAY)

    if core_start is not None and core_end is not None and core_end < core_start:
        if anchor == "departure":
            core_start -= MINUTES_PER_DAY
        elif anchor == "arrival":
            core_end += MINUTES_PER_DAY

    return EvaluationWindow(
        come_from=come_from,
        come_to=come_to,
        go_from=go_from,
        go_to=go_to,
        core_start=core_start,
        core_end=core_end,
    )


def normalize_come(minute: int, come_from: int | None, tolerance: EffectiveTolerance) -> int:
    """Snap an arrival onto ``come_from`` when it falls inside a tolerance band.

    A late arrival up to ``come_minus`` minutes after the expected arrival is
    treated as punctual. An early arrival up to ``come_plus`` minutes before it
    is moved forward to the expected arrival and so earns no extra credit.
    """
    if come_from is None:
        return minute
    if come_from < minute <= come_from + tolerance.come_minus:
        return come_from
    if come_from - tolerance.come_plus <= minute < come_from:
        return come_from
    return minute


def normalize_go(minute: int, expected_go: int | None, tolerance: EffectiveTolerance) -> int:
    """Snap an early departure onto the expected departure inside ``go_minus``.

    ``go_plus`` is not a normalization band; it only widens the evaluation
    window, see :func:`cap_go`.
    """
    if expected_go is None:
        return minute
    if expected_go - tolerance.go_minus <= minute < expected_go:
        return expected_go
    return minute


def round_time(minute: int, config: RoundingConfig | None) -> int:
    if config is None:
        return minute
    kind = config.rounding_type
    if kind == RoundingType.ADD:
        return minute + config.add_value
    if kind == RoundingType.SUBTRACT:
        return minute - config.add_value
    interval = config.interval
    if interval <= 0 or kind == RoundingType.NONE:
        return minute
    if kind == RoundingType.UP:
        return -(-minute // interval) * interval
    if kind == RoundingType.DOWN:
        return (minute // interval) * interval
    # Nearest, halves round up.
    return ((minute + interval // 2) // interval) * interval


def cap_come(
    minute: int,
    come_from: int | None,
    *,
    come_minus: int,
    variable: bool,
) -> tuple[int, CappedTime | None]:
    if come_from is None:
        return minute, None

    effective_start = come_from
    if variable and come_minus > 0:
        effective_start = come_from - come_minus

    if minute < effective_start:
        return effective_start, CappedTime(
            minutes=effective_start - minute,
            source=CappingSource.EARLY_ARRIVAL,
            reason="Arrival before evaluation window",
        )
    return minute, None


def cap_go(minute: int, go_to: int | None, *, go_plus: int) -> tuple[int, CappedTime | None]:
    if go_to is None:
        return minute, None

    effective_end = go_to + go_plus
    if minute > effective_end:
        return effective_end, CappedTime(
            minutes=minute - effective_end,
            source=CappingSource.LATE_LEAVE,
            reason="Departure after evaluation window",
        )
    return minute, None


def cap_max_net_time(net_minutes: int, max_net_work_time: int | None) -> tuple[int, CappedTime | None]:
    if max_net_work_time is None or net_minutes <= max_net_work_time:
        return net_minutes, None
    return max_net_work_time, CappedTime(
        minutes=net_minutes - max_net_work_time,
        source=CappingSource.MAX_NET_TIME,
        reason="Exceeded maximum net work time",
    )


def aggregate_capping(items: Iterable[CappedTime | None]) -> CappingResult:
    kept = tuple(item for item in items if item is not None and item.minutes > 0)
    return CappingResult(
        total_capped=sum(item.minutes for item in kept),
        items=kept,
    )
