from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from zeitkonto.models import ERR_SHIFT_NOT_DETECTED, MINUTES_PER_DAY, ShiftMatchType
from zeitkonto.schemas import DayPlanConfig, ShiftDetectionWindows

logger = logging.getLogger("zeitkonto.shift_detection")


@dataclass(frozen=True)
class ShiftDetectionResult:
    plan: DayPlanConfig
    is_original_plan: bool
    matched_by: ShiftMatchType
    has_error: bool = False
    error_code: str | None = None

    @property
    def plan_code(self) -> str:
        return self.plan.code


def is_in_time_window(minute: int | None, window_from: int | None, window_to: int | None) -> bool:
    if minute is None or window_from is None or window_to is None:
        return False
    return window_from <= minute <= window_to


def match_windows(
    windows: ShiftDetectionWindows | None,
    *,
    first_come: int | None,
    last_go: int | None,
) -> ShiftMatchType | None:
    """Return how the booked times match ``windows``, or ``None`` for no match.

    When both an arrival and a departure window are configured, both must
    contain their time. A single configured window is matched alone.
    """
    if windows is None:
        return None

    has_arrival = windows.has_arrival_window
    has_departure = windows.has_departure_window
    arrival_ok = has_arrival and is_in_time_window(first_come, windows.arrive_from, windows.arrive_to)
    departure_ok = has_departure and is_in_time_window(last_go, windows.depart_from, windows.depart_to)

    if has_arrival and has_departure:
        return ShiftMatchType.BOTH if arrival_ok and departure_ok else None
    if has_arrival:
        return ShiftMatchType.ARRIVAL if arrival_ok else None
    if has_departure:
        return ShiftMatchType.DEPARTURE if departure_ok else None
    return None


def _arrival_width(windows: ShiftDetectionWindows) -> float:
    if not windows.has_arrival_window:
        return math.inf
    return windows.arrive_to - windows.arrive_from


def detect_shift(
    plan: DayPlanConfig,
    *,
    first_come: int | None,
    last_go: int | None,
) -> ShiftDetectionResult:
    if not plan.has_shift_detection():
        return ShiftDetectionResult(plan=plan, is_original_plan=True, matched_by=ShiftMatchType.NONE)

    if first_come is None and last_go is None:
        return ShiftDetectionResult(plan=plan, is_original_plan=True, matched_by=ShiftMatchType.NONE)

    candidates: list[tuple[DayPlanConfig, ShiftDetectionWindows, bool]] = []
    if plan.shift_detection is not None:
        candidates.append((plan, plan.shift_detection, True))
    for alternative in plan.alternatives:
        candidates.append((alternative.plan, alternative, False))

    best: tuple[float, int] | None = None
    best_result: ShiftDetectionResult | None = None
    for position, (candidate_plan, windows, is_original) in enumerate(candidates):
        matched_by = match_windows(windows, first_come=first_come, last_go=last_go)
        if matched_by is None:
            continue
        rank = (_arrival_width(windows), position)
        if best is None or rank < best:
            best = rank
            best_result = ShiftDetectionResult(
                plan=candidate_plan,
                is_original_plan=is_original,
                matched_by=matched_by,
            )

    if best_result is not None:
        if not best_result.is_original_plan:
            logger.debug(
                "shift_detection_alternative_selected",
                extra={
                    "assigned_plan": plan.code,
                    "selected_plan": best_result.plan_code,
                    "matched_by": best_result.matched_by.value,
                },
            )
        return best_result

    return ShiftDetectionResult(
        plan=plan,
        is_original_plan=True,
        matched_by=ShiftMatchType.NONE,
        has_error=True,
        error_code=ERR_SHIFT_NOT_DETECTED,
    )


def validate_shift_detection_windows(windows: ShiftDetectionWindows) -> list[str]:
    problems: list[str] = []
    pairs = (
        ("arrive", windows.arrive_from, windows.arrive_to),
        ("depart", windows.depart_from, windows.depart_to),
    )
    for label, window_from, window_to in pairs:
        if (window_from is None) != (window_to is None):
            problems.append(f"{label} window needs both from and to")
            continue
        if window_from is None or window_to is None:
            continue
        if not 0 <= window_from <= MINUTES_PER_DAY or not 0 <= window_to <= MINUTES_PER_DAY:
            problems.append(f"{label} window must lie within 0..{MINUTES_PER_DAY}")
        elif window_from > window_to:
            problems.append(f"{label}_from must not be after {label}_to")
    return problems
