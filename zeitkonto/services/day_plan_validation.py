from __future__ import annotations

import logging

from zeitkonto.errors import InvalidDayPlanError
from zeitkonto.models import RESERVED_DAY_PLAN_CODES, BreakType
from zeitkonto.schemas import DayPlanConfig
from zeitkonto.services.shift_detection import validate_shift_detection_windows

logger = logging.getLogger("zeitkonto.day_plan_validation")


def is_reserved_plan_code(code: str) -> bool:
    return code.strip().upper() in RESERVED_DAY_PLAN_CODES


def _check_window(plan: DayPlanConfig, label: str, start: int | None, end: int | None) -> None:
    if start is not None and end is not None and start > end:
        raise InvalidDayPlanError(
            "INVALID_WINDOW",
            f"{label} window starts after it ends",
            field=label,
            plan_code=plan.code,
        )


def validate_day_plan(plan: DayPlanConfig) -> DayPlanConfig:
    """Reject day plans the calculator cannot evaluate safely.

    Alternatives are validated with the same rules. Returns the plan so the
    call can be chained at load time.
    """
    if is_reserved_plan_code(plan.code):
        logger.warning("day_plan_reserved_code", extra={"plan_code": plan.code})
        raise InvalidDayPlanError(
            "RESERVED_PLAN_CODE",
            f"Day plan code '{plan.code}' is reserved for absence days",
            field="code",
            plan_code=plan.code,
        )

    _check_window(plan, "come", plan.come_from, plan.come_to)
    _check_window(plan, "go", plan.go_from, plan.go_to)
    # Core hours may wrap past midnight and are not checked.

    # Break durations are already positive by schema.
    for index, config in enumerate(plan.breaks):
        if config.break_type == BreakType.FIXED:
            _check_window(plan, f"breaks[{index}]", config.start_time, config.end_time)

    if plan.shift_detection is not None:
        problems = validate_shift_detection_windows(plan.shift_detection)
        if problems:
            raise InvalidDayPlanError(
                "INVALID_SHIFT_DETECTION",
                "; ".join(problems),
                field="shift_detection",
                plan_code=plan.code,
            )

    for index, alternative in enumerate(plan.alternatives):
        problems = validate_shift_detection_windows(alternative)
        if problems:
            raise InvalidDayPlanError(
                "INVALID_SHIFT_DETECTION",
                "; ".join(problems),
                field=f"alternatives[{index}]",
                plan_code=plan.code,
            )
        validate_day_plan(alternative.plan)

    return plan
