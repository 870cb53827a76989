from __future__ import annotations

import logging
from typing import Sequence

from zeitkonto.models import (
    WARN_BELOW_THRESHOLD,
    WARN_FLEXTIME_CAPPED,
    WARN_MONTHLY_CAP_REACHED,
    WARN_NO_CARRYOVER,
    CreditType,
)
from zeitkonto.schemas import AbsenceSummaryInput, DailyValue, MonthlyCalcOutput, MonthlyEvaluationRules

logger = logging.getLogger("zeitkonto.monthly_calc")


def apply_flextime_caps(
    flextime: int,
    cap_positive: int | None,
    cap_negative: int | None,
) -> tuple[int, int]:
    """Clamp a flextime balance to its configured limits.

    Returns the capped balance and the minutes forfeited by the upper cap.
    Raising a balance to the negative floor is not a forfeit, so it never
    adds to the forfeited amount.
    """
    forfeited = 0
    if cap_positive is not None and flextime > cap_positive:
        forfeited = flextime - cap_positive
        flextime = cap_positive
    if cap_negative is not None and flextime < -cap_negative:
        flextime = -cap_negative
    return flextime, forfeited


def calculate_annual_carryover(current_balance: int | None, annual_floor: int | None) -> int:
    if current_balance is None:
        return 0
    if annual_floor is not None and current_balance < -annual_floor:
        return -annual_floor
    return current_balance


def year_end_carryover(current_balance: int | None, rules: MonthlyEvaluationRules | None) -> int:
    """Balance carried into January, floored by the rules' annual floor."""
    return calculate_annual_carryover(current_balance, rules.annual_floor_balance if rules else None)


def _add_warning(output: MonthlyCalcOutput, code: str) -> None:
    if code not in output.warnings:
        output.warnings.append(code)


def _apply_balance_caps(output: MonthlyCalcOutput, rules: MonthlyEvaluationRules) -> None:
    before = output.flextime_end
    output.flextime_end, forfeited = apply_flextime_caps(
        before,
        rules.flextime_cap_positive,
        rules.flextime_cap_negative,
    )
    output.flextime_forfeited += forfeited
    if output.flextime_end != before:
        _add_warning(output, WARN_FLEXTIME_CAPPED)


def _apply_monthly_cap(output: MonthlyCalcOutput, rules: MonthlyEvaluationRules) -> None:
    cap = rules.max_flextime_per_month
    if cap is not None and output.flextime_credited > cap:
        output.flextime_forfeited += output.flextime_credited - cap
        output.flextime_credited = cap
        _add_warning(output, WARN_MONTHLY_CAP_REACHED)


def _direct_transfer(output: MonthlyCalcOutput) -> None:
    output.flextime_credited = output.flextime_change
    output.flextime_end = output.flextime_raw
    output.flextime_forfeited = 0


def apply_credit_type(output: MonthlyCalcOutput, rules: MonthlyEvaluationRules) -> None:
    credit_type = rules.credit_type

    if credit_type == CreditType.COMPLETE_CARRYOVER:
        output.flextime_credited = output.flextime_change
        output.flextime_forfeited = 0
        _apply_monthly_cap(output, rules)
        output.flextime_end = output.flextime_start + output.flextime_credited
        _apply_balance_caps(output, rules)
        return

    if credit_type == CreditType.AFTER_THRESHOLD:
        threshold = rules.flextime_threshold or 0
        change = output.flextime_change
        if change > threshold:
            output.flextime_credited = change - threshold
            output.flextime_forfeited = threshold
        elif change > 0:
            output.flextime_credited = 0
            output.flextime_forfeited = change
            _add_warning(output, WARN_BELOW_THRESHOLD)
        else:
            # Undertime is always deducted in full.
            output.flextime_credited = change
            output.flextime_forfeited = 0
        _apply_monthly_cap(output, rules)
        output.flextime_end = output.flextime_start + output.flextime_credited
        _apply_balance_caps(output, rules)
        return

    if credit_type == CreditType.NO_CARRYOVER:
        output.flextime_credited = 0
        output.flextime_end = 0
        output.flextime_forfeited = output.flextime_change
        _add_warning(output, WARN_NO_CARRYOVER)
        return

    _direct_transfer(output)


def calculate_month(
    daily_values: Sequence[DailyValue],
    *,
    previous_carryover: int = 0,
    evaluation_rules: MonthlyEvaluationRules | None = None,
    absence_summary: AbsenceSummaryInput | None = None,
) -> MonthlyCalcOutput:
    absences = absence_summary or AbsenceSummaryInput()
    output = MonthlyCalcOutput(
        flextime_start=previous_carryover,
        vacation_taken=absences.vacation_days,
        sick_days=absences.sick_days,
        other_absence_days=absences.other_absence_days,
    )

    for value in daily_values:
        output.total_gross_time += value.gross_time
        output.total_net_time += value.net_time
        output.total_target_time += value.target_time
        output.total_overtime += value.overtime
        output.total_undertime += value.undertime
        output.total_break_time += value.break_time
        if value.gross_time > 0 or value.net_time > 0:
            output.work_days += 1
        if value.has_error:
            output.days_with_errors += 1

    output.flextime_change = output.total_overtime - output.total_undertime
    output.flextime_raw = output.flextime_start + output.flextime_change

    if evaluation_rules is None:
        _direct_transfer(output)
    else:
        apply_credit_type(output, evaluation_rules)

    logger.debug(
        "monthly_value_calculated",
        extra={
            "day_count": len(daily_values),
            "credit_type": evaluation_rules.credit_type.value if evaluation_rules else None,
            "flextime_end": output.flextime_end,
            "warnings": list(output.warnings),
        },
    )
    return output
