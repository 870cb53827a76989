from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from zeitkonto.models import (
    WARN_AUTO_BREAK_APPLIED,
    WARN_MANUAL_BREAK,
    WARN_MAX_TIME_REACHED,
    WARN_NO_BREAK_RECORDED,
    BreakType,
)
from zeitkonto.schemas import BreakConfig
from zeitkonto.services.pairing import (
    WorkInterval,
    calculate_recorded_break_time,
    longest_recorded_break,
    merge_intervals,
)


@dataclass(frozen=True)
class BreakDeduction:
    deducted_minutes: int
    recorded_minutes: int
    per_config_minutes: tuple[int, ...]
    warnings: tuple[str, ...]


def calculate_overlap(start1: int, end1: int, start2: int, end2: int) -> int:
    return max(0, min(end1, end2) - max(start1, start2))


def deduct_fixed_break(intervals: Sequence[WorkInterval], config: BreakConfig) -> int:
    if config.start_time is None or config.end_time is None:
        return config.duration
    overlap = sum(
        calculate_overlap(start, end, config.start_time, config.end_time)
        for start, end in merge_intervals(intervals)
    )
    return min(overlap, config.duration)


def calculate_minimum_break(gross_minutes: int, config: BreakConfig) -> int:
    threshold = config.after_work_minutes
    if threshold is None:
        return 0
    if gross_minutes < threshold:
        return 0
    if config.minutes_difference:
        return min(gross_minutes - threshold, config.duration)
    return config.duration


def calculate_variable_break(
    *,
    recorded_minutes: int,
    longest_break_minutes: int,
    config: BreakConfig,
) -> int:
    if config.minutes_difference:
        # Proportional: a short break is credited minute for minute.
        return min(recorded_minutes, config.duration)
    if longest_break_minutes >= config.duration:
        return config.duration
    return 0


def calculate_break_deduction(
    intervals: Sequence[WorkInterval],
    *,
    gross_minutes: int,
    configs: Sequence[BreakConfig],
) -> BreakDeduction:
    recorded = calculate_recorded_break_time(intervals)
    longest = longest_recorded_break(intervals)

    if gross_minutes <= 0 or not configs:
        return BreakDeduction(
            deducted_minutes=0,
            recorded_minutes=recorded,
            per_config_minutes=tuple(0 for _ in configs),
            warnings=(),
        )

    warnings: list[str] = []
    if recorded > 0:
        warnings.append(WARN_MANUAL_BREAK)
    else:
        warnings.append(WARN_NO_BREAK_RECORDED)

    per_config: list[int] = []
    for config in configs:
        if config.break_type == BreakType.FIXED:
            minutes = deduct_fixed_break(intervals, config)
        elif config.break_type == BreakType.MINIMUM:
            minutes = calculate_minimum_break(gross_minutes, config)
            if minutes > 0 and recorded == 0 and WARN_AUTO_BREAK_APPLIED not in warnings:
                warnings.append(WARN_AUTO_BREAK_APPLIED)
        else:
            minutes = calculate_variable_break(
                recorded_minutes=recorded,
                longest_break_minutes=longest,
                config=config,
            )
        per_config.append(minutes)

    return BreakDeduction(
        deducted_minutes=sum(per_config),
        recorded_minutes=recorded,
        per_config_minutes=tuple(per_config),
        warnings=tuple(warnings),
    )


def calculate_net_time(
    gross_minutes: int,
    break_minutes: int,
    max_net_work_time: int | None = None,
) -> tuple[int, list[str]]:
    net = max(0, gross_minutes - break_minutes)
    if max_net_work_time is not None and net > max_net_work_time:
        return max_net_work_time, [WARN_MAX_TIME_REACHED]
    return net, []


def calculate_overtime_undertime(net_minutes: int, target_minutes: int) -> tuple[int, int]:
    return max(0, net_minutes - target_minutes), max(0, target_minutes - net_minutes)
