from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from zeitkonto.models import MINUTES_PER_DAY, WARN_CROSS_MIDNIGHT, BookingDirection


@dataclass(frozen=True)
class DayEvent:
    """One clock event placed on the calculation day's minute axis.

    ``minute`` is relative to midnight of the calculation day, so a booking
    from the previous day is negative and one from the next day is >= 1440.
    """

    booking_id: str
    direction: BookingDirection
    minute: int
    synthetic: bool = False


@dataclass(frozen=True)
class WorkInterval:
    come_id: str
    go_id: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return max(0, self.end - self.start)

    @property
    def crosses_midnight(self) -> bool:
        return self.start < 0 < self.end or self.start < MINUTES_PER_DAY < self.end


@dataclass(frozen=True)
class PairingResult:
    intervals: tuple[WorkInterval, ...]
    unpaired_in_ids: tuple[str, ...]
    unpaired_out_ids: tuple[str, ...]
    has_overlap: bool
    warnings: tuple[str, ...]


def _event_sort_key(event: DayEvent) -> tuple[int, str]:
    return event.minute, event.booking_id


def pair_events(events: Sequence[DayEvent]) -> PairingResult:
    ordered = sorted(events, key=_event_sort_key)
    arrivals = [event for event in ordered if event.direction == BookingDirection.IN]
    departures = [event for event in ordered if event.direction == BookingDirection.OUT]

    intervals: list[WorkInterval] = []
    unpaired_in: list[str] = []
    paired_out_ids: set[str] = set()

    out_idx = 0
    for come in arrivals:
        while out_idx < len(departures) and departures[out_idx].minute < come.minute:
            out_idx += 1
        if out_idx >= len(departures):
            unpaired_in.append(come.booking_id)
            continue
        go = departures[out_idx]
        out_idx += 1
        paired_out_ids.add(go.booking_id)
        intervals.append(
            WorkInterval(
                come_id=come.booking_id,
                go_id=go.booking_id,
                start=come.minute,
                end=go.minute,
            )
        )

    unpaired_out = [event.booking_id for event in departures if event.booking_id not in paired_out_ids]

    warnings: list[str] = []
    if any(interval.crosses_midnight for interval in intervals):
        warnings.append(WARN_CROSS_MIDNIGHT)

    return PairingResult(
        intervals=tuple(intervals),
        unpaired_in_ids=tuple(unpaired_in),
        unpaired_out_ids=tuple(unpaired_out),
        has_overlap=_has_overlap(intervals),
        warnings=tuple(warnings),
    )


def _has_overlap(intervals: Sequence[WorkInterval]) -> bool:
    latest_end: int | None = None
    for interval in sorted(intervals, key=lambda item: (item.start, item.end)):
        if latest_end is not None and interval.start < latest_end:
            return True
        latest_end = interval.end if latest_end is None else max(latest_end, interval.end)
    return False


def merge_intervals(intervals: Sequence[WorkInterval]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for interval in sorted(intervals, key=lambda item: (item.start, item.end)):
        if merged and interval.start < merged[-1][1]:
            start, end = merged[-1]
            merged[-1] = (start, max(end, interval.end))
        else:
            merged.append((interval.start, interval.end))
    return merged


def calculate_gross_time(intervals: Sequence[WorkInterval]) -> int:
    # Overlapping pairs are counted once.
    return sum(end - start for start, end in merge_intervals(intervals))


def calculate_recorded_break_time(intervals: Sequence[WorkInterval]) -> int:
    merged = merge_intervals(intervals)
    return sum(max(0, merged[idx + 1][0] - merged[idx][1]) for idx in range(len(merged) - 1))


def longest_recorded_break(intervals: Sequence[WorkInterval]) -> int:
    merged = merge_intervals(intervals)
    gaps = [merged[idx + 1][0] - merged[idx][1] for idx in range(len(merged) - 1)]
    return max(gaps, default=0)


def find_first_come(events: Sequence[DayEvent]) -> int | None:
    arrivals = [event.minute for event in events if event.direction == BookingDirection.IN]
    return min(arrivals) if arrivals else None


def find_last_go(events: Sequence[DayEvent]) -> int | None:
    departures = [event.minute for event in events if event.direction == BookingDirection.OUT]
    return max(departures) if departures else None


def to_clock_minute(minute: int) -> int:
    """Map a minute on the calculation axis back to a 0..1439 clock minute.

    Midnight at the end of the day (1440) reads as 23:59 so that a shift
    closed at midnight still reports its last minute on the same day.
    """
    if minute == MINUTES_PER_DAY:
        return MINUTES_PER_DAY - 1
    return minute % MINUTES_PER_DAY
