from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable

from zeitkonto.models import (
    MINUTES_PER_DAY,
    WARN_DAY_CHANGE_SPLIT,
    BookingDirection,
    BookingSource,
    DayChangeBehavior,
)
from zeitkonto.schemas import Booking
from zeitkonto.services.pairing import DayEvent

logger = logging.getLogger("zeitkonto.day_change")

AUTO_COMPLETE_NOTE = "Auto-complete day change"


@dataclass(frozen=True)
class _PlacedBooking:
    booking: Booking
    offset: int

    @property
    def absolute_minute(self) -> int:
        return self.offset * MINUTES_PER_DAY + self.booking.clock_minute


@dataclass(frozen=True)
class DayChangeResult:
    events: tuple[DayEvent, ...]
    synthetic_bookings: tuple[Booking, ...]
    warnings: tuple[str, ...]

    @property
    def booking_count(self) -> int:
        return len(self.events)


def required_booking_window(day: date, behavior: DayChangeBehavior) -> tuple[date, date]:
    if behavior == DayChangeBehavior.NONE:
        return day, day
    return day - timedelta(days=1), day + timedelta(days=1)


def _place(value_date: date, bookings: Iterable[Booking], *, max_offset: int) -> list[_PlacedBooking]:
    placed: list[_PlacedBooking] = []
    for booking in bookings:
        offset = (booking.booking_date - value_date).days
        if abs(offset) > max_offset:
            continue
        placed.append(_PlacedBooking(booking=booking, offset=offset))
    placed.sort(key=lambda item: (item.absolute_minute, item.booking.id))
    return placed


def _cross_day_pairs(placed: list[_PlacedBooking]) -> list[tuple[_PlacedBooking, _PlacedBooking]]:
    """Pair departures with the oldest open arrival across the three-day axis."""
    open_arrivals: deque[_PlacedBooking] = deque()
    pairs: list[tuple[_PlacedBooking, _PlacedBooking]] = []
    for item in placed:
        if item.booking.direction == BookingDirection.IN:
            open_arrivals.append(item)
        elif open_arrivals:
            come = open_arrivals.popleft()
            if come.offset != item.offset:
                pairs.append((come, item))
    return pairs


def _event(item: _PlacedBooking) -> DayEvent:
    return DayEvent(
        booking_id=item.booking.id,
        direction=item.booking.direction,
        minute=item.absolute_minute,
        synthetic=item.booking.is_synthetic,
    )


def _is_stored_split(booking: Booking) -> bool:
    return booking.is_synthetic and booking.notes == AUTO_COMPLETE_NOTE


def _synthetic_booking(
    origin: Booking,
    *,
    direction: BookingDirection,
    value_date: date,
    suffix: str,
) -> Booking:
    return Booking(
        id=f"{origin.id}:{suffix}",
        employee_id=origin.employee_id,
        timestamp=datetime.combine(value_date, time(0, 0), tzinfo=origin.timestamp.tzinfo),
        direction=direction,
        source=BookingSource.SYSTEM,
        notes=AUTO_COMPLETE_NOTE,
    )


def resolve_day_events(
    value_date: date,
    behavior: DayChangeBehavior,
    bookings: Iterable[Booking],
) -> DayChangeResult:
    """Assemble the events that belong to ``value_date`` under ``behavior``.

    Bookings of the previous and next day are only looked at when the
    behavior is not ``none``; for ``none`` they are ignored entirely.
    Split bookings stored by an earlier run are rebuilt, not read back.
    """
    bookings = [booking for booking in bookings if not _is_stored_split(booking)]
    if behavior == DayChangeBehavior.NONE:
        placed = _place(value_date, bookings, max_offset=0)
        return DayChangeResult(
            events=tuple(_event(item) for item in placed),
            synthetic_bookings=(),
            warnings=(),
        )

    placed = _place(value_date, bookings, max_offset=1)
    cross_pairs = _cross_day_pairs(placed)

    included = {item.booking.id: item for item in placed if item.offset == 0}
    extra_events: list[DayEvent] = []
    synthetic: list[Booking] = []

    for come, go in cross_pairs:
        starts_today = come.offset == 0 and go.offset == 1
        ends_today = come.offset == -1 and go.offset == 0
        if not starts_today and not ends_today:
            continue

        if behavior == DayChangeBehavior.AT_ARRIVAL:
            if starts_today:
                extra_events.append(_event(go))
            else:
                included.pop(go.booking.id, None)
        elif behavior == DayChangeBehavior.AT_DEPARTURE:
            if ends_today:
                extra_events.append(_event(come))
            else:
                included.pop(come.booking.id, None)
        elif behavior == DayChangeBehavior.AUTO_COMPLETE:
            if starts_today:
                split = _synthetic_booking(
                    come.booking,
                    direction=BookingDirection.OUT,
                    value_date=value_date + timedelta(days=1),
                    suffix="auto-go",
                )
                minute = MINUTES_PER_DAY
            else:
                split = _synthetic_booking(
                    go.booking,
                    direction=BookingDirection.IN,
                    value_date=value_date,
                    suffix="auto-come",
                )
                minute = 0
            synthetic.append(split)
            extra_events.append(
                DayEvent(booking_id=split.id, direction=split.direction, minute=minute, synthetic=True)
            )

    events = [_event(item) for item in included.values()] + extra_events
    events.sort(key=lambda event: (event.minute, event.booking_id))

    warnings: tuple[str, ...] = ()
    if synthetic:
        warnings = (WARN_DAY_CHANGE_SPLIT,)
        logger.debug(
            "day_change_split",
            extra={
                "value_date": value_date.isoformat(),
                "synthetic_count": len(synthetic),
            },
        )

    return DayChangeResult(
        events=tuple(events),
        synthetic_bookings=tuple(synthetic),
        warnings=warnings,
    )
