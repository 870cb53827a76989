from __future__ import annotations

from datetime import date, datetime, timezone
import unittest

from zeitkonto.models import WARN_DAY_CHANGE_SPLIT, BookingDirection, BookingSource, DayChangeBehavior
from zeitkonto.schemas import Booking
from zeitkonto.services.day_change import AUTO_COMPLETE_NOTE, required_booking_window, resolve_day_events

DAY_1 = date(2026, 3, 2)
DAY_2 = date(2026, 3, 3)


def _booking(booking_id: str, day: date, hour: int, minute: int, direction: BookingDirection) -> Booking:
    return Booking(
        id=booking_id,
        employee_id=7,
        timestamp=datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc),
        direction=direction,
    )


def _night_shift() -> list[Booking]:
    return [
        _booking("in-1", DAY_1, 22, 0, BookingDirection.IN),
        _booking("out-1", DAY_2, 6, 0, BookingDirection.OUT),
    ]


def _minutes(result) -> list[tuple[str, int]]:  # type: ignore[no-untyped-def]
    return [(event.booking_id, event.minute) for event in result.events]


class DayChangeTests(unittest.TestCase):
    def test_required_booking_window(self) -> None:
        self.assertEqual(required_booking_window(DAY_2, DayChangeBehavior.NONE), (DAY_2, DAY_2))
        self.assertEqual(
            required_booking_window(DAY_2, DayChangeBehavior.AUTO_COMPLETE),
            (DAY_1, date(2026, 3, 4)),
        )

    def test_none_uses_only_own_day(self) -> None:
        day_1 = resolve_day_events(DAY_1, DayChangeBehavior.NONE, _night_shift())
        day_2 = resolve_day_events(DAY_2, DayChangeBehavior.NONE, _night_shift())

        self.assertEqual(_minutes(day_1), [("in-1", 1320)])
        self.assertEqual(_minutes(day_2), [("out-1", 360)])

    def test_at_arrival_attributes_pair_to_arrival_day(self) -> None:
        day_1 = resolve_day_events(DAY_1, DayChangeBehavior.AT_ARRIVAL, _night_shift())
        day_2 = resolve_day_events(DAY_2, DayChangeBehavior.AT_ARRIVAL, _night_shift())

        self.assertEqual(_minutes(day_1), [("in-1", 1320), ("out-1", 1800)])
        self.assertEqual(day_2.events, ())

    def test_at_departure_attributes_pair_to_departure_day(self) -> None:
        day_1 = resolve_day_events(DAY_1, DayChangeBehavior.AT_DEPARTURE, _night_shift())
        day_2 = resolve_day_events(DAY_2, DayChangeBehavior.AT_DEPARTURE, _night_shift())

        self.assertEqual(day_1.events, ())
        self.assertEqual(_minutes(day_2), [("in-1", -120), ("out-1", 360)])

    def test_auto_complete_splits_at_midnight(self) -> None:
        day_1 = resolve_day_events(DAY_1, DayChangeBehavior.AUTO_COMPLETE, _night_shift())
        day_2 = resolve_day_events(DAY_2, DayChangeBehavior.AUTO_COMPLETE, _night_shift())

        self.assertEqual(_minutes(day_1), [("in-1", 1320), ("in-1:auto-go", 1440)])
        self.assertEqual(_minutes(day_2), [("out-1:auto-come", 0), ("out-1", 360)])
        self.assertEqual(day_1.warnings, (WARN_DAY_CHANGE_SPLIT,))

        synthetic = day_1.synthetic_bookings[0]
        self.assertEqual(synthetic.source, BookingSource.SYSTEM)
        self.assertEqual(synthetic.direction, BookingDirection.OUT)
        self.assertEqual(synthetic.notes, AUTO_COMPLETE_NOTE)
        self.assertEqual(synthetic.timestamp, datetime(2026, 3, 3, 0, 0, tzinfo=timezone.utc))
        self.assertTrue(day_2.events[0].synthetic)

    def test_same_day_pairs_are_untouched(self) -> None:
        bookings = [
            _booking("a", DAY_1, 8, 0, BookingDirection.IN),
            _booking("b", DAY_1, 16, 0, BookingDirection.OUT),
        ]

        result = resolve_day_events(DAY_1, DayChangeBehavior.AUTO_COMPLETE, bookings)

        self.assertEqual(_minutes(result), [("a", 480), ("b", 960)])
        self.assertEqual(result.synthetic_bookings, ())
        self.assertEqual(result.warnings, ())

    def test_stored_split_bookings_are_rebuilt_not_reused(self) -> None:
        first = resolve_day_events(DAY_1, DayChangeBehavior.AUTO_COMPLETE, _night_shift())
        second_day = resolve_day_events(DAY_2, DayChangeBehavior.AUTO_COMPLETE, _night_shift())
        stored = _night_shift() + list(first.synthetic_bookings) + list(second_day.synthetic_bookings)

        again = resolve_day_events(DAY_1, DayChangeBehavior.AUTO_COMPLETE, stored)

        self.assertEqual(_minutes(again), _minutes(first))
        self.assertEqual(again.synthetic_bookings, first.synthetic_bookings)

    def test_bookings_outside_three_day_window_are_ignored(self) -> None:
        bookings = _night_shift() + [_booking("far", date(2026, 3, 10), 8, 0, BookingDirection.IN)]

        result = resolve_day_events(DAY_1, DayChangeBehavior.AT_ARRIVAL, bookings)

        self.assertEqual(result.booking_count, 2)


if __name__ == "__main__":
    unittest.main()
