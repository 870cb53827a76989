from __future__ import annotations

import unittest

from zeitkonto.models import WARN_CROSS_MIDNIGHT, BookingDirection
from zeitkonto.services.pairing import (
    DayEvent,
    calculate_gross_time,
    calculate_recorded_break_time,
    find_first_come,
    find_last_go,
    longest_recorded_break,
    pair_events,
    to_clock_minute,
)

IN = BookingDirection.IN
OUT = BookingDirection.OUT


def _events(*items: tuple[str, BookingDirection, int]) -> list[DayEvent]:
    return [DayEvent(booking_id=booking_id, direction=direction, minute=minute) for booking_id, direction, minute in items]


class PairingTests(unittest.TestCase):
    def test_simple_pair(self) -> None:
        result = pair_events(_events(("a", IN, 480), ("b", OUT, 1020)))

        self.assertEqual(len(result.intervals), 1)
        self.assertEqual(result.intervals[0].duration, 540)
        self.assertEqual(result.unpaired_in_ids, ())
        self.assertEqual(result.unpaired_out_ids, ())
        self.assertFalse(result.has_overlap)

    def test_two_pairs_with_recorded_break(self) -> None:
        result = pair_events(
            _events(("a", IN, 480), ("b", OUT, 720), ("c", IN, 750), ("d", OUT, 1020))
        )

        self.assertEqual(calculate_gross_time(result.intervals), 510)
        self.assertEqual(calculate_recorded_break_time(result.intervals), 30)
        self.assertEqual(longest_recorded_break(result.intervals), 30)

    def test_unpaired_arrival(self) -> None:
        result = pair_events(_events(("a", IN, 480)))

        self.assertEqual(result.intervals, ())
        self.assertEqual(result.unpaired_in_ids, ("a",))

    def test_departure_before_any_arrival_is_unpaired(self) -> None:
        result = pair_events(_events(("x", OUT, 400), ("a", IN, 480), ("b", OUT, 600)))

        self.assertEqual(result.unpaired_out_ids, ("x",))
        self.assertEqual(result.intervals[0].go_id, "b")

    def test_overlapping_pairs_are_flagged_and_counted_once(self) -> None:
        result = pair_events(
            _events(("a", IN, 480), ("b", IN, 500), ("c", OUT, 600), ("d", OUT, 700))
        )

        self.assertTrue(result.has_overlap)
        self.assertEqual(calculate_gross_time(result.intervals), 220)

    def test_cross_midnight_interval_warns(self) -> None:
        result = pair_events(_events(("a", IN, 1320), ("b", OUT, 1800)))

        self.assertIn(WARN_CROSS_MIDNIGHT, result.warnings)
        self.assertTrue(result.intervals[0].crosses_midnight)

    def test_interval_ending_at_midnight_does_not_cross(self) -> None:
        result = pair_events(_events(("a", IN, 1320), ("b", OUT, 1440)))

        self.assertEqual(result.warnings, ())

    def test_first_come_and_last_go(self) -> None:
        events = _events(("a", IN, 480), ("b", OUT, 720), ("c", IN, 750), ("d", OUT, 1020))

        self.assertEqual(find_first_come(events), 480)
        self.assertEqual(find_last_go(events), 1020)
        self.assertIsNone(find_last_go(_events(("a", IN, 480))))

    def test_clock_minute_mapping(self) -> None:
        self.assertEqual(to_clock_minute(1440), 1439)
        self.assertEqual(to_clock_minute(-120), 1320)
        self.assertEqual(to_clock_minute(1500), 60)
        self.assertEqual(to_clock_minute(0), 0)


if __name__ == "__main__":
    unittest.main()
