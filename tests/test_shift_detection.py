from __future__ import annotations

import unittest

from zeitkonto.models import ERR_SHIFT_NOT_DETECTED, ShiftMatchType
from zeitkonto.schemas import DayPlanConfig, ShiftCandidate, ShiftDetectionWindows
from zeitkonto.services.shift_detection import (
    detect_shift,
    is_in_time_window,
    match_windows,
    validate_shift_detection_windows,
)


def _plan(code: str, **kwargs) -> DayPlanConfig:  # type: ignore[no-untyped-def]
    return DayPlanConfig(code=code, target_time=480, **kwargs)


class ShiftDetectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.late = _plan("LATE", come_from=840, go_to=1320)
        self.night = _plan("NIGHT", come_from=1320, go_to=360)
        self.early = _plan(
            "EARLY",
            come_from=360,
            go_to=840,
            shift_detection=ShiftDetectionWindows(arrive_from=300, arrive_to=420),
            alternatives=[
                ShiftCandidate(plan=self.late, arrive_from=780, arrive_to=900),
                ShiftCandidate(plan=self.night, arrive_from=1260, arrive_to=1380),
            ],
        )

    def test_assigned_plan_matches_first(self) -> None:
        result = detect_shift(self.early, first_come=360, last_go=840)

        self.assertTrue(result.is_original_plan)
        self.assertEqual(result.plan_code, "EARLY")
        self.assertEqual(result.matched_by, ShiftMatchType.ARRIVAL)
        self.assertFalse(result.has_error)

    def test_alternative_selected_by_arrival(self) -> None:
        result = detect_shift(self.early, first_come=845, last_go=1320)

        self.assertFalse(result.is_original_plan)
        self.assertEqual(result.plan_code, "LATE")

    def test_no_match_falls_back_with_error(self) -> None:
        result = detect_shift(self.early, first_come=600, last_go=1000)

        self.assertEqual(result.plan_code, "EARLY")
        self.assertTrue(result.has_error)
        self.assertEqual(result.error_code, ERR_SHIFT_NOT_DETECTED)

    def test_narrowest_arrival_window_wins(self) -> None:
        wide = _plan("WIDE")
        narrow = _plan("NARROW")
        plan = _plan(
            "BASE",
            alternatives=[
                ShiftCandidate(plan=wide, arrive_from=360, arrive_to=600),
                ShiftCandidate(plan=narrow, arrive_from=450, arrive_to=510),
            ],
        )

        result = detect_shift(plan, first_come=480, last_go=1000)

        self.assertEqual(result.plan_code, "NARROW")

    def test_equal_width_keeps_assigned_plan(self) -> None:
        other = _plan("OTHER")
        plan = _plan(
            "BASE",
            shift_detection=ShiftDetectionWindows(arrive_from=420, arrive_to=540),
            alternatives=[ShiftCandidate(plan=other, arrive_from=420, arrive_to=540)],
        )

        result = detect_shift(plan, first_come=480, last_go=1000)

        self.assertEqual(result.plan_code, "BASE")

    def test_both_windows_must_match_when_configured(self) -> None:
        other = _plan("OTHER")
        plan = _plan(
            "BASE",
            alternatives=[
                ShiftCandidate(plan=other, arrive_from=300, arrive_to=420, depart_from=840, depart_to=900),
            ],
        )

        miss = detect_shift(plan, first_come=360, last_go=960)
        hit = detect_shift(plan, first_come=360, last_go=870)

        self.assertTrue(miss.has_error)
        self.assertEqual(hit.plan_code, "OTHER")
        self.assertEqual(hit.matched_by, ShiftMatchType.BOTH)

    def test_departure_only_window(self) -> None:
        windows = ShiftDetectionWindows(depart_from=900, depart_to=960)

        self.assertEqual(match_windows(windows, first_come=None, last_go=930), ShiftMatchType.DEPARTURE)
        self.assertIsNone(match_windows(windows, first_come=480, last_go=None))

    def test_plan_without_detection_is_returned_as_is(self) -> None:
        plan = _plan("PLAIN", come_from=480)

        result = detect_shift(plan, first_come=200, last_go=300)

        self.assertEqual(result.plan_code, "PLAIN")
        self.assertEqual(result.matched_by, ShiftMatchType.NONE)
        self.assertFalse(result.has_error)

    def test_no_booking_times_keeps_assigned_plan(self) -> None:
        result = detect_shift(self.early, first_come=None, last_go=None)

        self.assertEqual(result.plan_code, "EARLY")
        self.assertFalse(result.has_error)

    def test_window_boundaries_are_inclusive(self) -> None:
        self.assertTrue(is_in_time_window(300, 300, 420))
        self.assertTrue(is_in_time_window(420, 300, 420))
        self.assertFalse(is_in_time_window(421, 300, 420))
        self.assertFalse(is_in_time_window(None, 300, 420))


class ShiftWindowValidationTests(unittest.TestCase):
    def test_valid_windows(self) -> None:
        windows = ShiftDetectionWindows(arrive_from=300, arrive_to=420, depart_from=840, depart_to=900)

        self.assertEqual(validate_shift_detection_windows(windows), [])

    def test_inverted_window(self) -> None:
        problems = validate_shift_detection_windows(ShiftDetectionWindows(arrive_from=500, arrive_to=400))

        self.assertEqual(len(problems), 1)
        self.assertIn("arrive_from", problems[0])

    def test_half_configured_window(self) -> None:
        problems = validate_shift_detection_windows(ShiftDetectionWindows(depart_from=900))

        self.assertEqual(problems, ["depart window needs both from and to"])


if __name__ == "__main__":
    unittest.main()
