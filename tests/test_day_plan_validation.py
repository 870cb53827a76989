from __future__ import annotations

import unittest

from zeitkonto.errors import ConfigurationError, InvalidDayPlanError
from zeitkonto.models import BreakType
from zeitkonto.schemas import BreakConfig, DayPlanConfig, ShiftCandidate, ShiftDetectionWindows
from zeitkonto.services.day_plan_validation import is_reserved_plan_code, validate_day_plan


class DayPlanValidationTests(unittest.TestCase):
    def test_valid_plan_is_returned(self) -> None:
        plan = DayPlanConfig(code="F1", come_from=480, come_to=540, go_from=960, go_to=1080)

        self.assertIs(validate_day_plan(plan), plan)

    def test_reserved_codes_are_rejected_case_insensitive(self) -> None:
        for code in ("U", "k", " s "):
            with self.assertRaises(InvalidDayPlanError) as ctx:
                validate_day_plan(DayPlanConfig(code=code))
            self.assertEqual(ctx.exception.code, "RESERVED_PLAN_CODE")
            self.assertEqual(ctx.exception.field, "code")

    def test_reserved_code_helper(self) -> None:
        self.assertTrue(is_reserved_plan_code("u"))
        self.assertFalse(is_reserved_plan_code("US"))

    def test_inverted_come_window(self) -> None:
        with self.assertRaises(InvalidDayPlanError) as ctx:
            validate_day_plan(DayPlanConfig(code="F1", come_from=600, come_to=480))

        self.assertEqual(ctx.exception.code, "INVALID_WINDOW")
        self.assertEqual(ctx.exception.to_dict()["plan_code"], "F1")

    def test_night_plan_is_accepted(self) -> None:
        plan = DayPlanConfig(code="N", come_from=1320, come_to=1380, go_from=300, go_to=360, core_start=1380, core_end=240)

        self.assertIs(validate_day_plan(plan), plan)

    def test_inverted_fixed_break_window(self) -> None:
        plan = DayPlanConfig(
            code="F1",
            breaks=[BreakConfig(break_type=BreakType.FIXED, duration=30, start_time=750, end_time=720)],
        )

        with self.assertRaises(InvalidDayPlanError) as ctx:
            validate_day_plan(plan)

        self.assertEqual(ctx.exception.field, "breaks[0]")

    def test_broken_shift_detection_windows(self) -> None:
        plan = DayPlanConfig(code="F1", shift_detection=ShiftDetectionWindows(arrive_from=420))

        with self.assertRaises(ConfigurationError) as ctx:
            validate_day_plan(plan)

        self.assertEqual(ctx.exception.code, "INVALID_SHIFT_DETECTION")

    def test_alternatives_are_validated(self) -> None:
        plan = DayPlanConfig(
            code="F1",
            alternatives=[ShiftCandidate(plan=DayPlanConfig(code="K"), arrive_from=780, arrive_to=900)],
        )

        with self.assertRaises(InvalidDayPlanError) as ctx:
            validate_day_plan(plan)

        self.assertEqual(ctx.exception.plan_code, "K")


if __name__ == "__main__":
    unittest.main()
