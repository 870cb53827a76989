from __future__ import annotations

import enum


class BookingDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class BookingSource(str, enum.Enum):
    DEVICE = "device"
    MANUAL = "manual"
    CORRECTION = "correction"
    SYSTEM = "system"


class PlanType(str, enum.Enum):
    FIXED = "fixed"
    FLEXTIME = "flextime"


class RoundingType(str, enum.Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"
    NEAREST = "nearest"
    ADD = "add"
    SUBTRACT = "subtract"


class BreakType(str, enum.Enum):
    FIXED = "fixed"
    MINIMUM = "minimum"
    VARIABLE = "variable"


class DayChangeBehavior(str, enum.Enum):
    NONE = "none"
    AT_ARRIVAL = "at_arrival"
    AT_DEPARTURE = "at_departure"
    AUTO_COMPLETE = "auto_complete"


class NoBookingBehavior(str, enum.Enum):
    ERROR = "error"
    ADOPT_TARGET = "adopt_target"
    DEDUCT_TARGET = "deduct_target"


class CreditType(str, enum.Enum):
    NO_EVALUATION = "no_evaluation"
    COMPLETE_CARRYOVER = "complete_carryover"
    AFTER_THRESHOLD = "after_threshold"
    NO_CARRYOVER = "no_carryover"


class CappingSource(str, enum.Enum):
    EARLY_ARRIVAL = "early_arrival"
    LATE_LEAVE = "late_leave"
    MAX_NET_TIME = "max_net_time"


class ShiftMatchType(str, enum.Enum):
    NONE = "none"
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    BOTH = "both"


MINUTES_PER_DAY = 24 * 60

# Daily error codes
ERR_NO_BOOKINGS = "NO_BOOKINGS"
ERR_MISSING_COME = "MISSING_COME"
ERR_MISSING_GO = "MISSING_GO"
ERR_OVERLAPPING_BOOKINGS = "OVERLAPPING_BOOKINGS"
ERR_SHIFT_NOT_DETECTED = "SHIFT_NOT_DETECTED"
ERR_EARLY_COME = "EARLY_COME"
ERR_LATE_COME = "LATE_COME"
ERR_EARLY_GO = "EARLY_GO"
ERR_LATE_GO = "LATE_GO"
ERR_MISSED_CORE_START = "MISSED_CORE_START"
ERR_MISSED_CORE_END = "MISSED_CORE_END"
ERR_BELOW_MIN_WORK_TIME = "BELOW_MIN_WORK_TIME"

# Daily warning codes
WARN_CROSS_MIDNIGHT = "CROSS_MIDNIGHT"
WARN_MAX_TIME_REACHED = "MAX_TIME_REACHED"
WARN_MANUAL_BREAK = "MANUAL_BREAK"
WARN_NO_BREAK_RECORDED = "NO_BREAK_RECORDED"
WARN_AUTO_BREAK_APPLIED = "AUTO_BREAK_APPLIED"
WARN_WINDOW_CAPPED = "WINDOW_CAPPED"
WARN_DAY_CHANGE_SPLIT = "DAY_CHANGE_SPLIT"
WARN_NO_BOOKINGS_CREDITED = "NO_BOOKINGS_CREDITED"
WARN_NO_BOOKINGS_DEDUCTED = "NO_BOOKINGS_DEDUCTED"

# Monthly warning codes
WARN_MONTHLY_CAP_REACHED = "MONTHLY_CAP_REACHED"
WARN_FLEXTIME_CAPPED = "FLEXTIME_CAPPED"
WARN_BELOW_THRESHOLD = "BELOW_THRESHOLD"
WARN_NO_CARRYOVER = "NO_CARRYOVER"

# Day plan codes reserved for absence-day shorthand.
RESERVED_DAY_PLAN_CODES = frozenset({"U", "K", "S"})
