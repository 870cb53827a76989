from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from zeitkonto.models import (
    BookingDirection,
    BookingSource,
    BreakType,
    CreditType,
    DayChangeBehavior,
    NoBookingBehavior,
    PlanType,
    RoundingType,
)


class Booking(BaseModel):
    id: str = Field(min_length=1)
    employee_id: int
    timestamp: datetime
    direction: BookingDirection
    source: BookingSource = BookingSource.DEVICE
    notes: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def booking_date(self) -> date:
        return self.timestamp.date()

    @property
    def clock_minute(self) -> int:
        return self.timestamp.hour * 60 + self.timestamp.minute

    @property
    def is_synthetic(self) -> bool:
        return self.source == BookingSource.SYSTEM


class ToleranceConfig(BaseModel):
    come_plus: int = Field(default=0, ge=0)
    come_minus: int = Field(default=0, ge=0)
    go_plus: int = Field(default=0, ge=0)
    go_minus: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class RoundingConfig(BaseModel):
    rounding_type: RoundingType = RoundingType.NONE
    interval: int = Field(default=0, ge=0)
    # Used by add / subtract instead of the interval.
    add_value: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class BreakConfig(BaseModel):
    break_type: BreakType
    duration: int = Field(gt=0)
    after_work_minutes: int | None = Field(default=None, ge=0)
    start_time: int | None = Field(default=None, ge=0, le=1440)
    end_time: int | None = Field(default=None, ge=0, le=1440)
    minutes_difference: bool = False

    model_config = ConfigDict(frozen=True)


class ShiftDetectionWindows(BaseModel):
    arrive_from: int | None = Field(default=None, ge=0, le=1440)
    arrive_to: int | None = Field(default=None, ge=0, le=1440)
    depart_from: int | None = Field(default=None, ge=0, le=1440)
    depart_to: int | None = Field(default=None, ge=0, le=1440)

    @property
    def has_arrival_window(self) -> bool:
        return self.arrive_from is not None and self.arrive_to is not None

    @property
    def has_departure_window(self) -> bool:
        return self.depart_from is not None and self.depart_to is not None


class DayPlanConfig(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    plan_type: PlanType = PlanType.FIXED
    target_time: int = Field(default=0, ge=0)
    come_from: int | None = Field(default=None, ge=0, le=1440)
    come_to: int | None = Field(default=None, ge=0, le=1440)
    go_from: int | None = Field(default=None, ge=0, le=1440)
    go_to: int | None = Field(default=None, ge=0, le=1440)
    core_start: int | None = Field(default=None, ge=0, le=1440)
    core_end: int | None = Field(default=None, ge=0, le=1440)
    tolerance: ToleranceConfig = Field(default_factory=ToleranceConfig)
    rounding_come: RoundingConfig | None = None
    rounding_go: RoundingConfig | None = None
    round_all_bookings: bool = False
    variable_work_time: bool = False
    day_change_behavior: DayChangeBehavior = DayChangeBehavior.NONE
    breaks: list[BreakConfig] = Field(default_factory=list)
    min_work_time: int | None = Field(default=None, ge=0)
    max_net_work_time: int | None = Field(default=None, ge=0)
    no_booking_behavior: NoBookingBehavior = NoBookingBehavior.ERROR
    shift_detection: ShiftDetectionWindows | None = None
    alternatives: list["ShiftCandidate"] = Field(default_factory=list)

    def has_shift_detection(self) -> bool:
        windows = self.shift_detection
        if windows is not None and (windows.has_arrival_window or windows.has_departure_window):
            return True
        return bool(self.alternatives)


class ShiftCandidate(ShiftDetectionWindows):
    plan: DayPlanConfig

    @property
    def plan_code(self) -> str:
        return self.plan.code


DayPlanConfig.model_rebuild()


class DailyValue(BaseModel):
    employee_id: int
    value_date: date
    gross_time: int = Field(default=0, ge=0)
    net_time: int = Field(default=0, ge=0)
    target_time: int = Field(default=0, ge=0)
    overtime: int = Field(default=0, ge=0)
    undertime: int = Field(default=0, ge=0)
    break_time: int = Field(default=0, ge=0)
    capped_time: int = Field(default=0, ge=0)
    has_error: bool = False
    error_codes: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    first_come: int | None = Field(default=None, ge=0, le=1439)
    last_go: int | None = Field(default=None, ge=0, le=1439)
    booking_count: int = Field(default=0, ge=0)
    plan_code: str | None = None
    calculated_at: datetime
    calculation_version: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _validate_balance(self) -> "DailyValue":
        if self.overtime != max(0, self.net_time - self.target_time):
            raise ValueError("overtime must equal max(0, net_time - target_time)")
        if self.undertime != max(0, self.target_time - self.net_time):
            raise ValueError("undertime must equal max(0, target_time - net_time)")
        if self.has_error != bool(self.error_codes):
            raise ValueError("has_error must be set exactly when error_codes are present")
        return self


class MonthlyEvaluationRules(BaseModel):
    credit_type: CreditType = CreditType.NO_EVALUATION
    flextime_threshold: int | None = Field(default=None, ge=0)
    max_flextime_per_month: int | None = Field(default=None, ge=0)
    flextime_cap_positive: int | None = Field(default=None, ge=0)
    # Stored as a positive magnitude; the balance floor is its negation.
    flextime_cap_negative: int | None = Field(default=None, ge=0)
    annual_floor_balance: int | None = Field(default=None, ge=0)


class AbsenceSummaryInput(BaseModel):
    vacation_days: Decimal = Field(default=Decimal("0"), ge=0)
    sick_days: int = Field(default=0, ge=0)
    other_absence_days: int = Field(default=0, ge=0)


class MonthlyCalcOutput(BaseModel):
    total_gross_time: int = 0
    total_net_time: int = 0
    total_target_time: int = 0
    total_overtime: int = 0
    total_undertime: int = 0
    total_break_time: int = 0

    flextime_start: int = 0
    flextime_change: int = 0
    flextime_raw: int = 0
    flextime_credited: int = 0
    flextime_forfeited: int = 0
    flextime_end: int = 0

    work_days: int = 0
    days_with_errors: int = 0

    vacation_taken: Decimal = Decimal("0")
    sick_days: int = 0
    other_absence_days: int = 0

    warnings: list[str] = Field(default_factory=list)
