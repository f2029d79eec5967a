"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from payment_analyzer.domain.models import (
    AnalysisSummary,
    DailyRecord,
    DayCalculation,
    PaymentRules,
    PaymentTotals,
    ValidationResult,
    WeekCalculation,
)

AnalysisStatus = Literal["pending", "processing", "completed", "error"]


class DailyEntryIn(BaseModel):
    """Single day of driver data (manual entry or aggregated runsheet)"""

    date: str = Field(..., min_length=1, description="Calendar date, YYYY-MM-DD")
    consignments: Optional[int] = Field(0, description="Consignments delivered")
    paid_amount: Optional[Decimal] = Field(Decimal("0"), description="Amount actually paid")
    pickups: Optional[int] = Field(0, description="Number of pickups")
    pickup_total: Optional[Decimal] = Field(Decimal("0"), description="Amount due for pickups")

    def to_record(self) -> DailyRecord:
        return DailyRecord(
            date=self.date,
            consignments=self.consignments,
            paid_amount=self.paid_amount,
            pickups=self.pickups,
            pickup_total=self.pickup_total,
        )


class PaymentRulesIn(BaseModel):
    """Partial rate table; omitted values fall back to the active rules"""

    weekday_rate: Optional[Decimal] = Field(None, ge=0)
    saturday_rate: Optional[Decimal] = Field(None, ge=0)
    unloading_bonus: Optional[Decimal] = Field(None, ge=0)
    attendance_bonus: Optional[Decimal] = Field(None, ge=0)
    early_bonus: Optional[Decimal] = Field(None, ge=0)


class AnalysisMetadataIn(BaseModel):
    description: Optional[str] = None
    notes: Optional[str] = None


class CalculateRequest(BaseModel):
    """Request body for POST /v1/calculate"""

    user_id: Optional[str] = Field(None, min_length=1, description="Apply this user's stored rules")
    entries: List[DailyEntryIn] = Field(..., min_length=1)
    payment_rules: Optional[PaymentRulesIn] = None


class AnalysisRequest(BaseModel):
    """Request body for POST /v1/analysis"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    source: Literal["manual", "upload"] = "manual"
    entries: List[DailyEntryIn] = Field(..., min_length=1)
    payment_rules: Optional[PaymentRulesIn] = None
    metadata: Optional[AnalysisMetadataIn] = None


class PaymentRulesSchema(BaseModel):
    weekday_rate: float
    saturday_rate: float
    unloading_bonus: float
    attendance_bonus: float
    early_bonus: float

    @classmethod
    def from_domain(cls, rules: PaymentRules) -> "PaymentRulesSchema":
        return cls(**{name: float(value) for name, value in rules.as_dict().items()})


class RulesUpdateRequest(BaseModel):
    """Request body for PUT /v1/rules"""

    user_id: str = Field(..., min_length=1)
    payment_rules: PaymentRulesIn


class RulesResponse(BaseModel):
    """Response for GET/PUT /v1/rules"""

    user_id: str
    version: int  # 0 when the user has no stored rules and defaults apply
    payment_rules: PaymentRulesSchema


class DaySchema(BaseModel):
    date: str
    day: str
    consignments: int
    rate: float
    base_payment: float
    unloading_bonus: float
    attendance_bonus: float
    early_bonus: float
    total_bonus: float
    pickup_count: int
    pickup_total: float
    expected_total: float
    paid_amount: float
    difference: float
    status: str

    @classmethod
    def from_domain(cls, day: DayCalculation) -> "DaySchema":
        return cls(
            date=day.date,
            day=day.day,
            consignments=day.consignments,
            rate=float(day.rate),
            base_payment=float(day.base_payment),
            unloading_bonus=float(day.unloading_bonus),
            attendance_bonus=float(day.attendance_bonus),
            early_bonus=float(day.early_bonus),
            total_bonus=float(day.total_bonus),
            pickup_count=day.pickup_count,
            pickup_total=float(day.pickup_total),
            expected_total=float(day.expected_total),
            paid_amount=float(day.paid_amount),
            difference=float(day.difference),
            status=day.status,
        )


class WeekSchema(BaseModel):
    week_start: date
    days: List[DaySchema]
    total_expected: float
    total_actual: float
    working_days: int
    total_consignments: int
    total_difference: float

    @classmethod
    def from_domain(cls, week: WeekCalculation) -> "WeekSchema":
        return cls(
            week_start=week.week_start,
            days=[DaySchema.from_domain(d) for d in week.days],
            total_expected=float(week.total_expected),
            total_actual=float(week.total_actual),
            working_days=week.working_days,
            total_consignments=week.total_consignments,
            total_difference=float(week.total_difference),
        )


class TotalsSchema(BaseModel):
    working_days: int
    total_consignments: int
    expected_total: float
    paid_total: float
    difference_total: float
    base_total: float
    bonus_total: float
    unloading_total: float
    attendance_total: float
    early_total: float
    pickup_total: float
    pickup_count: int

    @classmethod
    def from_domain(cls, totals: PaymentTotals) -> "TotalsSchema":
        return cls(
            working_days=totals.working_days,
            total_consignments=totals.total_consignments,
            expected_total=float(totals.expected_total),
            paid_total=float(totals.paid_total),
            difference_total=float(totals.difference_total),
            base_total=float(totals.base_total),
            bonus_total=float(totals.bonus_total),
            unloading_total=float(totals.unloading_total),
            attendance_total=float(totals.attendance_total),
            early_total=float(totals.early_total),
            pickup_total=float(totals.pickup_total),
            pickup_count=totals.pickup_count,
        )


class ValidationSchema(BaseModel):
    is_valid: bool
    warnings: List[str]
    errors: List[str]

    @classmethod
    def from_domain(cls, result: ValidationResult) -> "ValidationSchema":
        return cls(is_valid=result.is_valid, warnings=result.warnings, errors=result.errors)


class CalculationResponse(BaseModel):
    """Response for POST /v1/calculate"""

    days: List[DaySchema]
    weeks: List[WeekSchema]
    totals: TotalsSchema
    average_daily: float
    overall_status: str
    period_range: str
    rules_version: str
    payment_rules: PaymentRulesSchema
    validation: ValidationSchema

    @classmethod
    def from_domain(
        cls, summary: AnalysisSummary, rules: PaymentRules, validation: ValidationResult
    ) -> "CalculationResponse":
        return cls(
            days=[DaySchema.from_domain(d) for d in summary.days],
            weeks=[WeekSchema.from_domain(w) for w in summary.weeks],
            totals=TotalsSchema.from_domain(summary.totals),
            average_daily=round(float(summary.average_daily), 2),
            overall_status=summary.overall_status,
            period_range=summary.period_range,
            rules_version=summary.rules_version,
            payment_rules=PaymentRulesSchema.from_domain(rules),
            validation=ValidationSchema.from_domain(validation),
        )


class AnalysisCreatedResponse(BaseModel):
    """Response for POST /v1/analysis"""

    analysis_id: str
    working_days: int
    total_consignments: int
    expected_total: float
    paid_total: float
    difference_total: float
    overall_status: str
    period_range: str
    warnings: List[str]


class AnalysisDetailResponse(BaseModel):
    """Response for GET /v1/analysis/{analysis_id}"""

    analysis_id: str
    user_id: str
    source: str
    status: str
    payment_status: str
    overall_status: str
    period_start: date
    period_end: date
    period_range: str
    rules_version: str
    payment_rules: PaymentRulesSchema
    totals: TotalsSchema
    average_daily: float
    days: List[DaySchema]
    weeks: List[WeekSchema]
    metadata: dict
    created_at: str


class HistoryItem(BaseModel):
    """Single analysis in history"""

    analysis_id: str
    source: str
    status: str
    payment_status: str
    period_start: date
    period_end: date
    working_days: int
    total_consignments: int
    expected_total: float
    paid_total: float
    difference_total: float
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/analysis/history"""

    user_id: str
    limit: int
    offset: int
    analyses: List[HistoryItem]


class AnalysisStatusUpdate(BaseModel):
    """Request body for PATCH /v1/analysis/{analysis_id}"""

    status: AnalysisStatus


class AnalysisStatusResponse(BaseModel):
    analysis_id: str
    status: str


class DateRange(BaseModel):
    start: date
    end: date


class ExportRequest(BaseModel):
    """Request body for POST /v1/export"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    format: Literal["csv", "json"] = "csv"
    analysis_ids: Optional[List[str]] = None
    date_range: Optional[DateRange] = None
    filename: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"^[\w.-]+$")
