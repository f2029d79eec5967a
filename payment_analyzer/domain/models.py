"""Domain models - pure Python dataclasses representing payment analysis entities"""

from dataclasses import dataclass, field, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from payment_analyzer.domain.exceptions import InvalidPaymentRulesError
from payment_analyzer.utils.money import to_decimal


@dataclass(frozen=True)
class PaymentRules:
    """Rate and bonus table applied to every day of an analysis"""

    weekday_rate: Decimal
    saturday_rate: Decimal
    unloading_bonus: Decimal
    attendance_bonus: Decimal
    early_bonus: Decimal

    def __post_init__(self) -> None:
        for rule in fields(self):
            value = to_decimal(getattr(self, rule.name))
            if value < 0:
                raise InvalidPaymentRulesError(f"{rule.name} must be non-negative, got {value}")
            object.__setattr__(self, rule.name, value)

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "PaymentRules":
        """Return a copy with the non-None overrides applied"""
        if not overrides:
            return self
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Decimal]:
        return {rule.name: getattr(self, rule.name) for rule in fields(self)}


def payment_status(difference: Decimal) -> str:
    """balanced when paid matches expected, otherwise overpaid or underpaid"""
    if difference == 0:
        return "balanced"
    return "overpaid" if difference > 0 else "underpaid"


DEFAULT_PAYMENT_RULES = PaymentRules(
    weekday_rate=Decimal("2.00"),
    saturday_rate=Decimal("3.00"),
    unloading_bonus=Decimal("30.00"),
    attendance_bonus=Decimal("25.00"),
    early_bonus=Decimal("50.00"),
)


@dataclass
class DailyRecord:
    """Raw daily input from manual entry or aggregated runsheet/invoice data"""

    date: str
    consignments: Optional[int] = 0
    paid_amount: Optional[Decimal] = Decimal("0")
    pickups: Optional[int] = 0
    pickup_total: Optional[Decimal] = Decimal("0")


@dataclass(frozen=True)
class DayCalculation:
    """Expected vs paid breakdown for a single calendar date"""

    date: str
    day: str
    consignments: int
    rate: Decimal
    base_payment: Decimal
    unloading_bonus: Decimal
    attendance_bonus: Decimal
    early_bonus: Decimal
    total_bonus: Decimal
    pickup_count: int
    pickup_total: Decimal
    expected_total: Decimal
    paid_amount: Decimal
    difference: Decimal

    @property
    def is_working_day(self) -> bool:
        return self.consignments > 0 or self.pickup_total > 0

    @property
    def status(self) -> str:
        return payment_status(self.difference)


@dataclass(frozen=True)
class WeekCalculation:
    """Days sharing the same ISO week (Monday start) with per-week totals"""

    week_start: date
    days: List[DayCalculation]
    total_expected: Decimal
    total_actual: Decimal
    working_days: int
    total_consignments: int
    total_difference: Decimal


@dataclass(frozen=True)
class PaymentTotals:
    """Sums over an arbitrary set of day calculations"""

    working_days: int = 0
    total_consignments: int = 0
    expected_total: Decimal = Decimal("0")
    paid_total: Decimal = Decimal("0")
    difference_total: Decimal = Decimal("0")
    base_total: Decimal = Decimal("0")
    bonus_total: Decimal = Decimal("0")
    unloading_total: Decimal = Decimal("0")
    attendance_total: Decimal = Decimal("0")
    early_total: Decimal = Decimal("0")
    pickup_total: Decimal = Decimal("0")
    pickup_count: int = 0


@dataclass
class ValidationResult:
    """Advisory outcome of business-rule checks; errors block persisting"""

    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class AnalysisSummary:
    """Complete analysis output: days, weekly grouping, totals and period"""

    days: List[DayCalculation]
    weeks: List[WeekCalculation]
    totals: PaymentTotals
    average_daily: Decimal
    overall_status: str
    period_start: Optional[date]
    period_end: Optional[date]
    period_range: str
    rules_version: str
