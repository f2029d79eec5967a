"""Payment rule engine - expected vs paid calculation for delivery driver runsheets"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from payment_analyzer.domain.exceptions import InvalidEntryDataError
from payment_analyzer.domain.models import (
    DEFAULT_PAYMENT_RULES,
    AnalysisSummary,
    DailyRecord,
    DayCalculation,
    PaymentRules,
    PaymentTotals,
    WeekCalculation,
)
from payment_analyzer.utils.date_utils import day_of_week, day_name, format_period_range, parse_iso_date, week_start
from payment_analyzer.utils.money import to_decimal, to_int

ZERO = Decimal("0")

SUNDAY, MONDAY, SATURDAY = 0, 1, 6


def calculate_day_payment(
    day: Union[str, date],
    consignments: Optional[int],
    paid_amount: Optional[Decimal] = None,
    pickup_count: Optional[int] = None,
    pickup_total: Optional[Decimal] = None,
    rules: PaymentRules = DEFAULT_PAYMENT_RULES,
) -> DayCalculation:
    """
    Calculate expected payment for a single day and compare with what was paid.

    Rate table:
    - Per consignment: weekday rate Mon-Fri (and Sunday), Saturday rate on Saturday
    - Unloading bonus: every working day except Monday and Sunday
    - Attendance + early bonus: Monday-Friday only
    - Pickup total is added as supplied, never computed

    Bonuses only apply when consignments > 0; a pickup-only day is worth its
    pickup total. Missing amounts default to 0 and negatives are not rejected
    here (validate_calculations flags them).

    Raises:
        InvalidEntryDataError: date is not a valid YYYY-MM-DD value
    """
    parsed = parse_iso_date(day)
    if parsed is None:
        raise InvalidEntryDataError(f"Invalid date: {day!r}")

    consignments = to_int(consignments)
    paid_amount = to_decimal(paid_amount)
    pickup_count = to_int(pickup_count)
    pickup_total = to_decimal(pickup_total)

    weekday = day_of_week(parsed)
    is_saturday = weekday == SATURDAY
    is_monday = weekday == MONDAY
    is_sunday = weekday == SUNDAY

    rate = rules.saturday_rate if is_saturday else rules.weekday_rate

    base_payment = ZERO
    unloading_bonus = ZERO
    attendance_bonus = ZERO
    early_bonus = ZERO

    if consignments > 0:
        base_payment = consignments * rate
        unloading_bonus = ZERO if (is_monday or is_sunday) else rules.unloading_bonus
        if not is_saturday and not is_sunday:
            attendance_bonus = rules.attendance_bonus
            early_bonus = rules.early_bonus

    total_bonus = unloading_bonus + attendance_bonus + early_bonus
    expected_total = base_payment + total_bonus + pickup_total

    return DayCalculation(
        date=parsed.isoformat(),
        day=day_name(parsed),
        consignments=consignments,
        rate=rate,
        base_payment=base_payment,
        unloading_bonus=unloading_bonus,
        attendance_bonus=attendance_bonus,
        early_bonus=early_bonus,
        total_bonus=total_bonus,
        pickup_count=pickup_count,
        pickup_total=pickup_total,
        expected_total=expected_total,
        paid_amount=paid_amount,
        difference=paid_amount - expected_total,
    )


def calculate_totals(days: Iterable[DayCalculation]) -> PaymentTotals:
    """Sum every numeric field; working days are days with consignments or pickups"""
    totals = PaymentTotals()
    for day in days:
        totals = PaymentTotals(
            working_days=totals.working_days + (1 if day.is_working_day else 0),
            total_consignments=totals.total_consignments + day.consignments,
            expected_total=totals.expected_total + day.expected_total,
            paid_total=totals.paid_total + day.paid_amount,
            difference_total=totals.difference_total + day.difference,
            base_total=totals.base_total + day.base_payment,
            bonus_total=totals.bonus_total + day.total_bonus,
            unloading_total=totals.unloading_total + day.unloading_bonus,
            attendance_total=totals.attendance_total + day.attendance_bonus,
            early_total=totals.early_total + day.early_bonus,
            pickup_total=totals.pickup_total + day.pickup_total,
            pickup_count=totals.pickup_count + day.pickup_count,
        )
    return totals


def group_by_weeks(days: Iterable[DayCalculation]) -> List[WeekCalculation]:
    """
    Group days by ISO week (Monday start) with per-week totals.

    Weeks are returned oldest first and days within a week are sorted by date.
    Days with an unparseable date are skipped with a warning instead of
    failing the whole grouping.
    """
    week_groups: Dict[date, List[DayCalculation]] = {}

    for day in days:
        parsed = parse_iso_date(day.date)
        if parsed is None:
            logging.warning(f"Skipping day with invalid date: {day.date!r}", extra={"step": "group_by_weeks"})
            continue
        week_groups.setdefault(week_start(parsed), []).append(day)

    weeks = []
    for monday in sorted(week_groups):
        week_days = sorted(week_groups[monday], key=lambda d: parse_iso_date(d.date))

        total_expected = sum((d.expected_total for d in week_days), ZERO)
        total_actual = sum((d.paid_amount for d in week_days), ZERO)

        weeks.append(
            WeekCalculation(
                week_start=monday,
                days=week_days,
                total_expected=total_expected,
                total_actual=total_actual,
                working_days=sum(1 for d in week_days if d.is_working_day),
                total_consignments=sum(d.consignments for d in week_days),
                total_difference=total_actual - total_expected,
            )
        )

    return weeks


def process_daily_records(
    records: Iterable[DailyRecord],
    rules: PaymentRules = DEFAULT_PAYMENT_RULES,
) -> List[DayCalculation]:
    """
    Convert raw daily records (manual entry or aggregated PDFs) into day calculations.

    Records are keyed by normalised date, so when a date appears twice the
    later record wins. Records with an unparseable date are skipped.
    """
    by_date: Dict[date, DailyRecord] = {}

    for record in records:
        parsed = parse_iso_date(record.date)
        if parsed is None:
            logging.warning(f"Skipping record with invalid date: {record.date!r}", extra={"step": "process_daily_records"})
            continue
        if parsed in by_date:
            logging.warning(f"Duplicate record for {parsed.isoformat()}, keeping the latest", extra={"step": "process_daily_records"})
        by_date[parsed] = record

    return [
        calculate_day_payment(
            day,
            by_date[day].consignments,
            by_date[day].paid_amount,
            by_date[day].pickups,
            by_date[day].pickup_total,
            rules,
        )
        for day in sorted(by_date)
    ]


def generate_analysis_summary(days: List[DayCalculation], rules_version: str) -> AnalysisSummary:
    """
    Main entry point: aggregate day calculations into totals, weeks and period.

    The period covers days that carry consignments or pay; average daily is
    expected total per working day.
    """
    totals = calculate_totals(days)
    weeks = group_by_weeks(days)

    average_daily = totals.expected_total / totals.working_days if totals.working_days > 0 else ZERO
    overall_status = (
        "Payment Complete - Favorable"
        if totals.difference_total >= 0
        else "Payment Incomplete - Review Required"
    )

    active_dates = sorted(
        parsed
        for parsed in (parse_iso_date(d.date) for d in days if d.consignments > 0 or d.paid_amount > 0)
        if parsed is not None
    )
    period_start = active_dates[0] if active_dates else None
    period_end = active_dates[-1] if active_dates else None

    return AnalysisSummary(
        days=days,
        weeks=weeks,
        totals=totals,
        average_daily=average_daily,
        overall_status=overall_status,
        period_start=period_start,
        period_end=period_end,
        period_range=format_period_range(period_start, period_end),
        rules_version=rules_version,
    )
