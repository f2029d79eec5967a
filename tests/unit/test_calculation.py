"""Unit tests for the payment rule engine"""

import logging
import random
from datetime import date
from decimal import Decimal

import pytest

from payment_analyzer.domain.calculation import (
    calculate_day_payment,
    calculate_totals,
    generate_analysis_summary,
    group_by_weeks,
    process_daily_records,
)
from payment_analyzer.domain.exceptions import InvalidEntryDataError
from payment_analyzer.domain.models import DailyRecord, DayCalculation


def test_calculate_day_payment_wednesday(rules):
    """Weekday: rate £2 plus all three bonuses"""
    day = calculate_day_payment("2025-03-05", 10, Decimal("150"), 0, Decimal("0"), rules)

    assert day.day == "Wednesday"
    assert day.rate == Decimal("2.00")
    assert day.base_payment == Decimal("20.00")
    assert day.unloading_bonus == Decimal("30.00")
    assert day.attendance_bonus == Decimal("25.00")
    assert day.early_bonus == Decimal("50.00")
    assert day.total_bonus == Decimal("105.00")
    assert day.expected_total == Decimal("125.00")
    assert day.difference == Decimal("25.00")
    assert day.status == "overpaid"


def test_calculate_day_payment_saturday(rules):
    """Saturday: £3 rate, unloading bonus only"""
    day = calculate_day_payment("2025-03-08", 10, Decimal("30"), rules=rules)

    assert day.day == "Saturday"
    assert day.rate == Decimal("3.00")
    assert day.base_payment == Decimal("30.00")
    assert day.unloading_bonus == Decimal("30.00")
    assert day.attendance_bonus == 0
    assert day.early_bonus == 0
    assert day.expected_total == Decimal("60.00")
    assert day.difference == Decimal("-30.00")
    assert day.status == "underpaid"


def test_calculate_day_payment_monday_has_no_unloading_bonus(rules):
    day = calculate_day_payment("2025-03-03", 5, Decimal("0"), rules=rules)

    assert day.day == "Monday"
    assert day.base_payment == Decimal("10.00")
    assert day.unloading_bonus == 0
    assert day.attendance_bonus == Decimal("25.00")
    assert day.early_bonus == Decimal("50.00")
    assert day.expected_total == Decimal("85.00")


def test_calculate_day_payment_sunday_uses_weekday_rate_without_bonuses(rules):
    """Sunday work is unusual: weekday rate, no bonus of any kind"""
    day = calculate_day_payment("2025-03-09", 4, Decimal("8"), rules=rules)

    assert day.day == "Sunday"
    assert day.rate == Decimal("2.00")
    assert day.base_payment == Decimal("8.00")
    assert day.total_bonus == 0
    assert day.difference == 0
    assert day.status == "balanced"


def test_calculate_day_payment_sunday_rest_day(rules):
    day = calculate_day_payment("2025-03-09", 0, rules=rules)

    assert day.base_payment == 0
    assert day.expected_total == 0


def test_calculate_day_payment_pickups_only(rules):
    """No consignments: bonuses do not apply, only the pickup total counts"""
    day = calculate_day_payment("2025-03-05", 0, Decimal("12.50"), 3, Decimal("12.50"), rules)

    assert day.base_payment == 0
    assert day.total_bonus == 0
    assert day.pickup_count == 3
    assert day.expected_total == Decimal("12.50")
    assert day.difference == 0
    assert day.is_working_day


def test_calculate_day_payment_pickups_added_to_expected(rules):
    day = calculate_day_payment("2025-03-05", 10, Decimal("140"), 2, Decimal("15"), rules)

    assert day.expected_total == Decimal("140.00")
    assert day.difference == 0


def test_calculate_day_payment_missing_values_default_to_zero(rules):
    day = calculate_day_payment("2025-03-05", None, None, None, None, rules)

    assert day.consignments == 0
    assert day.paid_amount == 0
    assert day.pickup_count == 0
    assert day.expected_total == 0
    assert not day.is_working_day


def test_calculate_day_payment_negative_consignments_flow_through(rules):
    """Negatives are not rejected here; validation flags them"""
    day = calculate_day_payment("2025-03-05", -3, Decimal("0"), rules=rules)

    assert day.consignments == -3
    assert day.base_payment == 0
    assert day.expected_total == 0


def test_calculate_day_payment_accepts_date_objects(rules):
    day = calculate_day_payment(date(2025, 3, 4), 1, rules=rules)
    assert day.date == "2025-03-04"
    assert day.day == "Tuesday"


def test_calculate_day_payment_invalid_date(rules):
    with pytest.raises(InvalidEntryDataError):
        calculate_day_payment("2025-02-30", 10, rules=rules)


@pytest.mark.parametrize("day_str", ["2025-03-03", "2025-03-04", "2025-03-07", "2025-03-08", "2025-03-09"])
@pytest.mark.parametrize("consignments", [0, 1, 17])
def test_expected_total_identity(rules, day_str, consignments):
    day = calculate_day_payment(day_str, consignments, Decimal("99.99"), 1, Decimal("4.20"), rules)

    assert day.expected_total == (
        day.base_payment + day.unloading_bonus + day.attendance_bonus + day.early_bonus + day.pickup_total
    )
    assert day.difference == day.paid_amount - day.expected_total


def test_calculate_totals(rules, sample_week):
    days = process_daily_records(sample_week, rules)
    totals = calculate_totals(days)

    assert totals.working_days == 6
    assert totals.total_consignments == 55
    assert totals.expected_total == Decimal("645.00")
    assert totals.paid_total == Decimal("635.00")
    assert totals.difference_total == Decimal("-10.00")
    assert totals.base_total == Decimal("120.00")
    assert totals.unloading_total == Decimal("150.00")  # Tue-Sat
    assert totals.attendance_total == Decimal("125.00")  # Mon-Fri
    assert totals.early_total == Decimal("250.00")
    assert totals.bonus_total == totals.unloading_total + totals.attendance_total + totals.early_total


def test_calculate_totals_empty():
    totals = calculate_totals([])
    assert totals.working_days == 0
    assert totals.expected_total == 0


def test_calculate_totals_order_independent(rules, sample_week):
    days = process_daily_records(sample_week, rules)
    shuffled = list(days)
    random.Random(7).shuffle(shuffled)

    assert calculate_totals(shuffled) == calculate_totals(days)


def test_group_by_weeks_sunday_belongs_to_previous_monday(rules):
    days = [
        calculate_day_payment("2025-03-09", 0, rules=rules),  # Sunday
        calculate_day_payment("2025-03-10", 5, rules=rules),  # next Monday
        calculate_day_payment("2025-03-03", 5, rules=rules),
    ]

    weeks = group_by_weeks(days)

    assert [w.week_start for w in weeks] == [date(2025, 3, 3), date(2025, 3, 10)]
    assert [d.date for d in weeks[0].days] == ["2025-03-03", "2025-03-09"]
    assert [d.date for d in weeks[1].days] == ["2025-03-10"]


def test_group_by_weeks_totals(rules, sample_week):
    days = process_daily_records(sample_week, rules)
    weeks = group_by_weeks(days)

    assert len(weeks) == 1
    week = weeks[0]
    assert week.total_expected == Decimal("645.00")
    assert week.total_actual == Decimal("635.00")
    assert week.total_difference == Decimal("-10.00")
    assert week.working_days == 6
    assert week.total_consignments == 55


def test_group_by_weeks_crosses_year_boundary(rules):
    """Wed 1 Jan 2025 belongs to the week starting Mon 30 Dec 2024"""
    days = [calculate_day_payment("2025-01-01", 3, rules=rules), calculate_day_payment("2024-12-30", 3, rules=rules)]

    weeks = group_by_weeks(days)

    assert len(weeks) == 1
    assert weeks[0].week_start == date(2024, 12, 30)
    assert [d.date for d in weeks[0].days] == ["2024-12-30", "2025-01-01"]


def test_group_by_weeks_skips_invalid_dates(rules, caplog):
    good = calculate_day_payment("2025-03-05", 10, rules=rules)
    bad = DayCalculation(
        date="not-a-date",
        day="Wednesday",
        consignments=1,
        rate=Decimal("2"),
        base_payment=Decimal("2"),
        unloading_bonus=Decimal("0"),
        attendance_bonus=Decimal("0"),
        early_bonus=Decimal("0"),
        total_bonus=Decimal("0"),
        pickup_count=0,
        pickup_total=Decimal("0"),
        expected_total=Decimal("2"),
        paid_amount=Decimal("2"),
        difference=Decimal("0"),
    )

    with caplog.at_level(logging.WARNING):
        weeks = group_by_weeks([bad, good])

    assert len(weeks) == 1
    assert weeks[0].days == [good]
    assert "not-a-date" in caplog.text


def test_group_by_weeks_round_trip(rules):
    """Flattening weeks reproduces the input days: nothing lost, nothing duplicated"""
    records = [
        DailyRecord(date=f"2025-02-{n:02d}", consignments=n % 4, paid_amount=Decimal(n))
        for n in range(1, 29)
    ]
    days = process_daily_records(records, rules)
    shuffled = list(days)
    random.Random(3).shuffle(shuffled)

    flattened = [d for week in group_by_weeks(shuffled) for d in week.days]

    assert sorted(flattened, key=lambda d: d.date) == days
    assert len(flattened) == len(days)


def test_process_daily_records_sorts_and_normalises(rules):
    records = [
        DailyRecord(date="2025-03-05T00:00:00", consignments=10),
        DailyRecord(date="2025-03-04", consignments=None, paid_amount=None),
    ]

    days = process_daily_records(records, rules)

    assert [d.date for d in days] == ["2025-03-04", "2025-03-05"]
    assert days[0].consignments == 0


def test_process_daily_records_skips_invalid_dates(rules, caplog):
    records = [DailyRecord(date="31/02/2025", consignments=5), DailyRecord(date="2025-03-05", consignments=5)]

    with caplog.at_level(logging.WARNING):
        days = process_daily_records(records, rules)

    assert [d.date for d in days] == ["2025-03-05"]
    assert "31/02/2025" in caplog.text


def test_process_daily_records_skips_dates_with_trailing_text(rules, caplog):
    records = [DailyRecord(date="2025-03-05garbage", consignments=5), DailyRecord(date="2025-03-06", consignments=5)]

    with caplog.at_level(logging.WARNING):
        days = process_daily_records(records, rules)

    assert [d.date for d in days] == ["2025-03-06"]
    assert "2025-03-05garbage" in caplog.text


def test_calculate_day_payment_rounds_amounts_to_pence(rules):
    result = calculate_day_payment("2025-03-05", 10, paid_amount=Decimal("125.004"), pickup_total=Decimal("4.995"))

    assert result.paid_amount == Decimal("125.00")
    assert result.pickup_total == Decimal("5.00")
    assert result.expected_total == Decimal("130.00")
    assert result.difference == Decimal("-5.00")


def test_process_daily_records_last_duplicate_wins(rules):
    records = [
        DailyRecord(date="2025-03-05", consignments=5),
        DailyRecord(date="2025-03-05", consignments=8),
    ]

    days = process_daily_records(records, rules)

    assert len(days) == 1
    assert days[0].consignments == 8


def test_generate_analysis_summary(rules, sample_week):
    days = process_daily_records(sample_week, rules)

    summary = generate_analysis_summary(days, "9.0.0")

    assert summary.totals.working_days == 6
    assert len(summary.weeks) == 1
    assert summary.average_daily == Decimal("645.00") / 6
    assert summary.overall_status == "Payment Incomplete - Review Required"
    # Sunday carries neither work nor pay so the period ends on Saturday
    assert summary.period_start == date(2025, 3, 3)
    assert summary.period_end == date(2025, 3, 8)
    assert summary.period_range == "03/03/2025 - 08/03/2025"
    assert summary.rules_version == "9.0.0"


def test_generate_analysis_summary_favorable_when_balanced(rules):
    days = [calculate_day_payment("2025-03-05", 10, Decimal("125"), rules=rules)]

    summary = generate_analysis_summary(days, "9.0.0")

    assert summary.overall_status == "Payment Complete - Favorable"
    assert summary.period_range == "05/03/2025"


def test_generate_analysis_summary_empty():
    summary = generate_analysis_summary([], "9.0.0")

    assert summary.average_daily == 0
    assert summary.weeks == []
    assert summary.period_range == "No data"
    assert summary.period_start is None
