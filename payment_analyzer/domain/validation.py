"""Business-rule checks over calculated days"""

from decimal import Decimal
from typing import Iterable

from payment_analyzer.domain.models import AnalysisSummary, DayCalculation, ValidationResult
from payment_analyzer.utils.money import format_currency

LARGE_DIFFERENCE_THRESHOLD = Decimal("100")


def validate_calculations(
    days: Iterable[DayCalculation],
    large_difference_threshold: Decimal = LARGE_DIFFERENCE_THRESHOLD,
) -> ValidationResult:
    """
    Check calculated days against the rate table's invariants.

    Errors (block saving):
    - Monday carrying an unloading bonus
    - Saturday carrying attendance or early bonus
    - Negative consignments

    Warnings (informational):
    - Any work or pay recorded on a Sunday
    - |difference| above the threshold, usually a data-entry slip
    """
    result = ValidationResult()

    for day in days:
        if day.day == "Sunday" and (day.consignments > 0 or day.paid_amount > 0):
            result.warnings.append(f"Work recorded on Sunday {day.date} - unusual")

        if day.day == "Monday" and day.unloading_bonus > 0:
            result.errors.append(f"Monday {day.date} has unloading bonus - should be £0.00")

        if day.day == "Saturday" and (day.attendance_bonus > 0 or day.early_bonus > 0):
            result.errors.append(f"Saturday {day.date} has attendance/early bonus - should be £0.00")

        if day.consignments < 0:
            result.errors.append(f"Negative consignments on {day.date}: {day.consignments}")

        if abs(day.difference) > large_difference_threshold:
            result.warnings.append(f"Large payment difference on {day.date}: {format_currency(day.difference)}")

    return result


def validate_analysis(
    summary: AnalysisSummary,
    large_difference_threshold: Decimal = LARGE_DIFFERENCE_THRESHOLD,
) -> ValidationResult:
    """Rule checks for every day plus sanity checks on the aggregate"""
    result = ValidationResult()

    if not summary.days:
        result.errors.append("No daily data found")
    if not summary.weeks:
        result.errors.append("No weekly data found")
    if summary.totals.working_days == 0:
        result.warnings.append("No working days detected")
    if summary.totals.total_consignments == 0:
        result.warnings.append("No consignments recorded")

    day_checks = validate_calculations(summary.days, large_difference_threshold)
    result.warnings.extend(day_checks.warnings)
    result.errors.extend(day_checks.errors)

    return result
