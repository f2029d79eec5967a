"""CSV report rendering for saved analyses"""

import csv
import io
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from payment_analyzer.domain.models import AnalysisSummary
from payment_analyzer.utils.money import format_currency

DETAIL_HEADER = [
    "Date", "Day", "Consignments", "Rate", "Base Payment",
    "Unloading Bonus", "Attendance Bonus", "Early Bonus",
    "Pickups", "Pickup Total", "Expected Total", "Paid Amount", "Difference", "Status",
]


def analysis_to_csv(
    analysis_id: str,
    created_at: Optional[datetime],
    summary: AnalysisSummary,
    include_metadata: bool = True,
    include_summary: bool = True,
    include_details: bool = True,
) -> str:
    """
    Render an analysis as a quoted CSV report.

    Sections (each optional): report metadata, summary figures, then one
    detail row per day sorted by date. Blank rows separate sections.
    """
    rows: List[List[str]] = []

    if include_metadata:
        rows.append(["Payment Analysis Report"])
        rows.append(["Analysis ID", analysis_id])
        rows.append(["Period", summary.period_range])
        rows.append(["Created", created_at.strftime("%d/%m/%Y %H:%M") if created_at else ""])
        rows.append(["Rules Version", summary.rules_version])
        rows.append([])

    if include_summary:
        totals = summary.totals
        rows.append(["Summary"])
        rows.append(["Working Days", str(totals.working_days)])
        rows.append(["Total Consignments", str(totals.total_consignments)])
        rows.append(["Total Expected", format_currency(totals.expected_total)])
        rows.append(["Total Paid", format_currency(totals.paid_total)])
        rows.append(["Difference", format_currency(totals.difference_total)])
        rows.append(["Average Daily", format_currency(summary.average_daily)])
        rows.append(["Status", summary.overall_status])
        rows.append([])

    if include_details:
        rows.append(DETAIL_HEADER)
        for day in sorted(summary.days, key=lambda d: d.date):
            rows.append([
                day.date,
                day.day,
                str(day.consignments),
                format_currency(day.rate),
                format_currency(day.base_payment),
                format_currency(day.unloading_bonus),
                format_currency(day.attendance_bonus),
                format_currency(day.early_bonus),
                str(day.pickup_count),
                format_currency(day.pickup_total),
                format_currency(day.expected_total),
                format_currency(day.paid_amount),
                format_currency(day.difference),
                day.status,
            ])

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def analyses_to_csv(reports: Iterable[Tuple[str, Optional[datetime], AnalysisSummary]]) -> str:
    """Concatenate full reports for several analyses, one blank row apart"""
    return "\n".join(analysis_to_csv(analysis_id, created_at, summary) for analysis_id, created_at, summary in reports)


def export_filename(period_start: Optional[date], extension: str) -> str:
    """payment-analysis-2025-03-03.csv style download name"""
    stamp = (period_start or date.today()).isoformat()
    return f"payment-analysis-{stamp}.{extension}"


def bulk_export_filename(period_start: date, period_end: date, extension: str) -> str:
    """payment-analyses-2025-03-03-to-2025-03-16.csv style download name"""
    return f"payment-analyses-{period_start.isoformat()}-to-{period_end.isoformat()}.{extension}"
