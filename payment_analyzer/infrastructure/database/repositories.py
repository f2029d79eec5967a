"""Data access layer for payment analyses and rate tables"""

import uuid
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy import Text, cast
from sqlalchemy.orm import Session
from payment_analyzer.infrastructure.database.models import Analysis, DailyEntry, PaymentRulesVersion
from payment_analyzer.domain.calculation import generate_analysis_summary
from payment_analyzer.domain.models import AnalysisSummary, DayCalculation, PaymentRules, payment_status
from payment_analyzer.utils.date_utils import DAY_NAMES, day_of_week, parse_iso_date


class AnalysisRepository:
    """Repository for payment analyses"""

    def __init__(self, db: Session):
        self.db = db

    def create_analysis(
        self,
        user_id: str,
        source: str,
        summary: AnalysisSummary,
        rules: PaymentRules,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Analysis:
        """Persist analysis totals and one row per calculated day"""
        totals = summary.totals
        all_dates = sorted(parse_iso_date(d.date) for d in summary.days)

        daily_entries = []
        for day in summary.days:
            entry_date = parse_iso_date(day.date)
            daily_entries.append(
                DailyEntry(
                    date=entry_date,
                    day_of_week=day_of_week(entry_date),
                    consignments=day.consignments,
                    rate=day.rate,
                    base_payment=day.base_payment,
                    pickups=day.pickup_count,
                    pickup_total=day.pickup_total,
                    unloading_bonus=day.unloading_bonus,
                    attendance_bonus=day.attendance_bonus,
                    early_bonus=day.early_bonus,
                    expected_total=day.expected_total,
                    paid_amount=day.paid_amount,
                    difference=day.difference,
                    status=day.status,
                )
            )

        db_analysis = Analysis(
            user_id=user_id,
            source=source,
            status="completed",
            payment_status=payment_status(totals.difference_total),
            overall_status=summary.overall_status,
            # Fall back to the full entry range when no day carries work or pay
            period_start=summary.period_start or all_dates[0],
            period_end=summary.period_end or all_dates[-1],
            rules_version=summary.rules_version,
            working_days=totals.working_days,
            total_consignments=totals.total_consignments,
            base_total=totals.base_total,
            bonus_total=totals.bonus_total,
            pickup_total=totals.pickup_total,
            expected_total=totals.expected_total,
            paid_total=totals.paid_total,
            difference_total=totals.difference_total,
            payment_rules={name: str(value) for name, value in rules.as_dict().items()},
            analysis_metadata=metadata or {},
            daily_entries=daily_entries,
        )
        self.db.add(db_analysis)
        self.db.flush()  # Get ID without committing
        return db_analysis

    def get_analysis_by_id(self, analysis_id: uuid.UUID) -> Optional[Analysis]:
        """Fetch analysis with its daily entries"""
        return (
            self.db.query(Analysis)
            .filter(Analysis.id == analysis_id)
            .first()
        )

    def get_user_analysis(self, analysis_id: uuid.UUID, user_id: str) -> Optional[Analysis]:
        """Fetch analysis only when it belongs to user_id"""
        return (
            self.db.query(Analysis)
            .filter(Analysis.id == analysis_id, Analysis.user_id == user_id)
            .first()
        )

    def get_analyses_by_user(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Analysis]:
        """
        Fetch a page of a user's analyses, newest first.

        status filters on the processing status; search is a case-insensitive
        match against the metadata (description, notes).
        """
        query = self.db.query(Analysis).filter(Analysis.user_id == user_id)
        if status:
            query = query.filter(Analysis.status == status)
        if search:
            query = query.filter(cast(Analysis.analysis_metadata, Text).ilike(f"%{search}%"))
        return (
            query
            .order_by(Analysis.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_analyses_for_export(
        self,
        user_id: str,
        analysis_ids: Optional[List[uuid.UUID]] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
    ) -> List[Analysis]:
        """
        Fetch a user's analyses for a bulk export, oldest period first.

        Ids owned by another user are silently dropped. A date range keeps
        analyses whose period overlaps it.
        """
        query = self.db.query(Analysis).filter(Analysis.user_id == user_id)
        if analysis_ids:
            query = query.filter(Analysis.id.in_(analysis_ids))
        if period_start is not None:
            query = query.filter(Analysis.period_end >= period_start)
        if period_end is not None:
            query = query.filter(Analysis.period_start <= period_end)
        return query.order_by(Analysis.period_start, Analysis.created_at).all()

    def update_status(self, db_analysis: Analysis, status: str) -> Analysis:
        """Move an analysis to another processing status"""
        db_analysis.status = status
        self.db.flush()
        return db_analysis

    def delete_analysis(self, analysis_id: uuid.UUID) -> bool:
        """Delete analysis and its entries; False when it does not exist"""
        db_analysis = self.get_analysis_by_id(analysis_id)
        if db_analysis is None:
            return False
        self.db.delete(db_analysis)
        self.db.flush()
        return True


class PaymentRulesRepository:
    """Repository for per-user versioned rate tables"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_rules(self, user_id: str) -> Optional[PaymentRulesVersion]:
        return (
            self.db.query(PaymentRulesVersion)
            .filter(PaymentRulesVersion.user_id == user_id, PaymentRulesVersion.is_active.is_(True))
            .order_by(PaymentRulesVersion.version.desc())
            .first()
        )

    def create_rules_version(self, user_id: str, rules: PaymentRules) -> PaymentRulesVersion:
        """Store rules as the next version and deactivate the previous ones"""
        latest = (
            self.db.query(PaymentRulesVersion)
            .filter(PaymentRulesVersion.user_id == user_id)
            .order_by(PaymentRulesVersion.version.desc())
            .first()
        )
        (
            self.db.query(PaymentRulesVersion)
            .filter(PaymentRulesVersion.user_id == user_id, PaymentRulesVersion.is_active.is_(True))
            .update({PaymentRulesVersion.is_active: False}, synchronize_session="fetch")
        )

        db_rules = PaymentRulesVersion(
            user_id=user_id,
            version=latest.version + 1 if latest else 1,
            is_active=True,
            **rules.as_dict(),
        )
        self.db.add(db_rules)
        self.db.flush()
        return db_rules


def to_day_calculation(entry: DailyEntry) -> DayCalculation:
    """Rebuild the domain value from a stored daily entry"""
    total_bonus = entry.unloading_bonus + entry.attendance_bonus + entry.early_bonus
    return DayCalculation(
        date=entry.date.isoformat(),
        day=DAY_NAMES[entry.day_of_week],
        consignments=entry.consignments,
        rate=entry.rate,
        base_payment=entry.base_payment,
        unloading_bonus=entry.unloading_bonus,
        attendance_bonus=entry.attendance_bonus,
        early_bonus=entry.early_bonus,
        total_bonus=total_bonus,
        pickup_count=entry.pickups,
        pickup_total=entry.pickup_total,
        expected_total=entry.expected_total,
        paid_amount=entry.paid_amount,
        difference=entry.difference,
    )


def to_payment_rules(db_rules: PaymentRulesVersion) -> PaymentRules:
    return PaymentRules(
        weekday_rate=db_rules.weekday_rate,
        saturday_rate=db_rules.saturday_rate,
        unloading_bonus=db_rules.unloading_bonus,
        attendance_bonus=db_rules.attendance_bonus,
        early_bonus=db_rules.early_bonus,
    )


def to_analysis_summary(db_analysis: Analysis) -> AnalysisSummary:
    """Regroup stored days into weeks and totals; weeks are never persisted"""
    days = [to_day_calculation(entry) for entry in db_analysis.daily_entries]
    return generate_analysis_summary(days, db_analysis.rules_version)
