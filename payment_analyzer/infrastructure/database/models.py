"""SQLAlchemy ORM models for analyses, daily entries and per-user rate tables"""

import uuid
from datetime import date
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(10, 2)


class Analysis(Base):
    """Saved payment analysis with cached totals"""

    __tablename__ = "analyses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    source = Column(Text, nullable=False)  # manual | upload
    status = Column(Text, nullable=False, default="completed")
    payment_status = Column(Text, nullable=False)  # balanced | overpaid | underpaid
    overall_status = Column(Text, nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    rules_version = Column(Text, nullable=False)
    working_days = Column(Integer, nullable=False, default=0)
    total_consignments = Column(Integer, nullable=False, default=0)
    base_total = Column(Money, nullable=False, default=0)
    bonus_total = Column(Money, nullable=False, default=0)
    pickup_total = Column(Money, nullable=False, default=0)
    expected_total = Column(Money, nullable=False, default=0)
    paid_total = Column(Money, nullable=False, default=0)
    difference_total = Column(Money, nullable=False, default=0)
    payment_rules = Column(JSON, nullable=False)
    # "metadata" is reserved on declarative classes
    analysis_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    daily_entries = relationship(
        "DailyEntry",
        back_populates="analysis",
        cascade="all, delete-orphan",
        order_by="DailyEntry.date",
    )


class DailyEntry(Base):
    """One calculated day within an analysis"""

    __tablename__ = "daily_entries"
    __table_args__ = (UniqueConstraint("analysis_id", "date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    analysis_id = Column(UUID(as_uuid=True), ForeignKey("analyses.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday
    consignments = Column(Integer, nullable=False, default=0)
    rate = Column(Money, nullable=False)
    base_payment = Column(Money, nullable=False, default=0)
    pickups = Column(Integer, nullable=False, default=0)
    pickup_total = Column(Money, nullable=False, default=0)
    unloading_bonus = Column(Money, nullable=False, default=0)
    attendance_bonus = Column(Money, nullable=False, default=0)
    early_bonus = Column(Money, nullable=False, default=0)
    expected_total = Column(Money, nullable=False)
    paid_amount = Column(Money, nullable=False)
    difference = Column(Money, nullable=False)
    status = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    analysis = relationship("Analysis", back_populates="daily_entries")


class PaymentRulesVersion(Base):
    """Versioned rate table per user; exactly one active version"""

    __tablename__ = "payment_rules"
    __table_args__ = (UniqueConstraint("user_id", "version"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    version = Column(Integer, nullable=False, default=1)
    weekday_rate = Column(Money, nullable=False)
    saturday_rate = Column(Money, nullable=False)
    unloading_bonus = Column(Money, nullable=False)
    attendance_bonus = Column(Money, nullable=False)
    early_bonus = Column(Money, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    valid_from = Column(Date, nullable=False, default=date.today)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
