import datetime as dt
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Integer, String, Text, Boolean, DateTime, Date, Numeric, ForeignKey, UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daybook.db.base import Base
from daybook.models.metric import Metric
from daybook.models.subject import Subject


class DailyLog(Base):
    """One entry per student, subject and calendar day."""

    __tablename__ = "daily_logs"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "date", name="uq_daily_log_student_subject_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    subject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    subject: Mapped[Subject] = relationship(Subject, lazy="joined")
    metric_values: Mapped[list["DailyLogMetricValue"]] = relationship(
        back_populates="daily_log",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DailyLogMetricValue.id",
    )


class DailyLogMetricValue(Base):
    """Exactly one of the three value columns is populated, per the metric's kind."""

    __tablename__ = "daily_log_metric_values"
    __table_args__ = (
        UniqueConstraint("daily_log_id", "metric_id", name="uq_daily_log_metric"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    daily_log_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("daily_logs.id", ondelete="CASCADE"), nullable=False
    )
    metric_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metrics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    boolean_value: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    categorical_value: Mapped[str | None] = mapped_column(String(200), nullable=True)
    numeric_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)

    daily_log: Mapped[DailyLog] = relationship(back_populates="metric_values")
    metric: Mapped[Metric] = relationship(Metric, lazy="joined")
