from datetime import datetime
from sqlalchemy import Integer, String, Text, Boolean, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from daybook.db.base import Base


class MetricType(str, enum.Enum):
    boolean = "boolean"
    categorical = "categorical"
    numeric = "numeric"


class Metric(Base):
    """
    A measurement definition.

    Templates (``is_template=True``, ``family_id`` NULL) are shared by every
    family; custom metrics belong to exactly one family and go away with it.
    """

    __tablename__ = "metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    family_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("families.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metric_type: Mapped[str] = mapped_column(
        Enum(MetricType, name="metric_type_enum"), nullable=False
    )
    is_template: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # JSON text: ["Morning", "Afternoon", "Evening"]
    possible_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    # JSON text: {"min": 0, "max": 10, "unit": "minutes"}
    numeric_config: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
