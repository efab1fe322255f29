"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # --- ENUM types ---
    metric_type_enum = sa.Enum("boolean", "categorical", "numeric", name="metric_type_enum")
    metric_type_enum.create(op.get_bind(), checkfirst=True)

    # --- families ---
    op.create_table(
        "families",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_families_id", "families", ["id"])

    # --- students ---
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_id", "students", ["id"])
    op.create_index("ix_students_family_id", "students", ["family_id"])

    # --- subjects ---
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subjects_id", "subjects", ["id"])
    op.create_index("ix_subjects_family_id", "subjects", ["family_id"])

    # --- metrics ---
    op.create_table(
        "metrics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metric_type", sa.Enum(
            "boolean", "categorical", "numeric", name="metric_type_enum", create_type=False
        ), nullable=False),
        sa.Column("is_template", sa.Boolean(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("possible_values", sa.Text(), nullable=True),
        sa.Column("numeric_config", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_metrics_id", "metrics", ["id"])
    op.create_index("ix_metrics_family_id", "metrics", ["family_id"])

    # --- student_subjects ---
    op.create_table(
        "student_subjects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "subject_id", name="uq_student_subject"),
    )
    op.create_index("ix_student_subjects_id", "student_subjects", ["id"])
    op.create_index("ix_student_subjects_subject_id", "student_subjects", ["subject_id"])

    # --- student_metrics ---
    op.create_table(
        "student_metrics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("metric_id", sa.Integer(), sa.ForeignKey("metrics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("applies_to_all_subjects", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "metric_id", name="uq_student_metric"),
    )
    op.create_index("ix_student_metrics_id", "student_metrics", ["id"])
    op.create_index("ix_student_metrics_metric_id", "student_metrics", ["metric_id"])

    # --- student_subject_metrics ---
    op.create_table(
        "student_subject_metrics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("metric_id", sa.Integer(), sa.ForeignKey("metrics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "subject_id", "metric_id", name="uq_student_subject_metric"),
    )
    op.create_index("ix_student_subject_metrics_id", "student_subject_metrics", ["id"])
    op.create_index("ix_student_subject_metrics_subject_id", "student_subject_metrics", ["subject_id"])
    op.create_index("ix_student_subject_metrics_metric_id", "student_subject_metrics", ["metric_id"])

    # --- daily_logs ---
    op.create_table(
        "daily_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "subject_id", "date", name="uq_daily_log_student_subject_date"),
    )
    op.create_index("ix_daily_logs_id", "daily_logs", ["id"])
    op.create_index("ix_daily_logs_subject_id", "daily_logs", ["subject_id"])
    op.create_index("ix_daily_logs_date", "daily_logs", ["date"])

    # --- daily_log_metric_values ---
    op.create_table(
        "daily_log_metric_values",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("daily_log_id", sa.Integer(), sa.ForeignKey("daily_logs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("metric_id", sa.Integer(), sa.ForeignKey("metrics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("boolean_value", sa.Boolean(), nullable=True),
        sa.Column("categorical_value", sa.String(200), nullable=True),
        sa.Column("numeric_value", sa.Numeric(18, 4), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("daily_log_id", "metric_id", name="uq_daily_log_metric"),
    )
    op.create_index("ix_daily_log_metric_values_id", "daily_log_metric_values", ["id"])
    op.create_index("ix_daily_log_metric_values_metric_id", "daily_log_metric_values", ["metric_id"])

    # --- seed template metrics ---
    metrics = sa.table(
        "metrics",
        sa.column("name", sa.String),
        sa.column("description", sa.Text),
        sa.column("metric_type", sa.String),
        sa.column("is_template", sa.Boolean),
        sa.column("category", sa.String),
        sa.column("possible_values", sa.Text),
        sa.column("numeric_config", sa.String),
    )
    op.bulk_insert(metrics, [
        {"name": "Completed", "description": "The planned work for the day was finished.",
         "metric_type": "boolean", "is_template": True, "category": "Progress",
         "possible_values": None, "numeric_config": None},
        {"name": "Focus", "description": "How well the student stayed on task.",
         "metric_type": "categorical", "is_template": True, "category": "Engagement",
         "possible_values": '["Low", "Medium", "High"]', "numeric_config": None},
        {"name": "Time Spent", "description": "Minutes spent on the subject.",
         "metric_type": "numeric", "is_template": True, "category": "Progress",
         "possible_values": None, "numeric_config": '{"min": 0, "max": 600, "unit": "minutes"}'},
        {"name": "Time of Day", "description": "When the work happened.",
         "metric_type": "categorical", "is_template": True, "category": "Schedule",
         "possible_values": '["Morning", "Afternoon", "Evening"]', "numeric_config": None},
    ])


def downgrade() -> None:
    op.drop_table("daily_log_metric_values")
    op.drop_table("daily_logs")
    op.drop_table("student_subject_metrics")
    op.drop_table("student_metrics")
    op.drop_table("student_subjects")
    op.drop_table("metrics")
    op.drop_table("subjects")
    op.drop_table("students")
    op.drop_table("families")

    op.execute("DROP TYPE IF EXISTS metric_type_enum")
