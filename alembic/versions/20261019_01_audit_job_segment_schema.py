"""Audit job, demographics reference and segment result schema baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_SEGMENT_STATUS_SQL = "('queued', 'pending', 'partial', 'completed', 'failed', 'no_data')"
_OVERALL_STATUS_SQL = "('queued', 'pending', 'partial', 'completed', 'failed')"
_DEMOGRAPHICS_FIELDS = (
    "population_no",
    "median_age",
    "median_income_households",
    "median_income_families",
    "male_percentage",
    "female_percentage",
)
_ORGANIC_SEARCH_FIELDS = tuple(
    f"rank{position}_{suffix}" for position in range(1, 11) for suffix in ("name", "url")
)


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "audit_job",
        sa.Column("job_id", sa.Text(), primary_key=True),
        sa.Column("location_key", sa.Text(), nullable=True),
        sa.Column("business_name", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("services", sa.Text(), nullable=True),
        sa.Column("demographics_status", sa.Text(), nullable=False, server_default=sa.text("'queued'")),
        sa.Column("organic_search_status", sa.Text(), nullable=False, server_default=sa.text("'queued'")),
        sa.Column("overall_status", sa.Text(), nullable=False, server_default=sa.text("'queued'")),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(f"demographics_status IN {_SEGMENT_STATUS_SQL}", name="ck_audit_job_demographics_status"),
        sa.CheckConstraint(
            f"organic_search_status IN {_SEGMENT_STATUS_SQL}",
            name="ck_audit_job_organic_search_status",
        ),
        sa.CheckConstraint(f"overall_status IN {_OVERALL_STATUS_SQL}", name="ck_audit_job_overall_status"),
    )
    op.create_index("ix_audit_job_overall_status", "audit_job", ["overall_status"])
    op.create_index("ix_audit_job_created_at_utc", "audit_job", ["created_at_utc"])

    op.create_table(
        "demographics_reference",
        sa.Column("location_key", sa.Text(), primary_key=True),
        *(sa.Column(field_name, sa.Numeric(), nullable=True) for field_name in _DEMOGRAPHICS_FIELDS),
    )

    op.create_table(
        "segment_demographics_result",
        sa.Column("job_id", sa.Text(), primary_key=True),
        sa.Column("business_name", sa.Text(), nullable=True),
        sa.Column("timestamp_utc", sa.DateTime(timezone=True), nullable=True),
        *(sa.Column(field_name, sa.Numeric(), nullable=True) for field_name in _DEMOGRAPHICS_FIELDS),
        sa.Column("status", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["audit_job.job_id"], ondelete="CASCADE"),
        sa.CheckConstraint(f"status IN {_SEGMENT_STATUS_SQL}", name="ck_segment_demographics_result_status"),
    )

    op.create_table(
        "segment_organic_search_result",
        sa.Column("job_id", sa.Text(), primary_key=True),
        sa.Column("business_name", sa.Text(), nullable=True),
        sa.Column("timestamp_utc", sa.DateTime(timezone=True), nullable=True),
        *(sa.Column(field_name, sa.Text(), nullable=True) for field_name in _ORGANIC_SEARCH_FIELDS),
        sa.Column("status", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["audit_job.job_id"], ondelete="CASCADE"),
        sa.CheckConstraint(f"status IN {_SEGMENT_STATUS_SQL}", name="ck_segment_organic_search_result_status"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("segment_organic_search_result")
    op.drop_table("segment_demographics_result")
    op.drop_table("demographics_reference")
    op.drop_index("ix_audit_job_created_at_utc", table_name="audit_job")
    op.drop_index("ix_audit_job_overall_status", table_name="audit_job")
    op.drop_table("audit_job")
