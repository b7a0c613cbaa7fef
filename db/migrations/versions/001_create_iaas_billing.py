"""create iaas billing

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "iaas_billing",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("account_number", sa.String(), nullable=False),
        sa.Column("account_name", sa.String(), nullable=False, server_default=""),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("service_type", sa.String(), nullable=False),
        sa.Column("usage_quantity", sa.Float(), nullable=False, server_default="0"),
        sa.Column("cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("region", sa.String(), nullable=False, server_default=""),
        sa.Column("unit_of_measure", sa.String(), nullable=False, server_default=""),
        sa.Column("resource", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "account_number",
            "account_name",
            "day",
            "month",
            "year",
            "service_type",
            "region",
            "unit_of_measure",
            "resource",
            name="uq_iaas_billing_charge",
        ),
    )
    op.create_index("ix_iaas_billing_account_number", "iaas_billing", ["account_number"])
    op.create_index("ix_iaas_billing_service_type", "iaas_billing", ["service_type"])
    op.create_index("ix_iaas_billing_resource", "iaas_billing", ["resource"])
    op.create_index("idx_iaas_billing_period_resource", "iaas_billing", ["year", "month", "resource"])


def downgrade() -> None:
    op.drop_index("idx_iaas_billing_period_resource", table_name="iaas_billing")
    op.drop_index("ix_iaas_billing_resource", table_name="iaas_billing")
    op.drop_index("ix_iaas_billing_service_type", table_name="iaas_billing")
    op.drop_index("ix_iaas_billing_account_number", table_name="iaas_billing")
    op.drop_table("iaas_billing")
