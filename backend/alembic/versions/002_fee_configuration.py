"""Fee configuration tree: fees, fee_locations, fee_details, fee_to_fee_details, fee_category_links.

Revision ID: 002
Revises: 001_reference_tables
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "002_fee_configuration"
down_revision: Union[str, None] = "001_reference_tables"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

record_status = postgresql.ENUM("ACTIVE", "INACTIVE", "DELETE", name="recordstatus", create_type=False)
fee_type = postgresql.ENUM("GLOBAL", "NONGLOBAL", name="feetype", create_type=False)
fee_side = postgresql.ENUM("VENDOR", "CONSUMER", name="feeside", create_type=False)

AMOUNT = sa.Numeric(18, 4)


def upgrade() -> None:
    bind = op.get_bind()
    fee_type.create(bind, checkfirst=True)
    fee_side.create(bind, checkfirst=True)

    op.create_table(
        "fees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("policy_id", sa.Integer(), sa.ForeignKey("policies.id", ondelete="SET NULL"), nullable=True),
        sa.Column("fee_type", fee_type, nullable=False, server_default="NONGLOBAL"),
        sa.Column("menu_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", record_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_fees_name", "fees", ["name"])
    op.create_index("ix_fees_policy_id", "fees", ["policy_id"])
    op.create_index("ix_fees_status", "fees", ["status"])
    op.create_index(
        "uq_fees_menu_id_live",
        "fees",
        ["menu_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'DELETE'"),
    )

    op.create_table(
        "fee_locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fee_id", sa.Integer(), sa.ForeignKey("fees.id"), nullable=False, index=True),
        sa.Column("side", fee_side, nullable=False),
        sa.Column("country_id", sa.Integer(), sa.ForeignKey("countries.id", ondelete="SET NULL"), nullable=True),
        sa.Column("state_id", sa.Integer(), sa.ForeignKey("states.id", ondelete="SET NULL"), nullable=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id", ondelete="SET NULL"), nullable=True),
        sa.Column("town", sa.String(255), nullable=True),
        sa.Column("status", record_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "fee_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fee_id", sa.Integer(), sa.ForeignKey("fees.id"), nullable=False, index=True),
        sa.Column("side", fee_side, nullable=False),
        sa.Column("percentage", AMOUNT, nullable=True),
        sa.Column("max_cap_per_deal", AMOUNT, nullable=True),
        sa.Column("max_cap_per_month", AMOUNT, nullable=True),
        sa.Column("fix_fee", AMOUNT, nullable=True),
        sa.Column("vat", AMOUNT, nullable=True),
        sa.Column("payment_gateway_fee", AMOUNT, nullable=True),
        sa.Column("is_global", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("fee_locations.id"), nullable=True, unique=True),
        sa.Column("status", record_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(is_global AND location_id IS NULL) OR (NOT is_global AND location_id IS NOT NULL)",
            name="ck_fee_details_global_location",
        ),
    )

    op.create_table(
        "fee_to_fee_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fee_id", sa.Integer(), sa.ForeignKey("fees.id"), nullable=False, index=True),
        sa.Column("vendor_detail_id", sa.Integer(), sa.ForeignKey("fee_details.id"), nullable=False, index=True),
        sa.Column("consumer_detail_id", sa.Integer(), sa.ForeignKey("fee_details.id"), nullable=False, index=True),
        sa.Column("status", record_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "fee_category_links",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fee_id", sa.Integer(), sa.ForeignKey("fees.id"), nullable=False, index=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False, index=True),
        sa.Column("category_location", sa.String(255), nullable=True),
        sa.Column("status", record_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("fee_id", "category_id", name="uq_fee_category_links_fee_category"),
    )


def downgrade() -> None:
    op.drop_table("fee_category_links")
    op.drop_table("fee_to_fee_details")
    op.drop_table("fee_details")
    op.drop_table("fee_locations")
    op.drop_index("uq_fees_menu_id_live", table_name="fees")
    op.drop_index("ix_fees_status", table_name="fees")
    op.drop_index("ix_fees_policy_id", table_name="fees")
    op.drop_index("ix_fees_name", table_name="fees")
    op.drop_table("fees")
    bind = op.get_bind()
    fee_side.drop(bind, checkfirst=True)
    fee_type.drop(bind, checkfirst=True)
