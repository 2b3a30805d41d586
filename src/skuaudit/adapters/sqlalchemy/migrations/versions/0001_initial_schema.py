"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

CODE = sa.String(length=8)
SKU = sa.String(length=64)


def upgrade() -> None:
    op.create_table(
        "master_entry",
        sa.Column("sku", SKU, nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("category_code", CODE, nullable=False),
        sa.Column("type_code", CODE, nullable=False),
        sa.Column("classification_code", CODE, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("sku", name=op.f("pk_master_entry")),
    )
    op.create_table(
        "campaign",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category_target", CODE, nullable=True),
        sa.Column("type_target", CODE, nullable=True),
        sa.Column("classification_target", CODE, nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_campaign")),
    )
    op.create_table(
        "campaign_snapshot",
        sa.Column("campaign_id", sa.Uuid(), nullable=False),
        sa.Column("sku", SKU, nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("category_code", CODE, nullable=False),
        sa.Column("type_code", CODE, nullable=False),
        sa.Column("classification_code", CODE, nullable=False),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaign.id"],
            name=op.f("fk_campaign_snapshot_campaign_snapshot_campaign_id_campaign"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("campaign_id", "sku", name=op.f("pk_campaign_snapshot")),
    )
    op.create_table(
        "scan_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("campaign_id", sa.Uuid(), nullable=False),
        sa.Column("sku", SKU, nullable=False),
        sa.Column("branch", sa.String(), nullable=True),
        sa.Column("submitter_email", sa.String(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("OK", "NEEDS_REVIEW", "NOT_IN_MASTER", name="scanstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("suggested_category_code", CODE, nullable=True),
        sa.Column("suggested_type_code", CODE, nullable=True),
        sa.Column("suggested_classification_code", CODE, nullable=True),
        sa.Column("assumed_category_code", CODE, nullable=True),
        sa.Column("assumed_type_code", CODE, nullable=True),
        sa.Column("assumed_classification_code", CODE, nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaign.id"],
            name=op.f("fk_scan_event_scan_event_campaign_id_campaign"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_scan_event")),
    )
    op.create_index("ix_scan_event_campaign_sku", "scan_event", ["campaign_id", "sku"])
    op.create_table(
        "update_decision",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("campaign_id", sa.Uuid(), nullable=False),
        sa.Column("sku", SKU, nullable=False),
        sa.Column("old_category_code", CODE, nullable=True),
        sa.Column("old_type_code", CODE, nullable=True),
        sa.Column("old_classification_code", CODE, nullable=True),
        sa.Column("new_category_code", CODE, nullable=False),
        sa.Column("new_type_code", CODE, nullable=False),
        sa.Column("new_classification_code", CODE, nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPLIED", "REJECTED", name="decisionstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("archived", sa.Boolean(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", sa.String(), nullable=True),
        sa.Column("decided_by", sa.String(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.String(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaign.id"],
            name=op.f("fk_update_decision_update_decision_campaign_id_campaign"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_update_decision")),
    )
    op.create_index(
        "ix_update_decision_campaign_sku",
        "update_decision",
        ["campaign_id", "sku"],
    )


def downgrade() -> None:
    op.drop_index("ix_update_decision_campaign_sku", table_name="update_decision")
    op.drop_table("update_decision")
    op.drop_index("ix_scan_event_campaign_sku", table_name="scan_event")
    op.drop_table("scan_event")
    op.drop_table("campaign_snapshot")
    op.drop_table("campaign")
    op.drop_table("master_entry")
