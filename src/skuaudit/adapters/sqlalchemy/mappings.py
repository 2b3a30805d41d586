"""SQLAlchemy mapping metadata for the skuaudit domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)

from skuaudit.domain.model import (
    Campaign,
    CampaignSnapshot,
    DecisionStatus,
    MasterEntry,
    ScanEvent,
    ScanStatus,
    UpdateDecision,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
CODE_LENGTH = 8


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _code_column(name: str, *, nullable: bool) -> Column[str]:
    return Column(name, String(CODE_LENGTH), nullable=nullable)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog tables --------------------------------------------------------------

master_entry_table = Table(
    "master_entry",
    mapper_registry.metadata,
    Column("sku", String(64), primary_key=True),
    Column("description", String, nullable=False, default=""),
    _code_column("category_code", nullable=False),
    _code_column("type_code", nullable=False),
    _code_column("classification_code", nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
)

campaign_table = Table(
    "campaign",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("starts_at", UTCDateTime(), key="start", nullable=False),
    Column("ends_at", UTCDateTime(), key="end", nullable=False),
    _code_column("category_target", nullable=True),
    _code_column("type_target", nullable=True),
    _code_column("classification_target", nullable=True),
    Column("active", Boolean, nullable=False, default=False),
)

campaign_snapshot_table = Table(
    "campaign_snapshot",
    mapper_registry.metadata,
    Column(
        "campaign_id",
        UUIDColumnType,
        ForeignKey("campaign.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("sku", String(64), primary_key=True),
    Column("description", String, nullable=False, default=""),
    _code_column("category_code", nullable=False),
    _code_column("type_code", nullable=False),
    _code_column("classification_code", nullable=False),
)

# Workflow tables -------------------------------------------------------------

scan_event_table = Table(
    "scan_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "campaign_id",
        UUIDColumnType,
        ForeignKey("campaign.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("sku", String(64), nullable=False),
    Column("branch", String, nullable=True),
    Column("submitter_email", String, nullable=True),
    Column("status", Enum(ScanStatus, native_enum=False), nullable=False),
    _code_column("suggested_category_code", nullable=True),
    _code_column("suggested_type_code", nullable=True),
    _code_column("suggested_classification_code", nullable=True),
    _code_column("assumed_category_code", nullable=True),
    _code_column("assumed_type_code", nullable=True),
    _code_column("assumed_classification_code", nullable=True),
    Column("timestamp", UTCDateTime(), nullable=False),
    Index("ix_scan_event_campaign_sku", "campaign_id", "sku"),
)

update_decision_table = Table(
    "update_decision",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "campaign_id",
        UUIDColumnType,
        ForeignKey("campaign.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("sku", String(64), nullable=False),
    _code_column("old_category_code", nullable=True),
    _code_column("old_type_code", nullable=True),
    _code_column("old_classification_code", nullable=True),
    _code_column("new_category_code", nullable=False),
    _code_column("new_type_code", nullable=False),
    _code_column("new_classification_code", nullable=False),
    Column("status", Enum(DecisionStatus, native_enum=False), nullable=False),
    Column("archived", Boolean, nullable=False, default=False),
    Column("archived_at", UTCDateTime(), nullable=True),
    Column("archived_by", String, nullable=True),
    Column("decided_by", String, nullable=True),
    Column("decided_at", UTCDateTime(), nullable=True),
    Column("applied_at", UTCDateTime(), nullable=True),
    Column("notes", String, nullable=False, default=""),
    Column("timestamp", UTCDateTime(), nullable=False),
    Index("ix_update_decision_campaign_sku", "campaign_id", "sku"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(MasterEntry, master_entry_table)
    mapper_registry.map_imperatively(Campaign, campaign_table)
    mapper_registry.map_imperatively(CampaignSnapshot, campaign_snapshot_table)
    mapper_registry.map_imperatively(ScanEvent, scan_event_table)
    mapper_registry.map_imperatively(UpdateDecision, update_decision_table)

    orm.configure_mappers()
    return mapper_registry
