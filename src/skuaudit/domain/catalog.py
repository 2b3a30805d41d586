"""Master catalog services: bulk import, lookup and code upserts."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from skuaudit.domain.errors import NotFoundError, ValidationError
from skuaudit.domain.model import CodeTriple, MasterEntry, clean_sku, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from skuaudit.domain.ports.persistence import MasterEntryRepository
    from skuaudit.domain.ports.unit_of_work import CatalogUnitOfWork

type UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]
type Clock = Callable[[], datetime]

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class MasterRow:
    """One structured row of a master catalog import."""

    sku: str | None
    description: str | None = None
    category_code: str | None = None
    type_code: str | None = None
    classification_code: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> MasterRow:
        def text(name: str) -> str | None:
            value = data.get(name)
            return None if value is None else str(value)

        return cls(
            sku=text("sku"),
            description=text("description"),
            category_code=text("category_code"),
            type_code=text("type_code"),
            classification_code=text("classification_code"),
        )


def upsert_master_entry(
    repository: MasterEntryRepository,
    sku: str,
    codes: CodeTriple,
    *,
    at: datetime,
    description: str | None = None,
) -> MasterEntry:
    """Write ``codes`` for ``sku``, creating the entry when it does not exist yet.

    ``description`` is left untouched on existing entries unless given; new
    entries default to an empty description.
    """

    entry = repository.get(sku)
    if entry is None:
        entry = MasterEntry(sku=sku, description=description or "")
        repository.add(entry)
    elif description is not None:
        entry.description = description
    entry.apply_codes(codes, at=at)
    return entry


def import_master_entries(
    rows: Iterable[MasterRow | Mapping[str, object]],
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> int:
    """Upsert structured master rows. Rows without a usable SKU are skipped."""

    now = clock()
    count = 0
    with unit_of_work_factory() as uow:
        repository = uow.repositories.master_entries
        for raw in rows:
            row = raw if isinstance(raw, MasterRow) else MasterRow.from_mapping(raw)
            sku = clean_sku(row.sku)
            if not sku:
                continue
            codes = CodeTriple.canonical(
                row.category_code or "",
                row.type_code or "",
                row.classification_code or "",
            )
            upsert_master_entry(
                repository,
                sku,
                codes,
                at=now,
                description=row.description or "",
            )
            count += 1
        uow.commit()
    log.info("Imported %s master entries", count)
    return count


def get_master_entry(sku: str, *, unit_of_work_factory: UnitOfWorkFactory) -> MasterEntry:
    cleaned = clean_sku(sku)
    if not cleaned:
        raise ValidationError(f"Invalid SKU: {sku!r}")
    with unit_of_work_factory() as uow:
        entry = uow.repositories.master_entries.get(cleaned)
    if entry is None:
        raise NotFoundError(f"SKU {cleaned} is not in the master catalog")
    return entry
