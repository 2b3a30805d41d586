"""Decision workflow state machine against in-memory repositories."""

from __future__ import annotations

from uuid import uuid4

import pytest

from skuaudit.domain.decisions import (
    DecisionRequest,
    apply_decisions,
    archive_decisions,
    decide,
    list_decisions,
    parse_verdict,
    revert_decision,
    undo_decision,
)
from skuaudit.domain.errors import InvalidTransitionError, NotFoundError, ValidationError
from skuaudit.domain.model import CodeTriple, DecisionStatus, MasterEntry, Verdict
from tests.helpers.catalog import (
    FakeCatalogUnitOfWork,
    make_campaign,
    make_snapshot,
    ticking_clock,
)

SKU = "ABC123"
BASELINE = CodeTriple("01", "05", "07")


@pytest.fixture
def uow() -> FakeCatalogUnitOfWork:
    uow = FakeCatalogUnitOfWork()
    campaign = make_campaign()
    uow.campaigns.add(campaign)
    uow.snapshots.add(make_snapshot(campaign.id, SKU, ("01", "05", "07")))
    uow.master_entries.add(
        MasterEntry(
            sku=SKU,
            description="Widget",
            category_code="01",
            type_code="05",
            classification_code="07",
        )
    )
    return uow


def _campaign_id(uow: FakeCatalogUnitOfWork) -> object:
    return next(iter(uow.campaigns.items))


def _request(uow: FakeCatalogUnitOfWork, **overrides: object) -> DecisionRequest:
    values: dict[str, object] = {
        "campaign_id": _campaign_id(uow),
        "sku": SKU,
        "proposal": CodeTriple("2", "05", "07"),
        "verdict": "accept",
        "decided_by": "maria",
    }
    values.update(overrides)
    return DecisionRequest(**values)  # type: ignore[arg-type]


def test_accept_creates_pending_with_baseline(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow), unit_of_work_factory=uow.factory, clock=ticking_clock())

    assert decision.status is DecisionStatus.PENDING
    assert decision.old_codes == BASELINE
    assert decision.new_codes == CodeTriple("02", "05", "07")
    assert decision.decided_by == "maria"
    assert decision.applied_at is None
    assert uow.master_entries.items[SKU].codes == BASELINE
    assert uow.commits == 1


def test_second_accept_archives_the_first(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    first = decide(_request(uow), unit_of_work_factory=uow.factory, clock=clock)
    second = decide(
        _request(uow, proposal=CodeTriple("03", "05", "07")),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    active = [decision for decision in uow.decisions.items.values() if decision.is_active_pending]
    assert active == [second]
    assert first.archived
    assert first.archived_by == "maria"
    assert first.status is DecisionStatus.PENDING


def test_anonymous_decide_archives_with_the_fallback_actor(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    first = decide(_request(uow, decided_by=None), unit_of_work_factory=uow.factory, clock=clock)
    second = decide(
        _request(uow, decided_by=None, proposal=CodeTriple("03", "05", "07")),
        archived_by="night-shift",
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    assert first.archived_by == "night-shift"
    assert second.decided_by is None


def test_accept_and_apply_upserts_the_master_entry(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(
        _request(uow, apply_immediately=True),
        unit_of_work_factory=uow.factory,
        clock=ticking_clock(),
    )

    assert decision.status is DecisionStatus.APPLIED
    assert decision.applied_at == decision.decided_at
    entry = uow.master_entries.items[SKU]
    assert entry.codes == CodeTriple("02", "05", "07")
    assert entry.description == "Widget"


def test_apply_for_unknown_sku_creates_entry_with_empty_description(
    uow: FakeCatalogUnitOfWork,
) -> None:
    decision = decide(
        _request(uow, sku="new-9", apply_immediately=True),
        unit_of_work_factory=uow.factory,
    )

    assert decision.sku == "NEW"
    assert decision.old_codes is None
    assert uow.master_entries.items["NEW"].description == ""


def test_reject_records_without_touching_the_catalog(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(
        _request(uow, verdict=Verdict.REJECT, apply_immediately=True),
        unit_of_work_factory=uow.factory,
    )

    assert decision.status is DecisionStatus.REJECTED
    assert decision.applied_at is None
    assert uow.master_entries.items[SKU].codes == BASELINE


@pytest.mark.parametrize(
    "overrides",
    [
        {"campaign_id": None},
        {"sku": ""},
        {"sku": "--"},
        {"proposal": None},
        {"verdict": None},
        {"verdict": "maybe"},
    ],
)
def test_decide_validation_has_no_effect(
    uow: FakeCatalogUnitOfWork,
    overrides: dict[str, object],
) -> None:
    with pytest.raises(ValidationError):
        decide(_request(uow, **overrides), unit_of_work_factory=uow.factory)

    assert uow.decisions.items == {}
    assert uow.commits == 0


def test_parse_verdict_is_case_insensitive() -> None:
    assert parse_verdict(" Accept ") is Verdict.ACCEPT
    with pytest.raises(ValidationError):
        parse_verdict("approve")


def test_apply_batch_pushes_codes_and_stamps(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    pending = decide(_request(uow), unit_of_work_factory=uow.factory, clock=clock)
    other = decide(
        _request(uow, sku="ZZZ1", proposal=CodeTriple("09", "09", "09")),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    applied = apply_decisions(
        [pending.id, other.id, pending.id],
        decided_by="lead",
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    assert applied == [pending, other]
    assert all(decision.status is DecisionStatus.APPLIED for decision in applied)
    assert pending.decided_by == "lead"
    assert pending.applied_at is not None
    assert uow.master_entries.items[SKU].codes == CodeTriple("02", "05", "07")
    assert uow.master_entries.items["ZZZ1"].codes == CodeTriple("09", "09", "09")


def test_apply_batch_is_idempotent_on_the_catalog(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow), unit_of_work_factory=uow.factory)

    apply_decisions([decision.id], unit_of_work_factory=uow.factory)
    apply_decisions([decision.id], unit_of_work_factory=uow.factory)

    assert uow.master_entries.items[SKU].codes == CodeTriple("02", "05", "07")
    assert decision.decided_by == "maria"


def test_apply_batch_with_unknown_id_changes_nothing(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow), unit_of_work_factory=uow.factory)

    with pytest.raises(NotFoundError):
        apply_decisions([decision.id, uuid4()], unit_of_work_factory=uow.factory)

    assert decision.status is DecisionStatus.PENDING
    assert uow.master_entries.items[SKU].codes == BASELINE


def test_empty_id_lists_are_rejected(uow: FakeCatalogUnitOfWork) -> None:
    with pytest.raises(ValidationError):
        apply_decisions([], unit_of_work_factory=uow.factory)
    with pytest.raises(ValidationError):
        archive_decisions([], unit_of_work_factory=uow.factory)


def test_archive_and_unarchive_keep_status(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow), unit_of_work_factory=uow.factory)

    count = archive_decisions([decision.id], unit_of_work_factory=uow.factory)

    assert count == 1
    assert decision.archived
    assert decision.archived_by == "admin"
    assert decision.status is DecisionStatus.PENDING

    archive_decisions(
        [decision.id],
        archived=False,
        archived_by="lead",
        unit_of_work_factory=uow.factory,
    )

    assert not decision.archived
    assert decision.archived_by == "lead"


def test_undo_pending_deletes_it(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow), unit_of_work_factory=uow.factory)

    removed = undo_decision(decision.id, unit_of_work_factory=uow.factory)

    assert removed is decision
    assert uow.decisions.get(decision.id) is None
    with pytest.raises(NotFoundError):
        undo_decision(decision.id, unit_of_work_factory=uow.factory)


def test_undo_applied_is_an_invalid_transition(uow: FakeCatalogUnitOfWork) -> None:
    decision = decide(_request(uow, apply_immediately=True), unit_of_work_factory=uow.factory)

    with pytest.raises(InvalidTransitionError):
        undo_decision(decision.id, unit_of_work_factory=uow.factory)

    assert uow.decisions.get(decision.id) is decision
    assert decision.status is DecisionStatus.APPLIED


def test_revert_then_apply_restores_the_baseline(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    applied = decide(
        _request(uow, apply_immediately=True),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    revert = revert_decision(applied.id, unit_of_work_factory=uow.factory, clock=clock)

    assert revert.status is DecisionStatus.PENDING
    assert revert.new_codes == BASELINE
    assert revert.old_codes == CodeTriple("02", "05", "07")
    assert revert.notes == f"revert of {applied.id}"
    assert revert.decided_by == "admin"
    assert uow.master_entries.items[SKU].codes == CodeTriple("02", "05", "07")

    apply_decisions([revert.id], unit_of_work_factory=uow.factory, clock=clock)

    assert uow.master_entries.items[SKU].codes == BASELINE


def test_revert_without_baseline_reproposes_the_new_codes(uow: FakeCatalogUnitOfWork) -> None:
    applied = decide(
        _request(uow, sku="NEW1", apply_immediately=True),
        unit_of_work_factory=uow.factory,
    )

    revert = revert_decision(applied.id, unit_of_work_factory=uow.factory)

    assert revert.new_codes == CodeTriple("02", "05", "07")


def test_revert_archives_other_pending_decisions(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    applied = decide(
        _request(uow, apply_immediately=True),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )
    pending = decide(
        _request(uow, proposal=CodeTriple("04", "04", "04")),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )

    revert = revert_decision(applied.id, unit_of_work_factory=uow.factory, clock=clock)

    assert pending.archived
    active = [decision for decision in uow.decisions.items.values() if decision.is_active_pending]
    assert active == [revert]


@pytest.mark.parametrize("verdict", ["accept", "reject"])
def test_revert_requires_an_applied_decision(uow: FakeCatalogUnitOfWork, verdict: str) -> None:
    decision = decide(_request(uow, verdict=verdict), unit_of_work_factory=uow.factory)

    with pytest.raises(InvalidTransitionError):
        revert_decision(decision.id, unit_of_work_factory=uow.factory)

    assert len(uow.decisions.items) == 1


def test_list_decisions_filters_newest_first(uow: FakeCatalogUnitOfWork) -> None:
    clock = ticking_clock()
    first = decide(_request(uow), unit_of_work_factory=uow.factory, clock=clock)
    second = decide(
        _request(uow, proposal=CodeTriple("03", "03", "03")),
        unit_of_work_factory=uow.factory,
        clock=clock,
    )
    campaign_id = first.campaign_id

    assert list_decisions(campaign_id, unit_of_work_factory=uow.factory) == [second, first]
    assert list_decisions(campaign_id, archived=False, unit_of_work_factory=uow.factory) == [
        second
    ]
    assert (
        list_decisions(
            campaign_id,
            status=DecisionStatus.APPLIED,
            unit_of_work_factory=uow.factory,
        )
        == []
    )
