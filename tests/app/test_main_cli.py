from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from skuaudit import main as main_module
from skuaudit.domain.campaigns import CampaignRequest, ScanOutcome, ScanSubmission
from skuaudit.domain.catalog import MasterRow
from skuaudit.domain.decisions import DecisionRequest
from skuaudit.domain.errors import InvalidTransitionError
from skuaudit.domain.model import CodeTriple, DecisionStatus
from skuaudit.domain.review import ConsensusFilter
from tests.helpers.catalog import make_campaign, make_decision, make_scan


def test_campaign_create_parses_dates(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, CampaignRequest] = {}

    def fake_create(request: CampaignRequest) -> object:
        captured["request"] = request
        return make_campaign(request.name or "", active=request.active)

    monkeypatch.setattr(main_module.app, "create_campaign", fake_create)

    main_module.main(
        [
            "campaign-create",
            "--name",
            "Spring",
            "--start",
            "2025-03-01T03:00:00+03:00",
            "--end",
            "2025-03-31",
            "--category-target",
            "1",
            "--activate",
        ]
    )

    request = captured["request"]
    assert request.start == datetime(2025, 3, 1, 0, 0, tzinfo=UTC)
    assert request.end == datetime(2025, 3, 31, tzinfo=UTC)
    assert request.category_target == "1"
    assert request.active
    assert "Spring (active)" in capsys.readouterr().out


def test_review_passes_filters(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    campaign_id = uuid4()

    def fake_review(campaign: object, **kwargs: object) -> list[object]:
        captured["campaign"] = campaign
        captured.update(kwargs)
        return []

    monkeypatch.setattr(main_module.app, "review_campaign", fake_review)

    main_module.main(
        ["review", "--campaign", str(campaign_id), "--sku", "abc", "--consensus", "with", "--all"]
    )

    assert captured["campaign"] == campaign_id
    assert captured["sku_filter"] == "abc"
    assert captured["consensus_filter"] is ConsensusFilter.WITH
    assert captured["only_differences"] is False


def test_decide_builds_request(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, DecisionRequest] = {}
    campaign_id = uuid4()

    def fake_decide(request: DecisionRequest) -> object:
        captured["request"] = request
        return make_decision(campaign_id, "ABC1", status=DecisionStatus.APPLIED)

    monkeypatch.setattr(main_module.app, "decide", fake_decide)

    main_module.main(
        [
            "decide",
            "--campaign",
            str(campaign_id),
            "--sku",
            "abc1",
            "--codes",
            "1",
            "2",
            "3",
            "--verdict",
            "accept",
            "--apply",
            "--by",
            "maria",
        ]
    )

    request = captured["request"]
    assert request.campaign_id == campaign_id
    assert request.proposal == CodeTriple("1", "2", "3")
    assert request.apply_immediately
    assert request.decided_by == "maria"
    assert "[applied]" in capsys.readouterr().out


def test_decisions_status_and_archive_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_list(campaign: object, **kwargs: object) -> list[object]:
        captured["campaign"] = campaign
        captured.update(kwargs)
        return []

    monkeypatch.setattr(main_module.app, "list_decisions", fake_list)

    main_module.main(["decisions", "--status", "pending", "--active"])

    assert captured["campaign"] is None
    assert captured["status"] is DecisionStatus.PENDING
    assert captured["archived"] is False


def test_archive_defaults_to_archiving(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}
    ids = [uuid4(), uuid4()]

    def fake_archive(decision_ids: list[object], **kwargs: object) -> int:
        captured["ids"] = decision_ids
        captured.update(kwargs)
        return len(decision_ids)

    monkeypatch.setattr(main_module.app, "archive_decisions", fake_archive)

    main_module.main(["archive", *(str(item) for item in ids)])

    assert captured["ids"] == ids
    assert captured["archived"] is True
    assert "Archived 2 decision(s)" in capsys.readouterr().out


def test_domain_errors_exit_with_code_two(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_undo(_decision_id: object) -> object:
        raise InvalidTransitionError("applied")

    monkeypatch.setattr(main_module.app, "undo_decision", fake_undo)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["undo", str(uuid4())])

    assert excinfo.value.code == 2


def test_unexpected_errors_exit_with_code_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_campaigns() -> list[object]:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(main_module.app, "list_campaigns", fake_campaigns)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["campaigns"])

    assert excinfo.value.code == 1


def test_invalid_id_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["undo", "not-a-uuid"])

    assert excinfo.value.code == 2


def test_branches_prints_only_conflicts(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    agree = SimpleNamespace(
        sku="AAA1",
        conflict=False,
        per_branch_majority=(),
        distinct_signature_count=1,
    )
    clash = SimpleNamespace(
        sku="BBB2",
        conflict=True,
        per_branch_majority=(),
        distinct_signature_count=2,
    )
    monkeypatch.setattr(main_module.app, "branch_conflicts", lambda *_a, **_k: [agree, clash])

    main_module.main(["branches", "--conflicts-only"])

    out = capsys.readouterr().out
    assert "BBB2 CONFLICT distinct=2" in out
    assert "AAA1" not in out


def test_scan_builds_submission(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, ScanSubmission] = {}
    campaign_id = uuid4()

    def fake_submit(submission: ScanSubmission) -> ScanOutcome:
        captured["submission"] = submission
        return ScanOutcome(
            event=make_scan("ABC1", ("07", "02", "03"), campaign_id=campaign_id),
            snapshot=None,
        )

    monkeypatch.setattr(main_module.app, "submit_scan", fake_submit)

    main_module.main(
        [
            "scan",
            "abc1-x",
            "--campaign",
            str(campaign_id),
            "--branch",
            "North",
            "--email",
            "ana@example.com",
            "--codes",
            "7",
            "2",
            "3",
        ]
    )

    submission = captured["submission"]
    assert submission.campaign_id == campaign_id
    assert submission.raw_sku == "abc1-x"
    assert submission.branch == "North"
    assert submission.submitter_email == "ana@example.com"
    assert submission.suggested == CodeTriple("7", "2", "3")
    assert "ABC1 OK assumed=07|02|03" in capsys.readouterr().out


def test_scan_without_codes_suggests_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, ScanSubmission] = {}

    def fake_submit(submission: ScanSubmission) -> ScanOutcome:
        captured["submission"] = submission
        return ScanOutcome(event=make_scan("ABC1"), snapshot=None)

    monkeypatch.setattr(main_module.app, "submit_scan", fake_submit)

    main_module.main(["scan", "ABC1", "--campaign", str(uuid4())])

    assert captured["submission"].suggested.is_unknown
    assert captured["submission"].branch is None


def test_import_master_builds_one_row_per_sku(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, list[MasterRow]] = {}

    def fake_import(rows: list[MasterRow]) -> int:
        captured["rows"] = list(rows)
        return len(captured["rows"])

    monkeypatch.setattr(main_module.app, "import_master", fake_import)

    main_module.main(
        ["import-master", "ABC1", "XYZ9", "--codes", "1", "2", "3", "--description", "Milk 1L"]
    )

    rows = captured["rows"]
    assert [row.sku for row in rows] == ["ABC1", "XYZ9"]
    assert {row.description for row in rows} == {"Milk 1L"}
    assert (rows[0].category_code, rows[0].type_code, rows[0].classification_code) == (
        "1",
        "2",
        "3",
    )
    assert "Imported 2 master entries" in capsys.readouterr().out


def test_scan_requires_a_campaign() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["scan", "ABC1"])

    assert excinfo.value.code == 2
