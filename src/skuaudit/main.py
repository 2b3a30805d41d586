#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from skuaudit import app
from skuaudit.config import configure_logging
from skuaudit.domain.campaigns import CampaignRequest, ScanSubmission
from skuaudit.domain.catalog import MasterRow
from skuaudit.domain.decisions import DecisionRequest
from skuaudit.domain.errors import DomainError
from skuaudit.domain.model import CodeTriple, DecisionStatus
from skuaudit.domain.review import ConsensusFilter

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from skuaudit.domain.model import UpdateDecision
    from skuaudit.domain.review import RankedProposal

type Handler = Callable[[argparse.Namespace], None]


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid id: {value}") from exc


def _fmt_time(value: datetime | None) -> str:
    return value.isoformat(timespec="seconds") if value else "-"


def _fmt_proposal(proposal: RankedProposal) -> str:
    return f"{proposal.codes} x{proposal.count} ({proposal.share:.2f})"


def _fmt_decision(decision: UpdateDecision) -> str:
    old = decision.old_codes
    flag = " archived" if decision.archived else ""
    return (
        f"{decision.id} {decision.sku} {old if old else '-'} -> {decision.new_codes} "
        f"[{decision.status}{flag}] by={decision.decided_by or '-'} "
        f"at={_fmt_time(decision.timestamp)}"
    )


# Catalog and scan commands --------------------------------------------------


def _cmd_import_master(args: argparse.Namespace) -> None:
    category, type_, classification = args.codes
    rows = [
        MasterRow(
            sku=sku,
            description=args.description,
            category_code=category,
            type_code=type_,
            classification_code=classification,
        )
        for sku in args.skus
    ]
    print(f"Imported {app.import_master(rows)} master entries")


def _cmd_scan(args: argparse.Namespace) -> None:
    suggested = CodeTriple.of(*args.codes) if args.codes else CodeTriple()
    outcome = app.submit_scan(
        ScanSubmission(
            campaign_id=args.campaign,
            raw_sku=args.sku,
            branch=args.branch,
            submitter_email=args.email,
            suggested=suggested,
        )
    )
    print(f"{outcome.event.sku} {outcome.status} assumed={outcome.event.assumed_codes}")


# Campaign commands -----------------------------------------------------------


def _cmd_campaign_create(args: argparse.Namespace) -> None:
    campaign = app.create_campaign(
        CampaignRequest(
            name=args.name,
            start=args.start,
            end=args.end,
            category_target=args.category_target,
            type_target=args.type_target,
            classification_target=args.classification_target,
            active=args.activate,
        )
    )
    print(f"{campaign.id} {campaign.name}{' (active)' if campaign.active else ''}")


def _cmd_campaign_activate(args: argparse.Namespace) -> None:
    campaign = app.activate_campaign(args.campaign_id)
    print(f"{campaign.id} {campaign.name} (active)")


def _cmd_campaigns(_args: argparse.Namespace) -> None:
    for campaign in app.list_campaigns():
        marker = "*" if campaign.active else " "
        print(
            f"{marker} {campaign.id} {campaign.name} "
            f"{_fmt_time(campaign.start)} .. {_fmt_time(campaign.end)}"
        )


# Review commands -------------------------------------------------------------


def _cmd_review(args: argparse.Namespace) -> None:
    items = app.review_campaign(
        args.campaign,
        sku_filter=args.sku,
        consensus_filter=ConsensusFilter(args.consensus),
        only_differences=not args.all,
    )
    for item in items:
        verdict = "consensus" if item.has_consensus else "open"
        print(
            f"{item.sku} baseline={item.baseline or '-'} votes={item.total_votes} "
            f"ratio={item.consensus_ratio:.2f} {verdict}"
        )
        for proposal in item.proposals:
            decision = proposal.decision
            note = f" [{decision.status} {decision.id}]" if decision else ""
            print(f"    {_fmt_proposal(proposal.proposal)}{note}")


def _cmd_discrepancies(args: argparse.Namespace) -> None:
    items = app.discrepancies(args.campaign, sku_filter=args.sku, min_votes=args.min_votes)
    for item in items:
        top = _fmt_proposal(item.top_proposal) if item.top_proposal else "-"
        print(
            f"{item.sku} baseline={item.baseline or '-'} scans={item.total_scans} "
            f"branches={','.join(item.branches) or '-'} last={_fmt_time(item.last_seen)} "
            f"top={top}"
        )
        for majority in item.per_branch:
            print(f"    {majority.branch}: {majority.codes} x{majority.count}")


def _cmd_branches(args: argparse.Namespace) -> None:
    results = app.branch_conflicts(
        args.campaign,
        sku_filter=args.sku,
        min_branches=args.min_branches,
    )
    for result in results:
        if args.conflicts_only and not result.conflict:
            continue
        state = "CONFLICT" if result.conflict else "agree"
        print(f"{result.sku} {state} distinct={result.distinct_signature_count}")
        for majority in result.per_branch_majority:
            variants = ", ".join(
                f"{variant.codes} x{variant.count}" for variant in majority.variants
            )
            suffix = f" (also: {variants})" if variants else ""
            print(f"    {majority.branch}: {majority.codes} x{majority.count}{suffix}")


# Decision commands -----------------------------------------------------------


def _cmd_decide(args: argparse.Namespace) -> None:
    category, type_, classification = args.codes
    decision = app.decide(
        DecisionRequest(
            campaign_id=args.campaign,
            sku=args.sku,
            proposal=CodeTriple.of(category, type_, classification),
            verdict=args.verdict,
            decided_by=args.by,
            apply_immediately=args.apply,
            notes=args.notes or "",
        )
    )
    print(_fmt_decision(decision))


def _cmd_apply(args: argparse.Namespace) -> None:
    for decision in app.apply_decisions(args.decision_ids, decided_by=args.by):
        print(_fmt_decision(decision))


def _cmd_archive(args: argparse.Namespace) -> None:
    count = app.archive_decisions(
        args.decision_ids,
        archived=not args.unarchive,
        archived_by=args.by,
    )
    print(f"{'Unarchived' if args.unarchive else 'Archived'} {count} decision(s)")


def _cmd_undo(args: argparse.Namespace) -> None:
    decision = app.undo_decision(args.decision_id)
    print(f"Removed {_fmt_decision(decision)}")


def _cmd_revert(args: argparse.Namespace) -> None:
    print(_fmt_decision(app.revert_decision(args.decision_id, decided_by=args.by)))


def _cmd_decisions(args: argparse.Namespace) -> None:
    status = DecisionStatus(args.status) if args.status else None
    for decision in app.list_decisions(args.campaign, status=status, archived=args.archived):
        print(_fmt_decision(decision))


# Parser ----------------------------------------------------------------------


def _add_campaign_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--campaign",
        type=_parse_uuid,
        help="Campaign id (default: the active campaign)",
    )


def _add_review_options(parser: argparse.ArgumentParser) -> None:
    _add_campaign_option(parser)
    parser.add_argument("--sku", help="Case-insensitive SKU substring filter")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skuaudit",
        description="Reconcile scanned product codes against the master catalog",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    master = commands.add_parser("import-master", help="Upsert master catalog entries")
    master.add_argument("skus", nargs="+", metavar="SKU")
    master.add_argument(
        "--codes",
        nargs=3,
        metavar=("CATEGORY", "TYPE", "CLASSIFICATION"),
        required=True,
    )
    master.add_argument(
        "--description",
        help="Description stored for every SKU given (default: empty)",
    )
    master.set_defaults(handler=_cmd_import_master)

    scan = commands.add_parser("scan", help="Record one field scan")
    scan.add_argument("sku", help="Raw scanned SKU; cleaned before use")
    scan.add_argument("--campaign", type=_parse_uuid, required=True)
    scan.add_argument("--branch")
    scan.add_argument("--email", help="Submitter e-mail")
    scan.add_argument(
        "--codes",
        nargs=3,
        metavar=("CATEGORY", "TYPE", "CLASSIFICATION"),
        help="Suggested codes; required for SKUs missing from the master",
    )
    scan.set_defaults(handler=_cmd_scan)

    create = commands.add_parser("campaign-create", help="Create a campaign and snapshot")
    create.add_argument("--name", required=True)
    create.add_argument("--start", type=_parse_iso_datetime, required=True)
    create.add_argument("--end", type=_parse_iso_datetime, required=True)
    create.add_argument("--category-target")
    create.add_argument("--type-target")
    create.add_argument("--classification-target")
    create.add_argument("--activate", action="store_true", help="Make it the active campaign")
    create.set_defaults(handler=_cmd_campaign_create)

    activate = commands.add_parser("campaign-activate", help="Activate a campaign")
    activate.add_argument("campaign_id", type=_parse_uuid)
    activate.set_defaults(handler=_cmd_campaign_activate)

    listing = commands.add_parser("campaigns", help="List campaigns")
    listing.set_defaults(handler=_cmd_campaigns)

    review = commands.add_parser("review", help="Per-SKU proposals with consensus")
    _add_review_options(review)
    review.add_argument(
        "--consensus",
        choices=[member.value for member in ConsensusFilter],
        default=ConsensusFilter.ANY.value,
    )
    review.add_argument(
        "--all",
        action="store_true",
        help="Include scans that agree with the baseline",
    )
    review.set_defaults(handler=_cmd_review)

    discrepancy = commands.add_parser("discrepancies", help="Discrepancy summary per SKU")
    _add_review_options(discrepancy)
    discrepancy.add_argument("--min-votes", type=int)
    discrepancy.set_defaults(handler=_cmd_discrepancies)

    branches = commands.add_parser("branches", help="Cross-branch conflict report")
    _add_review_options(branches)
    branches.add_argument("--min-branches", type=int)
    branches.add_argument("--conflicts-only", action="store_true")
    branches.set_defaults(handler=_cmd_branches)

    decide = commands.add_parser("decide", help="Accept or reject a proposal")
    decide.add_argument("--campaign", type=_parse_uuid, required=True)
    decide.add_argument("--sku", required=True)
    decide.add_argument(
        "--codes",
        nargs=3,
        metavar=("CATEGORY", "TYPE", "CLASSIFICATION"),
        required=True,
    )
    decide.add_argument("--verdict", choices=["accept", "reject"], required=True)
    decide.add_argument("--apply", action="store_true", help="Apply an accepted proposal now")
    decide.add_argument("--by", help="Operator name")
    decide.add_argument("--notes")
    decide.set_defaults(handler=_cmd_decide)

    apply = commands.add_parser("apply", help="Apply decisions to the master catalog")
    apply.add_argument("decision_ids", type=_parse_uuid, nargs="+")
    apply.add_argument("--by", help="Operator name")
    apply.set_defaults(handler=_cmd_apply)

    archive = commands.add_parser("archive", help="Archive or unarchive decisions")
    archive.add_argument("decision_ids", type=_parse_uuid, nargs="+")
    archive.add_argument("--unarchive", action="store_true")
    archive.add_argument("--by", help="Operator name")
    archive.set_defaults(handler=_cmd_archive)

    undo = commands.add_parser("undo", help="Delete a pending or rejected decision")
    undo.add_argument("decision_id", type=_parse_uuid)
    undo.set_defaults(handler=_cmd_undo)

    revert = commands.add_parser("revert", help="Propose restoring an applied decision")
    revert.add_argument("decision_id", type=_parse_uuid)
    revert.add_argument("--by", help="Operator name")
    revert.set_defaults(handler=_cmd_revert)

    history = commands.add_parser("decisions", help="List decisions, newest first")
    _add_campaign_option(history)
    history.add_argument("--status", choices=[member.value for member in DecisionStatus])
    archived = history.add_mutually_exclusive_group()
    archived.add_argument("--archived", dest="archived", action="store_true", default=None)
    archived.add_argument("--active", dest="archived", action="store_false")
    history.set_defaults(handler=_cmd_decisions)

    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    handler: Handler = parsed_args.handler

    try:
        handler(parsed_args)
    except (DomainError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point: load ``.env``, trap Ctrl+C, dispatch."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
