"""Text and JSON rendering of tests for the CLI."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import click

from abvote.domain import errors
from abvote.domain.models import ABTest, VoteTally, to_epoch_ms
from abvote.domain.results import Err, Ok, Result
from abvote.service_layer.entity_store import EntityStore

from .helpers import success, unwrap, warn

IMPORTED_MSG = "Test imported successfully!"
ALREADY_IMPORTED_MSG = "This test already exists in your collection."


def percent(count: int, total: int) -> int:
    """Share of `total` as a whole percentage, halves rounded up."""
    return (count * 200 + total) // (total * 2) if total else 0


def tally_line(tally: VoteTally) -> str:
    if not tally.total:
        return "A: 0  B: 0"
    return (
        f"A: {tally.count_a} ({percent(tally.count_a, tally.total)}%)  "
        f"B: {tally.count_b} ({percent(tally.count_b, tally.total)}%)"
    )


def summarize(
    test: ABTest, entities: EntityStore, voter_id: str | None = None
) -> str:
    """One-line summary: id, title, tally, submitter and the viewer's vote."""
    parts = [
        test.id,
        test.title,
        tally_line(entities.vote_tally(test)),
        entities.submitter_label(test.user_id),
    ]
    if voter_id is not None and (choice := test.votes.get(voter_id)) is not None:
        parts.append(f"voted {choice.value}")
    if test.deleted:
        parts.append("deleted")
    return "  |  ".join(parts)


def to_document(test: ABTest, entities: EntityStore) -> dict[str, Any]:
    tally = entities.vote_tally(test)
    return {
        "id": test.id,
        "title": test.title,
        "imageA": test.image_a,
        "imageB": test.image_b,
        "owner": entities.submitter_label(test.user_id),
        "votesA": tally.count_a,
        "votesB": tally.count_b,
        "deleted": test.deleted,
        "deletedAt": to_epoch_ms(test.deleted_at) if test.deleted_at else None,
        "shared": test.shared,
    }


def echo_tests(
    tests: Iterable[ABTest],
    entities: EntityStore,
    *,
    as_json: bool = False,
    voter_id: str | None = None,
    empty_message: str = "No tests yet.",
) -> None:
    """Write tests to stdout, one summary per line or as a JSON array."""
    tests = list(tests)
    if as_json:
        click.echo(json.dumps([to_document(t, entities) for t in tests], indent=2))
        return
    if not tests:
        click.echo(empty_message, err=True)
        return
    for test in tests:
        click.echo(summarize(test, entities, voter_id))


def echo_test_details(test: ABTest, entities: EntityStore) -> None:
    tally = entities.vote_tally(test)
    lines = [
        f"Title   : {test.title}",
        f"Id      : {test.id}",
        f"Image A : {test.image_a}",
        f"Image B : {test.image_b}",
        f"Owner   : {entities.submitter_label(test.user_id)}",
        f"Votes   : {tally_line(tally)}  (total {tally.total})",
    ]
    if test.deleted:
        lines.append("Status  : deleted")
    for line in lines:
        click.echo(line)


def report_import(result: Result[ABTest]) -> ABTest:
    """Report a share import. Duplicates are a warning, not a failure."""
    match result:
        case Ok(value=test):
            success(IMPORTED_MSG)
            return test
        case Err(error=errors.DuplicateTestError(existing=existing)):
            warn(ALREADY_IMPORTED_MSG)
            return existing
    return unwrap(result)
