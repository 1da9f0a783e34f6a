"""Turn service results into CLI outcomes."""

from typing import TypeVar

import click

from abvote.domain.results import Err, Ok, Result

T = TypeVar("T")


def unwrap(result: Result[T]) -> T:
    """Return the payload of an `Ok`, or exit with the error's message.

    Raises:
        click.ClickException: For any `Err` (exit code 1, no traceback).
    """
    match result:
        case Ok(value=value):
            return value
        case Err(error=error):
            raise click.ClickException(str(error)) from error
    raise TypeError(f"not a result: {result!r}")  # pragma: no cover
