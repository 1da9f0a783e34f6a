"""``abvote tests``: create, browse, vote on and manage A/B tests."""

from __future__ import annotations

import click
import click_extra as clickx

from abvote.service_layer import forms

from .context import CliState, pass_state
from .helpers import hyperlink, success, unwrap
from .render import echo_test_details, echo_tests

json_option = click.option(
    "--json", "as_json", is_flag=True, help="Print machine-readable JSON to stdout."
)

NOT_FOUND_MSG = "Test not found"


@click.group(name="tests", cls=clickx.ExtraGroup)
def tests_group() -> None:
    """A/B test commands."""


@tests_group.command()
@click.option("--title", prompt=True, help="At least 3 characters.")
@click.option("--image-a", prompt="Image A", help="http(s) or data:image/ URL.")
@click.option("--image-b", prompt="Image B", help="http(s) or data:image/ URL.")
@pass_state
def create(state: CliState, title: str, image_a: str, image_b: str) -> None:
    """Create a test owned by the signed-in user and print its id."""
    user = state.require_user()
    if problems := forms.validate_test_form(title, image_a, image_b):
        raise click.ClickException("\n".join(problems.values()))
    test = unwrap(state.app().entities.create_test(title, image_a, image_b, user.id))
    click.echo(test.id)
    success("Test created successfully!")


@tests_group.command()
@json_option
@pass_state
def browse(state: CliState, as_json: bool) -> None:
    """List every test that is not deleted."""
    app = state.app()
    user = app.session.current_user()
    echo_tests(
        app.entities.list_visible_tests(),
        app.entities,
        as_json=as_json,
        voter_id=user.id if user else None,
    )


@tests_group.command()
@click.option(
    "--include-deleted", is_flag=True, help="Also list tests in the trash."
)
@json_option
@pass_state
def mine(state: CliState, include_deleted: bool, as_json: bool) -> None:
    """List the signed-in user's tests."""
    user = state.require_user()
    entities = state.app().entities
    echo_tests(
        entities.list_owned_tests(user.id, include_deleted=include_deleted),
        entities,
        as_json=as_json,
        voter_id=user.id,
        empty_message="You haven't created any tests yet.",
    )


@tests_group.command()
@json_option
@pass_state
def trash(state: CliState, as_json: bool) -> None:
    """List the signed-in user's deleted tests."""
    user = state.require_user()
    entities = state.app().entities
    echo_tests(
        entities.list_deleted_tests(user.id),
        entities,
        as_json=as_json,
        empty_message="Trash is empty.",
    )


@tests_group.command()
@click.argument("test_id")
@json_option
@pass_state
def show(state: CliState, test_id: str, as_json: bool) -> None:
    """Show one test with its vote counts."""
    entities = state.app().entities
    if (test := entities.get_test(test_id)) is None:
        raise click.ClickException(NOT_FOUND_MSG)
    if as_json:
        echo_tests([test], entities, as_json=True)
    else:
        echo_test_details(test, entities)


@tests_group.command()
@click.argument("test_id")
@click.argument("option")
@pass_state
def vote(state: CliState, test_id: str, option: str) -> None:
    """Vote for OPTION (A or B) on a test. Votes cannot be changed."""
    user = state.require_user()
    unwrap(state.app().entities.vote(test_id, user.id, option.strip().upper()))
    success(f"Voted {option.strip().upper()}")


@tests_group.command()
@click.argument("test_id")
@pass_state
def delete(state: CliState, test_id: str) -> None:
    """Move one of your tests to the trash."""
    user = state.require_user()
    unwrap(state.app().entities.soft_delete(test_id, user.id))
    success("Test moved to trash")


@tests_group.command()
@click.argument("test_id")
@pass_state
def restore(state: CliState, test_id: str) -> None:
    """Restore one of your tests from the trash."""
    user = state.require_user()
    unwrap(state.app().entities.restore(test_id, user.id))
    success("Test restored")


@tests_group.command()
@click.argument("test_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@pass_state
def purge(state: CliState, test_id: str, yes: bool) -> None:
    """Permanently delete one of your tests."""
    user = state.require_user()
    entities = state.app().entities
    if not yes and (test := entities.get_test(test_id)) is not None:
        click.confirm(
            f'Are you sure you want to permanently delete "{test.title}"? '
            "This action cannot be undone.",
            abort=True,
            err=True,
        )
    unwrap(entities.purge(test_id, user.id))
    success("Test permanently deleted")


@tests_group.command()
@click.argument("test_id")
@click.option(
    "--base-url",
    default="",
    envvar="ABVOTE_SHARE_BASE_URL",
    show_envvar=True,
    help="Prefix for the link, e.g. https://example.org/.",
)
@click.option("--token-only", is_flag=True, help="Print only the share token.")
@pass_state
def share(state: CliState, test_id: str, base_url: str, token_only: bool) -> None:
    """Print a share link (or token) for a test."""
    app = state.app()
    if (test := app.entities.get_test(test_id)) is None:
        raise click.ClickException(NOT_FOUND_MSG)
    if token_only:
        click.echo(app.codec.encode(test))
        return
    link = app.codec.share_link(test, base_url)
    click.echo(hyperlink(link) if base_url else link)
