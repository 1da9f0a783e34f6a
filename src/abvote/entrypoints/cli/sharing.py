"""``abvote import`` and ``abvote open``: receive shared tests.

``open`` runs a fragment through the navigator exactly like the browser
would on page load, so auth redirects and share imports behave the same.
"""

from __future__ import annotations

import click

from abvote.service_layer.navigator import Route

from .context import CliState, pass_state
from .helpers import info, warn
from .render import echo_tests, report_import


@click.command(name="import")
@click.argument("token")
@pass_state
def import_token(state: CliState, token: str) -> None:
    """Import a test from a share TOKEN and print its id.

    The signed-in user becomes the owner; anonymous imports get a synthetic
    owner. Importing a test that already exists is reported, not an error.
    """
    app = state.app()
    user = app.session.current_user()
    test = report_import(app.codec.import_token(token, user.id if user else None))
    click.echo(test.id)


@click.command(name="open")
@click.argument("fragment")
@pass_state
def open_fragment(state: CliState, fragment: str) -> None:
    """Resolve a FRAGMENT such as '#/dashboard' or a full share link.

    Prints the view that would be shown; the browse and dashboard views also
    list their tests.
    """
    app = state.app()
    _, hash_sign, tail = fragment.partition("#")
    resolution = app.navigator.navigate(f"#{tail}" if hash_sign else fragment)

    if resolution.notice:
        warn(resolution.notice)
    if resolution.share_result is not None:
        report_import(resolution.share_result)
    if resolution.redirected and not resolution.notice:
        info(f"Redirected to {resolution.target_fragment}")
    click.echo(resolution.route.value)

    user = app.session.current_user()
    if resolution.route is Route.BROWSE:
        echo_tests(
            app.entities.list_visible_tests(),
            app.entities,
            voter_id=user.id if user else None,
        )
    elif resolution.route is Route.DASHBOARD and user is not None:
        echo_tests(
            app.entities.list_owned_tests(user.id),
            app.entities,
            voter_id=user.id,
            empty_message="You haven't created any tests yet.",
        )
