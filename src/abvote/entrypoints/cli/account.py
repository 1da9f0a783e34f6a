"""``abvote account``: sign up, sign in, sign out and show the current user.

The session lives in the store, so signing in once carries over to later
invocations against the same store (like a browser tab reopening the app).
"""

from __future__ import annotations

import click
import click_extra as clickx

from abvote.service_layer import forms

from .context import CliState, pass_state
from .helpers import info, success, unwrap, warn


def _fail_on_field_errors(problems: dict[str, str]) -> None:
    if problems:
        raise click.ClickException("\n".join(problems.values()))


@click.group(cls=clickx.ExtraGroup)
def account() -> None:
    """Account and session commands."""


@account.command()
@click.option("--email", prompt=True, help="Email address to register.")
@click.option("--password", prompt=True, hide_input=True, help="At least 6 characters.")
@click.option(
    "--password-confirm",
    prompt="Repeat for confirmation",
    hide_input=True,
    help="Must match --password.",
)
@pass_state
def register(state: CliState, email: str, password: str, password_confirm: str) -> None:
    """Create an account and sign in with it."""
    _fail_on_field_errors(forms.validate_registration(email, password, password_confirm))
    user = unwrap(state.app().session.sign_up(email.strip(), password))
    success(f"Account created. Signed in as {user.email}")


@account.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@pass_state
def login(state: CliState, email: str, password: str) -> None:
    """Sign in, replacing any current session."""
    _fail_on_field_errors(forms.validate_login(email, password))
    user = unwrap(state.app().session.sign_in(email.strip(), password))
    success(f"Signed in as {user.email}")


@account.command()
@pass_state
def logout(state: CliState) -> None:
    """Sign out."""
    session = state.app().session
    if not session.is_authenticated():
        info("Not signed in.")
        return
    unwrap(session.logout())
    success("Signed out")


@account.command()
@pass_state
def whoami(state: CliState) -> None:
    """Print the signed-in user's email (exit 1 when signed out)."""
    user = state.app().session.current_user()
    if user is None:
        warn("Not signed in.")
        raise click.exceptions.Exit(1)
    click.echo(user.email)
