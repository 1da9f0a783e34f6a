"""Default marks for tests under `tests/functional/`."""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from abvote.entrypoints.cli.main import abvote as abvote_cli

# pylint: disable=unused-argument

FUNCTIONAL_ROOT = Path(__file__).parent.resolve()
MARKER_NAME = "functional"


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add default `functional` marks to items in `tests/functional/`."""
    for item in items:
        path = item.path.resolve()  # pytest>=8: pathlib.Path
        if FUNCTIONAL_ROOT in path.parents:
            if not any(marker.name == MARKER_NAME for marker in item.iter_markers()):
                item.add_marker(pytest.mark.functional)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def cli_env(tmp_path: Path, sqlite_url_file: str) -> dict[str, str | None]:
    """Environment for a CLI session against a migrated temp store."""
    return {
        "ABVOTE_STORE_URL": sqlite_url_file,
        "ABVOTE_LOG_PATH": str(tmp_path / "latest.log"),
        "ABVOTE_NAMESPACE": None,
        "ABVOTE_STORE_QUOTA": None,
        "ABVOTE_ID_SCHEME": None,
        "ABVOTE_SHARE_BASE_URL": None,
    }


@pytest.fixture
def run(cli_env):
    """Invoke ``abvote`` with `cli_env` and return the click `Result`."""
    runner = CliRunner()

    def _run(*args: str, input: str | None = None, env: dict | None = None):  # pylint: disable=redefined-builtin
        return runner.invoke(
            abvote_cli, list(args), input=input, env={**cli_env, **(env or {})}
        )

    return _run


@pytest.fixture
def signed_in(run):
    """Register and sign in ``ada@example.org``; returns the email."""
    result = run(
        "account", "register",
        "--email", "ada@example.org",
        "--password", "secret1",
        "--password-confirm", "secret1",
    )  # fmt: skip
    assert result.exit_code == 0, result.output
    return "ada@example.org"
