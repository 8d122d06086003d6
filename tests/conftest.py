"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from linkdeck.storage.store import LinkStore


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """Return a not-yet-created data directory inside tmp_path."""
    return tmp_path / "data"


@pytest.fixture()
def store(data_dir: Path) -> LinkStore:
    """Return an initialized store over ``data_dir/links.json``."""
    s = LinkStore(data_dir / "links.json")
    s.initialize()
    return s


@pytest.fixture()
def sample_links() -> list[dict]:
    return [
        {"id": "1", "name": "Docs", "url": "https://docs.example.com"},
        {
            "id": "2",
            "name": "Mail",
            "url": "https://mail.example.com",
            "color": "#ff8800",
            "description": "Inbox",
            "emoji": "📬",
        },
    ]


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Return a Click CliRunner for invoking CLI commands."""
    return CliRunner()


@pytest.fixture()
def invoke(cli_runner: CliRunner):
    """Return a helper that invokes CLI commands.

    Usage::

        result = invoke("list", "--data-dir", str(data_dir))
    """
    from linkdeck.cli.main import cli

    def _invoke(*args: str, **kwargs):
        return cli_runner.invoke(cli, list(args), **kwargs)

    return _invoke
