"""CLI entry point and commands."""

from __future__ import annotations

from pathlib import Path

import click

from linkdeck.cli.helpers import data_dir_option, json_envelope, output_error
from linkdeck.core.config import ServerConfig
from linkdeck.core.links import Link, LinkError
from linkdeck.storage.locks import LockTimeout
from linkdeck.storage.store import LinkStore, StoreError


@click.group()
def cli() -> None:
    """linkdeck: a tiny launcher backend serving a JSON list of links."""


@cli.command()
@data_dir_option
@click.option("--json", "output_json", is_flag=True, help="Output structured JSON.")
def init(data_dir: Path, output_json: bool) -> None:
    """Create the data directory and an empty links.json if missing."""
    store = LinkStore.from_config(ServerConfig(data_dir=data_dir))
    existed = store.data_file.exists()
    try:
        store.initialize()
    except StoreError as exc:
        output_error(str(exc), "INIT_ERROR", output_json)

    if output_json:
        click.echo(
            json_envelope(True, data={"data_file": str(store.data_file), "created": not existed})
        )
    elif existed:
        click.echo(f"Already initialized: {store.data_file}")
    else:
        click.echo(f"Initialized {store.data_file}")


def _format_link(link: Link) -> str:
    line = f"{link['name']} <{link['url']}>"
    if link.get("emoji"):
        line = f"{link['emoji']} {line}"
    if link.get("description"):
        line = f"{line}  {link['description']}"
    return line


@cli.command("list")
@data_dir_option
@click.option("--json", "output_json", is_flag=True, help="Output structured JSON.")
def list_cmd(data_dir: Path, output_json: bool) -> None:
    """Print the stored links in order."""
    store = LinkStore.from_config(ServerConfig(data_dir=data_dir))
    try:
        links = store.load()
    except (StoreError, LinkError, LockTimeout) as exc:
        output_error(str(exc), "READ_ERROR", output_json)

    if output_json:
        click.echo(json_envelope(True, data=links))
        return
    if not links:
        click.echo("No links.")
        return
    for link in links:
        click.echo(_format_link(link))


# ---------------------------------------------------------------------------
# Register command modules (must be after cli group is defined)
# ---------------------------------------------------------------------------
from linkdeck.cli import serve_cmd as _serve_cmd  # noqa: E402, F401

if __name__ == "__main__":
    cli()
