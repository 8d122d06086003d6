"""Shared CLI options and output utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click

from linkdeck.core.config import DEFAULT_DATA_DIR

DATA_DIR_ENV = "LINKDECK_DATA_DIR"

data_dir_option = click.option(
    "--data-dir",
    envvar=DATA_DIR_ENV,
    type=click.Path(file_okay=False, path_type=Path),
    default=str(DEFAULT_DATA_DIR),
    show_default=True,
    help=f"Directory holding links.json (env: {DATA_DIR_ENV}).",
)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def json_envelope(ok: bool, *, data: object = None, error: object = None) -> str:
    """Render the ``{"ok": ..., "data"|"error": ...}`` object printed by ``--json``."""
    envelope: dict = {"ok": ok}
    envelope.update((k, v) for k, v in (("data", data), ("error", error)) if v is not None)
    return json.dumps(envelope, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def json_error_obj(code: str, message: str) -> dict:
    return {"code": code, "message": message}


def output_error(message: str, code: str, is_json: bool, exit_code: int = 1) -> NoReturn:
    """Report a failure and exit with *exit_code*.

    With ``--json`` the error envelope goes to stdout, otherwise a one-line
    ``Error:`` message goes to stderr.
    """
    if is_json:
        click.echo(json_envelope(False, error=json_error_obj(code, message)))
    else:
        click.secho(f"Error: {message}", err=True, fg="red")
    raise SystemExit(exit_code)
