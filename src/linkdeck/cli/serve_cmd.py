"""``linkdeck serve`` command."""

from __future__ import annotations

import errno
import logging
import socket
import sys
from pathlib import Path

import click

from linkdeck.cli.helpers import data_dir_option, output_error
from linkdeck.cli.main import cli
from linkdeck.core.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_STATIC_FILE, ServerConfig
from linkdeck.storage.store import LinkStore, StoreError

logger = logging.getLogger("linkdeck")


def _next_free_port(host: str, port: int, attempts: int = 20) -> int | None:
    """Return the first port above *port* that binds, or None."""
    for candidate in range(port + 1, port + 1 + attempts):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((host, candidate))
        except OSError:
            continue
        finally:
            sock.close()
        return candidate
    return None


@cli.command("serve")
@data_dir_option
@click.option(
    "--static-file",
    envvar="LINKDECK_STATIC_FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    default=str(DEFAULT_STATIC_FILE),
    help="Front-end entry file served for every non-API path.",
)
@click.option("--host", envvar="LINKDECK_HOST", default=DEFAULT_HOST, show_default=True, help="Host to bind to.")
@click.option("--port", envvar="LINKDECK_PORT", default=DEFAULT_PORT, type=int, show_default=True, help="Port to bind to.")
def serve_cmd(data_dir: Path, static_file: Path, host: str, port: int) -> None:
    """Initialize the data store and serve the link API and front end.

    Startup is fail-fast: if the data directory or file cannot be created,
    or the port cannot be bound, the command exits with status 1.
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    config = ServerConfig(data_dir=data_dir, static_file=static_file, host=host, port=port)
    store = LinkStore.from_config(config)
    try:
        store.initialize()
    except StoreError as exc:
        output_error(str(exc), "INIT_ERROR", False)

    from linkdeck.web.server import create_server

    try:
        server = create_server(config, store)
    except OSError as exc:
        if exc.errno == errno.EADDRINUSE:
            alt = _next_free_port(host, port)
            hint = f"  linkdeck serve --port {alt}" if alt else "  linkdeck serve --port <PORT>"
            msg = (
                f"Port {port} is already in use.\n"
                f"Stop the other process, or start on a free port:\n\n"
                f"{hint}"
            )
        else:
            msg = f"Server failed to start: {exc}"
        output_error(msg, "BIND_ERROR", False)

    logger.info("Server starting on %s:%d...", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        server.server_close()
        sys.exit(0)
    server.server_close()
