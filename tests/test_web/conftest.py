"""Server-specific fixtures."""

from __future__ import annotations

import socket
import threading
from pathlib import Path

import pytest

from linkdeck.core.config import ServerConfig
from linkdeck.storage.store import LinkStore
from linkdeck.web.server import create_server

INDEX_HTML = "<!DOCTYPE html>\n<html><body><div id=\"app\">launcher</div></body></html>\n"


def _get_free_port() -> int:
    """Find an available TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture()
def static_file(tmp_path: Path) -> Path:
    path = tmp_path / "index.html"
    path.write_text(INDEX_HTML, encoding="utf-8")
    return path


@pytest.fixture()
def server_config(data_dir: Path, static_file: Path) -> ServerConfig:
    return ServerConfig(
        data_dir=data_dir, static_file=static_file, host="127.0.0.1", port=_get_free_port()
    )


@pytest.fixture()
def link_server(server_config: ServerConfig):
    """Start a server on a random port, yield (base_url, store)."""
    store = LinkStore.from_config(server_config)
    store.initialize()
    server = create_server(server_config, store)

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield f"http://{server_config.host}:{server_config.port}", store

    server.shutdown()
    server.server_close()
