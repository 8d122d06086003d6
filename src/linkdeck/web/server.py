"""HTTP server for the link API and the front-end entry file."""

from __future__ import annotations

import logging
import mimetypes
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from linkdeck.core.config import API_LINKS_PATH, ServerConfig
from linkdeck.core.links import Link, LinkError, ParseError, parse_links, serialize_links
from linkdeck.storage.locks import LockTimeout
from linkdeck.storage.store import LinkStore, StoreError

logger = logging.getLogger(__name__)

# Maximum allowed request body size (1 MiB) to prevent DoS via oversized payloads.
MAX_REQUEST_BODY_BYTES = 1_048_576
MAX_CHUNK_LINE_BYTES = 1024

METHOD_NOT_ALLOWED = "Method not allowed"

_STORE_ERRORS = (StoreError, LinkError, LockTimeout)


# ---------------------------------------------------------------------------
# Request handler
# ---------------------------------------------------------------------------


def _make_handler_class(store: LinkStore, static_file: Path) -> type:
    """Create a handler class bound to a specific store and entry file."""

    class LinkHandler(BaseHTTPRequestHandler):
        _store: LinkStore = store
        _static_file: Path = static_file

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.info("%s - %s", self.address_string(), format % args)

        def do_GET(self) -> None:  # noqa: N802
            if self._is_api():
                self._handle_get_links()
            else:
                self._serve_static()

        def do_HEAD(self) -> None:  # noqa: N802
            if self._is_api():
                self._method_not_allowed()
            else:
                self._serve_static(head_only=True)

        def do_POST(self) -> None:  # noqa: N802
            if self._is_api():
                self._handle_post_links()
            else:
                self._method_not_allowed()

        def _method_not_allowed(self) -> None:
            self._send_text(405, METHOD_NOT_ALLOWED)

        do_PUT = _method_not_allowed  # noqa: N815
        do_DELETE = _method_not_allowed  # noqa: N815
        do_PATCH = _method_not_allowed  # noqa: N815
        do_OPTIONS = _method_not_allowed  # noqa: N815

        def _is_api(self) -> bool:
            return urlparse(self.path).path == API_LINKS_PATH

        # ---------------------------------------------------------------
        # Static file serving
        # ---------------------------------------------------------------

        def _serve_static(self, *, head_only: bool = False) -> None:
            filepath = self._static_file
            try:
                data = filepath.read_bytes()
            except OSError:
                self._send_text(404, "404 page not found")
                return
            content_type, _ = mimetypes.guess_type(filepath.name)
            content_type = content_type or "application/octet-stream"
            if content_type.startswith("text/"):
                content_type = f"{content_type}; charset=utf-8"
            self.send_response(200)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            if not head_only:
                self.wfile.write(data)

        # ---------------------------------------------------------------
        # Response helpers
        # ---------------------------------------------------------------

        def _send_json(self, status: int, body: str) -> None:
            data = body.encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        def _send_text(self, status: int, message: str) -> None:
            data = f"{message}\n".encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("X-Content-Type-Options", "nosniff")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        # ---------------------------------------------------------------
        # /api/links
        # ---------------------------------------------------------------

        def _handle_get_links(self) -> None:
            try:
                links = self._store.load()
                body = serialize_links(links, indent=None)
            except _STORE_ERRORS as exc:
                self._send_text(500, str(exc))
                return
            self._send_json(200, body)

        def _read_request_body(self) -> bytes | None:
            """Read the raw request body. Returns None after sending an error."""
            if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
                return self._read_chunked_body()

            try:
                content_length = int(self.headers.get("Content-Length", 0))
            except (TypeError, ValueError):
                self._send_text(400, "Missing or invalid Content-Length")
                return None

            if content_length <= 0:
                self._send_text(400, "Empty request body")
                return None

            if content_length > MAX_REQUEST_BODY_BYTES:
                self._send_text(413, f"Request body exceeds {MAX_REQUEST_BODY_BYTES} bytes")
                return None

            return self.rfile.read(content_length)

        def _read_chunked_body(self) -> bytes | None:
            """Decode a ``Transfer-Encoding: chunked`` body under the same size cap."""
            chunks: list[bytes] = []
            total = 0
            while True:
                size_line = self.rfile.readline(MAX_CHUNK_LINE_BYTES)
                try:
                    size = int(size_line.split(b";", 1)[0].strip(), 16)
                except ValueError:
                    size = -1
                if size < 0:
                    self._send_text(400, "Malformed chunked request body")
                    return None
                if size == 0:
                    break
                total += size
                if total > MAX_REQUEST_BODY_BYTES:
                    self._send_text(413, f"Request body exceeds {MAX_REQUEST_BODY_BYTES} bytes")
                    return None
                chunk = self.rfile.read(size)
                if len(chunk) < size:
                    self._send_text(400, "Malformed chunked request body")
                    return None
                chunks.append(chunk)
                self.rfile.readline(MAX_CHUNK_LINE_BYTES)

            # Skip trailer headers up to the terminating blank line.
            while self.rfile.readline(MAX_CHUNK_LINE_BYTES) not in (b"\r\n", b"\n", b""):
                pass

            if total == 0:
                self._send_text(400, "Empty request body")
                return None
            return b"".join(chunks)

        def _handle_post_links(self) -> None:
            """Replace the whole collection with the posted array and echo it."""
            raw = self._read_request_body()
            if raw is None:
                return  # error already sent

            try:
                links: list[Link] = parse_links(raw)
            except ParseError as exc:
                self._send_text(400, str(exc))
                return

            try:
                self._store.save(links)
                body = serialize_links(links, indent=None)
            except _STORE_ERRORS as exc:
                self._send_text(500, str(exc))
                return
            self._send_json(200, body)

    return LinkHandler


# ---------------------------------------------------------------------------
# Server factory
# ---------------------------------------------------------------------------


def create_server(config: ServerConfig, store: LinkStore | None = None) -> ThreadingHTTPServer:
    """Create a threaded HTTP server bound to ``config.host``:``config.port``.

    Parameters
    ----------
    config:
        Bind address and paths.  ``config.static_file`` is served for every
        path other than ``/api/links``.
    store:
        Store backing ``/api/links``.  Defaults to one over ``config.data_file``.
        The caller is responsible for having initialized it.

    Raises
    ------
    OSError
        If the address cannot be bound.
    """
    if store is None:
        store = LinkStore.from_config(config)
    handler_cls = _make_handler_class(store, config.static_file)
    server = ThreadingHTTPServer((config.host, config.port), handler_cls)
    return server
