"""
Minimal HTTP page server for Kestrel templates.

Protocol: one request per connection.
- Only the request line is interpreted: `GET /path?query HTTP/1.1` or `POST`.
- For POST, the first line after the blank header separator holds the form
  parameters (`a=1&b=2`).
- `/` serves the index file. Paths resolve under the public root; anything
  outside it, or missing, is 404.
- Files with the template extension are rendered (see templates.py); other
  files are returned verbatim.
- Response: `HTTP/1.1 <status>\\r\\n\\r\\n<body>`, then the connection closes.

Connections are accepted on the calling thread and handled by a fixed-size
worker pool. Every request renders against its own fresh session.
"""

from __future__ import annotations

import logging
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from kestrel import KestrelValue
from kestrel import config
from kestrel.errors import KestrelError
from kestrel.server.templates import parse_params, render

logger = logging.getLogger(__name__)

BUFFER_SIZE = 40960
READ_TIMEOUT = 10.0
ACCEPT_POLL_INTERVAL = 0.5

STATUS_OK = "200 OK"
STATUS_NOT_FOUND = "404 NOT FOUND"
STATUS_ERROR = "500 INTERNAL SERVER ERROR"
NOT_FOUND_BODY = "Not found\r\n"
ERROR_BODY = "Internal server error\r\n"


@dataclass
class Request:
    method: str
    path: str
    query: dict[str, KestrelValue] = field(default_factory=dict)
    form: dict[str, KestrelValue] = field(default_factory=dict)


@dataclass
class Site:
    """Where pages come from and which of them are templates."""
    root: Path
    index: str = field(default_factory=config.get_index_file)
    template_ext: str = field(default_factory=config.get_template_extension)


def parse_request(data: bytes) -> Optional[Request]:
    """Parse the request line (and, for POST, the form line); None if unusable."""
    lines = data.decode("utf-8", errors="replace").splitlines()
    if not lines:
        return None
    parts = lines[0].split(" ")
    if len(parts) < 2 or parts[0] not in ("GET", "POST"):
        return None
    method, target = parts[0], parts[1]
    path, _, query = target.partition("?")
    request = Request(method, path, parse_params(query))
    if method == "POST":
        body = lines[1:]
        for i, line in enumerate(body):
            if not line.strip():
                if i + 1 < len(body):
                    request.form = parse_params(body[i + 1])
                break
    return request


def resolve_path(site: Site, path: str) -> Optional[Path]:
    """Map a request path to an existing file under the site root, or None."""
    relative = site.index if path in ("", "/") else path.lstrip("/")
    root = site.root.resolve()
    try:
        candidate = (root / relative).resolve(strict=True)
    except (OSError, RuntimeError):
        return None
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


def load_page(site: Site, request: Request) -> Optional[str]:
    """Return the page body for a request, or None when there is no such page."""
    file_path = resolve_path(site, request.path)
    if file_path is None:
        return None
    try:
        contents = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.warning("Cannot read %s", file_path)
        return None
    if file_path.suffix == site.template_ext:
        return render(contents, request.query, request.form)
    return contents


def respond(site: Site, data: bytes) -> bytes:
    """Build the full response for raw request bytes."""
    request = parse_request(data)
    status, body = STATUS_NOT_FOUND, NOT_FOUND_BODY
    if request is not None:
        logger.info("Request: %s %s", request.method, request.path)
        try:
            page = load_page(site, request)
        except (KestrelError, ZeroDivisionError):
            logger.exception("Template failed: %s", request.path)
            status, body = STATUS_ERROR, ERROR_BODY
        except RecursionError:
            # The traceback is as deep as the recursion
            logger.error("Template recursed too deeply: %s", request.path)
            status, body = STATUS_ERROR, ERROR_BODY
        except Exception:
            logger.exception("Unexpected error serving %s", request.path)
            status, body = STATUS_ERROR, ERROR_BODY
        else:
            if page is not None:
                status, body = STATUS_OK, page
    return f"HTTP/1.1 {status}\r\n\r\n{body}".encode("utf-8")


def handle_connection(site: Site, conn: socket.socket) -> None:
    """Read one request from `conn`, answer it and close the connection."""
    with conn:
        try:
            conn.settimeout(READ_TIMEOUT)
            data = conn.recv(BUFFER_SIZE)
            if not data:
                return
            conn.sendall(respond(site, data))
        except OSError as e:
            logger.warning("Connection error: %s", e)


class PageServer:
    """Accepts connections and hands them to a fixed pool of worker threads."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 80,
        site: Site | None = None,
        workers: int | None = None,
        stack_size: int | None = None,
    ):
        self.site = site or Site(config.get_public_root())
        self.workers = workers or config.get_worker_count()
        self.stack_size = config.get_stack_size() if stack_size is None else stack_size
        self._shutdown = threading.Event()
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind((host, port))
        self._socket.listen(128)
        self._socket.settimeout(ACCEPT_POLL_INTERVAL)

    @property
    def server_address(self) -> tuple[str, int]:
        return self._socket.getsockname()[:2]

    def serve_forever(self) -> None:
        config.apply_recursion_limit()
        if self.stack_size:
            # Applies to the worker threads the pool starts from here on
            threading.stack_size(self.stack_size)
        host, port = self.server_address
        logger.info("Serving %s at %s:%d with %d workers", self.site.root, host, port, self.workers)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="kestrel-worker") as pool:
            while not self._shutdown.is_set():
                try:
                    conn, addr = self._socket.accept()
                except TimeoutError:
                    continue
                except OSError:
                    if self._shutdown.is_set():
                        break
                    raise
                logger.info("New connection from %s:%d", *addr[:2])
                pool.submit(handle_connection, self.site, conn)
        self._socket.close()

    def shutdown(self) -> None:
        """Stop accepting connections; in-flight requests still complete."""
        self._shutdown.set()


def serve(host: str, port: int, root: Path | None = None, workers: int | None = None) -> None:
    site = Site(root) if root is not None else None
    PageServer(host, port, site=site, workers=workers).serve_forever()
