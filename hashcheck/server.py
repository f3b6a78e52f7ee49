from __future__ import annotations

import logging
from socketserver import ThreadingMixIn
from typing import Callable, Iterable, List, Tuple
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from .errors import BadRequest
from .exporter import ScrapeHandler
from .metrics import CONTENT_TYPE

logger = logging.getLogger(__name__)

INDEX_PAGE = b'<h1>hashcheck-exporter</h1><a href="/metrics">metrics</a>'

TEXT_PLAIN = "text/plain; charset=utf-8"

Headers = List[Tuple[str, str]]


def _http_response(
    start_response: Callable, status: str, headers: Headers, body: bytes, head: bool = False
) -> Iterable[bytes]:
    start_response(status, headers + [("Content-Length", str(len(body)))])
    return [] if head else [body]


def make_app(handler: ScrapeHandler) -> Callable:
    """Build the WSGI application serving / and /metrics through handler."""

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/") or "/"
        method = environ.get("REQUEST_METHOD", "GET").upper()
        head = method == "HEAD"

        if method not in ("GET", "HEAD"):
            return _http_response(
                start_response, "405 Method Not Allowed", [("Content-Type", TEXT_PLAIN)], b"method not allowed\n"
            )

        if path == "/":
            return _http_response(
                start_response, "200 OK", [("Content-Type", "text/html; charset=utf-8")], INDEX_PAGE, head
            )

        if path != "/metrics":
            return _http_response(
                start_response, "404 Not Found", [("Content-Type", TEXT_PLAIN)], b"not found\n", head
            )

        # Every scrape runs a probe cycle, so HEAD is not served here.
        if head:
            return _http_response(
                start_response,
                "405 Method Not Allowed",
                [("Content-Type", TEXT_PLAIN), ("Allow", "GET")],
                b"method not allowed\n",
                head,
            )

        params = parse_qs(environ.get("QUERY_STRING", ""))
        try:
            output = handler.scrape(params)
        except BadRequest as e:
            return _http_response(
                start_response,
                "400 Bad Request",
                [("Content-Type", TEXT_PLAIN)],
                f"{e}\n".encode("utf-8"),
            )
        except Exception as e:
            logger.exception("scrape failed")
            return _http_response(
                start_response,
                "500 Internal Server Error",
                [("Content-Type", TEXT_PLAIN)],
                f"scrape failed: {e}\n".encode("utf-8"),
            )

        return _http_response(start_response, "200 OK", [("Content-Type", CONTENT_TYPE)], output)

    return app


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Serves each scrape on its own thread."""

    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def parse_listen(addr: str) -> Tuple[str, int]:
    """Split host:port; an empty host means all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {addr!r}")
    return host or "0.0.0.0", int(port)


def serve(handler: ScrapeHandler, addr: str) -> None:
    """Bind addr and serve forever. Raises OSError when the address cannot be bound."""
    host, port = parse_listen(addr)
    httpd = make_server(
        host, port, make_app(handler), server_class=ThreadingWSGIServer, handler_class=_QuietHandler
    )
    logger.info("listen on %s:%d", host, port)
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
