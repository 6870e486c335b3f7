"""WSGI application and command-line entry point for the receipt service."""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import signal
import threading
import time
from http import HTTPStatus
from socketserver import ThreadingMixIn
from typing import Any, Callable, Iterable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from receiptpoints.repository import MemoryRepository
from receiptpoints.schema import parse_receipt
from receiptpoints.server import INVALID_RECEIPT_MESSAGE, Response, Server

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]

_POINTS_PATH = re.compile(r"/receipts/([^/]+)/points")
_PROCESS_PATH = "/receipts/process"
_HEALTH_PATH = "/healthz"

_CORS_HEADERS = [
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type"),
]

_SHUTDOWN_TIMEOUT = 5.0


def _bad_request(error: BaseException) -> Response:
    logger.warning("Request error: %s", error)
    return Response.text(400, INVALID_RECEIPT_MESSAGE)


def _method_not_allowed(allowed: str) -> Response:
    return Response.text(405, "Method Not Allowed\n")


def _read_body(environ: dict) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return b""
    return environ["wsgi.input"].read(length)


def _process(server: Server, environ: dict) -> Response:
    try:
        data = json.loads(_read_body(environ))
        body = parse_receipt(data)
    except ValueError as exc:
        return _bad_request(exc)
    try:
        return server.post_receipts_process(body)
    except Exception as exc:  # every handler failure is reported as a bad request
        return _bad_request(exc)


def _points(server: Server, receipt_id: str) -> Response:
    try:
        return server.get_receipts_id_points(receipt_id)
    except Exception as exc:
        return _bad_request(exc)


def _route(server: Server, method: str, path: str, environ: dict) -> tuple[Response, list]:
    if path == _HEALTH_PATH:
        return Response.text(200, "OK"), []
    if path == _PROCESS_PATH:
        if method != "POST":
            return _method_not_allowed("POST"), [("Allow", "POST")]
        return _process(server, environ), []
    match = _POINTS_PATH.fullmatch(path)
    if match is not None:
        if method not in ("GET", "HEAD"):
            return _method_not_allowed("GET"), [("Allow", "GET, HEAD")]
        return _points(server, match.group(1)), []
    return Response.text(404, "404 page not found\n"), []


def make_app(server: Server) -> WSGIApp:
    """Build the WSGI application serving the receipt endpoints."""

    def app(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET").upper()
        path = environ.get("PATH_INFO", "") or "/"
        started = time.perf_counter()
        logger.info("Started %s %s", method, path)

        if method == "OPTIONS":
            response, extra = Response(200), []
        else:
            response, extra = _route(server, method, path, environ)

        headers = list(_CORS_HEADERS) + extra
        if response.content_type is not None:
            headers.append(("Content-Type", response.content_type))
        headers.append(("Content-Length", str(len(response.body))))
        status = HTTPStatus(response.status)
        start_response(f"{status.value} {status.phrase}", headers)

        logger.info(
            "Completed %s %s in %.3fms",
            method,
            path,
            (time.perf_counter() - started) * 1000,
        )
        return [response.body]

    return app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        pass


def _serve(httpd: WSGIServer, port: int) -> None:
    logger.info("Server listening on port %s (Press Ctrl+C to stop)", port)
    httpd.serve_forever()
    logger.info("Server stopped.")


def main(argv: list[str] | None = None) -> int:
    """Run the receipt service until interrupted."""
    parser = argparse.ArgumentParser(
        prog="receiptpoints", description="Serve the receipt points API."
    )
    parser.add_argument(
        "--port",
        type=int,
        default=os.environ.get("PORT") or "8080",
        help="port to listen on (default: $PORT or 8080)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    app = make_app(Server(MemoryRepository()))
    try:
        httpd = make_server(
            "",
            args.port,
            app,
            server_class=_ThreadingWSGIServer,
            handler_class=_QuietHandler,
        )
    except OSError as exc:
        logger.error("Error starting server: %s", exc)
        return 1

    stop = threading.Event()

    def _on_signal(signum: int, frame: Any) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    thread = threading.Thread(target=_serve, args=(httpd, args.port), daemon=True)
    thread.start()

    while not stop.wait(0.5):
        if not thread.is_alive():
            break

    logger.info("Shutdown signal received, shutting down gracefully...")
    httpd.shutdown()
    thread.join(_SHUTDOWN_TIMEOUT)
    httpd.server_close()
    if thread.is_alive():
        logger.error("Server encountered error while shutting down: timed out")
        return 1
    logger.info("Server shutdown completed gracefully")
    return 0