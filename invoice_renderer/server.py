"""HTTP server entrypoints for invoice rendering."""

from __future__ import annotations

import atexit
import errno
import json
import logging
import multiprocessing as mp
import re
import threading
from concurrent.futures import ProcessPoolExecutor, TimeoutError as FutureTimeoutError
from concurrent.futures.process import BrokenProcessPool
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple

from .config import (
    LISTEN_BACKLOG,
    MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG,
    MAX_CONCURRENT_RENDERS,
    MAX_INFLIGHT_RENDERS,
    RENDER_QUEUE_TIMEOUT_MS,
    RENDER_TIMEOUT_MS,
)
from .errors import InvalidInvoiceError
from .models import InvoiceDocument

logger = logging.getLogger(__name__)

RENDER_INFLIGHT_SEMAPHORE = threading.BoundedSemaphore(MAX_INFLIGHT_RENDERS)
RENDER_EXECUTOR_LOCK = threading.Lock()
RENDER_EXECUTOR: Optional[ProcessPoolExecutor] = None
ValidationError = Tuple[int, Dict[str, Any]]

DISCONNECT_ERRNOS = {errno.EPIPE, errno.ECONNRESET, errno.ETIMEDOUT}
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def load_render_invoice():
    try:
        from .rendering import render_invoice
    except ModuleNotFoundError as exc:
        if exc.name in ("fpdf", "qrcode", "PIL"):
            raise DependencyError(
                f"Missing dependency '{exc.name}'. Install the project with "
                "'pip install -e .'."
            ) from exc
        raise
    return render_invoice


def create_render_executor() -> ProcessPoolExecutor:
    return ProcessPoolExecutor(
        max_workers=MAX_CONCURRENT_RENDERS,
        mp_context=mp.get_context("spawn"),
    )


def get_render_executor() -> ProcessPoolExecutor:
    global RENDER_EXECUTOR
    with RENDER_EXECUTOR_LOCK:
        if RENDER_EXECUTOR is None:
            RENDER_EXECUTOR = create_render_executor()
        return RENDER_EXECUTOR


def restart_render_executor(previous: ProcessPoolExecutor) -> ProcessPoolExecutor:
    global RENDER_EXECUTOR
    with RENDER_EXECUTOR_LOCK:
        if RENDER_EXECUTOR is previous:
            try:
                previous.shutdown(wait=False, cancel_futures=True)
            except Exception:
                logger.debug("Ignoring error while shutting down broken render pool", exc_info=True)
            RENDER_EXECUTOR = create_render_executor()
        if RENDER_EXECUTOR is None:
            RENDER_EXECUTOR = create_render_executor()
        return RENDER_EXECUTOR


def submit_render_job(document: InvoiceDocument):
    render_invoice = load_render_invoice()
    executor = get_render_executor()
    try:
        return executor.submit(render_invoice, document)
    except BrokenProcessPool:
        return restart_render_executor(executor).submit(render_invoice, document)


def shutdown_render_executor() -> None:
    global RENDER_EXECUTOR
    with RENDER_EXECUTOR_LOCK:
        executor = RENDER_EXECUTOR
        RENDER_EXECUTOR = None
    if executor is not None:
        try:
            executor.shutdown(wait=False, cancel_futures=True)
        except Exception:
            logger.debug("Ignoring error while shutting down render pool", exc_info=True)


atexit.register(shutdown_render_executor)


def validate_invoice_payload(
    body: bytes,
) -> Tuple[Optional[InvoiceDocument], Optional[ValidationError]]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, (
            400,
            {"error": "invalid_encoding", "detail": "Body must be UTF-8 encoded JSON."},
        )
    except json.JSONDecodeError as exc:
        return None, (
            400,
            {
                "error": "invalid_json",
                "detail": f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            },
        )

    if not isinstance(payload, dict):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "JSON root must be an object."},
        )

    try:
        document = InvoiceDocument.from_payload(payload)
    except InvalidInvoiceError as exc:
        return None, (
            400,
            {"error": "invalid_invoice", "detail": str(exc), "problems": exc.problems},
        )

    return document, None


def pdf_filename(document: InvoiceDocument) -> str:
    number = _UNSAFE_FILENAME_CHARS.sub("-", document.invoice_number).strip("-")
    return f"invoice-{number}.pdf" if number else "invoice.pdf"


class InvoiceHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG

    def _write_response(
        self,
        status: int,
        content_type: str,
        body: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            for name, value in (headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        body = json.dumps(payload).encode("utf-8")
        return self._write_response(status, "application/json", body)

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_json(
                411,
                {
                    "error": "missing_content_length",
                    "detail": "Content-Length header is required.",
                },
            )
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_json(
                400,
                {
                    "error": "invalid_content_length",
                    "detail": "Content-Length must be an integer.",
                },
            )
            return None

        if content_length <= 0:
            self._send_json(400, {"error": "empty_body", "detail": "Request body cannot be empty."})
            return None

        if content_length > self.MAX_BODY_BYTES:
            self._send_json(
                413,
                {
                    "error": "payload_too_large",
                    "detail": f"Body exceeds {self.MAX_BODY_BYTES} bytes.",
                },
            )
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def do_POST(self) -> None:
        if self.path not in ("/", "/invoice", "/generate"):
            self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})
            return

        body = self._read_body()
        if body is None:
            return

        document, validation_error = validate_invoice_payload(body)
        if document is None:
            status, payload_body = validation_error or (
                400,
                {"error": "invalid_payload", "detail": "Invoice payload could not be read."},
            )
            self._send_json(status, payload_body)
            return

        acquired = RENDER_INFLIGHT_SEMAPHORE.acquire(timeout=RENDER_QUEUE_TIMEOUT_MS / 1000.0)
        if not acquired:
            retry_after_seconds = max(1, (RENDER_QUEUE_TIMEOUT_MS + 999) // 1000)
            self._send_json(
                503,
                {
                    "error": "server_busy",
                    "detail": "Render queue is full; retry shortly.",
                    "retry_after_ms": RENDER_QUEUE_TIMEOUT_MS,
                    "retry_after_seconds": retry_after_seconds,
                    "max_concurrent_renders": MAX_CONCURRENT_RENDERS,
                    "max_inflight_renders": MAX_INFLIGHT_RENDERS,
                },
            )
            return

        future = None
        try:
            future = submit_render_job(document)
            pdf_bytes = future.result(timeout=RENDER_TIMEOUT_MS / 1000.0)
        except FutureTimeoutError:
            if future is not None:
                future.cancel()
            self._send_json(
                504,
                {
                    "error": "render_timeout",
                    "detail": f"Render exceeded timeout of {RENDER_TIMEOUT_MS} ms.",
                },
            )
            return
        except BrokenProcessPool:
            restart_render_executor(get_render_executor())
            self._send_json(
                503,
                {
                    "error": "render_pool_restarting",
                    "detail": "Render worker pool restarted; retry shortly.",
                },
            )
            return
        except Exception as exc:
            logger.exception("Render failed for invoice %s", document.invoice_number)
            self._send_json(500, {"error": "render_failed", "detail": str(exc)})
            return
        finally:
            RENDER_INFLIGHT_SEMAPHORE.release()

        self._write_response(
            200,
            "application/pdf",
            pdf_bytes,
            {"Content-Disposition": f'inline; filename="{pdf_filename(document)}"'},
        )

    def do_GET(self) -> None:
        if self.path in ("/", "/health", "/healthz", "/ready"):
            self._send_json(200, {"status": "ok"})
            return
        self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class InvoiceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    load_render_invoice()
    get_render_executor()
    server = InvoiceHTTPServer((host, port), InvoiceHandler)
    logger.info("Invoice API server listening on http://%s:%s", host, port)
    server.serve_forever()
