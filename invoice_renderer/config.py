"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


DEFAULT_MAX_CONCURRENT_RENDERS = max(4, min(32, os.cpu_count() or 4))
MAX_CONCURRENT_RENDERS = env_int(
    "INVOICE_MAX_CONCURRENT_RENDERS",
    DEFAULT_MAX_CONCURRENT_RENDERS,
    minimum=1,
)
MAX_INFLIGHT_RENDERS = env_int(
    "INVOICE_MAX_INFLIGHT_RENDERS",
    max(100, MAX_CONCURRENT_RENDERS * 4),
    minimum=1,
)
RENDER_QUEUE_TIMEOUT_MS = env_int("INVOICE_RENDER_QUEUE_TIMEOUT_MS", 120000, minimum=0)
RENDER_TIMEOUT_MS = env_int("INVOICE_RENDER_TIMEOUT_MS", 60000, minimum=1000)

# Invoice payloads are small JSON records; anything near this size is a mistake.
MAX_BODY_BYTES = env_int("INVOICE_MAX_BODY_BYTES", 1024 * 1024, minimum=1024)
LISTEN_BACKLOG = env_int("INVOICE_LISTEN_BACKLOG", 512, minimum=1)

BRAND_DOMAIN = env_str("INVOICE_BRAND_DOMAIN", "outpacestudios.com")
LOG_LEVEL = env_str("INVOICE_LOG_LEVEL", "INFO").upper()
