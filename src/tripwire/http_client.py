"""Default HTTP client for alert delivery."""

from __future__ import annotations

from typing import Optional

import httpx

DEFAULT_TIMEOUT = 10.0  # seconds


def _sanitize_for_log(value: object) -> str:
    """Sanitize a value for safe inclusion in log messages.

    Replaces newlines and carriage returns to prevent log injection.
    """
    return str(value).replace("\n", "\\n").replace("\r", "\\r")


def create_client(
    timeout: float = DEFAULT_TIMEOUT,
    headers: Optional[dict[str, str]] = None,
) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient for posting alerts.

    No transport-level retries: every send is a single attempt. Extra
    ``headers`` (e.g. an ``Authorization`` token) go on every request.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        headers=headers or {},
        follow_redirects=False,
    )
