"""Alert sender: validate, render, serialize and POST a leak event.

One request per call, no retries. Every failure is raised as a
:class:`~tripwire.errors.NotificationError` subclass naming the stage that
failed; nothing is swallowed or reported here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable, Optional

import httpx

from tripwire.alerts.payloads import build_chat_payload, build_webhook_payload
from tripwire.errors import (
    DeliveryError,
    DeliveryTimeoutError,
    EndpointConfigError,
    PayloadSerializationError,
    TransportError,
)
from tripwire.http_client import _sanitize_for_log, create_client
from tripwire.models import Event, validate_event

logger = logging.getLogger(__name__)

Renderer = Callable[[Event], dict]

_ALLOWED_SCHEMES = ("http", "https")


def validate_webhook_url(url: str) -> None:
    """Require a non-blank absolute http(s) URL with a host.

    Parsed with httpx so that anything accepted here is sent to the same place.

    Raises:
        EndpointConfigError: if the URL is blank or malformed.
    """
    if url is None or not url.strip():
        raise EndpointConfigError(url, "webhook URL is required")
    if any(ch.isspace() for ch in url):
        raise EndpointConfigError(url, "invalid webhook URL: contains whitespace")
    try:
        parsed = httpx.URL(url)
        port = parsed.port
    except (httpx.InvalidURL, ValueError) as e:
        raise EndpointConfigError(url, f"invalid webhook URL: {e}") from e
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise EndpointConfigError(url, f"invalid webhook URL: unsupported scheme {parsed.scheme!r}")
    if not parsed.host:
        raise EndpointConfigError(url, "invalid webhook URL: missing host")
    if port is not None and not 1 <= port <= 65535:
        raise EndpointConfigError(url, f"invalid webhook URL: port {port} out of range")


class AlertSender:
    """Deliver leak alerts to Slack incoming webhooks or generic JSON endpoints.

    Owns one ``httpx.AsyncClient``. Pass ``client`` to reuse a pre-configured one
    (auth headers, proxies, a mock transport); it is then left open on
    :meth:`aclose`. The sender holds no other state and can be shared across tasks.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._owns_client = client is None
        self.client = client if client is not None else create_client()

    async def __aenter__(self) -> AlertSender:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def send_chat(self, url: str, event: Event, *, timeout: Optional[float] = None) -> None:
        """Send the Slack Block Kit rendering of ``event`` to ``url``."""
        await self._send(url, event, build_chat_payload, timeout)

    async def send_webhook(self, url: str, event: Event, *, timeout: Optional[float] = None) -> None:
        """Send the flat ``secret.detected`` record for ``event`` to ``url``."""
        await self._send(url, event, build_webhook_payload, timeout)

    async def _send(
        self,
        url: str,
        event: Event,
        render: Renderer,
        timeout: Optional[float],
    ) -> None:
        validate_event(event)
        validate_webhook_url(url)

        payload = render(event)
        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PayloadSerializationError(f"marshal payload: {e}") from e

        safe_url = _sanitize_for_log(url)
        try:
            response = await asyncio.wait_for(
                self.client.post(url, content=body, headers={"Content-Type": "application/json"}),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise DeliveryTimeoutError(f"send webhook: no response within {timeout}s") from e
        except httpx.TimeoutException as e:
            raise DeliveryTimeoutError(f"send webhook: {e}") from e
        except httpx.InvalidURL as e:
            raise EndpointConfigError(url, f"invalid webhook URL: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"send webhook: {e}") from e

        logger.debug("POST %s -> HTTP %d", safe_url, response.status_code)
        if not 200 <= response.status_code <= 299:
            raise DeliveryError(response.status_code)


# ─── Synchronous helpers ─────────────────────────────────────────────────────


async def _send_once(
    kind: str,
    url: str,
    event: Event,
    headers: Optional[dict[str, str]],
    timeout: Optional[float],
) -> None:
    async with create_client(headers=headers) as client:
        sender = AlertSender(client)
        if kind == "chat":
            await sender.send_chat(url, event, timeout=timeout)
        else:
            await sender.send_webhook(url, event, timeout=timeout)


def send_chat_sync(
    url: str,
    event: Event,
    headers: Optional[dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> None:
    """Synchronous wrapper around :meth:`AlertSender.send_chat` using a fresh client."""
    asyncio.run(_send_once("chat", url, event, headers, timeout))


def send_webhook_sync(
    url: str,
    event: Event,
    headers: Optional[dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> None:
    """Synchronous wrapper around :meth:`AlertSender.send_webhook` using a fresh client."""
    asyncio.run(_send_once("webhook", url, event, headers, timeout))
