"""CLI entry point for tripwire alert delivery."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from tripwire import __version__
from tripwire.alerts import AlertSender, build_chat_payload, build_webhook_payload
from tripwire.errors import NotificationError
from tripwire.http_client import DEFAULT_TIMEOUT, create_client
from tripwire.models import Event, load_event

console = Console(stderr=True)


def _load_valid_event(path: str) -> Event:
    try:
        event = load_event(path)
        event.validate()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return event


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ``Name: value`` options into a header dict."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


@click.group()
@click.version_option(version=__version__, prog_name="tripwire")
def main():
    """tripwire: notify chat channels and webhooks about leaked secrets.

    Events are JSON files with repository, branch, commit_sha, rule,
    file_path, author and detected_at keys. They never contain the secret itself.
    """
    pass


@main.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format", "-f", "payload_format",
    type=click.Choice(["chat", "webhook"]),
    default="chat",
    help="Payload shape to render",
)
def render(event_file: str, payload_format: str):
    """Print the payload that would be sent for EVENT_FILE (no network)."""
    event = _load_valid_event(event_file)
    builder = build_chat_payload if payload_format == "chat" else build_webhook_payload
    click.echo(json.dumps(builder(event), indent=2))


async def _notify_all(
    targets: list[tuple[str, str]],
    event: Event,
    headers: dict[str, str],
    timeout: float,
) -> list[tuple[str, NotificationError]]:
    failures: list[tuple[str, NotificationError]] = []
    async with create_client(timeout=timeout, headers=headers) as client:
        sender = AlertSender(client)
        for kind, url in targets:
            send = sender.send_chat if kind == "slack" else sender.send_webhook
            try:
                await send(url, event)
            except NotificationError as e:
                failures.append((kind, e))
    return failures


@main.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--slack-url", envvar="TRIPWIRE_SLACK_WEBHOOK_URL", help="Slack incoming webhook URL")
@click.option("--webhook-url", envvar="TRIPWIRE_WEBHOOK_URL", help="Generic JSON webhook URL")
@click.option("--header", "-H", "header_values", multiple=True, help="Extra request header 'Name: value' (repeatable)")
@click.option("--timeout", type=float, default=DEFAULT_TIMEOUT, show_default=True, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def notify(
    event_file: str,
    slack_url: Optional[str],
    webhook_url: Optional[str],
    header_values: tuple[str, ...],
    timeout: float,
    verbose: bool,
):
    """Send EVENT_FILE to every configured target.

    \b
    Exit codes:
      0  Every target accepted the alert
      1  Invalid event, or at least one target failed
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    targets: list[tuple[str, str]] = []
    if slack_url:
        targets.append(("slack", slack_url))
    if webhook_url:
        targets.append(("webhook", webhook_url))
    if not targets:
        raise click.UsageError("Provide --slack-url and/or --webhook-url (or set TRIPWIRE_SLACK_WEBHOOK_URL / TRIPWIRE_WEBHOOK_URL)")

    headers = _parse_headers(header_values)
    event = _load_valid_event(event_file)

    failures = asyncio.run(_notify_all(targets, event, headers, timeout))
    failed = {kind for kind, _ in failures}
    for kind, err in failures:
        console.print(f"[red]✗[/red] {kind} ({err.stage}): {escape(str(err))}", highlight=False)
    for kind, _ in targets:
        if kind not in failed:
            console.print(f"[green]✓[/green] {kind} alert sent", highlight=False)

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
