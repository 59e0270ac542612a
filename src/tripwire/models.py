"""Core data model for secret-leak findings."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from tripwire.errors import EventValidationError

# Order matters: validation reports the first blank field in this order.
REQUIRED_TEXT_FIELDS = (
    "repository",
    "branch",
    "commit_sha",
    "rule",
    "file_path",
    "author",
)

_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


@dataclass(frozen=True)
class Event:
    """Non-secret metadata about one leaked credential finding.

    Never holds the secret value itself, only where and by which rule it was found.
    """

    repository: str  # "org/repo"
    branch: str
    commit_sha: str  # full-length hash
    rule: str  # detection rule id, e.g. "aws-access-key-id"
    file_path: str
    author: str
    detected_at: Optional[datetime] = None  # must be timezone-aware

    def validate(self) -> None:
        validate_event(self)

    def to_dict(self) -> dict:
        return {
            "repository": self.repository,
            "branch": self.branch,
            "commit_sha": self.commit_sha,
            "rule": self.rule,
            "file_path": self.file_path,
            "author": self.author,
            "detected_at": _wire_timestamp(self.detected_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """Build an event from the detector's JSON shape.

        Missing keys are left blank so :func:`validate_event` can name them.
        """
        detected_at = data.get("detected_at")
        if isinstance(detected_at, str):
            detected_at = parse_timestamp(detected_at)
        elif detected_at is not None and not isinstance(detected_at, datetime):
            raise EventValidationError("detected_at", f"is not a valid timestamp: {detected_at!r}")
        return cls(
            **{name: str(data.get(name) or "") for name in REQUIRED_TEXT_FIELDS},
            detected_at=detected_at,
        )


def validate_event(event: Event) -> None:
    """Check that every required field is present.

    Raises:
        EventValidationError: for the first blank field, or an unset/naive timestamp.
    """
    for name in REQUIRED_TEXT_FIELDS:
        value = getattr(event, name)
        if value is None or not str(value).strip():
            raise EventValidationError(name)

    if event.detected_at is None:
        raise EventValidationError("detected_at")
    if event.detected_at.tzinfo is None or event.detected_at.utcoffset() is None:
        raise EventValidationError("detected_at", "must be timezone-aware")
    try:
        event.detected_at.astimezone(timezone.utc)
    except OverflowError as e:
        raise EventValidationError("detected_at", "is out of range") from e


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC, second precision (``2026-02-26T12:00:00Z``)."""
    utc = value.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}Z"
    )


def _wire_timestamp(value: Optional[datetime]) -> Optional[str]:
    # Naive values have no zone to convert from; emit them as-is, without a "Z".
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.isoformat(timespec="seconds")
    return format_timestamp(value)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. A trailing ``Z`` means UTC.

    Fractional seconds of any length are accepted and kept to microseconds.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise EventValidationError("detected_at", f"is not a valid timestamp: {value!r}") from e


def load_event(path: str | Path) -> Event:
    """Read a single event from a JSON file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {p}, got {type(data).__name__}")
    return Event.from_dict(data)
