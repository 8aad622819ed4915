import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Larger epoch numbers are milliseconds (what JavaScript's Date uses).
EPOCH_MILLIS_THRESHOLD = 10 ** 11


class MalformedPayload(ValueError):
    """A response object does not have the shape the client expects."""


def parse_timestamp(value) -> datetime:
    """
    Parse a timestamp as the API may send it:
      - ISO-8601 ("2025-03-01T09:30:00Z", trailing 'Z' allowed)
      - RFC 1123 HTTP date ("Sat, 01 Mar 2025 09:30:00 GMT", Flask's jsonify)
      - epoch number, seconds or milliseconds
    """
    if isinstance(value, bool):
        raise MalformedPayload(f"Invalid date: {value!r}")
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedPayload(f"Invalid date: {value!r}") from e
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayload(f"Invalid date: {value!r}")

    text = value.strip()
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"Invalid date: {value!r}") from e


def _optional_timestamp(data) -> Optional[datetime]:
    """A bad or missing date keeps the record; it is shown without a timestamp."""
    value = data.get("date") if isinstance(data, dict) else None
    try:
        return parse_timestamp(value)
    except MalformedPayload as e:
        logger.warning("%s (id=%r)", e, data.get("id") if isinstance(data, dict) else None)
        return None


def _require(data, key: str):
    if not isinstance(data, dict):
        raise MalformedPayload(f"Expected an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise MalformedPayload(f"Missing {key!r}")
    return data[key]


@dataclass(frozen=True)
class Entry:
    id: Any
    text: str
    mood: Optional[str]
    date: Optional[datetime]

    @classmethod
    def from_json(cls, data) -> "Entry":
        mood = data.get("mood") if isinstance(data, dict) else None
        return cls(
            id=_require(data, "id"),
            text=str(_require(data, "text")),
            # Empty mood means "no mood"
            mood=str(mood) if mood else None,
            date=_optional_timestamp(data),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "mood": self.mood,
            "date": self.date.isoformat() if self.date else None,
        }


@dataclass(frozen=True)
class MemoryOption:
    id: Any
    summary: str
    date: Optional[datetime]

    @classmethod
    def from_json(cls, data) -> "MemoryOption":
        return cls(
            id=_require(data, "id"),
            summary=str(_require(data, "summary")),
            date=_optional_timestamp(data),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "summary": self.summary,
            "date": self.date.isoformat() if self.date else None,
        }
