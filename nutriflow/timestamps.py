# -*- coding: utf-8 -*-
"""Timestamp values at the document-store boundary.

Documents may carry time in two shapes: the store-native ``Timestamp``
(seconds + nanoseconds since the epoch, what ``SERVER_TIMESTAMP`` resolves
to) or a plain date value supplied by the caller. Everything read from the
store is normalized into an aware UTC ``datetime`` so the rest of the code
never has to care which one was written.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Optional

_TAG = "__type__"


@dataclass(frozen=True, order=True)
class Timestamp:
    seconds: int
    nanoseconds: int = 0

    @classmethod
    def now(cls) -> "Timestamp":
        return cls.from_datetime(datetime.now(timezone.utc))

    @classmethod
    def from_datetime(cls, value: datetime) -> "Timestamp":
        value = _aware(value)
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        delta = value - epoch
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanoseconds=delta.microseconds * 1000)

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.nanoseconds // 1000
        )

    def isoformat(self) -> str:
        return self.to_datetime().isoformat().replace("+00:00", "Z")


class _ServerTimestamp:
    """Sentinel replaced by the commit time of the write that carries it."""

    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_datetime(value: Any) -> Optional[datetime]:
    """Accept any timestamp representation and return an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, Timestamp):
        return value.to_datetime()
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, dict):
        if value.get(_TAG) == "timestamp" or "seconds" in value or "_seconds" in value:
            seconds = value.get("seconds", value.get("_seconds"))
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0))
            return Timestamp(int(seconds), int(nanos or 0)).to_datetime()
        if value.get(_TAG) == "date":
            return to_datetime(value.get("value"))
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return _aware(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def normalize(value: Any) -> Any:
    """Recursively replace store-native timestamps with datetimes."""
    if isinstance(value, Timestamp):
        return value.to_datetime()
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, dict):
        return {k: normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize(v) for v in value]
    return value


def encode(value: Any) -> Any:
    """JSON-safe encoding that keeps the two time shapes apart."""
    if isinstance(value, Timestamp):
        return {_TAG: "timestamp", "seconds": value.seconds, "nanoseconds": value.nanoseconds}
    if isinstance(value, datetime):
        return {_TAG: "date", "value": _aware(value).isoformat()}
    if isinstance(value, date):
        return {_TAG: "date", "value": to_datetime(value).isoformat()}  # type: ignore[union-attr]
    if isinstance(value, dict):
        return {k: encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    return value


def decode(value: Any) -> Any:
    if isinstance(value, dict):
        tag = value.get(_TAG)
        if tag == "timestamp":
            return Timestamp(int(value["seconds"]), int(value.get("nanoseconds") or 0))
        if tag == "date":
            return to_datetime(value.get("value"))
        return {k: decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode(v) for v in value]
    return value
