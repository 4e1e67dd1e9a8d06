from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class DnsRecordType(str, Enum):
    NONE = "NONE"
    A = "A"
    CNAME = "CNAME"


class Status(str, Enum):
    UNKNOWN = "UNKNOWN"
    LIVE = "LIVE"
    DOWN = "DOWN"


class Risk(str, Enum):
    SAFE = "Safe"
    HIGH = "High"
    UNKNOWN = "Unknown"


PENDING_REASON = "Pending first check"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime | None) -> str | None:
    """
    Render as ISO-8601 UTC with millisecond precision and a 'Z' suffix
    (e.g. 2026-01-01T00:00:00.000Z). Naive datetimes are assumed to be UTC.
    """
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class DnsResult:
    ok: bool
    type: DnsRecordType
    details: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "type": self.type.value, "details": self.details}


@dataclass(frozen=True)
class HttpResult:
    ok: bool
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "reason": self.reason}


@dataclass(frozen=True)
class StatusVerdict:
    status: Status
    reason: str


@dataclass(frozen=True)
class PageStatus:
    status: Status
    reason: str
    last_checked: datetime | None
    risk: Risk

    @classmethod
    def pending(cls) -> PageStatus:
        return cls(status=Status.UNKNOWN, reason=PENDING_REASON, last_checked=None, risk=Risk.UNKNOWN)

    @property
    def is_pending(self) -> bool:
        return self.status is Status.UNKNOWN or self.last_checked is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "lastChecked": format_timestamp(self.last_checked),
            "risk": self.risk.value,
        }


@dataclass(frozen=True)
class CheckRecord:
    status: Status
    reason: str
    last_checked: datetime
    dns: DnsResult
    http: HttpResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "lastChecked": format_timestamp(self.last_checked),
            "dns": self.dns.to_dict(),
            "http": self.http.to_dict(),
        }
