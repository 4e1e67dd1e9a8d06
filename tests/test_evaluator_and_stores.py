from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from landing_monitor.evaluator import ALL_CHECKS_PASSED, evaluate_status, risk_for
from landing_monitor.models import (
    CheckRecord,
    DnsRecordType,
    DnsResult,
    HttpResult,
    PageStatus,
    Risk,
    Status,
    format_timestamp,
)
from landing_monitor.stores import DEFAULT_HISTORY_LIMIT, HistoryStore, StatusStore


DNS_OK = DnsResult(ok=True, type=DnsRecordType.CNAME, details="CNAME points to .vercel-dns.com")
DNS_BAD = DnsResult(ok=False, type=DnsRecordType.A, details="A record does not include 76.76.21.21")
HTTP_OK = HttpResult(ok=True, reason="HTTP 200")
HTTP_BAD = HttpResult(ok=False, reason="HTTP 502")


@pytest.mark.parametrize(
    ("dns", "http", "status", "reason"),
    [
        (DNS_OK, HTTP_OK, Status.LIVE, ALL_CHECKS_PASSED),
        (DNS_OK, HTTP_BAD, Status.DOWN, "HTTP 502"),
        (DNS_BAD, HTTP_OK, Status.DOWN, "A record does not include 76.76.21.21"),
        # DNS reason wins when both fail.
        (DNS_BAD, HTTP_BAD, Status.DOWN, "A record does not include 76.76.21.21"),
    ],
)
def test_evaluate_status(dns: DnsResult, http: HttpResult, status: Status, reason: str) -> None:
    verdict = evaluate_status(dns, http)
    assert verdict.status is status
    assert verdict.reason == reason


def test_risk_mapping() -> None:
    assert risk_for(Status.LIVE) is Risk.SAFE
    assert risk_for(Status.DOWN) is Risk.HIGH
    assert risk_for(Status.UNKNOWN) is Risk.UNKNOWN


def test_pending_status_projection() -> None:
    assert PageStatus.pending().to_dict() == {
        "status": "UNKNOWN",
        "reason": "Pending first check",
        "lastChecked": None,
        "risk": "Unknown",
    }


def test_format_timestamp_is_utc_with_millis() -> None:
    ts = datetime(2026, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc)
    assert format_timestamp(ts) == "2026-01-02T03:04:05.678Z"
    assert format_timestamp(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02T03:04:05.000Z"
    assert format_timestamp(None) is None


def test_check_record_projection() -> None:
    ts = datetime(2026, 1, 1, tzinfo=timezone.utc)
    record = CheckRecord(status=Status.DOWN, reason="HTTP 502", last_checked=ts, dns=DNS_OK, http=HTTP_BAD)
    assert record.to_dict() == {
        "status": "DOWN",
        "reason": "HTTP 502",
        "lastChecked": "2026-01-01T00:00:00.000Z",
        "dns": {"ok": True, "type": "CNAME", "details": "CNAME points to .vercel-dns.com"},
        "http": {"ok": False, "reason": "HTTP 502"},
    }


def test_status_store_prepopulated_and_keyed() -> None:
    store = StatusStore(["lp-1", "lp-2"])
    assert len(store) == 2
    assert store.get("lp-1") == PageStatus.pending()

    live = PageStatus(status=Status.LIVE, reason=ALL_CHECKS_PASSED, last_checked=datetime.now(timezone.utc), risk=Risk.SAFE)
    store.set("lp-1", live)
    assert store.get("lp-1") == live
    assert store.get("lp-2") == PageStatus.pending()

    with pytest.raises(KeyError):
        store.set("orphan", live)
    assert "orphan" not in store


def _record(i: int) -> CheckRecord:
    ts = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=5 * i)
    return CheckRecord(status=Status.LIVE, reason=f"check {i}", last_checked=ts, dns=DNS_OK, http=HTTP_OK)


def test_history_newest_first_and_capped() -> None:
    store = HistoryStore(["lp-1", "lp-2"])
    assert store.limit == DEFAULT_HISTORY_LIMIT == 100
    assert store.get("lp-1") == []

    for i in range(130):
        store.record("lp-1", _record(i))

    items = store.get("lp-1")
    assert len(items) == 100
    assert items[0].reason == "check 129"
    assert items[-1].reason == "check 30"
    assert store.get("lp-2") == []


def test_history_snapshot_is_isolated_from_later_appends() -> None:
    store = HistoryStore(["lp-1"], limit=3)
    store.record("lp-1", _record(0))
    snap = store.snapshot()

    store.record("lp-1", _record(1))
    assert [r.reason for r in snap["lp-1"]] == ["check 0"]
    assert [r.reason for r in store.get("lp-1")] == ["check 1", "check 0"]


def test_history_rejects_unknown_ids_and_bad_limit() -> None:
    store = HistoryStore(["lp-1"])
    with pytest.raises(KeyError):
        store.record("orphan", _record(0))
    assert store.get("orphan") == []

    with pytest.raises(ValueError):
        HistoryStore(["lp-1"], limit=0)
