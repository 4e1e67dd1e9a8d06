from __future__ import annotations

from landing_monitor.models import DnsResult, HttpResult, Risk, Status, StatusVerdict


ALL_CHECKS_PASSED = "All checks passed"

_RISK_BY_STATUS = {
    Status.LIVE: Risk.SAFE,
    Status.DOWN: Risk.HIGH,
    Status.UNKNOWN: Risk.UNKNOWN,
}


def evaluate_status(dns: DnsResult, http: HttpResult) -> StatusVerdict:
    # DNS failure reason wins over the HTTP one.
    if not dns.ok:
        return StatusVerdict(status=Status.DOWN, reason=dns.details)
    if not http.ok:
        return StatusVerdict(status=Status.DOWN, reason=http.reason)
    return StatusVerdict(status=Status.LIVE, reason=ALL_CHECKS_PASSED)


def risk_for(status: Status) -> Risk:
    return _RISK_BY_STATUS.get(status, Risk.UNKNOWN)
