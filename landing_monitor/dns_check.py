from __future__ import annotations

import asyncio

import dns.resolver
import structlog

from landing_monitor.models import DnsRecordType, DnsResult


logger = structlog.get_logger(__name__)

NO_RECORDS_DETAILS = "no records found"


def _dns_query_sync(
    *,
    domain: str,
    record_type: str,
    resolvers: list[str] | None,
    timeout_seconds: float,
) -> list[str]:
    r = dns.resolver.Resolver(configure=True)
    if resolvers:
        r.nameservers = list(resolvers)
    r.timeout = max(0.5, float(timeout_seconds))
    r.lifetime = max(0.5, float(timeout_seconds))
    try:
        ans = r.resolve(domain, record_type)
    except (dns.resolver.NoAnswer, dns.resolver.NXDOMAIN):
        # No record of this type (or no such name): an empty answer, not a failure.
        return []
    out: list[str] = []
    for rr in ans:
        s = str(rr or "").strip().rstrip(".").lower()
        if s:
            out.append(s)
    return out


async def _query(
    domain: str,
    record_type: str,
    *,
    resolvers: list[str] | None,
    timeout_seconds: float,
) -> list[str]:
    return await asyncio.to_thread(
        _dns_query_sync,
        domain=domain,
        record_type=record_type,
        resolvers=resolvers,
        timeout_seconds=float(timeout_seconds),
    )


async def check_dns(
    domain: str,
    *,
    expected_a_record: str,
    expected_cname_suffix: str,
    resolvers: list[str] | None = None,
    timeout_seconds: float = 4.0,
) -> DnsResult:
    """
    Judge whether `domain` points at the expected infrastructure.

    CNAME records win whenever any exist, matching or not; A records are only
    consulted when the CNAME lookup yields nothing. Lookup failures never
    propagate: the last error text becomes the details of the fallback result.
    """
    cleaned = str(domain or "").strip().lower().rstrip(".")
    suffix = str(expected_cname_suffix or "").strip().lower()
    details = NO_RECORDS_DETAILS

    try:
        cnames = await _query(cleaned, "CNAME", resolvers=resolvers, timeout_seconds=timeout_seconds)
    except Exception as exc:
        details = f"CNAME: {type(exc).__name__}: {exc}"
        logger.debug("CNAME lookup failed", domain=cleaned, error=details)
        cnames = []

    if cnames:
        matches = bool(suffix) and any(name.endswith(suffix) for name in cnames)
        return DnsResult(
            ok=matches,
            type=DnsRecordType.CNAME,
            details=(
                f"CNAME points to {expected_cname_suffix}"
                if matches
                else f"CNAME does not point to {expected_cname_suffix}"
            ),
        )

    try:
        addresses = await _query(cleaned, "A", resolvers=resolvers, timeout_seconds=timeout_seconds)
    except Exception as exc:
        details = f"A: {type(exc).__name__}: {exc}"
        logger.debug("A lookup failed", domain=cleaned, error=details)
        addresses = []

    if addresses:
        matches = expected_a_record in addresses
        return DnsResult(
            ok=matches,
            type=DnsRecordType.A,
            details=(
                f"A record matches {expected_a_record}"
                if matches
                else f"A record does not include {expected_a_record}"
            ),
        )

    return DnsResult(ok=False, type=DnsRecordType.NONE, details=details)
