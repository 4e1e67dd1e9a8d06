"""Monitoring engine: per-page checks, recurring passes and the state they maintain."""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Iterable

import httpx
import structlog

from landing_monitor.config import MonitorConfig
from landing_monitor.dns_check import check_dns
from landing_monitor.evaluator import evaluate_status, risk_for
from landing_monitor.http_check import check_http
from landing_monitor.models import CheckRecord, PageStatus, Status, utc_now
from landing_monitor.registry import MonitoredTarget
from landing_monitor.stores import HistoryStore, StatusStore


logger = structlog.get_logger(__name__)


class MonitorState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class MonitoringService:
    """
    Owns the registry, both stores and the recurring check timer.

    Passes run on a fixed interval whether or not the previous pass finished.
    A page whose check outlasts the interval can therefore be checked by two
    passes at once; whichever completes last owns the stored status.
    """

    def __init__(
        self,
        targets: Iterable[MonitoredTarget],
        config: MonitorConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or MonitorConfig()
        self.targets: tuple[MonitoredTarget, ...] = tuple(targets)

        ids = [t.id for t in self.targets]
        if len(set(ids)) != len(ids):
            raise ValueError("Monitored page ids must be unique")

        self.status_store = StatusStore(ids)
        self.history_store = HistoryStore(ids, limit=self.config.history_limit)
        self.state = MonitorState.NOT_STARTED

        self._http_client = http_client
        self._owns_http_client = False
        self._timer_task: asyncio.Task | None = None
        self._pass_tasks: set[asyncio.Task] = set()
        self._first_pass_done: asyncio.Event | None = None
        self.passes_completed = 0

    # ------------------------------
    # Read side
    # ------------------------------

    def get_landing_pages(self) -> list[MonitoredTarget]:
        return list(self.targets)

    def get_state(self) -> dict[str, PageStatus]:
        return self.status_store.snapshot()

    def get_history(self) -> dict[str, list[CheckRecord]]:
        return self.history_store.snapshot()

    def get_page_history(self, page_id: str) -> list[CheckRecord]:
        return self.history_store.get(page_id)

    def all_pending(self) -> bool:
        state = self.status_store.snapshot()
        return all(state[t.id].is_pending for t in self.targets)

    # ------------------------------
    # Checks
    # ------------------------------

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(headers={"User-Agent": self.config.user_agent})
            self._owns_http_client = True
        return self._http_client

    async def check_target(self, target: MonitoredTarget) -> CheckRecord:
        cfg = self.config
        dns, http = await asyncio.gather(
            check_dns(
                target.domain,
                expected_a_record=cfg.expected_a_record,
                expected_cname_suffix=cfg.expected_cname_suffix,
                resolvers=cfg.dns_resolvers,
                timeout_seconds=cfg.dns_timeout_seconds,
            ),
            check_http(target.domain, self._client(), timeout_seconds=cfg.http_timeout_seconds),
        )
        verdict = evaluate_status(dns, http)
        last_checked = utc_now()

        self.status_store.set(
            target.id,
            PageStatus(
                status=verdict.status,
                reason=verdict.reason,
                last_checked=last_checked,
                risk=risk_for(verdict.status),
            ),
        )
        record = CheckRecord(
            status=verdict.status,
            reason=verdict.reason,
            last_checked=last_checked,
            dns=dns,
            http=http,
        )
        self.history_store.record(target.id, record)

        logger.debug(
            "Page checked",
            page_id=target.id,
            domain=target.domain,
            status=verdict.status.value,
            reason=verdict.reason,
        )
        return record

    async def run_pass(self) -> dict[str, CheckRecord | BaseException]:
        """Check every page concurrently; one page failing never affects the others."""
        started = time.perf_counter()
        results = await asyncio.gather(
            *(self.check_target(t) for t in self.targets),
            return_exceptions=True,
        )

        outcomes: dict[str, CheckRecord | BaseException] = {}
        down = 0
        for target, result in zip(self.targets, results):
            outcomes[target.id] = result
            if isinstance(result, BaseException):
                logger.error(
                    "Page check crashed",
                    page_id=target.id,
                    domain=target.domain,
                    error=f"{type(result).__name__}: {result}",
                )
                continue
            if result.status is not Status.LIVE:
                down += 1

        self.passes_completed += 1
        if self._first_pass_done is not None:
            self._first_pass_done.set()

        logger.info(
            "Check pass complete",
            pages=len(self.targets),
            down=down,
            elapsed_seconds=round(time.perf_counter() - started, 3),
        )
        return outcomes

    # ------------------------------
    # Lifecycle
    # ------------------------------

    def start(self) -> asyncio.Task | None:
        """
        Reset both stores, run one pass right away, then keep repeating on the
        configured interval. Must be called from a running event loop.
        """
        if self.state is not MonitorState.NOT_STARTED:
            return self._timer_task

        ids = [t.id for t in self.targets]
        self.status_store.reset(ids)
        self.history_store.reset(ids)
        self._first_pass_done = asyncio.Event()
        self._timer_task = asyncio.create_task(self._run_timer(), name="landing-monitor-timer")
        self.state = MonitorState.RUNNING
        logger.info(
            "Monitoring started",
            pages=len(self.targets),
            interval_seconds=self.config.check_interval_seconds,
        )
        return self._timer_task

    def ensure_monitoring(self) -> asyncio.Task | None:
        """Idempotent activation; safe to call from every request."""
        return self.start()

    async def _run_timer(self) -> None:
        interval = float(self.config.check_interval_seconds)
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            self._spawn_pass()
            next_tick += interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    def _spawn_pass(self) -> None:
        task = asyncio.create_task(self.run_pass())
        self._pass_tasks.add(task)
        task.add_done_callback(self._on_pass_done)

    def _on_pass_done(self, task: asyncio.Task) -> None:
        self._pass_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Check pass crashed", error=f"{type(exc).__name__}: {exc}")

    async def wait_for_first_pass(self, timeout_seconds: float) -> bool:
        """Wait (bounded) for the first pass after start(); True once it has completed."""
        if self._first_pass_done is None:
            return False
        try:
            await asyncio.wait_for(self._first_pass_done.wait(), timeout=max(0.0, float(timeout_seconds)))
        except asyncio.TimeoutError:
            return False
        return True

    async def stop(self) -> None:
        if self.state is not MonitorState.RUNNING:
            return
        self.state = MonitorState.STOPPED

        tasks = [t for t in [self._timer_task, *self._pass_tasks] if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Check task failed during shutdown")
        self._timer_task = None
        self._pass_tasks.clear()

        await self.close_http_client()
        logger.info("Monitoring stopped", passes_completed=self.passes_completed)

    async def close_http_client(self) -> None:
        """Close the HTTP client if this service created it; injected clients are left open."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False
