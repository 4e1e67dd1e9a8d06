from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from landing_monitor import main as cli
from landing_monitor.config import MonitorConfig
from landing_monitor.models import DnsRecordType, DnsResult, HttpResult
from landing_monitor.registry import MonitoredTarget
from landing_monitor.service import MonitoringService


def _fake_checks(monkeypatch: pytest.MonkeyPatch, *, down_domains: set[str]) -> None:
    async def fake_check_dns(domain: str, **kwargs) -> DnsResult:
        return DnsResult(ok=True, type=DnsRecordType.A, details="A record matches 76.76.21.21")

    async def fake_check_http(domain: str, client, **kwargs) -> HttpResult:
        if domain in down_domains:
            return HttpResult(ok=False, reason="HTTP 500")
        return HttpResult(ok=True, reason="HTTP 200")

    monkeypatch.setattr("landing_monitor.service.check_dns", fake_check_dns)
    monkeypatch.setattr("landing_monitor.service.check_http", fake_check_http)


@pytest.mark.asyncio
async def test_run_once_report(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_checks(monkeypatch, down_domains={"b.example"})
    service = MonitoringService(
        [MonitoredTarget(id="a", domain="a.example"), MonitoredTarget(id="b", domain="b.example")],
        MonitorConfig(),
    )

    report = await cli.run_once(service)

    statuses = {p["id"]: p["status"] for p in report["pages"]}
    assert statuses == {"a": "LIVE", "b": "DOWN"}
    assert report["history"]["b"][0]["http"] == {"ok": False, "reason": "HTTP 500"}
    assert service._http_client is None


def test_main_once_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    registry = tmp_path / "registry.yaml"
    registry.write_text(
        "pages:\n  - id: a\n    domain: a.example\n  - id: b\n    domain: b.example\n",
        encoding="utf-8",
    )
    config = tmp_path / "monitor.yaml"
    config.write_text("log_level: WARNING\n", encoding="utf-8")

    _fake_checks(monkeypatch, down_domains=set())
    monkeypatch.setattr(cli, "configure_logging", lambda level_name: None)
    monkeypatch.setattr(sys, "argv", ["landing-monitor", "--once", "--config", str(config), "--registry", str(registry)])
    assert cli.main() == 0
    out = json.loads(capsys.readouterr().out)
    assert [p["status"] for p in out["pages"]] == ["LIVE", "LIVE"]

    _fake_checks(monkeypatch, down_domains={"a.example"})
    assert cli.main() == 1


@pytest.mark.parametrize(
    ("name", "expected"),
    [("INFO", "info"), ("debug", "debug"), ("WARN", "warning"), ("fatal", "critical"), ("nonsense", "info")],
)
def test_uvicorn_log_level_normalizes_aliases(name: str, expected: str) -> None:
    assert cli.uvicorn_log_level(name) == expected
