from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

import structlog
import uvicorn

from landing_monitor.api import create_app
from landing_monitor.config import load_config
from landing_monitor.models import Status
from landing_monitor.registry import load_registry
from landing_monitor.service import MonitoringService


logger = structlog.get_logger(__name__)


def _resolve_level(level_name: str) -> int:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def uvicorn_log_level(level_name: str) -> str:
    """Canonical lower-case level name; uvicorn rejects aliases such as "warn" or "fatal"."""
    return logging.getLevelName(_resolve_level(level_name)).lower()


def configure_logging(level_name: str) -> None:
    level = _resolve_level(level_name)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def run_once(service: MonitoringService) -> dict[str, Any]:
    """Run a single pass and return a JSON-ready report of pages and their history."""
    try:
        await service.run_pass()
    finally:
        await service.close_http_client()

    state = service.get_state()
    pages = [{**page.to_dict(), **state[page.id].to_dict()} for page in service.get_landing_pages()]
    history: dict[str, list[dict[str, Any]]] = {}
    for page_id, entries in service.get_history().items():
        history[page_id] = [entry.to_dict() for entry in entries]
    return {"pages": pages, "history": history}


def main() -> int:
    parser = argparse.ArgumentParser(description="Landing page DNS + HTTPS monitor")
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument("--registry", default=None, help="Path to YAML registry of monitored pages")
    parser.add_argument("--once", action="store_true", help="Run one check pass, print JSON and exit")
    parser.add_argument("--log-level", default=None, help="Logging level (INFO, WARNING, ...)")
    parser.add_argument("--host", default=None, help="API bind address")
    parser.add_argument("--port", type=int, default=None, help="API port")
    args = parser.parse_args()

    config = load_config(args.config)
    overrides = {
        "registry_path": args.registry,
        "log_level": args.log_level,
        "host": args.host,
        "port": args.port,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    configure_logging(config.log_level)

    targets = load_registry(config.registry_path)
    service = MonitoringService(targets, config)

    if args.once:
        report = asyncio.run(run_once(service))
        print(json.dumps(report, indent=2))
        all_live = all(p["status"] == Status.LIVE.value for p in report["pages"])
        return 0 if all_live else 1

    logger.info("Serving API", host=config.host, port=config.port, pages=len(targets))
    uvicorn.run(create_app(service), host=config.host, port=config.port, log_level=uvicorn_log_level(config.log_level))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
