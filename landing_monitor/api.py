from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI

from landing_monitor.config import MonitorConfig
from landing_monitor.models import PageStatus, format_timestamp, utc_now
from landing_monitor.registry import filter_options, load_registry
from landing_monitor.service import MonitoringService


logger = structlog.get_logger(__name__)


def create_app(service: MonitoringService | None = None, config: MonitorConfig | None = None) -> FastAPI:
    if service is None:
        config = config or MonitorConfig()
        service = MonitoringService(load_registry(config.registry_path), config)

    app = FastAPI(title="Landing Page Monitor", version="0.1.0")
    app.state.service = service

    @app.on_event("startup")
    async def _startup() -> None:
        service.ensure_monitoring()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await service.stop()

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True, "state": service.state.value, "passes_completed": service.passes_completed}

    @app.get("/api/pages")
    async def pages() -> dict[str, Any]:
        service.ensure_monitoring()

        if service.all_pending():
            started = utc_now()
            completed = await service.wait_for_first_pass(service.config.initial_wait_seconds)
            logger.info(
                "Waited for first check pass",
                completed=completed,
                waited_ms=int((utc_now() - started).total_seconds() * 1000),
            )

        state = service.get_state()
        results = []
        for page in service.get_landing_pages():
            page_state = state.get(page.id) or PageStatus.pending()
            results.append({**page.to_dict(), **page_state.to_dict()})
        return {"results": results, "timestamp": format_timestamp(utc_now())}

    @app.get("/api/history/{page_id}")
    async def history(page_id: str) -> dict[str, Any]:
        service.ensure_monitoring()
        return {"results": [entry.to_dict() for entry in service.get_page_history(page_id)]}

    @app.get("/api/filters")
    async def filters() -> dict[str, list[str]]:
        service.ensure_monitoring()
        return filter_options(service.get_landing_pages())

    return app
