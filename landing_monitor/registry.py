from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import yaml


DEFAULT_REGISTRY_PATH = Path(__file__).with_name("registry.yaml")


@dataclass(frozen=True)
class MonitoredTarget:
    id: str
    domain: str
    client: str = ""
    project: str = ""
    environment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "domain": self.domain,
            "client": self.client,
            "project": self.project,
            "environment": self.environment,
        }


def normalize_domain(value: Any) -> str:
    return str(value or "").strip().lower().rstrip(".")


def parse_registry(raw: Any) -> list[MonitoredTarget]:
    if not isinstance(raw, dict):
        raise ValueError("Registry YAML must be a mapping")

    pages = raw.get("pages")
    if not isinstance(pages, list) or not pages:
        raise ValueError("Registry must contain a non-empty 'pages' list")

    targets: list[MonitoredTarget] = []
    seen: set[str] = set()
    for idx, entry in enumerate(pages):
        if not isinstance(entry, dict):
            raise ValueError(f"pages[{idx}] must be a mapping, got {type(entry).__name__}")

        page_id = str(entry.get("id") or "").strip()
        if not page_id:
            raise ValueError(f"pages[{idx}].id is required")
        if page_id in seen:
            raise ValueError(f"pages[{idx}].id {page_id!r} is duplicated")

        domain = normalize_domain(entry.get("domain"))
        if not domain:
            raise ValueError(f"pages[{idx}].domain is required")

        seen.add(page_id)
        targets.append(
            MonitoredTarget(
                id=page_id,
                domain=domain,
                client=str(entry.get("client") or "").strip(),
                project=str(entry.get("project") or "").strip(),
                environment=str(entry.get("environment") or "").strip(),
            )
        )
    return targets


def load_registry(path: str | Path | None = None) -> list[MonitoredTarget]:
    registry_path = Path(path) if path else DEFAULT_REGISTRY_PATH
    with open(registry_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return parse_registry(data)


def _distinct(values: Iterable[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        if v and v not in out:
            out.append(v)
    return out


def filter_options(targets: Iterable[MonitoredTarget]) -> dict[str, list[str]]:
    """Distinct non-empty client/project/environment values, in registry order."""
    items = list(targets)
    return {
        "clients": _distinct(t.client for t in items),
        "projects": _distinct(t.project for t in items),
        "environments": _distinct(t.environment for t in items),
    }
