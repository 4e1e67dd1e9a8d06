"""Configuration for the landing page monitor."""

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field


DEFAULT_CONFIG_PATH = "config/monitor.yaml"


class MonitorConfig(BaseModel):
    """Runtime settings for the monitoring engine and its HTTP API."""

    # Infrastructure every monitored domain is expected to point at.
    expected_a_record: str = Field(default="76.76.21.21", description="IPv4 address the A record must include")
    expected_cname_suffix: str = Field(default=".vercel-dns.com", description="Suffix a CNAME target must end with")

    # Scheduling
    check_interval_seconds: int = Field(default=300, ge=1, description="Seconds between check passes")
    history_limit: int = Field(default=100, ge=1, description="Check records retained per page")
    initial_wait_seconds: float = Field(default=15.0, ge=0, description="Max wait for the first pass in /api/pages")

    # Probes
    http_timeout_seconds: float = Field(default=15.0, gt=0, description="HTTPS probe timeout")
    dns_timeout_seconds: float = Field(default=4.0, gt=0, description="Per-query DNS timeout")
    dns_resolvers: Optional[list[str]] = Field(default=None, description="Nameservers to query (None = system)")
    user_agent: str = Field(default="Landing Page Monitor", description="User-Agent for HTTPS probes")

    # Registry
    registry_path: Optional[str] = Field(default=None, description="YAML registry of monitored pages")

    # Service
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="API bind address")
    port: int = Field(default=3000, description="API port")


def load_config(config_path: Optional[str] = None) -> MonitorConfig:
    """Load configuration from file, then apply environment overrides."""
    if config_path is None:
        config_path = os.getenv("LANDING_MONITOR_CONFIG", DEFAULT_CONFIG_PATH)

    config_data: dict = {}

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"Config YAML must be a mapping: {config_path}")

    env_overrides = {
        "log_level": os.getenv("LOG_LEVEL"),
        "check_interval_seconds": os.getenv("CHECK_INTERVAL_SECONDS"),
        "registry_path": os.getenv("REGISTRY_PATH"),
        "host": os.getenv("HOST"),
        "port": os.getenv("PORT"),
    }

    for key, value in env_overrides.items():
        if value is not None and str(value).strip():
            if key in ["check_interval_seconds", "port"]:
                value = int(value)
            config_data[key] = value

    return MonitorConfig(**config_data)
