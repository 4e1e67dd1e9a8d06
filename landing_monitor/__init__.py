"""DNS + HTTPS monitoring for registered landing pages."""

from .config import MonitorConfig, load_config
from .evaluator import evaluate_status, risk_for
from .models import CheckRecord, DnsRecordType, DnsResult, HttpResult, PageStatus, Risk, Status, StatusVerdict
from .registry import MonitoredTarget, load_registry
from .service import MonitoringService, MonitorState

__all__ = [
    "CheckRecord",
    "DnsRecordType",
    "DnsResult",
    "HttpResult",
    "MonitorConfig",
    "MonitorState",
    "MonitoredTarget",
    "MonitoringService",
    "PageStatus",
    "Risk",
    "Status",
    "StatusVerdict",
    "evaluate_status",
    "load_config",
    "load_registry",
    "risk_for",
]
