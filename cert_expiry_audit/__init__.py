"""IAM server certificate expiry auditing toolkit."""

from __future__ import annotations

from .config import AuditConfig
from .core import AuditInventory, AuditReport, collect_inventory, print_report, run_audit
from .errors import FetchError, RegionFetchError
from .models import Certificate, Distribution, LoadBalancerEndpoint, ReportEntry
from .reporter import Reporter, classify

__all__ = [
    "AuditConfig",
    "AuditInventory",
    "AuditReport",
    "Certificate",
    "Distribution",
    "FetchError",
    "LoadBalancerEndpoint",
    "RegionFetchError",
    "ReportEntry",
    "Reporter",
    "classify",
    "collect_inventory",
    "print_report",
    "run_audit",
]
