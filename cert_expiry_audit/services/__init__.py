"""Service-specific listers for certificates and the resources consuming them."""
from __future__ import annotations

from .cloudfront import collect_distribution_index, index_distributions, list_distributions
from .elb import (
    DEFAULT_MAX_REGION_WORKERS,
    DEFAULT_REGIONS,
    RegionResult,
    collect_load_balancer_index,
    index_load_balancers,
    list_load_balancer_endpoints,
)
from .iam import list_server_certificates

__all__ = [
    "DEFAULT_MAX_REGION_WORKERS",
    "DEFAULT_REGIONS",
    "RegionResult",
    "collect_distribution_index",
    "collect_load_balancer_index",
    "index_distributions",
    "index_load_balancers",
    "list_distributions",
    "list_load_balancer_endpoints",
    "list_server_certificates",
]
