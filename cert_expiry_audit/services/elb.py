"""Listing helpers for Classic Load Balancers."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import boto3

from ..errors import FetchError, RegionFetchError
from ..models import Index, LoadBalancerEndpoint
from ..utils import build_index, fetch_all, merge_indexes

logger = logging.getLogger(__name__)

# Regions walked when a multi-region audit is requested without an explicit list.
DEFAULT_REGIONS: Tuple[str, ...] = (
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
    "eu-west-1",
    "eu-central-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-northeast-1",
)

DEFAULT_MAX_REGION_WORKERS = 2


@dataclass(frozen=True)
class RegionResult:
    """Outcome of one region's load balancer listing."""

    region: Optional[str]
    index: Optional[Index] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _endpoint_name(load_balancer_name: str, port: int, region: Optional[str]) -> str:
    name = f"{load_balancer_name}:{port}"
    if region:
        return f"{region}/{name}"
    return name


def list_load_balancer_endpoints(
    elb: boto3.client, region: Optional[str] = None
) -> Tuple[LoadBalancerEndpoint, ...]:
    """Return one endpoint per load balancer listener that terminates TLS."""

    descriptions = fetch_all(
        elb,
        "describe_load_balancers",
        "LoadBalancerDescriptions",
        service="elb",
        action="describe load balancers",
        region=region,
    )
    endpoints: List[LoadBalancerEndpoint] = []
    for description in descriptions:
        load_balancer_name = description["LoadBalancerName"]
        for listener_description in description.get("ListenerDescriptions", []):
            listener = listener_description.get("Listener") or {}
            certificate_id = listener.get("SSLCertificateId")
            if not certificate_id:
                continue
            port = listener.get("LoadBalancerPort")
            endpoints.append(
                LoadBalancerEndpoint(
                    name=_endpoint_name(load_balancer_name, port, region),
                    load_balancer_name=load_balancer_name,
                    port=port,
                    certificate_id=certificate_id,
                    region=region,
                )
            )
    return tuple(endpoints)


def index_load_balancers(endpoints: Iterable[LoadBalancerEndpoint]) -> Index:
    """Group load balancer endpoints by the certificate their listener uses."""

    return build_index((endpoint.certificate_id, endpoint) for endpoint in endpoints)


def _collect_region(elb: boto3.client, region: Optional[str]) -> RegionResult:
    try:
        endpoints = list_load_balancer_endpoints(elb, region)
    except FetchError as exc:
        return RegionResult(region=region, error=exc)
    logger.info(
        "Fetched %d TLS load balancer listeners in %s", len(endpoints), region or "default region"
    )
    return RegionResult(region=region, index=index_load_balancers(endpoints))


def _walk_regions(
    clients: Mapping[Optional[str], boto3.client],
    *,
    max_workers: int,
    allow_partial: bool,
) -> List[RegionResult]:
    """Run the per-region listings with at most ``max_workers`` in flight.

    Unless ``allow_partial`` is set, the first failure cancels every region
    that has not started yet and the walk stops there.
    """

    results: Dict[Optional[str], RegionResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_collect_region, client, region): region
            for region, client in clients.items()
        }
        for future in as_completed(futures):
            result = future.result()
            results[result.region] = result
            if not result.ok and not allow_partial:
                for pending in futures:
                    pending.cancel()
                break
    return [results[region] for region in clients if region in results]


def collect_load_balancer_index(
    clients: Mapping[Optional[str], boto3.client],
    *,
    max_workers: int = DEFAULT_MAX_REGION_WORKERS,
    allow_partial: bool = False,
) -> Index:
    """List classic load balancers in every region of ``clients`` and index them.

    ``clients`` maps region name to an ELB client. A single ``None`` key runs a
    single-region listing whose endpoint names carry no region prefix.

    By default any region failure raises :class:`RegionFetchError` and the
    regions that did succeed are discarded. With ``allow_partial`` the failed
    regions are logged and the remaining ones are reported; the call still
    fails when no region succeeds.
    """

    if not clients:
        return build_index(())

    if list(clients) == [None]:
        result = _collect_region(clients[None], None)
        if result.error is not None:
            raise result.error
        return result.index

    results = _walk_regions(clients, max_workers=max_workers, allow_partial=allow_partial)
    failures = [result.error for result in results if not result.ok]
    succeeded = [result.region for result in results if result.ok]

    if failures and (not allow_partial or not succeeded):
        raise RegionFetchError(failures, succeeded=succeeded)

    for failure in failures:
        logger.warning("Skipping region %s: %s", failure.region, failure)
    return merge_indexes(result.index for result in results if result.ok)


__all__ = [
    "DEFAULT_MAX_REGION_WORKERS",
    "DEFAULT_REGIONS",
    "RegionResult",
    "collect_load_balancer_index",
    "index_load_balancers",
    "list_load_balancer_endpoints",
]
