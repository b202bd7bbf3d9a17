"""Listing helpers for Amazon CloudFront distributions."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Tuple

import boto3

from ..models import Distribution, Index
from ..utils import build_index, fetch_all

logger = logging.getLogger(__name__)


def _distribution_from_summary(summary: Mapping) -> Distribution:
    viewer_certificate = summary.get("ViewerCertificate") or {}
    aliases = (summary.get("Aliases") or {}).get("Items") or []
    return Distribution(
        distribution_id=summary["Id"],
        aliases=tuple(aliases),
        certificate_id=viewer_certificate.get("IAMCertificateId") or None,
        domain_name=summary.get("DomainName"),
    )


def list_distributions(cloudfront: boto3.client) -> Tuple[Distribution, ...]:
    """Return every CloudFront distribution in the account."""

    summaries = fetch_all(
        cloudfront,
        "list_distributions",
        "DistributionList.Items",
        service="cloudfront",
        action="list distributions",
    )
    return tuple(_distribution_from_summary(summary) for summary in summaries)


def index_distributions(distributions: Iterable[Distribution]) -> Index:
    """Group distributions by the IAM certificate identifier they serve.

    Distributions using ACM or the default CloudFront certificate have no IAM
    certificate identifier and are left out.
    """

    return build_index(
        (distribution.certificate_id, distribution) for distribution in distributions
    )


def collect_distribution_index(cloudfront: boto3.client) -> Index:
    """List all distributions and index those using IAM server certificates."""

    distributions = list_distributions(cloudfront)
    index = index_distributions(distributions)
    logger.info(
        "Fetched %d CloudFront distributions, %d IAM certificates in use",
        len(distributions),
        len(index),
    )
    return index


__all__ = ["collect_distribution_index", "index_distributions", "list_distributions"]
