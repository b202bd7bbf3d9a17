"""Listing helpers for IAM server certificates."""
from __future__ import annotations

import logging
from typing import Tuple

import boto3

from ..models import Certificate
from ..utils import fetch_all

logger = logging.getLogger(__name__)


def list_server_certificates(iam: boto3.client) -> Tuple[Certificate, ...]:
    """Return every IAM server certificate ordered by expiration, soonest first.

    The sort is stable, so certificates sharing an expiration keep the order
    IAM returned them in.
    """

    metadata = fetch_all(
        iam,
        "list_server_certificates",
        "ServerCertificateMetadataList",
        service="iam",
        action="list server certificates",
    )
    certificates = sorted(
        (Certificate.from_metadata(entry) for entry in metadata),
        key=lambda certificate: certificate.expiration,
    )
    logger.info("Fetched %d IAM server certificates", len(certificates))
    return tuple(certificates)


__all__ = ["list_server_certificates"]
