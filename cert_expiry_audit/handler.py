"""Entry point for scheduled invocations (for example an AWS Lambda trigger)."""
from __future__ import annotations

import logging
import os

import boto3

from .config import AuditConfig
from .core import print_report, run_audit
from .errors import FetchError

logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get("CERT_AUDIT_LOG_LEVEL", "INFO").upper())


def handler(event, context) -> None:
    """Run the audit and print the report; ``event`` and ``context`` are unused.

    Fetch failures are logged and re-raised so the scheduler records the run as
    failed. No report is printed in that case.
    """

    config = AuditConfig.from_env()
    try:
        report = run_audit(boto3.Session(), config)
    except FetchError as exc:
        logger.error("Certificate audit aborted: %s", exc)
        raise
    print_report(report)


__all__ = ["handler"]
