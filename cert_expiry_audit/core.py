"""Core orchestration utilities for the certificate expiry audit."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from typing import Dict, Iterable, List, Optional, Sequence, TextIO, Tuple

import boto3

from .config import AuditConfig
from .errors import FetchError
from .models import Certificate, Index, ReportEntry
from .reporter import Reporter, summarize
from .services import (
    collect_distribution_index,
    collect_load_balancer_index,
    list_server_certificates,
)
from .utils import as_utc, format_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditInventory:
    """Everything fetched from AWS for one audit run."""

    certificates: Tuple[Certificate, ...]
    distributions: Index
    load_balancers: Index


@dataclass(frozen=True)
class AuditReport:
    """Classified certificates ready to be printed or exported."""

    entries: Tuple[ReportEntry, ...]
    generated_at: datetime

    @property
    def counts(self) -> Dict[str, int]:
        return summarize(self.entries)

    @property
    def has_expiring(self) -> bool:
        return any(entry.status in ("EXPIRED", "WARNING") for entry in self.entries)


def _elb_clients(session: boto3.session.Session, config: AuditConfig) -> Dict[Optional[str], object]:
    if not config.multi_region:
        return {None: session.client("elb")}
    return {region: session.client("elb", region_name=region) for region in config.regions}


def collect_inventory(session: boto3.session.Session, config: AuditConfig) -> AuditInventory:
    """Fetch certificates, distributions and load balancers concurrently.

    All three listings run to completion before their results are read. Every
    failure is logged and the first one, in lister order, is raised.
    """

    # boto3 sessions are not thread safe; clients are.
    iam = session.client("iam")
    cloudfront = session.client("cloudfront")
    elb_clients = _elb_clients(session, config)

    with ThreadPoolExecutor(max_workers=3) as executor:
        futures = {
            "certificates": executor.submit(list_server_certificates, iam),
            "distributions": executor.submit(collect_distribution_index, cloudfront),
            "load_balancers": executor.submit(
                collect_load_balancer_index,
                elb_clients,
                max_workers=config.max_region_workers,
                allow_partial=config.allow_partial_regions,
            ),
        }
        wait(futures.values())

    failures: List[BaseException] = []
    for name, future in futures.items():
        exc = future.exception()
        if exc is None:
            continue
        if isinstance(exc, FetchError):
            logger.error("Listing %s failed: %s", name.replace("_", " "), exc)
        else:
            logger.error(
                "Listing %s failed unexpectedly: %r", name.replace("_", " "), exc
            )
        failures.append(exc)
    if failures:
        # Unexpected errors take precedence; they are not collaborator failures.
        unexpected = [exc for exc in failures if not isinstance(exc, FetchError)]
        raise (unexpected or failures)[0]

    return AuditInventory(
        certificates=futures["certificates"].result(),
        distributions=futures["distributions"].result(),
        load_balancers=futures["load_balancers"].result(),
    )


def run_audit(
    session: boto3.session.Session,
    config: AuditConfig,
    *,
    now: Optional[datetime] = None,
) -> AuditReport:
    """Collect the inventory and classify every certificate."""

    now = as_utc(now) if now else datetime.now(timezone.utc)
    inventory = collect_inventory(session, config)
    reporter = Reporter(verbose=config.verbose, warning_days=config.warning_days, now=now)
    entries = reporter.build(
        inventory.certificates, inventory.distributions, inventory.load_balancers
    )
    report = AuditReport(entries=tuple(entries), generated_at=now)
    logger.info(
        "Audited %d certificates: %s",
        len(inventory.certificates),
        ", ".join(f"{count} {status}" for status, count in report.counts.items()),
    )
    return report


def print_report(report: AuditReport, stream: Optional[TextIO] = None) -> None:
    """Print the report lines to ``stream`` (stdout by default)."""

    Reporter(stream=stream).emit(report.entries)


def report_to_dicts(report: AuditReport) -> List[dict]:
    """Return a JSON-serialisable representation of the report entries."""

    return [
        {
            "status": entry.status,
            "arn": entry.certificate.arn,
            "server_certificate_id": entry.certificate.server_certificate_id,
            "name": entry.certificate.name,
            "expiration": format_timestamp(entry.certificate.expiration),
            "distributions": [
                {"id": d.distribution_id, "aliases": list(d.aliases)}
                for d in entry.distributions
            ],
            "load_balancers": [endpoint.name for endpoint in entry.load_balancers],
        }
        for entry in report.entries
    ]


def export_report_to_json(report: AuditReport, path: str) -> str:
    """Write the report to ``path`` as JSON."""

    payload = {
        "generated_at": format_timestamp(report.generated_at),
        "counts": report.counts,
        "certificates": report_to_dicts(report),
    }
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    return path


def export_report_to_excel(report: AuditReport, path: str) -> str:
    """Write the report to an Excel workbook located at ``path``."""

    headers = ("Status", "Certificate ARN", "Expiration", "Consumers")
    rows = (
        (
            entry.status,
            entry.certificate.arn,
            format_timestamp(entry.certificate.expiration),
            "; ".join(
                consumer.describe()
                for consumer in (*entry.distributions, *entry.load_balancers)
            ),
        )
        for entry in report.entries
    )
    return _export_rows_to_excel(rows, headers, path, sheet_title="Certificates")


def _export_rows_to_excel(
    rows: Iterable[Sequence[object]],
    headers: Sequence[str],
    path: str,
    *,
    sheet_title: str,
) -> str:
    """Write ``rows`` with ``headers`` to an Excel sheet using :mod:`openpyxl`."""

    try:
        from openpyxl import Workbook
        from openpyxl.utils import get_column_letter
    except ImportError as exc:  # pragma: no cover - dependency missing during tests
        raise RuntimeError(
            "The 'openpyxl' package is required to export the report to Excel. "
            "Install it with 'pip install openpyxl'."
        ) from exc

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title

    sheet.append(list(headers))
    column_widths = [len(header) for header in headers]

    for row in rows:
        values = list(row)
        sheet.append(values)
        for idx, value in enumerate(values):
            column_widths[idx] = max(column_widths[idx], len(str(value)))

    for idx, width in enumerate(column_widths, start=1):
        column_letter = get_column_letter(idx)
        sheet.column_dimensions[column_letter].width = min(width + 2, 80)

    workbook.save(path)
    return path


__all__ = [
    "AuditInventory",
    "AuditReport",
    "collect_inventory",
    "export_report_to_excel",
    "export_report_to_json",
    "print_report",
    "report_to_dicts",
    "run_audit",
]
