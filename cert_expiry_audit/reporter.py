"""Expiration classification and the certificate to consumer join."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
import sys
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, TextIO

from .models import Certificate, CertificateStatus, Index, ReportEntry
from .utils import as_utc, build_index

DEFAULT_WARNING_DAYS = 14

STATUS_ORDER = ("EXPIRED", "WARNING", "OKAY")


def classify(
    expiration: datetime,
    now: datetime,
    warning_window: timedelta = timedelta(days=DEFAULT_WARNING_DAYS),
) -> CertificateStatus:
    """Return the expiration status of a certificate at ``now``.

    Naive datetimes are treated as UTC.
    """

    expiration = as_utc(expiration)
    now = as_utc(now)
    if expiration < now:
        return "EXPIRED"
    if expiration < now + warning_window:
        return "WARNING"
    return "OKAY"


def certificate_aliases(certificates: Iterable[Certificate]) -> Dict[str, str]:
    """Map every identifier of each certificate onto its ARN."""

    aliases: Dict[str, str] = {}
    for certificate in certificates:
        for identifier in certificate.identifiers:
            aliases[identifier] = certificate.arn
    return aliases


def canonicalize_index(index: Index, aliases: Mapping[str, str]) -> Index:
    """Re-key ``index`` by certificate ARN.

    CloudFront references IAM certificates by server certificate ID while
    classic load balancers use the ARN. Keys that match no known certificate
    (ACM certificates, for example) are kept unchanged.
    """

    return build_index(
        (aliases.get(key, key), consumer)
        for key, consumers in index.items()
        for consumer in consumers
    )


def summarize(entries: Iterable[ReportEntry]) -> Dict[str, int]:
    """Count reported certificates per status."""

    counts = Counter(entry.status for entry in entries)
    return {status: counts.get(status, 0) for status in STATUS_ORDER}


class Reporter:
    """Classify certificates and render the console report.

    ``OKAY`` certificates are only reported when ``verbose`` is set. ``now``
    is fixed when the reporter is created so every certificate in a run is
    measured against the same instant.
    """

    def __init__(
        self,
        verbose: bool = False,
        warning_days: int = DEFAULT_WARNING_DAYS,
        now: Optional[datetime] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.verbose = verbose
        self.warning_window = timedelta(days=warning_days)
        self.now = as_utc(now) if now else datetime.now(timezone.utc)
        self.stream = stream

    def build(
        self,
        certificates: Sequence[Certificate],
        distributions: Index,
        load_balancers: Index,
    ) -> List[ReportEntry]:
        """Return report entries in certificate order, skipping suppressed ones."""

        aliases = certificate_aliases(certificates)
        distributions = canonicalize_index(distributions, aliases)
        load_balancers = canonicalize_index(load_balancers, aliases)

        entries: List[ReportEntry] = []
        for certificate in certificates:
            status = classify(certificate.expiration, self.now, self.warning_window)
            if status == "OKAY" and not self.verbose:
                continue
            entries.append(
                ReportEntry(
                    certificate=certificate,
                    status=status,
                    distributions=tuple(distributions.get(certificate.arn, ())),
                    load_balancers=tuple(load_balancers.get(certificate.arn, ())),
                )
            )
        return entries

    @staticmethod
    def render(entries: Iterable[ReportEntry]) -> List[str]:
        """Return the report lines for ``entries``."""

        return [line for entry in entries for line in entry.lines()]

    def emit(self, entries: Iterable[ReportEntry]) -> None:
        """Write the report lines for ``entries`` to the output stream."""

        stream = self.stream or sys.stdout
        for line in self.render(entries):
            print(line, file=stream)


__all__ = [
    "DEFAULT_WARNING_DAYS",
    "Reporter",
    "STATUS_ORDER",
    "canonicalize_index",
    "certificate_aliases",
    "classify",
    "summarize",
]
