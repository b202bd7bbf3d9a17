"""Data models for IAM server certificates and the resources consuming them."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Literal, Mapping, Optional, Tuple, Union

from .utils import format_timestamp

CertificateStatus = Literal["EXPIRED", "WARNING", "OKAY"]

REPORT_INDENT = " " * 8


@dataclass(frozen=True)
class Certificate:
    """A server certificate registered with IAM."""

    arn: str
    server_certificate_id: str
    name: str
    expiration: datetime
    path: str = "/"
    upload_date: Optional[datetime] = None

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, object]) -> "Certificate":
        """Build a certificate from one ``ServerCertificateMetadataList`` entry."""

        return cls(
            arn=metadata["Arn"],
            server_certificate_id=metadata["ServerCertificateId"],
            name=metadata.get("ServerCertificateName", ""),
            expiration=metadata["Expiration"],
            path=metadata.get("Path", "/"),
            upload_date=metadata.get("UploadDate"),
        )

    @property
    def identifiers(self) -> Tuple[str, str]:
        """Identifiers other services may use to reference this certificate."""

        return (self.arn, self.server_certificate_id)


@dataclass(frozen=True)
class Distribution:
    """A CloudFront distribution terminating TLS with an IAM certificate."""

    distribution_id: str
    aliases: Tuple[str, ...]
    certificate_id: Optional[str]
    domain_name: Optional[str] = None

    def describe(self) -> str:
        return f"Cloudfront distribution {self.distribution_id} aka {', '.join(self.aliases)}"


@dataclass(frozen=True)
class LoadBalancerEndpoint:
    """A classic load balancer listener that references a certificate."""

    name: str
    load_balancer_name: str
    port: int
    certificate_id: str
    region: Optional[str] = None

    def describe(self) -> str:
        return f"Elastic Load Balancer {self.name}"


Consumer = Union[Distribution, LoadBalancerEndpoint]

# Read-only mapping of certificate identifier to the consumers referencing it.
Index = Mapping[str, Tuple[Consumer, ...]]


@dataclass(frozen=True)
class ReportEntry:
    """Classification of one certificate together with its consumers."""

    certificate: Certificate
    status: CertificateStatus
    distributions: Tuple[Distribution, ...] = field(default_factory=tuple)
    load_balancers: Tuple[LoadBalancerEndpoint, ...] = field(default_factory=tuple)

    def lines(self) -> Iterator[str]:
        """Yield the status line followed by one indented line per consumer."""

        yield f"{self.status:<7} {self.certificate.arn} on {format_timestamp(self.certificate.expiration)}"
        for distribution in self.distributions:
            yield f"{REPORT_INDENT}{distribution.describe()}"
        for endpoint in self.load_balancers:
            yield f"{REPORT_INDENT}{endpoint.describe()}"


__all__ = [
    "Certificate",
    "CertificateStatus",
    "Consumer",
    "Distribution",
    "Index",
    "LoadBalancerEndpoint",
    "REPORT_INDENT",
    "ReportEntry",
]
