"""Shared fixtures: fake boto3 sessions, clients and paginators."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from botocore.exceptions import ClientError


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class FakePaginator:
    """Yields canned pages, optionally raising once they are exhausted."""

    def __init__(self, pages: List[dict], error: Optional[Exception] = None) -> None:
        self.pages = pages
        self.error = error
        self.calls: List[dict] = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        for page in self.pages:
            yield page
        if self.error is not None:
            raise self.error


class FakeClient:
    """Minimal stand-in for a boto3 client exposing ``get_paginator``."""

    def __init__(
        self,
        pages: Optional[Dict[str, List[dict]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.pages = pages or {}
        self.errors = errors or {}
        self.paginators: Dict[str, FakePaginator] = {}

    def get_paginator(self, name: str) -> FakePaginator:
        paginator = FakePaginator(self.pages.get(name, []), self.errors.get(name))
        self.paginators[name] = paginator
        return paginator


class FakeSession:
    """Hands out fake clients keyed by ``(service, region)``."""

    def __init__(self, clients: Dict[Tuple[str, Optional[str]], FakeClient]) -> None:
        self.clients = clients
        self.requested: List[Tuple[str, Optional[str]]] = []

    def client(self, service_name: str, region_name: Optional[str] = None) -> FakeClient:
        self.requested.append((service_name, region_name))
        return self.clients[(service_name, region_name)]


def make_client_error(operation: str, code: str = "Throttling") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Rate exceeded"}}, operation)


def certificate_metadata(name: str, expiration: datetime, *, cert_id: Optional[str] = None) -> dict:
    return {
        "Path": "/",
        "ServerCertificateName": name,
        "ServerCertificateId": cert_id or f"ASCA{name.upper()}",
        "Arn": f"arn:aws:iam::1:server-certificate/{name}",
        "UploadDate": expiration - timedelta(days=365),
        "Expiration": expiration,
    }


def distribution_summary(dist_id: str, aliases: List[str], iam_certificate_id: Optional[str]) -> dict:
    viewer_certificate = {"CloudFrontDefaultCertificate": iam_certificate_id is None}
    if iam_certificate_id:
        viewer_certificate["IAMCertificateId"] = iam_certificate_id
    return {
        "Id": dist_id,
        "DomainName": f"{dist_id.lower()}.cloudfront.net",
        "Aliases": {"Quantity": len(aliases), "Items": aliases} if aliases else {"Quantity": 0},
        "ViewerCertificate": viewer_certificate,
    }


def load_balancer_description(name: str, listeners: List[Tuple[int, Optional[str]]]) -> dict:
    descriptions = []
    for port, certificate_id in listeners:
        listener = {
            "Protocol": "HTTPS" if certificate_id else "HTTP",
            "LoadBalancerPort": port,
            "InstanceProtocol": "HTTP",
            "InstancePort": 80,
        }
        if certificate_id:
            listener["SSLCertificateId"] = certificate_id
        descriptions.append({"Listener": listener, "PolicyNames": []})
    return {"LoadBalancerName": name, "ListenerDescriptions": descriptions}


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fakes():
    """Expose the fake classes and payload builders to test modules."""

    class Fakes:
        Client = FakeClient
        Session = FakeSession
        client_error = staticmethod(make_client_error)
        certificate = staticmethod(certificate_metadata)
        distribution = staticmethod(distribution_summary)
        load_balancer = staticmethod(load_balancer_description)

    return Fakes
