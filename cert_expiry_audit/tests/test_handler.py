"""Tests for the scheduled invocation entry point."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cert_expiry_audit import handler as handler_module
from cert_expiry_audit.errors import FetchError


def _install(monkeypatch, fakes, *, iam_error=None):
    now = datetime.now(timezone.utc)
    clients = {
        ("iam", None): fakes.Client(
            pages={
                "list_server_certificates": [
                    {
                        "ServerCertificateMetadataList": [
                            fakes.certificate("A", now - timedelta(days=1)),
                            fakes.certificate("C", now + timedelta(days=90)),
                        ]
                    }
                ]
            },
            errors={"list_server_certificates": iam_error} if iam_error else None,
        ),
        ("cloudfront", None): fakes.Client(pages={"list_distributions": []}),
        ("elb", None): fakes.Client(pages={"describe_load_balancers": []}),
    }
    monkeypatch.setattr(handler_module.boto3, "Session", lambda: fakes.Session(clients))


def test_handler_prints_report_and_returns_none(monkeypatch, fakes, capsys) -> None:
    _install(monkeypatch, fakes)
    monkeypatch.setenv("CERT_AUDIT_VERBOSE", "1")

    assert handler_module.handler({}, None) is None

    out = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in out] == ["EXPIRED", "OKAY"]


def test_handler_reraises_fetch_errors(monkeypatch, fakes, capsys) -> None:
    _install(monkeypatch, fakes, iam_error=fakes.client_error("ListServerCertificates"))
    monkeypatch.delenv("CERT_AUDIT_VERBOSE", raising=False)

    with pytest.raises(FetchError):
        handler_module.handler({}, None)

    assert capsys.readouterr().out == ""
