"""Tests for the command line interface."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cert_expiry_audit import cli
from cert_expiry_audit.services.elb import DEFAULT_REGIONS


ARN_A = "arn:aws:iam::1:server-certificate/A"


@pytest.fixture
def install_session(monkeypatch, fakes):
    """Patch ``boto3.Session`` in the CLI with a fake session factory."""

    def install(*, days_left, elb_error=None):
        now = datetime.now(timezone.utc)
        clients = {
            ("iam", None): fakes.Client(
                pages={
                    "list_server_certificates": [
                        {
                            "ServerCertificateMetadataList": [
                                fakes.certificate("A", now + timedelta(days=days_left))
                            ]
                        }
                    ]
                }
            ),
            ("cloudfront", None): fakes.Client(
                pages={"list_distributions": [{"DistributionList": {"Quantity": 0}}]}
            ),
            ("elb", None): fakes.Client(
                pages={
                    "describe_load_balancers": [
                        {"LoadBalancerDescriptions": [fakes.load_balancer("web", [(443, ARN_A)])]}
                    ]
                },
                errors={"describe_load_balancers": elb_error} if elb_error else None,
            ),
        }
        calls = []

        def factory(**kwargs):
            calls.append(kwargs)
            return fakes.Session(clients)

        monkeypatch.setattr(cli.boto3, "Session", factory)
        return calls

    return install


def test_build_config_from_arguments() -> None:
    args = cli.parse_args(
        ["--regions", "us-east-1", "eu-west-1", "us-east-1", "-v", "--warning-days", "30"]
    )

    config = cli.build_config(args)

    assert config.regions == ("us-east-1", "eu-west-1")
    assert config.verbose
    assert config.warning_days == 30
    assert not config.allow_partial_regions


def test_all_regions_uses_default_region_set() -> None:
    config = cli.build_config(cli.parse_args(["--all-regions", "--allow-partial-regions"]))

    assert config.regions == DEFAULT_REGIONS
    assert config.allow_partial_regions


def test_regions_and_all_regions_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["--regions", "us-east-1", "--all-regions"])


def test_invalid_worker_count_is_rejected(capsys) -> None:
    assert cli.main(["--max-region-workers", "0"]) == cli.EXIT_ERROR
    assert "max_region_workers" in capsys.readouterr().err


def test_main_prints_report(install_session, capsys) -> None:
    calls = install_session(days_left=3)

    exit_code = cli.main(["--profile", "audit", "--region", "us-west-2"])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == cli.EXIT_OK
    assert calls == [{"profile_name": "audit", "region_name": "us-west-2"}]
    assert out[0].startswith(f"WARNING {ARN_A} on ")
    assert out[1] == "        Elastic Load Balancer web:443"


def test_main_suppresses_okay_certificates(install_session, capsys) -> None:
    install_session(days_left=60)

    assert cli.main([]) == cli.EXIT_OK
    assert capsys.readouterr().out == ""


def test_fail_on_warning_sets_exit_code(install_session) -> None:
    install_session(days_left=-1)

    assert cli.main(["--fail-on-warning"]) == cli.EXIT_EXPIRING


def test_fetch_error_prints_no_report(install_session, fakes, capsys) -> None:
    install_session(days_left=-1, elb_error=fakes.client_error("DescribeLoadBalancers"))

    exit_code = cli.main([])

    captured = capsys.readouterr()
    assert exit_code == cli.EXIT_ERROR
    assert captured.out == ""
    assert "Failed to describe load balancers (elb)" in captured.err


def test_json_export_written(install_session, tmp_path, capsys) -> None:
    install_session(days_left=-1)
    path = tmp_path / "report.json"

    assert cli.main(["--json", str(path)]) == cli.EXIT_OK

    assert path.exists()
    assert f"JSON report written to {path}" in capsys.readouterr().err


def test_regions_all_selects_default_region_set() -> None:
    config = cli.build_config(cli.parse_args(["--regions", "all"]))

    assert config.regions == DEFAULT_REGIONS


def test_regions_all_mixed_with_named_regions_is_rejected(capsys) -> None:
    assert cli.main(["--regions", "all", "us-east-1"]) == cli.EXIT_ERROR
    assert "'all' cannot be combined" in capsys.readouterr().err
