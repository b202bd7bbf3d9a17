"""Runtime configuration for the certificate expiry audit."""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional, Tuple

from .reporter import DEFAULT_WARNING_DAYS
from .services.elb import DEFAULT_MAX_REGION_WORKERS, DEFAULT_REGIONS

ENV_PREFIX = "CERT_AUDIT_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class AuditConfig:
    """Options controlling a single audit run.

    An empty ``regions`` tuple lists load balancers in the session's region
    only; otherwise each region is walked and endpoint names carry the region.
    """

    verbose: bool = False
    warning_days: int = DEFAULT_WARNING_DAYS
    regions: Tuple[str, ...] = ()
    max_region_workers: int = DEFAULT_MAX_REGION_WORKERS
    allow_partial_regions: bool = False

    def __post_init__(self) -> None:
        if self.warning_days < 0:
            raise ValueError("warning_days must not be negative")
        if self.max_region_workers < 1:
            raise ValueError("max_region_workers must be at least 1")

    @property
    def multi_region(self) -> bool:
        return bool(self.regions)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuditConfig":
        """Build a configuration from ``CERT_AUDIT_*`` environment variables."""

        env = os.environ if environ is None else environ
        return cls(
            verbose=_parse_bool(env, "VERBOSE", False),
            warning_days=_parse_int(env, "WARNING_DAYS", DEFAULT_WARNING_DAYS),
            regions=parse_regions(env.get(f"{ENV_PREFIX}REGIONS", "")),
            max_region_workers=_parse_int(
                env, "MAX_REGION_WORKERS", DEFAULT_MAX_REGION_WORKERS
            ),
            allow_partial_regions=_parse_bool(env, "ALLOW_PARTIAL_REGIONS", False),
        )


def parse_regions(value: str) -> Tuple[str, ...]:
    """Parse a comma separated region list; ``all`` selects the default set."""

    regions = [part.strip() for part in value.split(",") if part.strip()]
    if any(region.lower() == "all" for region in regions):
        if len(regions) > 1:
            raise ValueError("'all' cannot be combined with other regions")
        return DEFAULT_REGIONS
    return tuple(dict.fromkeys(regions))


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {ENV_PREFIX}{name}: {raw!r}")


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid integer for {ENV_PREFIX}{name}: {raw!r}") from None


__all__ = ["AuditConfig", "ENV_PREFIX", "parse_regions"]
