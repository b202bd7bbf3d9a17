"""Error types raised while collecting certificate inventory."""
from __future__ import annotations

from typing import Optional, Sequence


class FetchError(Exception):
    """A collaborator call failed while listing resources.

    Wraps the underlying ``botocore`` error (transport, authentication,
    throttling or missing credentials). Every ``FetchError`` is fatal to the
    audit run.
    """

    def __init__(
        self,
        service: str,
        action: str,
        cause: Optional[BaseException] = None,
        *,
        region: Optional[str] = None,
    ) -> None:
        self.service = service
        self.action = action.rstrip(".")
        self.cause = cause
        self.region = region
        super().__init__(self._format())

    def _format(self) -> str:
        scope = f"{self.service}, {self.region}" if self.region else self.service
        message = f"Failed to {self.action} ({scope})"
        if self.cause is not None:
            message = f"{message}: {self.cause}"
        return message


class RegionFetchError(FetchError):
    """One or more regions failed during a multi-region load balancer walk."""

    def __init__(
        self,
        failures: Sequence[FetchError],
        *,
        succeeded: Sequence[str] = (),
    ) -> None:
        self.failures = tuple(failures)
        self.succeeded = tuple(succeeded)
        first = self.failures[0] if self.failures else None
        super().__init__(
            "elb",
            "describe load balancers in all regions",
            first,
            region=", ".join(sorted(f.region or "default" for f in self.failures)) or None,
        )


__all__ = ["FetchError", "RegionFetchError"]
