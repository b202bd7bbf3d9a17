"""Shared helpers for paginated AWS listings and certificate indexes."""
from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError, OperationNotPageableError

from .errors import FetchError

T = TypeVar("T")

# Exceptions raised by boto3 clients that mark a failed collaborator call.
COLLABORATOR_ERRORS = (ClientError, BotoCoreError)


def _extract(page: Mapping, result_key: str) -> List:
    """Return the items stored under the dotted ``result_key`` of ``page``."""

    value: object = page
    for part in result_key.split("."):
        if not isinstance(value, Mapping):
            return []
        value = value.get(part)
        if value is None:
            return []
    return list(value)


def safe_paginate(client: boto3.client, method_name: str, result_key: str, **kwargs) -> Iterator[dict]:
    """Iterate through paginated boto3 results while handling pagination gaps.

    ``result_key`` may be dotted (``DistributionList.Items``) for services that
    nest their item lists. Pages are requested one at a time, each using the
    continuation marker returned by the previous page.
    """

    try:
        paginator = client.get_paginator(method_name)
    except OperationNotPageableError:
        response = getattr(client, method_name)(**kwargs)
        for item in _extract(response, result_key):
            yield item
        return

    for page in paginator.paginate(**kwargs):
        for item in _extract(page, result_key):
            yield item


def fetch_all(
    client: boto3.client,
    method_name: str,
    result_key: str,
    *,
    service: str,
    action: str,
    region: Optional[str] = None,
    **kwargs,
) -> Tuple[dict, ...]:
    """Return every item of a paginated listing or raise :class:`FetchError`.

    No partial result is returned when any page fails.
    """

    try:
        return tuple(safe_paginate(client, method_name, result_key, **kwargs))
    except COLLABORATOR_ERRORS as exc:
        raise FetchError(service, action, exc, region=region) from exc


def build_index(pairs: Iterable[Tuple[Optional[Hashable], T]]) -> Mapping[Hashable, Tuple[T, ...]]:
    """Group ``(key, value)`` pairs into a read-only mapping of tuples.

    Pairs with an empty key are dropped so every key maps to a non-empty tuple.
    """

    grouped: Dict[Hashable, List[T]] = {}
    for key, value in pairs:
        if not key:
            continue
        grouped.setdefault(key, []).append(value)
    return MappingProxyType({key: tuple(values) for key, values in grouped.items()})


def merge_indexes(indexes: Iterable[Mapping[Hashable, Tuple[T, ...]]]) -> Mapping[Hashable, Tuple[T, ...]]:
    """Concatenate several indexes key by key, preserving their order."""

    return build_index(
        (key, value)
        for index in indexes
        for key, values in index.items()
        for value in values
    )


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive datetimes as already UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as an ISO-8601 UTC timestamp with millisecond precision."""

    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


__all__ = [
    "COLLABORATOR_ERRORS",
    "as_utc",
    "build_index",
    "fetch_all",
    "format_timestamp",
    "merge_indexes",
    "safe_paginate",
]
