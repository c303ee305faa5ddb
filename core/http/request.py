"""
Shared HTTP request helpers for provider adapters.

Keeps JSON request/response handling and error mapping consistent across
the Google routing and geocoding clients.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from core.exceptions import ExternalServiceException, RateLimitException

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    none_on: Iterable[int] | None = None,
    service_name: str = "Service",
    timeout: float | None = None,
) -> Any | None:
    """Issue a request and return the decoded JSON body.

    Statuses listed in ``none_on`` return ``None``. A 429 raises
    ``RateLimitException``; any other unexpected status or an undecodable body
    raises ``ExternalServiceException``. Transport errors propagate unchanged so
    retry decorators can act on them.
    """
    method_upper = method.upper()
    if isinstance(expected_status, int):
        expected = {expected_status}
    else:
        expected = set(expected_status)
    none_on_set = set(none_on or [])

    if method_upper == "GET":
        request_fn = session.get
    elif method_upper == "POST":
        request_fn = session.post
    else:
        msg = f"{service_name} request error: unsupported method {method_upper}"
        raise ExternalServiceException(msg, {"url": url})

    request_kwargs: dict[str, Any] = {
        "params": params,
        "json": json,
        "headers": headers,
    }
    if timeout is not None:
        request_kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

    async with request_fn(url, **request_kwargs) as response:
        if response.status in none_on_set:
            logger.debug("%s returned %s for %s", service_name, response.status, url)
            return None
        if response.status == 429:
            try:
                retry_after = int(response.headers.get("Retry-After", 5))
            except (TypeError, ValueError):
                retry_after = 5
            msg = f"{service_name} error: 429"
            raise RateLimitException(
                msg,
                {"status": 429, "retry_after": retry_after, "url": url},
            )
        if response.status not in expected:
            body = await response.text()
            msg = f"{service_name} error: {response.status}"
            raise ExternalServiceException(
                msg,
                {"status": response.status, "body": body, "url": url},
            )
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError) as exc:
            msg = f"{service_name} error: invalid JSON response"
            raise ExternalServiceException(msg, {"url": url}) from exc
