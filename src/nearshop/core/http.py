"""
Async HTTP helpers shared by the provider and directory clients.

Everything here is a GET returning JSON. Callers either pass a long-lived
`httpx.AsyncClient` (the CLI opens one per command, tests pass one wired to
`httpx.MockTransport`) or let `get_json` open a short-lived one per request.
Non-2xx responses raise, so each caller decides whether to fail open.
"""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_USER_AGENT = "nearshop/0.1.0 (+https://local)"


def default_headers(extra: dict[str, str] | None = None) -> dict[str, str]:
    headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
    if extra:
        headers.update(extra)
    return headers


def build_async_client(*, timeout_seconds: float = 15) -> httpx.AsyncClient:
    """Create a client with the package defaults; the caller must close it."""
    return httpx.AsyncClient(timeout=timeout_seconds, headers=default_headers())


async def _fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None,
    headers: dict[str, str] | None,
    timeout_seconds: float,
) -> Any:
    resp = await client.get(url, params=params, headers=default_headers(headers), timeout=timeout_seconds)
    resp.raise_for_status()
    return resp.json()


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """GET `url` and return the decoded JSON body.

    A given `client` is used as-is and left open.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    if client is not None:
        return await _fetch_json(client, url, params=params, headers=headers, timeout_seconds=timeout_seconds)

    async with build_async_client(timeout_seconds=timeout_seconds) as owned:
        return await _fetch_json(owned, url, params=params, headers=headers, timeout_seconds=timeout_seconds)
