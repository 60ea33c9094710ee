"""Shared httpx request helper for provider adapters."""

from collections.abc import Collection

import httpx

from nutrition_lookup.errors import (
    ProviderDecodeError,
    ProviderError,
    ProviderTimeoutError,
)


def default_headers(user_agent: str) -> dict[str, str]:
    """Headers sent with every provider request."""
    return {"Accept": "application/json", "User-Agent": user_agent}


async def fetch_json(  # noqa: PLR0913
    http_client: httpx.AsyncClient,
    provider: str,
    method: str,
    url: str,
    *,
    timeout: float,
    allowed_statuses: Collection[int] = (),
    **kwargs: object,
) -> tuple[int, object]:
    """Send a request and return its status code and decoded JSON body.

    Transport errors, timeouts, unexpected statuses and non-JSON bodies are
    raised as ``ProviderError`` subclasses. Statuses in ``allowed_statuses``
    are returned to the caller instead of raising.
    """
    try:
        response = await http_client.request(method, url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as exc:
        raise ProviderTimeoutError(provider, f"timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise ProviderError(provider, f"request failed: {exc}") from exc

    status_code = response.status_code
    if status_code != httpx.codes.OK and status_code not in allowed_statuses:
        raise ProviderError(
            provider, f"unexpected status {status_code}", status_code=status_code
        )
    try:
        return status_code, response.json()
    except ValueError as exc:
        raise ProviderDecodeError(
            provider, "response body is not JSON", status_code=status_code
        ) from exc
