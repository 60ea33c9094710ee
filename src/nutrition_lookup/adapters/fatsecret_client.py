"""FatSecret Platform API client (OAuth 2.0 client credentials)."""

import time
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from nutrition_lookup.adapters.http import default_headers, fetch_json
from nutrition_lookup.adapters.provider_models import RawRecord, decode_fatsecret_search
from nutrition_lookup.errors import ProviderDecodeError, ProviderError

PROVIDER = "fatsecret"
TOKEN_EXPIRY_MARGIN_SECONDS = 60
DEFAULT_TOKEN_LIFETIME_SECONDS = 86400


class FatSecretClient(Protocol):
    """Interface for FatSecret interactions."""

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Search foods by free text and return raw food records."""


@dataclass
class HttpxFatSecretClient(FatSecretClient):
    """HTTPX-backed FatSecret client with a cached access token."""

    client_id: str
    client_secret: str
    base_url: str
    token_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0
    _access_token: str | None = field(default=None, init=False, repr=False)
    _token_expires_at: float = field(default=0.0, init=False, repr=False)

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        client_id: str,
        client_secret: str,
        base_url: str,
        token_url: str,
        user_agent: str,
        timeout_seconds: float = 10.0,
    ) -> "HttpxFatSecretClient":
        """Create a client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            base_url=base_url,
            token_url=token_url,
            http_client=httpx.AsyncClient(headers=default_headers(user_agent)),
            timeout_seconds=timeout_seconds,
        )

    async def search_by_text(self, query: str, max_results: int) -> list[RawRecord]:
        """Search foods via ``foods.search``."""
        token = await self._get_access_token()
        _, payload = await fetch_json(
            self.http_client,
            PROVIDER,
            "POST",
            self.base_url,
            timeout=self.timeout_seconds,
            headers={"Authorization": f"Bearer {token}"},
            params={
                "method": "foods.search",
                "search_expression": query,
                "max_results": max_results,
                "format": "json",
            },
        )
        if isinstance(payload, dict) and "error" in payload:
            raise ProviderError(PROVIDER, f"api error: {payload['error']}")
        result = decode_fatsecret_search(payload)
        if not result.ok or result.value is None:
            raise ProviderDecodeError(PROVIDER, result.error or "empty decode")
        return result.value

    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token
        _, payload = await fetch_json(
            self.http_client,
            PROVIDER,
            "POST",
            self.token_url,
            timeout=self.timeout_seconds,
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise ProviderError(PROVIDER, "token response has no access_token")
        expires_in = payload.get("expires_in", DEFAULT_TOKEN_LIFETIME_SECONDS)
        if not isinstance(expires_in, int):
            expires_in = DEFAULT_TOKEN_LIFETIME_SECONDS
        self._access_token = token
        self._token_expires_at = (
            time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        )
        return token

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
