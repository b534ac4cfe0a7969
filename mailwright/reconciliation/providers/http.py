"""Shared httpx plumbing for REST-backed taxonomy providers."""

from typing import Any

import httpx

from mailwright.errors import RemoteProviderError
from mailwright.observability.logging import get_logger
from mailwright.observability.metrics import PROVIDER_CALLS
from mailwright.reconciliation.provider import CredentialSupplier, TaxonomyProvider

logger = get_logger(__name__)

RETRIABLE_STATUS = frozenset({429})


def is_retriable_status(status_code: int) -> bool:
    return status_code in RETRIABLE_STATUS or status_code >= 500


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        return response.text
    if isinstance(error, dict):
        return str(error.get("message", response.text))
    return str(error or response.text)


class HttpTaxonomyProvider(TaxonomyProvider):
    """Base class for providers talking to a JSON REST API.

    Errors are classified uniformly: 429, 5xx and transport failures
    are retriable; every other 4xx is terminal.
    """

    base_url: str = ""

    def __init__(
        self,
        credentials: CredentialSupplier,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            credentials: Supplies the bearer token for each request
            timeout: Request timeout in seconds
            transport: Custom transport (httpx.MockTransport in tests)
        """
        self._credentials = credentials
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpTaxonomyProvider":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        token = await self._credentials.get_token()
        try:
            response = await self._client.request(
                method=method,
                url=url,
                headers={"Authorization": f"Bearer {token}"},
                json=json,
                params=params,
            )
        except httpx.TransportError as e:
            PROVIDER_CALLS.labels(
                provider=self.provider_name, operation=operation, status="transport_error"
            ).inc()
            raise RemoteProviderError(
                f"{self.provider_name} {operation} failed: {e}",
                retriable=True,
            ) from e

        PROVIDER_CALLS.labels(
            provider=self.provider_name, operation=operation, status=str(response.status_code)
        ).inc()

        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug(
                "provider_request_failed",
                provider=self.provider_name,
                operation=operation,
                status_code=response.status_code,
            )
            raise RemoteProviderError(
                f"{self.provider_name} {operation} returned {response.status_code}: {message}",
                retriable=is_retriable_status(response.status_code),
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _node_id(self, data: dict[str, Any], operation: str) -> str:
        """Extract the id of a created node from a 2xx response body.

        Raises:
            RemoteProviderError: Terminal, when the body carries no usable id
        """
        node_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(node_id, str) or not node_id:
            logger.warning(
                "provider_response_invalid",
                provider=self.provider_name,
                operation=operation,
                keys=sorted(data) if isinstance(data, dict) else None,
            )
            raise RemoteProviderError(
                f"{self.provider_name} {operation} response has no node id",
                retriable=False,
            )
        return node_id
