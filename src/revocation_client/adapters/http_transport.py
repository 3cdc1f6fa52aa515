"""
HTTP adapter — default ServiceTransport built on httpx.

Adapter layer — implements the AccessTokenProvider, ServiceLocationProvider
and ServiceTransport ports with httpx.AsyncClient.

Call flow for one POST:
  1. OAuth2 client-credentials grant → bearer token for the service resource
  2. Resolve the logical service name → base URL (Graph serviceEndpoints, memoised)
  3. POST {base}/{suffix}?api-version={version} with bearer + client-request-id

Retry/backoff via tenacity applies to token and discovery requests on
transient errors (network, timeout) only. The service POST is sent exactly
once; the caller owns retry policy for it.
All HTTP errors are captured into Result failures — no exceptions leak to
the client layer.
"""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

import httpx
import structlog
from railway import ErrorCode, Result, ResultFailures
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from revocation_client.config import TransportSettings
from revocation_client.domain.models import TransportResponse
from revocation_client.domain.ports import AccessTokenProvider, ServiceLocationProvider

log = structlog.get_logger()

_TRANSIENT = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=0.1, max=30),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    reraise=True,
)


class HttpAccessTokenProvider:
    """
    Acquire bearer tokens with the OAuth2 client-credentials grant.

    Implements the AccessTokenProvider port. Tokens are requested per call;
    caching and refresh belong to a dedicated auth layer.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        timeout: int = 60,
    ) -> None:
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout

    async def acquire_token(self, resource: str) -> Result[str]:
        """
        POST grant_type=client_credentials for the given resource.

        Returns Result[str] with the access_token on success,
        or Result.failure(AUTHENTICATION_ERROR, ...) on any failure.
        """
        try:
            token = await self._do_token_request(resource)
        except Exception as e:
            return ResultFailures.authentication_error(
                f"Access token acquisition failed for {resource}: {e}", e
            )
        return Result.success(token)

    @_TRANSIENT
    async def _do_token_request(self, resource: str) -> str:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "resource": resource,
                },
            )
            response.raise_for_status()
            token: str = response.json()["access_token"]
            log.info("access_token.acquired", resource=resource)
            return token


class HttpServiceLocationProvider:
    """
    Resolve logical service names through the Graph serviceEndpoints listing.

    Implements the ServiceLocationProvider port. The listing is fetched on
    first use and memoised; a name missing from the memoised listing triggers
    one refresh before failing.
    """

    def __init__(
        self,
        endpoints_url: str,
        graph_resource_url: str,
        graph_api_version: str,
        token_provider: AccessTokenProvider,
        timeout: int = 60,
    ) -> None:
        self._endpoints_url = endpoints_url
        self._graph_resource_url = graph_resource_url
        self._graph_api_version = graph_api_version
        self._token_provider = token_provider
        self._timeout = timeout
        self._endpoints: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def resolve(self, service_name: str) -> Result[str]:
        key = service_name.lower()
        if key in self._endpoints:
            return Result.success(self._endpoints[key])

        async with self._lock:
            if key not in self._endpoints:
                refreshed = await self._refresh()
                if refreshed.is_failure():
                    return refreshed
        if key not in self._endpoints:
            return ResultFailures.service_discovery_error(
                service_name, f"Known services: {sorted(self._endpoints)}"
            )
        return Result.success(self._endpoints[key])

    async def _refresh(self) -> Result[dict[str, str]]:
        token = await self._token_provider.acquire_token(self._graph_resource_url)
        return await token.flat_map_async(self._fetch_endpoints)

    async def _fetch_endpoints(self, token: str) -> Result[dict[str, str]]:
        try:
            listing = await self._do_discovery_request(token)
        except Exception as e:
            return Result.failure(
                ErrorCode.SERVICE_DISCOVERY_ERROR, f"Endpoint discovery failed: {e}", e
            )
        discovered = {
            str(entry["serviceName"]).lower(): str(entry["uri"]).rstrip("/")
            for entry in listing
            if isinstance(entry, dict) and entry.get("serviceName") and entry.get("uri")
        }
        self._endpoints = discovered
        log.info("service_location.discovered", services=len(discovered))
        return Result.success(discovered)

    @_TRANSIENT
    async def _do_discovery_request(self, token: str) -> list[Any]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(
                self._endpoints_url,
                params={"api-version": self._graph_api_version},
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            listing: list[Any] = response.json()["value"]
            return listing


class HttpServiceTransport:
    """
    Authenticated JSON POST to a logical service.

    Implements the ServiceTransport port.
    """

    def __init__(
        self,
        resource_url: str,
        user_agent: str,
        token_provider: AccessTokenProvider,
        location_provider: ServiceLocationProvider,
        timeout: int = 60,
    ) -> None:
        self._resource_url = resource_url
        self._user_agent = user_agent
        self._token_provider = token_provider
        self._location_provider = location_provider
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: TransportSettings) -> HttpServiceTransport:
        """Wire token provider and endpoint discovery from one settings object."""
        token_provider = HttpAccessTokenProvider(
            token_url=settings.token_url,
            client_id=settings.app_id,
            client_secret=settings.app_key.get_secret_value(),
            timeout=settings.timeout_seconds,
        )
        location_provider = HttpServiceLocationProvider(
            endpoints_url=settings.service_endpoints_url,
            graph_resource_url=settings.graph_resource_url,
            graph_api_version=settings.graph_api_version,
            token_provider=token_provider,
            timeout=settings.timeout_seconds,
        )
        return cls(
            resource_url=settings.intune_resource_url,
            user_agent=settings.provider_name_and_version,
            token_provider=token_provider,
            location_provider=location_provider,
            timeout=settings.timeout_seconds,
        )

    async def post(
        self,
        service_name: str,
        url_suffix: str,
        service_version: str,
        body: dict[str, Any],
        activity_id: UUID,
    ) -> Result[TransportResponse]:
        """
        Returns Result[TransportResponse] on a 2xx answer. Failures:
          - token                      → AUTHENTICATION_ERROR
          - endpoint resolution        → SERVICE_DISCOVERY_ERROR
          - 401/403                    → AUTHENTICATION_ERROR
          - timeout                    → TIMEOUT_ERROR
          - other status / network / non-JSON body → EXTERNAL_SERVICE_ERROR
        """
        token = await self._token_provider.acquire_token(self._resource_url)
        return await token.flat_map_async(
            lambda bearer: self._resolve_and_post(
                bearer, service_name, url_suffix, service_version, body, activity_id
            )
        )

    async def _resolve_and_post(
        self,
        bearer: str,
        service_name: str,
        url_suffix: str,
        service_version: str,
        body: dict[str, Any],
        activity_id: UUID,
    ) -> Result[TransportResponse]:
        location = await self._location_provider.resolve(service_name)
        return await location.flat_map_async(
            lambda base_url: self._send(
                f"{base_url}/{url_suffix.lstrip('/')}", bearer, service_version, body, activity_id
            )
        )

    async def _send(
        self,
        url: str,
        bearer: str,
        service_version: str,
        body: dict[str, Any],
        activity_id: UUID,
    ) -> Result[TransportResponse]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    params={"api-version": service_version},
                    headers={
                        "Authorization": f"Bearer {bearer}",
                        "client-request-id": str(activity_id),
                        "api-version": service_version,
                        "User-Agent": self._user_agent,
                    },
                    json=body,
                )
                response.raise_for_status()
                parsed = response.json() if response.content.strip() else None
        except Exception as e:
            return ResultFailures.from_exception(f"POST {url} failed", e)
        return Result.success(TransportResponse(body=parsed, status_code=response.status_code))
