"""
Ports — Protocol-based interfaces for infrastructure adapters.

The revocation client depends only on ServiceTransport. The default
HTTP transport in turn depends on the two smaller ports, so each piece can
be substituted in tests:

  RevocationClient → ServiceTransport
                       ├─ AccessTokenProvider      (bearer token per resource)
                       └─ ServiceLocationProvider  (logical name → base URL)

All ports are async and return Result; transport-level problems travel on
the failure track with their own ErrorCode.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from railway.result import Result

from revocation_client.domain.models import TransportResponse


@runtime_checkable
class ServiceTransport(Protocol):
    """
    Port: authenticated POST of a JSON body to a logical service.

    Returns Result[TransportResponse] with the parsed JSON body on success.
    The body is NOT checked for shape here; that is the caller's contract.
    """

    async def post(
        self,
        service_name: str,
        url_suffix: str,
        service_version: str,
        body: dict[str, Any],
        activity_id: UUID,
    ) -> Result[TransportResponse]: ...


@runtime_checkable
class AccessTokenProvider(Protocol):
    """Port: obtain a bearer access token for the given resource URL."""

    async def acquire_token(self, resource: str) -> Result[str]: ...


@runtime_checkable
class ServiceLocationProvider(Protocol):
    """Port: resolve a logical service name to its base URL."""

    async def resolve(self, service_name: str) -> Result[str]: ...
