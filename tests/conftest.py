"""
Shared test fixtures and helpers for the revocation-client test suite.

Provides config properties and a recording fake ServiceTransport so the
client can be exercised without any HTTP.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import pytest
from railway import Result

from revocation_client.domain.models import RevocationResult, TransportResponse

PROVIDER_NAME_AND_VERSION = "ContosoCA-1.0"


@dataclass
class RecordedPost:
    service_name: str
    url_suffix: str
    service_version: str
    body: dict[str, Any]
    activity_id: UUID


@dataclass
class FakeTransport:
    """
    ServiceTransport stub returning a fixed Result and recording every call.

    delay yields to the event loop before answering, so concurrent calls
    interleave.
    """

    reply: Result[TransportResponse]
    delay: float = 0.0
    calls: list[RecordedPost] = field(default_factory=list)

    async def post(
        self,
        service_name: str,
        url_suffix: str,
        service_version: str,
        body: dict[str, Any],
        activity_id: UUID,
    ) -> Result[TransportResponse]:
        self.calls.append(RecordedPost(service_name, url_suffix, service_version, body, activity_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.reply


def replying(body: Any) -> FakeTransport:
    """FakeTransport whose every POST succeeds with the given JSON body."""
    return FakeTransport(Result.success(TransportResponse(body=body)))


@pytest.fixture()
def config_properties() -> dict[str, str]:
    """Minimal config properties accepted by RevocationClient."""
    return {"PROVIDER_NAME_AND_VERSION": PROVIDER_NAME_AND_VERSION}


@pytest.fixture()
def transport_properties(config_properties: dict[str, str]) -> dict[str, str]:
    """Config properties sufficient to build the default HTTP transport."""
    return {
        **config_properties,
        "AAD_APP_ID": "app-id",
        "AAD_APP_KEY": "app-secret",
        "TENANT": "contoso.onmicrosoft.com",
    }


@pytest.fixture()
def sample_results() -> list[RevocationResult]:
    return [
        RevocationResult(request_context="ctx-1", succeeded=True),
        RevocationResult(
            request_context="ctx-2",
            succeeded=False,
            error_code=1,
            error_message="Certificate not found",
        ),
    ]
