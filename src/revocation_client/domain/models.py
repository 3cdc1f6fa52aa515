"""
Domain models — immutable values exchanged with the revocation service.

Two families:
  - Wire models (RevocationRequest, RevocationResult) are pydantic models,
    because they cross the JSON boundary and need validated decoding and
    camelCase encoding. They are frozen: the client never mutates them.
  - Call-scoped values (DownloadFilter, CorrelationContext) are frozen
    dataclasses that never leave the process as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def _lower_first(key: Any) -> Any:
    if isinstance(key, str) and key:
        return key[0].lower() + key[1:]
    return key


class WireModel(BaseModel):
    """
    Base for values that travel as JSON.

    Python attributes are snake_case, wire keys are camelCase. Incoming keys
    of known fields also accept a leading capital (RequestContext) since the
    service's own serializer does not distinguish. Unknown keys are untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        aliases = {info.alias for info in cls.model_fields.values() if info.alias}
        return {
            (_lower_first(k) if _lower_first(k) in aliases else k): v
            for k, v in data.items()
        }


class RevocationRequest(WireModel):
    """
    A pending certificate revocation issued by the remote authority.

    Only request_context and serial_number are required; any other
    attributes the service sends are kept verbatim (model_extra).
    """

    model_config = ConfigDict(extra="allow")

    request_context: str
    serial_number: str
    issuer_name: str | None = None
    ca_configuration: str | None = None


class RevocationResult(WireModel):
    """The caller's outcome for one RevocationRequest, sent back on upload."""

    request_context: str
    succeeded: bool
    error_code: int = 0
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class DownloadFilter:
    """Optional narrowing of which pending requests the service returns."""

    certificate_provider_name: str | None = None
    issuer_name: str | None = None


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """
    What a ServiceTransport hands back: the parsed JSON body, unchecked.

    body is None when the service answered with an empty or null body.
    """

    body: Any
    status_code: int = 200


@dataclass(frozen=True, slots=True)
class CorrelationContext:
    """
    Per-call correlation identifiers.

    transaction_id comes from the caller; activity_id is generated for every
    dispatch and sent to the service as the client request id.
    """

    transaction_id: str
    activity_id: UUID = field(default_factory=uuid4)
