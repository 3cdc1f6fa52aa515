"""
Wire protocol — request envelopes and response unwrapping.

Request bodies wrap their payload under one named property:

    download  {"downloadParameters": {"maxRequests": 10, "certificateProviderName": null, "issuerName": null}}
    upload    {"results": [{"requestContext": "...", "succeeded": true, ...}, ...]}

Responses wrap theirs under "value":

    download  {"value": [{"requestContext": "...", "serialNumber": "..."}, ...]}
    upload    {"value": "true"}

Encoding options travel as an explicit WireFormat value on every encode
call; there is no module-level serializer state to mutate. Decoding follows
the camelCase aliases declared on the wire models.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter
from railway import Result, ResultFailures

from revocation_client.domain.models import (
    DownloadFilter,
    RevocationRequest,
    RevocationResult,
    WireModel,
)

SERVICE_NAME = "PkiConnectorFEService"
DEFAULT_SERVICE_VERSION = "5019-05-05"
DOWNLOAD_REVOCATION_REQUESTS_URL = "CertificateAuthorityRequests/downloadRevocationRequests"
UPLOAD_REVOCATION_RESULTS_URL = "CertificateAuthorityRequests/uploadRevocationResults"
MAX_REQUESTS_MAX_VALUE = 500

_REVOCATION_REQUESTS = TypeAdapter(list[RevocationRequest])


@dataclass(frozen=True, slots=True)
class WireFormat:
    """
    Serializer configuration for one encode/decode call.

    omit_null_fields: drop None-valued properties instead of sending null.
    """

    omit_null_fields: bool = False

    def encode(self, model: WireModel) -> dict[str, Any]:
        return model.model_dump(mode="json", by_alias=True, exclude_none=self.omit_null_fields)


class DownloadParameters(WireModel):
    """Body of the download request."""

    max_requests: int
    certificate_provider_name: str | None = None
    issuer_name: str | None = None


# ─────────────────────── Envelope builders ───────────────────────


def build_download_envelope(
    max_requests: int,
    download_filter: DownloadFilter,
    wire_format: WireFormat,
) -> dict[str, Any]:
    parameters = DownloadParameters(
        max_requests=max_requests,
        certificate_provider_name=download_filter.certificate_provider_name,
        issuer_name=download_filter.issuer_name,
    )
    return {"downloadParameters": wire_format.encode(parameters)}


def build_upload_envelope(
    results: Sequence[RevocationResult],
    wire_format: WireFormat,
) -> dict[str, Any]:
    return {"results": [wire_format.encode(result) for result in results]}


# ─────────────────────── Response unwrapping ───────────────────────


def render_raw(response: Any) -> str:
    """JSON text of a response for error messages; repr() if it won't serialize."""
    try:
        return json.dumps(response, default=str)
    except (TypeError, ValueError):
        return repr(response)


def unwrap_value(response: Any) -> Result[Any]:
    """
    Return response["value"].

    A response that is not a JSON object, has no "value" key, or has a null
    value is a PROTOCOL_ERROR carrying the raw response.
    """
    if not isinstance(response, dict) or response.get("value") is None:
        return ResultFailures.protocol_error(
            "Unable to deserialize value returned from the service. "
            f"No 'value' property is present in the response. JSON: {render_raw(response)}.",
            raw_response=response,
        )
    return Result.success(response["value"])


def decode_revocation_requests(value: Any, raw_response: Any = None) -> Result[list[RevocationRequest]]:
    """Decode a "value" payload into RevocationRequests, in service order."""
    try:
        requests = _REVOCATION_REQUESTS.validate_python(value)
    except ValueError as e:
        return ResultFailures.protocol_error(
            "Unable to deserialize value returned from the service. "
            f"Value: {render_raw(raw_response if raw_response is not None else value)}. "
            f"Exception: {e}",
            exception=e,
            raw_response=raw_response,
        )
    return Result.success(requests)


def decode_upload_acknowledgement(value: Any, raw_response: Any = None) -> Result[bool]:
    """Accept JSON true or the string "true" (any case, surrounding blanks ignored)."""
    match value:
        case True:
            return Result.success(True)
        case str() if value.strip().lower() == "true":
            return Result.success(True)
    return ResultFailures.protocol_error(
        "Results not successfully recorded by the service. Expected 'true' from service. "
        f"Received: '{render_raw(raw_response if raw_response is not None else value)}'",
        raw_response=raw_response,
    )


def unwrap_download_response(response: Any) -> Result[list[RevocationRequest]]:
    return unwrap_value(response).flat_map(
        lambda value: decode_revocation_requests(value, raw_response=response)
    )


def unwrap_upload_response(response: Any) -> Result[bool]:
    return unwrap_value(response).flat_map(
        lambda value: decode_upload_acknowledgement(value, raw_response=response)
    )
