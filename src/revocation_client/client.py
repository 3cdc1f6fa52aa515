"""
Revocation client — download pending revocation requests, upload results.

Each public operation is one linear railway:

  validate → build envelope → dispatch (ServiceTransport.post) → unwrap → Result[T]

Validation and protocol failures are produced here; transport failures come
back from the port and are passed through unchanged. An exception raised by
the port is classified by its type instead of being collapsed into one code.
The client keeps no per-call state: settings, transport, logger and wire
format are fixed at construction, so concurrent calls need no locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from railway import Result, ResultFailures
from structlog.typing import FilteringBoundLogger

from revocation_client.adapters.http_transport import HttpServiceTransport
from revocation_client.config import ClientSettings, TransportSettings
from revocation_client.domain.models import (
    CorrelationContext,
    RevocationRequest,
    RevocationResult,
    TransportResponse,
)
from revocation_client.domain.ports import ServiceTransport
from revocation_client.protocol import (
    DOWNLOAD_REVOCATION_REQUESTS_URL,
    SERVICE_NAME,
    UPLOAD_REVOCATION_RESULTS_URL,
    WireFormat,
    build_download_envelope,
    build_upload_envelope,
    unwrap_download_response,
    unwrap_upload_response,
)
from revocation_client.validation import (
    validate_download_filter,
    validate_max_requests,
    validate_results,
    validate_transaction_id,
)


class RevocationClient:
    """
    Client for the certificate-authority revocation endpoints.

        client = RevocationClient({"PROVIDER_NAME_AND_VERSION": "ContosoCA-1.0", ...})
        requests = await client.download_revocation_requests(transaction_id, 50)
        recorded = await client.upload_revocation_results(transaction_id, results)

    Args:
        config_properties: Key/value configuration. PROVIDER_NAME_AND_VERSION
            is required; PkiConnectorFEServiceVersion is optional.
        transport: ServiceTransport to use. When omitted, the default httpx
            transport is built from the same config properties.
        logger: structlog logger for diagnostic events.
        wire_format: Encoding options applied to every request body.

    Raises:
        pydantic.ValidationError: if the configuration is missing or invalid.
    """

    def __init__(
        self,
        config_properties: Mapping[str, str],
        *,
        transport: ServiceTransport | None = None,
        logger: FilteringBoundLogger | None = None,
        wire_format: WireFormat | None = None,
    ) -> None:
        self._settings = ClientSettings.from_properties(config_properties)
        self._log = logger if logger is not None else structlog.get_logger().bind(
            provider=self._settings.provider_name_and_version
        )
        self._wire_format = wire_format or WireFormat()
        self._transport = (
            transport if transport is not None else _default_transport(config_properties)
        )

    @property
    def service_version(self) -> str:
        return self._settings.service_version

    async def download_revocation_requests(
        self,
        transaction_id: str,
        max_requests: int,
        certificate_provider_name: str | None = None,
        issuer_name: str | None = None,
    ) -> Result[list[RevocationRequest]]:
        """
        Download up to max_requests pending revocation requests.

        Failures:
          - INVALID_ARGUMENT: blank transaction_id, or a filter that is not a string
          - OUT_OF_RANGE: max_requests outside [1, 500]
          - PROTOCOL_ERROR: response without "value", or undecodable requests
          - any transport failure, unchanged
        """
        envelope = (
            validate_transaction_id(transaction_id)
            .flat_map(lambda _: validate_download_filter(certificate_provider_name, issuer_name))
            .flat_map(
                lambda download_filter: validate_max_requests(max_requests).map(
                    lambda count: build_download_envelope(count, download_filter, self._wire_format)
                )
            )
        )
        response = await envelope.flat_map_async(
            lambda body: self._post(body, DOWNLOAD_REVOCATION_REQUESTS_URL, transaction_id)
        )
        return response.flat_map(lambda reply: unwrap_download_response(reply.body))

    async def upload_revocation_results(
        self,
        transaction_id: str,
        results: Iterable[RevocationResult],
    ) -> Result[int]:
        """
        Send revocation results back to the service.

        Returns Result[int] with the number of results recorded.

        Failures:
          - INVALID_ARGUMENT: blank transaction_id, or missing/empty results
          - PROTOCOL_ERROR: response without "value", or a value other than "true"
          - any transport failure, unchanged
        """
        batch = validate_transaction_id(transaction_id).flat_map(
            lambda _: validate_results(results)
        )
        response = await batch.flat_map_async(
            lambda items: self._post(
                build_upload_envelope(items, self._wire_format),
                UPLOAD_REVOCATION_RESULTS_URL,
                transaction_id,
            )
        )
        return (
            response.flat_map(lambda reply: unwrap_upload_response(reply.body))
            .flat_map(lambda _: batch)
            .map(len)
        )

    async def _post(
        self,
        body: dict[str, Any],
        url_suffix: str,
        transaction_id: str,
    ) -> Result[TransportResponse]:
        """Single dispatch point: one fresh activity id, one transport call."""
        correlation = CorrelationContext(transaction_id=transaction_id)
        try:
            result = await self._transport.post(
                SERVICE_NAME,
                url_suffix,
                self._settings.service_version,
                body,
                correlation.activity_id,
            )
        except Exception as e:
            # a port that raises keeps its failure kind
            return ResultFailures.from_exception(f"{SERVICE_NAME}/{url_suffix} failed", e)
        return result.peek(lambda reply: self._trace_completed(correlation, reply))

    def _trace_completed(self, correlation: CorrelationContext, reply: TransportResponse) -> None:
        # diagnostics never fail the call
        try:
            self._log.info(
                "revocation.activity_completed",
                activity_id=str(correlation.activity_id),
                transaction_id=correlation.transaction_id,
            )
            self._log.info("revocation.result_returned", result=reply.body)
        except Exception:  # noqa: BLE001
            pass


def _default_transport(config_properties: Mapping[str, str]) -> ServiceTransport:
    return HttpServiceTransport.from_settings(TransportSettings.from_properties(config_properties))
