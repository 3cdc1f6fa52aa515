"""
Unit tests for the wire protocol — envelope building and response unwrapping.

Test categories:
  - Download envelope: camelCase keys, explicit nulls, optional omission
  - Upload envelope: caller order, camelCase keys
  - unwrap_value: missing envelope / missing value → PROTOCOL_ERROR with raw response
  - Download decode: well-formed items, malformed items
  - Upload acknowledgement: "true" accepted, anything else rejected
"""

from __future__ import annotations

import json

import pytest
from railway import ErrorCode, ResultAssertions

from revocation_client.domain.models import DownloadFilter, RevocationResult
from revocation_client.protocol import (
    WireFormat,
    build_download_envelope,
    build_upload_envelope,
    decode_upload_acknowledgement,
    unwrap_download_response,
    unwrap_upload_response,
    unwrap_value,
)

# ─────────────────────── Envelopes ───────────────────────


class TestDownloadEnvelope:
    """
    GIVEN a page size and optional filters
    WHEN build_download_envelope is called
    THEN the body is {"downloadParameters": {...}} with camelCase keys.
    """

    def test_json_text_parses_back_to_camel_case_with_explicit_null(self) -> None:
        """
        GIVEN provider name "X", no issuer name, max 10
        WHEN the envelope is serialized to JSON text and parsed back
        THEN maxRequests=10, certificateProviderName="X", issuerName=null.
        """
        envelope = build_download_envelope(
            10, DownloadFilter(certificate_provider_name="X"), WireFormat()
        )
        parsed = json.loads(json.dumps(envelope))
        assert parsed == {
            "downloadParameters": {
                "maxRequests": 10,
                "certificateProviderName": "X",
                "issuerName": None,
            }
        }

    def test_both_filters_passed_through_verbatim(self) -> None:
        envelope = build_download_envelope(
            500,
            DownloadFilter(certificate_provider_name="Contoso CA", issuer_name="CN=Issuer, O=Contoso"),
            WireFormat(),
        )
        assert envelope["downloadParameters"]["certificateProviderName"] == "Contoso CA"
        assert envelope["downloadParameters"]["issuerName"] == "CN=Issuer, O=Contoso"

    def test_omit_null_fields_drops_unset_filters(self) -> None:
        """
        GIVEN WireFormat(omit_null_fields=True)
        WHEN no filters are set
        THEN only maxRequests is sent.
        """
        envelope = build_download_envelope(5, DownloadFilter(), WireFormat(omit_null_fields=True))
        assert envelope == {"downloadParameters": {"maxRequests": 5}}


class TestUploadEnvelope:
    def test_results_in_caller_order_with_camel_case_keys(
        self, sample_results: list[RevocationResult]
    ) -> None:
        envelope = build_upload_envelope(list(reversed(sample_results)), WireFormat())
        assert envelope == {
            "results": [
                {
                    "requestContext": "ctx-2",
                    "succeeded": False,
                    "errorCode": 1,
                    "errorMessage": "Certificate not found",
                },
                {
                    "requestContext": "ctx-1",
                    "succeeded": True,
                    "errorCode": 0,
                    "errorMessage": None,
                },
            ]
        }


# ─────────────────────── Unwrapping ───────────────────────


class TestUnwrapValue:
    """
    GIVEN a parsed response
    WHEN unwrap_value is called
    THEN a missing envelope or value is PROTOCOL_ERROR carrying the raw response.
    """

    @pytest.mark.parametrize(
        "response",
        [None, {}, {"values": []}, {"value": None}, [], "true"],
    )
    def test_missing_value_is_protocol_error(self, response: object) -> None:
        result = unwrap_value(response)
        ResultAssertions.assert_failure(result, ErrorCode.PROTOCOL_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "No 'value' property")
        ResultAssertions.assert_failure_detail(result, "raw_response", response)

    def test_raw_response_is_quoted_in_message(self) -> None:
        result = unwrap_value({"error": "boom"})
        ResultAssertions.assert_failure_message_contains(result, '{"error": "boom"}')

    def test_returns_value(self) -> None:
        assert ResultAssertions.assert_success(unwrap_value({"value": [1]})) == [1]


class TestDownloadResponse:
    def test_decodes_items_in_order(self) -> None:
        """
        GIVEN {"value": [...]} with three well-formed requests
        WHEN unwrapped
        THEN three RevocationRequests come back in service order.
        """
        response = {
            "value": [
                {"requestContext": f"ctx-{i}", "serialNumber": f"0{i}", "issuerName": "CN=CA"}
                for i in range(3)
            ]
        }
        requests = ResultAssertions.assert_success(
            unwrap_download_response(response)
        )
        assert [r.request_context for r in requests] == ["ctx-0", "ctx-1", "ctx-2"]
        assert requests[1].serial_number == "01"
        assert requests[1].issuer_name == "CN=CA"

    def test_accepts_pascal_case_keys(self) -> None:
        response = {"value": [{"RequestContext": "ctx", "SerialNumber": "ab", "CaConfiguration": "ca\\cfg"}]}
        (request,) = ResultAssertions.assert_success(
            unwrap_download_response(response)
        )
        assert request.request_context == "ctx"
        assert request.ca_configuration == "ca\\cfg"

    def test_keeps_unknown_attributes(self) -> None:
        response = {"value": [{"requestContext": "ctx", "serialNumber": "ab", "reason": "keyCompromise"}]}
        (request,) = ResultAssertions.assert_success(
            unwrap_download_response(response)
        )
        assert request.model_extra == {"reason": "keyCompromise"}

    def test_empty_list_is_success(self) -> None:
        assert ResultAssertions.assert_success(
            unwrap_download_response({"value": []})
        ) == []

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-list",
            {"requestContext": "ctx"},
            [{"serialNumber": "ab"}],
            [42],
        ],
    )
    def test_malformed_value_is_protocol_error(self, value: object) -> None:
        """
        GIVEN a value that is not a list of well-formed requests
        WHEN unwrapped
        THEN PROTOCOL_ERROR with the decode exception attached, never a raw exception.
        """
        response = {"value": value}
        result = unwrap_download_response(response)
        error = ResultAssertions.assert_failure(result, ErrorCode.PROTOCOL_ERROR)
        assert error.exception is not None
        ResultAssertions.assert_failure_detail(result, "raw_response", response)


class TestUploadAcknowledgement:
    @pytest.mark.parametrize("value", ["true", "True", " TRUE ", True])
    def test_true_is_success(self, value: object) -> None:
        assert ResultAssertions.assert_success(decode_upload_acknowledgement(value)) is True

    @pytest.mark.parametrize("value", ["false", False, "yes", 1, "", [True]])
    def test_anything_else_is_protocol_error(self, value: object) -> None:
        result = decode_upload_acknowledgement(value)
        ResultAssertions.assert_failure(result, ErrorCode.PROTOCOL_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "not successfully recorded")

    def test_response_false_carries_raw_response(self) -> None:
        response = {"value": "false"}
        result = unwrap_upload_response(response)
        ResultAssertions.assert_failure(result, ErrorCode.PROTOCOL_ERROR)
        ResultAssertions.assert_failure_detail(result, "raw_response", response)
        ResultAssertions.assert_failure_message_contains(result, '{"value": "false"}')
