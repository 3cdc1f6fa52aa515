"""
Convenience factories for the failures this framework's users raise most.

    from railway import ResultFailures

    ResultFailures.invalid_argument("transaction_id is required")
    ResultFailures.protocol_error("No 'value' property is present", raw_response=payload)
"""

from __future__ import annotations

from typing import Any

import httpx

from railway.failure import ErrorCode
from railway.result import Result


class ResultFailures:
    """Factory methods for common failure types."""

    @staticmethod
    def invalid_argument(message: str) -> Result:
        """Parameter missing, blank or structurally empty."""
        return Result.failure(ErrorCode.INVALID_ARGUMENT, message)

    @staticmethod
    def out_of_range(name: str, low: int, high: int, actual: Any) -> Result:
        """Numeric parameter outside [low, high]; the message names both."""
        return Result.failure(
            ErrorCode.OUT_OF_RANGE,
            f"{name} should be between {low} and {high}. {name} value requested: {actual}.",
            name=name,
            actual=actual,
        )

    @staticmethod
    def protocol_error(
        message: str,
        exception: BaseException | None = None,
        raw_response: Any = None,
    ) -> Result:
        """The service answered, but not in the agreed envelope shape."""
        return Result.failure(
            ErrorCode.PROTOCOL_ERROR, message, exception, raw_response=raw_response
        )

    @staticmethod
    def authentication_error(message: str, exception: BaseException | None = None) -> Result:
        return Result.failure(ErrorCode.AUTHENTICATION_ERROR, message, exception)

    @staticmethod
    def service_discovery_error(service_name: str, message: str = "") -> Result:
        suffix = f" {message}" if message else ""
        return Result.failure(
            ErrorCode.SERVICE_DISCOVERY_ERROR,
            f"Unable to resolve an endpoint for service {service_name!r}.{suffix}",
            service_name=service_name,
        )

    @staticmethod
    def configuration_error(message: str, exception: BaseException | None = None) -> Result:
        return Result.failure(ErrorCode.CONFIGURATION_ERROR, message, exception)

    @staticmethod
    def from_exception(message: str, exception: BaseException) -> Result:
        """
        Map a transport-level exception to the appropriate ErrorCode.

        Mapping:
          - httpx.TimeoutException, TimeoutError → TIMEOUT_ERROR
          - httpx.HTTPStatusError 401/403 → AUTHENTICATION_ERROR
          - httpx.HTTPError, ConnectionError, OSError, ValueError (undecodable body)
            → EXTERNAL_SERVICE_ERROR
          - Everything else → UNKNOWN_ERROR
        """
        code = _map_exception_to_code(exception)
        return Result.failure(code, f"{message}: {exception}", exception)


def _map_exception_to_code(exception: BaseException) -> ErrorCode:
    match exception:
        case httpx.TimeoutException() | TimeoutError():
            return ErrorCode.TIMEOUT_ERROR
        case httpx.HTTPStatusError(response=response) if response.status_code in (401, 403):
            return ErrorCode.AUTHENTICATION_ERROR
        case httpx.HTTPError() | ConnectionError() | OSError() | ValueError():
            return ErrorCode.EXTERNAL_SERVICE_ERROR
        case _:
            return ErrorCode.UNKNOWN_ERROR
