"""
Failure description — structured error information for the failure track.

An ErrorCode names the KIND of failure so callers can branch on it without
parsing messages. The FailureDescription carries the code, a human-readable
message, the exception that caused it (if any) and free-form details such as
the raw payload that could not be understood.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, Optional


@unique
class ErrorCode(Enum):
    """
    Error taxonomy for the failure track.

    Caller errors are detected locally, before any network interaction:
    INVALID_ARGUMENT, OUT_OF_RANGE.

    Remote errors originate after a request was sent:
    PROTOCOL_ERROR (the service answered, but not in the agreed shape) and the
    transport kinds AUTHENTICATION_ERROR, SERVICE_DISCOVERY_ERROR,
    EXTERNAL_SERVICE_ERROR, TIMEOUT_ERROR.
    """

    # --- Caller errors ---
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    """Missing, blank or structurally empty parameter."""

    OUT_OF_RANGE = "OUT_OF_RANGE"
    """Numeric parameter outside the service-imposed bound."""

    # --- Contract errors ---
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    """Response envelope missing, malformed or carrying an unexpected value."""

    # --- Transport errors ---
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    """Token could not be acquired, or the service rejected it."""

    SERVICE_DISCOVERY_ERROR = "SERVICE_DISCOVERY_ERROR"
    """The endpoint for a logical service name could not be resolved."""

    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """Network failure or non-success HTTP status from the remote service."""

    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    """The remote call exceeded its time limit."""

    # --- Local environment ---
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Missing or invalid settings."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unexpected/unclassified failures."""

    @property
    def is_caller_error(self) -> bool:
        """True for failures detected before anything was sent."""
        return self in (ErrorCode.INVALID_ARGUMENT, ErrorCode.OUT_OF_RANGE)


def _freeze(details: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(details or {}))


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor.

    >>> desc = FailureDescription(ErrorCode.INVALID_ARGUMENT, "transaction_id is required")
    >>> desc.code
    <ErrorCode.INVALID_ARGUMENT: 'INVALID_ARGUMENT'>
    >>> desc.details
    mappingproxy({})
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    details: Mapping[str, Any] = field(default_factory=dict, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", _freeze(self.details))

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> FailureDescription:
        return FailureDescription(
            code=code,
            message=message,
            exception=exception,
            details=_freeze(details),
        )

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if there is one."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
