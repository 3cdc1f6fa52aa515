"""
pytest helpers for Result values.

Each helper unwraps the track it expects and fails with a readable message
naming the other track's content otherwise:

    requests = ResultAssertions.assert_success(result)
    error = ResultAssertions.assert_failure(result, ErrorCode.OUT_OF_RANGE)
    ResultAssertions.assert_failure_message_contains(result, "between 1 and 500")
    ResultAssertions.assert_failure_detail(result, "raw_response", payload)
"""

from __future__ import annotations

from typing import Any, TypeVar

from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

T = TypeVar("T")


def _suffix(note: str) -> str:
    return f" ({note})" if note else ""


class ResultAssertions:
    """Namespace of assertion helpers; all methods are static."""

    @staticmethod
    def assert_success(result: Result[T], message: str = "") -> T:
        """Return the success value, or fail showing the FailureDescription."""
        match result:
            case Success(value):
                return value
            case Failure(error):
                raise AssertionError(
                    f"Expected Success but got Failure({error}){_suffix(message)}"
                )
        raise TypeError(f"Not a Result: {result!r}")

    @staticmethod
    def assert_failure(
        result: Result[T],
        expected_code: ErrorCode | None = None,
        message: str = "",
    ) -> FailureDescription:
        """Return the FailureDescription, checking its code when one is given."""
        match result:
            case Success(value):
                raise AssertionError(
                    f"Expected Failure but got Success({value!r}){_suffix(message)}"
                )
            case Failure(error):
                if expected_code is not None and error.code is not expected_code:
                    raise AssertionError(
                        f"Expected error code {expected_code.value} but got {error}"
                        f"{_suffix(message)}"
                    )
                return error
        raise TypeError(f"Not a Result: {result!r}")

    @staticmethod
    def assert_failure_message_contains(result: Result[T], substring: str) -> None:
        error = ResultAssertions.assert_failure(result)
        if substring.lower() not in error.message.lower():
            raise AssertionError(f"Expected failure message to contain {substring!r}: {error}")

    @staticmethod
    def assert_failure_detail(result: Result[T], key: str, expected: Any) -> None:
        """Check one entry of FailureDescription.details."""
        details = ResultAssertions.assert_failure(result).details
        if key not in details:
            raise AssertionError(
                f"Expected failure detail {key!r}; present: {sorted(details)}"
            )
        if details[key] != expected:
            raise AssertionError(
                f"Expected failure detail {key!r} == {expected!r} but got {details[key]!r}"
            )
