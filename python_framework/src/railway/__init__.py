"""
Railway-Oriented Programming (ROP) framework.

Explicit, composable error handling — stages return Result instead of raising.

    from railway import Result, ErrorCode

    def validate_page_size(size: int) -> Result[int]:
        if not 1 <= size <= 500:
            return Result.failure(ErrorCode.OUT_OF_RANGE, "size must be between 1 and 500")
        return Result.success(size)

    result = Result.success(10).flat_map(validate_page_size).map(lambda n: {"maxRequests": n})
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.result_failures import ResultFailures
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultFailures",
    "ResultAssertions",
]

__version__ = "1.1.0"
