"""
Result monad for Railway-Oriented Programming.

A Result[T] is one of two tracks:

  Success(value)   carries a non-None T
  Failure(error)   carries a FailureDescription

Stages return Result instead of raising; .flat_map() chains them and a
failure at any stage short-circuits the rest:

    validate ──Success──▶ build ──Success──▶ dispatch ──Success──▶ unwrap ──▶ Result[T]
       │ Failure            │ Failure           │ Failure             │ Failure
       └────────────────────┴───────────────────┴─────────────────────┴──────▶ Result[T]

Each track implements the combinators itself: Success applies the
function, Failure returns itself untouched. Async stages (network calls)
join the railway through .flat_map_async().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, NoReturn, Optional, TypeVar

from railway.failure import ErrorCode, FailureDescription

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Result(ABC, Generic[T]):
    """
    Either a Success carrying a value or a Failure carrying a FailureDescription.

        >>> Result.success(21).map(lambda x: x * 2).value()
        42
        >>> Result.failure(ErrorCode.OUT_OF_RANGE, "too big").map(lambda x: x * 2).is_failure()
        True
    """

    __slots__ = ()

    @abstractmethod
    def is_success(self) -> bool: ...

    def is_failure(self) -> bool:
        return not self.is_success()

    @abstractmethod
    def value(self) -> T:
        """The success value. Raises ValueError on a Failure."""

    @abstractmethod
    def error(self) -> FailureDescription:
        """The failure description. Raises ValueError on a Success."""

    @abstractmethod
    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """Transform the success value."""

    @abstractmethod
    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """
        Chain a Result-returning function.

            validate_transaction_id(tid).flat_map(lambda _: validate_max_requests(n))
        """

    @abstractmethod
    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run a side effect on the success value; the Result is returned as is."""

    @abstractmethod
    async def flat_map_async(self, mapper: Callable[[T], Awaitable[Result[U]]]) -> Result[U]:
        """
        Chain an async Result-returning function.

        An Exception escaping the mapper becomes EXTERNAL_SERVICE_ERROR.
        Cancellation (a BaseException) is not intercepted.
        """

    # ──────────────────────── Factories ────────────────────────

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
        **details: Any,
    ) -> Result[T]:
        """
        Create a failed Result; keyword arguments become FailureDescription.details.

            Result.failure(ErrorCode.PROTOCOL_ERROR, "No 'value' property", raw_response=payload)
        """
        return Failure(FailureDescription.create(code, message, exception, details))

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Run a computation that may raise; an Exception becomes a Failure.

            Result.from_computation(lambda: RevocationClient(props), ErrorCode.CONFIGURATION_ERROR, "...")
        """
        try:
            value = computation()
        except Exception as e:
            return Result.failure(error_code, f"{error_message}: {e}", e)
        return Success(value)

    @staticmethod
    def combine(
        first: Result[T],
        second: Result[U],
        combiner: Callable[[T, U], R],
    ) -> Result[R]:
        """Both must succeed; otherwise the first Failure is returned."""
        return first.flat_map(lambda a: second.map(lambda b: combiner(a, b)))


@dataclass(frozen=True, slots=True, eq=False)
class Success(Result[T]):
    """The success track."""

    _value: T

    def __post_init__(self) -> None:
        if self._value is None:
            raise TypeError("Success value must not be None")

    def is_success(self) -> bool:
        return True

    def value(self) -> T:
        return self._value

    def error(self) -> NoReturn:
        raise ValueError(f"Cannot get error from a Success: {self._value!r}")

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Success(mapper(self._value))

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return mapper(self._value)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        action(self._value)
        return self

    async def flat_map_async(self, mapper: Callable[[T], Awaitable[Result[U]]]) -> Result[U]:
        try:
            return await mapper(self._value)
        except Exception as e:
            return Result.failure(
                ErrorCode.EXTERNAL_SERVICE_ERROR, f"Async operation failed: {e}", e
            )

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return isinstance(other, Success) and self._value == other._value

    def __hash__(self) -> int:
        return hash((Success, self._value))


@dataclass(frozen=True, slots=True, eq=False)
class Failure(Result[T]):
    """The failure track; every combinator returns the Failure unchanged."""

    _error: FailureDescription

    def __post_init__(self) -> None:
        if self._error is None:
            raise TypeError("Failure error must not be None")

    def is_success(self) -> bool:
        return False

    def value(self) -> NoReturn:
        raise ValueError(f"Cannot get value from a Failure: {self._error.message}")

    def error(self) -> FailureDescription:
        return self._error

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Failure(self._error)

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return Failure(self._error)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        return self

    async def flat_map_async(self, mapper: Callable[[T], Awaitable[Result[U]]]) -> Result[U]:
        return Failure(self._error)

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (
            isinstance(other, Failure)
            and self._error.code is other._error.code
            and self._error.message == other._error.message
        )

    def __hash__(self) -> int:
        return hash((Failure, self._error.code, self._error.message))
