"""
Result railway: explicit, composable error handling for the extraction readers.

A Result[T] is either Success(value: T) or Failure(error: FailureDescription).
Readers return a Result instead of raising; failures short-circuit through
.flat_map() so each reader only spells out its success path.

    ┌──────────┐   flat_map    ┌──────────┐   flat_map    ┌───────────┐
    │ evaluate │──Success──────│  decode  │──Success──────│ correlate │──→ Result[T]
    └────┬─────┘               └────┬─────┘               └─────┬─────┘
         │ Failure                  │ Failure                   │ Failure
         └──────────────────────────┴───────────────────────────┴──→ Result[T]

The FailureDescription keeps the typed exception that caused it, so callers
can either inspect `.code` or re-raise with `.unwrap()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@unique
class ErrorCode(Enum):
    """Failure categories produced while extracting certificates."""

    IO_ERROR = "IO_ERROR"
    """A file could not be read (missing, permissions, ...)."""

    QUERY_EVALUATION_ERROR = "QUERY_EVALUATION_ERROR"
    """The external query evaluator failed or could not be started."""

    ENCODING_ERROR = "ENCODING_ERROR"
    """Inline certificate material is not valid base64."""

    MALFORMED_CERTIFICATE = "MALFORMED_CERTIFICATE"
    """A PEM block's DER payload is not a valid X.509 certificate."""

    CORRELATION_COUNT_MISMATCH = "CORRELATION_COUNT_MISMATCH"
    """Identity labels and certificates could not be paired one to one."""

    MISSING_FIELD = "MISSING_FIELD"
    """A secret lacks the certificate field."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A source was built without the parameters its format requires."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor: error code, message, optional exception, timestamp.

    >>> desc = FailureDescription(ErrorCode.MISSING_FIELD, 'secret "web" has no key "tls.crt"')
    >>> desc.code
    <ErrorCode.MISSING_FIELD: 'MISSING_FIELD'>
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class Result(Generic[T]):
    """
    Success(value) or Failure(FailureDescription).

        >>> Result.success(2).map(lambda x: x * 2).value()
        4
        >>> Result.failure(ErrorCode.IO_ERROR, "gone").map(lambda x: x * 2).is_failure()
        True
    """

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        return isinstance(self, Failure)

    def value(self) -> T:
        """Extract the success value. Raises ValueError on a Failure."""
        match self:
            case Success(v):
                return v
            case Failure(err):
                raise ValueError(f"Cannot get value from a Failure: {err.message}")
        raise TypeError("unreachable")  # pragma: no cover

    def error(self) -> FailureDescription:
        """Extract the failure description. Raises ValueError on a Success."""
        match self:
            case Failure(err):
                return err
            case Success(v):
                raise ValueError(f"Cannot get error from a Success: {v!r}")
        raise TypeError("unreachable")  # pragma: no cover

    def unwrap(self) -> T:
        """
        Extract the success value, re-raising the carried exception on failure.

        For callers that prefer exceptions over the railway.
        """
        match self:
            case Success(v):
                return v
            case Failure(err):
                if err.exception is not None:
                    raise err.exception
                raise RuntimeError(err.message)
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Transformations ────────────────────────

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """Transform the success value. Short-circuits on failure."""
        match self:
            case Success(v):
                return Success(mapper(v))
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """Chain a Result-returning function. Short-circuits on failure."""
        match self:
            case Success(v):
                return mapper(v)
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run a side effect (logging) on the success value."""
        match self:
            case Success(v):
                action(v)
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Run a side effect on the failure description."""
        match self:
            case Failure(err):
                action(err)
        return self

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: BaseException | None = None,
    ) -> Result[T]:
        return Failure(FailureDescription(code=code, message=message, exception=exception))

    @staticmethod
    def from_error(error: BaseException) -> Result[T]:
        """
        Build a Failure from an exception, taking the code from the exception.

        Extraction errors carry their own `code`; plain OSErrors map to IO_ERROR.
        """
        code = getattr(error, "code", None)
        if not isinstance(code, ErrorCode):
            code = ErrorCode.IO_ERROR if isinstance(error, OSError) else ErrorCode.UNKNOWN_ERROR
        return Result.failure(code, str(error), error)

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        catch: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    ) -> Result[T]:
        """
        Run a computation that may raise and capture the listed exceptions.

            return Result.from_computation(
                lambda: self._do_read(path),
                CertificateExtractionError,
            )

        Exceptions outside `catch` propagate unchanged.
        """
        try:
            return Result.success(computation())
        except catch as e:
            return Result.from_error(e)

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        return self.is_success()


@dataclass(frozen=True, slots=True, eq=False)
class Success(Result[T]):
    """The success track, wrapping a value of type T."""

    _value: T

    def __init__(self, value: T) -> None:
        if value is None:
            raise TypeError("Success value must not be None")
        object.__setattr__(self, "_value", value)

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Success):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Success", self._value))


# Enable structural pattern matching: case Success(value)
Success.__match_args__ = ("_value",)


@dataclass(frozen=True, slots=True, eq=False)
class Failure(Result[T]):
    """The failure track, wrapping a FailureDescription."""

    _error: FailureDescription

    def __init__(self, error: FailureDescription) -> None:
        if error is None:
            raise TypeError("Failure error must not be None")
        object.__setattr__(self, "_error", error)

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Failure):
            return (
                self._error.code == other._error.code
                and self._error.message == other._error.message
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Failure", self._error.code, self._error.message))


# Enable structural pattern matching: case Failure(error)
Failure.__match_args__ = ("_error",)
