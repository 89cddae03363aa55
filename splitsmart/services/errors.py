"""Error taxonomy and result wrapper for expense operations.

Rules raise SplitSmartError subclasses internally. Public entry points catch
them and hand back a Result so callers (form layers) can show one message and
let the user retry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure reasons surfaced to callers."""

    # Amount shape
    INVALID_AMOUNT = "InvalidAmount"
    AMOUNT_TOO_LARGE = "AmountTooLarge"
    TOO_MANY_DECIMALS = "TooManyDecimals"
    UNSUPPORTED_CURRENCY = "UnsupportedCurrency"

    # Split resolution
    NO_PARTICIPANTS = "NoParticipants"
    NO_PARTS_ASSIGNED = "NoPartsAssigned"
    INVALID_PARTS = "InvalidParts"
    SPLIT_SUM_MISMATCH = "SplitSumMismatch"

    # Submission shape
    INVALID_DESCRIPTION = "InvalidDescription"
    INVALID_DATE = "InvalidDate"
    TOO_MANY_TAGS = "TooManyTags"
    TAG_TOO_LONG = "TagTooLong"
    MISSING_GROUP = "MissingGroup"

    # Groups
    INVALID_GROUP_NAME = "InvalidGroupName"
    NOT_ENOUGH_MEMBERS = "NotEnoughMembers"

    # User profiles
    INVALID_USER_NAME = "InvalidUserName"
    INVALID_EMAIL = "InvalidEmail"

    # Workflow
    NOT_A_MEMBER = "NotAMember"
    EXCHANGE_RATE_UNAVAILABLE = "ExchangeRateUnavailable"
    NOT_FOUND = "NotFound"


class SplitSmartError(Exception):
    """Base error carrying a failure kind and a user-facing message."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(kind={self.kind.value}, message={self.message!r})>"


class CurrencyError(SplitSmartError):
    """Amount or currency rule violated."""

    pass


class SplitError(SplitSmartError):
    """Split directive cannot be turned into shares."""

    pass


class ValidationError(SplitSmartError):
    """Submission shape rule violated."""

    pass


class WorkflowError(SplitSmartError):
    """Expense workflow could not complete (membership, rates, missing records)."""

    pass


class RecordNotFoundError(LookupError):
    """Storage backend has no record with the requested id."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} not found: {record_id}")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a validation or computation step.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is None on
    success.
    """

    value: Optional[T] = None
    error: Optional[SplitSmartError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SplitSmartError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Failure kind, or None on success."""
        return self.error.kind if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value


__all__ = [
    "ErrorKind",
    "SplitSmartError",
    "CurrencyError",
    "SplitError",
    "ValidationError",
    "WorkflowError",
    "RecordNotFoundError",
    "Result",
]
