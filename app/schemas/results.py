"""Value-returned outcomes of engine operations.

Expected business rejections are returned, not raised. Every failure names
the invariant it protects and carries the numbers needed to render an
actionable message (which entry, by how much).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Error taxonomy."""
    VALIDATION = "validation"  # local, synchronous input check
    CONSISTENCY = "consistency"  # pre-submission gate
    CONFLICT = "conflict"  # snapshot changed during the round-trip
    NOT_FOUND = "not_found"


class ErrorCode(str, Enum):
    INVALID_SPLIT_COUNT = "INVALID_SPLIT_COUNT"
    NEGATIVE_AMOUNT = "NEGATIVE_AMOUNT"
    MISSING_TOTAL = "MISSING_TOTAL"
    INVALID_ALLOCATION = "INVALID_ALLOCATION"
    INSUFFICIENT_REMAINDER = "INSUFFICIENT_REMAINDER"
    ALLOCATION_NOT_FOUND = "ALLOCATION_NOT_FOUND"
    NOT_A_SIGNATORY = "NOT_A_SIGNATORY"
    ALREADY_SIGNED = "ALREADY_SIGNED"
    ALREADY_REJECTED = "ALREADY_REJECTED"
    OUT_OF_TURN = "OUT_OF_TURN"
    DOCUMENT_CLOSED = "DOCUMENT_CLOSED"
    INVALID_SIGNATORIES = "INVALID_SIGNATORIES"
    INSTALLMENT_MISMATCH = "INSTALLMENT_MISMATCH"
    INSTALLMENT_SEQUENCE_GAP = "INSTALLMENT_SEQUENCE_GAP"
    INSTALLMENT_COUNT_MISMATCH = "INSTALLMENT_COUNT_MISMATCH"
    MISSING_DUE_DATE = "MISSING_DUE_DATE"
    ALLOCATION_MISMATCH = "ALLOCATION_MISMATCH"
    INSTALLMENT_NOT_FOUND = "INSTALLMENT_NOT_FOUND"
    INSTALLMENT_ALREADY_PAID = "INSTALLMENT_ALREADY_PAID"
    MISSING_PAYMENT_PROOF = "MISSING_PAYMENT_PROOF"
    STALE_SNAPSHOT = "STALE_SNAPSHOT"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"


@dataclass(frozen=True)
class EngineError:
    code: ErrorCode
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or one or more errors, never both."""

    value: Optional[T] = None
    errors: Tuple[EngineError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> Optional[EngineError]:
        return self.errors[0] if self.errors else None

    @property
    def codes(self) -> List[ErrorCode]:
        return [e.code for e in self.errors]

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, *errors: EngineError) -> "Result[T]":
        if not errors:
            raise ValueError("Result.failure requires at least one error")
        return cls(errors=tuple(errors))


def validation_error(code: ErrorCode, message: str, **details: Any) -> EngineError:
    return EngineError(code=code, kind=ErrorKind.VALIDATION, message=message, details=details)


def consistency_error(code: ErrorCode, message: str, **details: Any) -> EngineError:
    return EngineError(code=code, kind=ErrorKind.CONSISTENCY, message=message, details=details)


def conflict_error(code: ErrorCode, message: str, **details: Any) -> EngineError:
    return EngineError(code=code, kind=ErrorKind.CONFLICT, message=message, details=details)


def not_found_error(code: ErrorCode, message: str, **details: Any) -> EngineError:
    return EngineError(code=code, kind=ErrorKind.NOT_FOUND, message=message, details=details)
