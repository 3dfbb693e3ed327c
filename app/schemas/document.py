"""Pydantic schemas for the document snapshot.

A snapshot is what the document store hands us: the document with its
signatories, installments and allocations nested inside. Amounts are
integers in minor currency units (cents). Field names travel as camelCase
on the wire and snake_case in Python.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.core.exceptions import MalformedSnapshotError

EntityId = Union[int, str]


def same_id(left: Optional[EntityId], right: Optional[EntityId]) -> bool:
    """Compare identifiers that may arrive as ``42`` from JSON or ``"42"`` from a path or token."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class SignatoryStatus(str, Enum):
    """Per-signatory status. SIGNED and REJECTED are terminal."""
    PENDING = "PENDING"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"


class DocumentStatus(str, Enum):
    """Document-level status."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


# Statuses set by the document lifecycle itself rather than derived from signatories
LIFECYCLE_STATUSES = frozenset({DocumentStatus.DRAFT, DocumentStatus.CANCELLED, DocumentStatus.EXPIRED})


class DocumentType(str, Enum):
    """Known financial document types."""
    ADVANCE_PAYMENT = "ADVANCE_PAYMENT"
    BANK_SLIP = "BANK_SLIP"
    CHECK = "CHECK"
    CREDIT_CARD = "CREDIT_CARD"
    POST_DATED_CHECK = "POST_DATED_CHECK"
    TRADE_BILL = "TRADE_BILL"
    LOAN = "LOAN"
    PETTY_CASH = "PETTY_CASH"
    VACATION_PAY = "VACATION_PAY"
    SEVERANCE_FUND = "SEVERANCE_FUND"
    PAYROLL = "PAYROLL"
    SOCIAL_SECURITY = "SOCIAL_SECURITY"
    TAXES = "TAXES"
    CREDIT_NOTE = "CREDIT_NOTE"
    SUPPLIER_RETURN_NOTE = "SUPPLIER_RETURN_NOTE"
    ADVANCE_PAYMENT_TO_SUPPLIER = "ADVANCE_PAYMENT_TO_SUPPLIER"
    HEALTH_PLAN = "HEALTH_PLAN"
    FORECAST = "FORECAST"
    ADVANCE_RECEIPT = "ADVANCE_RECEIPT"
    RECEIPT = "RECEIPT"
    TERMINATION = "TERMINATION"
    TRIBUTES = "TRIBUTES"
    FEES = "FEES"
    INVOICE = "INVOICE"
    CONTRACT = "CONTRACT"
    GENERAL = "GENERAL"


class SnapshotModel(BaseModel):
    """Base for immutable snapshot models with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Signatory(SnapshotModel):
    """A party required to approve the document at a fixed position in the order."""

    id: EntityId = Field(..., description="Signatory record identifier")
    user_id: EntityId = Field(..., description="Referenced user (weak reference)")
    order: int = Field(..., gt=0, description="Signing position, unique within the document")
    status: SignatoryStatus = Field(default=SignatoryStatus.PENDING)
    signed_at: Optional[datetime] = Field(None, description="When the signatory acted")
    rejection_reason: Optional[str] = Field(None)

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Any:
        # Older store records carry lower-case statuses
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def is_pending(self) -> bool:
        return self.status == SignatoryStatus.PENDING


class Installment(SnapshotModel):
    """One scheduled partial payment of the document total."""

    id: Optional[EntityId] = Field(None, description="Installment identifier, None before persistence")
    installment_number: int = Field(..., ge=1, description="1-based position in the schedule")
    amount: int = Field(..., ge=0, description="Amount in minor currency units")
    due_date: Optional[date] = Field(None)
    is_paid: bool = Field(default=False)
    paid_date: Optional[date] = Field(None)
    proof_file_id: Optional[EntityId] = Field(None, description="Opaque payment proof reference")
    description: Optional[str] = Field(None)


class Allocation(SnapshotModel):
    """A share of the document value attributed to a branch / cost-center pair."""

    id: Optional[EntityId] = Field(None)
    filial: str = Field(..., min_length=1, description="Branch")
    centro_custo: str = Field(..., min_length=1, description="Cost center")
    valor: int = Field(..., ge=0, description="Amount in minor currency units")
    percentual: Decimal = Field(default=Decimal("0.00"), description="valor / document total x 100")


class Document(SnapshotModel):
    """Document snapshot with its owned sub-collections."""

    id: EntityId
    title: Optional[str] = None
    description: Optional[str] = None
    total: Optional[int] = Field(None, ge=0, description="Total in minor units, None until classified")
    status: DocumentStatus = Field(default=DocumentStatus.PENDING)
    document_type: Optional[str] = None
    nature: Optional[str] = None
    installments: List[Installment] = Field(default_factory=list)
    signatories: List[Signatory] = Field(default_factory=list)
    allocations: List[Allocation] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            # Legacy alias used by the first version of the store
            if value == "SIGNING":
                return DocumentStatus.IN_PROGRESS.value
        return value

    @field_validator("signatories")
    @classmethod
    def _unique_orders(cls, value: List[Signatory]) -> List[Signatory]:
        orders = [s.order for s in value]
        if len(orders) != len(set(orders)):
            raise ValueError(f"signatory orders must be unique, got {sorted(orders)}")
        return sorted(value, key=lambda s: s.order)

    @field_validator("installments")
    @classmethod
    def _ordered_installments(cls, value: List[Installment]) -> List[Installment]:
        return sorted(value, key=lambda i: i.installment_number)


def parse_snapshot(payload: Dict[str, Any]) -> Document:
    """Validate a raw store payload into a ``Document``.

    Raises:
        MalformedSnapshotError: If required fields are missing or the
            structural invariants (unique signatory order, non-negative
            amounts) do not hold.
    """
    try:
        return Document.model_validate(payload)
    except ValidationError as e:
        raise MalformedSnapshotError(
            f"Malformed document snapshot: {e.error_count()} error(s)",
            original_error=e,
        ) from e
