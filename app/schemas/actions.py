"""Action intents, request bodies and the caller identity."""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.document import Allocation, EntityId, Installment, SnapshotModel


class CurrentUser(SnapshotModel):
    """Identity supplied by the session collaborator."""

    user_id: EntityId
    claims: Dict[str, Any] = Field(default_factory=dict)


class SigningAction(str, Enum):
    SIGN = "SIGN"
    REJECT = "REJECT"


class SigningIntent(SnapshotModel):
    """Sign or reject request emitted to the document store."""

    document_id: EntityId
    action: SigningAction
    signatory_id: EntityId
    user_id: EntityId
    reason: Optional[str] = None


class InstallmentPaymentIntent(SnapshotModel):
    """Installment payment emitted to the document store."""

    document_id: EntityId
    installment_id: EntityId
    payment_date: date
    proof_file_id: EntityId


class CadenceUnit(str, Enum):
    DAYS = "days"
    MONTHS = "months"


class Cadence(SnapshotModel):
    """Spacing between installment due dates."""

    interval: int = Field(30, ge=1)
    unit: CadenceUnit = CadenceUnit.DAYS


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class RejectRequest(SnapshotModel):
    reason: Optional[str] = Field(None, max_length=2000)


class PayInstallmentRequest(SnapshotModel):
    payment_date: date
    proof_file_id: Optional[EntityId] = None


class SplitRequest(SnapshotModel):
    total: int
    count: int
    cadence: Optional[Cadence] = None
    start_date: Optional[date] = None


class RecalculateRequest(SnapshotModel):
    total: int
    installments: List[Installment]
    count: Optional[int] = None
    cadence: Optional[Cadence] = None
    start_date: Optional[date] = None


class AllocationDraft(SnapshotModel):
    """Allocation entry as typed by the user, before its percentage is known."""

    id: Optional[EntityId] = None
    filial: str = ""
    centro_custo: str = ""
    valor: int = 0


class AllocationAddRequest(SnapshotModel):
    total: Optional[int] = None
    allocations: List[Allocation] = Field(default_factory=list)
    entry: AllocationDraft


class AllocationEditRequest(SnapshotModel):
    total: Optional[int] = None
    allocations: List[Allocation] = Field(default_factory=list)
    allocation_id: EntityId
    valor: int


class AllocationRemoveRequest(SnapshotModel):
    total: Optional[int] = None
    allocations: List[Allocation] = Field(default_factory=list)
    allocation_id: EntityId


class AllocationSummaryRequest(SnapshotModel):
    total: Optional[int] = None
    allocations: List[Allocation] = Field(default_factory=list)


class SignatoryDraft(SnapshotModel):
    user_id: EntityId
    order: int


class DocumentSubmission(SnapshotModel):
    """Everything the upload flow collects before a document is created."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    document_type: Optional[str] = None
    nature: Optional[str] = None
    supplier_id: Optional[EntityId] = None
    file_id: Optional[EntityId] = None
    total: int
    # None means one installment when generated, the schedule length otherwise
    installment_count: Optional[int] = None
    cadence: Optional[Cadence] = None
    start_date: Optional[date] = None
    signatories: List[SignatoryDraft] = Field(default_factory=list)
    # None means "generate from total / installment_count"
    installments: Optional[List[Installment]] = None
    allocations: List[Allocation] = Field(default_factory=list)
