"""Read-only projections computed from a document snapshot."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.schemas.document import Document, DocumentStatus, EntityId, Signatory, SnapshotModel


class SignatoryRelation(str, Enum):
    """How a given user relates to a document's signing workflow."""
    NOT_SIGNATORY = "NOT_SIGNATORY"
    ALREADY_SIGNED = "ALREADY_SIGNED"
    REJECTED = "REJECTED"
    CAN_SIGN = "CAN_SIGN"
    WAITING_TURN = "WAITING_TURN"


class SigningProgress(SnapshotModel):
    total: int = Field(0, description="Number of signatories")
    signed: int = Field(0)
    pending: int = Field(0)
    rejected: int = Field(0)
    percentage: Decimal = Field(Decimal("0.00"), description="signed / total x 100, 2 decimals")


class InstallmentTotals(SnapshotModel):
    count: int = Field(0)
    total: int = Field(0, description="Sum of all installment amounts")
    paid: int = Field(0)
    unpaid: int = Field(0)
    overdue: int = Field(0, description="Unpaid with due date before today")
    overdue_count: int = Field(0)
    upcoming: int = Field(0, description="Unpaid and not overdue")
    due_soon: int = Field(0, description="Unpaid and due within the configured window")
    due_soon_count: int = Field(0)
    next_due_date: Optional[date] = Field(None)


class AllocationSummary(SnapshotModel):
    document_total: Optional[int] = Field(None)
    entries: int = Field(0)
    distributed: int = Field(0)
    remaining: int = Field(0, description="document total - distributed")
    distributed_percentage: Decimal = Field(Decimal("0.00"))


class DocumentSummary(SnapshotModel):
    document_id: EntityId
    status: DocumentStatus = Field(..., description="Effective document status")
    active_signatory: Optional[Signatory] = None
    signing: SigningProgress
    installments: InstallmentTotals
    allocations: AllocationSummary


class DocumentView(SnapshotModel):
    """Snapshot plus its projections, as seen by one user."""

    document: Document
    summary: DocumentSummary
    relation: SignatoryRelation
    relation_message: str
    can_act: bool


class InstallmentAlert(SnapshotModel):
    """A document with unpaid installments that are overdue or due soon."""

    document_id: EntityId
    title: Optional[str] = None
    installment_count: int
    installment_total: int
    overdue: int
    overdue_count: int
    due_soon: int
    due_soon_count: int


class DashboardStats(SnapshotModel):
    total_documents: int = 0
    pending_documents: int = 0
    completed_documents: int = 0
    rejected_documents: int = 0


class InstallmentDashboard(SnapshotModel):
    as_of: date
    documents: List[InstallmentAlert] = Field(default_factory=list)
    overdue_total: int = 0
    due_soon_total: int = 0
