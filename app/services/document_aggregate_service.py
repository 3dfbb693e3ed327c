"""Derived summaries of a document snapshot.

Signing progress, installment totals and the allocation summary are
recomputed from the snapshot every time they are asked for. They are never
stored, so they cannot drift from the collections they describe.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from app.core.config import settings
from app.core.exceptions import DocumentNotFoundError
from app.repositories.document_store import DocumentStore
from app.schemas.document import Document, EntityId, Installment, Signatory, SignatoryStatus
from app.schemas.results import ErrorCode, Result, not_found_error
from app.schemas.summaries import (
    DocumentSummary,
    DocumentView,
    InstallmentTotals,
    SignatoryRelation,
    SigningProgress,
)
from app.services.base_service import BaseService
from app.services.finance import allocation_reconciler
from app.services.finance.installment_payments import is_overdue
from app.services.signing.signatory_order import active_signatory, relation_of, relation_message
from app.services.signing.signing_state_machine import CLOSED_STATUSES, effective_status
from app.utils.clock import Clock, local_today, utc_now

def signing_progress(signatories: Sequence[Signatory]) -> SigningProgress:
    total = len(signatories)
    signed = sum(1 for s in signatories if s.status == SignatoryStatus.SIGNED)
    rejected = sum(1 for s in signatories if s.status == SignatoryStatus.REJECTED)
    percentage = Decimal("0.00")
    if total:
        percentage = (Decimal(signed) * 100 / Decimal(total)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return SigningProgress(
        total=total,
        signed=signed,
        pending=total - signed - rejected,
        rejected=rejected,
        percentage=percentage,
    )

def installment_totals(
    installments: Sequence[Installment],
    today: date,
    due_soon_days: int = 5,
) -> InstallmentTotals:
    """Paid / overdue / upcoming sums as of ``today``.

    Overdue means unpaid with a due date strictly before today. Every other
    unpaid installment is upcoming; the upcoming ones due within
    ``due_soon_days`` are also counted as due soon.
    """
    horizon = today + timedelta(days=due_soon_days)
    paid = overdue = upcoming = due_soon = overdue_count = due_soon_count = 0
    next_due: Optional[date] = None

    for installment in installments:
        if installment.is_paid:
            paid += installment.amount
            continue
        if is_overdue(installment, today):
            overdue += installment.amount
            overdue_count += 1
            continue
        upcoming += installment.amount
        if installment.due_date is not None:
            if installment.due_date <= horizon:
                due_soon += installment.amount
                due_soon_count += 1
            if next_due is None or installment.due_date < next_due:
                next_due = installment.due_date

    total = sum(i.amount for i in installments)
    return InstallmentTotals(
        count=len(installments),
        total=total,
        paid=paid,
        unpaid=total - paid,
        overdue=overdue,
        overdue_count=overdue_count,
        upcoming=upcoming,
        due_soon=due_soon,
        due_soon_count=due_soon_count,
        next_due_date=next_due,
    )

def summarize(document: Document, today: date, due_soon_days: int = 5) -> DocumentSummary:
    return DocumentSummary(
        document_id=document.id,
        status=effective_status(document),
        active_signatory=active_signatory(document.signatories),
        signing=signing_progress(document.signatories),
        installments=installment_totals(document.installments, today, due_soon_days),
        allocations=allocation_reconciler.summarize(document.allocations, document.total),
    )

def view_for(document: Document, user_id: EntityId, today: date, due_soon_days: int = 5) -> DocumentView:
    """Snapshot, projections and the user's place in the signing order."""
    summary = summarize(document, today, due_soon_days)
    relation = relation_of(document.signatories, user_id)
    return DocumentView(
        document=document.model_copy(update={"status": summary.status}),
        summary=summary,
        relation=relation,
        relation_message=relation_message(relation),
        can_act=relation == SignatoryRelation.CAN_SIGN and summary.status not in CLOSED_STATUSES,
    )

class DocumentAggregateService(BaseService):
    """Loads snapshots from the store and projects them for a user."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store)
        self.clock = clock

    @property
    def today(self) -> date:
        return local_today(self.clock(), settings.engine.timezone)

    async def run(self, document_id: EntityId, user_id: Optional[EntityId] = None) -> Result:
        try:
            document = await self.store.get(document_id)
        except DocumentNotFoundError:
            self.logger.warning(f"Document {document_id} not found")
            return Result.failure(not_found_error(
                ErrorCode.DOCUMENT_NOT_FOUND,
                f"Document {document_id} not found.",
                document_id=document_id,
            ))
        if user_id is None:
            return Result.success(summarize(document, self.today, settings.engine.due_soon_days))
        return Result.success(self.project(document, user_id))

    async def get_view(self, document_id: EntityId, user_id: EntityId) -> Result[DocumentView]:
        """Current snapshot of ``document_id`` as seen by ``user_id``."""
        return await self.execute(document_id, user_id)

    async def get_summary(self, document_id: EntityId) -> Result[DocumentSummary]:
        return await self.execute(document_id)

    def project(self, document: Document, user_id: EntityId) -> DocumentView:
        """Project a snapshot already in hand, e.g. the store's reply to an action."""
        return view_for(document, user_id, self.today, settings.engine.due_soon_days)
