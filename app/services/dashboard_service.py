"""Cross-document statistics: status counts and the installments dashboard."""

from datetime import date
from typing import List, Sequence

from app.core.config import settings
from app.repositories.document_store import DocumentStore
from app.schemas.document import Document, DocumentStatus
from app.schemas.summaries import DashboardStats, InstallmentAlert, InstallmentDashboard
from app.services.base_service import BaseService
from app.services.document_aggregate_service import installment_totals
from app.services.signing.signing_state_machine import effective_status
from app.utils.clock import Clock, local_today, utc_now

PENDING_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.IN_PROGRESS})


def document_stats(documents: Sequence[Document]) -> DashboardStats:
    statuses = [effective_status(d) for d in documents]
    return DashboardStats(
        total_documents=len(documents),
        pending_documents=sum(1 for s in statuses if s in PENDING_STATUSES),
        completed_documents=statuses.count(DocumentStatus.COMPLETED),
        rejected_documents=statuses.count(DocumentStatus.REJECTED),
    )


def installment_dashboard(
    documents: Sequence[Document],
    today: date,
    due_soon_days: int = 5,
) -> InstallmentDashboard:
    """Documents with unpaid installments that are overdue or due within ``due_soon_days``.

    Documents are listed most overdue first, then by due-soon amount.
    """
    alerts: List[InstallmentAlert] = []
    for document in documents:
        totals = installment_totals(document.installments, today, due_soon_days)
        if not totals.overdue_count and not totals.due_soon_count:
            continue
        alerts.append(InstallmentAlert(
            document_id=document.id,
            title=document.title,
            installment_count=totals.count,
            installment_total=totals.total,
            overdue=totals.overdue,
            overdue_count=totals.overdue_count,
            due_soon=totals.due_soon,
            due_soon_count=totals.due_soon_count,
        ))

    alerts.sort(key=lambda a: (-a.overdue, -a.due_soon))
    return InstallmentDashboard(
        as_of=today,
        documents=alerts,
        overdue_total=sum(a.overdue for a in alerts),
        due_soon_total=sum(a.due_soon for a in alerts),
    )


class DashboardService(BaseService):
    """Aggregates over the documents listed by the store."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store)
        self.clock = clock

    def validate(self, kind: str, page_size: int = 100):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")

    async def list_all(self, page_size: int = 100) -> List[Document]:
        """Read every document the store holds, one page at a time."""
        documents: List[Document] = []
        offset = 0
        while True:
            page = await self.store.list_documents(limit=page_size, offset=offset)
            documents.extend(page)
            if len(page) < page_size:
                return documents
            offset += page_size

    async def run(self, kind: str, page_size: int = 100):
        documents = await self.list_all(page_size)
        self.logger.info(f"Dashboard {kind} over {len(documents)} documents")
        if kind == "stats":
            return document_stats(documents)
        if kind == "installments":
            today = local_today(self.clock(), settings.engine.timezone)
            return installment_dashboard(documents, today, settings.engine.due_soon_days)
        raise ValueError(f"Unknown dashboard: {kind}")

    async def get_stats(self, page_size: int = 100) -> DashboardStats:
        return await self.execute("stats", page_size=page_size)

    async def get_installment_alerts(self, page_size: int = 100) -> InstallmentDashboard:
        return await self.execute("installments", page_size=page_size)
