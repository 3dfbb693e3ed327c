"""Snapshot builders shared by the test modules."""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from app.schemas.document import Document, Installment, Signatory, SignatoryStatus

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
TODAY = date(2024, 3, 10)


def make_signatories(*statuses: str, users: Optional[List[str]] = None) -> List[Signatory]:
    """Signatories ordered 1..N, ids ``s1..sN``, users ``u1..uN`` unless given."""
    users = users or [f"u{i}" for i in range(1, len(statuses) + 1)]
    return [
        Signatory(id=f"s{i}", user_id=user, order=i, status=SignatoryStatus(status))
        for i, (status, user) in enumerate(zip(statuses, users), start=1)
    ]


def make_document(
    signatories: Optional[List[Signatory]] = None,
    total: Optional[int] = 1000,
    installments: Optional[List[Installment]] = None,
    **fields: Any,
) -> Document:
    return Document(
        id=fields.pop("id", "doc-1"),
        title=fields.pop("title", "Office rent"),
        total=total,
        signatories=signatories if signatories is not None else make_signatories("PENDING", "PENDING"),
        installments=installments or [],
        **fields,
    )


def with_signatory(document: Document, signatory_id: str, **update: Any) -> Document:
    """Copy of ``document`` with one signatory record changed, as the store would return it."""
    signatories = [
        s.model_copy(update=update) if s.id == signatory_id else s
        for s in document.signatories
    ]
    return document.model_copy(update={"signatories": signatories})


def snapshot_payload(document: Document) -> Dict[str, Any]:
    """Document as the store sends it over the wire."""
    return document.model_dump(mode="json", by_alias=True)
