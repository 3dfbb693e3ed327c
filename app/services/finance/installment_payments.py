"""Installment payment transition (isPaid: false -> true, one way)."""

from datetime import date
from typing import List, Optional, Sequence

from app.schemas.document import EntityId, Installment, same_id
from app.schemas.results import ErrorCode, Result, not_found_error, validation_error


def find_installment(installments: Sequence[Installment], installment_id: EntityId) -> Optional[Installment]:
    return next((i for i in installments if same_id(i.id, installment_id)), None)


def is_overdue(installment: Installment, today: date) -> bool:
    return not installment.is_paid and installment.due_date is not None and installment.due_date < today


def pay_installment(
    installments: Sequence[Installment],
    installment_id: EntityId,
    payment_date: date,
    proof_file_id: Optional[EntityId],
) -> Result[List[Installment]]:
    """Mark one installment paid, leaving the others untouched."""
    target = find_installment(installments, installment_id)
    if target is None:
        return Result.failure(not_found_error(
            ErrorCode.INSTALLMENT_NOT_FOUND,
            f"Installment {installment_id} does not belong to this document.",
            installment_id=installment_id,
        ))
    if target.is_paid:
        return Result.failure(validation_error(
            ErrorCode.INSTALLMENT_ALREADY_PAID,
            f"Installment #{target.installment_number} was already paid"
            + (f" on {target.paid_date.isoformat()}." if target.paid_date else "."),
            installment_id=installment_id,
            installment_number=target.installment_number,
        ))
    if proof_file_id in (None, ""):
        return Result.failure(validation_error(
            ErrorCode.MISSING_PAYMENT_PROOF,
            "A payment proof file is required to mark an installment as paid.",
            installment_id=installment_id,
        ))

    paid = target.model_copy(update={
        "is_paid": True,
        "paid_date": payment_date,
        "proof_file_id": proof_file_id,
    })
    return Result.success([paid if i is target else i for i in installments])
