"""Cost-center allocation ("rateio") bookkeeping against a document total.

Invariants:
- while editing, the distributed amount never exceeds the document total;
- at submission, it equals the total within the tolerance, unless the list
  is empty (allocation is optional);
- each entry's percentage is always relative to the document total, never
  to the running distributed amount.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence
from uuid import uuid4

from app.schemas.actions import AllocationDraft
from app.schemas.document import Allocation, EntityId, same_id
from app.schemas.results import (
    EngineError,
    ErrorCode,
    Result,
    consistency_error,
    not_found_error,
    validation_error,
)
from app.schemas.summaries import AllocationSummary

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


def percent_of(valor: int, total: Optional[int]) -> Decimal:
    """``valor / total x 100`` rounded half-up to 2 decimals, 0 when total is 0."""
    if not total:
        return Decimal("0.00")
    return (Decimal(valor) * HUNDRED / Decimal(total)).quantize(CENT, rounding=ROUND_HALF_UP)


def distributed(allocations: Sequence[Allocation]) -> int:
    return sum(a.valor for a in allocations)


def _find(allocations: Sequence[Allocation], allocation_id: EntityId) -> Optional[Allocation]:
    return next((a for a in allocations if same_id(a.id, allocation_id)), None)


def _not_found(allocation_id: EntityId) -> EngineError:
    return not_found_error(
        ErrorCode.ALLOCATION_NOT_FOUND,
        f"Allocation {allocation_id} is not in the list.",
        allocation_id=allocation_id,
    )


def _check_total(total: Optional[int]) -> Optional[EngineError]:
    if total is None:
        return validation_error(
            ErrorCode.MISSING_TOTAL,
            "The document has no total yet, nothing can be allocated.",
        )
    if total < 0:
        return validation_error(
            ErrorCode.NEGATIVE_AMOUNT,
            f"Total must not be negative, got {total}.",
            total=total,
        )
    return None


def _insufficient(total: int, others: int, requested: int) -> EngineError:
    remaining = total - others
    return validation_error(
        ErrorCode.INSUFFICIENT_REMAINDER,
        f"Allocating {requested} exceeds the remaining {remaining} by {requested - remaining}.",
        total=total,
        distributed=others,
        remaining=remaining,
        requested=requested,
        excess=requested - remaining,
    )


def add(
    allocations: Sequence[Allocation],
    entry: AllocationDraft,
    total: Optional[int],
) -> Result[List[Allocation]]:
    """Append ``entry`` if it fits in what is left of the total.

    On failure the caller's list is returned untouched (it is never mutated).
    """
    error = _check_total(total)
    if error:
        return Result.failure(error)

    missing = [name for name, value in (("filial", entry.filial), ("centroCusto", entry.centro_custo)) if not value.strip()]
    if missing or entry.valor <= 0:
        return Result.failure(validation_error(
            ErrorCode.INVALID_ALLOCATION,
            "Branch, cost center and a positive amount are required.",
            missing_fields=missing,
            valor=entry.valor,
        ))

    if entry.id is not None and _find(allocations, entry.id) is not None:
        return Result.failure(validation_error(
            ErrorCode.INVALID_ALLOCATION,
            f"Allocation {entry.id} is already in the list.",
            allocation_id=entry.id,
        ))

    current = distributed(allocations)
    if current + entry.valor > total:
        return Result.failure(_insufficient(total, current, entry.valor))

    allocation = Allocation(
        id=entry.id if entry.id is not None else uuid4().hex,
        filial=entry.filial.strip(),
        centro_custo=entry.centro_custo.strip(),
        valor=entry.valor,
        percentual=percent_of(entry.valor, total),
    )
    return Result.success([*allocations, allocation])


def remove(allocations: Sequence[Allocation], allocation_id: EntityId) -> Result[List[Allocation]]:
    """Drop one entry. Sibling amounts and percentages are left as they are."""
    if _find(allocations, allocation_id) is None:
        return Result.failure(_not_found(allocation_id))
    return Result.success([a for a in allocations if not same_id(a.id, allocation_id)])


def edit_amount(
    allocations: Sequence[Allocation],
    allocation_id: EntityId,
    new_valor: int,
    total: Optional[int],
) -> Result[List[Allocation]]:
    """Change one entry's amount and recompute that entry's percentage only."""
    error = _check_total(total)
    if error:
        return Result.failure(error)

    target = _find(allocations, allocation_id)
    if target is None:
        return Result.failure(_not_found(allocation_id))
    if new_valor <= 0:
        return Result.failure(validation_error(
            ErrorCode.INVALID_ALLOCATION,
            f"Allocation amount must be positive, got {new_valor}.",
            allocation_id=allocation_id,
            valor=new_valor,
        ))

    others = distributed(allocations) - target.valor
    if others + new_valor > total:
        return Result.failure(_insufficient(total, others, new_valor))

    edited = target.model_copy(update={"valor": new_valor, "percentual": percent_of(new_valor, total)})
    return Result.success([edited if a is target else a for a in allocations])


def summarize(allocations: Sequence[Allocation], total: Optional[int]) -> AllocationSummary:
    spread = distributed(allocations)
    return AllocationSummary(
        document_total=total,
        entries=len(allocations),
        distributed=spread,
        remaining=(total or 0) - spread,
        distributed_percentage=percent_of(spread, total),
    )


def check_submission(
    allocations: Sequence[Allocation],
    total: Optional[int],
    tolerance: int,
) -> Optional[EngineError]:
    """Submission gate: the allocations must cover the total exactly (within tolerance)."""
    if not allocations:
        return None
    spread = distributed(allocations)
    if total is None:
        return consistency_error(
            ErrorCode.MISSING_TOTAL,
            "Allocations exist but the document has no total.",
            distributed=spread,
        )
    delta = total - spread
    if abs(delta) > tolerance:
        return consistency_error(
            ErrorCode.ALLOCATION_MISMATCH,
            f"Allocations must add up to the document total; off by {delta}.",
            total=total,
            distributed=spread,
            delta=delta,
            tolerance=tolerance,
        )
    return None
