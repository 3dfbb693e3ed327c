"""Installment splitting and schedule checks.

Amounts are integers in minor currency units. The split is exact: the
remainder of ``total / count`` goes entirely to installment #1, so the
amounts always add back up to the total.

    split(100, 3) -> [34, 33, 33]

Every function here is a pure function of its arguments: the start date is
passed in, never read from a clock.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from app.schemas.actions import Cadence, CadenceUnit
from app.schemas.document import Installment
from app.schemas.results import (
    EngineError,
    ErrorCode,
    Result,
    consistency_error,
    validation_error,
)

DEFAULT_CADENCE = Cadence(interval=30, unit=CadenceUnit.DAYS)


def split_amount(total: int, count: int) -> List[int]:
    """Divide ``total`` into ``count`` parts, remainder on the first part.

    Callers must have validated ``total >= 0`` and ``count > 0``.
    """
    base = total // count
    remainder = total - base * count
    amounts = [base] * count
    amounts[0] += remainder
    return amounts


def due_date_for(start_date: date, cadence: Cadence, installment_number: int) -> date:
    """Due date of installment ``installment_number`` (1-based)."""
    steps = cadence.interval * installment_number
    if cadence.unit == CadenceUnit.MONTHS:
        # relativedelta clamps Jan 31 + 1 month to Feb 28/29
        return start_date + relativedelta(months=steps)
    return start_date + timedelta(days=steps)


def check_split_inputs(
    total: Optional[int],
    count: int,
    max_installments: Optional[int] = None,
) -> Optional[EngineError]:
    if total is None:
        return validation_error(
            ErrorCode.MISSING_TOTAL,
            "The document has no total yet, installments cannot be generated.",
        )
    if total < 0:
        return validation_error(
            ErrorCode.NEGATIVE_AMOUNT,
            f"Total must not be negative, got {total}.",
            total=total,
        )
    if count <= 0:
        return validation_error(
            ErrorCode.INVALID_SPLIT_COUNT,
            f"Installment count must be at least 1, got {count}.",
            count=count,
            minimum=1,
        )
    if max_installments is not None and count > max_installments:
        return validation_error(
            ErrorCode.INVALID_SPLIT_COUNT,
            f"Installment count must be at most {max_installments}, got {count}.",
            count=count,
            maximum=max_installments,
        )
    return None


def split(
    total: int,
    count: int,
    start_date: date,
    cadence: Optional[Cadence] = None,
    max_installments: Optional[int] = None,
) -> Result[List[Installment]]:
    """Generate a fresh schedule: amounts and due dates.

    Args:
        total: Document total in minor units
        count: Number of installments
        start_date: Date the cadence is counted from
        cadence: Spacing between due dates (default every 30 days)
        max_installments: Optional upper bound on ``count``

    Returns:
        Result holding installments numbered 1..count
    """
    error = check_split_inputs(total, count, max_installments)
    if error:
        return Result.failure(error)

    cadence = cadence or DEFAULT_CADENCE
    installments = [
        Installment(
            installment_number=number,
            amount=amount,
            due_date=due_date_for(start_date, cadence, number),
        )
        for number, amount in enumerate(split_amount(total, count), start=1)
    ]
    return Result.success(installments)


# Regenerating a schedule is the same operation as splitting it the first time
regenerate_installments = split


def recalculate_amounts(
    installments: Sequence[Installment],
    total: int,
    start_date: date,
    count: Optional[int] = None,
    cadence: Optional[Cadence] = None,
    max_installments: Optional[int] = None,
) -> Result[List[Installment]]:
    """Re-split amounts while keeping due dates the user already chose.

    The installment at each index keeps everything but its amount (id,
    due date, description and payment state) if that index still exists;
    indices beyond the previous schedule are new rows with a generated date.
    """
    count = len(installments) if count is None else count
    error = check_split_inputs(total, count, max_installments)
    if error:
        return Result.failure(error)

    cadence = cadence or DEFAULT_CADENCE
    existing = sorted(installments, key=lambda i: i.installment_number)
    recalculated = []
    for index, amount in enumerate(split_amount(total, count)):
        number = index + 1
        previous = existing[index] if index < len(existing) else None
        if previous is None:
            recalculated.append(Installment(
                installment_number=number,
                amount=amount,
                due_date=due_date_for(start_date, cadence, number),
            ))
            continue
        recalculated.append(previous.model_copy(update={
            "installment_number": number,
            "amount": amount,
            "due_date": previous.due_date or due_date_for(start_date, cadence, number),
        }))
    return Result.success(recalculated)


def check_schedule(
    installments: Sequence[Installment],
    total: Optional[int],
    expected_count: Optional[int] = None,
    tolerance: int = 0,
) -> List[EngineError]:
    """Consistency checks run before a schedule may leave draft.

    Returns every violation found; an empty list means the schedule is
    consistent with ``total``.
    """
    if not installments:
        if expected_count:
            return [consistency_error(
                ErrorCode.INSTALLMENT_COUNT_MISMATCH,
                f"Expected {expected_count} installments, got none.",
                expected=expected_count,
                actual=0,
            )]
        return []

    errors: List[EngineError] = []
    numbers = sorted(i.installment_number for i in installments)
    expected_numbers = list(range(1, len(installments) + 1))
    if numbers != expected_numbers:
        missing = sorted(set(expected_numbers) - set(numbers))
        errors.append(consistency_error(
            ErrorCode.INSTALLMENT_SEQUENCE_GAP,
            "Installment numbers must run 1..N without gaps or repeats.",
            numbers=numbers,
            missing=missing,
        ))

    if expected_count is not None and len(installments) != expected_count:
        errors.append(consistency_error(
            ErrorCode.INSTALLMENT_COUNT_MISMATCH,
            f"Expected {expected_count} installments, got {len(installments)}.",
            expected=expected_count,
            actual=len(installments),
        ))

    undated = [i.installment_number for i in installments if i.due_date is None]
    if undated:
        errors.append(consistency_error(
            ErrorCode.MISSING_DUE_DATE,
            "Every installment needs a due date.",
            installment_numbers=undated,
        ))

    if total is None:
        errors.append(consistency_error(
            ErrorCode.MISSING_TOTAL,
            "Installments exist but the document has no total.",
        ))
        return errors

    installment_sum = sum(i.amount for i in installments)
    delta = total - installment_sum
    if abs(delta) > tolerance:
        if delta > 0:
            message = f"{delta} left undistributed across installments."
        else:
            message = f"Installments exceed the total by {-delta}."
        errors.append(consistency_error(
            ErrorCode.INSTALLMENT_MISMATCH,
            message,
            total=total,
            installment_sum=installment_sum,
            delta=delta,
            tolerance=tolerance,
        ))
    return errors
