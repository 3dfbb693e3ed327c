"""Submission gate for new documents.

A ``DocumentSubmission`` is checked as a whole before anything is sent to
the document store. Every violation is collected so the caller can fix them
all at once instead of resubmitting once per error.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.repositories.document_store import DocumentStore
from app.schemas.actions import Cadence, CadenceUnit, CurrentUser, DocumentSubmission, SignatoryDraft
from app.schemas.document import Document, DocumentStatus, SignatoryStatus, same_id
from app.schemas.results import EngineError, ErrorCode, Result, validation_error
from app.services.base_service import BaseService
from app.services.finance import allocation_reconciler, money_splitter
from app.utils.clock import Clock, local_today, utc_now

def check_signatories(signatories: List[SignatoryDraft]) -> List[EngineError]:
    if not signatories:
        return [validation_error(
            ErrorCode.INVALID_SIGNATORIES,
            "At least one signatory is required.",
            count=0,
        )]

    errors: List[EngineError] = []
    non_positive = [s.order for s in signatories if s.order <= 0]
    if non_positive:
        errors.append(validation_error(
            ErrorCode.INVALID_SIGNATORIES,
            "Signatory orders must be positive integers.",
            orders=non_positive,
        ))

    orders = [s.order for s in signatories]
    repeated_orders = sorted({o for o in orders if orders.count(o) > 1})
    if repeated_orders:
        errors.append(validation_error(
            ErrorCode.INVALID_SIGNATORIES,
            f"Signatory orders must be unique; repeated: {repeated_orders}.",
            orders=repeated_orders,
        ))

    users = [s.user_id for s in signatories]
    repeated_users = [u for i, u in enumerate(users) if any(same_id(u, p) for p in users[:i])]
    if repeated_users:
        errors.append(validation_error(
            ErrorCode.INVALID_SIGNATORIES,
            "A user can only be listed once as signatory.",
            user_ids=repeated_users,
        ))
    return errors

def validate_submission(
    submission: DocumentSubmission,
    today: date,
    tolerance: int = 1,
    max_installments: Optional[int] = None,
    default_cadence: Optional[Cadence] = None,
) -> Result[DocumentSubmission]:
    """Run every pre-submission check.

    Returns the submission ready to be stored: installments generated when
    none were given and allocation percentages recomputed against the total.
    """
    errors: List[EngineError] = list(check_signatories(submission.signatories))

    if submission.total < 0:
        errors.append(validation_error(
            ErrorCode.NEGATIVE_AMOUNT,
            f"Total must not be negative, got {submission.total}.",
            total=submission.total,
        ))
        return Result.failure(*errors)

    installments = submission.installments
    if installments is None:
        count = submission.installment_count or 1
        generated = money_splitter.split(
            submission.total,
            count,
            submission.start_date or today,
            submission.cadence or default_cadence,
            max_installments,
        )
        errors.extend(generated.errors)
        installments = generated.value or []
    else:
        count = submission.installment_count
        if count is None:
            count = len(installments)
        count_error = money_splitter.check_split_inputs(submission.total, count, max_installments)
        if count_error:
            errors.append(count_error)
        errors.extend(money_splitter.check_schedule(
            installments,
            submission.total,
            expected_count=count,
            tolerance=tolerance,
        ))

    allocation_error = allocation_reconciler.check_submission(
        submission.allocations, submission.total, tolerance
    )
    if allocation_error:
        errors.append(allocation_error)

    if errors:
        return Result.failure(*errors)

    allocations = [
        a.model_copy(update={"percentual": allocation_reconciler.percent_of(a.valor, submission.total)})
        for a in submission.allocations
    ]
    return Result.success(submission.model_copy(update={
        "installment_count": count,
        "installments": installments,
        "allocations": allocations,
    }))

def build_payload(submission: DocumentSubmission, owner: Optional[CurrentUser] = None) -> Dict[str, Any]:
    """Store payload for a validated submission (camelCase JSON)."""
    payload = submission.model_dump(mode="json", by_alias=True, exclude_none=True)
    payload["status"] = DocumentStatus.PENDING.value
    payload["signatories"] = [
        {"userId": s.user_id, "order": s.order, "status": SignatoryStatus.PENDING.value}
        for s in sorted(submission.signatories, key=lambda s: s.order)
    ]
    if owner is not None:
        payload["createdBy"] = owner.user_id
    return payload

class SubmissionService(BaseService):
    """Validates and creates documents."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store)
        self.clock = clock

    def default_cadence(self) -> Cadence:
        return Cadence(
            interval=settings.engine.default_cadence_interval,
            unit=CadenceUnit(settings.engine.default_cadence_unit),
        )

    def check(self, submission: DocumentSubmission) -> Result[DocumentSubmission]:
        return validate_submission(
            submission,
            local_today(self.clock(), settings.engine.timezone),
            tolerance=settings.tolerance_minor_units,
            max_installments=settings.max_installments,
            default_cadence=self.default_cadence(),
        )

    async def run(self, submission: DocumentSubmission, user: CurrentUser) -> Result[Document]:
        checked = self.check(submission)
        if not checked.ok:
            self.logger.warning(
                f"Submission rejected for user {user.user_id}: {[c.value for c in checked.codes]}"
            )
            return Result(errors=checked.errors)

        document = await self.store.create(build_payload(checked.value, user))
        self.logger.info(
            f"Document {document.id} submitted by user {user.user_id} "
            f"({len(document.signatories)} signatories, {len(document.installments)} installments)"
        )
        return Result.success(document)

    async def submit(self, submission: DocumentSubmission, user: CurrentUser) -> Result[Document]:
        """Validate ``submission`` and create the document if it passes."""
        return await self.execute(submission, user)
