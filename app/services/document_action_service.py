"""Mutating actions on a stored document: sign, reject, pay installment.

Each action is one round-trip against the document store:

    fetch snapshot -> validate locally -> emit intent -> project the reply

The snapshot returned by the store is the only state used afterwards; no
second local mutation is ever applied on top of the one just sent.
"""

from datetime import date
from typing import Any, Optional

from app.core.exceptions import DocumentNotFoundError, StaleSnapshotError
from app.repositories.document_store import DocumentStore
from app.schemas.actions import CurrentUser, InstallmentPaymentIntent, SigningAction, SigningIntent
from app.schemas.document import Document, EntityId, SignatoryStatus, same_id
from app.schemas.results import ErrorCode, Result, conflict_error, not_found_error
from app.schemas.summaries import DocumentView
from app.services.base_service import BaseService
from app.services.document_aggregate_service import DocumentAggregateService
from app.services.finance.installment_payments import find_installment, pay_installment
from app.services.signing import signing_state_machine
from app.utils.clock import Clock, utc_now


def _document_not_found(document_id: EntityId) -> Result:
    return Result.failure(not_found_error(
        ErrorCode.DOCUMENT_NOT_FOUND,
        f"Document {document_id} not found.",
        document_id=document_id,
    ))


def _stale(document_id: EntityId, reason: str) -> Result:
    return Result.failure(conflict_error(
        ErrorCode.STALE_SNAPSHOT,
        "The document changed while you were working on it. Please refresh and try again.",
        document_id=document_id,
        reason=reason,
    ))


class DocumentActionService(BaseService):
    """Runs sign, reject and pay-installment round-trips."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        super().__init__(store)
        self.clock = clock
        self.aggregates = DocumentAggregateService(store, clock)

    async def run(self, *args, **kwargs) -> Any:
        action = kwargs.pop("action")
        if action == SigningAction.SIGN:
            return await self._sign_or_reject(SigningAction.SIGN, **kwargs)
        if action == SigningAction.REJECT:
            return await self._sign_or_reject(SigningAction.REJECT, **kwargs)
        if action == "pay":
            return await self._pay(**kwargs)
        raise ValueError(f"Unknown action: {action}")

    async def sign(self, document_id: EntityId, user: CurrentUser) -> Result[DocumentView]:
        """Sign ``document_id`` as ``user`` if it is their turn."""
        return await self.execute(action=SigningAction.SIGN, document_id=document_id, user=user)

    async def reject(
        self,
        document_id: EntityId,
        user: CurrentUser,
        reason: Optional[str] = None,
    ) -> Result[DocumentView]:
        """Reject ``document_id`` as ``user`` if it is their turn."""
        return await self.execute(action=SigningAction.REJECT, document_id=document_id, user=user, reason=reason)

    async def pay_installment(
        self,
        document_id: EntityId,
        installment_id: EntityId,
        payment_date: date,
        proof_file_id: Optional[EntityId],
        user: CurrentUser,
    ) -> Result[DocumentView]:
        """Mark one installment as paid."""
        return await self.execute(
            action="pay",
            document_id=document_id,
            installment_id=installment_id,
            payment_date=payment_date,
            proof_file_id=proof_file_id,
            user=user,
        )

    async def _fetch(self, document_id: EntityId) -> Optional[Document]:
        try:
            return await self.store.get(document_id)
        except DocumentNotFoundError:
            self.logger.warning(f"Document {document_id} not found")
            return None

    async def _sign_or_reject(
        self,
        action: SigningAction,
        document_id: EntityId,
        user: CurrentUser,
        reason: Optional[str] = None,
    ) -> Result[DocumentView]:
        document = await self._fetch(document_id)
        if document is None:
            return _document_not_found(document_id)

        now = self.clock()
        if action == SigningAction.SIGN:
            outcome = signing_state_machine.sign(document.signatories, user.user_id, now, document.status)
            target = SignatoryStatus.SIGNED
        else:
            outcome = signing_state_machine.reject(document.signatories, user.user_id, now, reason, document.status)
            target = SignatoryStatus.REJECTED

        if not outcome.ok:
            self.logger.warning(
                f"{action.value} refused on document {document_id} for user {user.user_id}: "
                f"{outcome.error.code.value}"
            )
            return Result(errors=outcome.errors)

        transition = outcome.value
        intent = SigningIntent(
            document_id=document_id,
            action=action,
            signatory_id=transition.signatory.id,
            user_id=user.user_id,
            reason=transition.signatory.rejection_reason,
        )
        try:
            refreshed = await self.store.apply_signing(intent)
        except StaleSnapshotError as e:
            self.logger.warning(f"{action.value} on document {document_id} hit a stale snapshot: {str(e)}")
            return _stale(document_id, str(e))
        except DocumentNotFoundError:
            return _document_not_found(document_id)

        acted = next((s for s in refreshed.signatories if same_id(s.id, transition.signatory.id)), None)
        if acted is None or acted.status != target:
            self.logger.warning(
                f"Store reply for document {document_id} does not reflect {action.value} "
                f"by signatory {transition.signatory.id}"
            )
            return _stale(document_id, "signatory status not updated by the store")

        self.logger.info(
            f"User {user.user_id} {'signed' if action == SigningAction.SIGN else 'rejected'} "
            f"document {document_id} (signatory #{acted.order}), "
            f"status {transition.previous_status.value} -> {transition.document_status.value}"
        )
        return Result.success(self.aggregates.project(refreshed, user.user_id))

    async def _pay(
        self,
        document_id: EntityId,
        installment_id: EntityId,
        payment_date: date,
        proof_file_id: Optional[EntityId],
        user: CurrentUser,
    ) -> Result[DocumentView]:
        document = await self._fetch(document_id)
        if document is None:
            return _document_not_found(document_id)

        outcome = pay_installment(document.installments, installment_id, payment_date, proof_file_id)
        if not outcome.ok:
            self.logger.warning(
                f"Payment refused for installment {installment_id} of document {document_id}: "
                f"{outcome.error.code.value}"
            )
            return Result(errors=outcome.errors)

        intent = InstallmentPaymentIntent(
            document_id=document_id,
            installment_id=installment_id,
            payment_date=payment_date,
            proof_file_id=proof_file_id,
        )
        try:
            refreshed = await self.store.pay_installment(intent)
        except StaleSnapshotError as e:
            self.logger.warning(f"Payment on document {document_id} hit a stale snapshot: {str(e)}")
            return _stale(document_id, str(e))
        except DocumentNotFoundError:
            return _document_not_found(document_id)

        paid = find_installment(refreshed.installments, installment_id)
        if paid is None or not paid.is_paid:
            return _stale(document_id, "installment not marked as paid by the store")

        self.logger.info(
            f"Installment #{paid.installment_number} of document {document_id} paid "
            f"on {payment_date.isoformat()} by user {user.user_id}"
        )
        return Result.success(self.aggregates.project(refreshed, user.user_id))
