"""Signatory transitions and the derived document status.

    PENDING -> SIGNED      (terminal)
    PENDING -> REJECTED    (terminal)

The document status is a function of the signatory list:

    any REJECTED            -> REJECTED
    all SIGNED              -> COMPLETED
    some SIGNED, some PENDING -> IN_PROGRESS
    otherwise               -> PENDING

Acting is only allowed for the user whose relation is CAN_SIGN; a sign or
reject only ever touches the acting signatory's own record.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Sequence

from app.schemas.document import (
    LIFECYCLE_STATUSES,
    Document,
    DocumentStatus,
    EntityId,
    Signatory,
    SignatoryStatus,
)
from app.schemas.results import EngineError, ErrorCode, Result, validation_error
from app.schemas.summaries import SignatoryRelation
from app.services.signing.signatory_order import active_signatory, relation_of, signatory_for

TRANSITIONS: Dict[SignatoryStatus, FrozenSet[SignatoryStatus]] = {
    SignatoryStatus.PENDING: frozenset({SignatoryStatus.SIGNED, SignatoryStatus.REJECTED}),
    SignatoryStatus.SIGNED: frozenset(),
    SignatoryStatus.REJECTED: frozenset(),
}

CLOSED_STATUSES = frozenset({DocumentStatus.REJECTED, DocumentStatus.COMPLETED}) | LIFECYCLE_STATUSES


@dataclass(frozen=True)
class SigningTransition:
    """Outcome of a successful sign or reject."""

    signatories: List[Signatory]
    signatory: Signatory
    previous_status: DocumentStatus
    document_status: DocumentStatus
    active_signatory: Optional[Signatory]


def can_transition(current: SignatoryStatus, target: SignatoryStatus) -> bool:
    return target in TRANSITIONS[current]


def derive_document_status(signatories: Sequence[Signatory]) -> DocumentStatus:
    statuses = [s.status for s in signatories]
    if SignatoryStatus.REJECTED in statuses:
        return DocumentStatus.REJECTED
    if statuses and all(s == SignatoryStatus.SIGNED for s in statuses):
        return DocumentStatus.COMPLETED
    if SignatoryStatus.SIGNED in statuses:
        return DocumentStatus.IN_PROGRESS
    return DocumentStatus.PENDING


def effective_status(document: Document) -> DocumentStatus:
    """Stored lifecycle states (draft, cancelled, expired) win; otherwise derive."""
    if document.status in LIFECYCLE_STATUSES:
        return document.status
    return derive_document_status(document.signatories)


def _relation_error(relation: SignatoryRelation, user_id: EntityId, own: Optional[Signatory],
                    active: Optional[Signatory]) -> EngineError:
    if relation == SignatoryRelation.NOT_SIGNATORY:
        return validation_error(
            ErrorCode.NOT_A_SIGNATORY,
            "You are not a signatory of this document.",
            user_id=user_id,
        )
    if relation == SignatoryRelation.ALREADY_SIGNED:
        return validation_error(
            ErrorCode.ALREADY_SIGNED,
            "You have already signed this document.",
            user_id=user_id,
            signatory_id=own.id,
            signed_at=own.signed_at.isoformat() if own.signed_at else None,
        )
    if relation == SignatoryRelation.REJECTED:
        return validation_error(
            ErrorCode.ALREADY_REJECTED,
            "You have already rejected this document.",
            user_id=user_id,
            signatory_id=own.id,
        )
    return validation_error(
        ErrorCode.OUT_OF_TURN,
        f"Signatory #{own.order} must wait for signatory #{active.order if active else '?'}.",
        user_id=user_id,
        signatory_id=own.id,
        order=own.order,
        active_order=active.order if active else None,
    )


def check_can_act(
    signatories: Sequence[Signatory],
    user_id: EntityId,
    stored_status: Optional[DocumentStatus] = None,
) -> Result[Signatory]:
    """Resolve the acting signatory, or explain why ``user_id`` may not act now."""
    relation = relation_of(signatories, user_id)
    own = signatory_for(signatories, user_id)
    if relation != SignatoryRelation.CAN_SIGN:
        return Result.failure(_relation_error(relation, user_id, own, active_signatory(signatories)))

    status = derive_document_status(signatories)
    if stored_status in LIFECYCLE_STATUSES:
        status = stored_status
    if status in CLOSED_STATUSES:
        return Result.failure(validation_error(
            ErrorCode.DOCUMENT_CLOSED,
            f"The document is {status.value.lower()} and accepts no further signatures.",
            document_status=status.value,
        ))
    return Result.success(own)


def _apply(
    signatories: Sequence[Signatory],
    user_id: EntityId,
    target: SignatoryStatus,
    now: datetime,
    reason: Optional[str],
    stored_status: Optional[DocumentStatus],
) -> Result[SigningTransition]:
    checked = check_can_act(signatories, user_id, stored_status)
    if not checked.ok:
        return Result(errors=checked.errors)

    own = checked.value
    if not can_transition(own.status, target):
        # Unreachable while CAN_SIGN implies PENDING
        return Result.failure(validation_error(
            ErrorCode.ALREADY_SIGNED if own.status == SignatoryStatus.SIGNED else ErrorCode.ALREADY_REJECTED,
            f"Signatory {own.id} is {own.status.value} and cannot become {target.value}.",
            signatory_id=own.id,
        ))

    update = {"status": target, "signed_at": now}
    if target == SignatoryStatus.REJECTED:
        update["rejection_reason"] = reason
    acted = own.model_copy(update=update)
    updated = [acted if s is own else s for s in signatories]

    return Result.success(SigningTransition(
        signatories=updated,
        signatory=acted,
        previous_status=derive_document_status(signatories),
        document_status=derive_document_status(updated),
        active_signatory=active_signatory(updated),
    ))


def sign(
    signatories: Sequence[Signatory],
    user_id: EntityId,
    now: datetime,
    stored_status: Optional[DocumentStatus] = None,
) -> Result[SigningTransition]:
    """Record ``user_id``'s signature if it is their turn."""
    return _apply(signatories, user_id, SignatoryStatus.SIGNED, now, None, stored_status)


def reject(
    signatories: Sequence[Signatory],
    user_id: EntityId,
    now: datetime,
    reason: Optional[str] = None,
    stored_status: Optional[DocumentStatus] = None,
) -> Result[SigningTransition]:
    """Record ``user_id``'s rejection if it is their turn."""
    reason = reason.strip() if reason else None
    return _apply(signatories, user_id, SignatoryStatus.REJECTED, now, reason or None, stored_status)
