"""Signing order: whose turn it is and how a user relates to the workflow.

Pure functions of the signatory list. No clock, no session.
"""

from typing import Dict, Optional, Sequence

from app.schemas.document import EntityId, Signatory, SignatoryStatus, same_id
from app.schemas.summaries import SignatoryRelation

RELATION_MESSAGES: Dict[SignatoryRelation, str] = {
    SignatoryRelation.NOT_SIGNATORY: "You are not a signatory of this document.",
    SignatoryRelation.ALREADY_SIGNED: "You have already signed this document.",
    SignatoryRelation.REJECTED: "You rejected this document.",
    SignatoryRelation.CAN_SIGN: "It is your turn to sign.",
    SignatoryRelation.WAITING_TURN: "Waiting for other signatories.",
}


def active_signatory(signatories: Sequence[Signatory]) -> Optional[Signatory]:
    """The lowest-order PENDING signatory, or None when nobody is pending."""
    pending = [s for s in signatories if s.status == SignatoryStatus.PENDING]
    if not pending:
        return None
    return min(pending, key=lambda s: s.order)


def signatory_for(signatories: Sequence[Signatory], user_id: EntityId) -> Optional[Signatory]:
    """The signatory record for ``user_id``.

    A user listed more than once is represented by their earliest pending
    slot, or by their earliest slot when none is pending.
    """
    own = sorted((s for s in signatories if same_id(s.user_id, user_id)), key=lambda s: s.order)
    if not own:
        return None
    return next((s for s in own if s.status == SignatoryStatus.PENDING), own[0])


def relation_of(signatories: Sequence[Signatory], user_id: EntityId) -> SignatoryRelation:
    own = signatory_for(signatories, user_id)
    if own is None:
        return SignatoryRelation.NOT_SIGNATORY
    if own.status == SignatoryStatus.SIGNED:
        return SignatoryRelation.ALREADY_SIGNED
    if own.status == SignatoryStatus.REJECTED:
        return SignatoryRelation.REJECTED

    active = active_signatory(signatories)
    if active is not None and active.id == own.id:
        return SignatoryRelation.CAN_SIGN
    return SignatoryRelation.WAITING_TURN


def relation_message(relation: SignatoryRelation) -> str:
    return RELATION_MESSAGES[relation]
