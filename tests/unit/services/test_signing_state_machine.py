from datetime import datetime, timezone

import pytest

from app.schemas.document import DocumentStatus, SignatoryStatus
from app.schemas.results import ErrorCode
from app.services.signing import signing_state_machine as machine
from tests.factories import make_document, make_signatories

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("statuses,expected", [
    (("PENDING", "PENDING"), DocumentStatus.PENDING),
    (("SIGNED", "PENDING"), DocumentStatus.IN_PROGRESS),
    (("SIGNED", "SIGNED"), DocumentStatus.COMPLETED),
    (("SIGNED", "REJECTED", "PENDING"), DocumentStatus.REJECTED),
    (("PENDING", "REJECTED"), DocumentStatus.REJECTED),
])
def test_document_status_derivation(statuses, expected):
    signatories = make_signatories(*statuses)

    assert machine.derive_document_status(signatories) == expected
    assert machine.derive_document_status(signatories) == machine.derive_document_status(signatories)


def test_no_signatories_is_pending():
    assert machine.derive_document_status([]) == DocumentStatus.PENDING


def test_lifecycle_status_wins_over_derivation():
    document = make_document(make_signatories("SIGNED", "PENDING"), status=DocumentStatus.CANCELLED)

    assert machine.effective_status(document) == DocumentStatus.CANCELLED


def test_terminal_states_have_no_transitions():
    assert machine.can_transition(SignatoryStatus.PENDING, SignatoryStatus.SIGNED)
    assert machine.can_transition(SignatoryStatus.PENDING, SignatoryStatus.REJECTED)
    assert not machine.can_transition(SignatoryStatus.SIGNED, SignatoryStatus.REJECTED)
    assert not machine.can_transition(SignatoryStatus.REJECTED, SignatoryStatus.SIGNED)


def test_sign_changes_only_the_acting_record():
    signatories = make_signatories("PENDING", "PENDING", "PENDING")

    result = machine.sign(signatories, "u1", NOW)

    assert result.ok
    updated = result.value.signatories
    assert updated[0].status == SignatoryStatus.SIGNED
    assert updated[0].signed_at == NOW
    assert updated[1:] == signatories[1:]
    # input list is left as it was
    assert signatories[0].status == SignatoryStatus.PENDING


def test_sign_out_of_turn_is_rejected():
    signatories = make_signatories("PENDING", "PENDING")

    result = machine.sign(signatories, "u2", NOW)

    assert result.codes == [ErrorCode.OUT_OF_TURN]
    assert result.error.details["active_order"] == 1


def test_non_signatory_cannot_sign():
    result = machine.sign(make_signatories("PENDING"), "stranger", NOW)

    assert result.codes == [ErrorCode.NOT_A_SIGNATORY]


def test_reject_records_reason():
    result = machine.reject(make_signatories("PENDING", "PENDING"), "u1", NOW, reason="  Wrong amount ")

    assert result.value.signatory.status == SignatoryStatus.REJECTED
    assert result.value.signatory.rejection_reason == "Wrong amount"
    assert result.value.document_status == DocumentStatus.REJECTED
    assert result.value.active_signatory.order == 2


def test_cancelled_document_accepts_no_signature():
    result = machine.sign(make_signatories("PENDING"), "u1", NOW, stored_status=DocumentStatus.CANCELLED)

    assert result.codes == [ErrorCode.DOCUMENT_CLOSED]


def test_rejected_document_accepts_no_further_signature():
    result = machine.sign(make_signatories("REJECTED", "PENDING"), "u2", NOW)

    assert result.codes == [ErrorCode.DOCUMENT_CLOSED]


class TestFourSignatoryScenario:
    """Total 1000, four signatories ordered 1-4."""

    def test_first_signature_moves_document_in_progress(self):
        signatories = make_signatories("PENDING", "PENDING", "PENDING", "PENDING")

        result = machine.sign(signatories, "u1", NOW)

        assert result.value.previous_status == DocumentStatus.PENDING
        assert result.value.document_status == DocumentStatus.IN_PROGRESS
        assert result.value.active_signatory.order == 2

    def test_signing_twice_is_already_signed(self):
        signatories = machine.sign(make_signatories("PENDING", "PENDING", "PENDING", "PENDING"), "u1", NOW).value.signatories

        again = machine.sign(signatories, "u1", NOW)

        assert again.codes == [ErrorCode.ALREADY_SIGNED]

    def test_all_four_in_order_complete_the_document(self):
        signatories = make_signatories("PENDING", "PENDING", "PENDING", "PENDING")

        for user in ("u1", "u2", "u3", "u4"):
            result = machine.sign(signatories, user, NOW)
            assert result.ok, result.errors
            signatories = result.value.signatories

        assert machine.derive_document_status(signatories) == DocumentStatus.COMPLETED
        assert result.value.active_signatory is None

    @pytest.mark.parametrize("signed_before", [0, 1, 2, 3])
    def test_any_rejection_rejects_the_document(self, signed_before):
        signatories = make_signatories("PENDING", "PENDING", "PENDING", "PENDING")
        for user in [f"u{i}" for i in range(1, signed_before + 1)]:
            signatories = machine.sign(signatories, user, NOW).value.signatories

        result = machine.reject(signatories, f"u{signed_before + 1}", NOW, reason="No")

        assert result.value.document_status == DocumentStatus.REJECTED
        assert machine.derive_document_status(result.value.signatories) == DocumentStatus.REJECTED
