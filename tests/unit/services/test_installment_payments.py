from datetime import date

import pytest

from app.schemas.document import Installment
from app.schemas.results import ErrorCode, ErrorKind
from app.services.finance.installment_payments import is_overdue, pay_installment


@pytest.fixture
def installments():
    return [
        Installment(id=10, installment_number=1, amount=500, due_date=date(2024, 3, 1)),
        Installment(
            id=11, installment_number=2, amount=500, due_date=date(2024, 4, 1),
            is_paid=True, paid_date=date(2024, 3, 28), proof_file_id="f-1",
        ),
    ]


def test_pay_marks_only_the_target(installments):
    result = pay_installment(installments, "10", date(2024, 3, 5), "proof-9")

    assert result.ok
    paid = result.value[0]
    assert paid.is_paid
    assert paid.paid_date == date(2024, 3, 5)
    assert paid.proof_file_id == "proof-9"
    assert result.value[1] is installments[1]


def test_pay_twice_is_rejected(installments):
    result = pay_installment(installments, 11, date(2024, 3, 5), "proof-9")

    assert result.codes == [ErrorCode.INSTALLMENT_ALREADY_PAID]
    assert "2024-03-28" in result.error.message


def test_pay_requires_proof(installments):
    result = pay_installment(installments, 10, date(2024, 3, 5), None)

    assert result.codes == [ErrorCode.MISSING_PAYMENT_PROOF]


def test_pay_unknown_installment(installments):
    result = pay_installment(installments, 99, date(2024, 3, 5), "proof-9")

    assert result.codes == [ErrorCode.INSTALLMENT_NOT_FOUND]
    assert result.error.kind == ErrorKind.NOT_FOUND


def test_overdue_is_strictly_before_today(installments):
    assert is_overdue(installments[0], date(2024, 3, 2))
    assert not is_overdue(installments[0], date(2024, 3, 1))
    assert not is_overdue(installments[1], date(2025, 1, 1))
