from decimal import Decimal

import pytest

from app.schemas.actions import AllocationDraft
from app.schemas.document import Allocation
from app.schemas.results import ErrorCode, ErrorKind
from app.services.finance import allocation_reconciler


@pytest.fixture
def allocations():
    return [
        Allocation(id="a1", filial="SP", centro_custo="ADM", valor=600, percentual=Decimal("60.00")),
        Allocation(id="a2", filial="RJ", centro_custo="OPS", valor=300, percentual=Decimal("30.00")),
    ]


def test_percent_rounds_half_up_to_two_places():
    assert allocation_reconciler.percent_of(1, 3) == Decimal("33.33")
    assert allocation_reconciler.percent_of(2, 3) == Decimal("66.67")
    # 1/8 = 12.5%, 1/16 = 6.25%, 1/32 = 3.125% -> 3.13
    assert allocation_reconciler.percent_of(1, 32) == Decimal("3.13")


def test_percent_of_zero_total_is_zero():
    assert allocation_reconciler.percent_of(50, 0) == Decimal("0.00")
    assert allocation_reconciler.percent_of(50, None) == Decimal("0.00")


def test_add_appends_entry_with_percentage_of_document_total(allocations):
    result = allocation_reconciler.add(
        allocations, AllocationDraft(filial="BH", centro_custo="TI", valor=100), total=1000
    )

    assert result.ok
    added = result.value[-1]
    assert added.valor == 100
    assert added.percentual == Decimal("10.00")
    assert added.id
    assert len(result.value) == 3


def test_add_exceeding_remainder_is_rejected_and_list_unchanged(allocations):
    before = list(allocations)

    result = allocation_reconciler.add(
        allocations, AllocationDraft(filial="BH", centro_custo="TI", valor=101), total=1000
    )

    assert result.codes == [ErrorCode.INSUFFICIENT_REMAINDER]
    assert result.error.kind == ErrorKind.VALIDATION
    assert result.error.details["remaining"] == 100
    assert result.error.details["excess"] == 1
    assert allocations == before


def test_add_filling_the_total_exactly_is_allowed(allocations):
    result = allocation_reconciler.add(
        allocations, AllocationDraft(filial="BH", centro_custo="TI", valor=100), total=1000
    )

    assert allocation_reconciler.distributed(result.value) == 1000


@pytest.mark.parametrize("draft", [
    AllocationDraft(filial="", centro_custo="TI", valor=10),
    AllocationDraft(filial="BH", centro_custo="  ", valor=10),
    AllocationDraft(filial="BH", centro_custo="TI", valor=0),
])
def test_add_rejects_incomplete_entries(allocations, draft):
    result = allocation_reconciler.add(allocations, draft, total=1000)

    assert result.codes == [ErrorCode.INVALID_ALLOCATION]


def test_add_without_total_is_rejected():
    result = allocation_reconciler.add([], AllocationDraft(filial="SP", centro_custo="ADM", valor=1), total=None)

    assert result.codes == [ErrorCode.MISSING_TOTAL]


def test_add_rejects_duplicate_id(allocations):
    result = allocation_reconciler.add(
        allocations, AllocationDraft(id="a1", filial="BH", centro_custo="TI", valor=10), total=1000
    )

    assert result.codes == [ErrorCode.INVALID_ALLOCATION]


def test_remove_leaves_siblings_untouched(allocations):
    result = allocation_reconciler.remove(allocations, "a1")

    assert result.value == [allocations[1]]
    assert result.value[0].percentual == Decimal("30.00")


def test_remove_unknown_id_is_not_found(allocations):
    result = allocation_reconciler.remove(allocations, "missing")

    assert result.codes == [ErrorCode.ALLOCATION_NOT_FOUND]
    assert result.error.kind == ErrorKind.NOT_FOUND


def test_edit_amount_recomputes_only_that_entry(allocations):
    result = allocation_reconciler.edit_amount(allocations, "a2", 400, total=1000)

    assert result.ok
    assert result.value[1].valor == 400
    assert result.value[1].percentual == Decimal("40.00")
    assert result.value[0] is allocations[0]


def test_edit_amount_cannot_exceed_total(allocations):
    result = allocation_reconciler.edit_amount(allocations, "a2", 401, total=1000)

    assert result.codes == [ErrorCode.INSUFFICIENT_REMAINDER]
    assert result.error.details["distributed"] == 600


def test_summary_reports_remaining_and_percentage(allocations):
    summary = allocation_reconciler.summarize(allocations, 1000)

    assert summary.distributed == 900
    assert summary.remaining == 100
    assert summary.distributed_percentage == Decimal("90.00")
    assert summary.entries == 2


class TestSubmissionGate:

    def test_empty_list_is_valid(self):
        assert allocation_reconciler.check_submission([], 1000, tolerance=1) is None

    def test_mismatch_carries_delta(self, allocations):
        error = allocation_reconciler.check_submission(allocations, 1000, tolerance=1)

        assert error.code == ErrorCode.ALLOCATION_MISMATCH
        assert error.kind == ErrorKind.CONSISTENCY
        assert error.details["delta"] == 100

    def test_within_tolerance_passes(self, allocations):
        assert allocation_reconciler.check_submission(allocations, 901, tolerance=1) is None
