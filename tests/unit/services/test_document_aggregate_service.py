from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import DocumentNotFoundError
from app.schemas.document import Allocation, DocumentStatus, Installment
from app.schemas.results import ErrorCode
from app.schemas.summaries import SignatoryRelation
from app.services.document_aggregate_service import (
    DocumentAggregateService,
    installment_totals,
    signing_progress,
    summarize,
    view_for,
)
from tests.factories import TODAY, make_document, make_signatories


@pytest.fixture
def schedule():
    return [
        Installment(id=1, installment_number=1, amount=300, due_date=date(2024, 3, 1), is_paid=True),
        Installment(id=2, installment_number=2, amount=300, due_date=date(2024, 3, 5)),
        Installment(id=3, installment_number=3, amount=200, due_date=date(2024, 3, 10)),
        Installment(id=4, installment_number=4, amount=200, due_date=date(2024, 4, 10)),
    ]


def test_signing_progress_percentage():
    progress = signing_progress(make_signatories("SIGNED", "PENDING", "PENDING"))

    assert progress.signed == 1
    assert progress.pending == 2
    assert progress.total == 3
    assert progress.percentage == Decimal("33.33")


def test_signing_progress_without_signatories():
    assert signing_progress([]).percentage == Decimal("0.00")


def test_installment_totals_split_paid_overdue_and_upcoming(schedule):
    totals = installment_totals(schedule, TODAY, due_soon_days=5)

    assert totals.total == 1000
    assert totals.paid == 300
    assert totals.unpaid == 700
    # due today is not overdue
    assert totals.overdue == 300
    assert totals.overdue_count == 1
    assert totals.upcoming == 400
    assert totals.due_soon == 200
    assert totals.due_soon_count == 1
    assert totals.next_due_date == date(2024, 3, 10)


def test_summary_tracks_all_three_collections(schedule):
    document = make_document(
        make_signatories("SIGNED", "PENDING"),
        installments=schedule,
        allocations=[Allocation(id="a", filial="SP", centro_custo="ADM", valor=250)],
    )

    summary = summarize(document, TODAY)

    assert summary.status == DocumentStatus.IN_PROGRESS
    assert summary.active_signatory.order == 2
    assert summary.signing.percentage == Decimal("50.00")
    assert summary.installments.overdue == 300
    assert summary.allocations.remaining == 750
    assert summary.allocations.distributed_percentage == Decimal("25.00")


def test_summary_is_recomputed_from_the_snapshot():
    document = make_document(make_signatories("PENDING", "PENDING"))
    signed = document.model_copy(update={"signatories": make_signatories("SIGNED", "SIGNED")})

    assert summarize(document, TODAY).status == DocumentStatus.PENDING
    assert summarize(signed, TODAY).status == DocumentStatus.COMPLETED


def test_view_uses_derived_status_over_stored_one():
    document = make_document(make_signatories("SIGNED", "SIGNED"), status=DocumentStatus.PENDING)

    view = view_for(document, "u1", TODAY)

    assert view.document.status == DocumentStatus.COMPLETED
    assert view.relation == SignatoryRelation.ALREADY_SIGNED
    assert not view.can_act


def test_view_for_active_signatory_can_act():
    view = view_for(make_document(make_signatories("SIGNED", "PENDING")), "u2", TODAY)

    assert view.relation == SignatoryRelation.CAN_SIGN
    assert view.can_act
    assert view.relation_message == "It is your turn to sign."


@pytest.mark.asyncio
async def test_get_view_loads_snapshot_from_store(mock_store, fixed_clock):
    mock_store.get.return_value = make_document(make_signatories("PENDING", "PENDING"))
    service = DocumentAggregateService(mock_store, clock=fixed_clock)

    result = await service.get_view("doc-1", "u2")

    assert result.ok
    assert result.value.relation == SignatoryRelation.WAITING_TURN
    mock_store.get.assert_awaited_once_with("doc-1")


@pytest.mark.asyncio
async def test_get_view_unknown_document_is_value_returned(mock_store, fixed_clock):
    mock_store.get.side_effect = DocumentNotFoundError("nope")
    service = DocumentAggregateService(mock_store, clock=fixed_clock)

    result = await service.get_view("nope", "u1")

    assert result.codes == [ErrorCode.DOCUMENT_NOT_FOUND]
