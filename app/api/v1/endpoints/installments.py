"""Installment schedule previews.

Stateless: the caller passes the total and, for a recalculation, the
schedule being edited. Nothing is stored.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.core.auth import get_current_user
from app.core.config import settings
from app.schemas.actions import Cadence, CadenceUnit, CurrentUser, RecalculateRequest, SplitRequest
from app.schemas.responses import ApiResponse
from app.services.finance import money_splitter
from app.utils.clock import local_today, utc_now
from app.utils.responses import create_api_response, result_exception

router = APIRouter()


def _default_cadence() -> Cadence:
    return Cadence(
        interval=settings.engine.default_cadence_interval,
        unit=CadenceUnit(settings.engine.default_cadence_unit),
    )


@router.post(
    "/split",
    response_model=ApiResponse,
    summary="Split a total into installments",
    operation_id="split_installments",
)
async def split_installments(
    request: Request,
    body: SplitRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    start_date = body.start_date or local_today(utc_now(), settings.engine.timezone)
    result = money_splitter.regenerate_installments(
        body.total,
        body.count,
        start_date,
        body.cadence or _default_cadence(),
        settings.max_installments,
    )
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(data=result.value, message=f"{len(result.value)} installments", request=request)


@router.post(
    "/recalculate",
    response_model=ApiResponse,
    summary="Recalculate installment amounts, keeping due dates",
    operation_id="recalculate_installments",
)
async def recalculate_installments(
    request: Request,
    body: RecalculateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    start_date = body.start_date or local_today(utc_now(), settings.engine.timezone)
    result = money_splitter.recalculate_amounts(
        body.installments,
        body.total,
        start_date,
        count=body.count,
        cadence=body.cadence or _default_cadence(),
        max_installments=settings.max_installments,
    )
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(data=result.value, message=f"{len(result.value)} installments", request=request)
