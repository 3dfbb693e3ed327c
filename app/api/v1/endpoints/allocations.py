"""Cost-center allocation previews over a list passed in by the caller."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.core.auth import get_current_user
from app.schemas.actions import (
    AllocationAddRequest,
    AllocationEditRequest,
    AllocationRemoveRequest,
    AllocationSummaryRequest,
    CurrentUser,
)
from app.schemas.responses import ApiResponse
from app.services.finance import allocation_reconciler
from app.utils.responses import create_api_response, result_exception

router = APIRouter()


def _listing(allocations, total):
    return {
        "items": [a.model_dump(mode="json", by_alias=True) for a in allocations],
        "summary": allocation_reconciler.summarize(allocations, total).model_dump(mode="json", by_alias=True),
    }


@router.post("/add", response_model=ApiResponse, operation_id="add_allocation")
async def add_allocation(
    request: Request,
    body: AllocationAddRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = allocation_reconciler.add(body.allocations, body.entry, body.total)
    if not result.ok:
        raise result_exception(result, request)
    return create_api_response(data=_listing(result.value, body.total), message="Allocation added", request=request)


@router.post("/edit", response_model=ApiResponse, operation_id="edit_allocation")
async def edit_allocation(
    request: Request,
    body: AllocationEditRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = allocation_reconciler.edit_amount(body.allocations, body.allocation_id, body.valor, body.total)
    if not result.ok:
        raise result_exception(result, request)
    return create_api_response(data=_listing(result.value, body.total), message="Allocation updated", request=request)


@router.post("/remove", response_model=ApiResponse, operation_id="remove_allocation")
async def remove_allocation(
    request: Request,
    body: AllocationRemoveRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = allocation_reconciler.remove(body.allocations, body.allocation_id)
    if not result.ok:
        raise result_exception(result, request)
    return create_api_response(data=_listing(result.value, body.total), message="Allocation removed", request=request)


@router.post("/summary", response_model=ApiResponse, operation_id="summarize_allocations")
async def summarize_allocations(
    request: Request,
    body: AllocationSummaryRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    return create_api_response(data=_listing(body.allocations, body.total), request=request)
