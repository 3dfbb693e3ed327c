from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.core.auth import get_current_user
from app.dependencies import get_dashboard_service
from app.schemas.actions import CurrentUser
from app.schemas.responses import ApiResponse
from app.services.dashboard_service import DashboardService
from app.utils.responses import create_api_response

router = APIRouter()


@router.get(
    "/stats",
    response_model=ApiResponse,
    summary="Document counts by status",
    operation_id="get_dashboard_stats",
)
async def get_stats(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
    page_size: int = Query(100, ge=1, le=500, description="Documents fetched per store request"),
) -> ApiResponse:
    stats = await dashboard_service.get_stats(page_size=page_size)
    return create_api_response(data=stats, request=request)


@router.get(
    "/installments",
    response_model=ApiResponse,
    summary="Overdue and due-soon installments",
    operation_id="get_installment_alerts",
)
async def get_installment_alerts(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
    page_size: int = Query(100, ge=1, le=500, description="Documents fetched per store request"),
) -> ApiResponse:
    dashboard = await dashboard_service.get_installment_alerts(page_size=page_size)
    return create_api_response(
        data=dashboard,
        message=f"{len(dashboard.documents)} documents need attention",
        request=request,
    )
