from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from app.core.auth import get_current_user
from app.dependencies import get_action_service, get_aggregate_service, get_submission_service
from app.schemas.actions import CurrentUser, DocumentSubmission, PayInstallmentRequest, RejectRequest
from app.schemas.responses import ApiResponse
from app.services.document_action_service import DocumentActionService
from app.services.document_aggregate_service import DocumentAggregateService
from app.services.submission_service import SubmissionService
from app.utils.logging import get_logger
from app.utils.responses import create_api_response, result_exception

LOGGER = get_logger(__name__)

router = APIRouter()


@router.get(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Get a document with its summaries",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    aggregate_service: Annotated[DocumentAggregateService, Depends(get_aggregate_service)],
) -> ApiResponse:
    """Snapshot, derived summaries and the caller's relation to the signing order."""
    result = await aggregate_service.get_view(document_id, current_user.user_id)
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(
        data=result.value,
        message=result.value.relation_message,
        request=request,
    )


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a new document",
    operation_id="submit_document",
)
async def submit_document(
    request: Request,
    submission: DocumentSubmission,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> ApiResponse:
    """Validate the whole submission and create the document."""
    result = await submission_service.submit(submission, current_user)
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(
        data=result.value,
        message="Document submitted for signature",
        request=request,
    )


@router.post(
    "/{document_id}/sign",
    response_model=ApiResponse,
    summary="Sign a document",
    operation_id="sign_document",
)
async def sign_document(
    request: Request,
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    action_service: Annotated[DocumentActionService, Depends(get_action_service)],
) -> ApiResponse:
    result = await action_service.sign(document_id, current_user)
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(data=result.value, message="Document signed", request=request)


@router.post(
    "/{document_id}/reject",
    response_model=ApiResponse,
    summary="Reject a document",
    operation_id="reject_document",
)
async def reject_document(
    request: Request,
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    action_service: Annotated[DocumentActionService, Depends(get_action_service)],
    body: Optional[RejectRequest] = Body(None),
) -> ApiResponse:
    reason = body.reason if body else None
    result = await action_service.reject(document_id, current_user, reason)
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(data=result.value, message="Document rejected", request=request)


@router.post(
    "/{document_id}/installments/{installment_id}/pay",
    response_model=ApiResponse,
    summary="Mark an installment as paid",
    operation_id="pay_installment",
)
async def pay_installment(
    request: Request,
    document_id: str,
    installment_id: str,
    body: PayInstallmentRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    action_service: Annotated[DocumentActionService, Depends(get_action_service)],
) -> ApiResponse:
    """Record a payment; the proof file must already be uploaded."""
    result = await action_service.pay_installment(
        document_id,
        installment_id,
        body.payment_date,
        body.proof_file_id,
        current_user,
    )
    if not result.ok:
        raise result_exception(result, request)

    return create_api_response(data=result.value, message="Installment paid", request=request)
