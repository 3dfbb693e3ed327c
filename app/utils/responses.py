from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException, Request, status as http_status

from app.schemas.responses import ApiResponse, ErrorDetail, ResponseMeta
from app.schemas.results import EngineError, ErrorKind, Result

# HTTP status for a failed Result, by the kind of its first error
STATUS_BY_KIND = {
    ErrorKind.VALIDATION: http_status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONSISTENCY: http_status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: http_status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
}

TITLE_BY_KIND = {
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.CONSISTENCY: "Consistency Error",
    ErrorKind.CONFLICT: "Stale Snapshot",
    ErrorKind.NOT_FOUND: "Not Found",
}


def _request_id(request: Optional[Request]) -> str:
    if request is not None:
        for attr in ("request_id", "correlation_id"):
            if hasattr(request.state, attr):
                return getattr(request.state, attr)
    return str(uuid4())


def _dump(data: Any) -> Any:
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json", by_alias=True)
    return data


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Returns a dict to be compatible with FastAPI's response_model=dict.
    Pydantic payloads are serialized with their camelCase aliases.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version
    )

    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = _dump(data)
    elif isinstance(data, list):
        data_dict = {"items": [_dump(item) for item in data]}
    elif data is None:
        data_dict = {}
    else:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None,
    errors: Optional[List[EngineError]] = None,
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc),
        errors=[e.to_dict() for e in errors or []],
    )


def result_exception(result: Result, request: Optional[Request] = None) -> HTTPException:
    """HTTPException for a failed ``Result``; all of its errors go in the body."""
    first = result.error
    status_code = STATUS_BY_KIND[first.kind]
    error_detail = create_error_detail(
        title=TITLE_BY_KIND[first.kind],
        status=status_code,
        detail=first.message,
        request=request,
        errors=list(result.errors),
    )
    return HTTPException(status_code=status_code, detail=error_detail.model_dump(mode="json"))
