"""Common API response envelope."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    timestamp: datetime
    request_id: str
    api_version: str = "v1"


class ApiResponse(BaseModel):
    """Envelope returned by every /api/v1 endpoint."""

    status: bool = True
    message: str = "Operation successful"
    data: Dict[str, Any] = Field(default_factory=dict)
    meta: Optional[ResponseMeta] = None


class ErrorDetail(BaseModel):
    """Problem details (RFC 7807) with the engine errors behind the failure."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime
    errors: List[Dict[str, Any]] = Field(default_factory=list)
