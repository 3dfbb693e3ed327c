"""Centralized dependency injection for FastAPI application.

Factory functions for the document store collaborator and the services
built on it. Tests replace them through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from app.repositories.document_store import DocumentStore, HttpDocumentStore
from app.services.dashboard_service import DashboardService
from app.services.document_action_service import DocumentActionService
from app.services.document_aggregate_service import DocumentAggregateService
from app.services.submission_service import SubmissionService


async def get_document_store() -> DocumentStore:
    """Get the document store client.

    Returns:
        DocumentStore: HTTP client for the external document store
    """
    return HttpDocumentStore()


async def get_aggregate_service(
    store: Annotated[DocumentStore, Depends(get_document_store)]
) -> DocumentAggregateService:
    return DocumentAggregateService(store)


async def get_action_service(
    store: Annotated[DocumentStore, Depends(get_document_store)]
) -> DocumentActionService:
    return DocumentActionService(store)


async def get_submission_service(
    store: Annotated[DocumentStore, Depends(get_document_store)]
) -> SubmissionService:
    return SubmissionService(store)


async def get_dashboard_service(
    store: Annotated[DocumentStore, Depends(get_document_store)]
) -> DashboardService:
    return DashboardService(store)
