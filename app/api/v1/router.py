from fastapi import APIRouter
from app.api.v1.endpoints import allocations, dashboard, documents, health, installments

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(installments.router, prefix="/installments", tags=["Installments"])
api_router.include_router(allocations.router, prefix="/allocations", tags=["Allocations"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])

__all__ = ["api_router"]
