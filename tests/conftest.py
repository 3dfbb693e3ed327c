"""Pytest configuration and shared fixtures."""

import os
from typing import Dict
from unittest.mock import AsyncMock

import pytest

# Set required environment variables for testing BEFORE importing app
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-0123456789abcdef-0123")
os.environ.setdefault("DOCUMENT_STORE_URL", "http://document-store.test")
os.environ.setdefault("ENGINE_TIMEZONE", "UTC")

import jwt
from fastapi.testclient import TestClient

from app.main import app
from app.repositories.document_store import DocumentStore
from app.schemas.document import Document
from tests.factories import NOW, make_document, make_signatories


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def mock_store() -> AsyncMock:
    """Create mock document store.

    Returns:
        AsyncMock: Mocked store whose coroutine methods are configured per test
    """
    return AsyncMock(spec=DocumentStore)


@pytest.fixture
def fixed_clock():
    return lambda: NOW


@pytest.fixture
def four_signatory_document() -> Document:
    """Total 1000, four pending signatories ordered 1-4 (users u1..u4)."""
    return make_document(
        signatories=make_signatories("PENDING", "PENDING", "PENDING", "PENDING"),
        total=1000,
    )


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user id."""
    def _headers(user_id: str = "u1") -> Dict[str, str]:
        token = jwt.encode({"sub": user_id}, os.environ["JWT_SECRET"], algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}
    return _headers
