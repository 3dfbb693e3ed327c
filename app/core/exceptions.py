"""Custom exception hierarchy.

These are raised only for conditions the engine cannot express as a
business outcome: a broken collaborator, a snapshot that does not match the
schema, a misconfigured deployment. Expected rejections (out-of-turn
signing, allocation overflow, sum mismatches) travel as ``Result`` values,
see ``app.schemas.results``.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentStoreError(AppError):
    """Raised when the document store cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Exception = None,
    ):
        super().__init__(message, original_error=original_error)
        self.status_code = status_code


class DocumentNotFoundError(DocumentStoreError):
    """Raised when a document is not found."""

    def __init__(self, document_id: Any):
        super().__init__(f"Document {document_id} not found", status_code=404)
        self.document_id = document_id


class StaleSnapshotError(DocumentStoreError):
    """Raised when the store rejects an action because the snapshot changed underneath it."""

    def __init__(self, document_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Document {document_id} changed since it was read",
            status_code=409,
        )
        self.document_id = document_id


class MalformedSnapshotError(AppError):
    """Raised when a document snapshot is missing required fields or breaks its structural invariants."""
    pass
