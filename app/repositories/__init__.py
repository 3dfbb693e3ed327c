"""Repository layer modules."""

from app.repositories.document_store import DocumentStore, HttpDocumentStore

__all__ = [
    "DocumentStore",
    "HttpDocumentStore",
]
