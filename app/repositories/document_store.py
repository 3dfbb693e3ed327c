"""Document store collaborator.

Persistence is owned by an external service. The engine reads snapshots
from it and sends it one intent per action; the store answers with the new
authoritative snapshot.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import DocumentNotFoundError, DocumentStoreError, StaleSnapshotError
from app.schemas.actions import InstallmentPaymentIntent, SigningAction, SigningIntent
from app.schemas.document import Document, EntityId, parse_snapshot
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentStore(ABC):
    """Interface of the document store.

    Implementations raise ``DocumentNotFoundError`` for unknown ids,
    ``StaleSnapshotError`` when an action conflicts with a newer state and
    ``DocumentStoreError`` for anything else that goes wrong.
    """

    @abstractmethod
    async def get(self, document_id: EntityId) -> Document:
        """Fetch the current snapshot of a document."""

    @abstractmethod
    async def update(self, document_id: EntityId, patch: Dict[str, Any]) -> Document:
        """Apply a partial update and return the new snapshot."""

    @abstractmethod
    async def create(self, payload: Dict[str, Any]) -> Document:
        """Create a document from a validated submission."""

    @abstractmethod
    async def list_documents(self, limit: int = 50, offset: int = 0) -> List[Document]:
        """List document snapshots."""

    @abstractmethod
    async def apply_signing(self, intent: SigningIntent) -> Document:
        """Submit a sign or reject intent."""

    @abstractmethod
    async def pay_installment(self, intent: InstallmentPaymentIntent) -> Document:
        """Submit an installment payment intent."""


class HttpDocumentStore(DocumentStore):
    """Document store reached over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.store.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.store.timeout_seconds
        token = api_token if api_token is not None else settings.store.api_token
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def get(self, document_id: EntityId) -> Document:
        data = await self._send("get", f"/documents/{document_id}", document_id=document_id)
        return parse_snapshot(data)

    async def update(self, document_id: EntityId, patch: Dict[str, Any]) -> Document:
        data = await self._send("patch", f"/documents/{document_id}", document_id=document_id, json=patch)
        return parse_snapshot(data)

    async def create(self, payload: Dict[str, Any]) -> Document:
        data = await self._send("post", "/documents/process", json=payload)
        return parse_snapshot(data)

    async def list_documents(self, limit: int = 50, offset: int = 0) -> List[Document]:
        data = await self._send("get", "/documents", params={"limit": limit, "offset": offset})
        items = data.get("items", []) if isinstance(data, dict) else data
        return [parse_snapshot(item) for item in items]

    async def apply_signing(self, intent: SigningIntent) -> Document:
        action = "sign" if intent.action == SigningAction.SIGN else "reject"
        data = await self._send(
            "post",
            f"/documents/{intent.document_id}/{action}",
            document_id=intent.document_id,
            json=intent.model_dump(mode="json", by_alias=True),
        )
        return parse_snapshot(data)

    async def pay_installment(self, intent: InstallmentPaymentIntent) -> Document:
        data = await self._send(
            "post",
            f"/documents/{intent.document_id}/pay/installment/{intent.installment_id}",
            document_id=intent.document_id,
            json=intent.model_dump(mode="json", by_alias=True),
        )
        return parse_snapshot(data)

    async def _send(
        self,
        method: str,
        path: str,
        document_id: Optional[EntityId] = None,
        **kwargs: Any,
    ) -> Any:
        """Issue one request and unwrap the store's response envelope.

        Raises:
            DocumentNotFoundError: On 404 for a document-scoped call
            StaleSnapshotError: On 409
            DocumentStoreError: On any other failure
        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient() as client:
                response = await getattr(client, method)(
                    url,
                    headers=self.headers,
                    timeout=self.timeout,
                    **kwargs,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Document store unreachable: {method.upper()} {url}: {str(e)}", exc_info=True)
            raise DocumentStoreError(f"Document store request failed: {str(e)}", original_error=e) from e

        if response.status_code == 404 and document_id is not None:
            raise DocumentNotFoundError(document_id)
        if response.status_code == 409:
            LOGGER.warning(f"Document store reported a conflict on {method.upper()} {url}")
            raise StaleSnapshotError(document_id, message=response.text or None)
        if response.status_code >= 400:
            LOGGER.error(
                f"Document store error: {response.text}",
                extra={"url": url, "status_code": response.status_code},
            )
            raise DocumentStoreError(
                f"Document store returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        payload = response.json()
        # The store wraps results as {"success": ..., "data": ..., "message": ...}
        if isinstance(payload, dict) and "data" in payload and "id" not in payload:
            return payload["data"]
        return payload
