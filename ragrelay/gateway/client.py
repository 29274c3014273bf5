"""R2R gateway: one adapter method per backend operation.

Every method is a single round trip to the R2R service (document ingest is
two: register, then extract). Backend response objects are reshaped into
plain dicts and lists, and client-library failures are normalized into the
BackendError family so the HTTP layer never sees R2R or httpx exceptions.

Ingest partial failure: when registration succeeds and extraction fails,
the document stays registered in the backend. The raised IngestionError
carries its document_id so the caller can show or delete it.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel
from r2r import R2RAsyncClient, R2RException

from ragrelay.gateway.config import GatewayConfig, get_gateway_config

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (R2RException, httpx.HTTPError, OSError)


class BackendError(Exception):
    """Raised when the R2R backend rejects or fails a call."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        document_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.document_id = document_id


class BackendUnavailable(BackendError):
    """Raised when the R2R backend cannot be reached at all."""


class IngestionError(BackendError):
    """Raised when document registration or extraction fails."""


class QueryError(BackendError):
    """Raised when the retrieval agent fails to answer."""


class DeleteOutcome(str, Enum):
    """Result of a document deletion."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    REJECTED = "rejected"


def _is_connection_failure(exc: BaseException | None) -> bool:
    # The client library wraps transport errors, so walk the cause chain.
    while exc is not None:
        if isinstance(exc, (httpx.RequestError, ConnectionError)):
            return True
        exc = exc.__cause__
    return False


def _translate(
    exc: BaseException,
    error_cls: type[BackendError],
    action: str,
) -> BackendError:
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    if _is_connection_failure(exc):
        return BackendUnavailable(f"R2R backend unreachable while trying to {action}: {message}")
    return error_cls(message, status_code=getattr(exc, "status_code", None))


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _as_dict(obj: Any) -> dict[str, Any]:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return dict(obj)
    return dict(vars(obj))


def _role_name(role: Any) -> str:
    return str(getattr(role, "value", role))


class RAGGateway:
    """Adapter over R2R's async client.

    Wraps R2RAsyncClient with:
    - Stable local result shapes (dicts, lists, strings, outcomes)
    - Uniform BackendError family for failures
    - Full-listing pagination for documents
    """

    def __init__(
        self,
        client: Any | None = None,
        config: GatewayConfig | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Object exposing the R2R client surface. A new
                R2RAsyncClient for the configured base URL if not provided.
            config: Optional gateway configuration.
                Loads from environment if not provided.
        """
        self._config = config or get_gateway_config()
        self._client = client or R2RAsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
        )

    async def _call(
        self,
        action: str,
        request: Any,
        error_cls: type[BackendError] = BackendError,
    ) -> Any:
        try:
            return await request
        except _BACKEND_ERRORS as e:
            logger.error(f"R2R call failed ({action}): {e}")
            raise _translate(e, error_cls, action) from e

    # --- Documents ---

    async def ingest(
        self,
        file_path: str | Path,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Register a file with the backend and trigger its extraction.

        Args:
            file_path: Path of the file to ingest.
            metadata: Optional document metadata.

        Returns:
            Registration fields with the assigned ``documentId``.

        Raises:
            IngestionError: If either step is rejected. When extraction
                fails, ``document_id`` names the registered document.
            BackendUnavailable: If the backend cannot be reached.
        """
        kwargs: dict[str, Any] = {"file_path": str(file_path)}
        if metadata:
            kwargs["metadata"] = metadata
        else:
            logger.info(f"Ingesting {file_path} without metadata")

        response = await self._call(
            "register document",
            self._client.documents.create(**kwargs),
            IngestionError,
        )
        registration = _as_dict(response.results)
        document_id = str(registration.pop("document_id"))
        logger.info(f"Registered document {document_id} from {file_path}")

        try:
            await self._call(
                "extract document",
                self._client.documents.extract(id=document_id),
                IngestionError,
            )
        except BackendError as e:
            e.document_id = document_id
            logger.warning(f"Document {document_id} registered but extraction failed")
            raise

        logger.info(f"Extraction started for document {document_id}")
        return {"documentId": document_id, **registration}

    async def delete_document(self, document_id: str) -> DeleteOutcome:
        """Delete a document from the backend.

        Never raises; every failure is reported as an outcome.

        Args:
            document_id: Backend document identifier.

        Returns:
            DeleteOutcome describing what happened.
        """
        try:
            response = await self._client.documents.delete(id=document_id)
        except Exception as e:
            if _is_connection_failure(e):
                outcome = DeleteOutcome.BACKEND_UNAVAILABLE
            elif getattr(e, "status_code", None) == 404:
                outcome = DeleteOutcome.NOT_FOUND
            else:
                outcome = DeleteOutcome.REJECTED
            logger.warning(f"Deleting document {document_id} failed ({outcome.value}): {e}")
            return outcome

        if _field(response.results, "success", False):
            logger.info(f"Deleted document {document_id}")
            return DeleteOutcome.DELETED
        logger.warning(f"Backend refused to delete document {document_id}")
        return DeleteOutcome.REJECTED

    async def _document_page(self, offset: int, limit: int) -> tuple[list[dict[str, Any]], int | None]:
        response = await self._call(
            "list documents",
            self._client.documents.list(offset=offset, limit=limit),
        )
        documents = [_as_dict(doc) for doc in response.results]
        return documents, getattr(response, "total_entries", None)

    async def list_documents(
        self,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List documents known to the backend.

        Args:
            offset: Number of documents to skip.
            limit: Page size. None returns every document from ``offset`` on.

        Returns:
            Backend document records, in backend order.
        """
        if limit is not None:
            documents, _ = await self._document_page(offset, limit)
            return documents

        page_size = self._config.page_size
        documents: list[dict[str, Any]] = []
        while True:
            page, total = await self._document_page(offset + len(documents), page_size)
            documents.extend(page)
            if len(page) < page_size:
                break
            if total is not None and offset + len(documents) >= total:
                break
        return documents

    # --- Retrieval ---

    async def query(self, text: str, conversation_id: str | None = None) -> str:
        """Ask the retrieval agent a question.

        Args:
            text: The user's question.
            conversation_id: Optional conversation to continue.

        Returns:
            Content of the agent's first response message.

        Raises:
            QueryError: If the agent fails or returns nothing.
            BackendUnavailable: If the backend cannot be reached.
        """
        kwargs: dict[str, Any] = {
            "message": {"role": "user", "content": text},
            "rag_tools": list(self._config.rag_tools),
        }
        if conversation_id:
            kwargs["conversation_id"] = conversation_id

        response = await self._call("query", self._client.retrieval.agent(**kwargs), QueryError)
        messages = _field(response.results, "messages") or []
        if not messages:
            raise QueryError("R2R agent returned no response")
        return _field(messages[0], "content") or ""

    # --- Conversations ---

    async def create_conversation(self) -> dict[str, Any]:
        response = await self._call("create conversation", self._client.conversations.create())
        conversation = _as_dict(response.results)
        logger.info(f"Created conversation {conversation.get('id')}")
        return conversation

    async def list_conversations(self, offset: int = 0, limit: int = 100) -> list[dict[str, Any]]:
        response = await self._call(
            "list conversations",
            self._client.conversations.list(offset=offset, limit=limit),
        )
        return [_as_dict(conversation) for conversation in response.results]

    async def add_message(self, conversation_id: str, content: str, role: str) -> dict[str, Any]:
        response = await self._call(
            "add message",
            self._client.conversations.add_message(id=conversation_id, content=content, role=role),
        )
        return _as_dict(response.results)

    async def get_conversation(self, conversation_id: str) -> list[dict[str, str]]:
        """Fetch a conversation's messages.

        Returns:
            ``{content, role}`` pairs in the order the backend delivered them.
        """
        response = await self._call(
            "retrieve conversation",
            self._client.conversations.retrieve(id=conversation_id),
        )
        messages = []
        for entry in response.results:
            message = _field(entry, "message", entry)
            messages.append({
                "content": _field(message, "content") or "",
                "role": _role_name(_field(message, "role")),
            })
        return messages

    async def delete_conversation(self, conversation_id: str) -> bool:
        response = await self._call(
            "delete conversation",
            self._client.conversations.delete(id=conversation_id),
        )
        deleted = bool(_field(response.results, "success", False))
        logger.info(f"Deleted conversation {conversation_id}: {deleted}")
        return deleted

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
