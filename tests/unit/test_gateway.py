"""Unit tests for RAGGateway against the in-memory fake backend."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_check as check
from r2r import R2RException

from ragrelay.gateway.client import (
    BackendError,
    BackendUnavailable,
    DeleteOutcome,
    IngestionError,
    QueryError,
    RAGGateway,
)
from ragrelay.gateway.config import DEFAULT_RAG_TOOLS, GatewayConfig
from tests.fake_r2r import FakeR2RClient


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "guide.md"
    path.write_text("# How to use X\nRun it.")
    return path


class TestIngest:
    """Tests for the register-then-extract protocol."""

    async def test_returns_document_id_and_registration_fields(
        self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path
    ) -> None:
        result = await gateway.ingest(sample_file)

        check.is_in(result["documentId"], backend.documents_store)
        check.equal(result["message"], "Document created and ingested successfully.")
        check.is_not_in("document_id", result)
        check.equal(backend.called("documents.extract"), [{"id": result["documentId"]}])

    async def test_metadata_forwarded(
        self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path
    ) -> None:
        await gateway.ingest(sample_file, {"author": "ops"})

        assert backend.called("documents.create") == [
            {"file_path": str(sample_file), "metadata": {"author": "ops"}}
        ]

    async def test_registration_failure_raises_ingestion_error(
        self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path
    ) -> None:
        backend.fail_register = True

        with pytest.raises(IngestionError, match="Unsupported file type") as exc_info:
            await gateway.ingest(sample_file)

        check.is_none(exc_info.value.document_id)
        check.equal(exc_info.value.status_code, 400)
        check.equal(backend.called("documents.extract"), [])

    async def test_extraction_failure_leaves_document_registered(
        self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path
    ) -> None:
        """Failed extraction is reported with the ID of the registered document."""
        backend.fail_extract = True

        with pytest.raises(IngestionError, match="Extraction failed") as exc_info:
            await gateway.ingest(sample_file)

        document_id = exc_info.value.document_id
        assert document_id is not None
        listed = await gateway.list_documents()
        assert [doc["id"] for doc in listed] == [document_id]

    async def test_unreachable_backend_raises_backend_unavailable(
        self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path
    ) -> None:
        backend.unavailable = True

        with pytest.raises(BackendUnavailable, match="unreachable"):
            await gateway.ingest(sample_file)


class TestDeleteDocument:
    """Tests for deletion outcomes. delete_document never raises."""

    async def test_deleted(self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path) -> None:
        result = await gateway.ingest(sample_file)

        assert await gateway.delete_document(result["documentId"]) is DeleteOutcome.DELETED
        assert backend.documents_store == {}

    async def test_not_found(self, gateway: RAGGateway) -> None:
        assert await gateway.delete_document("missing") is DeleteOutcome.NOT_FOUND

    async def test_backend_unavailable(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        backend.unavailable = True

        assert await gateway.delete_document("any") is DeleteOutcome.BACKEND_UNAVAILABLE

    async def test_refused(self, gateway: RAGGateway, backend: FakeR2RClient, sample_file: Path) -> None:
        result = await gateway.ingest(sample_file)
        backend.refuse_delete = True

        assert await gateway.delete_document(result["documentId"]) is DeleteOutcome.REJECTED
        assert result["documentId"] in backend.documents_store

    async def test_raw_transport_error_is_unavailable(self) -> None:
        client = MagicMock()
        client.documents.delete = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
        gateway = RAGGateway(client=client, config=GatewayConfig())

        assert await gateway.delete_document("doc") is DeleteOutcome.BACKEND_UNAVAILABLE

    async def test_unexpected_error_is_rejected(self) -> None:
        client = MagicMock()
        client.documents.delete = AsyncMock(side_effect=ValueError("bad id"))
        gateway = RAGGateway(client=client, config=GatewayConfig())

        assert await gateway.delete_document("doc") is DeleteOutcome.REJECTED


class TestListDocuments:
    """Tests for document listing and pagination."""

    async def _ingest(self, gateway: RAGGateway, tmp_path: Path, count: int) -> list[str]:
        ids = []
        for i in range(count):
            path = tmp_path / f"doc-{i}.txt"
            path.write_text(f"document {i}")
            ids.append((await gateway.ingest(path))["documentId"])
        return ids

    async def test_lists_every_document_across_pages(
        self, gateway: RAGGateway, backend: FakeR2RClient, tmp_path: Path
    ) -> None:
        """Without a limit, all pages are fetched (page size is 2 here)."""
        ids = await self._ingest(gateway, tmp_path, 5)

        documents = await gateway.list_documents()

        check.equal([doc["id"] for doc in documents], ids)
        check.equal(
            backend.called("documents.list"),
            [
                {"offset": 0, "limit": 2},
                {"offset": 2, "limit": 2},
                {"offset": 4, "limit": 2},
            ],
        )

    async def test_stops_on_total_entries(
        self, gateway: RAGGateway, backend: FakeR2RClient, tmp_path: Path
    ) -> None:
        await self._ingest(gateway, tmp_path, 4)

        documents = await gateway.list_documents()

        check.equal(len(documents), 4)
        check.equal(len(backend.called("documents.list")), 2)

    async def test_explicit_page(self, gateway: RAGGateway, backend: FakeR2RClient, tmp_path: Path) -> None:
        ids = await self._ingest(gateway, tmp_path, 3)

        documents = await gateway.list_documents(offset=1, limit=1)

        check.equal([doc["id"] for doc in documents], [ids[1]])
        check.equal(backend.called("documents.list"), [{"offset": 1, "limit": 1}])

    async def test_empty_backend(self, gateway: RAGGateway) -> None:
        assert await gateway.list_documents() == []

    async def test_backend_failure_propagates(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        backend.unavailable = True

        with pytest.raises(BackendUnavailable):
            await gateway.list_documents()


class TestQuery:
    """Tests for agentic retrieval queries."""

    async def test_returns_first_message_content(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        backend.agent_reply = "Use X by running it."

        answer = await gateway.query("How to use X?")

        assert answer == "Use X by running it."

    async def test_sends_fixed_tool_set(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        await gateway.query("How to use X?", conversation_id="conv-1")

        call = backend.called("retrieval.agent")[0]
        check.equal(call["message"], {"role": "user", "content": "How to use X?"})
        check.equal(call["rag_tools"], list(DEFAULT_RAG_TOOLS))
        check.equal(call["conversation_id"], "conv-1")

    async def test_empty_reply_raises_query_error(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        backend.agent_reply = None

        with pytest.raises(QueryError, match="no response"):
            await gateway.query("anything")

    async def test_backend_rejection_raises_query_error(self) -> None:
        client = MagicMock()
        client.retrieval.agent = AsyncMock(
            side_effect=R2RException(message="LLM provider error", status_code=500)
        )
        gateway = RAGGateway(client=client, config=GatewayConfig())

        with pytest.raises(QueryError, match="LLM provider error"):
            await gateway.query("anything")

    async def test_unreachable_backend(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        backend.unavailable = True

        with pytest.raises(BackendUnavailable):
            await gateway.query("How to use X?")


class TestConversations:
    """Tests for conversation pass-through operations."""

    async def test_create_and_list(self, gateway: RAGGateway) -> None:
        created = await gateway.create_conversation()

        conversations = await gateway.list_conversations()

        assert [c["id"] for c in conversations] == [created["id"]]

    async def test_get_conversation_keeps_backend_order(self, gateway: RAGGateway) -> None:
        """Messages come back oldest first with only content and role."""
        conversation_id = (await gateway.create_conversation())["id"]
        await gateway.add_message(conversation_id, "hi", "user")
        await gateway.add_message(conversation_id, "hello!", "assistant")
        await gateway.add_message(conversation_id, "bye", "user")

        messages = await gateway.get_conversation(conversation_id)

        assert messages == [
            {"content": "hi", "role": "user"},
            {"content": "hello!", "role": "assistant"},
            {"content": "bye", "role": "user"},
        ]

    async def test_get_conversation_unwraps_enum_roles(self) -> None:
        from enum import Enum

        class MessageType(str, Enum):
            USER = "user"

        client = MagicMock()
        entry = MagicMock()
        entry.message.role = MessageType.USER
        entry.message.content = None
        client.conversations.retrieve = AsyncMock(return_value=MagicMock(results=[entry]))
        gateway = RAGGateway(client=client, config=GatewayConfig())

        assert await gateway.get_conversation("c") == [{"content": "", "role": "user"}]

    async def test_add_message_to_unknown_conversation(self, gateway: RAGGateway) -> None:
        with pytest.raises(BackendError, match="Conversation not found") as exc_info:
            await gateway.add_message("missing", "hi", "user")

        assert exc_info.value.status_code == 404

    async def test_delete_conversation(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        conversation_id = (await gateway.create_conversation())["id"]

        assert await gateway.delete_conversation(conversation_id) is True
        assert backend.conversations_store == {}


class TestGatewayLifecycle:
    """Tests for client construction and shutdown."""

    def test_builds_client_from_config(self) -> None:
        config = GatewayConfig(base_url="http://r2r.internal:7272/", timeout=30)

        with patch("ragrelay.gateway.client.R2RAsyncClient") as mock_client:
            RAGGateway(config=config)

        mock_client.assert_called_once_with(base_url="http://r2r.internal:7272", timeout=30.0)

    async def test_aclose_closes_client(self, gateway: RAGGateway, backend: FakeR2RClient) -> None:
        await gateway.aclose()

        assert backend.closed is True
