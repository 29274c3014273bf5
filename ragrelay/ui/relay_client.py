"""HTTP client the chat page uses to talk to the relay routes."""

import json
from typing import Any

import httpx


class RelayError(Exception):
    """Raised when a relay call fails or returns an error envelope."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RelayClient:
    """One method per relay route.

    Each call opens a short-lived AsyncClient, so the object can be shared
    by every page without lifecycle management.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(path, **kwargs)
            except httpx.RequestError as e:
                raise RelayError(f"Connection failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise RelayError(message or f"HTTP {response.status_code}", response.status_code)
        return data

    async def query(self, text: str, conversation_id: str | None = None) -> str:
        payload: dict[str, Any] = {"query": text}
        if conversation_id:
            payload["conversation_id"] = conversation_id
        data = await self._post("/query", json=payload)
        return data["response"]

    async def upload(
        self,
        filename: str,
        content: bytes,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        form = {"metadata": json.dumps(metadata)} if metadata else None
        return await self._post("/upload", files={"file": (filename, content)}, data=form)

    async def list_documents(self) -> list[dict[str, Any]]:
        data = await self._post("/list", json={})
        return data["documents"]

    async def delete_document(self, document_id: str) -> bool:
        data = await self._post("/delete", json={"document_id": document_id})
        return bool(data.get("success"))

    async def create_conversation(self) -> dict[str, Any]:
        data = await self._post("/conversation/create", json={})
        return data["data"]

    async def list_conversations(self) -> list[dict[str, Any]]:
        data = await self._post("/conversation/list", json={})
        return data["conversations"]

    async def conversation_messages(self, conversation_id: str) -> list[dict[str, str]]:
        data = await self._post("/conversation/details", json={"conversation_id": conversation_id})
        return data["messages"]

    async def delete_conversation(self, conversation_id: str) -> bool:
        data = await self._post("/conversation/delete", json={"conversation_id": conversation_id})
        return bool(data.get("data"))
