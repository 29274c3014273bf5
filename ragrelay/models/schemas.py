from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StringConstraints, field_validator

from ragrelay.gateway.client import DeleteOutcome


# Identifiers and paths: surrounding whitespace is dropped, blank is rejected.
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class IngestRequest(BaseModel):
    """Request payload for ingesting a file already on the server.

    Attributes:
        file_path: Path of the file on the relay host.
        metadata: Optional document metadata.
    """

    file_path: RequiredStr
    metadata: dict[str, Any] | None = None


class DeleteRequest(BaseModel):
    document_id: RequiredStr


class PageRequest(BaseModel):
    """Optional paging controls for list routes.

    Attributes:
        offset: Number of records to skip.
        limit: Page size. Omit to list everything.
    """

    offset: int = Field(0, ge=0)
    limit: int | None = Field(None, ge=1, le=1000)


class ConversationPageRequest(BaseModel):
    """Paging controls for the conversation list. R2R caps one page at 100."""

    offset: int = Field(0, ge=0)
    limit: int = Field(100, ge=1, le=100)


class QueryRequest(BaseModel):
    """Request payload for the retrieval agent.

    Attributes:
        query: User's question.
        conversation_id: Optional conversation to continue.
    """

    query: str = Field(..., min_length=1)
    conversation_id: str | None = None

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: str) -> str:
        """Strip whitespace from the query before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ConversationRequest(BaseModel):
    conversation_id: RequiredStr


class AddMessageRequest(BaseModel):
    """Request payload for appending a message to a conversation.

    Attributes:
        conversation_id: Target conversation.
        message: Message text.
        role: Speaker of the message.
    """

    conversation_id: RequiredStr
    message: str = Field(..., min_length=1)
    role: Literal["user", "assistant", "system"]


class UploadResponse(BaseModel):
    """Response after a file upload was ingested.

    Extra backend registration fields are passed through.
    """

    model_config = {"extra": "allow"}

    success: bool
    documentId: str


class DeleteResponse(BaseModel):
    success: bool
    status: DeleteOutcome


class QueryResponse(BaseModel):
    success: bool = True
    response: str


class ConversationMessage(BaseModel):
    content: str
    role: str


class ConversationDetailsResponse(BaseModel):
    success: bool = True
    messages: list[ConversationMessage]


class ErrorResponse(BaseModel):
    """Error envelope returned by every route.

    Attributes:
        error: Human-readable failure description.
        document_id: Registered document left behind by a partial ingest.
    """

    error: str
    document_id: str | None = None
