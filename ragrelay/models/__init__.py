"""Pydantic models for relay requests and responses.

Provides validation at the HTTP boundary and automatic OpenAPI documentation.

Models:
    - IngestRequest / DeleteRequest / PageRequest: Document routes
    - QueryRequest / QueryResponse: Retrieval agent route
    - ConversationRequest / ConversationPageRequest / AddMessageRequest: Conversation routes
    - UploadResponse / DeleteResponse / ConversationDetailsResponse: Replies
    - ErrorResponse: The ``{error}`` envelope
"""

from ragrelay.models.schemas import (
    AddMessageRequest,
    ConversationDetailsResponse,
    ConversationMessage,
    ConversationPageRequest,
    ConversationRequest,
    DeleteRequest,
    DeleteResponse,
    ErrorResponse,
    IngestRequest,
    PageRequest,
    QueryRequest,
    QueryResponse,
    UploadResponse,
)

__all__ = [
    "AddMessageRequest",
    "ConversationDetailsResponse",
    "ConversationMessage",
    "ConversationPageRequest",
    "ConversationRequest",
    "DeleteRequest",
    "DeleteResponse",
    "ErrorResponse",
    "IngestRequest",
    "PageRequest",
    "QueryRequest",
    "QueryResponse",
    "UploadResponse",
]
