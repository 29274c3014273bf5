"""Conversation routes. Conversation IDs are passed through untouched."""

from typing import Any

from fastapi import APIRouter, Depends

from ragrelay.api.dependencies import get_gateway
from ragrelay.gateway.client import RAGGateway
from ragrelay.models.schemas import (
    AddMessageRequest,
    ConversationDetailsResponse,
    ConversationPageRequest,
    ConversationRequest,
    ErrorResponse,
)

router = APIRouter(
    prefix="/conversation",
    tags=["conversations"],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post("/create")
async def create_conversation(gateway: RAGGateway = Depends(get_gateway)) -> dict[str, Any]:
    conversation = await gateway.create_conversation()
    return {"success": True, "data": conversation}


@router.post("/list")
async def list_conversations(
    payload: ConversationPageRequest | None = None,
    gateway: RAGGateway = Depends(get_gateway),
) -> dict[str, Any]:
    page = payload or ConversationPageRequest()
    conversations = await gateway.list_conversations(offset=page.offset, limit=page.limit)
    return {"success": True, "conversations": conversations}


@router.post("/message")
async def add_message(
    payload: AddMessageRequest,
    gateway: RAGGateway = Depends(get_gateway),
) -> dict[str, Any]:
    await gateway.add_message(payload.conversation_id, payload.message, payload.role)
    return {"success": True, "message": "Message added to conversation"}


@router.post("/details", response_model=ConversationDetailsResponse)
async def conversation_details(
    payload: ConversationRequest,
    gateway: RAGGateway = Depends(get_gateway),
) -> ConversationDetailsResponse:
    """Return a conversation's messages as ``{content, role}`` pairs, oldest first."""
    messages = await gateway.get_conversation(payload.conversation_id)
    return ConversationDetailsResponse.model_validate({"messages": messages})


@router.post("/delete")
async def delete_conversation(
    payload: ConversationRequest,
    gateway: RAGGateway = Depends(get_gateway),
) -> dict[str, Any]:
    deleted = await gateway.delete_conversation(payload.conversation_id)
    return {"success": True, "data": deleted}
