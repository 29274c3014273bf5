"""Document routes: upload, ingest, delete, list and query.

Each route validates its input, makes one gateway call and wraps the
result in the relay's JSON shapes. Failures are raised and rendered into
the ``{error}`` envelope by the handlers registered in the app factory.
"""

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from ragrelay.api.config import RelayConfig
from ragrelay.api.dependencies import get_config, get_gateway, get_upload_store
from ragrelay.gateway.client import DeleteOutcome, RAGGateway
from ragrelay.models.schemas import (
    DeleteRequest,
    DeleteResponse,
    ErrorResponse,
    IngestRequest,
    PageRequest,
    QueryRequest,
    QueryResponse,
    UploadResponse,
)
from ragrelay.storage.upload_store import UploadStore
from ragrelay.storage.uploads import discard, staged_upload, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])

_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _parse_metadata(raw: str | None) -> dict[str, Any] | None:
    """Decode the optional JSON metadata form field.

    Raises:
        HTTPException: 400 if the field is not a JSON object.
    """
    if raw is None or not raw.strip():
        return None

    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid metadata JSON: {e.msg}",
        ) from e

    if not isinstance(metadata, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Metadata must be a JSON object",
        )
    return metadata


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={**_ERRORS, 413: {"model": ErrorResponse}},
)
async def upload_document(
    file: UploadFile,
    metadata: str | None = Form(None),
    gateway: RAGGateway = Depends(get_gateway),
    store: UploadStore = Depends(get_upload_store),
    config: RelayConfig = Depends(get_config),
) -> dict[str, Any]:
    """Upload a file and ingest it into the backend.

    The file is stored as ``<timestamp>-<filename>`` in the upload
    directory and tracked so it can be removed when the document is
    deleted. If ingestion fails the stored file is removed again.

    Args:
        file: The uploaded file (multipart/form-data).
        metadata: Optional JSON object with document metadata.

    Returns:
        Success flag, ``documentId`` and the backend registration fields.

    Raises:
        400: Missing filename, empty file or invalid metadata.
        413: File exceeds the upload size limit.
        500: Backend rejected the document or the file could not be stored.
        503: Backend unreachable.
    """
    doc_metadata = _parse_metadata(metadata)
    content = await file.read()
    filename = validate_upload(file.filename, content, config.max_upload_size)

    async with staged_upload(config.upload_dir, filename, content) as path:
        result = await gateway.ingest(path, doc_metadata)
        store.put(result["documentId"], path)

    logger.info(f"Uploaded {filename} as document {result['documentId']}")
    return {"success": True, **result}


@router.post("/ingest", responses=_ERRORS)
async def ingest_document(
    payload: IngestRequest,
    gateway: RAGGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Ingest a file that already exists on the relay host.

    Such documents are not tracked for cleanup; deleting them leaves the
    file in place.
    """
    if not Path(payload.file_path).is_file():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File not found: {payload.file_path}",
        )

    result = await gateway.ingest(payload.file_path, payload.metadata)
    return {"success": result}


@router.post("/delete", response_model=DeleteResponse, responses=_ERRORS)
async def delete_document(
    payload: DeleteRequest,
    gateway: RAGGateway = Depends(get_gateway),
    store: UploadStore = Depends(get_upload_store),
) -> DeleteResponse | JSONResponse:
    """Delete a document from the backend and remove its uploaded file.

    The backend deletion is authoritative: once it succeeds the tracking
    entry is dropped even if the local file cannot be removed.
    """
    outcome = await gateway.delete_document(payload.document_id)

    if outcome is DeleteOutcome.BACKEND_UNAVAILABLE:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "R2R backend unreachable, document not deleted",
                "success": False,
                "status": outcome.value,
            },
        )

    if outcome is DeleteOutcome.DELETED:
        path = store.remove(payload.document_id)
        if path is not None:
            discard(path)
        else:
            logger.debug(f"No stored upload for document {payload.document_id}")

    return DeleteResponse(success=outcome is DeleteOutcome.DELETED, status=outcome)


@router.post("/list", responses=_ERRORS)
async def list_documents(
    payload: PageRequest | None = None,
    gateway: RAGGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """List backend documents. Returns all of them unless a limit is given."""
    page = payload or PageRequest()
    documents = await gateway.list_documents(offset=page.offset, limit=page.limit)
    return {"documents": documents}


@router.post("/query", response_model=QueryResponse, responses=_ERRORS)
async def query(
    payload: QueryRequest,
    gateway: RAGGateway = Depends(get_gateway),
) -> QueryResponse:
    """Answer a question with the backend's retrieval agent."""
    answer = await gateway.query(payload.query, payload.conversation_id)
    return QueryResponse(response=answer)
