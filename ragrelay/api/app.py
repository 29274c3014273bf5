"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error envelope handlers and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ragrelay.api.config import RelayConfig, get_relay_config
from ragrelay.api.conversations import router as conversations_router
from ragrelay.api.routes import router as documents_router
from ragrelay.gateway.client import BackendError, BackendUnavailable, RAGGateway
from ragrelay.storage.upload_store import UploadStore
from ragrelay.storage.uploads import FileSystemError, UploadRejected

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting R2R relay API...")
    yield
    # Shutdown
    logger.info("Shutting down R2R relay API...")
    await app.state.gateway.aclose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    logger.warning(f"Rejected {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _upload_rejected_handler(request: Request, exc: UploadRejected) -> JSONResponse:
    status_code = (
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if exc.too_large else status.HTTP_400_BAD_REQUEST
    )
    logger.warning(f"Upload rejected: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def _backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(exc, BackendUnavailable)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    content = {"error": exc.message}
    if exc.document_id:
        content["document_id"] = exc.document_id
    return JSONResponse(status_code=status_code, content=content)


async def _file_system_error_handler(request: Request, exc: FileSystemError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc) or "Internal server error"},
    )


def create_app(
    gateway: RAGGateway | None = None,
    upload_store: UploadStore | None = None,
    config: RelayConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        gateway: R2R gateway. Built from environment if not provided.
        upload_store: Upload bookkeeping. A fresh empty store if not provided.
        config: Relay configuration. Loads from environment if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_relay_config()

    application = FastAPI(
        title="R2R Relay API",
        description=(
            "Relay between the chat UI and an R2R retrieval-augmented-generation "
            "service. Uploads and ingests documents, answers questions with the "
            "R2R agent and manages conversations."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.config = config
    application.state.gateway = gateway or RAGGateway()
    application.state.upload_store = upload_store if upload_store is not None else UploadStore()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[config.cors_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    application.add_exception_handler(RequestValidationError, _request_validation_handler)
    application.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    application.add_exception_handler(UploadRejected, _upload_rejected_handler)
    application.add_exception_handler(BackendError, _backend_error_handler)
    application.add_exception_handler(FileSystemError, _file_system_error_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)

    application.include_router(documents_router)
    application.include_router(conversations_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "r2r-relay"}

    return application


app = create_app()
