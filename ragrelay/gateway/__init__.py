"""Gateway to the external R2R retrieval-augmented-generation service.

Responsibilities:
    - Document ingest (register + extract), listing and deletion
    - Agentic retrieval queries with a fixed file tool set
    - Conversation create, list, message, detail and delete
    - Normalizing backend failures into the BackendError family

Holds no state of its own. Maintains clean separation from the HTTP layer.
"""

from ragrelay.gateway.client import (
    BackendError,
    BackendUnavailable,
    DeleteOutcome,
    IngestionError,
    QueryError,
    RAGGateway,
)
from ragrelay.gateway.config import GatewayConfig, get_gateway_config

__all__ = [
    "BackendError",
    "BackendUnavailable",
    "DeleteOutcome",
    "GatewayConfig",
    "IngestionError",
    "QueryError",
    "RAGGateway",
    "get_gateway_config",
]
