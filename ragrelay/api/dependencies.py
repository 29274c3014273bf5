"""Request-scoped access to the components created by the app factory."""

from fastapi import Request

from ragrelay.api.config import RelayConfig
from ragrelay.gateway.client import RAGGateway
from ragrelay.storage.upload_store import UploadStore


def get_gateway(request: Request) -> RAGGateway:
    return request.app.state.gateway


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store


def get_config(request: Request) -> RelayConfig:
    return request.app.state.config
