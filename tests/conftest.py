"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - backend: In-memory fake of the R2R client
    - gateway: RAGGateway wired to the fake backend
    - upload_store: Fresh UploadStore per test
    - relay_config: RelayConfig with a temporary upload directory
    - async_client: HTTPX client for the relay app, backed by all of the above
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ragrelay.api.app import create_app
from ragrelay.api.config import RelayConfig
from ragrelay.gateway.client import RAGGateway
from ragrelay.gateway.config import GatewayConfig
from ragrelay.storage.upload_store import UploadStore
from tests.fake_r2r import FakeR2RClient

TEST_ORIGIN = "http://localhost:3000"


@pytest.fixture
def backend() -> FakeR2RClient:
    """Return a fresh fake R2R backend."""
    return FakeR2RClient()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(base_url="http://r2r.test:7272", page_size=2)


@pytest.fixture
def gateway(backend: FakeR2RClient, gateway_config: GatewayConfig) -> RAGGateway:
    """Return a gateway talking to the fake backend.

    The small page size makes full listings span several backend calls.
    """
    return RAGGateway(client=backend, config=gateway_config)


@pytest.fixture
def upload_store() -> UploadStore:
    return UploadStore()


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Return the upload directory used by the relay under test."""
    return tmp_path / "uploads"


@pytest.fixture
def relay_config(upload_dir: Path) -> RelayConfig:
    return RelayConfig(upload_dir=upload_dir, cors_origin=TEST_ORIGIN, max_upload_mb=1)


@pytest.fixture
def relay_app(
    gateway: RAGGateway,
    upload_store: UploadStore,
    relay_config: RelayConfig,
) -> FastAPI:
    return create_app(gateway=gateway, upload_store=upload_store, config=relay_config)


@pytest.fixture
async def async_client(relay_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for relay testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=relay_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
