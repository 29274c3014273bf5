"""Gateway configuration with environment variable loading.

Pydantic-based configuration for the R2R backend connection.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_RAG_TOOLS = (
    "search_file_descriptions",
    "search_file_knowledge",
    "get_file_content",
)


class GatewayConfig(BaseModel):
    """Configuration for the R2R gateway client.

    Attributes:
        base_url: Base URL of the R2R service.
        timeout: Request timeout in seconds for backend calls.
        page_size: Page size used when listing every document.
        rag_tools: Tools the retrieval agent may use to answer a query.
    """

    model_config = ConfigDict(validate_default=True)

    base_url: str = Field(
        default_factory=lambda: os.getenv("R2R_BASE_URL", "http://localhost:7272"),
        description="R2R service base URL",
    )
    timeout: float = Field(
        default_factory=lambda: os.getenv("R2R_TIMEOUT", "300"),
        gt=0.0,
        description="Backend request timeout in seconds",
    )
    page_size: int = Field(
        default_factory=lambda: os.getenv("R2R_PAGE_SIZE", "100"),
        ge=1,
        le=1000,
        description="Documents fetched per backend list call",
    )
    rag_tools: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RAG_TOOLS),
        description="Retrieval agent tool set",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("R2R_BASE_URL must be an http:// or https:// URL")
        return v.rstrip("/")


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Returns:
        Configured GatewayConfig instance.
    """
    return GatewayConfig()
