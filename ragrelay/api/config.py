"""Relay server configuration with environment variable loading."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()


class RelayConfig(BaseModel):
    """Configuration for the HTTP relay.

    Attributes:
        upload_dir: Directory where uploaded files are stored.
        cors_origin: The single origin allowed to call the relay.
        max_upload_mb: Largest accepted upload in megabytes.
    """

    # Environment values arrive through default_factory and must be validated too.
    model_config = ConfigDict(validate_default=True)

    upload_dir: Path = Field(
        default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"),
        description="Upload storage directory",
    )
    cors_origin: str = Field(
        default_factory=lambda: os.getenv("CORS_ORIGIN", "http://localhost:3000"),
        description="Allowed cross-origin caller",
    )
    max_upload_mb: int = Field(
        default_factory=lambda: os.getenv("MAX_UPLOAD_MB", "10"),
        ge=1,
        le=1024,
        description="Maximum upload size in MB",
    )

    @field_validator("cors_origin")
    @classmethod
    def validate_cors_origin(cls, v: str) -> str:
        """Require a single explicit origin."""
        v = v.strip().rstrip("/")
        if not v or v == "*":
            raise ValueError("CORS_ORIGIN must name a single origin")
        return v

    @property
    def max_upload_size(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def get_relay_config() -> RelayConfig:
    return RelayConfig()
