"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "redis"]


class StorageConfig(BaseModel):
    """Backend for persisted id maps and tenant locks."""

    backend: BackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Redis connection URL (from env var)",
    )
    key_prefix: str = Field(
        default="mailwright",
        description="Prefix for all redis keys",
    )
