"""Reconciliation and injection configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class ReconciliationConfig(BaseModel):
    """Retry, concurrency, and timeout settings for taxonomy reconciliation."""

    max_attempts: int = Field(
        default=4,
        ge=1,
        le=10,
        description="Maximum attempts per provider call (including the first)",
    )
    backoff_base_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Initial backoff before the first retry",
    )
    backoff_max_seconds: float = Field(
        default=8.0,
        ge=0.0,
        description="Upper bound on a single backoff delay",
    )
    max_concurrency: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Concurrent node creations among siblings",
    )
    lock_blocking_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for the per-tenant lock",
    )
    lock_timeout: int = Field(
        default=300,
        gt=0,
        description="Seconds before a distributed tenant lock auto-expires",
    )
    default_timeout_seconds: float | None = Field(
        default=120.0,
        gt=0,
        description="Run deadline when the caller supplies none (None = unbounded)",
    )


class InjectionConfig(BaseModel):
    """Placeholder injection settings."""

    empty_marker: str = Field(
        default="__UNSET__",
        description="Value substituted for placeholders with no merged value",
    )
    escape: Literal["none", "json"] = Field(
        default="json",
        description="Escaping applied to values before substitution",
    )
