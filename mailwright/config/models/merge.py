"""Merge phase configuration models."""

from pathlib import Path

from pydantic import BaseModel, Field


class MergeConfig(BaseModel):
    """Caps and defaults applied by the schema mergers."""

    max_tone_descriptors: int = Field(
        default=4,
        ge=1,
        description="Maximum tone descriptors joined into the merged voice tone",
    )
    max_override_examples: int = Field(
        default=3,
        ge=1,
        description="Maximum custom-language examples kept per category override",
    )
    max_follow_up_phrases: int = Field(
        default=6,
        ge=0,
        description="Maximum preferred follow-up phrases kept after merge",
    )
    default_min_confidence: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Auto-reply confidence used when no schema defines a policy",
    )
    fallback_category: str = Field(
        default="default",
        description="Category override name acting as the generic behavior fallback",
    )


class SchemaConfig(BaseModel):
    """Schema document source configuration."""

    schema_dir: Path | None = Field(
        default=None,
        description="Directory of <layer>/<slug>.json documents (bundled data if unset)",
    )
