"""Reconciliation records.

A run diffs the merged taxonomy against a point-in-time snapshot of the
remote labels/folders. Its result is the one artifact that outlives a
deployment: it is persisted per tenant and extended by later runs.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class NodeState(str, Enum):
    """Per-node reconciliation state.

    unchecked -> checked -> matched | created | failed. Descendants of a
    failed node are never attempted and end as skipped.
    """

    UNCHECKED = "unchecked"
    CHECKED = "checked"
    MATCHED = "matched"
    CREATED = "created"
    FAILED = "failed"
    SKIPPED = "skipped"


class RemoteNode(BaseModel):
    """One entry of the remote snapshot, in provider-neutral shape."""

    id: str
    name: str
    parent_id: str | None = None


class NodeOutcome(BaseModel):
    """A taxonomy path resolved to a remote id."""

    name: str = Field(..., description="Taxonomy path, e.g. Urgent/No Power")
    id: str


class NodeFailure(BaseModel):
    name: str = Field(..., description="Taxonomy path")
    reason: str
    retriable: bool = False


class ReconciliationResult(BaseModel):
    tenant_id: str
    provider: str = ""
    matched: list[NodeOutcome] = Field(default_factory=list)
    created: list[NodeOutcome] = Field(default_factory=list)
    failed: list[NodeFailure] = Field(default_factory=list)
    skipped: list[NodeFailure] = Field(default_factory=list)
    timed_out: bool = False
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def name_to_id(self) -> dict[str, str]:
        """Path -> remote id for every matched or created node."""
        return {o.name: o.id for o in [*self.matched, *self.created]}

    @property
    def complete(self) -> bool:
        return not (self.failed or self.skipped or self.timed_out)

    def summary(self) -> dict[str, int | bool]:
        return {
            "matched": len(self.matched),
            "created": len(self.created),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "timed_out": self.timed_out,
        }
