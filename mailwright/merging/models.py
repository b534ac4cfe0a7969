"""Merge input and output models.

Tenant input feeds dynamic taxonomy expansion and placeholder values. The
merged models are created fresh for every deployment request and are a pure
function of the business type selection plus the tenant profile.
"""

import hashlib
import json
from collections.abc import Iterator
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from mailwright.errors import IntentTargetMissingError
from mailwright.naming import PATH_SEPARATOR, canonical_name
from mailwright.schemas.models import (
    AutoReplyPolicy,
    CategoryOverride,
    EscalationRule,
    FormalityLevel,
    RuleAction,
    RuleTrigger,
    Signature,
    TaxonomyNode,
)

# =============================================================================
# Tenant input
# =============================================================================


class TeamMember(BaseModel):
    """Team member routed to a personal manager category."""

    name: str = Field(..., min_length=1)
    email: str | None = None
    role: str | None = None


class Vendor(BaseModel):
    """Supplier the tenant buys from."""

    name: str = Field(..., min_length=1)
    domains: list[str] = Field(default_factory=list)


class TenantProfile(BaseModel):
    """Tenant-supplied values used by dynamic expansion and injection."""

    business_name: str | None = None
    email_domain: str | None = None
    team_members: list[TeamMember] = Field(default_factory=list)
    vendors: list[Vendor] = Field(default_factory=list)
    voice_style: str | None = Field(
        default=None,
        description="Voice profile produced by sent-mail analysis",
    )


# =============================================================================
# Warnings
# =============================================================================

WarningKind = Literal["ambiguous_intent", "color_conflict", "behavior_entry_missing"]


class MergeWarning(BaseModel):
    """Non-fatal condition surfaced to the caller."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    subject: str = Field(..., description="Intent key or category the warning is about")
    message: str


class AmbiguousIntentWarning(MergeWarning):
    """The same intent key maps to different categories across schemas."""

    kind: Literal["ambiguous_intent"] = "ambiguous_intent"
    candidates: list[str] = Field(default_factory=list)
    chosen: str


class ColorConflictWarning(MergeWarning):
    """A category carries different color hints across schemas."""

    kind: Literal["color_conflict"] = "color_conflict"
    colors: list[str] = Field(default_factory=list)
    chosen: str


class BehaviorEntryMissingWarning(MergeWarning):
    """A static category has no behavior override and no fallback applies."""

    kind: Literal["behavior_entry_missing"] = "behavior_entry_missing"


# =============================================================================
# Merged layers
# =============================================================================


class SourcedSpecialRule(BaseModel):
    """Special rule tagged with the business type that contributed it."""

    model_config = ConfigDict(frozen=True)

    name: str
    trigger: RuleTrigger
    action: RuleAction
    source_business_type: str


class MergedClassification(BaseModel):
    business_types: list[str]
    keywords: dict[str, list[str]] = Field(default_factory=dict)
    intent_map: dict[str, str] = Field(default_factory=dict)
    intent_ambiguities: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Intent key -> every candidate category, first is the one chosen",
    )
    escalation_rules: dict[str, EscalationRule] = Field(default_factory=dict)
    prompt: str = ""
    special_rules: list[SourcedSpecialRule] = Field(default_factory=list)
    vendor_domains: dict[str, list[str]] = Field(default_factory=dict)

    def intent_targets(self) -> list[str]:
        """Every category an intent may route to, including ambiguity candidates."""
        targets: list[str] = list(self.intent_map.values())
        for candidates in self.intent_ambiguities.values():
            targets.extend(candidates)
        seen: dict[str, str] = {}
        for target in targets:
            seen.setdefault(canonical_name(target), target)
        return list(seen.values())


class MergedBehavior(BaseModel):
    business_types: list[str]
    voice_tone: str = ""
    formality_level: FormalityLevel = "medium"
    allow_pricing_in_replies: bool = False
    behavior_goals: list[str] = Field(default_factory=list)
    category_overrides: dict[str, CategoryOverride] = Field(default_factory=dict)
    upsell_text: str | None = None
    auto_reply_policy: AutoReplyPolicy = Field(default_factory=AutoReplyPolicy)
    signature: Signature | None = None
    follow_up_phrasing: list[str] = Field(default_factory=list)


class MergedTaxonomy(BaseModel):
    """Merged label/folder tree.

    A node's path is its ancestor names joined by "/", e.g. "Urgent/No Power".
    Paths are the stable keys of the persisted name -> id map.
    """

    business_types: list[str]
    nodes: list[TaxonomyNode] = Field(default_factory=list)

    def walk(self) -> Iterator[tuple[str, TaxonomyNode, int]]:
        """Yield (path, node, depth) top-down, every parent before its children."""
        level: list[tuple[str, TaxonomyNode]] = [(n.name, n) for n in self.nodes]
        depth = 0
        while level:
            next_level: list[tuple[str, TaxonomyNode]] = []
            for path, node in level:
                yield path, node, depth
                next_level.extend(
                    (f"{path}{PATH_SEPARATOR}{child.name}", child) for child in node.children
                )
            level = next_level
            depth += 1

    def paths(self) -> list[str]:
        return [path for path, _, _ in self.walk()]

    def static_names(self) -> set[str]:
        """Canonical names of every node not produced by dynamic expansion."""
        return {node.canonical for _, node, _ in self.walk() if not node.generated}

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def find(self, name: str) -> TaxonomyNode | None:
        """Top-level node by canonical name."""
        key = canonical_name(name)
        return next((n for n in self.nodes if n.canonical == key), None)


class MergedConfiguration(BaseModel):
    """Per-deployment aggregate of the three merged layers."""

    business_types: list[str]
    classification: MergedClassification
    behavior: MergedBehavior
    taxonomy: MergedTaxonomy
    warnings: list[
        AmbiguousIntentWarning | ColorConflictWarning | BehaviorEntryMissingWarning
    ] = Field(default_factory=list)

    def checksum(self) -> str:
        """16-character SHA-256 prefix of the canonical JSON form.

        Two merges of the same business type set and tenant profile produce
        the same checksum regardless of selection order.
        """
        serialized = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(serialized.encode()).hexdigest()[:16]


# =============================================================================
# Validation
# =============================================================================


class IntentTargetViolation(BaseModel):
    """An intent routes to a category missing from the merged taxonomy."""

    model_config = ConfigDict(frozen=True)

    intent: str
    category: str


class ValidationReport(BaseModel):
    violations: list[IntentTargetViolation] = Field(default_factory=list)
    warnings: list[BehaviorEntryMissingWarning] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        """Raise IntentTargetMissingError if any intent target is missing."""
        if self.violations:
            raise IntentTargetMissingError(self.violations)
