"""Schema document models for the three business-type layers.

A business type is described by three independently authored documents:
classification (keywords, intents, escalation), behavior (voice, goals,
per-category language), and taxonomy (label/folder tree). Each document
carries a `layer` tag so a single loader can validate any of them into the
right model before it enters the merge pipeline.
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from mailwright.naming import canonical_name


class SchemaLayer(str, Enum):
    """The three independently merged schema layers."""

    CLASSIFICATION = "classification"
    BEHAVIOR = "behavior"
    TAXONOMY = "taxonomy"


DynamicSource = Literal["team_members", "vendors"]
FormalityLevel = Literal["casual", "medium", "professional"]


# =============================================================================
# Classification layer
# =============================================================================


class EscalationRule(BaseModel):
    """Escalation commitment for one escalation type (urgent, warranty...)."""

    model_config = ConfigDict(frozen=True)

    sla_minutes: int = Field(..., gt=0, description="Maximum minutes before escalation")
    notify: list[str] = Field(default_factory=list, description="Roles or addresses to notify")
    auto_reply: bool = Field(default=True, description="Whether an auto-reply may be sent")


class RuleTrigger(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: list[str] = Field(default_factory=list, description="Keywords found in body")
    sender_domains: list[str] = Field(default_factory=list, description="Sender domains")


class RuleAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    force_category: str | None = Field(default=None, description="Category forced on match")
    priority: Literal["low", "normal", "high", "critical"] | None = None
    skip_auto_reply: bool = False


class SpecialRule(BaseModel):
    """Declarative override applied after classification."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    trigger: RuleTrigger
    action: RuleAction


class VendorDomain(BaseModel):
    """Known supplier and the sender domains identifying it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    domains: list[str] = Field(default_factory=list)


class ClassificationSchema(BaseModel):
    """AI classification document for one business type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    layer: Literal["classification"] = "classification"
    business_type: str = Field(..., min_length=1)
    schema_version: str = "1.0"
    keywords: dict[str, list[str]] = Field(default_factory=dict)
    intent_map: dict[str, str] = Field(default_factory=dict)
    escalation_rules: dict[str, EscalationRule] = Field(default_factory=dict)
    prompt_fragments: list[str] = Field(default_factory=list)
    special_rules: list[SpecialRule] = Field(default_factory=list)
    domain_detection: list[VendorDomain] = Field(default_factory=list)


# =============================================================================
# Behavior layer
# =============================================================================


class VoiceProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    tone: str = Field(..., min_length=1)
    formality_level: FormalityLevel = "medium"
    allow_pricing_in_replies: bool = False


class CategoryOverride(BaseModel):
    """Custom reply language for one category."""

    model_config = ConfigDict(frozen=True)

    priority_level: int = Field(default=3, ge=1, description="1 = highest priority")
    custom_language: list[str] = Field(default_factory=list)


class AutoReplyPolicy(BaseModel):
    """Which categories may be answered automatically, and how confidently."""

    model_config = ConfigDict(frozen=True)

    enabled_categories: list[str] = Field(default_factory=list)
    min_confidence: float = Field(default=0.75, ge=0.0, le=1.0)
    exclusions: list[str] = Field(default_factory=list)


class Signature(BaseModel):
    model_config = ConfigDict(frozen=True)

    closing_text: str = ""
    signature_block: str = ""


class BehaviorSchema(BaseModel):
    """Reply behavior document for one business type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    layer: Literal["behavior"] = "behavior"
    business_type: str = Field(..., min_length=1)
    schema_version: str = "1.0"
    voice_profile: VoiceProfile
    behavior_goals: list[str] = Field(default_factory=list)
    category_overrides: dict[str, CategoryOverride] = Field(default_factory=dict)
    upsell_text: str | None = None
    auto_reply_policy: AutoReplyPolicy | None = None
    signature: Signature | None = None
    follow_up_phrasing: list[str] = Field(default_factory=list)


# =============================================================================
# Taxonomy layer
# =============================================================================


class TaxonomyNode(BaseModel):
    """One label/folder category, possibly a template for tenant expansion."""

    name: str = Field(..., min_length=1)
    color_hint: str | None = Field(default=None, description="Display color, e.g. #fb4c2f")
    parent_name: str | None = None
    children: list["TaxonomyNode"] = Field(default_factory=list)
    dynamic_template: bool = Field(
        default=False,
        description="Expanded at merge time into one child per tenant entry",
    )
    dynamic_source: DynamicSource | None = None
    generated: bool = Field(default=False, description="Produced by dynamic expansion")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("node name must not be blank")
        if "/" in value:
            raise ValueError(f"node name '{value}' must not contain '/'")
        return value

    @model_validator(mode="after")
    def _check_node(self) -> "TaxonomyNode":
        if self.dynamic_template and self.dynamic_source is None:
            raise ValueError(f"dynamic node '{self.name}' must declare dynamic_source")
        ensure_unique_siblings(self.children, parent=self.name)
        for child in self.children:
            child.parent_name = self.name
        return self

    @property
    def canonical(self) -> str:
        return canonical_name(self.name)


def ensure_unique_siblings(nodes: list[TaxonomyNode], parent: str | None = None) -> None:
    """Raise ValueError if two sibling names share a canonical form."""
    seen: dict[str, str] = {}
    for node in nodes:
        key = canonical_name(node.name)
        if key in seen:
            where = f"under '{parent}'" if parent else "at top level"
            raise ValueError(f"duplicate sibling '{node.name}' ({seen[key]!r}) {where}")
        seen[key] = node.name


def _fold_flat_nodes(raw_nodes: list[Any]) -> list[Any]:
    """Nest nodes listed flat with `parent_name` references under their parents."""
    if not any(isinstance(n, dict) and n.get("parent_name") for n in raw_nodes):
        return raw_nodes

    copies = [dict(n, children=list(n.get("children", []))) for n in raw_nodes]
    by_name: dict[str, dict[str, Any]] = {}
    for node in copies:
        by_name.setdefault(canonical_name(str(node.get("name", ""))), node)

    roots = []
    for node in copies:
        parent_name = node.get("parent_name")
        if not parent_name:
            roots.append(node)
            continue
        parent = by_name.get(canonical_name(parent_name))
        if parent is None:
            raise ValueError(f"node '{node.get('name')}' references unknown parent '{parent_name}'")
        parent["children"].append(node)
    return roots


class TaxonomySchema(BaseModel):
    """Label/folder taxonomy document for one business type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    layer: Literal["taxonomy"] = "taxonomy"
    business_type: str = Field(..., min_length=1)
    schema_version: str = "1.0"
    taxonomy_nodes: list[TaxonomyNode] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _fold(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("taxonomy_nodes"), list):
            data = dict(data, taxonomy_nodes=_fold_flat_nodes(data["taxonomy_nodes"]))
        return data

    @model_validator(mode="after")
    def _unique_roots(self) -> "TaxonomySchema":
        ensure_unique_siblings(self.taxonomy_nodes)
        return self


BusinessTypeSchema = Annotated[
    ClassificationSchema | BehaviorSchema | TaxonomySchema,
    Field(discriminator="layer"),
]

SCHEMA_ADAPTER: TypeAdapter[ClassificationSchema | BehaviorSchema | TaxonomySchema] = TypeAdapter(
    BusinessTypeSchema
)


class SchemaSelection(BaseModel):
    """All three layers for a canonically sorted business type selection."""

    model_config = ConfigDict(frozen=True)

    business_types: list[str]
    classification: list[ClassificationSchema]
    behavior: list[BehaviorSchema]
    taxonomy: list[TaxonomySchema]
