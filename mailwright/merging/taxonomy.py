"""Taxonomy layer merger.

Same-named categories merge by canonical name at every depth with their
children unioned. Dynamic template nodes are expanded from the tenant profile
only after all schema-level merging, so a team member listed once produces a
single leaf even when several business types declare the template.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from mailwright.merging.models import ColorConflictWarning, MergedTaxonomy, TenantProfile
from mailwright.naming import PATH_SEPARATOR, canonical_name
from mailwright.observability.logging import get_logger
from mailwright.schemas.models import DynamicSource, TaxonomyNode, TaxonomySchema

logger = get_logger(__name__)


@dataclass
class _MergingNode:
    """Mutable accumulator for one canonical category during a merge."""

    name: str
    colors: list[str] = field(default_factory=list)
    dynamic_source: DynamicSource | None = None
    children: dict[str, "_MergingNode"] = field(default_factory=dict)

    def absorb(self, node: TaxonomyNode) -> None:
        if node.color_hint:
            self.colors.append(node.color_hint)
        if node.dynamic_template and self.dynamic_source is None:
            self.dynamic_source = node.dynamic_source
        for child in node.children:
            key = child.canonical
            if key not in self.children:
                self.children[key] = _MergingNode(name=child.name)
            self.children[key].absorb(child)


def dynamic_entries(tenant: TenantProfile | None, source: DynamicSource) -> list[str]:
    """Names a dynamic template expands into, deduplicated by canonical name."""
    if tenant is None:
        return []
    raw = (
        [m.name for m in tenant.team_members]
        if source == "team_members"
        else [v.name for v in tenant.vendors]
    )
    names: dict[str, str] = {}
    for name in raw:
        # "/" is reserved as the path separator
        name = name.replace(PATH_SEPARATOR, "-").strip()
        key = canonical_name(name)
        if key:
            names.setdefault(key, name)
    return list(names.values())


class TaxonomyMerger:
    """Merges N taxonomy schemas into one MergedTaxonomy."""

    def merge(
        self,
        schemas: Sequence[TaxonomySchema],
        tenant: TenantProfile | None = None,
    ) -> tuple[MergedTaxonomy, list[ColorConflictWarning]]:
        ordered = sorted(schemas, key=lambda s: canonical_name(s.business_type))
        business_types = [s.business_type for s in ordered]

        roots: dict[str, _MergingNode] = {}
        occurrences: dict[str, int] = {}
        for schema in ordered:
            for node in schema.taxonomy_nodes:
                key = node.canonical
                if key not in roots:
                    roots[key] = _MergingNode(name=node.name)
                roots[key].absorb(node)
                occurrences[key] = occurrences.get(key, 0) + 1

        # Standard categories (present in every schema) lead, the rest follow
        standard = [k for k in roots if ordered and occurrences[k] == len(ordered)]
        unique = [k for k in roots if k not in standard]

        warnings: list[ColorConflictWarning] = []
        nodes = [
            self._build(roots[key], roots[key].name, tenant, warnings)
            for key in standard + unique
        ]
        taxonomy = MergedTaxonomy(business_types=business_types, nodes=nodes)

        logger.debug(
            "taxonomy_merged",
            business_types=business_types,
            standard_categories=len(standard),
            unique_categories=len(unique),
            node_count=taxonomy.node_count(),
            color_conflicts=len(warnings),
        )
        return taxonomy, warnings

    def _build(
        self,
        acc: _MergingNode,
        path: str,
        tenant: TenantProfile | None,
        warnings: list[ColorConflictWarning],
    ) -> TaxonomyNode:
        color = acc.colors[0] if acc.colors else None
        distinct = list(dict.fromkeys(c.lower() for c in acc.colors))
        if len(distinct) > 1:
            warnings.append(
                ColorConflictWarning(
                    subject=path,
                    message=f"Category '{path}' has conflicting colors {distinct}; using {color}",
                    colors=distinct,
                    chosen=color or "",
                )
            )

        children = [
            self._build(child, f"{path}{PATH_SEPARATOR}{child.name}", tenant, warnings)
            for child in acc.children.values()
        ]
        if acc.dynamic_source is not None:
            taken = {child.canonical for child in children}
            for entry in dynamic_entries(tenant, acc.dynamic_source):
                if canonical_name(entry) not in taken:
                    children.append(TaxonomyNode(name=entry, generated=True))

        return TaxonomyNode(name=acc.name, color_hint=color, children=children)
