"""Classification layer merger.

Combines keyword groups, intent routing, escalation commitments, prompt
fragments, special rules, and vendor domains from several business types into
one classifier configuration.
"""

from collections.abc import Iterable, Sequence

from mailwright.merging.models import (
    AmbiguousIntentWarning,
    MergedClassification,
    SourcedSpecialRule,
    TenantProfile,
)
from mailwright.naming import canonical_name
from mailwright.observability.logging import get_logger
from mailwright.schemas.models import ClassificationSchema, EscalationRule

logger = get_logger(__name__)


def dedupe_case_insensitive(values: Iterable[str]) -> list[str]:
    """Drop repeated values ignoring case and surrounding whitespace.

    The first spelling seen is kept, in first-seen order.
    """
    seen: dict[str, str] = {}
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen[key] = value.strip()
    return list(seen.values())


def build_preamble(business_types: Sequence[str]) -> str:
    if len(business_types) == 1:
        return f"You classify email for a {business_types[0]} business."
    return (
        f"You classify email for a multi-service business providing "
        f"{', '.join(business_types)} services. Route each email to the service "
        f"area it concerns."
    )


class ClassificationMerger:
    """Merges N classification schemas into one MergedClassification.

    Schemas are sorted by canonical business type before merging, so the
    output is identical for any ordering of the same set.
    """

    def merge(
        self,
        schemas: Sequence[ClassificationSchema],
        tenant: TenantProfile | None = None,
    ) -> tuple[MergedClassification, list[AmbiguousIntentWarning]]:
        ordered = sorted(schemas, key=lambda s: canonical_name(s.business_type))
        business_types = [s.business_type for s in ordered]

        intent_map, ambiguities = self._merge_intents(ordered)
        warnings = [
            AmbiguousIntentWarning(
                subject=intent,
                message=(
                    f"Intent '{intent}' maps to {', '.join(candidates)}; "
                    f"using '{candidates[0]}'"
                ),
                candidates=candidates,
                chosen=candidates[0],
            )
            for intent, candidates in ambiguities.items()
        ]

        merged = MergedClassification(
            business_types=business_types,
            keywords=self._merge_keywords(ordered),
            intent_map=intent_map,
            intent_ambiguities=ambiguities,
            escalation_rules=self._merge_escalation(ordered),
            prompt=self._merge_prompt(ordered, business_types),
            special_rules=self._merge_special_rules(ordered),
            vendor_domains=self._merge_vendor_domains(ordered, tenant),
        )

        logger.debug(
            "classification_merged",
            business_types=business_types,
            intents=len(intent_map),
            ambiguous_intents=len(ambiguities),
        )
        return merged, warnings

    def _merge_keywords(self, schemas: Sequence[ClassificationSchema]) -> dict[str, list[str]]:
        groups: dict[str, list[str]] = {}
        for schema in schemas:
            for group, values in schema.keywords.items():
                groups.setdefault(group.strip().lower(), []).extend(values)
        return {group: dedupe_case_insensitive(groups[group]) for group in sorted(groups)}

    def _merge_intents(
        self, schemas: Sequence[ClassificationSchema]
    ) -> tuple[dict[str, str], dict[str, list[str]]]:
        # keys match canonically and keep their first-seen spelling
        spellings: dict[str, str] = {}
        intent_map: dict[str, str] = {}
        candidates: dict[str, list[str]] = {}
        for schema in schemas:
            for raw_intent, target in schema.intent_map.items():
                intent = spellings.setdefault(canonical_name(raw_intent), raw_intent)
                if intent not in intent_map:
                    intent_map[intent] = target
                    candidates[intent] = [target]
                    continue
                known = {canonical_name(c) for c in candidates[intent]}
                if canonical_name(target) not in known:
                    candidates[intent].append(target)

        ambiguities = {intent: c for intent, c in candidates.items() if len(c) > 1}
        return intent_map, ambiguities

    def _merge_escalation(
        self, schemas: Sequence[ClassificationSchema]
    ) -> dict[str, EscalationRule]:
        collected: dict[str, list[EscalationRule]] = {}
        for schema in schemas:
            for key, rule in schema.escalation_rules.items():
                collected.setdefault(key.strip().lower(), []).append(rule)

        merged: dict[str, EscalationRule] = {}
        for key in sorted(collected):
            rules = collected[key]
            merged[key] = EscalationRule(
                sla_minutes=min(r.sla_minutes for r in rules),
                notify=dedupe_case_insensitive(n for r in rules for n in r.notify),
                auto_reply=all(r.auto_reply for r in rules),
            )
        return merged

    def _merge_prompt(
        self, schemas: Sequence[ClassificationSchema], business_types: Sequence[str]
    ) -> str:
        fragments: list[str] = []
        for schema in schemas:
            for fragment in schema.prompt_fragments:
                fragment = fragment.strip()
                if fragment and fragment not in fragments:
                    fragments.append(fragment)
        return "\n\n".join([build_preamble(business_types), *fragments])

    def _merge_special_rules(
        self, schemas: Sequence[ClassificationSchema]
    ) -> list[SourcedSpecialRule]:
        rules: list[SourcedSpecialRule] = []
        seen: set[str] = set()
        for schema in schemas:
            for rule in schema.special_rules:
                fingerprint = rule.model_dump_json()
                if fingerprint in seen:
                    continue
                seen.add(fingerprint)
                rules.append(
                    SourcedSpecialRule(
                        name=rule.name,
                        trigger=rule.trigger,
                        action=rule.action,
                        source_business_type=schema.business_type,
                    )
                )
        return rules

    def _merge_vendor_domains(
        self,
        schemas: Sequence[ClassificationSchema],
        tenant: TenantProfile | None,
    ) -> dict[str, list[str]]:
        entries: list[tuple[str, list[str]]] = [
            (vendor.name, vendor.domains)
            for schema in schemas
            for vendor in schema.domain_detection
        ]
        if tenant is not None:
            entries.extend((vendor.name, vendor.domains) for vendor in tenant.vendors)

        names: dict[str, str] = {}
        domains: dict[str, list[str]] = {}
        for name, vendor_domains in entries:
            key = canonical_name(name)
            names.setdefault(key, name.strip())
            bucket = domains.setdefault(key, [])
            for domain in vendor_domains:
                domain = domain.strip().lower()
                if domain and domain not in bucket:
                    bucket.append(domain)
        return {names[key]: domains[key] for key in names}
