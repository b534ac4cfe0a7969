"""Behavior layer merger."""

from collections.abc import Sequence

from mailwright.config.models import MergeConfig
from mailwright.merging.classification import dedupe_case_insensitive
from mailwright.merging.models import MergedBehavior
from mailwright.naming import canonical_name
from mailwright.observability.logging import get_logger
from mailwright.schemas.models import (
    AutoReplyPolicy,
    BehaviorSchema,
    CategoryOverride,
    FormalityLevel,
    Signature,
)

logger = get_logger(__name__)

FORMALITY_RANK: dict[str, int] = {"casual": 0, "medium": 1, "professional": 2}


def join_names(names: Sequence[str]) -> str:
    """Human-readable list: "A", "A and B", "A, B and C"."""
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


class BehaviorMerger:
    """Merges N behavior schemas into one MergedBehavior.

    Like the other mergers this is a pure function of its input set: schemas
    are put in canonical business type order first, and every cap takes the
    earliest entries in that order.
    """

    def __init__(self, config: MergeConfig | None = None) -> None:
        self._config = config or MergeConfig()

    def merge(self, schemas: Sequence[BehaviorSchema]) -> MergedBehavior:
        ordered = sorted(schemas, key=lambda s: canonical_name(s.business_type))
        business_types = [s.business_type for s in ordered]

        merged = MergedBehavior(
            business_types=business_types,
            voice_tone=self._merge_tone(ordered),
            formality_level=self._merge_formality(ordered),
            allow_pricing_in_replies=any(
                s.voice_profile.allow_pricing_in_replies for s in ordered
            ),
            behavior_goals=self._merge_goals(ordered, business_types),
            category_overrides=self._merge_overrides(ordered),
            upsell_text=self._merge_upsell(ordered, business_types),
            auto_reply_policy=self._merge_auto_reply(ordered),
            signature=self._merge_signature(ordered, business_types),
            follow_up_phrasing=dedupe_case_insensitive(
                phrase for s in ordered for phrase in s.follow_up_phrasing
            )[: self._config.max_follow_up_phrases],
        )

        logger.debug(
            "behavior_merged",
            business_types=business_types,
            goals=len(merged.behavior_goals),
            overrides=len(merged.category_overrides),
        )
        return merged

    def _merge_tone(self, schemas: Sequence[BehaviorSchema]) -> str:
        descriptors = [f"{s.voice_profile.tone.strip()} ({s.business_type})" for s in schemas]
        return "; ".join(descriptors[: self._config.max_tone_descriptors])

    def _merge_formality(self, schemas: Sequence[BehaviorSchema]) -> FormalityLevel:
        if not schemas:
            return "medium"
        return max(
            (s.voice_profile.formality_level for s in schemas),
            key=lambda level: FORMALITY_RANK[level],
        )

    def _merge_goals(
        self, schemas: Sequence[BehaviorSchema], business_types: Sequence[str]
    ) -> list[str]:
        goals = [goal for s in schemas for goal in s.behavior_goals]
        if len(business_types) > 1:
            goals.append(
                f"Coordinate between {join_names(business_types)} services when a "
                f"customer's request spans more than one of them."
            )
        return dedupe_case_insensitive(goals)

    def _merge_overrides(
        self, schemas: Sequence[BehaviorSchema]
    ) -> dict[str, CategoryOverride]:
        names: dict[str, str] = {}
        priorities: dict[str, int] = {}
        language: dict[str, list[str]] = {}

        for schema in schemas:
            for category, override in schema.category_overrides.items():
                key = canonical_name(category)
                names.setdefault(key, category.strip())
                current = priorities.get(key, override.priority_level)
                priorities[key] = min(current, override.priority_level)
                language.setdefault(key, []).extend(override.custom_language)

        cap = self._config.max_override_examples
        return {
            names[key]: CategoryOverride(
                priority_level=priorities[key],
                custom_language=dedupe_case_insensitive(language[key])[:cap],
            )
            for key in names
        }

    def _merge_upsell(
        self, schemas: Sequence[BehaviorSchema], business_types: Sequence[str]
    ) -> str | None:
        contributing = [s for s in schemas if s.upsell_text and s.upsell_text.strip()]
        if not contributing:
            return None
        if len(business_types) == 1:
            return contributing[0].upsell_text.strip()  # type: ignore[union-attr]
        services = join_names([s.business_type for s in contributing])
        return (
            f"While we handle this request, mention that we also offer {services} "
            f"services and can take care of related work in the same visit."
        )

    def _merge_auto_reply(self, schemas: Sequence[BehaviorSchema]) -> AutoReplyPolicy:
        policies = [s.auto_reply_policy for s in schemas if s.auto_reply_policy is not None]
        if not policies:
            return AutoReplyPolicy(min_confidence=self._config.default_min_confidence)
        return AutoReplyPolicy(
            enabled_categories=dedupe_case_insensitive(
                c for p in policies for c in p.enabled_categories
            ),
            min_confidence=min(p.min_confidence for p in policies),
            exclusions=dedupe_case_insensitive(e for p in policies for e in p.exclusions),
        )

    def _merge_signature(
        self, schemas: Sequence[BehaviorSchema], business_types: Sequence[str]
    ) -> Signature | None:
        primary = next((s.signature for s in schemas if s.signature is not None), None)
        if primary is None or len(business_types) == 1:
            return primary

        services = " and ".join(business_types[:2])
        more = " and more" if len(business_types) > 2 else ""
        return Signature(
            closing_text=f"Thanks for choosing us for your {services}{more} needs!",
            signature_block=primary.signature_block,
        )
