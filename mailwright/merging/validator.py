"""Cross-layer consistency checks for a merged configuration.

Intent targets missing from the taxonomy are fatal; categories without any
behavior entry are reported as warnings because the generic reply language
still applies to them.
"""

from mailwright.merging.models import (
    BehaviorEntryMissingWarning,
    IntentTargetViolation,
    MergedBehavior,
    MergedClassification,
    MergedTaxonomy,
    ValidationReport,
)
from mailwright.naming import PATH_SEPARATOR, canonical_name
from mailwright.observability.logging import get_logger

logger = get_logger(__name__)


class ConsistencyValidator:
    """Checks referential integrity between the three merged layers."""

    def __init__(self, fallback_category: str = "default") -> None:
        self._fallback = canonical_name(fallback_category)

    def validate(
        self,
        classification: MergedClassification,
        behavior: MergedBehavior,
        taxonomy: MergedTaxonomy,
    ) -> ValidationReport:
        report = ValidationReport(
            violations=self.check_intent_targets(classification, taxonomy),
            warnings=self.check_behavior_entries(behavior, taxonomy),
        )
        if report.violations:
            logger.warning(
                "intent_targets_missing",
                missing=sorted({v.category for v in report.violations}),
            )
        return report

    def check_intent_targets(
        self,
        classification: MergedClassification,
        taxonomy: MergedTaxonomy,
    ) -> list[IntentTargetViolation]:
        """Every intent target must be a static taxonomy category.

        Ambiguity candidates count as targets. Nodes produced by dynamic
        expansion do not.
        """
        static = taxonomy.static_names()
        violations: list[IntentTargetViolation] = []
        seen: set[tuple[str, str]] = set()

        for intent, target in classification.intent_map.items():
            candidates = classification.intent_ambiguities.get(intent, [target])
            for category in candidates:
                key = (intent, canonical_name(category))
                if key[1] in static or key in seen:
                    continue
                seen.add(key)
                violations.append(IntentTargetViolation(intent=intent, category=category))
        return violations

    def check_behavior_entries(
        self,
        behavior: MergedBehavior,
        taxonomy: MergedTaxonomy,
    ) -> list[BehaviorEntryMissingWarning]:
        overrides = {canonical_name(name) for name in behavior.category_overrides}
        if self._fallback in overrides:
            return []

        warnings: list[BehaviorEntryMissingWarning] = []
        for path, node, _ in taxonomy.walk():
            if node.generated:
                continue
            lineage = [canonical_name(part) for part in path.split(PATH_SEPARATOR)]
            if any(name in overrides for name in lineage):
                continue
            warnings.append(
                BehaviorEntryMissingWarning(
                    subject=path,
                    message=f"No behavior override for '{path}' and no fallback defined",
                )
            )
        return warnings
