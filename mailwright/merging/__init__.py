"""Schema layer mergers and the merge pipeline."""

from mailwright.merging.behavior import BehaviorMerger
from mailwright.merging.classification import ClassificationMerger
from mailwright.merging.models import (
    AmbiguousIntentWarning,
    BehaviorEntryMissingWarning,
    ColorConflictWarning,
    IntentTargetViolation,
    MergedBehavior,
    MergedClassification,
    MergedConfiguration,
    MergedTaxonomy,
    MergeWarning,
    TeamMember,
    TenantProfile,
    ValidationReport,
    Vendor,
)
from mailwright.merging.pipeline import ConfigurationMerger
from mailwright.merging.taxonomy import TaxonomyMerger
from mailwright.merging.validator import ConsistencyValidator

__all__ = [
    "AmbiguousIntentWarning",
    "BehaviorEntryMissingWarning",
    "BehaviorMerger",
    "ClassificationMerger",
    "ColorConflictWarning",
    "ConfigurationMerger",
    "ConsistencyValidator",
    "IntentTargetViolation",
    "MergedBehavior",
    "MergedClassification",
    "MergedConfiguration",
    "MergedTaxonomy",
    "MergeWarning",
    "TaxonomyMerger",
    "TeamMember",
    "TenantProfile",
    "ValidationReport",
    "Vendor",
]
