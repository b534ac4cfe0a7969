"""Business-type schema documents and the repository that loads them."""

from mailwright.schemas.models import (
    AutoReplyPolicy,
    BehaviorSchema,
    BusinessTypeSchema,
    CategoryOverride,
    ClassificationSchema,
    EscalationRule,
    SchemaLayer,
    SchemaSelection,
    SpecialRule,
    TaxonomyNode,
    TaxonomySchema,
    VendorDomain,
)
from mailwright.schemas.repository import SchemaRepository

__all__ = [
    "AutoReplyPolicy",
    "BehaviorSchema",
    "BusinessTypeSchema",
    "CategoryOverride",
    "ClassificationSchema",
    "EscalationRule",
    "SchemaLayer",
    "SchemaRepository",
    "SchemaSelection",
    "SpecialRule",
    "TaxonomyNode",
    "TaxonomySchema",
    "VendorDomain",
]
