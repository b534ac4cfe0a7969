"""Unit tests for schema layer models."""

import pytest
from pydantic import ValidationError

from mailwright.schemas.models import (
    SCHEMA_ADAPTER,
    BehaviorSchema,
    ClassificationSchema,
    TaxonomyNode,
    TaxonomySchema,
)


class TestTaggedVariant:
    """Tests for layer discrimination."""

    def test_dispatches_on_layer(self) -> None:
        """Each layer tag validates into its own model."""
        classification = SCHEMA_ADAPTER.validate_python(
            {"layer": "classification", "business_type": "Electrician"}
        )
        behavior = SCHEMA_ADAPTER.validate_python(
            {"layer": "behavior", "business_type": "Electrician", "voice_profile": {"tone": "Calm"}}
        )
        taxonomy = SCHEMA_ADAPTER.validate_python(
            {"layer": "taxonomy", "business_type": "Electrician"}
        )

        assert isinstance(classification, ClassificationSchema)
        assert isinstance(behavior, BehaviorSchema)
        assert isinstance(taxonomy, TaxonomySchema)

    def test_unknown_layer_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SCHEMA_ADAPTER.validate_python({"layer": "pricing", "business_type": "Electrician"})

    def test_unknown_field_rejected(self) -> None:
        """Fields from another layer are not silently accepted."""
        with pytest.raises(ValidationError):
            SCHEMA_ADAPTER.validate_python(
                {
                    "layer": "classification",
                    "business_type": "Electrician",
                    "taxonomy_nodes": [],
                }
            )

    def test_documents_are_frozen(self) -> None:
        schema = ClassificationSchema(business_type="Plumber")
        with pytest.raises(ValidationError):
            schema.business_type = "Electrician"  # type: ignore[misc]

    def test_escalation_sla_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ClassificationSchema(
                business_type="Plumber",
                escalation_rules={"urgent": {"sla_minutes": 0}},
            )


class TestTaxonomyNode:
    """Tests for TaxonomyNode validation."""

    def test_name_is_stripped(self) -> None:
        assert TaxonomyNode(name="  Urgent ").name == "Urgent"

    def test_name_with_separator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TaxonomyNode(name="Urgent/No Power")

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TaxonomyNode(name="   ")

    def test_duplicate_siblings_rejected(self) -> None:
        """Sibling names are compared in canonical form."""
        with pytest.raises(ValidationError, match="duplicate sibling"):
            TaxonomyNode(
                name="Urgent",
                children=[{"name": "No Power"}, {"name": "no_power"}],
            )

    def test_same_name_under_different_parents_allowed(self) -> None:
        schema = TaxonomySchema(
            business_type="HVAC",
            taxonomy_nodes=[
                {"name": "Warranty", "children": [{"name": "Claims"}]},
                {"name": "Banking", "children": [{"name": "Claims"}]},
            ],
        )
        assert len(schema.taxonomy_nodes) == 2

    def test_dynamic_template_requires_source(self) -> None:
        with pytest.raises(ValidationError, match="dynamic_source"):
            TaxonomyNode(name="Team", dynamic_template=True)

    def test_children_get_parent_name(self) -> None:
        node = TaxonomyNode(name="Urgent", children=[{"name": "No Power"}])
        assert node.children[0].parent_name == "Urgent"

    def test_canonical(self) -> None:
        assert TaxonomyNode(name="Google_Review").canonical == "google review"


class TestTaxonomySchema:
    """Tests for TaxonomySchema folding and root checks."""

    def test_flat_nodes_are_folded(self) -> None:
        """Nodes listed flat with parent_name nest under their parent."""
        schema = TaxonomySchema(
            business_type="Plumber",
            taxonomy_nodes=[
                {"name": "Urgent"},
                {"name": "Burst Pipe", "parent_name": "Urgent"},
                {"name": "Sewer Backup", "parent_name": "urgent"},
            ],
        )

        assert [n.name for n in schema.taxonomy_nodes] == ["Urgent"]
        assert [c.name for c in schema.taxonomy_nodes[0].children] == [
            "Burst Pipe",
            "Sewer Backup",
        ]

    def test_unknown_parent_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown parent"):
            TaxonomySchema(
                business_type="Plumber",
                taxonomy_nodes=[{"name": "Burst Pipe", "parent_name": "Emergencies"}],
            )

    def test_duplicate_roots_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate sibling"):
            TaxonomySchema(
                business_type="Plumber",
                taxonomy_nodes=[{"name": "Urgent"}, {"name": "URGENT"}],
            )
