"""Unit tests for merged configuration models."""

from mailwright.merging.models import (
    AmbiguousIntentWarning,
    MergedBehavior,
    MergedClassification,
    MergedConfiguration,
    MergedTaxonomy,
)
from mailwright.schemas.models import TaxonomyNode


def make_taxonomy() -> MergedTaxonomy:
    return MergedTaxonomy(
        business_types=["Electrician"],
        nodes=[
            TaxonomyNode(
                name="Urgent",
                children=[
                    TaxonomyNode(name="No Power", children=[TaxonomyNode(name="Whole House")]),
                    TaxonomyNode(name="Sparking"),
                ],
            ),
            TaxonomyNode(name="Sales"),
        ],
    )


def make_configuration(**overrides) -> MergedConfiguration:
    fields = {
        "business_types": ["Electrician"],
        "classification": MergedClassification(
            business_types=["Electrician"], intent_map={"emergency": "Urgent"}
        ),
        "behavior": MergedBehavior(business_types=["Electrician"], voice_tone="Calm"),
        "taxonomy": make_taxonomy(),
    }
    fields.update(overrides)
    return MergedConfiguration(**fields)


class TestMergedTaxonomy:
    def test_walk_is_level_order(self) -> None:
        """Every parent is yielded before any of its children."""
        walked = [(path, depth) for path, _, depth in make_taxonomy().walk()]

        assert walked == [
            ("Urgent", 0),
            ("Sales", 0),
            ("Urgent/No Power", 1),
            ("Urgent/Sparking", 1),
            ("Urgent/No Power/Whole House", 2),
        ]

    def test_find_top_level_by_canonical_name(self) -> None:
        taxonomy = make_taxonomy()

        assert taxonomy.find("SALES") is taxonomy.nodes[1]
        assert taxonomy.find("No Power") is None

    def test_static_names_include_nested(self) -> None:
        assert make_taxonomy().static_names() == {
            "urgent",
            "sales",
            "no power",
            "sparking",
            "whole house",
        }


class TestMergedClassification:
    def test_intent_targets_deduplicated(self) -> None:
        classification = MergedClassification(
            business_types=["Electrician", "Plumber"],
            intent_map={"a": "Urgent", "b": "urgent", "c": "Sales"},
            intent_ambiguities={"c": ["Sales", "Quotes"]},
        )

        assert classification.intent_targets() == ["Urgent", "Sales", "Quotes"]


class TestChecksum:
    def test_stable_for_equal_configurations(self) -> None:
        assert make_configuration().checksum() == make_configuration().checksum()

    def test_length(self) -> None:
        assert len(make_configuration().checksum()) == 16

    def test_changes_with_content(self) -> None:
        other = make_configuration(
            behavior=MergedBehavior(business_types=["Electrician"], voice_tone="Bold")
        )

        assert other.checksum() != make_configuration().checksum()

    def test_warnings_serialized(self) -> None:
        warning = AmbiguousIntentWarning(
            subject="permit_update", message="m", candidates=["A", "B"], chosen="A"
        )
        configuration = make_configuration(warnings=[warning])

        dumped = configuration.model_dump(mode="json")

        assert dumped["warnings"][0]["kind"] == "ambiguous_intent"
        assert configuration.checksum() != make_configuration().checksum()
