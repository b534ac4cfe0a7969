"""Test factories for schema documents."""

from typing import Any


class SchemaDocFactory:
    """Factory for raw schema documents as loaded from JSON."""

    @staticmethod
    def classification(business_type: str, **fields: Any) -> dict[str, Any]:
        return {"layer": "classification", "business_type": business_type, **fields}

    @staticmethod
    def behavior(business_type: str, tone: str = "Friendly", **fields: Any) -> dict[str, Any]:
        return {
            "layer": "behavior",
            "business_type": business_type,
            "voice_profile": {"tone": tone},
            **fields,
        }

    @staticmethod
    def taxonomy(business_type: str, nodes: list[dict[str, Any]]) -> dict[str, Any]:
        return {"layer": "taxonomy", "business_type": business_type, "taxonomy_nodes": nodes}

    @classmethod
    def business_type(
        cls,
        business_type: str,
        nodes: list[dict[str, Any]],
        intent_map: dict[str, str] | None = None,
        **behavior_fields: Any,
    ) -> list[dict[str, Any]]:
        """All three layers for one business type."""
        return [
            cls.classification(business_type, intent_map=intent_map or {}),
            cls.behavior(business_type, **behavior_fields),
            cls.taxonomy(business_type, nodes),
        ]
