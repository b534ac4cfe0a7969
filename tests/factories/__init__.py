"""Test factories for creating test data."""

from tests.factories.schemas import SchemaDocFactory

__all__ = ["SchemaDocFactory"]
