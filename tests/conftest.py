"""Shared test fixtures for the mailwright test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from mailwright.merging.models import TeamMember, TenantProfile, Vendor
from mailwright.schemas.repository import SchemaRepository
from tests.factories import SchemaDocFactory


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            toml_file = test_config_dir / filename
            toml_file.write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            original = self.original_env[key]
            if original is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original


@pytest.fixture
def env_override() -> Callable[[dict[str, str]], EnvOverrideContext]:
    """Temporarily set environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"MAILWRIGHT_DEBUG": "true"}):
                ...
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    return _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache and TOML source before and after each test."""
    from mailwright.config import get_settings
    from mailwright.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def bundled_repository() -> SchemaRepository:
    """Repository over the schema documents shipped with the package."""
    return SchemaRepository()


@pytest.fixture
def tenant() -> TenantProfile:
    return TenantProfile(
        business_name="Bright Spark Services",
        email_domain="brightspark.example",
        team_members=[
            TeamMember(name="Alice Moreau", email="alice@brightspark.example", role="owner"),
            TeamMember(name="Bob Tran", role="dispatch"),
            TeamMember(name="Carla Diaz"),
        ],
        vendors=[
            Vendor(name="Graybar", domains=["Graybar.com"]),
            Vendor(name="Local Supply Co", domains=["localsupply.example"]),
        ],
        voice_style="Short, friendly sentences. Signs off with first name.",
    )


@pytest.fixture
def trade_documents() -> list[dict[str, Any]]:
    """Minimal Electrician + Plumber documents sharing an Urgent category."""
    return [
        SchemaDocFactory.classification(
            "Electrician",
            intent_map={"emergency": "Urgent", "permit_update": "Permits"},
            escalation_rules={"urgent": {"sla_minutes": 30, "notify": ["owner"]}},
        ),
        SchemaDocFactory.classification(
            "Plumber",
            intent_map={"emergency": "Urgent"},
            escalation_rules={"urgent": {"sla_minutes": 15, "notify": ["dispatch"]}},
        ),
        SchemaDocFactory.behavior(
            "Electrician",
            category_overrides={"default": {"custom_language": ["Thanks for your email."]}},
        ),
        SchemaDocFactory.behavior("Plumber"),
        SchemaDocFactory.taxonomy(
            "Electrician",
            [
                {"name": "Urgent", "children": [{"name": "No Power"}]},
                {"name": "Permits"},
            ],
        ),
        SchemaDocFactory.taxonomy(
            "Plumber",
            [{"name": "Urgent", "children": [{"name": "Burst Pipe"}]}],
        ),
    ]


@pytest.fixture
def trade_repository(trade_documents: list[dict[str, Any]]) -> SchemaRepository:
    return SchemaRepository.from_documents(trade_documents)
