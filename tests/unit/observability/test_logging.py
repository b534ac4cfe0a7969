"""Tests for structured logging."""

import json
from collections.abc import Generator
from io import StringIO

import pytest
import structlog

from mailwright.observability.logging import (
    PIIRedactor,
    bind_tenant,
    clear_tenant,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    yield
    clear_tenant()
    structlog.reset_defaults()


def capture(redact: bool = True) -> StringIO:
    """Route structlog output through the production processors into a buffer."""
    output = StringIO()
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if redact:
        processors.append(PIIRedactor())
    processors.append(structlog.processors.JSONRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(output),
        cache_logger_on_first_use=False,
    )
    return output


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=False)
        get_logger("test").info("test_message")

    def test_setup_console_format(self) -> None:
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        get_logger("test").debug("test_message")

    def test_redactor_installed(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=True)

        processors = structlog.get_config()["processors"]

        assert any(isinstance(p, PIIRedactor) for p in processors)

    def test_redactor_omitted(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=False)

        processors = structlog.get_config()["processors"]

        assert not any(isinstance(p, PIIRedactor) for p in processors)


class TestTenantContext:
    """Tests for tenant binding via structlog.contextvars."""

    def test_bound_tenant_appears_in_events(self) -> None:
        output = capture()
        logger = get_logger("test")

        bind_tenant("tenant-7", provider="gmail")
        logger.info("reconciliation_started")

        parsed = json.loads(output.getvalue().strip())
        assert parsed["tenant_id"] == "tenant-7"
        assert parsed["provider"] == "gmail"

    def test_clear_tenant(self) -> None:
        output = capture()
        logger = get_logger("test")

        bind_tenant("tenant-7")
        clear_tenant()
        logger.info("deployment_completed")

        assert "tenant_id" not in json.loads(output.getvalue().strip())


class TestPIIRedactor:
    """Tests for PII redaction."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_redacts_sensitive_keys(self, redactor: PIIRedactor) -> None:
        event_dict = {"token": "ya29.abc", "Authorization": "Bearer x", "path": "Urgent"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["token"] == "[REDACTED]"
        assert result["Authorization"] == "[REDACTED]"
        assert result["path"] == "Urgent"

    def test_redacts_email_pattern_in_string_value(self, redactor: PIIRedactor) -> None:
        event_dict = {"error": "Label owned by alice@brightspark.example already exists"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert "alice@brightspark.example" not in result["error"]
        assert "[EMAIL]" in result["error"]

    def test_redacts_bearer_token_in_string_value(self, redactor: PIIRedactor) -> None:
        event_dict = {"error": "request with bearer ya29.a0AfH6SMB failed"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert "ya29" not in result["error"]

    def test_handles_nested_structures(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "team": [{"name": "Alice", "email": "alice@example.com"}],
            "notes": ("contact bob@example.com",),
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["team"] == [{"name": "Alice", "email": "[REDACTED]"}]
        assert result["notes"] == ["contact [EMAIL]"]

    def test_preserves_non_pii_data(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "event": "node_created",
            "path": "Urgent/No Power",
            "node_id": "Label_12",
            "attempt": 2,
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result == event_dict

    def test_in_pipeline(self) -> None:
        output = capture(redact=True)

        get_logger("test").warning("provider_call_retry", email="bob@example.com", attempt=1)

        parsed = json.loads(output.getvalue().strip())
        assert parsed["email"] == "[REDACTED]"
        assert parsed["attempt"] == 1
