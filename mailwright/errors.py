"""Exception hierarchy for mailwright.

All errors inherit from MailwrightError, which carries a machine-readable
error_code so the calling deployment flow can report failures consistently.
Non-fatal conditions (ambiguous intents, color conflicts, missing behavior
entries) are returned as MergeWarning data and never raised.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mailwright.merging.models import IntentTargetViolation


class ErrorCode(str, Enum):
    """Standardized error codes."""

    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"
    """No schema document exists for a (layer, business type) pair."""

    SCHEMA_INVALID = "SCHEMA_INVALID"
    """A schema document failed load-time validation."""

    INTENT_TARGET_MISSING = "INTENT_TARGET_MISSING"
    """An intent maps to a category absent from the merged taxonomy."""

    REMOTE_PROVIDER_ERROR = "REMOTE_PROVIDER_ERROR"
    """The remote label/folder provider rejected or failed a call."""

    RECONCILIATION_IN_PROGRESS = "RECONCILIATION_IN_PROGRESS"
    """Another reconciliation run holds the tenant lock."""

    UNRESOLVED_PLACEHOLDER = "UNRESOLVED_PLACEHOLDER"
    """Substitution-point syntax survived injection."""


class MailwrightError(Exception):
    """Base exception for all mailwright errors."""

    error_code: ErrorCode

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SchemaNotFoundError(MailwrightError):
    """Raised when a business type has no document for a layer."""

    error_code = ErrorCode.SCHEMA_NOT_FOUND

    def __init__(
        self,
        message: str,
        layer: str | None = None,
        business_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.layer = layer
        self.business_type = business_type


class SchemaValidationError(MailwrightError):
    """Raised when a schema document is malformed."""

    error_code = ErrorCode.SCHEMA_INVALID

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class IntentTargetMissingError(MailwrightError):
    """Raised when the merged configuration fails cross-layer validation.

    The merge call fails closed: no partial configuration is handed on.
    """

    error_code = ErrorCode.INTENT_TARGET_MISSING

    def __init__(self, violations: list[IntentTargetViolation]) -> None:
        missing = sorted({v.category for v in violations})
        super().__init__(f"Intent targets missing from taxonomy: {', '.join(missing)}")
        self.violations = violations

    @property
    def missing_categories(self) -> list[str]:
        return sorted({v.category for v in self.violations})


class RemoteProviderError(MailwrightError):
    """Raised by a taxonomy provider when a remote call fails.

    Retriable errors (rate limits, 5xx, transport failures) are retried with
    backoff by the reconciler; terminal errors fail only the affected node.
    """

    error_code = ErrorCode.REMOTE_PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        *,
        retriable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retriable = retriable
        self.status_code = status_code


class ReconciliationInProgressError(MailwrightError):
    """Raised when the tenant lock cannot be acquired in time."""

    error_code = ErrorCode.RECONCILIATION_IN_PROGRESS

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Reconciliation already running for tenant {tenant_id}")
        self.tenant_id = tenant_id


class UnresolvedPlaceholderError(MailwrightError):
    """Raised when an injected document still contains placeholder syntax."""

    error_code = ErrorCode.UNRESOLVED_PLACEHOLDER

    def __init__(self, tokens: list[str]) -> None:
        super().__init__(f"Unresolved placeholders: {', '.join(tokens)}")
        self.tokens = tokens
