"""Placeholder injection into workflow templates.

Templates are opaque text with substitution points written `<<<KEY>>>`,
where KEY matches [A-Z0-9_]+. Every substitution happens here, in one
pass, followed by a check that no placeholder syntax survived.
"""

import json
import re
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from mailwright.errors import UnresolvedPlaceholderError
from mailwright.observability.logging import get_logger
from mailwright.observability.metrics import PLACEHOLDERS_MISSING

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"<<<([A-Z0-9_]+)>>>")
UNRESOLVED_PATTERN = re.compile(r"<<<[^>]*>>>")

EscapeMode = Literal["none", "json"]


class InjectionResult(BaseModel):
    document: str
    substituted: list[str] = Field(default_factory=list, description="Keys given a value")
    missing: list[str] = Field(default_factory=list, description="Keys given the empty marker")


def escape_json(value: str) -> str:
    """Escape a value for embedding inside a JSON string literal."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


class PlaceholderInjector:
    """Resolves every substitution point of a template from a value map.

    A well-formed key with no value (absent or None) is replaced by the
    empty marker and logged; it never stays in the document. Anything that
    still looks like a placeholder afterwards is fatal.
    """

    def __init__(self, empty_marker: str = "__UNSET__", escape: EscapeMode = "json") -> None:
        if UNRESOLVED_PATTERN.search(empty_marker):
            raise ValueError("empty_marker must not contain placeholder syntax")
        self._empty_marker = empty_marker
        self._escape = escape

    @property
    def empty_marker(self) -> str:
        return self._empty_marker

    def _render(self, value: str) -> str:
        return escape_json(value) if self._escape == "json" else value

    def inject(self, template: str, values: Mapping[str, str | None]) -> InjectionResult:
        """Substitute every placeholder in the template.

        Raises:
            UnresolvedPlaceholderError: Placeholder syntax remains after
                substitution (a malformed key, or a value carrying a token)
        """
        substituted: dict[str, None] = {}
        missing: dict[str, None] = {}

        def replace(match: re.Match[str]) -> str:
            key = match.group(1)
            value = values.get(key)
            if value is None:
                missing[key] = None
                return self._empty_marker
            substituted[key] = None
            return self._render(value)

        document = PLACEHOLDER_PATTERN.sub(replace, template)

        for key in missing:
            PLACEHOLDERS_MISSING.inc()
            logger.info("placeholder_missing", key=key, marker=self._empty_marker)

        unresolved = list(dict.fromkeys(UNRESOLVED_PATTERN.findall(document)))
        if unresolved:
            logger.error("placeholders_unresolved", tokens=unresolved)
            raise UnresolvedPlaceholderError(unresolved)

        return InjectionResult(
            document=document,
            substituted=list(substituted),
            missing=list(missing),
        )
