"""Schema document repository.

Loads per-business-type schema documents for a layer and caches the
validated models for the lifetime of the repository instance. Documents
are static per deploy, so the cache is never invalidated.
"""

import json
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mailwright.errors import SchemaNotFoundError, SchemaValidationError
from mailwright.naming import canonical_name, slugify, sort_business_types
from mailwright.observability.logging import get_logger
from mailwright.schemas.models import (
    SCHEMA_ADAPTER,
    BehaviorSchema,
    ClassificationSchema,
    SchemaLayer,
    SchemaSelection,
    TaxonomySchema,
)

logger = get_logger(__name__)

BUNDLED_SCHEMA_DIR = Path(__file__).parent / "data"
ALIASES_FILE = "aliases.json"

AnySchema = ClassificationSchema | BehaviorSchema | TaxonomySchema


class SchemaRepository:
    """Loads and caches BusinessTypeSchema documents.

    Documents are read from `<schema_dir>/<layer>/<slug>.json`, where slug is
    the slugified business type ("Pools & Spas" -> "pools_spas"). An optional
    `<schema_dir>/aliases.json` maps alternative names to business types.

    Use `from_documents()` to build an isolated repository from in-memory
    fixtures.
    """

    def __init__(self, schema_dir: Path | None = None) -> None:
        self._schema_dir = schema_dir or BUNDLED_SCHEMA_DIR
        self._documents: dict[tuple[SchemaLayer, str], Mapping[str, Any]] | None = None
        self._aliases: dict[str, str] = {}
        self._cache: dict[tuple[SchemaLayer, str], AnySchema] = {}
        self._lock = threading.Lock()
        self._load_aliases()

    @classmethod
    def from_documents(
        cls,
        documents: Iterable[Mapping[str, Any]],
        aliases: Mapping[str, str] | None = None,
    ) -> "SchemaRepository":
        """Build a repository backed by in-memory documents.

        Each document must carry `layer` and `business_type` keys.
        """
        repo = cls.__new__(cls)
        repo._schema_dir = None
        repo._documents = {}
        repo._cache = {}
        repo._lock = threading.Lock()
        repo._aliases = {canonical_name(k): v for k, v in (aliases or {}).items()}
        for doc in documents:
            try:
                layer = SchemaLayer(doc["layer"])
                slug = slugify(doc["business_type"])
            except (KeyError, ValueError) as e:
                raise SchemaValidationError(f"Document missing layer or business_type: {e}") from e
            repo._documents[(layer, slug)] = doc
        return repo

    def _load_aliases(self) -> None:
        path = self._schema_dir / ALIASES_FILE
        if not path.exists():
            return
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"Invalid aliases file: {e}", source=str(path)) from e
        self._aliases = {canonical_name(alias): target for alias, target in raw.items()}

    def resolve(self, business_type: str) -> str:
        """Resolve an alias to its business type name."""
        return self._aliases.get(canonical_name(business_type), business_type)

    def load(self, layer: SchemaLayer | str, business_type: str) -> AnySchema:
        """Load one layer document for a business type.

        Raises:
            SchemaNotFoundError: No document exists for the pair
            SchemaValidationError: The document is malformed
        """
        layer = SchemaLayer(layer)
        slug = slugify(self.resolve(business_type))
        key = (layer, slug)

        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        raw, source = self._read(layer, slug, business_type)
        try:
            schema = SCHEMA_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise SchemaValidationError(
                f"Invalid {layer.value} schema for '{business_type}': {e}",
                source=source,
            ) from e

        if schema.layer != layer.value:
            raise SchemaValidationError(
                f"Document for '{business_type}' is a {schema.layer} schema, "
                f"expected {layer.value}",
                source=source,
            )

        with self._lock:
            schema = self._cache.setdefault(key, schema)

        logger.debug(
            "schema_loaded",
            layer=layer.value,
            business_type=schema.business_type,
            schema_version=schema.schema_version,
        )
        return schema

    def _read(self, layer: SchemaLayer, slug: str, business_type: str) -> tuple[Any, str]:
        if self._documents is not None:
            doc = self._documents.get((layer, slug))
            if doc is None:
                raise SchemaNotFoundError(
                    f"No {layer.value} schema for business type '{business_type}'",
                    layer=layer.value,
                    business_type=business_type,
                )
            return dict(doc), f"<memory:{layer.value}/{slug}>"

        path = self._schema_dir / layer.value / f"{slug}.json"
        if not path.exists():
            raise SchemaNotFoundError(
                f"No {layer.value} schema for business type '{business_type}'",
                layer=layer.value,
                business_type=business_type,
            )
        try:
            return json.loads(path.read_text(encoding="utf-8")), str(path)
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"Invalid JSON in {path}: {e}", source=str(path)) from e

    def load_selection(self, business_types: Iterable[str]) -> SchemaSelection:
        """Load all three layers for a business type selection.

        The selection is resolved, deduplicated, and canonically sorted so
        downstream merges are independent of the caller's ordering.
        """
        resolved = sort_business_types(self.resolve(t) for t in business_types)
        if not resolved:
            raise SchemaNotFoundError("No business types selected")

        return SchemaSelection(
            business_types=resolved,
            classification=[self.load(SchemaLayer.CLASSIFICATION, t) for t in resolved],
            behavior=[self.load(SchemaLayer.BEHAVIOR, t) for t in resolved],
            taxonomy=[self.load(SchemaLayer.TAXONOMY, t) for t in resolved],
        )

    def available_business_types(self) -> list[str]:
        """Business types with documents for every layer."""
        slugs_by_layer: dict[SchemaLayer, set[str]] = {}
        for layer in SchemaLayer:
            if self._documents is not None:
                slugs_by_layer[layer] = {slug for (lyr, slug) in self._documents if lyr == layer}
            else:
                layer_dir = self._schema_dir / layer.value
                slugs_by_layer[layer] = (
                    {p.stem for p in layer_dir.glob("*.json")} if layer_dir.exists() else set()
                )

        complete = set.intersection(*slugs_by_layer.values())
        # slugify() is idempotent, so a slug loads like its business type
        names = [self.load(SchemaLayer.CLASSIFICATION, slug).business_type for slug in complete]
        return sort_business_types(names)
