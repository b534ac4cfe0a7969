"""Name canonicalization shared by the schema, merge, and injection layers.

Two names are considered the same category when their canonical forms are
equal: case, surrounding whitespace, and separator style are ignored, so
"Google Review", "google_review" and "GOOGLE-REVIEW" compare equal.
"""

import re
import unicodedata
from collections.abc import Iterable

_SEPARATORS = re.compile(r"[\s_\-]+")
_NON_ALNUM = re.compile(r"[^A-Z0-9]+")
_SLUG_NON_ALNUM = re.compile(r"[^a-z0-9]+")

PATH_SEPARATOR = "/"


def canonical_name(name: str) -> str:
    """Return the canonical comparison form of a category or type name.

    Examples:
        >>> canonical_name("  Google_Review ")
        'google review'
        >>> canonical_name("URGENT")
        'urgent'
    """
    normalized = unicodedata.normalize("NFKC", name)
    return _SEPARATORS.sub(" ", normalized).strip().lower()


def canonical_path(path: str) -> str:
    """Canonicalize every segment of a slash-separated category path."""
    return PATH_SEPARATOR.join(canonical_name(part) for part in path.split(PATH_SEPARATOR))


def join_path(*parts: str) -> str:
    return PATH_SEPARATOR.join(p.strip() for p in parts if p and p.strip())


def slugify(name: str) -> str:
    """File-system slug for a business type ("Pools & Spas" -> "pools_spas")."""
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return _SLUG_NON_ALNUM.sub("_", normalized.lower()).strip("_")


def sort_business_types(business_types: Iterable[str]) -> list[str]:
    """Deduplicate and canonically sort a business type selection.

    The first spelling seen for a canonical name is kept. Sorting happens
    before any merge so that merge output never depends on input order.
    """
    seen: dict[str, str] = {}
    for business_type in business_types:
        key = canonical_name(business_type)
        if key and key not in seen:
            seen[key] = business_type.strip()
    return [seen[key] for key in sorted(seen)]


def placeholder_key(name: str) -> str:
    """Map a name to its substitution-point key.

    Uppercases the name and collapses every run of non-alphanumeric
    characters into a single underscore.

    Examples:
        >>> placeholder_key("Urgent/No Power")
        'URGENT_NO_POWER'
        >>> placeholder_key("  hot tub & spa ")
        'HOT_TUB_SPA'
    """
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return _NON_ALNUM.sub("_", normalized.upper()).strip("_")


def label_placeholder_key(path: str) -> str:
    """Substitution-point key holding the remote id of a taxonomy path."""
    return f"LABEL_{placeholder_key(path)}"
