"""Validation and truncation of candidate metadata from any extraction source."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Final

from paper2meta.models import WIRE_KEYS, PDFMetadata


# Max characters per string field; None keeps the value untruncated.
FIELD_LIMITS: Final[dict[str, int | None]] = {
    "title": 500,
    "authors": 500,
    "journal": 200,
    "abstract": 500,
    "full_abstract": 5000,
    "doi": None,
    "introduction": 2000,
    "results": 2000,
    "conclusion": 2000,
}
MAX_TAGS: Final[int] = 10

_YEAR_RE = re.compile(r"^\d{4}$")
_TAG_SPLIT_RE = re.compile(r"[,;]")


def _lookup(candidate: Mapping[str, Any], name: str) -> Any:
    """Read a field by its wire key (fullAbstract) or attribute name (full_abstract)."""
    wire = WIRE_KEYS[name]
    if wire in candidate:
        return candidate[wire]
    return candidate.get(name)


def _clean_string(value: Any, limit: int | None) -> str | None:
    if not isinstance(value, str):
        return None
    s = value.strip()
    if limit is not None:
        s = s[:limit]
    return s or None


def _clean_year(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip()
    return s if _YEAR_RE.match(s) else None


def split_tags(value: str) -> list[str]:
    """Split a comma/semicolon separated tag string, dropping empty entries."""
    return [t.strip() for t in _TAG_SPLIT_RE.split(value) if t.strip()]


def _clean_tags(value: Any) -> tuple[str, ...] | None:
    if isinstance(value, str):
        tags = split_tags(value)
    elif isinstance(value, Sequence):
        tags = [t.strip() for t in value if isinstance(t, str) and t.strip()]
    else:
        return None
    return tuple(tags[:MAX_TAGS]) or None


def sanitize_metadata(candidate: Any) -> PDFMetadata:
    """
    Validate a loosely-typed metadata mapping into a PDFMetadata.

    Each field is checked on its own: strings must really be strings, the
    year must be four digits (no range check), tags may be a list or a
    delimited string. Anything failing its check is dropped silently, as are
    unknown keys. Never raises.
    """
    if not isinstance(candidate, Mapping):
        return PDFMetadata()

    values: dict[str, Any] = {
        name: _clean_string(_lookup(candidate, name), limit)
        for name, limit in FIELD_LIMITS.items()
    }
    values["year"] = _clean_year(_lookup(candidate, "year"))
    values["tags"] = _clean_tags(_lookup(candidate, "tags"))
    return PDFMetadata(**values)
