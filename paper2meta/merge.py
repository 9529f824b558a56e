"""Combine ML-sourced and fallback metadata into one record.

Rule: start from the fallback record and overlay every non-empty field of
the ML record. The long abstract is the first non-empty of ML fullAbstract,
ML abstract, fallback fullAbstract, fallback abstract. No scoring, no
confidence weighting.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from paper2meta.models import PDFMetadata


def _is_empty(v: Any) -> bool:
    """True if v is an 'empty' value (None, whitespace-only string, empty sequence)."""
    if v is None:
        return True
    if isinstance(v, str) and v.strip() == "":
        return True
    if isinstance(v, (list, tuple)) and len(v) == 0:
        return True
    return False


def _first_present(*values: Any) -> Any:
    for v in values:
        if not _is_empty(v):
            return v
    return None


def merge_metadata(ml: PDFMetadata | None, fallback: PDFMetadata | None) -> PDFMetadata:
    """Overlay ML fields on the fallback record (ML wins per field when present)."""
    ml = ml or PDFMetadata()
    fallback = fallback or PDFMetadata()

    merged: dict[str, Any] = {}
    for f in fields(PDFMetadata):
        merged[f.name] = _first_present(getattr(ml, f.name), getattr(fallback, f.name))

    merged["full_abstract"] = _first_present(
        ml.full_abstract,
        ml.abstract,
        fallback.full_abstract,
        fallback.abstract,
    )
    return PDFMetadata(**merged)
