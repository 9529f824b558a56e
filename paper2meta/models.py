"""Data models for paper2meta."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


# Attribute name -> key used by the publication form and in LLM JSON output
WIRE_KEYS: dict[str, str] = {
    "title": "title",
    "authors": "authors",
    "journal": "journal",
    "year": "year",
    "abstract": "abstract",
    "full_abstract": "fullAbstract",
    "doi": "doi",
    "tags": "tags",
    "introduction": "introduction",
    "results": "results",
    "conclusion": "conclusion",
}


@dataclass(frozen=True)
class PDFMetadata:
    """Metadata pulled out of a research paper. Every field is optional."""
    title: str | None = None
    authors: str | None = None
    journal: str | None = None
    year: str | None = None
    abstract: str | None = None
    full_abstract: str | None = None
    doi: str | None = None
    tags: tuple[str, ...] | None = None
    introduction: str | None = None
    results: str | None = None
    conclusion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Present fields only, keyed by their wire names."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[WIRE_KEYS[f.name]] = list(value) if f.name == "tags" else value
        return out

    def present_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.present_fields()


@dataclass(frozen=True)
class NormalizedText:
    """Document text in the two shapes the field extractors work on."""
    raw: str
    flat: str
    lines: tuple[str, ...]
