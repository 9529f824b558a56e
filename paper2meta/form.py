"""Pre-populating the publication form from extracted metadata."""

from __future__ import annotations

from collections.abc import Mapping

from paper2meta.models import PDFMetadata


PUBLICATION_FORM_FIELDS: tuple[str, ...] = (
    "title",
    "authors",
    "journal",
    "year",
    "abstract",
    "fullAbstract",
    "doi",
    "tags",
    "introduction",
    "results",
    "conclusion",
)


def populate_publication_form(
    metadata: PDFMetadata,
    form: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Apply extracted values over existing form values.

    A field keeps its previous value when nothing was extracted for it. The
    long abstract falls back to the short one; tags become one ", " joined
    string.
    """
    previous = {name: (form or {}).get(name, "") for name in PUBLICATION_FORM_FIELDS}
    extracted = metadata.to_dict()
    if extracted.get("tags"):
        extracted["tags"] = ", ".join(extracted["tags"])
    if not extracted.get("fullAbstract") and extracted.get("abstract"):
        extracted["fullAbstract"] = extracted["abstract"]

    return {name: extracted.get(name) or previous[name] for name in PUBLICATION_FORM_FIELDS}


def has_core_fields(metadata: PDFMetadata) -> bool:
    """True when title, authors or abstract was found (worth telling the user)."""
    return bool(metadata.title or metadata.authors or metadata.abstract)
