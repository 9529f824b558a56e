"""Top-level metadata extraction: ML pass (optional) + fallback pass + merge."""

from __future__ import annotations

import logging
from pathlib import Path

from paper2meta.exceptions import MetadataExtractionError
from paper2meta.fields import extract_fallback_metadata
from paper2meta.merge import merge_metadata
from paper2meta.ml_extraction import MetadataInferenceAdapter
from paper2meta.models import PDFMetadata
from paper2meta.pdf_text import DEFAULT_MAX_PAGES, extract_document_text
from paper2meta.text_clean import normalize_text


logger = logging.getLogger(__name__)


def extract_metadata(
    document_text: str,
    adapter: MetadataInferenceAdapter | None = None,
) -> PDFMetadata:
    """
    Extract metadata from already-acquired document text.

    The ML adapter, when given, is tried first; its failures are absorbed.
    The fallback extractors always run, and ML fields win over fallback
    fields per field.

    Raises: MetadataExtractionError if the text is empty. Nothing else
    escapes.
    """
    if not document_text or not document_text.strip():
        raise MetadataExtractionError(
            "Cannot extract metadata: the document text is empty."
        )

    doc = normalize_text(document_text)
    ml = PDFMetadata()
    if adapter is not None:
        try:
            ml = adapter.extract(doc)
        except Exception as e:
            logger.warning("ML extraction failed (%s: %s); using fallback metadata only",
                           type(e).__name__, e)
    fallback = extract_fallback_metadata(doc)

    logger.debug(
        "ML fields: %s; fallback fields: %s",
        ", ".join(ml.present_fields()) or "none",
        ", ".join(fallback.present_fields()) or "none",
    )
    return merge_metadata(ml, fallback)


def extract_pdf_metadata(
    pdf_path: Path | str,
    adapter: MetadataInferenceAdapter | None = None,
    max_pages: int | None = DEFAULT_MAX_PAGES,
) -> PDFMetadata:
    """
    Acquire text from a PDF, then extract metadata from it.

    Raises: TextAcquisitionError for unreadable PDFs.
    """
    text = extract_document_text(pdf_path, max_pages=max_pages)
    return extract_metadata(text, adapter=adapter)
