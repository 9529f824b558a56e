"""PDF text acquisition: pdfminer text in reading order, cleaned."""

from __future__ import annotations

import logging
from pathlib import Path

from pdfminer.high_level import extract_text as extract_miner
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfminer.pdfparser import PDFSyntaxError

from paper2meta.exceptions import TextAcquisitionError
from paper2meta.text_clean import clean_pdf_text


logger = logging.getLogger(__name__)

# Abstract and introduction live in the first few pages
DEFAULT_MAX_PAGES = 10


def extract_document_text(pdf_path: Path | str, max_pages: int | None = DEFAULT_MAX_PAGES) -> str:
    """
    Extract and clean text from the first ``max_pages`` pages of a PDF.

    pdfminer.six keeps line breaks, which the line-oriented heuristics rely on.

    Raises: TextAcquisitionError when the file is missing, encrypted, not a
    valid PDF, or yields no text (image-only or scanned).
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.is_file():
        raise TextAcquisitionError(f"PDF file not found: {pdf_path}")

    try:
        # maxpages=0 means "all pages" in pdfminer
        raw = extract_miner(str(pdf_path), maxpages=max_pages or 0) or ""
    except PDFPasswordIncorrect as e:
        raise TextAcquisitionError(f"{pdf_path.name} is password-protected") from e
    except PDFSyntaxError as e:
        raise TextAcquisitionError(f"{pdf_path.name} is not a valid PDF or is corrupted") from e
    except Exception as e:
        raise TextAcquisitionError(
            f"Failed to extract text from {pdf_path.name}: {type(e).__name__}: {e}"
        ) from e

    text = clean_pdf_text(raw)
    if not text:
        raise TextAcquisitionError(
            f"Could not extract text from {pdf_path.name}. "
            "The PDF might be image-based or corrupted."
        )
    logger.debug("Extracted %d chars from %s", len(text), pdf_path.name)
    return text
