"""Research-paper metadata extraction for publication form pre-fill."""

from paper2meta.config import InferenceConfig
from paper2meta.exceptions import (
    ConfigurationError,
    InferenceError,
    InferenceHTTPError,
    MetadataExtractionError,
    Paper2MetaError,
    TextAcquisitionError,
)
from paper2meta.extractor import extract_metadata, extract_pdf_metadata
from paper2meta.fields import extract_fallback_metadata
from paper2meta.form import has_core_fields, populate_publication_form
from paper2meta.inference import create_inference_client
from paper2meta.merge import merge_metadata
from paper2meta.ml_extraction import MetadataInferenceAdapter, create_adapter
from paper2meta.models import PDFMetadata
from paper2meta.sanitize import sanitize_metadata

__all__ = [
    "ConfigurationError",
    "InferenceConfig",
    "InferenceError",
    "InferenceHTTPError",
    "MetadataExtractionError",
    "MetadataInferenceAdapter",
    "PDFMetadata",
    "Paper2MetaError",
    "TextAcquisitionError",
    "create_adapter",
    "create_inference_client",
    "extract_fallback_metadata",
    "extract_metadata",
    "extract_pdf_metadata",
    "has_core_fields",
    "merge_metadata",
    "populate_publication_form",
    "sanitize_metadata",
]
