"""Exception types for paper2meta."""

from __future__ import annotations

from typing import Any


class Paper2MetaError(Exception):
    """Base class for all paper2meta errors."""


class MetadataExtractionError(Paper2MetaError):
    """The document yielded no text, so no metadata can be extracted."""


class TextAcquisitionError(MetadataExtractionError):
    """Reading text out of a PDF failed (corrupt, encrypted, image-only...)."""


class ConfigurationError(Paper2MetaError):
    """Invalid inference configuration."""


class InferenceError(Paper2MetaError):
    """The inference collaborator could not produce a response."""


class InferenceHTTPError(InferenceError):
    """The inference endpoint answered with a non-success status."""

    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Inference endpoint returned HTTP {status_code}")
