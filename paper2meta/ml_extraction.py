"""ML-assisted metadata extraction: prompt, call, classify, parse.

The inference collaborator is untrusted and allowed to fail. Whatever goes
wrong (transport, HTTP status, error payload, malformed JSON) the adapter
logs a diagnostic and returns an empty PDFMetadata, because the fallback
extractors always provide a baseline.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from paper2meta.config import InferenceConfig
from paper2meta.exceptions import InferenceError, InferenceHTTPError
from paper2meta.inference import InferenceClient, InferenceRequest, create_inference_client
from paper2meta.models import NormalizedText, PDFMetadata
from paper2meta.sanitize import sanitize_metadata
from paper2meta.text_clean import normalize_text


logger = logging.getLogger(__name__)


# ------------------------------------------------------ response variants

@dataclass(frozen=True)
class StructuredResponse:
    """The collaborator already returned a metadata mapping."""
    metadata: Mapping[str, Any]


@dataclass(frozen=True)
class TextResponse:
    """Free text that may embed a JSON object."""
    text: str


@dataclass(frozen=True)
class ErrorResponse:
    """An error payload, e.g. ``{"error": "Model is loading", "estimated_time": 20}``."""
    error: str
    estimated_time: float | None = None


@dataclass(frozen=True)
class UnparseableResponse:
    reason: str


ResponseVariant = Union[StructuredResponse, TextResponse, ErrorResponse, UnparseableResponse]


def classify_response(payload: Any) -> ResponseVariant:
    """Resolve a raw response payload into one variant, checking shapes in order."""
    if isinstance(payload, Mapping):
        if isinstance(payload.get("metadata"), Mapping):
            return StructuredResponse(payload["metadata"])
        if payload.get("error"):
            estimated = payload.get("estimated_time")
            return ErrorResponse(
                error=str(payload["error"]),
                estimated_time=float(estimated) if isinstance(estimated, (int, float)) else None,
            )
        if isinstance(payload.get("generated_text"), str):
            return TextResponse(payload["generated_text"])
        if isinstance(payload.get("text"), str):
            return TextResponse(payload["text"])
        return UnparseableResponse("mapping without metadata, generated_text or text")
    if isinstance(payload, str):
        return TextResponse(payload)
    if isinstance(payload, Sequence) and payload:
        first = payload[0]
        if isinstance(first, Mapping) and isinstance(first.get("generated_text"), str):
            return TextResponse(first["generated_text"])
        return UnparseableResponse("list whose first element has no generated_text")
    return UnparseableResponse(f"unsupported payload type {type(payload).__name__}")


# ------------------------------------------------------------ JSON recovery

_FENCE_START_RE = re.compile(r"^\s*```[A-Za-z]*\s*")
_FENCE_END_RE = re.compile(r"\s*```\s*$")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def strip_code_fences(text: str) -> str:
    return _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", text)).strip()


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Pull the first {...} span out of free text and decode it as a JSON object."""
    m = _JSON_OBJECT_RE.search(strip_code_fences(text))
    if not m:
        return None
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def metadata_from_response(payload: Any) -> PDFMetadata:
    """Turn any response payload into sanitized metadata (empty when unusable)."""
    variant = classify_response(payload)
    if isinstance(variant, StructuredResponse):
        return sanitize_metadata(variant.metadata)
    if isinstance(variant, TextResponse):
        data = parse_json_object(variant.text)
        if data is None:
            logger.debug("No JSON object found in model output (%d chars)", len(variant.text))
            return PDFMetadata()
        return sanitize_metadata(data)
    if isinstance(variant, ErrorResponse):
        _log_error_payload(variant)
        return PDFMetadata()
    logger.debug("Unparseable inference response: %s", variant.reason)
    return PDFMetadata()


# ------------------------------------------------------------- diagnostics

def _log_error_payload(variant: ErrorResponse) -> None:
    if variant.estimated_time is not None:
        logger.warning(
            "Inference model is loading (estimated %.0fs); continuing without ML metadata",
            variant.estimated_time,
        )
    else:
        logger.warning("Inference service reported an error: %s", variant.error)


def _log_http_error(e: InferenceHTTPError) -> None:
    if e.status_code == 503:
        variant = classify_response(e.payload)
        estimated = variant.estimated_time if isinstance(variant, ErrorResponse) else None
        if estimated is not None:
            logger.warning(
                "Inference model is loading (HTTP 503, estimated %.0fs); continuing without ML metadata",
                estimated,
            )
        else:
            logger.warning("Inference model is loading (HTTP 503); continuing without ML metadata")
    elif e.status_code == 401:
        logger.warning("Inference credentials rejected (HTTP 401); check PAPER2META_API_KEY")
    else:
        logger.warning("Inference endpoint returned HTTP %d; continuing without ML metadata", e.status_code)


# ---------------------------------------------------------------- adapter

def build_prompt(template: str, text: str) -> str:
    return template.replace("{text}", text)


class MetadataInferenceAdapter:
    """Best-effort metadata extraction through an inference client."""

    def __init__(self, client: InferenceClient, config: InferenceConfig):
        self.client = client
        self.config = config

    def build_request(self, text: str | NormalizedText) -> InferenceRequest:
        doc = text if isinstance(text, NormalizedText) else normalize_text(text)
        window = doc.flat[: self.config.max_input_chars]
        return InferenceRequest(
            model=self.config.model,
            prompt=build_prompt(self.config.prompt_template, window),
            text=window,
        )

    def extract(self, text: str | NormalizedText) -> PDFMetadata:
        """Never raises; any failure yields an empty record."""
        try:
            request = self.build_request(text)
            payload = self.client.infer(request)
        except InferenceHTTPError as e:
            _log_http_error(e)
            return PDFMetadata()
        except InferenceError as e:
            logger.warning("%s; continuing without ML metadata", e)
            return PDFMetadata()
        except Exception as e:
            logger.warning("Inference client failed (%s: %s); continuing without ML metadata",
                           type(e).__name__, e)
            return PDFMetadata()

        try:
            return metadata_from_response(payload)
        except Exception as e:
            logger.warning("Could not interpret inference response: %s", e)
            return PDFMetadata()


def create_adapter(config: InferenceConfig) -> MetadataInferenceAdapter | None:
    """Adapter for the configured backend, or None when the ML pass is disabled."""
    client = create_inference_client(config)
    if client is None:
        return None
    return MetadataInferenceAdapter(client, config)
