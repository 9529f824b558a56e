"""Tests for ML-assisted extraction: response classification and the adapter."""

import logging
from unittest.mock import MagicMock

import pytest

from paper2meta.config import InferenceConfig
from paper2meta.exceptions import InferenceError, InferenceHTTPError
from paper2meta.ml_extraction import (
    ErrorResponse,
    MetadataInferenceAdapter,
    StructuredResponse,
    TextResponse,
    UnparseableResponse,
    build_prompt,
    classify_response,
    create_adapter,
    metadata_from_response,
    parse_json_object,
    strip_code_fences,
)
from paper2meta.models import PDFMetadata


ML_LOGGER = "paper2meta.ml_extraction"


class TestClassifyResponse:
    """Tests for resolving raw payloads into response variants."""

    def test_metadata_mapping(self):
        variant = classify_response({"metadata": {"title": "T"}})
        assert variant == StructuredResponse({"title": "T"})

    def test_error_payload(self):
        variant = classify_response({"error": "Model is loading", "estimated_time": 20})
        assert variant == ErrorResponse("Model is loading", 20.0)

    def test_generated_text_mapping(self):
        assert classify_response({"generated_text": "{}"}) == TextResponse("{}")

    def test_text_mapping(self):
        assert classify_response({"text": "hello"}) == TextResponse("hello")

    def test_plain_string(self):
        assert classify_response("raw output") == TextResponse("raw output")

    def test_list_of_generations(self):
        assert classify_response([{"generated_text": "first"}, {"generated_text": "second"}]) == (
            TextResponse("first")
        )

    @pytest.mark.parametrize("payload", [None, 42, [], [1, 2], {"other": 1}])
    def test_unparseable(self, payload):
        assert isinstance(classify_response(payload), UnparseableResponse)

    def test_metadata_checked_before_error(self):
        variant = classify_response({"metadata": {"title": "T"}, "error": "ignored"})
        assert isinstance(variant, StructuredResponse)


class TestJsonRecovery:

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_parse_fenced_json(self):
        assert parse_json_object('```json\n{"title": "T"}\n```') == {"title": "T"}

    def test_parse_json_inside_prose(self):
        text = 'Here is the metadata: {"title": "T", "year": "2020"} Hope this helps.'
        assert parse_json_object(text) == {"title": "T", "year": "2020"}

    def test_invalid_json(self):
        assert parse_json_object("{not json}") is None

    def test_no_object(self):
        assert parse_json_object("no braces at all") is None

    def test_metadata_from_text_response(self):
        meta = metadata_from_response({"generated_text": '{"title": "  T  ", "year": "20x1"}'})
        assert meta == PDFMetadata(title="T")

    def test_metadata_from_structured_response(self):
        meta = metadata_from_response({"metadata": {"fullAbstract": "long"}})
        assert meta.full_abstract == "long"

    def test_error_payload_logs_loading(self, caplog):
        with caplog.at_level(logging.WARNING, logger=ML_LOGGER):
            meta = metadata_from_response({"error": "Model is loading", "estimated_time": 12})
        assert meta.is_empty()
        assert "loading" in caplog.text


def _config(**overrides):
    values = {"backend": "http", "endpoint_url": "http://localhost:9000/infer", "max_input_chars": 40}
    values.update(overrides)
    return InferenceConfig(**values)


class TestMetadataInferenceAdapter:
    """Tests for the best-effort adapter."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    def test_build_request_windows_flat_text(self, client):
        adapter = MetadataInferenceAdapter(client, _config(prompt_template="Read: {text}"))
        request = adapter.build_request("word\n" * 20)
        assert len(request.text) == 40
        assert "\n" not in request.text
        assert request.prompt == f"Read: {request.text}"

    def test_successful_extraction(self, client):
        client.infer.return_value = [{"generated_text": '{"title": "ML Title", "tags": ["a"]}'}]
        meta = MetadataInferenceAdapter(client, _config()).extract("some text")
        assert meta.title == "ML Title"
        assert meta.tags == ("a",)
        client.infer.assert_called_once()

    def test_503_logs_model_loading(self, client, caplog):
        client.infer.side_effect = InferenceHTTPError(503, {"error": "loading", "estimated_time": 30})
        with caplog.at_level(logging.WARNING, logger=ML_LOGGER):
            meta = MetadataInferenceAdapter(client, _config()).extract("some text")
        assert meta == PDFMetadata()
        assert "HTTP 503" in caplog.text
        assert "estimated 30s" in caplog.text

    def test_401_logs_credentials(self, client, caplog):
        client.infer.side_effect = InferenceHTTPError(401)
        with caplog.at_level(logging.WARNING, logger=ML_LOGGER):
            meta = MetadataInferenceAdapter(client, _config()).extract("some text")
        assert meta == PDFMetadata()
        assert "credentials rejected" in caplog.text

    def test_other_status(self, client, caplog):
        client.infer.side_effect = InferenceHTTPError(500, "boom")
        with caplog.at_level(logging.WARNING, logger=ML_LOGGER):
            assert MetadataInferenceAdapter(client, _config()).extract("t").is_empty()
        assert "HTTP 500" in caplog.text

    def test_transport_error(self, client):
        client.infer.side_effect = InferenceError("Inference request failed: timed out")
        assert MetadataInferenceAdapter(client, _config()).extract("t").is_empty()

    def test_unexpected_exception_is_absorbed(self, client):
        client.infer.side_effect = RuntimeError("kaboom")
        assert MetadataInferenceAdapter(client, _config()).extract("t").is_empty()

    def test_malformed_output(self, client):
        client.infer.return_value = {"generated_text": "I could not find any metadata."}
        assert MetadataInferenceAdapter(client, _config()).extract("t").is_empty()


class TestCreateAdapter:

    def test_disabled_backend(self):
        assert create_adapter(InferenceConfig.disabled()) is None

    def test_http_backend(self):
        adapter = create_adapter(_config())
        assert isinstance(adapter, MetadataInferenceAdapter)


def test_build_prompt_keeps_other_braces():
    assert build_prompt('Return {"title": ...} for {text}', "PAPER") == (
        'Return {"title": ...} for PAPER'
    )
