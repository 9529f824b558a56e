"""Inference clients the ML-assisted extraction pass can talk to.

Every client exposes ``infer(request)`` and returns the raw, untrusted
response payload; interpreting that payload is the adapter's job. Clients
raise InferenceError (or InferenceHTTPError) on failure.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

import requests

from paper2meta.config import InferenceConfig
from paper2meta.exceptions import ConfigurationError, InferenceError, InferenceHTTPError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InferenceRequest:
    """Body sent to the inference collaborator."""
    model: str
    prompt: str
    text: str

    def to_payload(self) -> dict[str, str]:
        return asdict(self)


class InferenceClient(Protocol):
    def infer(self, request: InferenceRequest) -> Any:
        ...


class HTTPInferenceClient:
    """POSTs ``{model, prompt, text}`` as JSON to an inference endpoint."""

    def __init__(self, endpoint_url: str, api_key: str | None = None, timeout: float = 20.0):
        self.endpoint_url = endpoint_url
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: InferenceConfig) -> "HTTPInferenceClient":
        if not config.endpoint_url:
            raise ConfigurationError("PAPER2META_INFERENCE_URL is required for the http backend")
        return cls(config.endpoint_url, api_key=config.api_key, timeout=config.timeout)

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def infer(self, request: InferenceRequest) -> Any:
        try:
            response = requests.post(
                self.endpoint_url,
                json=request.to_payload(),
                headers=self._build_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise InferenceError(f"Inference request failed: {e}") from e

        if not response.ok:
            raise InferenceHTTPError(response.status_code, self._decode(response))
        return self._decode(response)


class OpenAIInferenceClient:
    """Chat-completion backend via the openai SDK (OpenAI or any compatible base URL)."""

    def __init__(self, api_key: str, model: str, base_url: str | None = None, timeout: float = 20.0):
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as e:
            raise ConfigurationError("openai package not installed. Run: pip install openai") from e

        kwargs: dict[str, Any] = {"api_key": api_key, "timeout": timeout}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = OpenAI(**kwargs)
        self.model = model

    @classmethod
    def from_config(cls, config: InferenceConfig) -> "OpenAIInferenceClient":
        if not config.api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY environment variable is required for the openai backend. "
                "Set it in .env or export OPENAI_API_KEY=sk-..."
            )
        return cls(config.api_key, config.model, base_url=config.openai_base_url, timeout=config.timeout)

    def infer(self, request: InferenceRequest) -> Any:
        try:
            resp = self._client.chat.completions.create(
                model=request.model or self.model,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except Exception as e:
            raise InferenceError(f"OpenAI request failed: {e}") from e
        content = resp.choices[0].message.content or ""
        return {"generated_text": content.strip()}


def create_inference_client(config: InferenceConfig) -> InferenceClient | None:
    """
    Build the client for ``config.backend``.

    Returns None when the ML pass is disabled. Raises ConfigurationError when
    the selected backend lacks what it needs.
    """
    if config.backend == "none":
        return None
    if config.backend == "http":
        return HTTPInferenceClient.from_config(config)
    if config.backend == "openai":
        return OpenAIInferenceClient.from_config(config)
    if config.backend == "local":
        from paper2meta.local_llm import LocalInferenceClient
        return LocalInferenceClient(model_id=config.local_model)
    raise ConfigurationError(f"Unknown inference backend: {config.backend}")
