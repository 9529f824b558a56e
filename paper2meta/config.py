"""Inference configuration, resolved once at the call site."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from paper2meta.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

BACKENDS: Final[frozenset[str]] = frozenset({"http", "openai", "local", "none"})

DEFAULT_HTTP_MODEL: Final[str] = "mistralai/Mistral-7B-Instruct-v0.2"
DEFAULT_OPENAI_MODEL: Final[str] = "gpt-5-mini-2025-08-07"
DEFAULT_LOCAL_MODEL: Final[str] = "LiquidAI/LFM2.5-1.2B-Instruct"
DEFAULT_TIMEOUT: Final[float] = 20.0
DEFAULT_MAX_INPUT_CHARS: Final[int] = 6000
DEFAULT_PROMPTS_FILE: Final[str] = "prompts.json"

DEFAULT_METADATA_PROMPT: Final[str] = (
    "You extract bibliographic metadata from the text of a research paper.\n"
    "Return ONLY one JSON object, no commentary, with these keys (omit a key "
    "when the text does not state it):\n"
    '- "title": paper title\n'
    '- "authors": author names joined with ", "\n'
    '- "journal": journal or venue name\n'
    '- "year": four-digit publication year\n'
    '- "doi": DOI such as 10.1000/xyz123\n'
    '- "abstract": abstract, at most 500 characters\n'
    '- "fullAbstract": complete abstract\n'
    '- "tags": list of keywords\n'
    '- "introduction": introduction section, at most 2000 characters\n'
    '- "results": results section, at most 2000 characters\n'
    '- "conclusion": conclusion section, at most 2000 characters\n\n'
    "Paper text:\n\n{text}"
)


def _to_bool(s: str | None, default: bool = False) -> bool:
    if s is None:
        return default
    return s.strip().lower() in ("1", "true", "yes", "on")


def _load_prompt_overrides(path: Path) -> dict[str, Any]:
    """Read prompts.json when present; a broken file is ignored with a warning."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable prompt overrides in %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


@dataclass(frozen=True)
class InferenceConfig:
    """Everything the ML-assisted extraction pass needs to reach its model."""
    backend: str = "none"
    endpoint_url: str | None = None
    api_key: str | None = None
    model: str = DEFAULT_HTTP_MODEL
    timeout: float = DEFAULT_TIMEOUT
    max_input_chars: int = DEFAULT_MAX_INPUT_CHARS
    prompt_template: str = DEFAULT_METADATA_PROMPT
    openai_base_url: str | None = None
    local_model: str = DEFAULT_LOCAL_MODEL

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown inference backend: {self.backend}. "
                f"Supported backends: {', '.join(sorted(BACKENDS))}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"Inference timeout must be positive, got {self.timeout}")
        if self.max_input_chars <= 0:
            raise ConfigurationError(f"max_input_chars must be positive, got {self.max_input_chars}")

    @property
    def enabled(self) -> bool:
        return self.backend != "none"

    @classmethod
    def disabled(cls) -> "InferenceConfig":
        return cls(backend="none")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prompts_path: Path | str | None = None,
        backend: str | None = None,
    ) -> "InferenceConfig":
        """
        Build a config from environment variables and an optional prompts.json.

        The backend comes from the ``backend`` argument, then
        PAPER2META_BACKEND, then defaults to "http" when
        PAPER2META_INFERENCE_URL is set and "none" otherwise. PAPER2META_ML=0
        disables the ML pass whatever the backend.
        """
        env = os.environ if environ is None else environ
        overrides = _load_prompt_overrides(Path(prompts_path or DEFAULT_PROMPTS_FILE))

        endpoint_url = env.get("PAPER2META_INFERENCE_URL") or None
        backend = (
            backend
            or env.get("PAPER2META_BACKEND")
            or ("http" if endpoint_url else "none")
        ).strip().lower()
        if not _to_bool(env.get("PAPER2META_ML"), default=True):
            backend = "none"

        local_model = env.get("LOCAL_MODEL", DEFAULT_LOCAL_MODEL)
        if backend == "openai":
            api_key = env.get("OPENAI_API_KEY") or None
            model = env.get("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)
        elif backend == "local":
            api_key = None
            model = local_model
        else:
            api_key = env.get("PAPER2META_API_KEY") or None
            model = env.get("PAPER2META_MODEL", DEFAULT_HTTP_MODEL)

        try:
            timeout = float(env.get("PAPER2META_TIMEOUT", DEFAULT_TIMEOUT))
            max_input_chars = int(
                env.get("PAPER2META_MAX_INPUT_CHARS")
                or overrides.get("max_input_chars", DEFAULT_MAX_INPUT_CHARS)
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric inference setting: {e}") from e

        return cls(
            backend=backend,
            endpoint_url=endpoint_url,
            api_key=api_key,
            model=model,
            timeout=timeout,
            max_input_chars=max_input_chars,
            prompt_template=overrides.get("metadata_prompt", DEFAULT_METADATA_PROMPT),
            openai_base_url=env.get("OPENAI_BASE_URL") or None,
            local_model=local_model,
        )
