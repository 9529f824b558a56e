"""Local metadata inference with a small instruction-tuned HuggingFace model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from paper2meta.config import DEFAULT_LOCAL_MODEL
from paper2meta.exceptions import ConfigurationError, InferenceError

if TYPE_CHECKING:
    from transformers import PreTrainedModel, PreTrainedTokenizer

    from paper2meta.inference import InferenceRequest


logger = logging.getLogger(__name__)

# Loaded once per (model, device); read-only afterwards
_MODEL_CACHE: dict[str, tuple["PreTrainedModel", "PreTrainedTokenizer"]] = {}


def _get_device() -> str:
    """Determine best available device."""
    import torch
    if torch.cuda.is_available():
        return "cuda"
    if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return "mps"
    return "cpu"


def load_local_model(
    model_id: str = DEFAULT_LOCAL_MODEL,
    device: str | None = None,
) -> tuple["PreTrainedModel", "PreTrainedTokenizer"]:
    """
    Load (or reuse) a causal LM and its tokenizer.

    Requires the ``local`` extra (transformers + torch).
    """
    try:
        import torch
        from transformers import AutoModelForCausalLM, AutoTokenizer
    except ImportError as e:
        raise ConfigurationError(
            "The local backend requires transformers and torch. "
            "Run: pip install 'paper2meta[local]'"
        ) from e

    device = device or _get_device()
    cache_key = f"{model_id}:{device}"
    if cache_key in _MODEL_CACHE:
        return _MODEL_CACHE[cache_key]

    logger.info("Loading local model %s on %s", model_id, device)
    if device == "cpu":
        logger.warning("No GPU detected, local metadata extraction will be slow")

    dtype = torch.bfloat16 if device in ("cuda", "mps") else torch.float32
    model = AutoModelForCausalLM.from_pretrained(
        model_id,
        device_map="auto" if device == "cuda" else None,
        dtype=dtype,
        trust_remote_code=True,
    )
    if device != "cuda":  # device_map="auto" handles cuda
        model = model.to(device)
    tokenizer = AutoTokenizer.from_pretrained(model_id, trust_remote_code=True)

    _MODEL_CACHE[cache_key] = (model, tokenizer)
    return model, tokenizer


def generate_json_text(
    prompt: str,
    model: "PreTrainedModel",
    tokenizer: "PreTrainedTokenizer",
    max_new_tokens: int = 1536,
) -> str:
    """Greedy decoding of a chat-formatted prompt; returns only the new tokens."""
    import torch

    messages = [{"role": "user", "content": prompt}]
    input_ids = tokenizer.apply_chat_template(
        messages,
        add_generation_prompt=True,
        return_tensors="pt",
        tokenize=True,
    ).to(model.device)
    attention_mask = torch.ones_like(input_ids)

    with torch.no_grad():
        output = model.generate(
            input_ids,
            attention_mask=attention_mask,
            do_sample=False,
            repetition_penalty=1.05,
            max_new_tokens=max_new_tokens,
            pad_token_id=tokenizer.eos_token_id,
        )

    generated_tokens = output[0][input_ids.shape[1]:]
    return tokenizer.decode(generated_tokens, skip_special_tokens=True).strip()


class LocalInferenceClient:
    """Inference client backed by a local model; answers in generated_text shape."""

    def __init__(self, model_id: str = DEFAULT_LOCAL_MODEL, device: str | None = None):
        self.model_id = model_id
        self.model, self.tokenizer = load_local_model(model_id, device)

    def infer(self, request: "InferenceRequest") -> Any:
        try:
            text = generate_json_text(request.prompt, self.model, self.tokenizer)
        except Exception as e:
            raise InferenceError(f"Local generation failed: {e}") from e
        return {"generated_text": text}
