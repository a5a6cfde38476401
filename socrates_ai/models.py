"""Model registry for the generation and chat providers."""

from __future__ import annotations

from typing import Dict, Tuple

from .types import Model

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

_MODEL_REGISTRY: Dict[Tuple[str, str], Model] = {}


def register_model(model: Model) -> None:
    _MODEL_REGISTRY[(model.provider, model.id)] = model


def create_openai_model(
    model_id: str,
    *,
    provider: str = "openai",
    base_url: str | None = None,
    max_tokens: int | None = None,
    headers: Dict[str, str] | None = None,
) -> Model:
    return Model(
        id=model_id,
        api="openai-completions",
        provider=provider,
        base_url=base_url or DEFAULT_OPENAI_BASE_URL,
        max_tokens=max_tokens,
        headers=headers or {},
    )


def create_gemini_model(
    model_id: str,
    *,
    provider: str = "google",
    base_url: str | None = None,
    max_tokens: int | None = None,
    headers: Dict[str, str] | None = None,
) -> Model:
    return Model(
        id=model_id,
        api="gemini-generate-content",
        provider=provider,
        base_url=base_url or DEFAULT_GEMINI_BASE_URL,
        max_tokens=max_tokens,
        headers=headers or {},
    )


def get_model(provider: str, model_id: str) -> Model:
    key = (provider, model_id)
    if key in _MODEL_REGISTRY:
        return _MODEL_REGISTRY[key]
    if provider == "openai":
        model = create_openai_model(model_id)
        register_model(model)
        return model
    if provider == "google":
        model = create_gemini_model(model_id)
        register_model(model)
        return model
    raise KeyError(f"Model not found: {provider}/{model_id}. Register it first.")


def _register_if_missing(model: Model) -> None:
    key = (model.provider, model.id)
    if key not in _MODEL_REGISTRY:
        register_model(model)


def _register_builtin_models() -> None:
    # Generation defaults (JSON mode)
    _register_if_missing(create_openai_model("gpt-4o-mini", provider="openai", max_tokens=16384))
    _register_if_missing(create_openai_model("gpt-4o", provider="openai", max_tokens=16384))

    # Chat defaults (streamed)
    _register_if_missing(create_gemini_model("gemini-2.5-flash-lite", provider="google", max_tokens=8192))
    _register_if_missing(create_gemini_model("gemini-2.5-flash", provider="google", max_tokens=8192))


_register_builtin_models()
