"""Environment variable lookup for provider API keys."""

from __future__ import annotations

import os
from typing import Dict, Optional

_ENV_KEY_BY_PROVIDER: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "google": "GOOGLE_API_KEY",
}


def get_env_api_key(provider: str) -> Optional[str]:
    env_key = _ENV_KEY_BY_PROVIDER.get(provider)
    if not env_key:
        return None
    return os.getenv(env_key)


def resolve_api_key(provider: str, explicit: Optional[str] = None) -> str:
    api_key = explicit or get_env_api_key(provider)
    if not api_key:
        raise RuntimeError(f"No API key for provider: {provider}. Set an env var or pass api_key.")
    return api_key
