"""Server-sent event framing shared by providers, the chat route, and clients."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

DONE_SENTINEL = "[DONE]"
DONE_FRAME = f"data: {DONE_SENTINEL}\n\n"

_SURROGATES = re.compile("[\ud800-\udfff]")


def sanitize_surrogates(text: str) -> str:
    """Drop lone UTF-16 surrogates, which JSON encoders and providers reject."""
    return _SURROGATES.sub("", text)


def encode_text_frame(text: str) -> str:
    return f"data: {json.dumps({'text': text})}\n\n"


def encode_data_frame(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def read_data_line(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or ``None`` for anything else."""
    if not line or not line.startswith("data:"):
        return None
    return line[len("data:") :].strip()


def is_done(data: str) -> bool:
    return data == DONE_SENTINEL
