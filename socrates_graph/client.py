"""Client for the child-generation endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from .types import Err, GenerateResponse, GenerationResult, Node, Ok


class GenerationClient(Protocol):
    async def generate(
        self,
        parent: Node,
        path_history: Sequence[str],
        exclude_titles: Optional[Sequence[str]] = None,
    ) -> GenerationResult: ...


def build_generate_payload(
    parent: Node,
    path_history: Sequence[str],
    exclude_titles: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "parentNode": parent.to_wire(),
        "pathHistory": list(path_history),
    }
    if exclude_titles:
        payload["excludeTitles"] = list(exclude_titles)
    return payload


def parse_generate_response(status_code: int, data: Any) -> GenerationResult:
    """Validate a generate response body into ``Ok(children)`` or ``Err(reason)``."""
    if not isinstance(data, dict):
        return Err(f"Unexpected response body (HTTP {status_code})")
    if status_code >= 400:
        return Err(str(data.get("error") or f"API Request Failed (HTTP {status_code})"))
    if "children" not in data:
        return Err("Response has no children")
    try:
        response = GenerateResponse.model_validate(data)
    except ValidationError as exc:
        return Err(f"Malformed children: {exc.error_count()} validation errors")
    if not response.children:
        return Err("No children generated")
    return Ok(children=list(response.children))


class HttpGenerationClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self._base_url}/api/generate"

    async def generate(
        self,
        parent: Node,
        path_history: Sequence[str],
        exclude_titles: Optional[Sequence[str]] = None,
    ) -> GenerationResult:
        payload = build_generate_payload(parent, path_history, exclude_titles)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            return Err(f"Request failed: {exc}")

        try:
            data = response.json()
        except ValueError:
            return Err(f"Response is not JSON (HTTP {response.status_code})")
        return parse_generate_response(response.status_code, data)
