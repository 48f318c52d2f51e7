"""Shared provider primitives: the model enum and SSE line decoding."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Union

import requests

from polywiki.core.exceptions import ERROR_MARKER, StreamError

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"


class ModelChoice(str, Enum):
    """Closed set of user-selectable text models."""

    GEMINI = "gemini"
    GROK = "grok"
    CEREBRAS_GPT = "cerebras-gpt"
    CEREBRAS_ZAI = "cerebras-zai"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ModelChoice":
        """Map a stored tag onto a choice; unknown tags fall back to Gemini."""
        normalized = str(value or "").strip().lower()
        for choice in cls:
            if choice.value == normalized:
                return choice
        if normalized:
            logger.warning("Unknown model choice %r, using gemini", value)
        return cls.GEMINI


def error_fragment(message: str) -> str:
    return f"{ERROR_MARKER} {message}"


def iter_sse_payloads(lines: Iterable[Union[bytes, str]]) -> Iterator[Dict[str, Any]]:
    """Decode ``data:`` lines of a server-sent event stream into JSON payloads."""
    for raw in lines:
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        line = line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            # Blank keep-alives and ": comment" lines.
            continue
        data = line[len(SSE_DATA_PREFIX) :].strip()
        if data == SSE_DONE:
            return
        try:
            yield json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Skipping malformed stream line: %s", data[:200])


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return f"HTTP {response.status_code} {response.reason or ''}".strip()


def raise_for_stream_status(response: requests.Response, provider: str) -> None:
    """Convert a non-2xx streaming response into a StreamError."""
    if response.ok:
        return
    message = _error_message(response)
    logger.warning(
        "%s stream rejected status=%s message=%s",
        provider,
        response.status_code,
        message,
    )
    raise StreamError(
        f"{provider} Error: {message}",
        provider=provider,
        status_code=response.status_code,
    )
