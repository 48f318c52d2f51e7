"""Streaming client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

import requests

from polywiki.providers.base import iter_sse_payloads, raise_for_stream_status

logger = logging.getLogger(__name__)


def _delta_text(payload: Dict[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    return delta.get("content") or ""


def stream_chat_completion(
    model_config: Dict[str, Any],
    api_key: str,
    prompt: str,
    *,
    timeout: float,
    extra_headers: Optional[Dict[str, str]] = None,
) -> Iterator[str]:
    """Yield content deltas from a ``stream: true`` chat completion request."""
    provider = model_config.get("provider_label", model_config.get("api", "llm"))
    url = model_config["base_url"]
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    payload: Dict[str, Any] = {
        "model": model_config["id"],
        "messages": [{"role": "user", "content": prompt}],
        "stream": True,
    }
    for key, value in (model_config.get("parameters") or {}).items():
        if value is not None:
            payload[key] = value

    logger.info(f"Sending streaming request to {provider}: {model_config['id']}")
    logger.debug(f"Payload: {json.dumps({**payload, 'messages': '[omitted]'})}")

    with requests.post(
        url, json=payload, headers=headers, stream=True, timeout=timeout
    ) as response:
        raise_for_stream_status(response, provider)
        for data in iter_sse_payloads(response.iter_lines()):
            text = _delta_text(data)
            if text:
                yield text
