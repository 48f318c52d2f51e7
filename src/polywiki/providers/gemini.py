"""Gemini REST client: SSE streaming and one-shot generation."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List

import requests

from polywiki.core.exceptions import StreamError
from polywiki.providers.base import iter_sse_payloads, raise_for_stream_status

logger = logging.getLogger(__name__)

PROVIDER = "Gemini"


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def inline_image_part(data_b64: str, mime_type: str) -> Dict[str, Any]:
    return {"inline_data": {"mime_type": mime_type, "data": data_b64}}


def _request_body(model_config: Dict[str, Any], parts: List[Dict[str, Any]]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
    budget = model_config.get("thinking_budget")
    if budget is not None:
        body["generationConfig"] = {"thinkingConfig": {"thinkingBudget": budget}}
    return body


def _candidate_text(payload: Dict[str, Any]) -> str:
    if "error" in payload:
        error = payload["error"] or {}
        raise StreamError(
            f"{PROVIDER} Error: {error.get('message', 'unknown error')}",
            provider=PROVIDER,
            status_code=error.get("code"),
        )
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    # Thought summaries are flagged and never part of the visible answer.
    return "".join(
        part.get("text", "") for part in parts if not part.get("thought")
    )


def stream_generate(
    model_config: Dict[str, Any],
    api_key: str,
    parts: List[Dict[str, Any]],
    *,
    timeout: float,
) -> Iterator[str]:
    """Yield text chunks from ``streamGenerateContent`` over SSE."""
    url = f"{model_config['base_url']}/{model_config['id']}:streamGenerateContent"
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
    logger.info(f"Sending streaming request to {PROVIDER}: {model_config['id']}")

    with requests.post(
        url,
        params={"alt": "sse"},
        json=_request_body(model_config, parts),
        headers=headers,
        stream=True,
        timeout=timeout,
    ) as response:
        raise_for_stream_status(response, PROVIDER)
        for data in iter_sse_payloads(response.iter_lines()):
            text = _candidate_text(data)
            if text:
                yield text


def generate(
    model_config: Dict[str, Any],
    api_key: str,
    parts: List[Dict[str, Any]],
    *,
    timeout: float,
) -> str:
    """Return the full text of a non-streaming ``generateContent`` call."""
    url = f"{model_config['base_url']}/{model_config['id']}:generateContent"
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
    logger.info(f"Sending request to {PROVIDER}: {model_config['id']}")
    response = requests.post(
        url,
        json=_request_body(model_config, parts),
        headers=headers,
        timeout=timeout,
    )
    raise_for_stream_status(response, PROVIDER)
    return _candidate_text(response.json())
