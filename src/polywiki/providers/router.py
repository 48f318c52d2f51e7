"""Route lookups to the selected provider and normalise their failures."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional

import requests

from polywiki.config import (
    DEFINITION_PROMPT,
    IMAGE_MODEL,
    IMAGE_PROMPT,
    MODELS,
    RANDOM_MODEL,
    RANDOM_WORD_PROMPT,
    REQUEST_TIMEOUT,
)
from polywiki.config.settings import ProviderSettings
from polywiki.core.exceptions import ProviderConfigError, StreamError
from polywiki.providers import gemini, openai_compat
from polywiki.providers.base import ModelChoice, error_fragment
from polywiki.session.history import EntryKind, HistoryEntry, ImageAttachment

logger = logging.getLogger(__name__)

OPENROUTER_HEADERS = {"X-Title": "PolyWiki"}


def definition_prompt(topic: str) -> str:
    return f'{DEFINITION_PROMPT} "{topic}"'


class ProviderRouter:
    """Stream source backed by the configured model providers.

    Settings are injected so the caller owns their load/save lifecycle; call
    :meth:`update_settings` after the user edits them.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        models: Optional[Dict[str, Dict[str, Any]]] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.settings = settings
        self.models = models if models is not None else MODELS
        self.timeout = timeout

    def update_settings(self, settings: ProviderSettings) -> None:
        self.settings = settings

    @property
    def choice(self) -> ModelChoice:
        return ModelChoice.parse(self.settings.selected_model)

    def _model_config(self, alias: str) -> Dict[str, Any]:
        try:
            return self.models[alias]
        except KeyError:
            raise ProviderConfigError(
                f"Model '{alias}' is not defined in models.toml.", provider=alias
            ) from None

    def _require_key(self, model_config: Dict[str, Any]) -> str:
        api_name = model_config.get("api", "")
        label = model_config.get("provider_label", api_name.title())
        api_key = self.settings.key_for(api_name, model_config.get("api_key_env"))
        if not api_key:
            raise ProviderConfigError(
                f"{label} API Key is missing. Please add it in the Settings.",
                provider=api_name,
            )
        return api_key

    def open_stream(self, entry: HistoryEntry) -> Iterator[str]:
        """Stream source for a history entry: image analysis or term lookup."""
        if entry.kind is EntryKind.IMAGE and entry.image is not None:
            return self.stream_image_description(entry.image)
        return self.stream_definition(entry.label)

    def stream_definition(self, topic: str) -> Iterator[str]:
        """Stream an explanation of ``topic`` from the selected model."""
        choice = self.choice
        model_config = self._model_config(choice.value)
        api_key = self._require_key(model_config)
        prompt = definition_prompt(topic)
        logger.info(f"Streaming definition topic={topic!r} model={choice.value}")

        try:
            if choice is ModelChoice.GEMINI:
                yield from gemini.stream_generate(
                    model_config,
                    api_key,
                    [gemini.text_part(prompt)],
                    timeout=self.timeout,
                )
            else:
                extra_headers = OPENROUTER_HEADERS if choice is ModelChoice.GROK else None
                yield from openai_compat.stream_chat_completion(
                    model_config,
                    api_key,
                    prompt,
                    timeout=self.timeout,
                    extra_headers=extra_headers,
                )
        except (StreamError, requests.RequestException) as e:
            logger.warning(f"Definition stream failed topic={topic!r}: {e}")
            yield error_fragment(f'Could not generate content for "{topic}". {e}')

    def stream_image_description(self, image: ImageAttachment) -> Iterator[str]:
        """Stream a description of an uploaded image (always Gemini vision)."""
        model_config = self._model_config(IMAGE_MODEL)
        api_key = self._require_key(model_config)
        logger.info(f"Streaming image description path={image.path}")

        try:
            parts = [
                gemini.inline_image_part(image.read_base64(), image.mime_type),
                gemini.text_part(IMAGE_PROMPT),
            ]
            yield from gemini.stream_generate(
                model_config, api_key, parts, timeout=self.timeout
            )
        except (StreamError, requests.RequestException, ValueError) as e:
            logger.warning(f"Image stream failed path={image.path}: {e}")
            yield error_fragment(f"Could not analyze image. {e}")

    def random_word(self) -> str:
        """One-shot request for a random word or short concept."""
        model_config = self._model_config(RANDOM_MODEL)
        api_key = self._require_key(model_config)
        try:
            text = gemini.generate(
                model_config,
                api_key,
                [gemini.text_part(RANDOM_WORD_PROMPT)],
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StreamError(str(e), provider="gemini") from e
        return text.strip()
