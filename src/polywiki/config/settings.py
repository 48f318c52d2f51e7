"""User-editable provider settings persisted in settings.toml."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import tomllib
import tomlkit

from polywiki.config.loader import _get_config_dir

SETTINGS_FILENAME = "settings.toml"
DEFAULT_SELECTED_MODEL = "gemini"
GEMINI_KEY_ENV = "GEMINI_API_KEY"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSettings:
    """Credentials and model choice injected into the provider router."""

    gemini_api_key: str = ""
    openrouter_api_key: str = ""
    cerebras_api_key: str = ""
    selected_model: str = DEFAULT_SELECTED_MODEL

    def key_for(self, api_name: str, env_name: Optional[str] = None) -> str:
        """Return the stored key for an API, falling back to its env variable."""
        stored = str(getattr(self, f"{api_name}_api_key", "") or "").strip()
        if stored:
            return stored
        if env_name:
            return os.environ.get(env_name, "").strip()
        return ""

    def with_changes(self, **changes: str) -> "ProviderSettings":
        return replace(self, **changes)


def _settings_path() -> Path:
    return _get_config_dir() / SETTINGS_FILENAME


def _load_toml_document(path: Path) -> tomlkit.TOMLDocument:
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("[settings]\n")
    content = path.read_text()
    return tomlkit.parse(content or "[settings]\n")


def load_settings() -> ProviderSettings:
    """Load settings from settings.toml, defaulting when the file is missing."""
    path = _settings_path()
    if not path.exists():
        logger.debug("settings file is missing: %s", path)
        return ProviderSettings()
    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as e:
        print(f"Error: Invalid settings file at {path}", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)
    raw = parsed.get("settings", {}) if isinstance(parsed, dict) else {}
    return ProviderSettings(
        gemini_api_key=str(raw.get("gemini_api_key", "") or "").strip(),
        openrouter_api_key=str(raw.get("openrouter_api_key", "") or "").strip(),
        cerebras_api_key=str(raw.get("cerebras_api_key", "") or "").strip(),
        selected_model=str(
            raw.get("selected_model", DEFAULT_SELECTED_MODEL) or DEFAULT_SELECTED_MODEL
        ).strip(),
    )


def save_settings(settings: ProviderSettings) -> ProviderSettings:
    """Persist settings into settings.toml, keeping unrelated keys and comments."""
    path = _settings_path()
    doc = _load_toml_document(path)
    if "settings" not in doc:
        doc["settings"] = tomlkit.table()
    table = doc["settings"]
    table["gemini_api_key"] = settings.gemini_api_key
    table["openrouter_api_key"] = settings.openrouter_api_key
    table["cerebras_api_key"] = settings.cerebras_api_key
    table["selected_model"] = settings.selected_model
    path.write_text(doc.as_string())
    logger.debug(
        "saved settings at %s selected_model=%s", path, settings.selected_model
    )
    return load_settings()


def update_settings(
    *,
    gemini_api_key: Optional[str] = None,
    openrouter_api_key: Optional[str] = None,
    cerebras_api_key: Optional[str] = None,
    selected_model: Optional[str] = None,
) -> ProviderSettings:
    """Apply the given changes on top of the stored settings and save."""
    current = load_settings()
    changes = {
        name: value.strip()
        for name, value in (
            ("gemini_api_key", gemini_api_key),
            ("openrouter_api_key", openrouter_api_key),
            ("cerebras_api_key", cerebras_api_key),
            ("selected_model", selected_model),
        )
        if value is not None
    }
    return save_settings(current.with_changes(**changes))
