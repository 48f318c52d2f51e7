"""Configuration loading and hydration logic."""

import shutil
import sys
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any, Dict

CONFIG_FILES = [
    "general.toml",
    "api.toml",
    "models.toml",
    "prompts.toml",
]


def _get_config_dir() -> Path:
    """Return the configuration directory path."""
    return Path.home() / ".config" / "polywiki"


def _hydrate_models(config: Dict[str, Any]) -> Dict[str, Any]:
    """Hydrate model definitions with API details."""
    api_defs = config.get("api", {})
    models = config.get("models", {})

    for alias, model_data in models.items():
        model_data["alias"] = alias
        api_ref = model_data.get("api")
        if api_ref and api_ref in api_defs:
            api_config = api_defs[api_ref]

            if "url" in api_config and "base_url" not in model_data:
                model_data["base_url"] = api_config["url"]

            if "api_key_env" in api_config and "api_key_env" not in model_data:
                model_data["api_key_env"] = api_config["api_key_env"]

            if "label" in api_config and "provider_label" not in model_data:
                model_data["provider_label"] = api_config["label"]

    return config


def merge(base: Dict[str, Any], update: Dict[str, Any]) -> None:
    """Deep-merge ``update`` into ``base`` in place."""
    for k, v in update.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            merge(base[k], v)
        else:
            base[k] = v


def load_config() -> Dict[str, Any]:
    """Load configuration from TOML files, falling back to bundled defaults."""
    config_dir = _get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    final_config: Dict[str, Any] = {
        "general": {},
        "api": {},
        "models": {},
        "prompts": {},
    }

    # 1. Bundled defaults, copied to the user directory when missing
    for filename in CONFIG_FILES:
        try:
            resource_path = resources.files("polywiki.data.config").joinpath(filename)
            user_file_path = config_dir / filename

            with resource_path.open("rb") as f:
                merge(final_config, tomllib.load(f))

            if not user_file_path.exists():
                try:
                    with resources.as_file(resource_path) as source_path:
                        shutil.copy(source_path, user_file_path)
                except OSError as e:
                    print(f"Warning: Failed to create default config {filename}: {e}")

        except (OSError, tomllib.TOMLDecodeError) as e:
            print(f"Warning: Failed to load bundled config {filename}: {e}")

    # 2. User overrides
    for filename in CONFIG_FILES:
        user_file_path = config_dir / filename
        if not user_file_path.exists():
            continue
        try:
            with open(user_file_path, "rb") as f:
                merge(final_config, tomllib.load(f))
        except tomllib.TOMLDecodeError as e:
            print(
                f"Error: Invalid configuration file at {user_file_path}",
                file=sys.stderr,
            )
            print(f"Details: {e}", file=sys.stderr)
            sys.exit(1)
        except OSError as e:
            print(f"Warning: Failed to load config from {user_file_path}: {e}")

    return _hydrate_models(final_config)
