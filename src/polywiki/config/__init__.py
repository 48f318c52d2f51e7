"""Configuration constants and re-exports for polywiki."""

import os
from pathlib import Path

from polywiki.config.loader import _get_config_dir, load_config

# --- Initialize Configuration ---
_CONFIG = load_config()

# General
_gen = _CONFIG["general"]
APP_TITLE = _gen.get("app_title", "PolyWiki")
DEFAULT_MODEL = _gen.get("default_model", "gemini")
IMAGE_MODEL = _gen.get("image_model", DEFAULT_MODEL)
RANDOM_MODEL = _gen.get("random_model", DEFAULT_MODEL)
REQUEST_TIMEOUT = _gen.get("request_timeout", 60)
LOG_LEVEL = _gen.get("log_level", "INFO")
LOG_FILE = _gen.get("log_file", "~/.config/polywiki/logs/polywiki.log")
MIN_RENDER_CHARS = _gen.get("min_render_chars", 20)
RANDOM_CONCEPTS = list(
    _gen.get(
        "random_concepts",
        ["Paradox", "Entropy", "Recursion", "Silence", "Chaos", "Void"],
    )
)

# Database
_db_env_var_name = _gen.get("db_path_env_var", "POLYWIKI_DB_PATH")
_env_path = os.environ.get(_db_env_var_name)

if _env_path:
    DB_PATH = Path(_env_path)
elif _gen.get("db_path"):
    DB_PATH = Path(_gen["db_path"]).expanduser()
else:
    DB_PATH = _get_config_dir() / "favorites.db"

# Providers and models
MODELS = _CONFIG["models"]

# Prompts
_prompts = _CONFIG["prompts"]
DEFINITION_PROMPT = _prompts.get("definition", "Explain the term below.\nTERM:").strip()
IMAGE_PROMPT = _prompts.get("image", "Describe this image.").strip()
RANDOM_WORD_PROMPT = _prompts.get(
    "random_word", "Respond with a single random interesting word."
).strip()
