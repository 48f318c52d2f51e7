from unittest.mock import patch

import pytest

from polywiki.config import MODELS, RANDOM_CONCEPTS
from polywiki.config.loader import load_config
from polywiki.providers.base import ModelChoice


def test_every_model_choice_is_configured():
    for choice in ModelChoice:
        assert choice.value in MODELS
        config = MODELS[choice.value]
        assert "id" in config
        assert config["base_url"].startswith("https://")
        assert config["api_key_env"]


def test_random_concepts_present():
    assert set(RANDOM_CONCEPTS) >= {"Paradox", "Entropy", "Recursion", "Silence", "Chaos", "Void"}


def test_defaults_copied_and_user_overrides_merged(tmp_path):
    config_dir = tmp_path / "polywiki"
    config_dir.mkdir()
    (config_dir / "general.toml").write_text('[general]\nmin_render_chars = 5\n')

    with patch("polywiki.config.loader._get_config_dir", return_value=config_dir):
        config = load_config()

    assert config["general"]["min_render_chars"] == 5
    assert config["general"]["default_model"] == "gemini"
    assert (config_dir / "models.toml").exists()
    assert config["models"]["grok"]["provider_label"] == "OpenRouter"
    assert config["models"]["grok"]["alias"] == "grok"


def test_invalid_config_exits(tmp_path):
    config_dir = tmp_path / "polywiki"
    config_dir.mkdir()
    (config_dir / "general.toml").write_text("invalid_toml = [")

    with patch("polywiki.config.loader._get_config_dir", return_value=config_dir):
        with pytest.raises(SystemExit) as excinfo:
            load_config()
        assert excinfo.value.code == 1
