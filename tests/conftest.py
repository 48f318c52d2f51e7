import os
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def mock_settings_env_vars(tmp_path):
    """Isolate HOME, the favorites database and provider keys for every test."""
    fake_home = tmp_path / "fake_home"
    fake_home.mkdir()

    with patch("pathlib.Path.home", return_value=fake_home):
        with patch.dict(
            os.environ,
            {"HOME": str(fake_home), "POLYWIKI_DB_PATH": str(fake_home / "test.db")},
        ):
            for name in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "CEREBRAS_API_KEY"):
                os.environ.pop(name, None)
            yield
