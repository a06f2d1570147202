"""Configuration loading tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from config.settings import AppConfig, load_config

ENV_NAMES = (
    "IMAGE_API_BASE_URL",
    "IMAGE_TO_IMAGE_MODEL",
    "TRANSPARENT_MODEL",
    "DEFAULT_IMAGE_MODEL",
    "REQUEST_TIMEOUT",
    "REHOST_IMAGES",
    "STORAGE_DIR",
    "STORAGE_MAX_ITEMS",
    "PUBLIC_BASE_URL",
    "HISTORY_PATH",
    "LOG_DIR",
    "LOG_LEVEL",
    "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate os.environ; load_config writes .env values straight into it."""
    env = {key: value for key, value in os.environ.items() if key not in ENV_NAMES}
    monkeypatch.setattr(os, "environ", env)
    yield


def test_defaults_without_env_file(tmp_path):
    config = load_config(str(tmp_path / "missing.env"))
    defaults = AppConfig()

    assert config.api_base_url == defaults.api_base_url
    assert config.image_to_image_model == "kontext"
    assert config.transparent_model == "gptimage"
    assert config.rehost_images is False
    assert config.history_path == Path("logs") / "history.json"
    assert config.available_models == ["flux", "kontext", "turbo", "gptimage"]


def test_env_file_overrides(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# comment",
                "IMAGE_API_BASE_URL=https://images.example.test/prompt/",
                "REHOST_IMAGES=yes",
                "STORAGE_MAX_ITEMS=5",
                "REQUEST_TIMEOUT=not-a-number",
                "DEFAULT_IMAGE_MODEL=custom",
                f"LOG_DIR={tmp_path / 'logs'}",
                "PORT=9000",
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(str(env_file))

    assert config.api_base_url == "https://images.example.test/prompt"
    assert config.rehost_images is True
    assert config.storage_max_items == 5
    assert config.request_timeout == AppConfig().request_timeout
    assert config.default_model == "custom"
    assert config.available_models[0] == "custom"
    assert config.history_path == tmp_path / "logs" / "history.json"
    assert config.port == 9000
