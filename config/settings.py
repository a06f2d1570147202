"""Configuration helpers for the Arty AI image generator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_MODELS = ("flux", "kontext", "turbo", "gptimage")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_base_url: str = "https://image.pollinations.ai/prompt"
    image_to_image_model: str = "kontext"
    transparent_model: str = "gptimage"
    default_model: str = "flux"
    available_models: list[str] = field(default_factory=lambda: list(DEFAULT_MODELS))
    seed_range: int = 1_000_000
    request_timeout: float = 60.0
    rehost_images: bool = False
    storage_dir: Path = Path("storage/images")
    storage_max_items: int = 200
    public_base_url: str = ""
    history_path: Path = Path("logs/history.json")
    history_key: str = "arty-ai-history"
    download_prefix: str = "arty-ai"
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    assets_dir: Path = Path("assets")
    host: str = "127.0.0.1"
    port: int = 7860
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    default_model = os.getenv("DEFAULT_IMAGE_MODEL") or defaults.default_model
    available_models = list(DEFAULT_MODELS)
    if default_model not in available_models:
        available_models.insert(0, default_model)

    log_dir = Path(os.getenv("LOG_DIR", str(defaults.log_dir))).expanduser()
    history_path = Path(os.getenv("HISTORY_PATH") or log_dir / "history.json").expanduser()

    metadata: dict[str, Any] = {"env_file": str(env_path)}
    return AppConfig(
        api_base_url=(os.getenv("IMAGE_API_BASE_URL") or defaults.api_base_url).rstrip("/"),
        image_to_image_model=os.getenv("IMAGE_TO_IMAGE_MODEL") or defaults.image_to_image_model,
        transparent_model=os.getenv("TRANSPARENT_MODEL") or defaults.transparent_model,
        default_model=default_model,
        available_models=available_models,
        request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
        rehost_images=_env_bool("REHOST_IMAGES", defaults.rehost_images),
        storage_dir=Path(os.getenv("STORAGE_DIR", str(defaults.storage_dir))).expanduser(),
        storage_max_items=_env_int("STORAGE_MAX_ITEMS", defaults.storage_max_items),
        public_base_url=(os.getenv("PUBLIC_BASE_URL") or "").rstrip("/"),
        history_path=history_path,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL") or defaults.log_level,
        assets_dir=Path(os.getenv("ASSETS_DIR", str(defaults.assets_dir))).expanduser(),
        host=os.getenv("HOST") or defaults.host,
        port=_env_int("PORT", defaults.port),
        metadata=metadata,
    )
