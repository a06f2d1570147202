"""Application entry point for the Arty AI image generator."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import gradio as gr
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from config.settings import AppConfig, load_config
from modules.api.routes import build_router
from modules.services.download_service import DownloadService
from modules.services.generation_service import GenerationService
from modules.services.history_service import GenerationHistoryService, JsonFileStore
from modules.services.storage_service import MEDIA_ROUTE
from modules.ui.layout import build_app
from modules.ui.presets import load_prompt_library
from modules.utils.logging import setup_logging


def create_app(config: AppConfig) -> Any:
    """Wire services, the API router and the Gradio UI into one ASGI app."""
    generator = GenerationService(config)
    history = GenerationHistoryService(
        JsonFileStore(config.history_path),
        key=config.history_key,
        id_prefix=config.download_prefix,
    )
    downloader = DownloadService(prefix=config.download_prefix, timeout=config.request_timeout)

    api = FastAPI(title="Arty AI")
    api.include_router(build_router(generator, downloader, history))

    storage_dir = Path(config.storage_dir)
    storage_dir.mkdir(parents=True, exist_ok=True)
    api.mount(MEDIA_ROUTE, StaticFiles(directory=str(storage_dir)), name="media")

    demo = build_app(
        config,
        generator=generator,
        history=history,
        prompt_library=load_prompt_library(config.assets_dir),
    )
    demo.queue()
    return gr.mount_gradio_app(api, demo, path="/")


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and serve the application."""
    config = load_config(config_path)
    logger = setup_logging(config)
    logger.info("starting Arty AI on %s:%s (rehost=%s)", config.host, config.port, config.rehost_images)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
