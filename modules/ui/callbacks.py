"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any, List, Optional
from urllib.parse import quote

from config.settings import AppConfig
from modules.services.generation_service import GenerationService
from modules.services.history_service import GenerationHistoryService, HistoryEntry
from modules.ui.presets import AdvancedSettings, PromptLibrary, resolve_layout
from modules.utils.image_utils import upload_to_data_uri

logger = logging.getLogger(__name__)

HISTORY_HEADERS = ["id", "prompt", "image", "created"]


def download_link(image_url: str) -> str:
    """Markdown link that routes a download through the proxy endpoint."""
    return f"[Download](/api/download?url={quote(image_url, safe='')})"


def history_rows(entries: List[HistoryEntry]) -> List[List[str]]:
    rows: List[List[str]] = []
    for entry in entries:
        created = datetime.fromtimestamp(entry.created_at / 1000).strftime("%Y-%m-%d %H:%M:%S")
        rows.append([entry.id, entry.prompt, entry.image_url, created])
    return rows


def build_callbacks(
    config: AppConfig,
    generator: Optional[GenerationService] = None,
    history: Optional[GenerationHistoryService] = None,
    prompt_library: Optional[PromptLibrary] = None,
    rng: Optional[random.Random] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    library = prompt_library or PromptLibrary()
    defaults = AdvancedSettings(model=config.default_model)

    def _ensure_generator() -> GenerationService:
        if generator is None:
            raise RuntimeError("Generation service is not configured")
        return generator

    def _rows() -> List[List[str]]:
        return history_rows(history.list()) if history is not None else []

    def _drain_warnings() -> Optional[str]:
        if history is None or not history.warnings:
            return None
        message = history.warnings[-1]
        history.warnings.clear()
        return message

    def on_generate(
        mode: str,
        prompt: str,
        width: Any,
        height: Any,
        seed: Any,
        image: Any,
        model: str,
        enhance: bool,
        nologo: bool,
        private: bool,
        safe: bool,
    ) -> tuple[Optional[str], str, str, str, List[List[str]]]:
        service = _ensure_generator()
        try:
            image_uri = upload_to_data_uri(image)
        except OSError as exc:
            return None, f"Generation failed: could not read image ({exc})", prompt, "", _rows()

        result = service.generate(
            {
                "mode": mode,
                "prompt": prompt,
                "width": width,
                "height": height,
                "seed": seed,
                "image": image_uri,
                "model": model,
                "enhance": enhance,
                "nologo": nologo,
                "private": private,
                "safe": safe,
            }
        )
        if not result.ok:
            return None, f"Generation failed: {result.error_message}", prompt, "", _rows()

        status = "Image generated."
        if history is not None:
            history.record(result.prompt or prompt, result.image_url)
            warning = _drain_warnings()
            if warning:
                status += f" Warning: {warning}"
        return result.image_url, status, result.prompt or prompt, download_link(result.image_url), _rows()

    def on_select_layout(key: str) -> tuple[int, int]:
        layout = resolve_layout(key)
        return layout.width, layout.height

    def on_random_prompt() -> str:
        return library.random_prompt(rng)

    def on_reset_advanced() -> tuple[str, bool, bool, bool, bool, str]:
        return (
            defaults.model,
            defaults.enhance,
            defaults.nologo,
            defaults.private,
            defaults.safe,
            "Advanced settings reset.",
        )

    def on_refresh_history() -> List[List[str]]:
        return _rows()

    def on_delete_history(entry_id: str) -> tuple[List[List[str]], str]:
        if history is None:
            return [], "History is not available."
        entry_id = (entry_id or "").strip()
        if not entry_id:
            return _rows(), "Select an image to delete."
        if history.get(entry_id) is None:
            return _rows(), f"No history entry with id {entry_id}."
        if not history.remove(entry_id):
            _drain_warnings()
            return _rows(), "Error: Could not delete the image from history."
        return _rows(), "Image deleted from history."

    def on_clear_history() -> tuple[List[List[str]], str]:
        if history is None:
            return [], "History is not available."
        if not history.clear():
            warning = _drain_warnings()
            return _rows(), f"History cleared, but it could not be saved: {warning}"
        return _rows(), "History cleared."

    return {
        "on_generate": on_generate,
        "on_select_layout": on_select_layout,
        "on_random_prompt": on_random_prompt,
        "on_reset_advanced": on_reset_advanced,
        "on_refresh_history": on_refresh_history,
        "on_delete_history": on_delete_history,
        "on_clear_history": on_clear_history,
    }
