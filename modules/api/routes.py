"""HTTP routes: download proxy, JSON generation and history endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from modules.errors import ProxyError
from modules.services.download_service import DownloadService
from modules.services.generation_service import GenerationService
from modules.services.history_service import GenerationHistoryService

_ERROR_STATUS = {
    "ValidationError": 400,
    "UpstreamFetchError": 502,
}


def build_router(
    generator: GenerationService,
    downloader: DownloadService,
    history: Optional[GenerationHistoryService] = None,
) -> APIRouter:
    """Return the ``/api`` router bound to the given services."""
    router = APIRouter(prefix="/api")

    @router.get("/download")
    def download(url: Optional[str] = None) -> Response:
        if not url:
            return PlainTextResponse("Image URL is required", status_code=400)
        try:
            payload = downloader.fetch(url)
        except ProxyError as exc:
            return PlainTextResponse(str(exc), status_code=exc.status_code)
        return Response(
            content=payload.content,
            media_type=payload.content_type,
            headers={"Content-Disposition": payload.content_disposition},
        )

    @router.post("/generate")
    def generate(fields: Dict[str, Any] = Body(...)) -> JSONResponse:
        result = generator.generate(fields)
        if not result.ok:
            status = _ERROR_STATUS.get(result.error_type or "", 500)
            return JSONResponse(status_code=status, content=result.to_dict())

        content = result.to_dict()
        if history is not None:
            entry = history.record(result.prompt or "", result.image_url)
            content["historyId"] = entry.id
            if history.warnings:
                content["warning"] = history.warnings[-1]
                history.warnings.clear()
        return JSONResponse(content=content)

    @router.get("/history")
    def list_history(limit: Optional[int] = None) -> Dict[str, Any]:
        entries = history.list(limit) if history is not None else []
        return {"items": [entry.to_dict() for entry in entries]}

    @router.delete("/history/{entry_id}")
    def delete_history_entry(entry_id: str) -> Dict[str, Any]:
        persisted = history.remove(entry_id) if history is not None else True
        return {"deleted": entry_id, "persisted": persisted}

    @router.delete("/history")
    def clear_history() -> Dict[str, Any]:
        persisted = history.clear() if history is not None else True
        return {"cleared": True, "persisted": persisted}

    return router
