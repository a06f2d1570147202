"""File storage for rehosted images."""

from __future__ import annotations

import json
import logging
import mimetypes
import time
import uuid
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

MEDIA_ROUTE = "/media"

_EXTENSION_OVERRIDES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def extension_for(content_type: Optional[str]) -> str:
    """Return a file extension for a content type, defaulting to PNG."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime in _EXTENSION_OVERRIDES:
        return _EXTENSION_OVERRIDES[mime]
    if not mime:
        return ".png"
    return mimetypes.guess_extension(mime) or ".png"


class StorageService:
    """Persist generated images and hand out stable links to them."""

    def __init__(self, output_dir: Path, public_base_url: str = "", prefix: str = "arty-ai") -> None:
        self.output_dir = Path(output_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.prefix = prefix

    def save_image(self, content: bytes, content_type: Optional[str], metadata: Dict[str, str]) -> Path:
        """Persist image bytes with a metadata sidecar and return the file path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        name = f"{self.prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        path = self.output_dir / f"{name}{extension_for(content_type)}"
        path.write_bytes(content)

        sidecar = dict(metadata)
        sidecar["content_type"] = content_type or ""
        path.with_suffix(".json").write_text(json.dumps(sidecar, ensure_ascii=False), encoding="utf-8")
        logger.info("stored image %s (%d bytes)", path.name, len(content))
        return path

    def url_for(self, path: Path) -> str:
        return f"{self.public_base_url}{MEDIA_ROUTE}/{Path(path).name}"

    def list_images(self) -> list[Path]:
        """Return stored images, oldest first."""
        if not self.output_dir.exists():
            return []
        images = [p for p in self.output_dir.iterdir() if p.is_file() and p.suffix != ".json"]
        return sorted(images, key=lambda p: (p.stat().st_mtime, p.name))

    def cleanup(self, max_items: int = 100) -> int:
        """Limit the number of stored artifacts; returns how many were removed."""
        images = self.list_images()
        excess = len(images) - max(max_items, 0)
        removed = 0
        for path in images[: max(excess, 0)]:
            path.unlink(missing_ok=True)
            path.with_suffix(".json").unlink(missing_ok=True)
            removed += 1
        if removed:
            logger.info("pruned %d stored images", removed)
        return removed
