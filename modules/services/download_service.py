"""Download proxy: fetch an image and relabel it as an attachment."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from modules.errors import ProxyError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(slots=True)
class DownloadPayload:
    """Image bytes ready to be served as a download."""

    content: bytes
    content_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


class DownloadService:
    """Fetch arbitrary image URLs on behalf of the browser."""

    def __init__(
        self,
        prefix: str = "arty-ai",
        extension: str = "png",
        timeout: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.prefix = prefix
        self.extension = extension
        self.timeout = timeout
        self._clock = clock or time.time

    def filename(self) -> str:
        return f"{self.prefix}-{int(self._clock() * 1000)}.{self.extension}"

    def fetch(self, url: str) -> DownloadPayload:
        """Fetch ``url`` and return its bytes.

        Raises:
            ProxyError: on network faults or a non-2xx upstream response.
        """
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("download failed for %s: %s", url[:120], exc)
            raise ProxyError(f"Failed to fetch image: {exc}") from exc

        if not response.ok:
            message = f"Failed to fetch image: {response.reason or response.status_code}"
            logger.error("download failed for %s: %s", url[:120], message)
            raise ProxyError(message)

        content_type = response.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
        return DownloadPayload(
            content=response.content,
            content_type=content_type,
            filename=self.filename(),
        )
