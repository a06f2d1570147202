"""Error types shared by the generation, history and download layers."""

from __future__ import annotations

from typing import Optional


class ArtyError(Exception):
    """Base class for all application errors."""


class ValidationError(ArtyError):
    """Raised when a generation form is missing or has malformed fields."""


class GenerationError(ArtyError):
    """Raised when a generation attempt fails after validation."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamFetchError(GenerationError):
    """Network fault or non-2xx response while fetching from upstream."""


class PersistenceError(ArtyError):
    """History could not be written to its backing store."""


class ProxyError(ArtyError):
    """The download proxy could not fetch or relay an image."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
