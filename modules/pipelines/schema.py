"""Typed generation requests and the upstream request descriptor.

Raw form payloads (Gradio inputs, JSON bodies) are loosely typed: numbers may
arrive as strings, switches as ``"on"`` and empty fields as ``""``. They are
mapped once, at the boundary, onto a :class:`GenerationRequest` whose mode
decides which builder runs next.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from modules.errors import ValidationError

FLAG_NAMES = ("nologo", "private", "enhance", "safe")

_TRUTHY = {"true", "on", "1", "yes"}


class GenerationMode(str, Enum):
    """Supported generation strategies."""

    TEXT_TO_IMAGE = "text-to-image"
    IMAGE_TO_IMAGE = "image-to-image"
    TRANSPARENT_BACKGROUND = "transparent-background"


_MODE_ALIASES = {
    "transparent-bg": GenerationMode.TRANSPARENT_BACKGROUND,
}


@dataclass(slots=True, frozen=True)
class GenerationFlags:
    """Boolean switches forwarded to the image API."""

    nologo: bool = False
    private: bool = False
    enhance: bool = False
    safe: bool = False

    def as_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in FLAG_NAMES}


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    """Validated generation request."""

    mode: GenerationMode
    prompt: str
    width: Optional[int] = None
    height: Optional[int] = None
    seed: Optional[int] = None
    model: Optional[str] = None
    image: Optional[str] = None
    transparent: bool = False
    flags: GenerationFlags = field(default_factory=GenerationFlags)


@dataclass(slots=True, frozen=True)
class ImageRequest:
    """Upstream request descriptor: an endpoint plus ordered query parameters."""

    endpoint: str
    params: tuple[tuple[str, str], ...] = ()

    @property
    def query(self) -> str:
        return urlencode(self.params)

    @property
    def url(self) -> str:
        query = self.query
        return f"{self.endpoint}?{query}" if query else self.endpoint

    def get(self, name: str) -> Optional[str]:
        for key, value in self.params:
            if key == name:
                return value
        return None


def parse_mode(value: Any) -> GenerationMode:
    """Resolve a raw mode value, accepting the legacy ``transparent-bg`` alias."""
    if isinstance(value, GenerationMode):
        return value
    raw = str(value or "").strip().lower()
    if raw in _MODE_ALIASES:
        return _MODE_ALIASES[raw]
    try:
        return GenerationMode(raw)
    except ValueError as exc:
        raise ValidationError("invalid mode") from exc


def coerce_positive_int(value: Any) -> Optional[int]:
    """Return a positive integer, or None when the value is absent, zero or invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        number = int(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                parsed = float(text)
            except ValueError:
                return None
            if not math.isfinite(parsed) or not parsed.is_integer():
                return None
            number = int(parsed)
    return number if number > 0 else None


def coerce_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_request(fields: Mapping[str, Any]) -> GenerationRequest:
    """Validate a raw field set and return a typed request.

    Raises:
        ValidationError: ``"prompt required"`` for a missing or blank prompt,
            ``"invalid mode"`` for a mode outside the supported set and
            ``"image required"`` for image-to-image without an input image.
    """
    prompt = fields.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("prompt required")

    mode = parse_mode(fields.get("mode"))

    image = _optional_text(fields.get("image"))
    if mode is GenerationMode.IMAGE_TO_IMAGE:
        if image is None:
            raise ValidationError("image required")
    else:
        image = None

    flags = GenerationFlags(**{name: coerce_flag(fields.get(name)) for name in FLAG_NAMES})
    return GenerationRequest(
        mode=mode,
        prompt=prompt,
        width=coerce_positive_int(fields.get("width")),
        height=coerce_positive_int(fields.get("height")),
        seed=coerce_positive_int(fields.get("seed")),
        model=_optional_text(fields.get("model")),
        image=image,
        transparent=coerce_flag(fields.get("transparent")),
        flags=flags,
    )
