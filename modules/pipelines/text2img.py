"""Text-to-image request construction."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

from config.settings import AppConfig
from modules.pipelines.schema import GenerationMode, GenerationRequest, ImageRequest

logger = logging.getLogger(__name__)

# Canonical query parameter order.
PARAM_ORDER = (
    "width",
    "height",
    "seed",
    "model",
    "transparent",
    "image",
    "nologo",
    "private",
    "enhance",
    "safe",
)

# Characters left untouched by JavaScript's encodeURIComponent.
_PATH_SAFE = "-_.!~*'()"


@dataclass(slots=True)
class ImageResult:
    """Result payload produced by a mode service."""

    image_url: str
    prompt: str
    mode: GenerationMode
    request: ImageRequest


def encode_prompt(prompt: str) -> str:
    """Percent-encode a prompt for use as a single path segment."""
    return quote(prompt, safe=_PATH_SAFE)


class Text2ImageService:
    """Build image API URLs for text prompts.

    The upstream API generates on GET, so the constructed URL is the image.
    When no explicit seed is supplied a random one is drawn so that repeated
    prompts are not served from the upstream cache.
    """

    def __init__(self, config: AppConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self._rng = rng or random.Random()

    def _draw_seed(self) -> int:
        return self._rng.randrange(self.config.seed_range)

    def options_for(self, request: GenerationRequest) -> dict[str, Any]:
        """Collect the optional parameters carried by a request."""
        options: dict[str, Any] = {
            "width": request.width,
            "height": request.height,
            "seed": request.seed,
            "model": request.model,
            "transparent": request.transparent,
            "image": request.image,
        }
        options.update(request.flags.as_dict())
        return options

    def build(self, prompt: str, options: Mapping[str, Any]) -> ImageRequest:
        """Encode a prompt and its options into an upstream request descriptor."""
        values = dict(options)
        if not values.get("seed"):
            values["seed"] = self._draw_seed()

        params: list[tuple[str, str]] = []
        for name in PARAM_ORDER:
            value = values.get(name)
            if value is None or value is False or value == "":
                continue
            params.append((name, "true" if value is True else str(value)))

        endpoint = f"{self.config.api_base_url}/{encode_prompt(prompt)}"
        return ImageRequest(endpoint=endpoint, params=tuple(params))

    def generate(self, request: GenerationRequest) -> ImageResult:
        """Return the image URL for a text-to-image request."""
        image_request = self.build(request.prompt, self.options_for(request))
        logger.debug("text-to-image url built: %s", image_request.endpoint)
        return ImageResult(
            image_url=image_request.url,
            prompt=request.prompt,
            mode=GenerationMode.TEXT_TO_IMAGE,
            request=image_request,
        )
