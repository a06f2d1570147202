"""Image-to-image request construction."""

from __future__ import annotations

from typing import Optional

from config.settings import AppConfig
from modules.errors import ValidationError
from modules.pipelines.schema import GenerationMode, GenerationRequest
from modules.pipelines.text2img import ImageResult, Text2ImageService


def compose_prompt(image: str, instruction: str) -> str:
    """Prefix the instruction with the base image reference."""
    return f"{image} {instruction}"


class Image2ImageService:
    """Build image API URLs that edit a base image.

    The editing model reads the base image from the prompt itself, so the
    image reference is folded into the prompt instead of a query parameter.
    """

    def __init__(self, config: AppConfig, text_service: Optional[Text2ImageService] = None) -> None:
        self.config = config
        self._text_service = text_service or Text2ImageService(config)

    def generate(self, request: GenerationRequest) -> ImageResult:
        """Return the image URL for an image-to-image request."""
        if not request.image:
            raise ValidationError("image required")

        options = self._text_service.options_for(request)
        options.pop("transparent", None)
        options.pop("image", None)
        options["model"] = self.config.image_to_image_model

        full_prompt = compose_prompt(request.image, request.prompt)
        image_request = self._text_service.build(full_prompt, options)
        return ImageResult(
            image_url=image_request.url,
            prompt=request.prompt,
            mode=GenerationMode.IMAGE_TO_IMAGE,
            request=image_request,
        )
