"""Transparent-background request construction."""

from __future__ import annotations

from typing import Optional

from config.settings import AppConfig
from modules.pipelines.schema import GenerationMode, GenerationRequest
from modules.pipelines.text2img import ImageResult, Text2ImageService


class TransparentImageService:
    """Build image API URLs for the transparent-background model."""

    def __init__(self, config: AppConfig, text_service: Optional[Text2ImageService] = None) -> None:
        self.config = config
        self._text_service = text_service or Text2ImageService(config)

    def generate(self, request: GenerationRequest) -> ImageResult:
        # Only the model is forwarded; dimensions and flags are ignored.
        image_request = self._text_service.build(
            request.prompt,
            {"model": self.config.transparent_model},
        )
        return ImageResult(
            image_url=image_request.url,
            prompt=request.prompt,
            mode=GenerationMode.TRANSPARENT_BACKGROUND,
            request=image_request,
        )
