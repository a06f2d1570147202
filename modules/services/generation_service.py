"""Generation dispatcher: validate, route by mode and wrap the outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests

from config.settings import AppConfig
from modules.errors import GenerationError, UpstreamFetchError, ValidationError
from modules.pipelines.img2img import Image2ImageService
from modules.pipelines.schema import GenerationMode, parse_request
from modules.pipelines.text2img import ImageResult, Text2ImageService
from modules.pipelines.transparent import TransparentImageService
from modules.services.storage_service import StorageService

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "An unknown error occurred."


@dataclass(slots=True)
class GenerationResult:
    """Outcome of one generation attempt: an image URL or an error, never both."""

    image_url: Optional[str] = None
    error_message: Optional[str] = None
    prompt: Optional[str] = None
    status_code: Optional[int] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image_url is not None

    @classmethod
    def success(cls, image_url: str, prompt: Optional[str]) -> "GenerationResult":
        return cls(image_url=image_url, prompt=prompt)

    @classmethod
    def failure(
        cls,
        message: str,
        prompt: Optional[str] = None,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
    ) -> "GenerationResult":
        return cls(error_message=message, prompt=prompt, status_code=status_code, error_type=error_type)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"imageUrl": self.image_url, "prompt": self.prompt}
        payload: Dict[str, Any] = {"error": self.error_message, "prompt": self.prompt}
        if self.status_code is not None:
            payload["status"] = self.status_code
        return payload


class GenerationService:
    """Run one generation end to end without raising past its boundary."""

    def __init__(
        self,
        config: AppConfig,
        text2img: Optional[Text2ImageService] = None,
        image2img: Optional[Image2ImageService] = None,
        transparent: Optional[TransparentImageService] = None,
        storage: Optional[StorageService] = None,
    ) -> None:
        self.config = config
        text_service = text2img or Text2ImageService(config)
        self._services = {
            GenerationMode.TEXT_TO_IMAGE: text_service,
            GenerationMode.IMAGE_TO_IMAGE: image2img or Image2ImageService(config, text_service),
            GenerationMode.TRANSPARENT_BACKGROUND: transparent or TransparentImageService(config, text_service),
        }
        self._storage = storage

    @property
    def storage(self) -> StorageService:
        if self._storage is None:
            self._storage = StorageService(
                self.config.storage_dir,
                public_base_url=self.config.public_base_url,
                prefix=self.config.download_prefix,
            )
        return self._storage

    def generate(self, fields: Mapping[str, Any]) -> GenerationResult:
        """Validate a raw field set and return the result envelope."""
        raw_prompt = fields.get("prompt")
        prompt = raw_prompt if isinstance(raw_prompt, str) else None

        try:
            request = parse_request(fields)
        except ValidationError as exc:
            logger.info("rejected generation request: %s", exc)
            return GenerationResult.failure(str(exc), prompt, error_type=type(exc).__name__)

        try:
            result = self._services[request.mode].generate(request)
            if not result.image_url:
                raise GenerationError("Image generation failed: No image URL was returned.")
            image_url = self._rehost(result) if self.config.rehost_images else result.image_url
        except ValidationError as exc:
            return GenerationResult.failure(str(exc), prompt, error_type=type(exc).__name__)
        except GenerationError as exc:
            logger.error("generation failed (%s): %s", request.mode.value, exc)
            return GenerationResult.failure(str(exc), prompt, exc.status_code, type(exc).__name__)
        except Exception:  # noqa: BLE001
            logger.exception("unexpected generation failure (%s)", request.mode.value)
            return GenerationResult.failure(UNKNOWN_ERROR, prompt, error_type="InternalError")

        logger.info("generated %s image: %s", request.mode.value, result.request.endpoint[:120])
        return GenerationResult.success(image_url, prompt)

    def _rehost(self, result: ImageResult) -> str:
        """Copy the upstream image into local storage and return the stable link."""
        try:
            response = requests.get(result.image_url, timeout=self.config.request_timeout)
        except requests.RequestException as exc:
            raise UpstreamFetchError(f"Failed to fetch image: {exc}") from exc

        if not response.ok:
            raise UpstreamFetchError(
                f"Failed to fetch image: {response.status_code} {response.reason or ''}".rstrip(),
                status_code=response.status_code,
            )

        try:
            path = self.storage.save_image(
                response.content,
                response.headers.get("Content-Type"),
                {"prompt": result.prompt, "mode": result.mode.value, "source": result.image_url},
            )
            self.storage.cleanup(self.config.storage_max_items)
        except OSError as exc:
            raise GenerationError(f"Failed to store image: {exc}") from exc
        return self.storage.url_for(path)
