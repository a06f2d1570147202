"""Image2ImageService and TransparentImageService unit tests."""

from __future__ import annotations

from urllib.parse import parse_qsl, unquote, urlsplit

import pytest

from config.settings import AppConfig
from modules.errors import ValidationError
from modules.pipelines import img2img
from modules.pipelines.schema import GenerationMode, GenerationRequest, parse_request
from modules.pipelines.text2img import Text2ImageService
from modules.pipelines.transparent import TransparentImageService

DATA_URI = "data:image/png;base64,iVBORw0KGgo="


class FixedRandom:
    def randrange(self, stop: int) -> int:
        return 321


def build_text_service(config: AppConfig) -> Text2ImageService:
    return Text2ImageService(config, rng=FixedRandom())


def decoded_prompt(url: str) -> str:
    path = urlsplit(url).path
    return unquote(path.split("/prompt/", 1)[1])


def test_combined_prompt_puts_image_first():
    assert img2img.compose_prompt(DATA_URI, "make it snow") == f"{DATA_URI} make it snow"


def test_generate_uses_image_model_override():
    config = AppConfig()
    service = img2img.Image2ImageService(config, build_text_service(config))
    request = parse_request(
        {"mode": "image-to-image", "prompt": "make it snow", "image": DATA_URI, "model": "turbo"}
    )

    result = service.generate(request)

    assert result.mode is GenerationMode.IMAGE_TO_IMAGE
    assert result.prompt == "make it snow"
    assert decoded_prompt(result.image_url) == f"{DATA_URI} make it snow"
    assert dict(parse_qsl(urlsplit(result.image_url).query)) == {"seed": "321", "model": "kontext"}


def test_optional_fields_do_not_change_combined_prompt():
    config = AppConfig()
    service = img2img.Image2ImageService(config, build_text_service(config))
    request = parse_request(
        {
            "mode": "image-to-image",
            "prompt": "oil painting",
            "image": DATA_URI,
            "width": 640,
            "seed": 11,
            "nologo": True,
        }
    )

    result = service.generate(request)

    assert decoded_prompt(result.image_url) == f"{DATA_URI} oil painting"
    assert parse_qsl(urlsplit(result.image_url).query) == [
        ("width", "640"),
        ("seed", "11"),
        ("model", "kontext"),
        ("nologo", "true"),
    ]
    assert result.request.get("image") is None


def test_generate_without_image_is_rejected():
    config = AppConfig()
    service = img2img.Image2ImageService(config, build_text_service(config))
    request = GenerationRequest(mode=GenerationMode.IMAGE_TO_IMAGE, prompt="no base")

    with pytest.raises(ValidationError, match="image required"):
        service.generate(request)


def test_transparent_forwards_only_model():
    config = AppConfig(transparent_model="gptimage")
    service = TransparentImageService(config, build_text_service(config))
    request = parse_request(
        {
            "mode": "transparent-background",
            "prompt": "a sticker of a cat",
            "width": 512,
            "height": 512,
            "enhance": True,
        }
    )

    result = service.generate(request)

    assert result.mode is GenerationMode.TRANSPARENT_BACKGROUND
    assert decoded_prompt(result.image_url) == "a sticker of a cat"
    assert parse_qsl(urlsplit(result.image_url).query) == [("seed", "321"), ("model", "gptimage")]
