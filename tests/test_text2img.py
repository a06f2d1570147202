"""Text2ImageService unit tests."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

import pytest

from config.settings import AppConfig
from modules.errors import ValidationError
from modules.pipelines import text2img
from modules.pipelines.schema import GenerationMode, parse_request


class FixedRandom:
    """Stand-in RNG returning a constant cache-busting seed."""

    def __init__(self, value: int = 4242) -> None:
        self.value = value
        self.calls = 0

    def randrange(self, stop: int) -> int:
        self.calls += 1
        return self.value % stop


def build_service(value: int = 4242) -> tuple[text2img.Text2ImageService, FixedRandom]:
    rng = FixedRandom(value)
    return text2img.Text2ImageService(AppConfig(), rng=rng), rng


def query_items(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query)


def test_prompt_is_percent_encoded_into_path():
    service, _ = build_service()
    request = parse_request({"mode": "text-to-image", "prompt": "a red fox in snow", "width": 512})

    result = service.generate(request)

    assert result.mode is GenerationMode.TEXT_TO_IMAGE
    assert "https://image.pollinations.ai/prompt/a%20red%20fox%20in%20snow?width=512" in result.image_url
    assert result.prompt == "a red fox in snow"


def test_reserved_characters_are_encoded_like_encode_uri_component():
    assert text2img.encode_prompt("cats & dogs/100%?") == "cats%20%26%20dogs%2F100%25%3F"
    assert text2img.encode_prompt("it's (fine)!*~") == "it's%20(fine)!*~"


def test_only_supplied_parameters_in_canonical_order():
    service, rng = build_service()
    request = parse_request(
        {
            "mode": "text-to-image",
            "prompt": "castle",
            "safe": True,
            "model": "turbo",
            "height": "768",
            "seed": 7,
            "width": 1024,
            "nologo": "on",
            "enhance": False,
        }
    )

    result = service.generate(request)

    assert query_items(result.image_url) == [
        ("width", "1024"),
        ("height", "768"),
        ("seed", "7"),
        ("model", "turbo"),
        ("nologo", "true"),
        ("safe", "true"),
    ]
    assert rng.calls == 0


def test_cache_busting_seed_drawn_when_seed_missing():
    service, rng = build_service(value=99)
    request = parse_request({"mode": "text-to-image", "prompt": "castle", "width": 0, "seed": ""})

    result = service.generate(request)

    assert query_items(result.image_url) == [("seed", "99")]
    assert rng.calls == 1


def test_false_flags_are_omitted():
    service, _ = build_service()
    request = parse_request(
        {
            "mode": "text-to-image",
            "prompt": "castle",
            "seed": 3,
            "nologo": False,
            "private": "false",
            "enhance": None,
            "safe": "",
        }
    )

    result = service.generate(request)

    assert query_items(result.image_url) == [("seed", "3")]


def test_transparent_flag_serialized_after_model():
    service, _ = build_service()
    request = parse_request(
        {"mode": "text-to-image", "prompt": "logo", "seed": 1, "model": "gptimage", "transparent": True}
    )

    result = service.generate(request)

    assert query_items(result.image_url) == [("seed", "1"), ("model", "gptimage"), ("transparent", "true")]


def test_build_accepts_image_option():
    service, _ = build_service()

    image_request = service.build("edit", {"seed": 5, "image": "https://example.com/cat.png", "private": True})

    assert image_request.get("image") == "https://example.com/cat.png"
    assert [name for name, _ in image_request.params] == ["seed", "image", "private"]


def test_custom_base_url():
    config = AppConfig(api_base_url="https://images.example.test/prompt")
    service = text2img.Text2ImageService(config, rng=FixedRandom())

    image_request = service.build("hello world", {"seed": 1})

    assert image_request.url == "https://images.example.test/prompt/hello%20world?seed=1"


@pytest.mark.parametrize("mode", ["text-to-image", "image-to-image", "transparent-background"])
def test_missing_prompt_never_builds(mode):
    with pytest.raises(ValidationError, match="prompt required"):
        parse_request({"mode": mode, "prompt": "", "image": "data:image/png;base64,AAAA"})
