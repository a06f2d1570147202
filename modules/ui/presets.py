"""Layout presets, advanced-setting defaults and the sample prompt library."""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LayoutPreset:
    """Output dimensions for a social-media format."""

    key: str
    name: str
    width: int
    height: int


LAYOUTS: Dict[str, LayoutPreset] = {
    preset.key: preset
    for preset in (
        LayoutPreset("square", "Instagram Post (Square)", 1080, 1080),
        LayoutPreset("portrait", "Instagram Post (Portrait)", 1080, 1350),
        LayoutPreset("reel", "Instagram Reel/Story", 1080, 1920),
        LayoutPreset("fb_cover", "Facebook Cover", 851, 315),
        LayoutPreset("yt_thumbnail", "YouTube Thumbnail", 1280, 720),
        LayoutPreset("default", "Default (1024x1024)", 1024, 1024),
    )
}

DEFAULT_LAYOUT = "default"


@dataclass(slots=True, frozen=True)
class AdvancedSettings:
    """Values of the advanced-settings panel."""

    model: str = "flux"
    enhance: bool = False
    nologo: bool = False
    private: bool = False
    safe: bool = False


def resolve_layout(key: Optional[str]) -> LayoutPreset:
    """Return the layout for a key or label, falling back to the default one."""
    if key in LAYOUTS:
        return LAYOUTS[key]
    for preset in LAYOUTS.values():
        if preset.name == key:
            return preset
    return LAYOUTS[DEFAULT_LAYOUT]


BUILTIN_PROMPTS = (
    "A lighthouse on a cliff during a thunderstorm, dramatic lighting",
    "A cozy reading nook inside a giant hollow tree, warm lantern light",
    "A red fox curled up in fresh snow, soft morning light",
    "A retro-futuristic city skyline at sunset, synthwave colors",
    "A watercolor painting of a mountain village in spring",
    "An astronaut tending a greenhouse on Mars, cinematic",
)


class PromptLibrary:
    """Sample prompts offered by the "surprise me" button."""

    def __init__(self, prompts: Optional[List[str]] = None) -> None:
        self._prompts: List[str] = list(prompts) if prompts else []

    def load_from_file(self, path: Path) -> None:
        """Load prompts from a JSON array of strings."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            if isinstance(entry, str) and entry.strip():
                self._prompts.append(entry.strip())

    def list_prompts(self) -> List[str]:
        return list(self._prompts)

    def random_prompt(self, rng: Optional[random.Random] = None) -> str:
        prompts = self._prompts or list(BUILTIN_PROMPTS)
        return (rng or random).choice(prompts)


def load_prompt_library(assets_dir: Path) -> PromptLibrary:
    library = PromptLibrary()
    path = Path(assets_dir) / "prompts.json"
    try:
        library.load_from_file(path)
    except (OSError, ValueError) as exc:
        logger.warning("could not load sample prompts from %s: %s", path, exc)
    return library
