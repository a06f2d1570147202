"""One-off script for debugging the generation callbacks end to end."""

from pathlib import Path

from config.settings import load_config
from modules.services.generation_service import GenerationService
from modules.services.history_service import GenerationHistoryService, JsonFileStore
from modules.ui.callbacks import build_callbacks


def main() -> None:
    # 1. Real configuration and services; history goes to a scratch file
    config = load_config()
    history = GenerationHistoryService(JsonFileStore(Path("debug_history.json")))
    callbacks = build_callbacks(config, generator=GenerationService(config), history=history)

    # 2. Optional base image for image-to-image (replace as needed)
    init_image_path = Path("tests/assets/debug_input.png")
    mode = "image-to-image" if init_image_path.exists() else "text-to-image"

    # 3. Run the same callback the Generate button uses
    cb = callbacks["on_generate"]
    image_url, status, prompt, download, rows = cb(
        mode=mode,
        prompt="A lighthouse on a cliff during a thunderstorm, dramatic lighting",
        width=1024,
        height=1024,
        seed=42,
        image=str(init_image_path) if mode == "image-to-image" else None,
        model=config.default_model,
        enhance=False,
        nologo=True,
        private=True,
        safe=False,
    )

    print("Status:", status)
    if image_url:
        print("Image URL:", image_url[:200])
        print("Download:", download[:200])
        print("History entries:", len(rows))
    else:
        print("No image URL returned; check the logs.")


if __name__ == "__main__":
    main()
