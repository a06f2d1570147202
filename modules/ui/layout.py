"""Gradio layout composition."""

from __future__ import annotations

from typing import Any, Callable, Optional

import gradio as gr

from config.settings import AppConfig
from modules.pipelines.schema import GenerationMode
from modules.services.generation_service import GenerationService
from modules.services.history_service import GenerationHistoryService
from modules.ui.callbacks import HISTORY_HEADERS, build_callbacks
from modules.ui.presets import DEFAULT_LAYOUT, LAYOUTS, PromptLibrary


def _layout_choices() -> list[tuple[str, str]]:
    return [(preset.name, preset.key) for preset in LAYOUTS.values()]


def _pick_history_entry(table: Any, evt: gr.SelectData) -> str:
    row = evt.index[0] if isinstance(evt.index, (list, tuple)) else evt.index
    try:
        return str(table.iloc[row, 0])
    except (AttributeError, IndexError):
        return ""


def _generation_tab(
    config: AppConfig,
    mode: GenerationMode,
    callbacks_map: dict[str, Callable[..., Any]],
    *,
    with_image: bool = False,
    with_options: bool = True,
) -> tuple[Any, list[Any], list[Any]]:
    """Build the controls of one generation tab.

    Returns the submit button, its inputs and its outputs (without the shared
    history table, which is appended by the caller).
    """
    default_layout = LAYOUTS[DEFAULT_LAYOUT]
    with gr.Row():
        with gr.Column():
            mode_state = gr.State(mode.value)
            init_image = gr.Image(label="Base image", type="filepath", visible=with_image)
            prompt = gr.Textbox(
                label="Prompt",
                lines=4,
                placeholder="e.g., A beautiful sunset over the ocean",
            )
            random_btn = gr.Button("Surprise me", size="sm")
            with gr.Group(visible=with_options):
                layout = gr.Dropdown(label="Layout", choices=_layout_choices(), value=DEFAULT_LAYOUT)
                with gr.Row():
                    width = gr.Number(label="Width", value=default_layout.width, precision=0)
                    height = gr.Number(label="Height", value=default_layout.height, precision=0)
                seed = gr.Number(label="Seed (optional)", precision=0)
            with gr.Accordion("Advanced settings", open=False, visible=with_options):
                model = gr.Dropdown(
                    label="Model",
                    choices=config.available_models,
                    value=config.default_model,
                )
                enhance = gr.Checkbox(label="Enhance prompt", value=False)
                nologo = gr.Checkbox(label="No logo", value=False)
                private = gr.Checkbox(label="Private", value=False)
                safe = gr.Checkbox(label="Safe mode", value=False)
                reset_btn = gr.Button("Reset", size="sm")
            generate_btn = gr.Button("Generate", variant="primary")

        with gr.Column():
            output_image = gr.Image(label="Result", interactive=False)
            download = gr.Markdown("")
            status = gr.Markdown("Ready.")

    random_btn.click(fn=callbacks_map["on_random_prompt"], inputs=[], outputs=[prompt])
    layout.change(fn=callbacks_map["on_select_layout"], inputs=[layout], outputs=[width, height])
    reset_btn.click(
        fn=callbacks_map["on_reset_advanced"],
        inputs=[],
        outputs=[model, enhance, nologo, private, safe, status],
    )

    inputs = [mode_state, prompt, width, height, seed, init_image, model, enhance, nologo, private, safe]
    outputs = [output_image, status, prompt, download]
    return generate_btn, inputs, outputs


def build_app(
    config: AppConfig,
    generator: Optional[GenerationService] = None,
    history: Optional[GenerationHistoryService] = None,
    prompt_library: Optional[PromptLibrary] = None,
) -> Any:
    """Compose and return the Gradio application."""
    callbacks_map = build_callbacks(
        config,
        generator=generator or GenerationService(config),
        history=history,
        prompt_library=prompt_library,
    )

    submissions: list[tuple[Any, list[Any], list[Any]]] = []
    with gr.Blocks(title="Arty AI") as demo:
        gr.Markdown("## Arty AI")

        with gr.Tab("Text to Image"):
            submissions.append(_generation_tab(config, GenerationMode.TEXT_TO_IMAGE, callbacks_map))

        with gr.Tab("Image to Image"):
            submissions.append(
                _generation_tab(config, GenerationMode.IMAGE_TO_IMAGE, callbacks_map, with_image=True)
            )

        with gr.Tab("Transparent Background"):
            submissions.append(
                _generation_tab(
                    config,
                    GenerationMode.TRANSPARENT_BACKGROUND,
                    callbacks_map,
                    with_options=False,
                )
            )

        with gr.Tab("History"):
            history_table = gr.Dataframe(
                headers=HISTORY_HEADERS,
                value=callbacks_map["on_refresh_history"](),
                interactive=False,
                wrap=True,
            )
            with gr.Row():
                entry_id = gr.Textbox(label="Selected entry", placeholder="Click a row to select it")
                delete_btn = gr.Button("Delete", variant="stop")
                clear_btn = gr.Button("Clear history")
                refresh_btn = gr.Button("Refresh")
            history_status = gr.Markdown("")

            history_table.select(fn=_pick_history_entry, inputs=[history_table], outputs=[entry_id])
            delete_btn.click(
                fn=callbacks_map["on_delete_history"],
                inputs=[entry_id],
                outputs=[history_table, history_status],
            )
            clear_btn.click(
                fn=callbacks_map["on_clear_history"],
                inputs=[],
                outputs=[history_table, history_status],
            )
            refresh_btn.click(fn=callbacks_map["on_refresh_history"], inputs=[], outputs=[history_table])

        for button, inputs, outputs in submissions:
            button.click(
                fn=callbacks_map["on_generate"],
                inputs=inputs,
                outputs=[*outputs, history_table],
                concurrency_limit=1,
            )

    return demo
