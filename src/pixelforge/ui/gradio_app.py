"""
Gradio web UI for pixelforge.

Single-page UI: prompt with suggestions, art style, sprite type and background
controls, generate, view/download the active sprite, reuse it as a reference
for animations and variations, and browse or delete the history.
Uses the public API: from pixelforge import ...
"""

import argparse
import atexit
import contextlib
import os
import tempfile
import threading
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any, cast

import gradio as gr

from pixelforge import (
    BACKGROUND_PRESETS,
    DEFAULT_BACKGROUND,
    ArtStyle,
    Config,
    ConfigurationError,
    GeneratedResult,
    GenerationInProgressError,
    ImageProcessingError,
    JsonFileStorage,
    PixelforgeError,
    Session,
    SpriteType,
    TransportError,
    ValidationError,
    __version__,
)
from pixelforge.core.prompt import resolve_background
from pixelforge.core.prompts_loader import get_suggestions
from pixelforge.core.styles import DEFAULT_STYLE, DEFAULT_TYPE
from pixelforge.logging_config import get_logger

logger = get_logger(__name__)

# Default server port; overridable via PIXELFORGE_UI_PORT
DEFAULT_UI_PORT = 7860
DEFAULT_UI_HOST = "127.0.0.1"

BASE_PAGE_TITLE = "PixelForge AI – game sprite generation"

PROMPT_LABEL = "Describe your sprite"
PROMPT_LABEL_WITH_REFERENCE = "What action should they do?"
PROMPT_PLACEHOLDER = "e.g., A floating robot companion..."
PROMPT_PLACEHOLDER_WITH_REFERENCE = "e.g., Running, Casting a spell, Dying animation..."
GENERATE_LABEL = "Generate Sprite"
GENERATE_LABEL_WITH_REFERENCE = "Generate Animation/Var"
BUSY_LABEL = "Forging Sprite..."
BUSY_LABEL_WITH_REFERENCE = "Animating..."

PRO_TIPS = """
- Use **"Sheet"** type for animation frames.
- Use **"Animate / Modify"** to keep the same character.
- Specify colors like "Red armor, gold trim".
"""

# Number of suggestion buttons; both suggestion lists in prompts.yaml have this length
_SUGGESTION_SLOTS = 4

# Shared queue so every session-mutating event runs serially
_UI_CONCURRENCY_ID = "pixelforge_ui"

# Temp image files served to the browser; cleaned on process exit
_temp_paths: set[str] = set()


def _register_temp_path(path: str) -> None:
    _temp_paths.add(path)


def _cleanup_temp_paths() -> None:
    for path in _temp_paths:
        with contextlib.suppress(OSError):
            Path(path).unlink(missing_ok=True)


atexit.register(_cleanup_temp_paths)


# One session per server process; created on first use
_session: Session | None = None
_session_lock = threading.Lock()


def _get_session() -> Session:
    """Return the process-wide session, loading history from the configured storage file."""
    global _session
    with _session_lock:
        if _session is None:
            config = Config.from_env()
            _session = Session.load(JsonFileStorage(config.storage_path), config=config)
        return _session


def set_session(session: Session | None) -> None:
    """Replace the process-wide session (None forces a reload on next use)."""
    global _session
    with _session_lock:
        _session = session


def _exception_to_message(exc: BaseException) -> str:
    """Map library and known exceptions to a short user-facing message (same as CLI)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return msg
    if isinstance(exc, ConfigurationError):
        return exc.args[0] if exc.args else "Invalid configuration."
    if isinstance(exc, ImageProcessingError):
        return exc.args[0] if exc.args else "Image processing failed."
    if isinstance(exc, GenerationInProgressError):
        return exc.args[0] if exc.args else "A sprite is already being generated."
    if isinstance(exc, TransportError):
        return exc.args[0] if exc.args else "API or network error."
    if isinstance(exc, PixelforgeError):
        return exc.args[0] if exc.args else "An error occurred."
    return str(exc) if exc.args else "Failed to generate sprite. Please try again."


def _format_status(message: str, status_type: str = "info") -> str:
    """
    Format a status message with color and icon.

    Args:
        message: The status message text.
        status_type: One of "info", "success", "error", "warning", "idle".

    Returns:
        HTML-formatted status string.
    """
    if status_type == "success":
        icon = "✅"
        color = "#10b981"  # green-500
        bg_color = "#d1fae5"  # green-100
    elif status_type == "error":
        icon = "❌"
        color = "#ef4444"  # red-500
        bg_color = "#fee2e2"  # red-100
    elif status_type == "warning":
        icon = "⚠️"
        color = "#f59e0b"  # amber-500
        bg_color = "#fef3c7"  # amber-100
    elif status_type == "info":
        icon = "ℹ️"
        color = "#8b5cf6"  # violet-500
        bg_color = "#ede9fe"  # violet-100
    else:  # idle
        return ""

    return f"""<div style="padding: 12px 16px; border-radius: 8px; background-color: {bg_color}; border-left: 4px solid {color}; margin: 8px 0;">
    <span style="font-size: 16px; margin-right: 8px;">{icon}</span>
    <span style="color: {color}; font-weight: 500;">{message}</span>
</div>"""


def _caption(result: GeneratedResult) -> str:
    return f"{result.style.value} • {result.type.value}"


def _result_file(result: GeneratedResult) -> str:
    """Write the result image to a temp file named like its download and return the path."""
    directory = Path(tempfile.gettempdir()) / "pixelforge"
    path = directory / result.download_filename
    if not path.exists():
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(result.image_bytes)
        _register_temp_path(str(path))
    return str(path)


def _reference_html(reference: GeneratedResult | None) -> str:
    if reference is None:
        return ""
    return _format_status(
        f"<b>Using character reference</b> ({_caption(reference)}). AI will keep consistency.",
        "info",
    )


def _render(
    session: Session,
    status: str = "",
    prompt: str | None = None,
    clear_prompt: bool = False,
    style: ArtStyle | None = None,
) -> tuple[Any, ...]:
    """
    Build updates for the view outputs from the session state.

    Order: status, image, caption, download, animate, delete, gallery,
    reference indicator, clear reference, prompt, generate, style, suggestions.
    prompt is the current prompt text (None when unknown, leaving the
    Generate button's interactivity unchanged).
    """
    active = session.active
    reference = session.reference
    with_reference = reference is not None

    image_path = _result_file(active) if active is not None else None
    caption = f"**{_caption(active)}**" if active is not None else "### Ready to Forge"

    prompt_kwargs: dict[str, Any] = {
        "label": PROMPT_LABEL_WITH_REFERENCE if with_reference else PROMPT_LABEL,
        "placeholder": PROMPT_PLACEHOLDER_WITH_REFERENCE if with_reference else PROMPT_PLACEHOLDER,
    }
    if clear_prompt:
        prompt_kwargs["value"] = ""
        prompt = ""

    generate_kwargs: dict[str, Any] = {
        "value": GENERATE_LABEL_WITH_REFERENCE if with_reference else GENERATE_LABEL,
    }
    if prompt is not None:
        generate_kwargs["interactive"] = bool(prompt.strip()) and not session.is_busy

    suggestions = get_suggestions(with_reference)[:_SUGGESTION_SLOTS]
    suggestion_updates = [
        gr.update(value=text, visible=True) for text in suggestions
    ] + [gr.update(visible=False)] * (_SUGGESTION_SLOTS - len(suggestions))

    return (
        status,
        image_path,
        caption,
        gr.update(value=image_path, visible=active is not None),
        gr.update(interactive=active is not None),
        gr.update(interactive=active is not None),
        [(_result_file(r), _caption(r)) for r in session.history],
        gr.update(value=_reference_html(reference), visible=with_reference),
        gr.update(visible=with_reference),
        gr.update(**prompt_kwargs),
        gr.update(**generate_kwargs),
        gr.update(value=style.value) if style is not None else gr.update(),
        *suggestion_updates,
    )


def _load_handler(prompt: str) -> tuple[Any, ...]:
    """Page load: show the restored history and the newest result."""
    return _render(_get_session(), prompt=prompt)


def _prompt_change_handler(text: str) -> Any:
    """Prompt change: enable Generate when the prompt is non-empty and nothing is pending."""
    enabled = bool(text and text.strip()) and not _get_session().is_busy
    return gr.update(interactive=enabled)


def _background_preset_handler(label: str) -> str:
    """Background preset radio: put the preset's color token into the background box."""
    return resolve_background(label) or DEFAULT_BACKGROUND


def _generate_click_handler(
    prompt: str,
    style: str,
    sprite_type: str,
    background: str,
) -> Generator[tuple[Any, ...], None, None]:
    """Generate button logic: disable the button, submit, then show the result or error."""
    logger.debug("Generate clicked")
    session = _get_session()
    busy_label = BUSY_LABEL_WITH_REFERENCE if session.reference is not None else BUSY_LABEL
    pending = list(_render(session, status=_format_status("Generating sprite…", "info")))
    pending[10] = gr.update(value=busy_label, interactive=False)
    yield tuple(pending)

    start = time.time()
    try:
        session.submit(prompt, style, sprite_type, resolve_background(background))
    except PixelforgeError as e:
        logger.info("Generation failed: %s", e)
        status = _format_status(_exception_to_message(e), "error")
        yield _render(session, status=status, prompt=prompt)
        return
    except Exception as e:
        logger.exception("Unexpected error during generation")
        status = _format_status(_exception_to_message(e), "error")
        yield _render(session, status=status, prompt=prompt)
        return
    elapsed = time.time() - start
    status = _format_status(f"Done in {elapsed:.1f}s", "success")
    yield _render(session, status=status, prompt=prompt)


def _gallery_select_handler(prompt: str, evt: gr.SelectData) -> tuple[Any, ...]:
    """History gallery click: make the clicked result active."""
    session = _get_session()
    history = session.history
    index = evt.index if isinstance(evt.index, int) else evt.index[0]
    if 0 <= index < len(history):
        session.select(history[index].id)
    return _render(session, prompt=prompt)


def _delete_click_handler(prompt: str) -> tuple[Any, ...]:
    """Delete button: remove the active result from history."""
    session = _get_session()
    active = session.active
    if active is None:
        return _render(session, prompt=prompt)
    try:
        session.delete(active.id)
    except OSError as e:
        logger.error("Failed to save history: %s", e)
        return _render(session, status=_format_status(f"Failed to save history: {e}", "error"))
    return _render(session, prompt=prompt)


def _animate_click_handler(prompt: str) -> tuple[Any, ...]:
    """Animate / Modify: use the active result as reference, match its style, clear the prompt."""
    session = _get_session()
    active = session.active
    if active is None:
        return _render(session, prompt=prompt)
    reference = session.use_as_reference(active.id)
    return _render(session, clear_prompt=True, style=reference.style)


def _clear_reference_handler(prompt: str) -> tuple[Any, ...]:
    session = _get_session()
    session.clear_reference()
    return _render(session, prompt=prompt)


def _build_blocks() -> gr.Blocks:
    """Build the Gradio Blocks UI."""
    header_html = """
<div style="display: flex; align-items: center; gap: 32px; margin: 16px 0 24px 0; flex-wrap: wrap;">
    <h1 style="
        font-size: 2.5em;
        font-weight: 700;
        margin: 0;
        background: linear-gradient(135deg, #8b5cf6 0%, #4f46e5 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        background-clip: text;
        letter-spacing: -0.02em;
    ">PixelForge AI</h1>
    <div style="flex: 1; min-width: 200px;">
        <p style="font-size: 1.1em; color: #6b7280; margin: 0 0 4px 0; font-weight: 400;">Game-ready sprites, icons and tilesets from a text prompt</p>
        <p style="font-size: 0.9em; color: #9ca3af; margin: 0; font-weight: 400;">Seven art styles • Sprite sheets • Animate any result with a character reference</p>
    </div>
</div>
"""

    with gr.Blocks(title=BASE_PAGE_TITLE) as app:
        gr.HTML(header_html)

        with gr.Row():
            with gr.Column(scale=4):
                reference_html = gr.HTML(value="", visible=False)
                clear_ref_btn = gr.Button("Remove Reference", size="sm", visible=False)
                prompt_tb = gr.Textbox(
                    label=PROMPT_LABEL,
                    placeholder=PROMPT_PLACEHOLDER,
                    lines=5,
                    max_lines=10,
                )
                with gr.Row():
                    suggestion_btns = [
                        gr.Button(text, size="sm", variant="secondary")
                        for text in get_suggestions(False)[:_SUGGESTION_SLOTS]
                    ]
                with gr.Row():
                    style_dd = gr.Dropdown(
                        label="Art Style",
                        choices=[s.value for s in ArtStyle],
                        value=DEFAULT_STYLE.value,
                    )
                    type_dd = gr.Dropdown(
                        label="Sprite Type",
                        choices=[t.value for t in SpriteType],
                        value=DEFAULT_TYPE.value,
                    )
                background_radio = gr.Radio(
                    label="Background Preference",
                    choices=list(BACKGROUND_PRESETS),
                    value=None,
                )
                background_tb = gr.Textbox(
                    label="Background color",
                    value=DEFAULT_BACKGROUND,
                    info="Preset token or any color, e.g. '#FF00FF'.",
                )
                generate_btn = gr.Button(GENERATE_LABEL, variant="primary", interactive=False)
                status_html = gr.HTML(value="", visible=True)
                with gr.Accordion("Pro Tips", open=True):
                    gr.Markdown(PRO_TIPS)

            with gr.Column(scale=8):
                caption_md = gr.Markdown("### Ready to Forge")
                out_image = gr.Image(
                    label="Sprite",
                    type="filepath",
                    height="60vh",
                    interactive=False,
                    elem_id="pixelforge-output-image",
                )
                with gr.Row():
                    animate_btn = gr.Button("Animate / Modify", interactive=False)
                    download_btn = gr.DownloadButton("Download", visible=False)
                    delete_btn = gr.Button("Delete", variant="stop", interactive=False)
                gallery = gr.Gallery(
                    label="History",
                    columns=6,
                    height="auto",
                    allow_preview=False,
                )

        view_outputs = [
            status_html,
            out_image,
            caption_md,
            download_btn,
            animate_btn,
            delete_btn,
            gallery,
            reference_html,
            clear_ref_btn,
            prompt_tb,
            generate_btn,
            style_dd,
            *suggestion_btns,
        ]

        app.load(fn=_load_handler, inputs=[prompt_tb], outputs=view_outputs)

        generate_btn.click(
            fn=_generate_click_handler,
            inputs=[prompt_tb, style_dd, type_dd, background_tb],
            outputs=view_outputs,
            concurrency_id=_UI_CONCURRENCY_ID,
        )
        gallery.select(
            fn=_gallery_select_handler,
            inputs=[prompt_tb],
            outputs=view_outputs,
            concurrency_id=_UI_CONCURRENCY_ID,
        )
        delete_btn.click(
            fn=_delete_click_handler,
            inputs=[prompt_tb],
            outputs=view_outputs,
            concurrency_id=_UI_CONCURRENCY_ID,
        )
        animate_btn.click(
            fn=_animate_click_handler,
            inputs=[prompt_tb],
            outputs=view_outputs,
            concurrency_id=_UI_CONCURRENCY_ID,
        )
        clear_ref_btn.click(
            fn=_clear_reference_handler,
            inputs=[prompt_tb],
            outputs=view_outputs,
            concurrency_id=_UI_CONCURRENCY_ID,
        )
        prompt_tb.change(
            fn=_prompt_change_handler,
            inputs=[prompt_tb],
            outputs=[generate_btn],
        )
        background_radio.change(
            fn=_background_preset_handler,
            inputs=[background_radio],
            outputs=[background_tb],
        )
        for btn in suggestion_btns:
            btn.click(fn=lambda text: text, inputs=[btn], outputs=[prompt_tb])

        gr.HTML(f"""
<div style="text-align: center; margin: 40px 0 20px 0; padding-top: 20px; border-top: 1px solid #e5e7eb;">
    <p style="font-size: 0.9em; color: #9ca3af; margin: 0;">pixelforge v{__version__}</p>
</div>
""")

    return cast(gr.Blocks, app)


def launch(
    server_name: str | None = None,
    server_port: int | None = None,
    share: bool = False,
) -> None:
    """
    Build the Gradio app and launch the server.

    Args:
        server_name: Host to bind (default: PIXELFORGE_UI_HOST or 127.0.0.1).
        server_port: Port (default: PIXELFORGE_UI_PORT or 7860).
        share: If True, create a public share link (e.g. gradio.live).
    """
    host = server_name or os.getenv("PIXELFORGE_UI_HOST", DEFAULT_UI_HOST)
    port = server_port
    if port is None:
        try:
            port = int(os.getenv("PIXELFORGE_UI_PORT", str(DEFAULT_UI_PORT)))
        except ValueError:
            port = DEFAULT_UI_PORT
    print(f"pixelforge ui is starting (v{__version__}) on http://{host}:{port}...")
    app = _build_blocks()
    app.launch(server_name=host, server_port=port, share=share, inbrowser=True)


def main() -> None:
    """Entry point for the pixelforge-ui console script. Parses --port, --host, --share."""
    parser = argparse.ArgumentParser(
        description="Launch the pixelforge Gradio web UI for sprite generation.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        metavar="PORT",
        help=f"Port to bind (default: PIXELFORGE_UI_PORT or {DEFAULT_UI_PORT}).",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        metavar="HOST",
        help=f"Host to bind (default: PIXELFORGE_UI_HOST or {DEFAULT_UI_HOST}). Use 0.0.0.0 for LAN.",
    )
    parser.add_argument(
        "--share",
        action="store_true",
        default=None,
        help="Create a public share link (e.g. gradio.live). Overrides PIXELFORGE_UI_SHARE.",
    )
    args = parser.parse_args()
    share_val = args.share
    if share_val is None:
        env_share = os.environ.get("PIXELFORGE_UI_SHARE", "").lower()
        share_val = env_share in ("1", "true", "yes")
    launch(
        server_name=args.host,
        server_port=args.port,
        share=share_val,
    )
