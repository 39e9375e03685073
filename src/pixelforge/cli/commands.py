"""
Click command definitions for the pixelforge CLI.

This module contains the Click command group and all CLI commands
(generate, history, styles, ui).
"""

import os
import time
from pathlib import Path

import click

from pixelforge import (
    DEFAULT_BACKGROUND,
    Config,
    GeneratedResult,
    JsonFileStorage,
    MemoryStorage,
    PersistenceParseError,
    Session,
    ValidationError,
    __version__,
    load_reference_image,
    save_result_image,
    validate_prompt,
)
from pixelforge.cli import progress
from pixelforge.cli.handlers import run_with_error_handling
from pixelforge.cli.utils import default_output_path
from pixelforge.core.history import HISTORY_STORAGE_KEY
from pixelforge.core.prompt import BACKGROUND_PRESETS, resolve_background
from pixelforge.core.styles import (
    DEFAULT_STYLE,
    DEFAULT_TYPE,
    ArtStyle,
    SpriteType,
    parse_sprite_type,
    parse_style,
)
from pixelforge.logging_config import configure_logging, get_verbosity_from_env

_STYLE_CHOICES = ", ".join(s.value for s in ArtStyle)
_TYPE_CHOICES = ", ".join(t.value for t in SpriteType)
_PRESET_CHOICES = ", ".join(BACKGROUND_PRESETS)


def _history_snapshot(storage: JsonFileStorage) -> dict[str, str]:
    try:
        raw = storage.get_item(HISTORY_STORAGE_KEY)
    except PersistenceParseError:
        return {}
    return {HISTORY_STORAGE_KEY: raw} if raw is not None else {}


def _open_session(config: Config, persist: bool = True) -> Session:
    """Load the session from the configured storage file; persist=False keeps changes in memory."""
    file_storage = JsonFileStorage(config.storage_path)
    if persist:
        return Session.load(file_storage, config=config)
    return Session.load(MemoryStorage(_history_snapshot(file_storage)), config=config)


def _require_result(session: Session, result_id: str) -> GeneratedResult:
    result = session.get(result_id)
    if result is None:
        raise ValidationError(f"No sprite with id {result_id!r} in history", field="id")
    return result


@click.group(
    help=f"""Game sprite generation with Gemini image models.

\b
Version: {__version__}
"""
)
@click.version_option(
    version=__version__,
    package_name="pixelforge",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.option(
    "--prompt",
    "-p",
    required=True,
    help="What to draw, or the action to perform when using a reference.",
)
@click.option(
    "--style",
    "-s",
    default=DEFAULT_STYLE.value,
    show_default=True,
    help=f"Art style: {_STYLE_CHOICES}.",
)
@click.option(
    "--type",
    "-t",
    "sprite_type",
    default=DEFAULT_TYPE.value,
    show_default=True,
    help=f"Sprite type: {_TYPE_CHOICES}.",
)
@click.option(
    "--background",
    "-b",
    default=DEFAULT_BACKGROUND,
    show_default=True,
    help=f"Background preset ({_PRESET_CHOICES}) or any color, e.g. '#FF00FF'.",
)
@click.option("--reference-id", help="Use a history entry as the reference image.")
@click.option(
    "--reference",
    "-r",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a reference image file.",
)
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Output file path.")
@click.option("--no-history", is_flag=True, help="Do not save the result to history.")
@click.option("--model", "-m", help="Gemini image model (default from config).")
@click.option(
    "--api-key",
    help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log raw API request payload and response (image data truncated) for debugging.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Minimize progress messages; only print result path or errors.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase verbosity: -v also show prompts, -vv show API detail.",
)
def generate(
    prompt: str,
    style: str,
    sprite_type: str,
    background: str,
    reference_id: str | None,
    reference: Path | None,
    out: Path | None,
    no_history: bool,
    model: str | None,
    api_key: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Generate a sprite and save it (optionally based on a reference image)."""
    # Apply logging verbosity: CLI flags override PIXELFORGE_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    def do_generate() -> None:
        # 1. Load and validate config
        config = Config.from_env()
        if api_key is not None:
            config.set_api_key(api_key)
        if model is not None:
            config.set_image_model(model)
        if debug_api:
            config.debug_api = True
        config.validate()

        # 2. Validate inputs before touching history or the network
        validate_prompt(prompt)
        style_val = parse_style(style)
        type_val = parse_sprite_type(sprite_type)
        if reference is not None and reference_id is not None:
            raise ValidationError(
                "Use either --reference or --reference-id, not both.", field="reference"
            )

        # 3. Session and reference
        session = _open_session(config, persist=not no_history)
        if reference_id is not None:
            session.use_as_reference(reference_id)
        ref_bytes = load_reference_image(reference) if reference is not None else None
        had_reference = ref_bytes is not None or session.reference is not None

        # 4. Generate
        start = time.time()
        if not quiet:
            with progress.generation_progress(
                model=config.image_model,
                style=style_val.value,
                sprite_type=type_val.value,
                reference_used=had_reference,
            ):
                result = session.submit(
                    prompt,
                    style_val,
                    type_val,
                    resolve_background(background),
                    reference_image=ref_bytes,
                )
        else:
            result = session.submit(
                prompt,
                style_val,
                type_val,
                resolve_background(background),
                reference_image=ref_bytes,
            )
        elapsed = time.time() - start

        # 5. Save
        out_path = out if out is not None else default_output_path(result)
        save_result_image(result, out_path.parent, out_path.name)

        # 6. Print result
        if quiet:
            click.echo(str(out_path))
        else:
            progress.print_success_result(
                output_path=out_path,
                generation_time=elapsed,
                model_used=config.image_model,
                result=result,
                had_reference=had_reference,
                saved_to_history=not no_history,
            )
            # Also print path to stdout for scriptability
            click.echo(str(out_path))

    run_with_error_handling(do_generate, quiet=quiet)


@cli.group()
def history() -> None:
    """List, export and delete previously generated sprites."""
    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)


@history.command("list")
@click.option("--ids", "ids_only", is_flag=True, help="Print only ids, one per line.")
def history_list(ids_only: bool) -> None:
    """List history entries, newest first."""

    def do_list() -> None:
        session = _open_session(Config.from_env())
        if ids_only:
            for result in session.history:
                click.echo(result.id)
            return
        if not session.history:
            progress.print_info("History is empty.")
            return
        progress.print_history(session.history)

    run_with_error_handling(do_list)


@history.command("show")
@click.argument("result_id")
@click.option(
    "--out",
    "-o",
    type=click.Path(path_type=Path),
    help="Write the image to this file (or into this directory).",
)
def history_show(result_id: str, out: Path | None) -> None:
    """Show one history entry and optionally export its image."""

    def do_show() -> None:
        session = _open_session(Config.from_env())
        result = _require_result(session, result_id)
        progress.print_result_details(result)
        if out is not None:
            if out.is_dir():
                path = save_result_image(result, out)
            else:
                path = save_result_image(result, out.parent, out.name)
            click.echo(str(path))

    run_with_error_handling(do_show)


@history.command("delete")
@click.argument("result_id")
def history_delete(result_id: str) -> None:
    """Delete one history entry."""

    def do_delete() -> None:
        session = _open_session(Config.from_env())
        _require_result(session, result_id)
        session.delete(result_id)
        progress.print_success(f"Deleted {result_id}")

    run_with_error_handling(do_delete)


@history.command("clear")
@click.confirmation_option(prompt="Delete every history entry?")
def history_clear() -> None:
    """Delete every history entry."""

    def do_clear() -> None:
        session = _open_session(Config.from_env())
        count = len(session.history)
        session.clear()
        progress.print_success(f"Deleted {count} entries")

    run_with_error_handling(do_clear)


@cli.command()
def styles() -> None:
    """List art styles and sprite types."""
    progress.print_styles()


@cli.command()
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="PIXELFORGE_UI_PORT",
    help="Port for the Gradio server (default: 7860 or PIXELFORGE_UI_PORT).",
)
@click.option(
    "--host",
    "host",
    type=str,
    default=None,
    envvar="PIXELFORGE_UI_HOST",
    help="Host to bind (default: 127.0.0.1 or PIXELFORGE_UI_HOST). Use 0.0.0.0 for LAN.",
)
@click.option(
    "--share",
    is_flag=True,
    default=None,
    envvar="PIXELFORGE_UI_SHARE",
    help="Create a public share link (e.g. gradio.live).",
)
@click.option(
    "--api-key",
    help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log raw API request/response (image data truncated) when generating from the UI.",
)
def ui(
    port: int | None,
    host: str | None,
    share: bool | None,
    api_key: str | None,
    debug_api: bool,
) -> None:
    """Launch the Gradio web UI."""
    from pixelforge.ui.gradio_app import launch as launch_ui

    # Apply logging verbosity from env so UI logs respect PIXELFORGE_VERBOSITY
    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)

    # Set API key in environment if provided via CLI so the UI can pick it up
    if api_key is not None:
        os.environ["GEMINI_API_KEY"] = api_key
    if debug_api:
        os.environ["PIXELFORGE_DEBUG_API"] = "1"

    # Resolve env for share: env var "1" or "true" => True
    share_val = share
    if share_val is None:
        env_share = os.environ.get("PIXELFORGE_UI_SHARE", "").lower()
        share_val = env_share in ("1", "true", "yes")
    launch_ui(server_name=host, server_port=port, share=share_val)


def main() -> None:
    """Entry point for the pixelforge console script."""
    cli()


__all__ = ["cli", "main", "generate", "history", "styles", "ui"]
