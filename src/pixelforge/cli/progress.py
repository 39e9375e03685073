"""
Rich progress displays for CLI operations.

This module provides progress indicators and result tables for CLI operations
using the rich library. All output goes to stderr to preserve stdout for
machine-readable output.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from pixelforge.cli.utils import format_timestamp
from pixelforge.core.history import GeneratedResult
from pixelforge.core.styles import ArtStyle, SpriteType, describe_style, describe_type

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def generation_progress(
    model: str | None = None,
    style: str | None = None,
    sprite_type: str | None = None,
    reference_used: bool = False,
) -> Iterator[None]:
    """
    Display a spinner during sprite generation.

    Args:
        model: The image model being used
        style: Art style label
        sprite_type: Sprite type label
        reference_used: Whether a reference image is being sent

    Yields:
        None while generation is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = ["Generating sprite"]
    if model:
        # Truncate long model names
        model_display = model if len(model) <= 40 else f"{model[:37]}..."
        desc_parts.append(f"[dim]({model_display})[/dim]")

    features = [f"[dim]{label}[/dim]" for label in (style, sprite_type) if label]
    if reference_used:
        features.append("[dim cyan]with reference[/dim cyan]")
    if features:
        desc_parts.append("• " + " + ".join(features))

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(
    output_path: Path,
    generation_time: float,
    model_used: str,
    result: GeneratedResult,
    had_reference: bool,
    saved_to_history: bool,
) -> None:
    """
    Print a rich formatted success message with generation details.

    Args:
        output_path: Path where the image was saved
        generation_time: Time taken to generate (seconds)
        model_used: The model that generated the image
        result: The generated result
        had_reference: Whether a reference image was sent
        saved_to_history: Whether the result was persisted to history
    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("Saved to", f"[bold green]{output_path}[/bold green]")
    table.add_row("ID", result.id)
    table.add_row("Model", model_used)
    table.add_row("Time", f"{generation_time:.1f}s")
    table.add_row("Style", f"{result.style.value} • {result.type.value}")

    features = []
    if had_reference:
        features.append("[cyan]✓[/cyan] Reference image")
    if saved_to_history:
        features.append("[green]✓[/green] History")
    if features:
        table.add_row("Features", " • ".join(features))

    table.add_row("Prompt", f"[dim]{result.prompt}[/dim]")

    panel = Panel(
        table,
        title="[bold green]✓ Sprite Generated[/bold green]",
        border_style="green",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)


def print_history(results: Iterable[GeneratedResult]) -> None:
    """Print history entries newest first."""
    table = Table(title="History", title_style="bold", header_style="cyan")
    table.add_column("ID", no_wrap=True)
    table.add_column("Created", no_wrap=True)
    table.add_column("Style • Type")
    table.add_column("Prompt", style="dim")
    for result in results:
        table.add_row(
            result.id,
            format_timestamp(result.created_at),
            f"{result.style.value} • {result.type.value}",
            result.prompt,
        )
    console.print(table)


def print_result_details(result: GeneratedResult) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")
    table.add_row("ID", result.id)
    table.add_row("Created", format_timestamp(result.created_at))
    table.add_row("Style", result.style.value)
    table.add_row("Type", result.type.value)
    table.add_row("Image", f"{result.mime_type}, {len(result.image_url)} chars")
    table.add_row("Prompt", f"[dim]{result.prompt}[/dim]")
    console.print(Panel(table, title=f"[bold]{result.download_filename}[/bold]", padding=(1, 2)))


def print_styles() -> None:
    """Print the available art styles and sprite types with their descriptors."""
    styles = Table(title="Art styles", header_style="cyan")
    styles.add_column("Style", no_wrap=True)
    styles.add_column("Description", style="dim")
    for style in ArtStyle:
        styles.add_row(style.value, describe_style(style))

    types = Table(title="Sprite types", header_style="cyan")
    types.add_column("Type", no_wrap=True)
    types.add_column("Description", style="dim")
    for sprite_type in SpriteType:
        types.add_row(sprite_type.value, describe_type(sprite_type))

    console.print(styles)
    console.print(types)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")
