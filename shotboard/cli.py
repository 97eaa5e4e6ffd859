"""
shotboard.cli - Typer CLI entry point.

Provides the subcommands for segmenting a script, generating the storyboard
and regenerating or editing single shots.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
import yaml
from rich.console import Console
from rich.table import Table

from shotboard import __version__
from shotboard.config import (
    CONFIG_FILENAME,
    ShotboardConfig,
    create_default_config,
    find_config,
    load_config,
    write_config,
)
from shotboard.logging import configure_logging
from shotboard.models import Done, Error, ImageState
from shotboard.utils import estimate_batch_seconds, format_duration, truncate

if TYPE_CHECKING:
    from shotboard.session import StoryboardSession

app = typer.Typer(
    name="shotboard",
    help="Script-to-storyboard image generation.\n\n"
    "Splits a script into shots and generates one image per shot, "
    "then lets you regenerate or edit individual shots.",
    add_completion=False,
)
console = Console()

STATUS_STYLES = {
    "idle": "[dim]Idle[/dim]",
    "loading": "[yellow]Not generated[/yellow]",
    "done": "[green]Done[/green]",
    "error": "[red]Failed[/red]",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"shotboard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Shotboard - script-to-storyboard image generation."""
    configure_logging(verbose)


def resolve_config(
    tier: str | None = None,
    group_size: int | None = None,
    unit: str | None = None,
    delay: float | None = None,
    continue_on_error: bool = False,
) -> ShotboardConfig:
    """Load shotboard.yaml (or defaults) and apply command-line overrides."""
    config_path = find_config()
    config = load_config(config_path) if config_path else ShotboardConfig()

    overrides: dict[str, object] = {}
    if tier is not None:
        overrides["tier"] = tier
    if group_size is not None:
        overrides["group_size"] = group_size
    if unit is not None:
        overrides["segment_unit"] = unit
    if delay is not None:
        overrides["batch_delay_seconds"] = delay
    if continue_on_error:
        overrides["on_batch_error"] = "continue"

    if not overrides:
        return config
    return ShotboardConfig(**{**config.model_dump(), **overrides})


def _load_config_or_exit(**kwargs) -> ShotboardConfig:
    try:
        return resolve_config(**kwargs)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


def _read_script_or_exit(script: Path) -> str:
    from shotboard.io import read_text

    if not script.exists():
        console.print(f"[red]Error: Script not found: {script}[/red]")
        raise typer.Exit(1)
    return read_text(script)


def _build_session(config: ShotboardConfig) -> StoryboardSession:
    from shotboard.credentials import EnvCredentialProvider
    from shotboard.images.client import create_client_from_config
    from shotboard.session import StoryboardSession

    credentials = EnvCredentialProvider(config.api_key_env)
    client = create_client_from_config(config, api_key=credentials.get_key())
    return StoryboardSession(config, client, credentials)


def _status_cell(state: ImageState) -> str:
    label = STATUS_STYLES[state.status]
    if isinstance(state, Error):
        return f"{label} [dim]{truncate(state.message, 50)}[/dim]"
    return label


@app.command("init")
def init_config(
    tier: str = typer.Option("free", "--tier", "-t", help="Account tier: free or paid"),
    path: str = typer.Option(".", "--path", "-d", help="Directory to write shotboard.yaml in"),
) -> None:
    """Create a shotboard.yaml with default settings."""
    config_path = Path(path) / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        config = create_default_config(tier)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    write_config(config, config_path)
    console.print(f"[green]✓[/green] Created {config_path} for tier '{tier}'")
    console.print("\nNext step: [cyan]shotboard segment <script>[/cyan]")


@app.command("segment")
def segment_cmd(
    script: Path = typer.Argument(..., help="Script text file"),
    tier: str | None = typer.Option(None, "--tier", "-t", help="Account tier: free or paid"),
    group_size: int | None = typer.Option(
        None, "--group-size", "-g", help="Paragraphs per shot (overrides tier)"
    ),
    unit: str | None = typer.Option(None, "--unit", "-u", help="paragraph or sentence"),
) -> None:
    """Split a script into shots without generating images."""
    from shotboard.exceptions import SegmentationError
    from shotboard.segment import segment

    config = _load_config_or_exit(tier=tier, group_size=group_size, unit=unit)
    text = _read_script_or_exit(script)

    try:
        scenes = segment(text, config.resolved_group_size(), config.segment_unit)
    except SegmentationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not scenes:
        console.print("[yellow]Script is empty, no shots.[/yellow]")
        return

    table = Table(title=f"Shots ({config.tier} tier)")
    table.add_column("Shot", style="cyan")
    table.add_column("Text", style="white")
    table.add_column("Chars", style="green", justify="right")
    for scene in scenes:
        table.add_row(scene.identifier, truncate(scene.original_text), str(len(scene.original_text)))
    console.print(table)


@app.command("generate")
def generate_cmd(
    script: Path = typer.Argument(..., help="Script text file"),
    output: str = typer.Option("storyboard", "--output", "-o", help="Directory for images"),
    tier: str | None = typer.Option(None, "--tier", "-t", help="Account tier: free or paid"),
    group_size: int | None = typer.Option(
        None, "--group-size", "-g", help="Paragraphs per shot (overrides tier)"
    ),
    delay: float | None = typer.Option(
        None, "--delay", help="Seconds between generate requests"
    ),
    continue_on_error: bool = typer.Option(
        False, "--continue-on-error", help="Keep going after a failed shot"
    ),
) -> None:
    """Generate one image per shot, in order, and save them."""
    from shotboard.io import save_image

    config = _load_config_or_exit(
        tier=tier,
        group_size=group_size,
        delay=delay,
        continue_on_error=continue_on_error,
    )
    text = _read_script_or_exit(script)
    session = _build_session(config)

    scenes = session.submit_script(text)
    if session.error:
        console.print(f"[red]Error: {session.error}[/red]")
        raise typer.Exit(1)
    if not scenes:
        console.print("[yellow]Script is empty, nothing to generate.[/yellow]")
        raise typer.Exit(0)

    spacing = estimate_batch_seconds(len(scenes), config.batch_delay_seconds)
    console.print(
        f"[cyan]Generating {len(scenes)} shot(s) with {config.image_model}...[/cyan]"
    )
    if spacing:
        console.print(f"[dim]  Requests are spaced out: at least {format_duration(spacing)}[/dim]")

    def report(identifier: str, state: ImageState) -> None:
        if isinstance(state, Done):
            console.print(f"[green]  ✓ {identifier}[/green]")
        elif isinstance(state, Error):
            console.print(f"[red]  ✗ {identifier}: {state.message}[/red]")

    session.states.subscribe(report)
    result = asyncio.run(session.run_batch())

    if result is None:
        console.print(f"[red]Error: {session.error}[/red]")
        console.print(f"[dim]Set {config.api_key_env} to a valid API key and try again.[/dim]")
        raise typer.Exit(1)

    output_dir = Path(output)
    table = Table(title="Storyboard")
    table.add_column("Shot", style="cyan")
    table.add_column("Status")
    table.add_column("File", style="dim")

    for identifier, state in session.states_by_scene().items():
        saved = "-"
        if isinstance(state, Done):
            saved = str(save_image(state.image, output_dir, identifier))
        table.add_row(identifier, _status_cell(state), saved)

    console.print(table)
    console.print(
        f"\n[green]✓[/green] Generated {result.generated}, "
        f"failed {result.failed}, not attempted {result.not_attempted}"
    )

    if result.failed or result.aborted:
        console.print(
            "[dim]Retry a shot with 'shotboard regenerate <script> --shot \"Shot N\" --full'[/dim]"
        )
        raise typer.Exit(1)


@app.command("regenerate")
def regenerate_cmd(
    script: Path = typer.Argument(..., help="Script text file"),
    shot: str = typer.Option(..., "--shot", "-s", help='Shot identifier, e.g. "Shot 2"'),
    image: Path | None = typer.Option(
        None, "--image", "-i", help="Existing image of the shot to edit"
    ),
    instruction: str | None = typer.Option(
        None, "--instruction", "-e", help="Edit instruction applied to the existing image"
    ),
    description: str | None = typer.Option(
        None, "--description", "-D", help="Replace the shot's visual description"
    ),
    full: bool = typer.Option(
        False, "--full", "-f", help="Regenerate from the description, ignoring any image"
    ),
    output: str = typer.Option("storyboard", "--output", "-o", help="Directory for images"),
    tier: str | None = typer.Option(None, "--tier", "-t", help="Account tier: free or paid"),
    group_size: int | None = typer.Option(
        None, "--group-size", "-g", help="Paragraphs per shot (overrides tier)"
    ),
) -> None:
    """Regenerate one shot, or edit its existing image with an instruction."""
    from shotboard.exceptions import CredentialRequiredError
    from shotboard.images.handles import to_data_uri
    from shotboard.io import load_image, save_image
    from shotboard.utils import guess_mime_type

    config = _load_config_or_exit(tier=tier, group_size=group_size)
    text = _read_script_or_exit(script)
    session = _build_session(config)

    session.submit_script(text)
    if session.error:
        console.print(f"[red]Error: {session.error}[/red]")
        raise typer.Exit(1)
    if shot not in session.store:
        console.print(f"[red]Error: Unknown shot '{shot}'[/red]")
        console.print(f"[dim]Script has {len(session.scenes)} shot(s).[/dim]")
        raise typer.Exit(1)

    try:
        session.require_credential()
    except CredentialRequiredError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print(f"[dim]Set {config.api_key_env} to a valid API key and try again.[/dim]")
        raise typer.Exit(1)

    if description:
        session.update_description(shot, description)
    if instruction:
        session.update_instruction(shot, instruction)
    if image:
        if not image.exists():
            console.print(f"[red]Error: Image not found: {image}[/red]")
            raise typer.Exit(1)
        session.attach_image(shot, to_data_uri(load_image(image), guess_mime_type(image)))

    if full:
        console.print(f"[cyan]Regenerating {shot} from its description...[/cyan]")
        state = asyncio.run(session.full_regenerate(shot))
    else:
        editing = image is not None and bool(instruction and instruction.strip())
        verb = "Editing" if editing else "Generating"
        console.print(f"[cyan]{verb} {shot}...[/cyan]")
        state = asyncio.run(session.regenerate(shot))

    if session.credential_needed:
        console.print(f"[red]Error: {session.error}[/red]")
        raise typer.Exit(1)
    if isinstance(state, Error):
        console.print(f"[red]Error: {state.message}[/red]")
        raise typer.Exit(1)
    if not isinstance(state, Done):
        console.print(f"[red]Error: {shot} did not finish ({state.status})[/red]")
        raise typer.Exit(1)

    path = save_image(state.image, Path(output), shot)
    console.print(f"[green]✓[/green] Saved {shot} to {path}")
