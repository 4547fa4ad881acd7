"""CLI Application for Atelier Studio."""

import asyncio
import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.status import Status

from .config import Settings
from .errors import AtelierError, ConfigurationError
from .media import export_narration, export_video, save_image
from .models import (
    CHARACTERS,
    ENVIRONMENTS,
    LIGHTING,
    MOTION_STYLES,
    NO_CHARACTER,
    STYLES,
    AtelierProfile,
    GenerationConfig,
    GenerationOutcome,
    UploadedImage,
    VideoBundle,
)
from .profile import ProfileStore
from .seasons import current_season
from .service import GeminiService
from .studio import Studio

# Setup Typer and Console
app = typer.Typer(help="Atelier Studio CLI - AI product photos, captions and videos")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _get_store(settings: Settings) -> ProfileStore:
    store = ProfileStore(settings.profile_path)
    store.load()
    return store


def _show_settings_hint() -> None:
    console.print(
        Panel(
            "Review the atelier profile or set the key used for video:\n"
            "[bold]atelier settings --video-key <KEY>[/bold]",
            title="Open Settings",
            border_style="yellow",
        ),
    )


def _get_studio(
    settings: Settings,
    store: ProfileStore,
    live: Progress | Status | None = None,
) -> Studio:
    """Wire the studio with the interactive credential prompt.

    ``live`` is stopped before the hidden prompt is shown.
    """

    async def _reselect_credential() -> str | None:
        if live is not None:
            live.stop()
        console.print(
            "[yellow]The current key cannot access the video model.[/yellow]",
        )
        key = typer.prompt(
            "Video API key (leave blank to cancel)",
            default="",
            hide_input=True,
            show_default=False,
        )
        if not key.strip():
            return None
        store.save(store.snapshot().model_copy(update={"video_api_key": key.strip()}))
        return key.strip()

    return Studio(
        GeminiService(settings),
        store,
        reselect_credential=_reselect_credential,
        open_settings=_show_settings_hint,
    )


def _check_choice(value: str, choices: list[tuple[str, str]], option: str) -> None:
    allowed = [v for v, _ in choices]
    if value and value not in allowed:
        console.print(
            f"[bold red]Error:[/bold red] Invalid --{option} '{value}'. "
            f"Choose one of: {', '.join(allowed)}",
        )
        raise typer.Exit(code=1)


def _load_image(path: Path) -> UploadedImage:
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] File {path} not found.")
        raise typer.Exit(code=1)
    return UploadedImage.from_path(path)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error}")
    if isinstance(error, ConfigurationError):
        _show_settings_hint()
    raise typer.Exit(code=1) from error


def _print_video(bundle: VideoBundle, output_dir: Path, brand_name: str) -> None:
    video_path = export_video(bundle.video, output_dir, brand_name)
    lines = [f"[bold]Video:[/bold] {video_path}"]
    if bundle.narration:
        audio_path = export_narration(bundle.narration.path, output_dir, brand_name)
        lines.append(f"[bold]Narration:[/bold] {audio_path}")
    console.print(Panel("\n".join(lines), title="Video Ready", border_style="magenta"))


def _print_outcome(outcome: GenerationOutcome, output_dir: Path, brand_name: str) -> None:
    image_path = save_image(outcome.image.data_uri, output_dir, brand_name)
    console.print(
        Panel(
            f"[bold]Image:[/bold] {image_path}",
            title="Image Generated",
            border_style="green",
        ),
    )

    console.rule("[bold blue]Captions")
    for i, caption in enumerate(outcome.captions.captions, 1):
        console.print(Panel(caption, title=f"Option {i}", border_style="blue"))

    if outcome.video:
        _print_video(outcome.video, output_dir, brand_name)
    if outcome.video_error:
        console.print(f"[yellow]Warning: Video failed: {outcome.video_error}[/yellow]")


@app.command()
def generate(
    products: list[Path] = typer.Argument(
        ...,
        help="Product images; the first one is the main subject",
    ),
    environment: str = typer.Option("", help="Scene environment"),
    character: str = typer.Option(NO_CHARACTER, help="Character in the scene"),
    character_style: str = typer.Option(
        "",
        "--character-style",
        help="Free-text character modifier",
    ),
    lighting: str = typer.Option("", help="Lighting"),
    style: str = typer.Option("", help="Visual style"),
    motion: str = typer.Option("", help="Video motion style"),
    narration: str = typer.Option("", help="Narration script for the video"),
    prompt: str = typer.Option("", help="Additional instructions"),
    pattern: Path | None = typer.Option(None, help="Pattern/texture image"),
    style_ref: Path | None = typer.Option(
        None,
        "--style-ref",
        help="Style reference image",
    ),
    season: bool = typer.Option(
        False,
        "--season",
        help="Fill empty options from the current seasonal theme",
    ),
    video: bool = typer.Option(False, "--video/--no-video", help="Also generate a video"),
    output_dir: Path = typer.Option(Path("./output"), help="Directory for downloads"),
    api_key: str | None = typer.Option(
        None,
        envvar="GEMINI_API_KEY",
        help="Google Gemini API Key",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a UGC product photo with captions (and optionally a video)."""
    _setup_logging(verbose)
    _check_choice(environment, ENVIRONMENTS, "environment")
    _check_choice(character, CHARACTERS, "character")
    _check_choice(lighting, LIGHTING, "lighting")
    _check_choice(style, STYLES, "style")
    _check_choice(motion, MOTION_STYLES, "motion")

    images = [_load_image(p) for p in products]
    config = GenerationConfig(
        environment=environment,
        character=character,
        character_style=character_style,
        lighting=lighting,
        style=style,
        motion_style=motion,
        narration_script=narration,
        custom_prompt=prompt,
        pattern_reference=_load_image(pattern) if pattern else None,
        style_reference=_load_image(style_ref) if style_ref else None,
    )
    if season:
        theme = current_season()
        console.print(f"Applying seasonal theme: [bold]{theme.name}[/bold]")
        config = config.with_theme(
            {k: v for k, v in theme.config.items() if not getattr(config, k)},
        )

    settings = Settings.from_env(api_key)
    store = _get_store(settings)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
    studio = _get_studio(settings, store, live=progress)

    try:
        with progress:
            progress.add_task("Creating photo and captions...", total=None)
            outcome = asyncio.run(studio.generate(images, config, auto_video=video))
    except (AtelierError, ValueError) as e:
        _fail(e)

    _print_outcome(outcome, output_dir, store.snapshot().name)


@app.command()
def video(
    image: Path = typer.Argument(..., help="Still image to animate"),
    environment: str = typer.Option("", help="Scene environment"),
    style: str = typer.Option("", help="Visual style"),
    motion: str = typer.Option("", help="Video motion style"),
    narration: str = typer.Option("", help="Narration script"),
    output_dir: Path = typer.Option(Path("./output"), help="Directory for downloads"),
    api_key: str | None = typer.Option(
        None,
        envvar="GEMINI_API_KEY",
        help="Google Gemini API Key",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Animate an existing still into a vertical video with optional narration."""
    _setup_logging(verbose)
    _check_choice(environment, ENVIRONMENTS, "environment")
    _check_choice(style, STYLES, "style")
    _check_choice(motion, MOTION_STYLES, "motion")

    source = _load_image(image)
    config = GenerationConfig(
        environment=environment,
        style=style,
        motion_style=motion,
        narration_script=narration,
    )
    settings = Settings.from_env(api_key)
    store = _get_store(settings)
    status = console.status("Rendering video (this can take a few minutes)...")
    studio = _get_studio(settings, store, live=status)

    try:
        with status:
            bundle = asyncio.run(studio.create_video(source.preview_url, config))
    except AtelierError as e:
        _fail(e)

    _print_video(bundle, output_dir, store.snapshot().name)


@app.command()
def refine(
    image: Path = typer.Argument(..., help="Image to edit"),
    instruction: str = typer.Argument(..., help="What to change"),
    output_dir: Path = typer.Option(Path("./output"), help="Directory for downloads"),
    api_key: str | None = typer.Option(
        None,
        envvar="GEMINI_API_KEY",
        help="Google Gemini API Key",
    ),
) -> None:
    """Edit a generated image with a free-text instruction."""
    source = _load_image(image)
    settings = Settings.from_env(api_key)
    store = _get_store(settings)
    studio = _get_studio(settings, store)

    try:
        with console.status("Refining image..."):
            result = asyncio.run(studio.refine(source.preview_url, instruction))
    except (AtelierError, ValueError) as e:
        _fail(e)

    saved = save_image(result.data_uri, output_dir, store.snapshot().name)
    console.print(f"Refined image saved to: [underline]{saved}[/underline]")


@app.command()
def settings(
    name: str | None = typer.Option(None, help="Brand / atelier name"),
    description: str | None = typer.Option(None, help="Brand story and tone of voice"),
    video_key: str | None = typer.Option(
        None,
        "--video-key",
        help="Dedicated key for video generation",
    ),
    clear_video_key: bool = typer.Option(
        False,
        "--clear-video-key",
        help="Use the default key for video again",
    ),
) -> None:
    """Show or update the atelier profile."""
    store = _get_store(Settings.from_env())
    profile = store.snapshot()

    updates: dict = {}
    if name is not None:
        updates["name"] = name
    if description is not None:
        updates["description"] = description
    if video_key is not None:
        updates["video_api_key"] = video_key.strip() or None
    if clear_video_key:
        updates["video_api_key"] = None

    if updates:
        profile = store.save(AtelierProfile(**{**profile.model_dump(), **updates}))
        console.print("[green]Settings saved.[/green]")

    key_state = "configured" if profile.video_api_key else "default key"
    console.print(
        Panel(
            f"[bold]Name:[/bold] {profile.name}\n"
            f"[bold]Description:[/bold] {profile.description}\n"
            f"[bold]Video key:[/bold] {key_state}",
            title="Atelier Settings",
            border_style="cyan",
        ),
    )


@app.command()
def season() -> None:
    """Show the seasonal theme suggested for today."""
    theme = current_season()
    details = "\n".join(f"[bold]{k}:[/bold] {v}" for k, v in theme.config.items())
    console.print(
        Panel(
            f"{theme.description}\n\n{details}",
            title=f"Seasonal Suggestion: {theme.name}",
            border_style="magenta",
        ),
    )


if __name__ == "__main__":
    app()
