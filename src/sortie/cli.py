"""Command-line interface for sortie.

Uses Typer for the commands and Rich for the terminal review screen.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

# Load environment variables from .env files
# Priority: local .env > ~/.sortie/.env
_user_env = Path.home() / ".sortie" / ".env"
if _user_env.exists():
    load_dotenv(_user_env)
load_dotenv()
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sortie import __version__
from sortie.config import ConfigProvider, OrganizerConfig, SwipeConfig
from sortie.errors import SortieError, format_error_for_display
from sortie.logging import LogContext, LogLevel, enable_file_logging, set_verbosity
from sortie.media.files import FileEffectExecutor, load_videos
from sortie.models.action import action_label, parse_action
from sortie.models.clip import format_duration, format_file_size
from sortie.models.direction import Direction
from sortie.organizer.keyboard import SHORTCUT_ROWS, KeyEvent
from sortie.organizer.session import OrganizerSession
from sortie.organizer.store import OrganizerStore
from sortie.organizer.timers import AsyncioScheduler

# Create the main Typer app
app = typer.Typer(
    name="sortie",
    help="Swipe through a folder of video clips and sort them into folders.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

DIRECTION_ARROWS = {
    Direction.UP: "↑",
    Direction.DOWN: "↓",
    Direction.LEFT: "←",
    Direction.RIGHT: "→",
}

# Raw terminal sequences -> key names (POSIX escape codes, then Windows)
TERMINAL_KEYS = {
    "\x1b[A": "ArrowUp",
    "\x1b[B": "ArrowDown",
    "\x1b[C": "ArrowRight",
    "\x1b[D": "ArrowLeft",
    "\xe0H": "ArrowUp",
    "\xe0P": "ArrowDown",
    "\xe0M": "ArrowRight",
    "\xe0K": "ArrowLeft",
}

QUIT_KEYS = ("q", "Q", "\x03", "\x04")

NOTIFY_STYLES = {
    "info": "cyan",
    "success": "green",
    "error": "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sortie version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every decision and undo."),
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write a debug log to this file."),
    ] = None,
) -> None:
    """Sortie - review video clips one at a time.

    Swipe (or press an arrow key) to send the current clip to the folder
    mapped to that direction, the trash, or leave it where it is. Every
    decision can be undone.
    """
    if verbose:
        set_verbosity(LogLevel.VERBOSE)
    if log_file:
        enable_file_logging(log_file)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}")
    raise typer.Exit(1)


def key_event_from_terminal(raw: str) -> KeyEvent:
    """Translate a raw ``getchar`` result into a key event."""
    if raw in TERMINAL_KEYS:
        return KeyEvent(TERMINAL_KEYS[raw])
    if raw == "\x1a":
        return KeyEvent("z", ctrl=True)
    return KeyEvent(raw)


# =============================================================================
# Folder Commands
# =============================================================================


@app.command()
def scan(
    directory: Annotated[Path, typer.Argument(help="Folder with video clips")],
) -> None:
    """List the clips a review of DIRECTORY would go through."""
    result = load_videos(directory)
    if not result.ok:
        console.print(f"[red]Error:[/red] Failed to load videos: {escape(result.error)}")
        raise typer.Exit(1)

    clips = result.data or []
    if not clips:
        console.print("[yellow]No videos found in this folder. Nothing to review.[/yellow]")
        return

    table = Table(title=f"{directory} ({len(clips)} clips)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Filename", style="cyan")
    table.add_column("Format", style="white")
    table.add_column("Duration", style="green")
    table.add_column("Size", style="yellow", justify="right")

    for number, clip in enumerate(clips, start=1):
        table.add_row(
            str(number),
            escape(clip.filename),
            clip.format.upper(),
            format_duration(clip.duration_secs),
            format_file_size(clip.size),
        )

    console.print(table)


@app.command()
def shortcuts() -> None:
    """Show the keyboard shortcuts of a review session."""
    console.print(_shortcuts_table())


def _shortcuts_table() -> Table:
    table = Table(title="Keyboard Shortcuts", show_header=False)
    table.add_column("Keys", style="bold cyan")
    table.add_column("Action")
    for keys, description in SHORTCUT_ROWS:
        table.add_row("  ".join(keys), description)
    table.add_row("Q", "Quit")
    return table


# =============================================================================
# Config Commands
# =============================================================================

config_app = typer.Typer(
    name="config",
    help="Show or change which action each swipe direction performs.",
)
app.add_typer(config_app, name="config")


def _swipe_table(swipe: SwipeConfig) -> Table:
    table = Table(title="Swipe Actions")
    table.add_column("Direction", style="cyan")
    table.add_column("Action", style="white")
    table.add_column("Destination", style="green")
    for direction in Direction:
        action = swipe.action_for(direction)
        destination = getattr(action, "target", "")
        table.add_row(f"{DIRECTION_ARROWS[direction]} {direction.value}", action.type, destination)
    return table


@config_app.command("show")
def config_show() -> None:
    """Show the current swipe mapping."""
    provider = ConfigProvider()
    try:
        config = provider.load()
    except SortieError as e:
        _fail(e)

    console.print(_swipe_table(config.swipe))


@config_app.command("set")
def config_set(
    direction: Annotated[Direction, typer.Argument(help="Swipe direction")],
    action: Annotated[str, typer.Argument(help="move, delete or skip")],
    target: Annotated[
        Optional[str],
        typer.Option("--target", "-t", help="Destination folder for move"),
    ] = None,
) -> None:
    """Map a swipe direction to an action.

    Move targets are relative to the reviewed folder unless absolute.
    """
    provider = ConfigProvider()
    try:
        swipe_action = parse_action(action, target)
        config = provider.load()
        config.swipe = config.swipe.with_action(direction, swipe_action)
        path = provider.save(config)
    except SortieError as e:
        _fail(e)

    console.print(
        f"[green]Saved:[/green] {DIRECTION_ARROWS[direction]} {direction.value} -> "
        f"{action_label(swipe_action)}"
    )
    console.print(f"[dim]{path}[/dim]")


@config_app.command("reset")
def config_reset() -> None:
    """Restore the default swipe mapping."""
    provider = ConfigProvider()
    try:
        provider.save(OrganizerConfig())
    except SortieError as e:
        _fail(e)

    console.print("[green]Swipe mapping reset to defaults.[/green]")
    console.print(_swipe_table(SwipeConfig()))


# =============================================================================
# Review Session
# =============================================================================


def _print_notification(level: str, message: str) -> None:
    style = NOTIFY_STYLES.get(level, "white")
    console.print(f"[{style}]{escape(message)}[/{style}]")


def _render(session: OrganizerSession) -> None:
    state = session.state
    clip = state.current_clip

    if clip is None:
        console.print(
            Panel(
                f"[bold]All caught up![/bold]\nNo more videos to organize. "
                f"{state.processed_count} sorted.\n[dim]Z to undo, Q to quit.[/dim]",
                border_style="green",
            )
        )
        return

    try:
        swipe = session.config_provider.load().swipe
        labels = "   ".join(
            f"{DIRECTION_ARROWS[d]} {action_label(swipe.action_for(d))}" for d in Direction
        )
    except SortieError as e:
        labels = f"[red]{escape(format_error_for_display(e))}[/red]"

    properties = Table.grid(padding=(0, 2))
    properties.add_column(style="dim")
    properties.add_column()
    properties.add_row("Format", clip.format.upper())
    properties.add_row("Duration", format_duration(clip.duration_secs))
    properties.add_row("Size", format_file_size(clip.size))
    properties.add_row("Path", f"[dim]{escape(clip.path)}[/dim]")

    playback = "▶" if state.is_playing else "⏸"
    console.print(
        Panel(
            properties,
            title=f"[bold]{escape(clip.filename)}[/bold]",
            subtitle=(
                f"{state.current_index + 1} / {len(state.clips)}  ·  "
                f"{state.progress_percent:.0f}% sorted  ·  {playback} {state.playback_rate:g}x"
            ),
            border_style="cyan",
        )
    )
    console.print(labels)
    if state.preload_next:
        upcoming = ", ".join(escape(c.filename) for c in state.preload_next)
        console.print(f"[dim]Next: {upcoming}[/dim]")

    if session.help_visible:
        console.print(_shortcuts_table())


async def _wait_until_settled(session: OrganizerSession, scheduler: AsyncioScheduler) -> None:
    # Exit animations finish through a timer, then a background task
    settled = asyncio.Event()

    def on_card_change(card) -> None:
        if not card.is_animating_out:
            settled.set()

    unsubscribe = session.card.subscribe(on_card_change)
    try:
        if session.card.is_animating_out:
            await settled.wait()
    finally:
        unsubscribe()
    await scheduler.drain()


async def _run_review(directory: Path) -> None:
    store = OrganizerStore()
    scheduler = AsyncioScheduler()
    session = OrganizerSession(
        store=store,
        config_provider=ConfigProvider(),
        executor=FileEffectExecutor(),
        scheduler=scheduler,
        notifier=_print_notification,
    )

    try:
        if not await session.load_folder(directory):
            return

        _render(session)
        while True:
            raw = await asyncio.to_thread(typer.getchar)
            if raw in QUIT_KEYS:
                break

            if not session.keyboard.handle(key_event_from_terminal(raw)):
                continue

            await _wait_until_settled(session, scheduler)
            _render(session)
    finally:
        session.close()

    state = store.state
    console.print(
        f"\n[bold]Session finished:[/bold] {state.processed_count} sorted, "
        f"{len(state.clips)} left."
    )


@app.command()
def review(
    directory: Annotated[Path, typer.Argument(help="Folder with video clips")],
) -> None:
    """Review the clips in DIRECTORY one at a time.

    Arrow keys send the current clip where the swipe mapping says
    (see [bold]sortie config show[/bold]). Z undoes, ? shows help, Q quits.
    """
    with LogContext(source_dir=str(directory)):
        asyncio.run(_run_review(directory))


if __name__ == "__main__":
    app()
