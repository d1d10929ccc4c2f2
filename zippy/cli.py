"""zippy CLI — Typer + Rich terminal interface.

Reads text from a file or piped stdin and plays it back one word at a
time in a full-screen display.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from zippy import __version__
from zippy.errors import StreamInitError
from zippy.player import run_player
from zippy.schemas.player import PlayerConfig
from zippy.settings import load_player_config
from zippy.stream import build_stream

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="zippy",
    help="Play text one word at a time in the terminal.",
    no_args_is_help=False,
    rich_markup_mode="rich",
)


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"zippy {__version__}")
        raise typer.Exit()


def _load_config(config_path: Path | None) -> PlayerConfig:
    """Load player config, exit on error."""
    try:
        return load_player_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from None


def _configure_logging(log_file: Path | None) -> None:
    """Send log records to ``log_file``; the live display owns the terminal."""
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    package_logger = logging.getLogger("zippy")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


# ── zippy ────────────────────────────────────────────────────────


@app.command()
def play(
    file: Path | None = typer.Option(
        None, "--file", "-f",
        help="Path to input text (default: read piped stdin)",
        dir_okay=False,
    ),
    start_wpm: int | None = typer.Option(
        None, "--start-wpm",
        help="Starting words per minute",
        min=1,
    ),
    wpm: int | None = typer.Option(
        None, "--wpm",
        help="Alias for --start-wpm (takes precedence)",
        min=1,
    ),
    lazy: bool | None = typer.Option(
        None, "--lazy/--eager",
        help="Stream tokens lazily without buffering; disables back/forward",
    ),
    config: Path | None = typer.Option(
        None, "--config",
        help="Config file (default: ~/.zippy/config.toml)",
        dir_okay=False,
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file",
        help="Write debug logs to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Play text one word at a time.

    Controls: space play/pause, +/- speed, h/l back/forward,
    r restart (file input), q quit.
    """
    _configure_logging(log_file)
    settings = _load_config(config)

    overrides: dict[str, object] = {}
    if start_wpm is not None:
        overrides["start_wpm"] = start_wpm
    if wpm is not None:
        overrides["start_wpm"] = wpm
    if lazy is not None:
        overrides["lazy"] = lazy
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        stream = build_stream(settings.lazy, file)
    except StreamInitError as e:
        hint = " See --help." if e.show_usage else ""
        err_console.print(f"[red]{e.message}[/red]{hint}")
        raise typer.Exit(1) from None

    logger.info(
        "Starting %s playback from %s",
        "lazy" if settings.lazy else "eager",
        file or "stdin",
    )
    try:
        run_player(stream, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        stream.close()
