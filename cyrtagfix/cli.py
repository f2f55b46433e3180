from __future__ import annotations
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .backup import BackupManager
from .config import ConfigError, load_config
from .logging_setup import setup_logging
from .pipelines.walker import fix_tree

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

app = typer.Typer(
    add_completion=False,
    help="Fix cp1251 Cyrillic mojibake in music file tags and .cue sheets.",
)


def _version_callback(value: bool):
    if value:
        console.print(f"cyrtagfix {__version__}")
        raise typer.Exit()


@app.command(no_args_is_help=True)
def fix(
    path: Path = typer.Argument(..., help="Path to the music folder"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Don't create .bak files (created by default)"),
    force_cp1251_cue: bool = typer.Option(
        False, "--force-cp1251-cue", help="Treat every .cue file as cp1251, without guessing"
    ),
    cyr_threshold: Optional[float] = typer.Option(
        None, "--cyr-threshold", help="Cyrillic detection threshold [default: 0.2]"
    ),
    no_follow_symlinks: bool = typer.Option(
        False, "--no-follow-symlinks", help="Don't descend into symlinked folders or files"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Repair Cyrillic mojibake in tags and .cue files under PATH."""
    if not path.exists():
        err_console.print(f"[red]Error:[/red] path not found: {escape(str(path))}")
        raise typer.Exit(code=1)

    try:
        cfg = load_config(config).merge(
            cyr_threshold=cyr_threshold,
            log_level=log_level,
            log_file=str(log_file) if log_file else None,
        )
    except ConfigError as e:
        err_console.print(f"[red]Config error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2)

    # switches only move a setting away from its default
    cfg.no_backup = cfg.no_backup or no_backup
    cfg.force_cp1251_cue = cfg.force_cp1251_cue or force_cp1251_cue
    cfg.follow_symlinks = cfg.follow_symlinks and not no_follow_symlinks

    try:
        setup_logging(cfg.log_level, cfg.log_file or None, json=cfg.log_json)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2)

    console.print(f"[green bold]Scanning folder:[/green bold] {escape(str(path))}")

    report = fix_tree(
        path,
        BackupManager(no_backup=cfg.no_backup),
        force_cp1251_cue=cfg.force_cp1251_cue,
        threshold=cfg.cyr_threshold,
        follow_symlinks=cfg.follow_symlinks,
    )

    console.print(f"[green bold]Done![/green bold] [bold]{report.fixed}[/bold] files fixed.")
    if report.errors:
        err_console.print(f"[yellow]{report.errors} entries could not be read.[/yellow]")


if __name__ == "__main__":
    app()
