from __future__ import annotations

import logging
from dataclasses import replace
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from result import Err

from notetree.config.defaults import default_config
from notetree.config.loader import load_config, sample_config_json
from notetree.services.store import load_tree, save_tree
from notetree.ui.app import NotetreeApp

console = Console()


def _configure_logging(log_file: str | None) -> None:
    # The TUI owns the terminal, so records only go somewhere when asked to.
    if log_file is None:
        logging.getLogger("notetree").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(
    path: Annotated[str | None, typer.Argument(help="Note file to open (created on exit if missing).")] = None,
    editor: Annotated[str | None, typer.Option("--editor", "-e", help="Command used to open notes.")] = None,
    log_file: Annotated[str | None, typer.Option("--log-file", help="Write debug logs to this file.")] = None,
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
) -> None:
    if sample_config:
        console.print(sample_config_json())
        raise typer.Exit(0)

    if path is None:
        console.print("[red]You need to input a file name[/]")
        raise typer.Exit(1)

    _configure_logging(log_file)

    config_result = load_config()
    if isinstance(config_result, Err):
        console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
        config = default_config()
    else:
        config = config_result.unwrap()
    if editor:
        config = replace(config, editor=editor)

    outcome = load_tree(path)
    app = NotetreeApp(outcome.tree, config, message=outcome.message)
    try:
        app.run()
    finally:
        saved = save_tree(app.session.tree, path)
        if isinstance(saved, Err):
            console.print(f"[yellow]Warning: {escape(saved.unwrap_err())}[/]")


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
