# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .. import __version__
from ..config import ConfigError, load_settings
from ..logging import build_logger, fail, set_logger
from .commands import register_commands
from .shared import CLIState, create_typer

app = create_typer(
    name="swift-bundler",
    help="Inspect the SDKs, toolchains, devices and simulators used to bundle Swift apps.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"swift-bundler {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Print debug diagnostics.")] = False,
    emoji: Annotated[bool, typer.Option("--emoji/--no-emoji", help="Toggle emoji output.")] = True,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Read settings from this TOML file.", dir_okay=False),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Prepare settings and logging shared by every command."""

    previous = ctx.obj if isinstance(ctx.obj, CLIState) else None
    try:
        settings = load_settings(
            config_path=config,
            verbose=verbose or None,
            use_emoji=None if emoji else False,
        )
    except ConfigError as exc:
        fail(str(exc), use_emoji=emoji)
        raise typer.Exit(code=exc.exit_code) from exc
    logger = build_logger(verbose=settings.verbose, use_emoji=settings.use_emoji, use_color=settings.use_color)
    set_logger(logger)
    ctx.obj = CLIState(settings, logger, previous.context_factory if previous is not None else None)


register_commands(app)


def main() -> None:
    """Run the ``swift-bundler`` console script."""

    app()


__all__ = ["app", "main"]
