# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``toolchains`` command group."""

from __future__ import annotations

import typer

from ..options import JSON_OPTION
from ..rendering import echo_json, print_toolchains
from ..shared import command_scope, create_typer, get_state

toolchains_app = create_typer(name="toolchains", help="Inspect installed Swift toolchains.")


@toolchains_app.command("list")
def list_toolchains(ctx: typer.Context, as_json: JSON_OPTION = False) -> None:
    """List Swift toolchains installed on this machine."""

    with command_scope(ctx) as bundler:
        toolchains = bundler.toolchain_catalog().enumerate()
        if as_json:
            echo_json([toolchain.to_dict() for toolchain in toolchains])
        else:
            print_toolchains(get_state(ctx).logger.console, toolchains)


def register(app: typer.Typer) -> None:
    """Attach the ``toolchains`` group to ``app``."""

    app.add_typer(toolchains_app, name="toolchains")


__all__ = ["register", "toolchains_app"]
