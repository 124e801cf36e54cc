# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``sdks`` command group."""

from __future__ import annotations

import typer

from ..options import JSON_OPTION
from ..rendering import echo_json, print_sdks
from ..shared import command_scope, create_typer, get_state

sdks_app = create_typer(name="sdks", help="Inspect installed Swift SDKs.")


@sdks_app.command("list")
def list_sdks(ctx: typer.Context, as_json: JSON_OPTION = False) -> None:
    """List Swift SDKs found in the standard SDK directories."""

    with command_scope(ctx) as bundler:
        sdks = bundler.sdk_catalog().enumerate()
        if as_json:
            echo_json([sdk.to_dict() for sdk in sdks])
        else:
            print_sdks(get_state(ctx).logger.console, sdks)


def register(app: typer.Typer) -> None:
    """Attach the ``sdks`` group to ``app``."""

    app.add_typer(sdks_app, name="sdks")


__all__ = ["register", "sdks_app"]
