# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command registry."""

from __future__ import annotations

import typer

from . import devices, emulators, sdks, simulators, toolchains

__all__ = ["register_commands"]


def register_commands(app: typer.Typer) -> None:
    """Register every built-in command group on ``app``.

    Args:
        app: Root Typer application.
    """

    devices.register(app)
    simulators.register(app)
    emulators.register(app)
    sdks.register(app)
    toolchains.register(app)
