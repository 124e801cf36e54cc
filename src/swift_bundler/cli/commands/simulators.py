# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``simulators`` command group covering Apple simulators and Android emulators."""

from __future__ import annotations

from typing import Annotated

import typer

from ...platforms import OS, SIMULATOR_OSES
from ..options import (
    APPLE_OPTION,
    BOOTED_OPTION,
    FILTER_OPTION,
    JSON_OPTION,
    NOT_BOOTED_OPTION,
    OS_OPTION,
    booted_filter,
    selected_oses,
)
from ..rendering import echo_json, print_simulators
from ..shared import command_scope, create_typer, get_state

simulators_app = create_typer(name="simulators", help="List and boot simulators and emulators.")


@simulators_app.command("list")
def list_simulators(
    ctx: typer.Context,
    search_term: FILTER_OPTION = None,
    os_values: OS_OPTION = None,
    apple: APPLE_OPTION = False,
    booted: BOOTED_OPTION = False,
    not_booted: NOT_BOOTED_OPTION = False,
    as_json: JSON_OPTION = False,
) -> None:
    """List available iOS, tvOS, visionOS and Android simulators."""

    with command_scope(ctx) as bundler:
        oses = selected_oses(os_values, apple, allowed=SIMULATOR_OSES)
        boot_state = booted_filter(booted, not_booted)
        simulators = bundler.simulator_manager().list_simulators(oses, search_term, booted=boot_state)
        if as_json:
            echo_json([simulator.to_dict() for simulator in simulators])
            return
        console = get_state(ctx).logger.console
        if any(os_.is_apple for os_ in oses):
            apple_simulators = [simulator for simulator in simulators if simulator.os.is_apple]
            print_simulators(console, "Apple simulators (iOS, tvOS, visionOS)", apple_simulators)
        if OS.ANDROID in oses:
            android_simulators = [simulator for simulator in simulators if simulator.os is OS.ANDROID]
            print_simulators(console, "Android emulators", android_simulators)


@simulators_app.command("boot")
def boot_simulator(
    ctx: typer.Context,
    id_or_name: Annotated[
        str,
        typer.Argument(help="The id or name of the simulator to start. Supports partial substring matching."),
    ],
) -> None:
    """Boot an iOS, tvOS, visionOS or Android simulator."""

    with command_scope(ctx) as bundler:
        manager = bundler.simulator_manager()
        simulator = manager.locate_simulator(id_or_name)
        logger = get_state(ctx).logger
        if simulator.id != simulator.name:
            logger.info(f"Booting '{simulator.name}' (id: {simulator.id})")
        else:
            logger.info(f"Booting '{simulator.name}'")
        manager.boot_simulator(simulator)


def register(app: typer.Typer) -> None:
    """Attach the ``simulators`` group to ``app``."""

    app.add_typer(simulators_app, name="simulators")


__all__ = ["register", "simulators_app"]
