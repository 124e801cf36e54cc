# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``emulators`` command group for Android virtual devices."""

from __future__ import annotations

from typing import Annotated

import typer

from ...android.emulator import AndroidVirtualDevice, AndroidVirtualDeviceManager, BootOutcome
from ...android.sdk import locate_android_sdk
from ...platforms import OS
from ..options import BOOTED_OPTION, JSON_OPTION, NOT_BOOTED_OPTION, booted_filter
from ..rendering import echo_json, print_simulators
from ..shared import command_scope, create_typer, get_state

emulators_app = create_typer(name="emulators", help="List and boot Android emulators.")


@emulators_app.command("list")
def list_emulators(
    ctx: typer.Context,
    booted: BOOTED_OPTION = False,
    not_booted: NOT_BOOTED_OPTION = False,
    as_json: JSON_OPTION = False,
) -> None:
    """List Android virtual devices known to avdmanager."""

    with command_scope(ctx) as bundler:
        boot_state = booted_filter(booted, not_booted)
        emulators = bundler.simulator_manager().list_simulators([OS.ANDROID], booted=boot_state)
        if as_json:
            echo_json([emulator.to_dict() for emulator in emulators])
        else:
            print_simulators(get_state(ctx).logger.console, "Android emulators", emulators)


@emulators_app.command(
    "boot",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def boot_emulator(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The AVD name of the emulator to boot.")],
    attach: Annotated[
        bool,
        typer.Option("--attach", help="Keep the emulator attached to this process instead of detaching it."),
    ] = False,
) -> None:
    """Boot an Android emulator. Arguments after ``--`` are passed to the emulator."""

    with command_scope(ctx) as bundler:
        sdk = locate_android_sdk(bundler.settings, bundler.host_platform)
        manager = AndroidVirtualDeviceManager(
            sdk,
            bundler.process_runner,
            bundler.process,
            bundler.settings,
            logger=bundler.logger,
        )
        outcome = manager.boot(AndroidVirtualDevice(name), attach=attach, additional_arguments=list(ctx.args))
        if outcome is BootOutcome.BOOTED:
            get_state(ctx).logger.ok(f"Emulator '{name}' is ready")


def register(app: typer.Typer) -> None:
    """Attach the ``emulators`` group to ``app``."""

    app.add_typer(emulators_app, name="emulators")


__all__ = ["emulators_app", "register"]
