# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``devices`` command group."""

from __future__ import annotations

import typer

from ...devices.models import device_to_dict
from ..options import APPLE_OPTION, FILTER_OPTION, JSON_OPTION, OS_OPTION, selected_oses
from ..rendering import echo_json, print_devices
from ..shared import command_scope, create_typer, get_state

devices_app = create_typer(name="devices", help="List connected devices.")


@devices_app.command("list")
def list_devices(
    ctx: typer.Context,
    search_term: FILTER_OPTION = None,
    os_values: OS_OPTION = None,
    apple: APPLE_OPTION = False,
    as_json: JSON_OPTION = False,
) -> None:
    """List connected iOS, tvOS, visionOS and Android devices."""

    with command_scope(ctx) as bundler:
        oses = selected_oses(os_values, apple)
        devices = bundler.device_manager().list_physical_devices(oses, search_term)
        if as_json:
            echo_json([device_to_dict(device) for device in devices])
        else:
            print_devices(get_state(ctx).logger.console, devices)


def register(app: typer.Typer) -> None:
    """Attach the ``devices`` group to ``app``."""

    app.add_typer(devices_app, name="devices")


__all__ = ["devices_app", "register"]
