# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rich tables for the listing commands."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

import typer
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..catalog.sdks import SwiftSDK
from ..catalog.toolchains import SwiftToolchain
from ..devices.models import Device, Simulator

NONE_FOUND = "None found"


def echo_json(payload: Sequence[dict[str, Any]] | dict[str, Any]) -> None:
    """Write ``payload`` to stdout as indented JSON."""

    typer.echo(json.dumps(payload, indent=2))


def _print_table(console: Console, table: Table, rows: int) -> None:
    if rows == 0:
        console.print(Text(f"{table.title}: {NONE_FOUND}", style="italic"))
        return
    console.print(table)


def device_table(devices: Iterable[Device]) -> Table:
    table = Table(title="Devices", box=box.SIMPLE)
    table.add_column("Id", style="bold", overflow="fold")
    table.add_column("Device")
    table.add_column("Status")
    for device in devices:
        table.add_row(device.id or "-", device.describe(include_id=False), str(device.status))
    return table


def simulator_table(title: str, simulators: Iterable[Simulator]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Id", style="bold", overflow="fold")
    table.add_column("Name")
    table.add_column("OS")
    table.add_column("Booted")
    for simulator in simulators:
        table.add_row(simulator.id, simulator.name, simulator.os.display_name, "yes" if simulator.is_booted else "no")
    return table


def sdk_table(sdks: Iterable[SwiftSDK]) -> Table:
    table = Table(title="Swift SDKs", box=box.SIMPLE)
    table.add_column("Triple", style="bold")
    table.add_column("Artifact")
    table.add_column("Bundle", overflow="fold")
    for sdk in sdks:
        table.add_row(sdk.triple, sdk.artifact_identifier, str(sdk.bundle))
    return table


def toolchain_table(toolchains: Iterable[SwiftToolchain]) -> Table:
    table = Table(title="Swift toolchains", box=box.SIMPLE)
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Root", overflow="fold")
    for toolchain in toolchains:
        table.add_row(toolchain.display_name, toolchain.kind.value, str(toolchain.root))
    return table


def print_devices(console: Console, devices: Sequence[Device]) -> None:
    _print_table(console, device_table(devices), len(devices))


def print_simulators(console: Console, title: str, simulators: Sequence[Simulator]) -> None:
    _print_table(console, simulator_table(title, simulators), len(simulators))


def print_sdks(console: Console, sdks: Sequence[SwiftSDK]) -> None:
    _print_table(console, sdk_table(sdks), len(sdks))


def print_toolchains(console: Console, toolchains: Sequence[SwiftToolchain]) -> None:
    _print_table(console, toolchain_table(toolchains), len(toolchains))


__all__ = [
    "echo_json",
    "print_devices",
    "print_sdks",
    "print_simulators",
    "print_toolchains",
]
