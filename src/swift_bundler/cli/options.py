# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations and value parsing shared by several commands."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

import typer

from ..platforms import OS
from .shared import CLIError, ensure_exclusive

FILTER_OPTION = Annotated[str | None, typer.Option("--filter", help="A search term to filter with.")]
OS_OPTION = Annotated[list[str] | None, typer.Option("--os", help="Only show entries for a specific OS.")]
APPLE_OPTION = Annotated[bool, typer.Option("--apple", help="Only show Apple devices or simulators.")]
JSON_OPTION = Annotated[bool, typer.Option("--json", help="Print machine-readable JSON.")]
BOOTED_OPTION = Annotated[bool, typer.Option("--booted", help="Only show booted simulators.")]
NOT_BOOTED_OPTION = Annotated[bool, typer.Option("--not-booted", help="Only show simulators that aren't booted.")]


def parse_oses(values: Sequence[str] | None, *, allowed: Sequence[OS] = tuple(OS)) -> list[OS]:
    """Parse ``--os`` values, raising :class:`CLIError` for unknown names."""

    parsed: list[OS] = []
    expected = ", ".join(item.value for item in allowed)
    for value in values or ():
        try:
            os_ = OS(value)
        except ValueError as exc:
            raise CLIError(f"Invalid OS '{value}'; expected one of {expected}") from exc
        if os_ not in allowed:
            raise CLIError(f"Invalid OS '{value}'; expected one of {expected}")
        parsed.append(os_)
    return parsed


def selected_oses(values: Sequence[str] | None, apple: bool, *, allowed: Sequence[OS] = tuple(OS)) -> list[OS]:
    """Resolve ``--os`` and ``--apple`` into the OSes to query.

    Raises:
        CLIError: If both options are given or an OS is unknown.
    """

    ensure_exclusive({"--apple": apple, "--os": bool(values)})
    if apple:
        return [os_ for os_ in allowed if os_.is_apple]
    return parse_oses(values, allowed=allowed) or list(allowed)


def booted_filter(booted: bool, not_booted: bool) -> bool | None:
    """Resolve ``--booted``/``--not-booted`` into a boot-state filter."""

    ensure_exclusive({"--booted": booted, "--not-booted": not_booted})
    if booted:
        return True
    if not_booted:
        return False
    return None


__all__ = [
    "APPLE_OPTION",
    "BOOTED_OPTION",
    "FILTER_OPTION",
    "JSON_OPTION",
    "NOT_BOOTED_OPTION",
    "OS_OPTION",
    "booted_filter",
    "parse_oses",
    "selected_oses",
]
