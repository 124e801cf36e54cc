# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (state, errors, validation, registration)."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Final

import typer
from typer.core import TyperGroup

from ..config import BundlerSettings
from ..context import BundlerContext
from ..errors import BundlerError
from ..logging import BundlerLogger

INTERRUPTED_EXIT_CODE: Final[int] = 130


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class SortedTyperGroup(TyperGroup):
    """Typer group listing its subcommands alphabetically in help output."""

    def list_commands(self, ctx: typer.Context) -> list[str]:  # type: ignore[override]
        return sorted(super().list_commands(ctx))


def create_typer(**kwargs: Any) -> typer.Typer:
    """Return a Typer application with sorted help and rich markup enabled."""

    kwargs.setdefault("cls", SortedTyperGroup)
    kwargs.setdefault("rich_markup_mode", "rich")
    kwargs.setdefault("no_args_is_help", True)
    return typer.Typer(**kwargs)


ContextFactory = Callable[[BundlerSettings, BundlerLogger], BundlerContext]


@dataclass(slots=True)
class CLIState:
    """State prepared by the root callback and shared with every command.

    ``context_factory`` replaces the default :class:`BundlerContext` construction;
    tests use it to inject fake process runners.
    """

    settings: BundlerSettings
    logger: BundlerLogger
    context_factory: ContextFactory | None = None

    def bundler_context(self) -> BundlerContext:
        if self.context_factory is not None:
            return self.context_factory(self.settings, self.logger)
        return BundlerContext(self.settings, logger=self.logger)


def get_state(ctx: typer.Context) -> CLIState:
    """Return the :class:`CLIState` attached by the root callback.

    Raises:
        CLIError: If a command runs without the root callback (a wiring bug).
    """

    state = ctx.find_object(CLIState)
    if state is None:
        raise CLIError("CLI state is not initialised; invoke commands through the swift-bundler app")
    return state


def ensure_exclusive(flags: Mapping[str, bool]) -> None:
    """Reject combinations of mutually exclusive flags.

    Args:
        flags: Mapping of flag spelling (``--booted``) to whether it was given.

    Raises:
        CLIError: With exit status 1 when more than one flag is set.
    """

    given = [name for name, value in flags.items() if value]
    if len(given) > 1:
        quoted = [f"'{name}'" for name in given]
        raise CLIError(f"{' and '.join(quoted)} cannot be used together")


@contextmanager
def handling_errors(logger: BundlerLogger) -> Iterator[None]:
    """Translate bundler and CLI errors into rendered failures and exit codes."""

    try:
        yield
    except KeyboardInterrupt as exc:
        logger.fail("Interrupted")
        raise typer.Exit(code=INTERRUPTED_EXIT_CODE) from exc
    except BundlerError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


@contextmanager
def command_scope(ctx: typer.Context) -> Iterator[BundlerContext]:
    """Yield a :class:`BundlerContext` whose children are cleaned up on exit."""

    state = get_state(ctx)
    with handling_errors(state.logger), state.bundler_context() as bundler:
        yield bundler


__all__ = [
    "CLIError",
    "CLIState",
    "ContextFactory",
    "INTERRUPTED_EXIT_CODE",
    "SortedTyperGroup",
    "command_scope",
    "create_typer",
    "ensure_exclusive",
    "get_state",
    "handling_errors",
]
