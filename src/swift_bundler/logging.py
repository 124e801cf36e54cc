# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing diagnostics with optional colour and emoji support."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

from .console import detect_tty, get_console_manager

_KEY_VALUE_PATTERN = re.compile(r"(\b[\w.-]+)=([^\s]+)")


@runtime_checkable
class DiagnosticLogger(Protocol):
    """Minimal logging surface accepted by catalog, matcher and device components."""

    def debug(self, message: str) -> None:
        """Record a verbose diagnostic line."""

    def info(self, message: str) -> None:
        """Record an informational line."""

    def warn(self, message: str) -> None:
        """Record a recoverable problem."""


def emoji(symbol: str, enable: bool) -> str:
    """Select an emoji symbol based on the caller's preference.

    Args:
        symbol: Emoji text to include in the output.
        enable: Flag indicating whether emoji output is desired.

    Returns:
        str: Emoji symbol when enabled, otherwise an empty string.
    """

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
) -> None:
    """Render ``msg`` to the console using shared styling helpers.

    Args:
        msg: Message text to print to the console.
        style: Rich style name to apply when colour output is active.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


@dataclass(slots=True)
class BundlerLogger:
    """Console-backed logger honouring verbosity, emoji and colour preferences."""

    console: Console
    use_emoji: bool = True
    use_color: bool | None = None
    debug_enabled: bool = False

    def debug(self, message: str) -> None:
        """Render a debug line with highlighted ``key=value`` pairs when verbose.

        Args:
            message: Diagnostic text; ``key=value`` tokens are emphasised.
        """

        if not self.debug_enabled:
            return
        text = Text(f"{emoji('🐛 ', self.use_emoji)}{message}", style="dim")
        for match in _KEY_VALUE_PATTERN.finditer(text.plain):
            text.stylize("bold cyan", match.start(1), match.end(1))
            text.stylize("magenta", match.start(2), match.end(2))
        self.console.print(text)

    def info(self, message: str) -> None:
        info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def fail(self, message: str) -> None:
        fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Print ``message`` without decoration."""

        self.console.print(message)


@dataclass(slots=True)
class BufferedLogger:
    """Collect diagnostics from a worker so they can be replayed in a stable order."""

    records: list[tuple[str, str]] = field(default_factory=list)

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warn(self, message: str) -> None:
        self.records.append(("warn", message))

    def replay(self, logger: DiagnosticLogger) -> None:
        """Forward every buffered record to ``logger`` in arrival order."""

        for level, message in self.records:
            getattr(logger, level)(message)


def build_logger(*, verbose: bool = False, use_emoji: bool = True, use_color: bool | None = None) -> BundlerLogger:
    """Construct a :class:`BundlerLogger` bound to the shared console manager.

    Args:
        verbose: Whether ``debug`` lines should be rendered.
        use_emoji: Whether to prefix lines with emoji.
        use_color: Explicit colour preference; ``None`` follows TTY detection.

    Returns:
        BundlerLogger: Logger writing through a cached Rich console.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    return BundlerLogger(console=console, use_emoji=use_emoji, use_color=use_color, debug_enabled=verbose)


_DEFAULT_LOGGER: BundlerLogger | None = None


def get_logger() -> BundlerLogger:
    """Return the process-wide default logger, creating it on first use."""

    global _DEFAULT_LOGGER
    if _DEFAULT_LOGGER is None:
        _DEFAULT_LOGGER = build_logger()
    return _DEFAULT_LOGGER


def set_logger(logger: BundlerLogger) -> None:
    """Replace the process-wide default logger (used by the CLI after flag parsing)."""

    global _DEFAULT_LOGGER
    _DEFAULT_LOGGER = logger


__all__ = [
    "BufferedLogger",
    "BundlerLogger",
    "DiagnosticLogger",
    "build_logger",
    "emoji",
    "fail",
    "get_logger",
    "info",
    "ok",
    "set_logger",
    "warn",
]
