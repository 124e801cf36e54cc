# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thin wrapper around the Android Debug Bridge (``adb``)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..errors import ToolOutputParseError
from ..logging import DiagnosticLogger, get_logger
from ..process import ProcessRunner, SubprocessExecutionError

_BANNER_LINES: Final[frozenset[str]] = frozenset({"* daemon started successfully", "List of devices attached"})
ONLINE_STATE: Final[str] = "device"
OFFLINE_STATE: Final[str] = "offline"
# ``adb emu`` exits with this status when the target is a physical device.
NOT_AN_EMULATOR_STATUS: Final[int] = 1
_AVD_NAME_ACK: Final[str] = "OK"


@dataclass(frozen=True, slots=True)
class ConnectedAndroidDevice:
    """A device reported by ``adb devices``, enriched with its model name."""

    identifier: str
    model: str
    is_emulator: bool


def parse_device_list(output: str, *, logger: DiagnosticLogger | None = None) -> list[str]:
    """Return the identifiers of online devices in ``adb devices`` output.

    The first line is the listing header; daemon banners are ignored anywhere.
    ``offline`` devices are skipped quietly. Other unusable states and rows that
    are not ``<id>\\t<state>`` are skipped with a warning.
    """

    log = logger or get_logger()
    identifiers: list[str] = []
    for line in output.strip().splitlines()[1:]:
        if line in _BANNER_LINES or not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) != 2:
            log.warn(f"Failed to parse line of 'adb devices' output: '{line}'")
            continue
        identifier, state = parts
        if state == OFFLINE_STATE:
            continue
        if state != ONLINE_STATE:
            log.warn(f"Ignoring Android device '{identifier}' with unusable state '{state}'")
            continue
        identifiers.append(identifier)
    return identifiers


def parse_avd_name(output: str) -> str:
    """Return the AVD name from ``adb emu avd name`` output.

    Raises:
        ToolOutputParseError: If the output is not ``<name>`` followed by ``OK``.
    """

    lines = [line.strip() for line in output.strip().splitlines()]
    if len(lines) != 2 or lines[1] != _AVD_NAME_ACK or not lines[0]:
        raise ToolOutputParseError("adb emu avd name", output, "expected the AVD name followed by 'OK'")
    return lines[0]


@dataclass(slots=True)
class AndroidDebugBridge:
    """Queries connected Android devices through an ``adb`` executable."""

    runner: ProcessRunner
    adb: Path

    def device_identifiers(self, *, logger: DiagnosticLogger | None = None) -> list[str]:
        """Return identifiers of connected, online devices."""

        return parse_device_list(self.runner.get_output(self.adb, ["devices"]), logger=logger)

    def model(self, identifier: str) -> str:
        return self.runner.get_output(self.adb, ["-s", identifier, "shell", "getprop", "ro.product.model"]).strip()

    def is_emulator(self, identifier: str) -> bool:
        """Return whether ``identifier`` is an emulator.

        Raises:
            SubprocessExecutionError: If ``adb`` fails for a reason other than the
                target being a physical device.
        """

        try:
            self.runner.get_output(self.adb, ["-s", identifier, "emu"])
        except SubprocessExecutionError as exc:
            if exc.returncode == NOT_AN_EMULATOR_STATUS:
                return False
            raise
        return True

    def avd_name(self, identifier: str) -> str:
        """Return the AVD name of the emulator ``identifier``."""

        return parse_avd_name(self.runner.get_output(self.adb, ["-s", identifier, "emu", "avd", "name"]))

    def is_ready_for_install(self, identifier: str) -> bool:
        """Return whether the package service of ``identifier`` is up.

        A booting emulator is listed by ``adb devices`` well before it can accept
        installs; the package service is the last piece to come up.
        """

        try:
            output = self.runner.get_output(self.adb, ["-s", identifier, "shell", "service", "check", "package"])
        except SubprocessExecutionError:
            return False
        return ": found" in output and "not found" not in output

    def connected_devices(self, *, logger: DiagnosticLogger | None = None) -> list[ConnectedAndroidDevice]:
        """Return every online device with its model and emulator flag."""

        return [
            ConnectedAndroidDevice(identifier, self.model(identifier), self.is_emulator(identifier))
            for identifier in self.device_identifiers(logger=logger)
        ]


__all__ = [
    "AndroidDebugBridge",
    "ConnectedAndroidDevice",
    "NOT_AN_EMULATOR_STATUS",
    "parse_avd_name",
    "parse_device_list",
]
