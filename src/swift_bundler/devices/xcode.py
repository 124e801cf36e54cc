# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``xcodebuild -showdestinations`` output.

Each destination is printed as a brace-delimited pseudo-dictionary::

    { platform:iOS Simulator, id:5E3A..., OS:17.5, name:iPhone 15 }

Values are not quoted. The one known value containing a comma is the
``Designed for [iPad,iPhone]`` variant, so a bracketed run is consumed as a
unit before looking for the next separator.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Final

from ..errors import DestinationParseError
from ..platforms import APPLE_PLATFORM_CAPABILITIES, HostPlatform, Platform
from .models import Device, DeviceStatus, device_from_apple_platform

PLACEHOLDER_ID_SUFFIX: Final[str] = ":placeholder"


def destination_section_header(scheme: str) -> str:
    return f'\tAvailable destinations for the "{scheme}" scheme:'


class _DestinationLineParser:
    """Single-use cursor over one destination line."""

    def __init__(self, line: str) -> None:
        self.line = line
        self.index = 0

    def fail(self, reason: str, position: int | None = None) -> DestinationParseError:
        return DestinationParseError(self.line, reason, position=self.index if position is None else position)

    def current(self) -> str | None:
        return self.line[self.index] if self.index < len(self.line) else None

    def skip_whitespace(self) -> None:
        while self.index < len(self.line) and self.line[self.index].isspace():
            self.index += 1

    def read_until(self, characters: Collection[str]) -> str:
        end = self.index
        while end < len(self.line) and self.line[end] not in characters:
            end += 1
        if end == len(self.line):
            expected = ", ".join(f"'{character}'" for character in sorted(characters))
            raise self.fail(f"Expected to encounter one of [{expected}] but got end of line", end)
        start = self.index
        self.index = end
        return self.line[start:end]

    def expect(self, pattern: str) -> None:
        start = self.index
        end = start + len(pattern)
        if end > len(self.line):
            raise self.fail(f"Expected '{pattern}' at index {start}, but got end of line", start)
        found = self.line[start:end]
        if found != pattern:
            raise self.fail(f"Expected '{pattern}' at index {start}, but got '{found}'", start)
        self.index = end

    def parse(self) -> dict[str, str]:
        self.skip_whitespace()
        self.expect("{ ")
        entries: dict[str, str] = {}
        while self.current() != "}":
            if self.current() is None:
                raise self.fail("Expected '}' but got end of line")
            key = self.read_until({":"})
            self.expect(":")
            value = self.read_until({"[", ",", "}"})
            if self.current() == "[":
                value += self.read_until({"]"})
                value += self.read_until({",", "}"})
            if self.current() == "}":
                # Drop the space before the closing brace.
                value = value[:-1]
            elif self.current() == ",":
                self.index += 2
            entries[key] = value
        self.expect("}")
        return entries


def parse_destination_fields(line: str) -> dict[str, str]:
    """Return the key/value pairs of one destination line.

    Raises:
        DestinationParseError: If the line is not a well-formed destination; the
            error carries the offending position.
    """

    return _DestinationLineParser(line).parse()


def platform_for_destination(name: str, variant: str | None) -> Platform | None:
    """Return the Apple platform printed as ``name``/``variant``, if supported."""

    for platform, capabilities in APPLE_PLATFORM_CAPABILITIES.items():
        if capabilities.destination_name == name and capabilities.destination_variant == variant:
            return platform
    return None


def parse_destination(line: str, *, host_platform: HostPlatform) -> Device | None:
    """Parse a destination line into a device.

    Destinations for unsupported platforms (DriverKit, for instance) and generic
    destinations (no id, or a placeholder id) yield ``None``.

    Raises:
        DestinationParseError: If the line is malformed or lacks a platform or name.
    """

    fields = parse_destination_fields(line)
    platform_name = fields.get("platform")
    if platform_name is None:
        raise DestinationParseError(line, "Missing platform")
    platform = platform_for_destination(platform_name, fields.get("variant"))
    if platform is None:
        return None
    identifier = fields.get("id")
    if identifier is None or identifier.endswith(PLACEHOLDER_ID_SUFFIX):
        return None
    name = fields.get("name")
    if name is None:
        raise DestinationParseError(line, "Missing name")
    error = fields.get("error")
    status = DeviceStatus.unavailable(error) if error is not None else DeviceStatus.available()
    return device_from_apple_platform(platform, name=name, id=identifier, status=status, host_platform=host_platform)


def destination_section(output: str, scheme: str) -> list[str]:
    """Return the lines listing available destinations for ``scheme``.

    Raises:
        DestinationParseError: If the section header or its terminating blank line
            is missing.
    """

    lines = output.split("\n")
    header = destination_section_header(scheme)
    try:
        start = lines.index(header) + 1
        end = lines.index("", start)
    except ValueError as exc:
        raise DestinationParseError(output, "Couldn't locate destination section in output") from exc
    return lines[start:end]


def parse_destination_list(output: str, scheme: str, *, host_platform: HostPlatform) -> list[Device]:
    """Return the connected devices and simulators listed in ``output``.

    Host destinations are dropped; the device manager adds those itself.
    """

    devices: list[Device] = []
    for line in destination_section(output, scheme):
        device = parse_destination(line, host_platform=host_platform)
        if device is not None and not device.is_host:
            devices.append(device)
    return devices


__all__ = [
    "PLACEHOLDER_ID_SUFFIX",
    "destination_section",
    "destination_section_header",
    "parse_destination",
    "parse_destination_fields",
    "parse_destination_list",
    "platform_for_destination",
]
