# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Computation of the ``-destination`` specifier handed to ``xcodebuild``.

``xcodebuild`` refuses to build Swift packages without a destination and does
not allow ``-arch`` alongside one. Destinations are either a concrete device or
simulator (one architecture) or a generic platform (every architecture the
platform supports), so the requested architecture set decides which shape is
possible.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .devices.models import Device, Simulator
from .errors import (
    InvariantFailure,
    NoSuitableSimulatorError,
    UniversalBuildDestinationError,
    UnsupportedArchitectureError,
)
from .platforms import BuildArchitecture, Platform, apple_capabilities

SimulatorLister = Callable[[], Sequence[Simulator]]


def _format_architectures(architectures: Sequence[BuildArchitecture]) -> str:
    return "[" + ", ".join(architecture.value for architecture in architectures) + "]"


def compute_destination_specifier(
    platform: Platform,
    architectures: Sequence[BuildArchitecture],
    destination: Device | None,
    *,
    list_available_simulators: SimulatorLister,
) -> str:
    """Return the ``xcodebuild -destination`` value for a build.

    Args:
        platform: Apple platform being built for.
        architectures: Requested architectures; must be non-empty.
        destination: Device chosen by the user, if any.
        list_available_simulators: Queried only when a single-architecture
            simulator build has no device to target.

    Returns:
        str: A specifier such as ``generic/platform=iOS`` or
        ``id=<udid>,arch=arm64``, with ``,variant=...`` appended when the
        platform defines a destination variant.

    Raises:
        UnsupportedArchitectureError: If ``platform`` does not support a requested
            architecture.
        NoSuitableSimulatorError: If no available simulator runs the platform's OS.
        UniversalBuildDestinationError: If a universal build names a connected device.
        UsageError: If ``platform`` is not an Apple platform.
        InvariantFailure: If the request falls outside the known platform shapes.
    """

    capabilities = apple_capabilities(platform)
    supported = capabilities.architectures
    for architecture in architectures:
        if architecture not in supported:
            raise UnsupportedArchitectureError(
                f"Platform '{platform.value}' does not support architecture '{architecture.value}'; "
                f"supported architectures are {_format_architectures(supported)}",
            )
    if not architectures:
        raise InvariantFailure(f"No architectures requested for platform '{platform.value}'")

    name = capabilities.destination_name
    if len(architectures) == 1:
        architecture = architectures[0]
        if len(supported) == 1:
            # Generic destinations still build when the device is locked or absent.
            specifier = f"generic/platform={name}"
        elif destination is not None and destination.id is not None:
            specifier = f"id={destination.id},arch={architecture.value}"
        elif platform in {Platform.MACOS, Platform.MAC_CATALYST}:
            specifier = f"platform={name},arch={architecture.value}"
        elif platform.is_simulator:
            # Generic simulator destinations are always universal.
            candidates = [
                simulator for simulator in list_available_simulators() if simulator.os is platform.os
            ]
            if not candidates:
                raise NoSuitableSimulatorError(
                    f"Failed to locate a {platform.os.display_name} simulator suitable for building "
                    f"'{architecture.value}' for platform '{platform.value}'",
                    query={"platform": platform.value, "architecture": architecture.value},
                )
            specifier = f"id={candidates[0].id},arch={architecture.value}"
        else:
            raise InvariantFailure(
                "Non-macOS Apple platforms are assumed to support a single architecture when not "
                f"targeting a simulator; requested {_format_architectures(architectures)}, platform "
                f"'{platform.value}' supports {_format_architectures(supported)}",
            )
    elif set(architectures) == set(supported):
        if destination is not None and not destination.is_host:
            raise UniversalBuildDestinationError(
                f"Cannot perform a universal build for '{platform.value}' while targeting the "
                f"concrete device '{destination.describe(include_id=True)}'; build for a single "
                "architecture instead",
            )
        specifier = f"generic/platform={name}"
    else:
        raise InvariantFailure(
            "xcodebuild can build for a single architecture or for every supported architecture, "
            f"but not in between; requested {_format_architectures(architectures)}, platform "
            f"'{platform.value}' supports {_format_architectures(supported)}",
        )

    if capabilities.destination_variant is not None:
        specifier += f",variant={capabilities.destination_variant}"
    return specifier


__all__ = ["SimulatorLister", "compute_destination_specifier"]
