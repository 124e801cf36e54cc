# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Unified device and simulator model plus the managers that enumerate them."""

from __future__ import annotations

from .manager import DeviceManager, SimulatorManager
from .models import (
    AndroidDevice,
    AppleDevice,
    Device,
    DeviceStatus,
    DeviceStatusKind,
    HostDevice,
    MacCatalystDevice,
    Simulator,
    device_sort_key,
    sort_devices,
)

__all__ = [
    "AndroidDevice",
    "AppleDevice",
    "Device",
    "DeviceManager",
    "DeviceStatus",
    "DeviceStatusKind",
    "HostDevice",
    "MacCatalystDevice",
    "Simulator",
    "SimulatorManager",
    "device_sort_key",
    "sort_devices",
]
