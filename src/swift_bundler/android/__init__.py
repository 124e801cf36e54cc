# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Android SDK discovery, ``adb`` queries and emulator management."""

from __future__ import annotations

from .adb import AndroidDebugBridge, ConnectedAndroidDevice
from .emulator import AndroidVirtualDevice, AndroidVirtualDeviceManager, BootOutcome
from .sdk import AndroidSDK, locate_android_sdk

__all__ = [
    "AndroidDebugBridge",
    "AndroidSDK",
    "AndroidVirtualDevice",
    "AndroidVirtualDeviceManager",
    "BootOutcome",
    "ConnectedAndroidDevice",
    "locate_android_sdk",
]
