# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Discovery of installed Swift SDKs and toolchains."""

from __future__ import annotations

from .sdks import SDKCatalog, SwiftSDK, android_sdk_compiler_version_string, standard_sdk_directories
from .toolchains import SwiftToolchain, ToolchainCatalog, ToolchainKind

__all__ = [
    "SDKCatalog",
    "SwiftSDK",
    "SwiftToolchain",
    "ToolchainCatalog",
    "ToolchainKind",
    "android_sdk_compiler_version_string",
    "standard_sdk_directories",
]
