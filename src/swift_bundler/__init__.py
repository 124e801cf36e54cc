# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Platform resolution and dependency closure for cross-platform Swift app bundles."""

from __future__ import annotations

from .config import BundlerSettings, load_settings
from .context import BundlerContext
from .dependencies import SearchDirectory, SharedObject, dependency_closure
from .destination import compute_destination_specifier
from .errors import BundlerError
from .matching import select_sdk, select_toolchain_for_android_sdk
from .versioning import CompilerVersion, parse_compiler_version

__version__ = "0.1.0"

__all__ = [
    "BundlerContext",
    "BundlerError",
    "BundlerSettings",
    "CompilerVersion",
    "SearchDirectory",
    "SharedObject",
    "__version__",
    "compute_destination_specifier",
    "dependency_closure",
    "load_settings",
    "parse_compiler_version",
    "select_sdk",
    "select_toolchain_for_android_sdk",
]
