# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache directory helpers and the SDK silo symlink farm."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from .errors import BundlerError

SDK_SILOS_DIRECTORY: Final[str] = "sdk-silos"
_DJB2_SEED: Final[int] = 5381
_UINT64_MASK: Final[int] = (1 << 64) - 1
_UINT32_MASK: Final[int] = (1 << 32) - 1


class FileSystemError(BundlerError):
    """Raised when cache or silo directories cannot be prepared."""


def stable_hash(text: str) -> int:
    """Return the djb2 hash of ``text`` as an unsigned 64-bit integer.

    Unlike :func:`hash`, the result does not vary between interpreter runs.
    """

    value = _DJB2_SEED
    for byte in text.encode("utf-8"):
        value = (value * 33 + byte) & _UINT64_MASK
    return value


def stable_hash_hex(text: str) -> str:
    """Return the low 32 bits of :func:`stable_hash` as eight hex digits."""

    return f"{stable_hash(text) & _UINT32_MASK:08x}"


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) if needed and return it.

    Raises:
        FileSystemError: If the directory cannot be created.
    """

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileSystemError(f"Failed to create directory '{path}': {exc}") from exc
    return path


def sdk_silo_directory(cache_root: Path, artifact_identifier: str) -> Path:
    """Return (creating if needed) the silo directory for ``artifact_identifier``."""

    return ensure_directory(cache_root / SDK_SILOS_DIRECTORY / artifact_identifier)


def populated_sdk_silo(bundle: Path, artifact_identifier: str, cache_root: Path) -> Path:
    """Return a silo directory whose only artifact bundle is a link to ``bundle``.

    The link name carries a hash of the bundle path so that two distinct bundles
    sharing an artifact identifier never fight over one entry. A link pointing
    somewhere else is replaced rather than treated as an error, which keeps
    concurrent invocations idempotent.

    Args:
        bundle: Artifact bundle directory of the SDK.
        artifact_identifier: Artifact name declared in the bundle's ``info.json``.
        cache_root: Cache directory holding the ``sdk-silos`` tree.

    Returns:
        Path: The silo directory.

    Raises:
        FileSystemError: If the silo or its link cannot be created.
    """

    silo = sdk_silo_directory(cache_root, artifact_identifier)
    link = silo / f"{bundle.name}-{stable_hash_hex(str(bundle))}"
    destination = bundle.resolve()
    if link.is_symlink() and link.resolve() == destination:
        return silo
    try:
        if link.is_symlink() or link.exists():
            link.unlink()
        os.symlink(destination, link, target_is_directory=True)
    except FileExistsError:
        # Another invocation created the link between our check and symlink call.
        if link.resolve() != destination:
            raise FileSystemError(f"SDK silo link '{link}' points to an unexpected location") from None
    except OSError as exc:
        raise FileSystemError(f"Failed to create SDK silo link at '{link}': {exc}") from exc
    return silo


__all__ = [
    "FileSystemError",
    "SDK_SILOS_DIRECTORY",
    "ensure_directory",
    "populated_sdk_silo",
    "sdk_silo_directory",
    "stable_hash",
    "stable_hash_hex",
]
