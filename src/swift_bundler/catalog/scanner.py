# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Directory discovery helpers shared by the SDK and toolchain catalogs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def dedupe(items: Iterable[T]) -> list[T]:
    """Return ``items`` with duplicates removed while preserving order.

    Args:
        items: Iterable of hashable values that may contain duplicates.

    Returns:
        list[T]: Ordered list containing the first instance of each value.
    """

    seen: set[T] = set()
    ordered: list[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        ordered.append(item)
    return ordered


def existing_resolved_directories(candidates: Iterable[Path]) -> list[Path]:
    """Resolve symlinks, drop duplicates and keep only existing directories."""

    return [path for path in dedupe(candidate.resolve() for candidate in candidates) if path.is_dir()]


def list_subdirectories(directory: Path) -> list[Path]:
    """Return the immediate subdirectories of ``directory`` sorted by name.

    Raises:
        OSError: If ``directory`` cannot be listed.
    """

    return sorted((entry for entry in directory.iterdir() if entry.is_dir()), key=lambda entry: entry.name)


def scan_in_order(
    inputs: Sequence[T],
    scan: Callable[[T], R],
    *,
    max_workers: int = 4,
) -> list[R]:
    """Apply ``scan`` to each input concurrently and return results in input order.

    Args:
        inputs: Items to scan, typically directories.
        scan: Callable invoked once per item on a worker thread.
        max_workers: Upper bound on concurrently running scans.

    Returns:
        list[R]: Results positioned like their inputs, regardless of completion order.
    """

    if len(inputs) <= 1 or max_workers <= 1:
        return [scan(item) for item in inputs]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(inputs))) as executor:
        return list(executor.map(scan, inputs))


__all__ = [
    "dedupe",
    "existing_resolved_directories",
    "list_subdirectories",
    "scan_in_order",
]
