# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading artifact manifests from disk."""

from __future__ import annotations

import json
import plistlib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..errors import ManifestParseError


def load_json_object(path: Path) -> Mapping[str, Any]:
    """Load a JSON document from disk and ensure it is a JSON object.

    Args:
        path: Filesystem path to the JSON document.

    Returns:
        Mapping[str, Any]: Parsed JSON object.

    Raises:
        ManifestParseError: If the file is missing, unreadable, not valid JSON,
            or its top-level value is not an object.
    """

    try:
        with path.open("r", encoding="utf-8") as stream:
            payload = json.load(stream)
    except FileNotFoundError as exc:
        raise ManifestParseError(path, "file does not exist") from exc
    except OSError as exc:
        raise ManifestParseError(path, f"failed to read file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestParseError(path, f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc
    if not isinstance(payload, Mapping):
        raise ManifestParseError(path, "expected a JSON object")
    return payload


def load_plist_object(path: Path) -> Mapping[str, Any]:
    """Load a property list from disk and ensure it is a dictionary.

    Raises:
        ManifestParseError: If the file is unreadable, malformed, or not a dictionary.
    """

    try:
        with path.open("rb") as stream:
            payload = plistlib.load(stream)
    except OSError as exc:
        raise ManifestParseError(path, f"failed to read file: {exc}") from exc
    except (plistlib.InvalidFileException, ValueError) as exc:
        raise ManifestParseError(path, f"invalid property list: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ManifestParseError(path, "expected a property list dictionary")
    return payload


__all__ = ["load_json_object", "load_plist_object"]
