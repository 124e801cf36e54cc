# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from swift_bundler.config import BundlerSettings
from tests.helpers.fakes import FakeRunner, RecordingLogger


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(home: Path) -> BundlerSettings:
    return BundlerSettings(home=home, scan_workers=2)


@pytest.fixture
def android_sdk_root(tmp_path: Path) -> Path:
    """Create a minimal Android SDK with adb, avdmanager and emulator executables."""

    root = tmp_path / "android-sdk"
    for relative in ("platform-tools/adb", "cmdline-tools/latest/bin/avdmanager", "emulator/emulator"):
        tool = root / relative
        tool.parent.mkdir(parents=True, exist_ok=True)
        tool.write_text("#!/bin/sh\n", encoding="utf-8")
    return root
