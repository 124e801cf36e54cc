# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the shared-library dependency closure."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from swift_bundler.catalog.sdks import SwiftSDK
from swift_bundler.dependencies import (
    DependencyInspectionError,
    ReadelfDependencyLister,
    SearchDirectory,
    SharedObject,
    android_search_directories,
    copy_bundled_dependencies,
    dependency_closure,
    parse_needed_entries,
    parse_needed_line,
)
from swift_bundler.errors import UnresolvedDependencyError
from swift_bundler.platforms import BuildArchitecture
from tests.helpers.fakes import FakeRunner, RecordingLogger, command_failure

READELF_OUTPUT = """
Dynamic section at offset 0x2c8 contains 30 entries:
  Tag        Type                         Name/Value
 0x0000000000000001 (NEEDED)             Shared library: [libswiftCore.so]
 0x0000000000000001 (NEEDED)             Shared library: [libc.so]
 0x000000000000000e (SONAME)             Library soname: [libApp.so]
 0x000000000000001d (RUNPATH)            Library runpath: [$ORIGIN]
"""


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x7fELF")
    return path


def graph_lister(graph: dict[str, list[str]], calls: list[Path]) -> Callable[[Path], list[str]]:
    """Return a dependency lister backed by ``graph`` that records every library it inspects."""

    def list_dependencies(library: Path) -> list[str]:
        calls.append(library)
        return list(graph.get(library.name, []))

    return list_dependencies


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        (" 0x0000000000000001 (NEEDED)             Shared library: [libm.so]", "libm.so"),
        ("0x1 (NEEDED) Shared library: [liblog.so]", "liblog.so"),
        (" 0x000000000000000e (SONAME)             Library soname: [libApp.so]", None),
        (" 0x (NEEDED) Shared library: [libm.so]", None),
        (" 0x0000000000000001 (NEEDED)             Shared library: [libm.so", None),
        ("  Tag        Type                         Name/Value", None),
    ],
)
def test_parse_needed_line(line: str, expected: str | None) -> None:
    assert parse_needed_line(line) == expected


def test_parse_needed_entries_skips_headers() -> None:
    assert parse_needed_entries(READELF_OUTPUT) == ["libswiftCore.so", "libc.so"]


def test_readelf_lister_invokes_readelf_once_per_library(tmp_path: Path, runner: FakeRunner) -> None:
    readelf = tmp_path / "llvm-readelf"
    library = tmp_path / "libApp.so"
    runner.add(readelf, "-d", str(library), output=READELF_OUTPUT)

    names = ReadelfDependencyLister(runner, readelf)(library)

    assert names == ["libswiftCore.so", "libc.so"]
    assert runner.calls == [(str(readelf), "-d", str(library))]


def test_readelf_lister_wraps_failures(tmp_path: Path, runner: FakeRunner) -> None:
    readelf = tmp_path / "llvm-readelf"
    library = tmp_path / "libApp.so"
    runner.add(readelf, "-d", str(library), output=command_failure([str(readelf)], 1, "not an ELF file"))

    with pytest.raises(DependencyInspectionError, match="libApp.so"):
        ReadelfDependencyLister(runner, readelf)(library)


def test_closure_terminates_on_cycles_and_deduplicates(tmp_path: Path) -> None:
    libs = tmp_path / "libs"
    app = touch(tmp_path / "app" / "libApp.so")
    touch(libs / "libA.so")
    touch(libs / "libB.so")
    calls: list[Path] = []
    lister = graph_lister({"libApp.so": ["libA.so"], "libA.so": ["libB.so"], "libB.so": ["libA.so"]}, calls)

    closure = dependency_closure(app, lister, [SearchDirectory(libs)], logger=RecordingLogger())

    assert closure == [SharedObject(libs / "libA.so"), SharedObject(libs / "libB.so")]
    assert calls == [app, libs / "libA.so", libs / "libB.so"]


def test_closure_lists_shared_dependency_once(tmp_path: Path) -> None:
    libs = tmp_path / "libs"
    app = touch(tmp_path / "libApp.so")
    for name in ("libA.so", "libB.so", "libC.so"):
        touch(libs / name)
    calls: list[Path] = []
    lister = graph_lister(
        {"libApp.so": ["libA.so", "libB.so"], "libA.so": ["libC.so"], "libB.so": ["libC.so"]},
        calls,
    )

    closure = dependency_closure(app, lister, [SearchDirectory(libs)], logger=RecordingLogger())

    assert sorted(item.location.name for item in closure) == ["libA.so", "libB.so", "libC.so"]
    assert len(calls) == 4


def test_first_search_directory_wins_and_sets_copy_policy(tmp_path: Path) -> None:
    products = tmp_path / "products"
    system = tmp_path / "system"
    app = touch(products / "libApp.so")
    touch(products / "libFoo.so")
    touch(system / "libFoo.so")
    touch(system / "liblog.so")
    lister = graph_lister({"libApp.so": ["libFoo.so", "liblog.so"]}, [])

    closure = dependency_closure(
        app,
        lister,
        [SearchDirectory(products), SearchDirectory(system, requires_copying=False)],
        logger=RecordingLogger(),
    )

    assert [(item.location, item.must_copy_into_bundle) for item in closure] == [
        (products / "libFoo.so", True),
        (system / "liblog.so", False),
    ]


def test_unresolved_dependency_lists_attempts_in_order(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    app = touch(tmp_path / "libApp.so")
    lister = graph_lister({"libApp.so": ["libMissing.so"]}, [])

    with pytest.raises(UnresolvedDependencyError) as excinfo:
        dependency_closure(app, lister, [SearchDirectory(first), SearchDirectory(second)], logger=RecordingLogger())

    assert excinfo.value.attempted == (first / "libMissing.so", second / "libMissing.so")
    assert excinfo.value.query == {"dependency": "libMissing.so", "library": str(app)}
    message = str(excinfo.value)
    assert message.index(str(first / "libMissing.so")) < message.index(str(second / "libMissing.so"))


def test_android_search_directories_order(tmp_path: Path) -> None:
    lib = tmp_path / "sysroot" / "usr" / "lib"
    sdk = SwiftSDK(
        triple="aarch64-unknown-linux-android28",
        supported_host_triples=None,
        root=tmp_path / "sysroot",
        resources_dir=tmp_path / "swift",
        static_resources_dir=tmp_path / "swift_static",
        include_dirs=(),
        library_dirs=(lib,),
        toolset_files=(),
        bundle=tmp_path,
        artifact_variant=tmp_path,
        artifact_identifier="android",
    )

    directories = android_search_directories(tmp_path / "products", sdk, BuildArchitecture.ARM64, 28)

    assert directories == [
        SearchDirectory(tmp_path / "products"),
        SearchDirectory(tmp_path / "swift" / "android"),
        SearchDirectory(lib / "aarch64-linux-android"),
        SearchDirectory(lib / "aarch64-linux-android" / "28", requires_copying=False),
    ]


def test_copy_bundled_dependencies_skips_system_libraries(tmp_path: Path) -> None:
    bundled = touch(tmp_path / "libs" / "libFoo.so")
    system = touch(tmp_path / "system" / "liblog.so")
    destination = tmp_path / "bundle" / "lib"

    copied = copy_bundled_dependencies(
        [SharedObject(bundled), SharedObject(system, must_copy_into_bundle=False)],
        destination,
    )

    assert copied == [destination / "libFoo.so"]
    assert (destination / "libFoo.so").read_bytes() == b"\x7fELF"
    assert not (destination / "liblog.so").exists()
