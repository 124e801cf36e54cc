# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Swift SDK records and discovery of installed SDK artifact bundles."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from ..config import BundlerSettings
from ..errors import BundlerError, ManifestParseError, UnsupportedSDKError, join_grammatically
from ..logging import BufferedLogger, DiagnosticLogger, get_logger
from ..platforms import HostPlatform
from .io import load_json_object
from .manifests import (
    SWIFT_SDK_MANIFEST_FILENAME,
    SwiftSDKManifest,
    SwiftSDKTargetEntry,
    load_artifact_bundle_info,
    validate_manifest,
)
from .scanner import existing_resolved_directories, list_subdirectories, scan_in_order

SUPPORTED_SCHEMA_VERSIONS: Final[tuple[str, ...]] = ("4.0",)
ANDROID_TRIPLE_MARKER: Final[str] = "-unknown-linux-android"
COMPILER_VERSION_TAG: Final[str] = "swift-compiler-version: "
_COMMENT_PREFIX: Final[str] = "// "


@dataclass(frozen=True, slots=True)
class SwiftSDK:
    """An SDK for one target triple, declared by one artifact bundle variant."""

    triple: str
    supported_host_triples: tuple[str, ...] | None
    root: Path
    resources_dir: Path
    static_resources_dir: Path
    include_dirs: tuple[Path, ...]
    library_dirs: tuple[Path, ...]
    toolset_files: tuple[Path, ...]
    bundle: Path
    artifact_variant: Path
    artifact_identifier: str

    @classmethod
    def from_manifest(
        cls,
        entry: SwiftSDKTargetEntry,
        *,
        triple: str,
        supported_host_triples: Sequence[str] | None,
        bundle: Path,
        artifact_variant: Path,
        artifact_identifier: str,
    ) -> SwiftSDK:
        """Build a record from a ``swift-sdk.json`` entry, filling in default paths.

        Explicit paths are relative to ``artifact_variant``; defaults are relative
        to the SDK root.
        """

        root = artifact_variant / entry.sdk_root_path

        def relative(paths: Sequence[str] | None, default: tuple[Path, ...]) -> tuple[Path, ...]:
            if paths is None:
                return default
            return tuple(artifact_variant / path for path in paths)

        return cls(
            triple=triple,
            supported_host_triples=tuple(supported_host_triples) if supported_host_triples is not None else None,
            root=root,
            resources_dir=(
                artifact_variant / entry.swift_resources_path
                if entry.swift_resources_path is not None
                else root / "usr" / "lib" / "swift"
            ),
            static_resources_dir=(
                artifact_variant / entry.swift_static_resources_path
                if entry.swift_static_resources_path is not None
                else root / "usr" / "lib" / "swift_static"
            ),
            include_dirs=relative(entry.include_search_paths, (root / "usr" / "include",)),
            library_dirs=relative(entry.library_search_paths, (root / "usr" / "lib",)),
            toolset_files=relative(entry.toolset_paths, ()),
            bundle=bundle,
            artifact_variant=artifact_variant,
            artifact_identifier=artifact_identifier,
        )

    @property
    def generally_unique_identifier(self) -> str:
        """Return ``<bundle>:<variant relative to bundle>:<triple>``."""

        variant = os.path.relpath(self.artifact_variant, self.bundle)
        return f"{self.bundle}:{variant}:{self.triple}"

    @property
    def is_android(self) -> bool:
        return ANDROID_TRIPLE_MARKER in self.triple

    def supports_host_triple(self, host_triple: str) -> bool:
        """Return ``True`` when the SDK declares no host list or lists ``host_triple``."""

        return self.supported_host_triples is None or host_triple in self.supported_host_triples

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation with paths as strings."""

        return {
            "triple": self.triple,
            "supportedHostTriples": list(self.supported_host_triples)
            if self.supported_host_triples is not None
            else None,
            "root": str(self.root),
            "resourcesDirectory": str(self.resources_dir),
            "staticResourcesDirectory": str(self.static_resources_dir),
            "includeSearchDirectories": [str(path) for path in self.include_dirs],
            "librarySearchDirectories": [str(path) for path in self.library_dirs],
            "toolsetFiles": [str(path) for path in self.toolset_files],
            "bundle": str(self.bundle),
            "artifactVariant": str(self.artifact_variant),
            "artifactIdentifier": self.artifact_identifier,
        }


def standard_sdk_directories(settings: BundlerSettings, host_platform: HostPlatform) -> list[Path]:
    """Return the existing directories SwiftPM installs Swift SDKs into.

    Candidates are resolved through symlinks and deduplicated before filtering.
    """

    bases = [settings.home / ".swiftpm"]
    if host_platform is HostPlatform.MACOS:
        bases.append(settings.home / "Library" / "org.swift.swiftpm")
    elif host_platform is HostPlatform.LINUX:
        config_home = settings.xdg_config_home or settings.home / ".config"
        bases.append(config_home / "swiftpm")
    return existing_resolved_directories(base / "swift-sdks" for base in bases)


def load_sdk_manifest(variant: Path, *, logger: DiagnosticLogger) -> SwiftSDKManifest:
    """Load ``<variant>/swift-sdk.json``.

    An unsupported ``schemaVersion`` is reported as a warning and loading continues.

    Raises:
        ManifestParseError: If the manifest is missing or malformed.
    """

    path = variant / SWIFT_SDK_MANIFEST_FILENAME
    payload = load_json_object(path)
    schema_version = payload.get("schemaVersion")
    if not isinstance(schema_version, str):
        logger.warn(f"Failed to extract schemaVersion from Swift SDK manifest at '{path}'")
    elif schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        logger.warn(
            f"Unsupported Swift SDK schema version '{schema_version}' in manifest at '{path}' "
            f"(supported schema versions: {join_grammatically(SUPPORTED_SCHEMA_VERSIONS)}). "
            "Attempting to load SDK anyway",
        )
    return validate_manifest(SwiftSDKManifest, payload, path)


def sdks_in_artifact_bundle(bundle: Path, *, logger: DiagnosticLogger) -> list[SwiftSDK]:
    """Return every SDK declared by the ``swiftSDK`` artifacts of ``bundle``.

    Args:
        bundle: Artifact bundle directory containing ``info.json``.
        logger: Receives schema warnings.

    Returns:
        list[SwiftSDK]: One record per artifact variant and target triple.

    Raises:
        ManifestParseError: If ``info.json`` or any variant manifest is malformed.
    """

    info = load_artifact_bundle_info(bundle)
    sdks: list[SwiftSDK] = []
    for name, artifact in info.artifacts.items():
        if not artifact.is_swift_sdk:
            continue
        for variant in artifact.variants:
            variant_path = bundle / variant.path
            manifest = load_sdk_manifest(variant_path, logger=logger)
            for triple, entry in manifest.target_triples.items():
                sdks.append(
                    SwiftSDK.from_manifest(
                        entry,
                        triple=triple,
                        supported_host_triples=variant.supported_host_triples,
                        bundle=bundle,
                        artifact_variant=variant_path,
                        artifact_identifier=name,
                    ),
                )
    return sdks


class SDKCatalog:
    """Enumerates the Swift SDKs installed in the standard SwiftPM locations."""

    def __init__(
        self,
        settings: BundlerSettings,
        *,
        host_platform: HostPlatform | None = None,
        directories: Sequence[Path] | None = None,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._settings = settings
        self._host_platform = host_platform or HostPlatform.current()
        self._directories = list(directories) if directories is not None else None
        self._logger = logger or get_logger()

    def directories(self) -> list[Path]:
        if self._directories is not None:
            return list(self._directories)
        return standard_sdk_directories(self._settings, self._host_platform)

    def enumerate(self) -> list[SwiftSDK]:
        """Return every installed SDK.

        Directories are scanned concurrently but merged, and their diagnostics
        replayed, in directory order. Unreadable directories and malformed
        bundles are reported as warnings and skipped.
        """

        directories = self.directories()
        self._logger.debug(f"SDK search directories: {', '.join(str(path) for path in directories) or '<none>'}")
        results = scan_in_order(directories, self._scan_directory, max_workers=self._settings.scan_workers)
        sdks: list[SwiftSDK] = []
        for directory_sdks, buffer in results:
            buffer.replay(self._logger)
            sdks.extend(directory_sdks)
        return sdks

    def _scan_directory(self, directory: Path) -> tuple[list[SwiftSDK], BufferedLogger]:
        buffer = BufferedLogger()
        try:
            bundles = list_subdirectories(directory)
        except OSError as exc:
            buffer.warn(f"Failed to enumerate SDKs in '{directory}': {exc}")
            return [], buffer
        sdks: list[SwiftSDK] = []
        for bundle in bundles:
            try:
                sdks.extend(sdks_in_artifact_bundle(bundle, logger=buffer))
            except BundlerError as exc:
                buffer.warn(f"Failed to parse artifact bundle at '{bundle}': {exc}")
        return sdks, buffer


def android_sdk_compiler_version_string(sdk: SwiftSDK) -> str:
    """Return the compiler version that produced an Android Swift SDK.

    The version is read from the ``swift-compiler-version`` comment at the top of
    the SDK's ``Swift.swiftinterface`` for the triple with its API level removed.

    Raises:
        UnsupportedSDKError: If ``sdk`` is not an Android SDK.
        ManifestParseError: If the interface file is unreadable or lacks the tag.
    """

    if not sdk.is_android:
        raise UnsupportedSDKError(
            f"Cannot read the compiler version of non-Android SDK '{sdk.generally_unique_identifier}'",
        )
    base_triple = sdk.triple.strip("0123456789")
    interface = sdk.resources_dir / "android" / "Swift.swiftmodule" / f"{base_triple}.swiftinterface"
    try:
        contents = interface.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestParseError(interface, f"failed to read Swift interface: {exc}") from exc

    for line in contents.split("\n"):
        if not line.startswith(_COMMENT_PREFIX):
            break
        comment = line[len(_COMMENT_PREFIX) :]
        if comment.startswith(COMPILER_VERSION_TAG):
            return comment[len(COMPILER_VERSION_TAG) :].strip()
    raise ManifestParseError(interface, f"could not locate '{COMPILER_VERSION_TAG.strip()}' comment")


__all__ = [
    "ANDROID_TRIPLE_MARKER",
    "SDKCatalog",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SwiftSDK",
    "android_sdk_compiler_version_string",
    "load_sdk_manifest",
    "sdks_in_artifact_bundle",
    "standard_sdk_directories",
]
