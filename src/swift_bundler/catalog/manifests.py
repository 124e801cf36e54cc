# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typed models for artifact bundle, Swift SDK and toolchain manifests."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ManifestParseError
from .io import load_json_object, load_plist_object

SWIFT_SDK_ARTIFACT_TYPE: Final[str] = "swiftSDK"
ARTIFACT_BUNDLE_INFO_FILENAME: Final[str] = "info.json"
SWIFT_SDK_MANIFEST_FILENAME: Final[str] = "swift-sdk.json"

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Manifest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ArtifactVariant(_Manifest):
    """One platform-specific variant of an artifact."""

    path: str
    supported_host_triples: tuple[str, ...] | None = Field(default=None, alias="supportedHostTriples")


class Artifact(_Manifest):
    """An artifact declared by an artifact bundle."""

    variants: tuple[ArtifactVariant, ...]
    version: str | None = None
    type: str

    @property
    def is_swift_sdk(self) -> bool:
        return self.type == SWIFT_SDK_ARTIFACT_TYPE


class ArtifactBundleInfo(_Manifest):
    """Contents of an artifact bundle's ``info.json``."""

    schema_version: str = Field(alias="schemaVersion")
    artifacts: dict[str, Artifact]


class SwiftSDKTargetEntry(_Manifest):
    """Per-triple entry of a ``swift-sdk.json`` manifest.

    Paths are relative to the artifact variant directory.
    """

    sdk_root_path: str = Field(alias="sdkRootPath")
    swift_resources_path: str | None = Field(default=None, alias="swiftResourcesPath")
    swift_static_resources_path: str | None = Field(default=None, alias="swiftStaticResourcesPath")
    include_search_paths: tuple[str, ...] | None = Field(default=None, alias="includeSearchPaths")
    library_search_paths: tuple[str, ...] | None = Field(default=None, alias="librarySearchPaths")
    toolset_paths: tuple[str, ...] | None = Field(default=None, alias="toolsetPaths")


class SwiftSDKManifest(_Manifest):
    """Contents of a variant's ``swift-sdk.json``."""

    schema_version: str = Field(alias="schemaVersion")
    target_triples: dict[str, SwiftSDKTargetEntry] = Field(alias="targetTriples")


class ToolchainInfoPlist(_Manifest):
    """Subset of the ``Info.plist`` shipped with swift.org toolchains."""

    aliases: tuple[str, ...] = Field(alias="Aliases")
    bundle_identifier: str = Field(alias="CFBundleIdentifier")
    compatibility_version: int = Field(alias="CompatibilityVersion")
    display_name: str = Field(alias="DisplayName")
    short_display_name: str = Field(alias="ShortDisplayName")
    version: str = Field(alias="Version")


def validate_manifest(model: type[ModelT], payload: Mapping[str, Any], path: Path) -> ModelT:
    """Validate ``payload`` against ``model``.

    Raises:
        ManifestParseError: If validation fails; the pydantic error is chained.
    """

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise ManifestParseError(path, reason) from exc


def load_artifact_bundle_info(bundle: Path) -> ArtifactBundleInfo:
    """Load and validate ``<bundle>/info.json``."""

    path = bundle / ARTIFACT_BUNDLE_INFO_FILENAME
    return validate_manifest(ArtifactBundleInfo, load_json_object(path), path)


def load_toolchain_info_plist(path: Path) -> ToolchainInfoPlist:
    """Load and validate a toolchain ``Info.plist``."""

    return validate_manifest(ToolchainInfoPlist, load_plist_object(path), path)


__all__ = [
    "ARTIFACT_BUNDLE_INFO_FILENAME",
    "Artifact",
    "ArtifactBundleInfo",
    "ArtifactVariant",
    "SWIFT_SDK_ARTIFACT_TYPE",
    "SWIFT_SDK_MANIFEST_FILENAME",
    "SwiftSDKManifest",
    "SwiftSDKTargetEntry",
    "ToolchainInfoPlist",
    "load_artifact_bundle_info",
    "load_toolchain_info_plist",
    "validate_manifest",
]
