# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-invocation wiring of settings, process handling, catalogs and device managers."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType

from .catalog.sdks import SDKCatalog
from .catalog.toolchains import ToolchainCatalog
from .config import BundlerSettings
from .devices.manager import DeviceManager, SimulatorManager
from .logging import DiagnosticLogger, get_logger
from .platforms import BuildArchitecture, HostPlatform
from .process import ProcessContext, ProcessRunner, SubprocessRunner


@dataclass(slots=True)
class BundlerContext:
    """Everything one invocation needs, created once and passed explicitly.

    Using the context as a context manager cancels outstanding work and
    terminates attached children when the block exits with an exception.
    """

    settings: BundlerSettings
    host_platform: HostPlatform = field(default_factory=HostPlatform.current)
    host_architecture: BuildArchitecture = field(default_factory=BuildArchitecture.host)
    process: ProcessContext = field(default_factory=ProcessContext)
    logger: DiagnosticLogger = field(default_factory=get_logger)
    runner: ProcessRunner | None = None

    @property
    def process_runner(self) -> ProcessRunner:
        """Return the injected runner, or a subprocess runner bound to :attr:`process`."""

        if self.runner is None:
            self.runner = SubprocessRunner(self.process)
        return self.runner

    def sdk_catalog(self) -> SDKCatalog:
        return SDKCatalog(self.settings, host_platform=self.host_platform, logger=self.logger)

    def toolchain_catalog(self) -> ToolchainCatalog:
        return ToolchainCatalog(
            self.settings,
            self.process_runner,
            host_platform=self.host_platform,
            logger=self.logger,
        )

    def device_manager(self) -> DeviceManager:
        return DeviceManager(
            self.settings,
            self.process_runner,
            host_platform=self.host_platform,
            logger=self.logger,
        )

    def simulator_manager(self) -> SimulatorManager:
        return SimulatorManager(
            self.settings,
            self.process_runner,
            self.process,
            host_platform=self.host_platform,
            logger=self.logger,
        )

    def __enter__(self) -> BundlerContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.process.__exit__(exc_type, exc, traceback)


__all__ = ["BundlerContext"]
