"""Node.js (frontend) dependency installation with pnpm."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from reactango.config import Config
from reactango.installers.base import (
    BootstrapFailedError,
    InstallChoice,
    InstallFailedError,
    MissingRuntimeError,
)
from reactango.utils import (
    EnvironmentProbe,
    ShellRunner,
    print_info,
    print_section,
    print_step,
    print_success,
    print_warning,
)


class FrontendInstaller:
    """Installs the project's Node dependencies.

    When the preferred package manager (``pnpm``) is missing it is installed
    globally with the bootstrap manager (``npm``) first.
    """

    choice = InstallChoice.FRONTEND

    def __init__(
        self,
        config: Config,
        runner: ShellRunner | None = None,
        probe: EnvironmentProbe | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or ShellRunner(timeout=config.command_timeout)
        self.probe = probe or EnvironmentProbe()

    async def install(self, project_path: Path) -> None:
        """Run ``pnpm install`` in *project_path*.

        Raises:
            MissingRuntimeError: ``node`` is not on PATH.
            BootstrapFailedError: pnpm is missing and could not be installed.
            InstallFailedError: ``pnpm install`` exited non-zero.
        """
        print_section("FRONTEND DEPENDENCY INSTALLATION", color="green")

        if not self.probe.exists("node"):
            raise MissingRuntimeError()

        manifest = self.config.frontend_manifest_path(project_path)
        if not manifest.is_file():
            print_warning(
                f"'{self.config.frontend_manifest}' not found in {escape(str(project_path))}. "
                "Skipping frontend dependencies."
            )
            return

        manager = self.config.package_manager
        if not self.probe.exists(manager):
            await self._bootstrap_package_manager(project_path)

        print_step(f"Installing Node.js packages with {escape(manager)}...")
        result = await self.runner.run(
            [manager, "install"],
            cwd=project_path,
            error_message="Failed to install Node.js dependencies.",
        )
        if not result.succeeded:
            raise InstallFailedError(
                "Failed to install Node.js dependencies",
                self.choice,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        print_success("Frontend dependencies installed successfully!")

    async def _bootstrap_package_manager(self, project_path: Path) -> None:
        manager = self.config.package_manager
        fallback = self.config.bootstrap_package_manager

        print_info(f"{manager} not found. Attempting to install {manager} globally using {fallback}...")
        if not self.probe.exists(fallback):
            raise BootstrapFailedError(
                f"{fallback} is not installed or not in PATH. Cannot install {manager}. "
                f"Please install {manager} or {fallback} manually",
                self.choice,
            )

        result = await self.runner.run(
            [fallback, "install", "-g", manager],
            cwd=project_path,
            error_message=f"Failed to install {manager} globally.",
        )
        if not result.succeeded:
            raise BootstrapFailedError(
                f"Failed to install {manager} globally",
                self.choice,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        print_success(
            f"{manager} installed globally. You might need to open a new terminal "
            f"for '{manager}' to be available."
        )
