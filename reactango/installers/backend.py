"""Python (backend) dependency installation.

Installs ``requirements.txt`` with pip, by default inside a ``venv`` created
in the project root so the system interpreter's packages are left alone.
"""

from __future__ import annotations

import os
from pathlib import Path

from rich.markup import escape

from reactango.config import Config
from reactango.installers.base import (
    EnvCreationFailedError,
    InstallChoice,
    InstallFailedError,
    MissingInterpreterError,
    MissingPackageManagerError,
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

PYTHON_CANDIDATES = ("python3", "python")
PIP_CANDIDATES = ("pip3", "pip")


def venv_tool_path(venv_dir: Path, tool: str, windows: bool) -> Path:
    """Path of an executable installed inside a virtual environment."""
    if windows:
        return venv_dir / "Scripts" / f"{tool}.exe"
    return venv_dir / "bin" / tool


def venv_activate_command(venv_name: str, windows: bool) -> str:
    """Shell command that activates the project's virtual environment."""
    if windows:
        return f"{venv_name}\\Scripts\\activate"
    return f"source {venv_name}/bin/activate"


class BackendInstaller:
    """Installs the project's Python dependencies."""

    choice = InstallChoice.BACKEND

    def __init__(
        self,
        config: Config,
        runner: ShellRunner | None = None,
        probe: EnvironmentProbe | None = None,
        windows: bool | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or ShellRunner(timeout=config.command_timeout)
        self.probe = probe or EnvironmentProbe()
        self.windows = os.name == "nt" if windows is None else windows

    async def install(self, project_path: Path, use_venv: bool = True) -> None:
        """Install ``requirements.txt`` into *project_path*.

        Args:
            project_path: Root of the freshly cloned project.
            use_venv: Create (or reuse) ``<project>/venv`` and install into it
                instead of the ambient interpreter.

        Raises:
            MissingInterpreterError: Neither ``python3`` nor ``python`` is on PATH.
            MissingPackageManagerError: Neither ``pip3`` nor ``pip`` is on PATH.
            EnvCreationFailedError: ``python -m venv`` exited non-zero.
            InstallFailedError: ``pip install`` exited non-zero.
        """
        print_section("BACKEND DEPENDENCY INSTALLATION")

        python_cmd = self.probe.first_available(*PYTHON_CANDIDATES)
        if python_cmd is None:
            raise MissingInterpreterError()

        pip_cmd = self.probe.first_available(*PIP_CANDIDATES)
        if pip_cmd is None:
            raise MissingPackageManagerError()

        manifest = self.config.backend_manifest_path(project_path)
        if not manifest.is_file():
            print_warning(
                f"'{self.config.backend_manifest}' not found in {escape(str(project_path))}. "
                "Skipping backend dependencies."
            )
            return

        if use_venv:
            pip_to_use = str(await self._prepare_venv(project_path, python_cmd, pip_cmd))
        else:
            print_info("Not using a virtual environment for Python dependencies.")
            pip_to_use = pip_cmd

        print_step(
            f"Installing Python packages from '[yellow]{escape(self.config.backend_manifest)}"
            f"[/yellow]' using '[cyan]{escape(pip_to_use)}[/cyan]'..."
        )
        result = await self.runner.run(
            [pip_to_use, "install", "-r", self.config.backend_manifest],
            cwd=project_path,
            error_message="Failed to install Python dependencies.",
        )
        if not result.succeeded:
            raise InstallFailedError(
                "Failed to install Python dependencies",
                self.choice,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        print_success("Backend dependencies installed successfully!")

    async def _prepare_venv(self, project_path: Path, python_cmd: str, pip_cmd: str) -> Path:
        """Create the virtual environment if needed and return its pip path."""
        venv_dir = self.config.venv_path(project_path)
        pip_path = venv_tool_path(venv_dir, pip_cmd, self.windows)

        if pip_path.exists():
            print_info(f"Reusing existing virtual environment at '{escape(str(venv_dir))}'.")
            return pip_path

        print_step(f"Creating Python virtual environment at '[yellow]{escape(str(venv_dir))}[/yellow]'...")
        result = await self.runner.run(
            [python_cmd, "-m", "venv", self.config.venv_name],
            cwd=project_path,
            stream=False,
            error_message="Failed to create virtual environment.",
        )
        if not result.succeeded:
            raise EnvCreationFailedError(
                "Failed to create virtual environment",
                self.choice,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        activate = venv_activate_command(self.config.venv_name, self.windows)
        print_info(f"Virtual environment created. To activate it later: [cyan]{escape(activate)}[/cyan]")
        return pip_path
