"""ReactTango dependency installers.

Key classes:
    BackendInstaller     - pip install into an optional project venv
    FrontendInstaller    - pnpm install, bootstrapping pnpm through npm
    InstallOrchestrator  - runs the planned installers with failure isolation
"""

from .backend import BackendInstaller, venv_activate_command, venv_tool_path
from .base import (
    INSTALL_ORDER,
    BootstrapFailedError,
    CommandFailedError,
    EnvCreationFailedError,
    InstallChoice,
    InstallerError,
    InstallFailedError,
    InstallOutcome,
    InstallSelection,
    MissingInterpreterError,
    MissingPackageManagerError,
    MissingRuntimeError,
)
from .frontend import FrontendInstaller
from .planner import (
    SELECTION_LABELS,
    InstallOrchestrator,
    available_selections,
    default_selection,
    detect_manifests,
    plan_installs,
)

__all__ = [
    # Installers
    "BackendInstaller",
    "FrontendInstaller",
    "InstallOrchestrator",
    "venv_activate_command",
    "venv_tool_path",
    # Planning
    "INSTALL_ORDER",
    "SELECTION_LABELS",
    "InstallChoice",
    "InstallOutcome",
    "InstallSelection",
    "available_selections",
    "default_selection",
    "detect_manifests",
    "plan_installs",
    # Errors
    "InstallerError",
    "CommandFailedError",
    "MissingInterpreterError",
    "MissingPackageManagerError",
    "MissingRuntimeError",
    "EnvCreationFailedError",
    "BootstrapFailedError",
    "InstallFailedError",
]
