"""Types and errors shared by the dependency installers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class InstallChoice(str, Enum):
    """A dependency ecosystem that can be installed."""

    BACKEND = "backend"
    FRONTEND = "frontend"


# Installers always run in this order.
INSTALL_ORDER: tuple[InstallChoice, ...] = (InstallChoice.BACKEND, InstallChoice.FRONTEND)


class InstallSelection(str, Enum):
    """What the user asked to install."""

    ALL = "all"
    BACKEND = "backend"
    FRONTEND = "frontend"
    NONE = "none"


@dataclass(frozen=True)
class InstallOutcome:
    """Result of one orchestration run.

    ``failures`` maps each failed choice to a short reason.
    """

    attempted: frozenset[InstallChoice] = frozenset()
    succeeded: frozenset[InstallChoice] = frozenset()
    failures: dict[InstallChoice, str] = field(default_factory=dict)

    @property
    def overall_success(self) -> bool:
        """True when every attempted installer succeeded (vacuously true)."""
        return self.attempted == self.succeeded

    @property
    def failed(self) -> frozenset[InstallChoice]:
        return self.attempted - self.succeeded


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InstallerError(Exception):
    """Base class for installer failures."""

    def __init__(self, message: str, choice: InstallChoice):
        self.choice = choice
        super().__init__(message)


class MissingInterpreterError(InstallerError):
    def __init__(self) -> None:
        super().__init__(
            "Python is not installed or not in PATH. Please install Python 3.",
            InstallChoice.BACKEND,
        )


class MissingPackageManagerError(InstallerError):
    def __init__(self) -> None:
        super().__init__(
            "pip is not installed or not in PATH. Please install pip.",
            InstallChoice.BACKEND,
        )


class MissingRuntimeError(InstallerError):
    def __init__(self) -> None:
        super().__init__(
            "Node.js ('node') is not installed or not in PATH. Please install Node.js.",
            InstallChoice.FRONTEND,
        )


class CommandFailedError(InstallerError):
    """An installer step ran a command that exited non-zero."""

    def __init__(
        self,
        message: str,
        choice: InstallChoice,
        exit_code: int | None = None,
        stderr: str = "",
    ):
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is not None:
            message = f"{message} (exit {exit_code})"
        super().__init__(message, choice)


class EnvCreationFailedError(CommandFailedError):
    pass


class BootstrapFailedError(CommandFailedError):
    """The preferred Node package manager was missing and could not be installed."""


class InstallFailedError(CommandFailedError):
    pass
