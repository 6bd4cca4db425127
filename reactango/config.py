"""ReactTango CLI configuration.

Typed settings for cloning the template and installing its dependencies.
Everything has a sensible default so the CLI works without any setup; a few
values can be overridden through environment variables via
``Config.from_env()``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_URL = "https://github.com/Abdullah6346/ReactTangoTemplate.git"

_TRUTHY = {"1", "true", "yes", "on"}


class Config(BaseModel):
    """Global ReactTango CLI configuration.

    Created once by the CLI entry point and handed to the bootstrapper, which
    passes it on to the installers.
    """

    template_url: str = Field(default=DEFAULT_TEMPLATE_URL, min_length=1)
    template_name: str = Field(default="ReactTangoTemplate")
    venv_name: str = Field(default="venv", min_length=1)
    backend_manifest: str = Field(default="requirements.txt")
    frontend_manifest: str = Field(default="package.json")
    package_manager: str = Field(default="pnpm", description="Preferred Node package manager")
    bootstrap_package_manager: str = Field(
        default="npm", description="Used to install the preferred manager when it is missing"
    )
    command_timeout: int | None = Field(
        default=None, ge=1, description="Per-command timeout in seconds (None waits forever)"
    )
    debug: bool = Field(default=False, description="Print tracebacks for unexpected errors")

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def venv_path(self, project_root: Path) -> Path:
        """Location of the isolated Python environment inside a project."""
        return project_root / self.venv_name

    def backend_manifest_path(self, project_root: Path) -> Path:
        """Path to the Python requirements file inside a project."""
        return project_root / self.backend_manifest

    def frontend_manifest_path(self, project_root: Path) -> Path:
        """Path to ``package.json`` inside a project."""
        return project_root / self.frontend_manifest

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            REACTANGO_TEMPLATE_URL, REACTANGO_VENV_NAME,
            REACTANGO_PACKAGE_MANAGER, REACTANGO_COMMAND_TIMEOUT,
            DEBUG_REACTANGO_CLI.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("REACTANGO_TEMPLATE_URL"):
            kwargs["template_url"] = os.environ["REACTANGO_TEMPLATE_URL"]
        if os.environ.get("REACTANGO_VENV_NAME"):
            kwargs["venv_name"] = os.environ["REACTANGO_VENV_NAME"]
        if os.environ.get("REACTANGO_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["REACTANGO_PACKAGE_MANAGER"]
        if os.environ.get("REACTANGO_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["REACTANGO_COMMAND_TIMEOUT"])

        debug = os.environ.get("DEBUG_REACTANGO_CLI", "").strip().lower()
        kwargs["debug"] = debug in _TRUTHY

        return cls(**kwargs)
