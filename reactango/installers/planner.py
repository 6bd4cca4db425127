"""Install planning and orchestration.

Decides which ecosystems to install from the manifests present in the
project and the user's selection, then runs the matching installers in a
fixed order (backend before frontend).  A failing installer never stops the
next one; every failure is recorded in the returned ``InstallOutcome``.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from pathlib import Path

from rich.markup import escape

from reactango.config import Config
from reactango.installers.backend import BackendInstaller
from reactango.installers.base import (
    INSTALL_ORDER,
    InstallChoice,
    InstallerError,
    InstallOutcome,
    InstallSelection,
)
from reactango.installers.frontend import FrontendInstaller
from reactango.utils import (
    EnvironmentProbe,
    ShellRunner,
    console,
    format_duration,
    print_error,
    print_info,
    print_section,
    print_success,
    print_summary_table,
    print_warning,
)

SELECTION_LABELS: dict[InstallSelection, str] = {
    InstallSelection.ALL: "Install All Dependencies (Backend + Frontend)",
    InstallSelection.BACKEND: "Backend Only (Python with venv)",
    InstallSelection.FRONTEND: "Frontend Only (Node.js with pnpm)",
    InstallSelection.NONE: "Install None (Skip all installations)",
}


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def detect_manifests(project_path: Path, config: Config) -> set[InstallChoice]:
    """Return the ecosystems whose manifest file exists in *project_path*."""
    present: set[InstallChoice] = set()
    if config.backend_manifest_path(project_path).is_file():
        present.add(InstallChoice.BACKEND)
    if config.frontend_manifest_path(project_path).is_file():
        present.add(InstallChoice.FRONTEND)
    return present


def available_selections(manifests: Iterable[InstallChoice]) -> list[InstallSelection]:
    """Selections worth offering: ``ALL`` needs both manifests, ``NONE`` is always last."""
    present = set(manifests)
    options: list[InstallSelection] = []
    if present >= {InstallChoice.BACKEND, InstallChoice.FRONTEND}:
        options.append(InstallSelection.ALL)
    if InstallChoice.BACKEND in present:
        options.append(InstallSelection.BACKEND)
    if InstallChoice.FRONTEND in present:
        options.append(InstallSelection.FRONTEND)
    options.append(InstallSelection.NONE)
    return options


def default_selection(manifests: Iterable[InstallChoice]) -> InstallSelection:
    present = set(manifests)
    if present >= {InstallChoice.BACKEND, InstallChoice.FRONTEND}:
        return InstallSelection.ALL
    if InstallChoice.BACKEND in present:
        return InstallSelection.BACKEND
    if InstallChoice.FRONTEND in present:
        return InstallSelection.FRONTEND
    return InstallSelection.NONE


def plan_installs(
    manifests: Iterable[InstallChoice],
    selection: InstallSelection,
) -> list[InstallChoice]:
    """Intersect the selection with the manifests present, in install order."""
    present = set(manifests)
    if selection is InstallSelection.NONE:
        wanted: set[InstallChoice] = set()
    elif selection is InstallSelection.ALL:
        wanted = set(INSTALL_ORDER)
    else:
        wanted = {InstallChoice(selection.value)}
    return [choice for choice in INSTALL_ORDER if choice in wanted and choice in present]


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class InstallOrchestrator:
    """Runs the planned installers and aggregates their results."""

    def __init__(
        self,
        config: Config,
        runner: ShellRunner | None = None,
        probe: EnvironmentProbe | None = None,
        backend: BackendInstaller | None = None,
        frontend: FrontendInstaller | None = None,
    ) -> None:
        self.config = config
        runner = runner or ShellRunner(timeout=config.command_timeout)
        probe = probe or EnvironmentProbe()
        self.backend = backend or BackendInstaller(config, runner, probe)
        self.frontend = frontend or FrontendInstaller(config, runner, probe)

    async def _install(self, choice: InstallChoice, project_path: Path, use_venv: bool) -> None:
        if choice is InstallChoice.BACKEND:
            await self.backend.install(project_path, use_venv=use_venv)
        else:
            await self.frontend.install(project_path)

    async def run(
        self,
        project_path: Path,
        choices: Iterable[InstallChoice],
        use_venv: bool = True,
    ) -> InstallOutcome:
        """Install every ecosystem in *choices*, backend first.

        Args:
            project_path: Root of the project.
            choices: Ecosystems to install; order is ignored.
            use_venv: Passed to the backend installer.

        Returns:
            The frozen ``InstallOutcome``.  Nothing is raised for installer
            failures.
        """
        selected = set(choices)
        ordered = [choice for choice in INSTALL_ORDER if choice in selected]
        if not ordered:
            return InstallOutcome()

        print_section("STARTING DEPENDENCY INSTALLATIONS", color="cyan")

        attempted: set[InstallChoice] = set()
        succeeded: set[InstallChoice] = set()
        failures: dict[InstallChoice, str] = {}

        for index, choice in enumerate(ordered, start=1):
            name = choice.value.capitalize()
            attempted.add(choice)
            print_info(escape(f"[{index}] Starting {choice.value} dependency installation..."))

            started = time.monotonic()
            try:
                await self._install(choice, project_path, use_venv)
            except InstallerError as exc:
                failures[choice] = str(exc)
                print_error(f"{name} dependency installation failed: {escape(str(exc))}")
            except Exception as exc:
                failures[choice] = f"Unexpected error: {exc}"
                print_error(
                    f"{name} dependency installation failed unexpectedly: {escape(str(exc))}"
                )
            else:
                succeeded.add(choice)
                elapsed = format_duration(time.monotonic() - started)
                print_success(f"{name} installation completed successfully in {elapsed}!")

        outcome = InstallOutcome(
            attempted=frozenset(attempted),
            succeeded=frozenset(succeeded),
            failures=failures,
        )
        self._print_summary(outcome)
        return outcome

    @staticmethod
    def _print_summary(outcome: InstallOutcome) -> None:
        console.print()
        print_summary_table(
            {
                choice.value.capitalize(): (
                    "installed" if choice in outcome.succeeded else f"FAILED: {escape(outcome.failures[choice])}"
                )
                for choice in INSTALL_ORDER
                if choice in outcome.attempted
            },
            title="Dependency Installation",
        )
        if outcome.overall_success:
            print_success("ALL DEPENDENCY INSTALLATIONS COMPLETED SUCCESSFULLY!")
        else:
            print_warning(
                "Dependency installation completed with some issues. Please review the logs above."
            )
