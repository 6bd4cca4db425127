"""ReactTango project bootstrapper.

Drives a single ``create`` run through its stages:

START -> CLONED     -- clone the template into a new directory.
CLONED -> VCS_RESET -- drop the template's own ``.git`` directory.
VCS_RESET -> VCS_DECIDED -- optionally ``git init`` + initial commit.
VCS_DECIDED -> PLANNED   -- decide which dependencies to install.
PLANNED -> INSTALLED     -- run the installers.
INSTALLED -> DONE        -- print next-step guidance.

Only a name collision, an invalid name or a failed clone abort the run (state
``FAILED``); everything after the clone degrades to a warning.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from rich.markup import escape

from reactango.config import Config
from reactango.installers.backend import venv_activate_command
from reactango.installers.base import InstallChoice, InstallOutcome, InstallSelection
from reactango.installers.planner import (
    SELECTION_LABELS,
    InstallOrchestrator,
    available_selections,
    default_selection,
    detect_manifests,
    plan_installs,
)
from reactango.prompts import Prompter, PromptUnavailableError, RichPrompter
from reactango.utils import (
    CommandError,
    EnvironmentProbe,
    ShellRunner,
    console,
    create_progress,
    print_error,
    print_info,
    print_section,
    print_step,
    print_success,
    print_warning,
)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INSTALL_ISSUES = 2


class BootstrapState(str, Enum):
    START = "start"
    CLONED = "cloned"
    VCS_RESET = "vcs_reset"
    VCS_DECIDED = "vcs_decided"
    PLANNED = "planned"
    INSTALLED = "installed"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BootstrapError(Exception):
    """Raised when project creation cannot continue."""


class InvalidProjectNameError(BootstrapError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Invalid project name '{name}'. Use a single directory name "
            "without path separators."
        )


class TargetExistsError(BootstrapError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Directory '{path}' already exists. Please choose a different name "
            "or remove the existing directory."
        )


class CloneFailedError(BootstrapError):
    def __init__(self, url: str, exit_code: int, stderr: str = "") -> None:
        self.url = url
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Failed to clone template repository {url} (exit {exit_code})")


# ---------------------------------------------------------------------------
# Request / options / report
# ---------------------------------------------------------------------------


class ProjectRequest(BaseModel):
    """A validated request to create one project."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    resolved_path: Path
    source_branch: str | None = None

    @field_validator("name")
    @classmethod
    def _single_directory_name(cls, value: str) -> str:
        if value.strip() != value or value in {".", ".."}:
            raise ValueError("not a usable directory name")
        if any(sep in value for sep in ("/", "\\", "\0")):
            raise ValueError("must not contain path separators")
        return value

    @field_validator("resolved_path")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError("resolved_path must be absolute")
        return value

    @classmethod
    def from_cli(
        cls,
        name: str,
        branch: str | None = None,
        cwd: str | Path | None = None,
    ) -> "ProjectRequest":
        """Resolve *name* against *cwd* (default: the current directory).

        Raises:
            InvalidProjectNameError: *name* is empty or not a plain directory name.
        """
        base = Path(cwd) if cwd else Path.cwd()
        try:
            return cls(
                name=name,
                resolved_path=(base / name).resolve(),
                source_branch=branch or None,
            )
        except ValueError as exc:
            raise InvalidProjectNameError(name) from exc


@dataclass
class CreateOptions:
    """Flags that steer a ``create`` run.

    ``init_git`` is ``None`` when the user should be asked.
    """

    init_git: bool | None = None
    install_all: bool = False
    skip_all_install: bool = False
    use_venv: bool = True


@dataclass
class BootstrapReport:
    """What a finished ``create`` run did."""

    request: ProjectRequest
    state: BootstrapState = BootstrapState.START
    git_initialized: bool = False
    manifests: set[InstallChoice] = field(default_factory=set)
    selection: InstallSelection | None = None
    outcome: InstallOutcome = field(default_factory=InstallOutcome)
    next_steps: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.state is BootstrapState.FAILED:
            return EXIT_FATAL
        if not self.outcome.overall_success:
            return EXIT_INSTALL_ISSUES
        return EXIT_OK


# ---------------------------------------------------------------------------
# Bootstrapper
# ---------------------------------------------------------------------------


class ProjectBootstrapper:
    """Creates a project from the template.

    Attributes:
        config: CLI configuration (template URL, manifest names, ...).
        prompter: Asks the git and install questions.
        runner: Executes every external command.
        probe: Looks up executables on PATH.
        state: Current stage of the run in progress.
        history: Every stage entered during the last run, in order.
    """

    def __init__(
        self,
        config: Config,
        prompter: Prompter | None = None,
        runner: ShellRunner | None = None,
        probe: EnvironmentProbe | None = None,
        orchestrator: InstallOrchestrator | None = None,
        windows: bool | None = None,
    ) -> None:
        self.config = config
        self.prompter = prompter or RichPrompter()
        self.runner = runner or ShellRunner(timeout=config.command_timeout)
        self.probe = probe or EnvironmentProbe()
        self.orchestrator = orchestrator or InstallOrchestrator(config, self.runner, self.probe)
        self.windows = os.name == "nt" if windows is None else windows
        self.state = BootstrapState.START
        self.history: list[BootstrapState] = []

    def _advance(self, state: BootstrapState) -> None:
        self.state = state
        self.history.append(state)

    async def create(
        self,
        request: ProjectRequest,
        options: CreateOptions | None = None,
    ) -> BootstrapReport:
        """Run every stage for *request*.

        Returns:
            A ``BootstrapReport`` whose ``exit_code`` reflects installer issues.

        Raises:
            TargetExistsError: The target directory already exists.
            CloneFailedError: ``git clone`` exited non-zero.
        """
        options = options or CreateOptions()
        report = BootstrapReport(request=request)
        self.history = []
        self._advance(BootstrapState.START)

        try:
            await self._clone(request)
            self._advance(BootstrapState.CLONED)

            self._reset_vcs(request.resolved_path)
            self._advance(BootstrapState.VCS_RESET)

            if self._decide_vcs(options):
                report.git_initialized = await self._init_vcs(request)
            self._advance(BootstrapState.VCS_DECIDED)

            plan = self._plan(request.resolved_path, options, report)
            self._advance(BootstrapState.PLANNED)

            if plan:
                report.outcome = await self.orchestrator.run(
                    request.resolved_path, plan, use_venv=options.use_venv
                )
            self._advance(BootstrapState.INSTALLED)
        except Exception:
            self._advance(BootstrapState.FAILED)
            report.state = self.state
            raise

        report.next_steps = build_next_steps(request, self.config, options, report.outcome, self.windows)
        self._advance(BootstrapState.DONE)
        report.state = self.state
        print_completion(request, report)
        return report

    # ------------------------------------------------------------------
    # START -> CLONED
    # ------------------------------------------------------------------

    async def _clone(self, request: ProjectRequest) -> None:
        target = request.resolved_path
        if target.exists():
            raise TargetExistsError(target)

        cmd = ["git", "clone"]
        if request.source_branch:
            cmd += ["--branch", request.source_branch]
        cmd += [self.config.template_url, str(target)]

        with create_progress() as progress:
            progress.add_task(
                f"Cloning {self.config.template_name} into '{escape(request.name)}'...",
                total=None,
            )
            result = await self.runner.run(
                cmd,
                cwd=target.parent,
                stream=False,
                error_message="Failed to clone template repository.",
            )

        if not result.succeeded:
            raise CloneFailedError(self.config.template_url, result.exit_code, result.stderr)
        print_success(f"Template cloned successfully into '{escape(str(target))}'.")

    # ------------------------------------------------------------------
    # CLONED -> VCS_RESET
    # ------------------------------------------------------------------

    def _reset_vcs(self, target: Path) -> None:
        git_dir = target / ".git"
        if not git_dir.exists():
            return

        print_step("Removing template's .git directory...")
        try:
            shutil.rmtree(git_dir)
        except OSError as exc:
            print_warning(
                f"Could not remove .git directory: {escape(str(exc))}. Please remove it manually."
            )
            return
        print_success("Template .git directory removed.")

    # ------------------------------------------------------------------
    # VCS_RESET -> VCS_DECIDED
    # ------------------------------------------------------------------

    def _decide_vcs(self, options: CreateOptions) -> bool:
        if not self.probe.exists("git"):
            if options.init_git:
                print_warning("--init-git flag used, but Git command not found. Cannot initialize repository.")
            else:
                print_warning("Git command not found. Skipping git repository initialization.")
            return False

        if options.init_git is True:
            print_step("--init-git flag used: Forcing git initialization.")
            return True
        if options.init_git is False:
            print_warning("--no-init-git flag used: Skipping git initialization.")
            return False

        try:
            return self.prompter.confirm("Initialize a new git repository in the project?", default=True)
        except PromptUnavailableError as exc:
            print_warning(
                f"Could not display interactive git prompt ({escape(str(exc))}). "
                "Defaulting to no git initialization."
            )
            return False

    async def _init_vcs(self, request: ProjectRequest) -> bool:
        target = request.resolved_path
        message = f"Initial commit: Bootstrap '{request.name}' from {self.config.template_name}"
        steps = (
            (["init"], "Failed to initialize git repository."),
            (["add", "."], "Failed to add files to git."),
            (["commit", "-m", message], "Failed to make initial commit."),
        )

        print_step(f"Initializing a new git repository in '[yellow]{escape(str(target))}[/yellow]'...")
        try:
            for args, error_message in steps:
                await self.runner.run_checked(
                    "git", args, cwd=target, stream=False, error_message=error_message
                )
        except CommandError:
            print_warning("Git initialization did not complete. You can finish it manually.")
            return False

        print_success(f'Initial commit made: "{escape(message)}"')
        return True

    # ------------------------------------------------------------------
    # VCS_DECIDED -> PLANNED
    # ------------------------------------------------------------------

    def _plan(
        self,
        target: Path,
        options: CreateOptions,
        report: BootstrapReport,
    ) -> list[InstallChoice]:
        if options.skip_all_install:
            print_warning("--skip-all-install flag used. All dependency installations are skipped.")
            return []

        report.manifests = detect_manifests(target, self.config)
        if not report.manifests:
            print_info(
                f"No dependency manifest files ({self.config.backend_manifest}, "
                f"{self.config.frontend_manifest}) found. Skipping installation phase."
            )
            return []

        if options.install_all:
            print_step("--install-all flag used: Proceeding with all available installations.")
            report.selection = InstallSelection.ALL
        else:
            report.selection = self._ask_selection(report.manifests)

        plan = plan_installs(report.manifests, report.selection)
        if not plan:
            print_warning("No dependencies selected for installation.")
        return plan

    def _ask_selection(self, manifests: set[InstallChoice]) -> InstallSelection:
        print_section("DEPENDENCY INSTALLATION OPTIONS")
        choices = [(selection, SELECTION_LABELS[selection]) for selection in available_selections(manifests)]
        try:
            selection = self.prompter.select(
                "What dependencies would you like to install?",
                choices,
                default_selection(manifests),
            )
        except PromptUnavailableError as exc:
            print_warning(
                f"Could not display interactive install prompt ({escape(str(exc))}). "
                "Skipping installations."
            )
            return InstallSelection.NONE

        print_info(f"Selected: {SELECTION_LABELS[selection]}")
        return selection


# ---------------------------------------------------------------------------
# Guidance
# ---------------------------------------------------------------------------


def build_next_steps(
    request: ProjectRequest,
    config: Config,
    options: CreateOptions,
    outcome: InstallOutcome,
    windows: bool,
) -> list[str]:
    """Next-step instructions tailored to what was (not) installed."""
    steps = [f"cd {request.name}"]

    present = detect_manifests(request.resolved_path, config)
    manual: list[str] = []
    if not options.skip_all_install:
        if InstallChoice.BACKEND in present and InstallChoice.BACKEND not in outcome.succeeded:
            activate = venv_activate_command(config.venv_name, windows)
            manual.append(
                f"Backend: python3 -m venv {config.venv_name} && {activate} && "
                f"pip install -r {config.backend_manifest} (or equivalent for your OS)"
            )
        if InstallChoice.FRONTEND in present and InstallChoice.FRONTEND not in outcome.succeeded:
            manual.append(f"Frontend: {config.package_manager} install")
    if manual:
        steps.append("Install dependencies manually if needed:\n     " + "\n     ".join(manual))

    if InstallChoice.BACKEND in outcome.succeeded and options.use_venv:
        steps.append(
            f"Activate Python virtual environment: {venv_activate_command(config.venv_name, windows)}"
        )

    steps.append(f"Start development server (if applicable): {config.package_manager} run dev")
    return steps


def print_completion(request: ProjectRequest, report: BootstrapReport) -> None:
    print_section("DONE", color="green")
    if report.outcome.overall_success:
        print_success(f"PROJECT '{escape(request.name.upper())}' CREATED SUCCESSFULLY!")
    else:
        failed = ", ".join(sorted(choice.value for choice in report.outcome.failed))
        print_error(
            f"PROJECT '{escape(request.name.upper())}' CREATED, but dependency "
            f"installation completed with issues ({failed})."
        )

    console.print("\n[bold blue]NEXT STEPS:[/bold blue]")
    for number, step in enumerate(report.next_steps, start=1):
        console.print(f"  [bold cyan]{number}.[/bold cyan] {escape(step)}")
    console.print("\n  [dim]For more details, check the README.md inside your new project.[/dim]")
