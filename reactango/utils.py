"""Shared utility functions for the ReactTango CLI.

Provides async command execution, executable lookup on ``PATH``, and the
Rich-based console helpers used for all user-facing output.  Command
execution never raises for a normal non-zero exit; the outcome is reported
through a ``CommandResult`` so callers can decide how to react.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table

console = Console()

# Exit code reported when the child process could not be spawned at all.
SPAWN_FAILED_EXIT_CODE = 127


# ---------------------------------------------------------------------------
# Command results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single shell invocation."""

    command: str
    cwd: Path | None
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class CommandError(Exception):
    """Raised by ``run_checked`` when a command exits non-zero or cannot start."""

    def __init__(self, message: str, result: CommandResult):
        self.result = result
        self.command = result.command
        self.exit_code = result.exit_code
        self.stderr = result.stderr
        super().__init__(message)


def format_command(cmd: str | Sequence[str]) -> str:
    """Render a command for display."""
    if isinstance(cmd, str):
        return cmd
    return " ".join(f'"{part}"' if " " in part else part for part in cmd)


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


def _resolve_argv(argv: list[str]) -> list[str]:
    """On Windows, resolve the binary to its full path so ``.cmd`` shims run."""
    if os.name == "nt":
        found = shutil.which(argv[0])
        if found:
            return [found, *argv[1:]]
    return argv


async def run_command(
    cmd: str | Sequence[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    stream: bool = False,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command and wait for it to finish.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.  The parent's working
            directory is never changed.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits indefinitely.
        stream: If ``True`` the child inherits the parent's stdout/stderr so
            output appears in real time; nothing is captured.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``CommandResult``.  Spawn failures are reported with exit code 127
        and the OS error in ``stderr``; timeouts with exit code -1.
    """
    cmd_str = format_command(cmd)
    work_dir = Path(cwd) if cwd else None

    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = None if stream else asyncio.subprocess.PIPE
    stderr_pipe = None if stream else asyncio.subprocess.PIPE

    try:
        if isinstance(cmd, str):
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=stdout_pipe,
                stderr=stderr_pipe,
                cwd=str(work_dir) if work_dir else None,
                env=merged_env,
            )
        else:
            process = await asyncio.create_subprocess_exec(
                *_resolve_argv(list(cmd)),
                stdout=stdout_pipe,
                stderr=stderr_pipe,
                cwd=str(work_dir) if work_dir else None,
                env=merged_env,
            )
    except OSError as exc:
        return CommandResult(
            command=cmd_str,
            cwd=work_dir,
            exit_code=SPAWN_FAILED_EXIT_CODE,
            stderr=f"Could not start command: {exc}",
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return CommandResult(
            command=cmd_str,
            cwd=work_dir,
            exit_code=-1,
            stderr=f"Command timed out after {timeout}s: {cmd_str}",
        )

    return CommandResult(
        command=cmd_str,
        cwd=work_dir,
        exit_code=process.returncode or 0,
        stdout=(stdout_bytes or b"").decode("utf-8", errors="replace").strip(),
        stderr=(stderr_bytes or b"").decode("utf-8", errors="replace").strip(),
    )


async def run_checked(
    binary: str,
    args: Sequence[str] = (),
    cwd: str | Path | None = None,
    stream: bool = True,
    timeout: float | None = None,
) -> CommandResult:
    """Run ``binary args...`` and raise ``CommandError`` unless it exits 0."""
    result = await run_command([binary, *args], cwd=cwd, timeout=timeout, stream=stream)
    if not result.succeeded:
        raise CommandError(
            f"Command failed (exit {result.exit_code}): {result.command}",
            result,
        )
    return result


class ShellRunner:
    """Runs commands for the installers and the bootstrapper.

    Announces every command before running it and prints diagnostics
    (command, directory, exit code, captured output) when one fails, so the
    user can retry it by hand.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def run(
        self,
        cmd: str | Sequence[str],
        cwd: str | Path | None = None,
        stream: bool = True,
        error_message: str = "Command failed",
    ) -> CommandResult:
        location = f" in [yellow]{escape(str(cwd))}[/yellow]" if cwd else ""
        print_step(f"Executing: [cyan]{escape(format_command(cmd))}[/cyan]{location}")

        result = await run_command(cmd, cwd=cwd, timeout=self.timeout, stream=stream)
        if not result.succeeded:
            report_command_failure(result, error_message)
        return result

    async def run_checked(
        self,
        binary: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
        stream: bool = True,
        error_message: str = "Command failed",
    ) -> CommandResult:
        result = await self.run([binary, *args], cwd=cwd, stream=stream, error_message=error_message)
        if not result.succeeded:
            raise CommandError(
                f"{error_message} (exit {result.exit_code}): {result.command}",
                result,
            )
        return result


def report_command_failure(result: CommandResult, message: str) -> None:
    """Print everything needed to reproduce a failed command manually."""
    print_error(f"{message} (Exit code: {result.exit_code})")
    console.print(f"  [dim]Command:[/dim] {escape(result.command)}")
    if result.cwd:
        console.print(f"  [dim]Directory:[/dim] {escape(str(result.cwd))}")
    if result.stderr:
        console.print(f"[red]{escape(result.stderr)}[/red]")
    if result.stdout:
        console.print(f"[dim]{escape(result.stdout)}[/dim]")


# ---------------------------------------------------------------------------
# Executable lookup
# ---------------------------------------------------------------------------


def _which_lookup(name: str) -> bool:
    return shutil.which(name) is not None


def _where_lookup(name: str) -> bool:
    completed = subprocess.run(
        ["where", name],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return completed.returncode == 0


class EnvironmentProbe:
    """Answers whether an executable is available on ``PATH``.

    The POSIX-style lookup runs first; the Windows ``where`` lookup is only
    consulted when it fails.  A lookup that errors counts as "not found".
    """

    def __init__(
        self,
        primary: Callable[[str], bool] | None = None,
        fallback: Callable[[str], bool] | None = None,
    ) -> None:
        self._lookups = (primary or _which_lookup, fallback or _where_lookup)

    def exists(self, name: str) -> bool:
        for lookup in self._lookups:
            try:
                if lookup(name):
                    return True
            except (OSError, ValueError, subprocess.SubprocessError):
                continue
        return False

    def first_available(self, *names: str) -> str | None:
        """Return the first of *names* that exists, or ``None``."""
        for name in names:
            if self.exists(name):
                return name
        return None


def command_exists(name: str) -> bool:
    """Module-level shortcut using the default lookups."""
    return EnvironmentProbe().exists(name)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(version: str) -> None:
    """Print the CLI banner."""
    console.print(
        Panel(
            "[bold yellow]React Tango CLI[/bold yellow]\n"
            "[bold green]TanStack Router + Django Framework[/bold green]\n"
            f"[bold magenta]v{escape(version)}[/bold magenta]",
            border_style="bold cyan",
            expand=False,
        )
    )


def print_section(title: str, color: str = "magenta") -> None:
    """Print a full-width rule announcing a new section of work."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a cyan informational message."""
    console.print(f"[bold cyan]{message}[/bold cyan]")


def print_step(message: str) -> None:
    """Print a blue progress step."""
    console.print(f"[bold blue]>[/bold blue] {message}")


def create_progress() -> Progress:
    """Create a Rich spinner for long-running steps such as cloning.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
