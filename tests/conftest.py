"""Shared pytest fixtures for the ReactTango CLI test suite.

Provides reusable fixtures for:
- A recording ``ShellRunner`` spy with scriptable failures and side effects
- ``EnvironmentProbe`` instances with a fixed set of available tools
- Scripted prompters
- Fake template clones and a real local template git repository
- Mock asyncio subprocess helpers
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from reactango.config import Config
from reactango.prompts import ScriptedPrompter
from reactango.utils import CommandResult, EnvironmentProbe, ShellRunner, format_command


# ---------------------------------------------------------------------------
# Shell runner spy
# ---------------------------------------------------------------------------


class FakeRunner(ShellRunner):
    """Records every command instead of running it.

    ``fail(fragment)`` makes any command containing *fragment* exit non-zero;
    ``on(fragment, effect)`` calls ``effect(argv, cwd)`` before answering, e.g.
    to create the directory a clone would produce.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[list[str], Path | None, bool]] = []
        self._failures: dict[str, tuple[int, str]] = {}
        self._effects: dict[str, Callable[[list[str], Path | None], None]] = {}

    def fail(self, fragment: str, exit_code: int = 1, stderr: str = "boom") -> None:
        self._failures[fragment] = (exit_code, stderr)

    def on(self, fragment: str, effect: Callable[[list[str], Path | None], None]) -> None:
        self._effects[fragment] = effect

    async def run(
        self,
        cmd: str | Sequence[str],
        cwd: str | Path | None = None,
        stream: bool = True,
        error_message: str = "Command failed",
    ) -> CommandResult:
        argv = [cmd] if isinstance(cmd, str) else list(cmd)
        work_dir = Path(cwd) if cwd else None
        self.calls.append((argv, work_dir, stream))
        command = format_command(cmd)

        for fragment, effect in self._effects.items():
            if fragment in command:
                effect(argv, work_dir)
        for fragment, (exit_code, stderr) in self._failures.items():
            if fragment in command:
                return CommandResult(command=command, cwd=work_dir, exit_code=exit_code, stderr=stderr)
        return CommandResult(command=command, cwd=work_dir, exit_code=0)

    @property
    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _, _ in self.calls]

    def count(self, fragment: str) -> int:
        return sum(1 for command in self.commands if fragment in command)

    def index_of(self, fragment: str) -> int:
        for index, command in enumerate(self.commands):
            if fragment in command:
                return index
        raise AssertionError(f"No command containing {fragment!r} in {self.commands!r}")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


# ---------------------------------------------------------------------------
# Probes and prompters
# ---------------------------------------------------------------------------


def make_probe(*available: str) -> EnvironmentProbe:
    """Probe that reports exactly *available* as installed."""
    names = set(available)
    return EnvironmentProbe(primary=lambda name: name in names, fallback=lambda name: False)


ALL_TOOLS = ("git", "python3", "python", "pip3", "pip", "node", "pnpm", "npm")


@pytest.fixture
def full_probe() -> EnvironmentProbe:
    """Every tool the CLI may look for is available."""
    return make_probe(*ALL_TOOLS)


@pytest.fixture
def scripted_prompter() -> Callable[..., ScriptedPrompter]:
    def factory(*answers) -> ScriptedPrompter:
        return ScriptedPrompter(answers)

    return factory


@pytest.fixture
def config() -> Config:
    return Config(template_url="https://example.invalid/ReactTangoTemplate.git")


# ---------------------------------------------------------------------------
# Projects and templates
# ---------------------------------------------------------------------------

REQUIREMENTS_TXT = "django>=5.0\n"
PACKAGE_JSON = '{"name": "reactango-template", "private": true}\n'


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary project root (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


def clone_effect(files: dict[str, str]) -> Callable[[list[str], Path | None], None]:
    """Side effect that materialises a cloned template at the clone's target path."""

    def effect(argv: list[str], cwd: Path | None) -> None:
        target = Path(argv[-1])
        target.mkdir(parents=True)
        (target / ".git").mkdir()
        (target / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
        for name, content in files.items():
            (target / name).write_text(content, encoding="utf-8")

    return effect


@pytest.fixture
def full_template_files() -> dict[str, str]:
    return {
        "README.md": "# ReactTango\n",
        "requirements.txt": REQUIREMENTS_TXT,
        "package.json": PACKAGE_JSON,
    }


@pytest.fixture
def tmp_template_repo(tmp_path: Path) -> Path:
    """Real git repository standing in for the remote template.

    Contains both manifests and one commit so it can be cloned by path.
    """
    repo_dir = tmp_path / "template-repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@reactango.local"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "ReactTango Test"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "commit.gpgsign", "false"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    (repo_dir / "README.md").write_text("# ReactTango Template\n", encoding="utf-8")
    (repo_dir / "requirements.txt").write_text(REQUIREMENTS_TXT, encoding="utf-8")
    (repo_dir / "package.json").write_text(PACKAGE_JSON, encoding="utf-8")
    subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    yield repo_dir


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def probe_factory() -> Callable[..., EnvironmentProbe]:
    """Factory fixture around ``make_probe``."""
    return make_probe


@pytest.fixture
def template_clone() -> Callable[[dict[str, str]], Callable[[list[str], Path | None], None]]:
    """Factory fixture around ``clone_effect``."""
    return clone_effect
