"""ReactTango command-line interface.

Usage::

    reactango create my-app
    reactango create my-app --branch develop --no-init-git
    reactango create my-app --install-all --no-venv
    python -m reactango create my-app --skip-all-install
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import traceback
from collections.abc import Sequence

from pydantic import ValidationError
from rich.markup import escape

from reactango import __version__
from reactango.bootstrap import (
    EXIT_FATAL,
    BootstrapError,
    CloneFailedError,
    CreateOptions,
    ProjectBootstrapper,
    ProjectRequest,
)
from reactango.config import Config
from reactango.prompts import Prompter
from reactango.utils import EnvironmentProbe, ShellRunner, console, print_banner, print_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reactango",
        description="ReactTango CLI -- create and manage ReactTango projects.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  reactango create my-app\n"
            "  reactango create my-app --branch develop --init-git\n"
            "  reactango create my-app --install-all --no-venv\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser(
        "create",
        help="Create a new ReactTango project from the template.",
        description="Create a new ReactTango project from the template.",
    )
    create.add_argument("project_name", metavar="project-name", help="Name of the new project directory")
    create.add_argument(
        "--branch",
        default=None,
        help="Branch of the template to clone (e.g. 'main', 'develop')",
    )

    git_group = create.add_mutually_exclusive_group()
    git_group.add_argument(
        "--init-git",
        dest="init_git",
        action="store_const",
        const=True,
        default=None,
        help="Force initialization of a new git repository",
    )
    git_group.add_argument(
        "--no-init-git",
        dest="init_git",
        action="store_const",
        const=False,
        help="Force skipping git initialization",
    )

    create.add_argument(
        "--install-all",
        action="store_true",
        help="Install all available dependencies (backend & frontend) without asking",
    )
    create.add_argument(
        "--skip-all-install",
        action="store_true",
        help="Skip all dependency installations and prompts",
    )
    create.add_argument(
        "--no-venv",
        dest="use_venv",
        action="store_false",
        help="Don't use a Python virtual environment for backend dependencies",
    )
    return parser


async def _create(
    args: argparse.Namespace,
    config: Config,
    prompter: Prompter | None,
    runner: ShellRunner | None,
    probe: EnvironmentProbe | None,
) -> int:
    request = ProjectRequest.from_cli(args.project_name, branch=args.branch)
    options = CreateOptions(
        init_git=args.init_git,
        install_all=args.install_all,
        skip_all_install=args.skip_all_install,
        use_venv=args.use_venv,
    )
    bootstrapper = ProjectBootstrapper(config, prompter=prompter, runner=runner, probe=probe)
    report = await bootstrapper.create(request, options)
    return report.exit_code


def run(
    argv: Sequence[str] | None = None,
    config: Config | None = None,
    prompter: Prompter | None = None,
    runner: ShellRunner | None = None,
    probe: EnvironmentProbe | None = None,
) -> int:
    """Parse *argv*, run the command and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = config or Config.from_env()
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {escape(str(exc))}")
        return EXIT_FATAL

    print_banner(__version__)

    try:
        return asyncio.run(_create(args, config, prompter, runner, probe))
    except CloneFailedError as exc:
        print_error(escape(str(exc)))
        if exc.stderr:
            console.print(f"[red]{escape(exc.stderr)}[/red]")
        return EXIT_FATAL
    except BootstrapError as exc:
        print_error(escape(str(exc)))
        return EXIT_FATAL
    except KeyboardInterrupt:
        print_error("Cancelled.")
        return EXIT_FATAL
    except Exception as exc:
        print_error(f"An unexpected error occurred during project creation: {escape(str(exc))}")
        if config.debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        return EXIT_FATAL


def main() -> None:
    """CLI entry point for ``reactango`` and ``python -m reactango``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
