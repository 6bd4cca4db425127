"""Interactive prompting behind a small capability interface.

The bootstrapper only ever asks two kinds of questions: a yes/no
confirmation and a choice from a short list.  ``RichPrompter`` asks them on
the terminal; ``ScriptedPrompter`` answers from a queue, for non-interactive
runs and tests.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from typing import Any, Protocol, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from reactango.utils import console as default_console

T = TypeVar("T")


class PromptUnavailableError(Exception):
    """Raised when a question cannot be put to the user (e.g. stdin closed)."""


class Prompter(Protocol):
    def confirm(self, question: str, default: bool = True) -> bool: ...

    def select(
        self,
        question: str,
        options: Sequence[tuple[T, str]],
        default: T,
    ) -> T: ...


class RichPrompter:
    """Asks questions on the terminal using ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def confirm(self, question: str, default: bool = True) -> bool:
        try:
            return Confirm.ask(question, default=default, console=self.console)
        except EOFError as exc:
            raise PromptUnavailableError("stdin is closed") from exc

    def select(
        self,
        question: str,
        options: Sequence[tuple[T, str]],
        default: T,
    ) -> T:
        """Show numbered *options* and return the value of the one picked.

        The user may answer with the number or the option's value.
        """
        if not options:
            raise ValueError("select() needs at least one option")

        by_answer: dict[str, T] = {}
        default_answer = "1"
        for index, (value, label) in enumerate(options, start=1):
            self.console.print(f"  [bold cyan]{index}.[/bold cyan] {escape(label)}")
            by_answer[str(index)] = value
            by_answer[str(getattr(value, "value", value))] = value
            if value == default:
                default_answer = str(index)

        try:
            answer = Prompt.ask(
                question,
                choices=list(by_answer),
                default=default_answer,
                show_choices=False,
                console=self.console,
            )
        except EOFError as exc:
            raise PromptUnavailableError("stdin is closed") from exc
        return by_answer[answer]


class ScriptedPrompter:
    """Answers questions from a pre-recorded script.

    Each answer is consumed in order.  ``confirm`` expects booleans and
    ``select`` expects option values.  Every question asked is recorded in
    ``questions``.  Running out of answers raises ``PromptUnavailableError``,
    which callers treat the same as a closed terminal.
    """

    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self._answers: deque[Any] = deque(answers)
        self.questions: list[str] = []

    def _next(self, question: str) -> Any:
        self.questions.append(question)
        if not self._answers:
            raise PromptUnavailableError(f"No scripted answer for: {question}")
        return self._answers.popleft()

    def confirm(self, question: str, default: bool = True) -> bool:
        return bool(self._next(question))

    def select(
        self,
        question: str,
        options: Sequence[tuple[T, str]],
        default: T,
    ) -> T:
        answer = self._next(question)
        values = [value for value, _ in options]
        if answer not in values:
            raise ValueError(f"Scripted answer {answer!r} is not one of {values!r}")
        return answer
