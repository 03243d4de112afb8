"""Interactive question/answer prompts."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from rich.console import Console

logger = logging.getLogger(__name__)

YES = "y"
NO = "n"


def make_console(stderr: bool = False) -> Console:
    """Console that prints text verbatim (no wrapping, emoji or highlighting)."""
    return Console(stderr=stderr, soft_wrap=True, emoji=False, highlight=False)


def dedupe_answers(answers: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for answer in answers:
        if answer is None or answer in seen:
            continue
        seen.add(answer)
        result.append(answer)
    return result


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def format_question(question: str, answers: list[str], default: str | None = None) -> str:
    """
    Build the full question line.

    Example:
        >>> format_question("Delete?", ["y", "n"], "n")
        'Delete? ( y | n* ) : '
    """
    parts = [question]
    if answers:
        options = [f"{answer}*" if answer == default else answer for answer in answers]
        parts.append(f" ( {' | '.join(options)} )")
    parts.append(" : ")
    return "".join(parts)


class Prompt:
    """Asks questions and reads answers from an injectable line reader."""

    def __init__(
        self,
        reader: Callable[[], str] | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
    ):
        self.reader = reader or input
        self.console = console or make_console()
        self.error_console = error_console or make_console(stderr=True)

    def ask(
        self,
        question: str,
        answers: Iterable[str] | None = None,
        default: str | None = None,
    ) -> str:
        """
        Ask a question until an acceptable answer is given.

        Args:
            question: Text of the question
            answers: Accepted answers (case-sensitive); any input if omitted
            default: Answer used when the input is blank

        Returns:
            The answer

        Raises:
            ValueError: If the answers/default combination is unusable
        """
        if question is None:
            raise ValueError("question is required")

        allowed = dedupe_answers(answers or [])
        if allowed:
            if not is_blank(default) and default not in allowed:
                raise ValueError(f"Default answer ({default}) is not in answers {allowed}")
            if len(allowed) < 2:
                raise ValueError(f"Need more answers than {allowed}")

        full_question = format_question(question, allowed, default)

        while True:
            self.console.print(full_question, markup=False)
            raw = self.reader()

            if is_blank(raw):
                if not is_blank(default):
                    logger.info(f"Blank input, using default answer '{default}'")
                    return default
                continue

            if not allowed or raw in allowed:
                return raw

            self.error_console.print(
                f"'{raw}' is not one of: {', '.join(allowed)}", markup=False, style="red"
            )

    def yes_or_no(self, question: str, default_yes: bool = True) -> bool:
        """Ask a y/n question; returns True for "y"."""
        answer = self.ask(question, (YES, NO), YES if default_yes else NO)
        return answer == YES
