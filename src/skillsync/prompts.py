"""
Interactive prompts for init and the sync update confirmation.

The question flow lives in the commands; a Prompter only collects answers.
ClickPrompter asks on the terminal, ScriptedPrompter replays prepared
answers (headless runs and tests).
"""

import sys
from typing import Any

import click


class NoTTYError(Exception):
    """Raised when an answer is required but no TTY is available.

    Happens in headless environments (CI, cron, pipelines).
    """

    pass


class Prompter:
    """Collects answers to named questions.

    Every question has a stable name so scripted answers can target it.
    """

    def confirm(self, name: str, message: str, default: bool = False) -> bool:
        raise NotImplementedError

    def select(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str]],
        default: str | None = None,
    ) -> str:
        """Pick one value from (label, value) choices."""
        raise NotImplementedError

    def checkbox(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str, bool]],
    ) -> list[str]:
        """Pick any values from (label, value, checked) choices."""
        raise NotImplementedError

    def text(self, name: str, message: str, default: str = "") -> str:
        raise NotImplementedError


class ClickPrompter(Prompter):
    """Terminal prompts built on click."""

    def _require_tty(self, name: str) -> None:
        if not sys.stdin.isatty():
            raise NoTTYError(
                f"An answer to '{name}' is required but no TTY is available "
                f"(headless/CI environment)."
            )

    def confirm(self, name: str, message: str, default: bool = False) -> bool:
        self._require_tty(name)
        return click.confirm(message, default=default)

    def select(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str]],
        default: str | None = None,
    ) -> str:
        self._require_tty(name)
        click.echo(message)
        default_index = 1
        for i, (label, value) in enumerate(choices, start=1):
            click.echo(f"  {i}) {label}")
            if value == default:
                default_index = i
        index = click.prompt(
            "Choice",
            type=click.IntRange(1, len(choices)),
            default=default_index,
        )
        return choices[index - 1][1]

    def checkbox(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str, bool]],
    ) -> list[str]:
        self._require_tty(name)
        click.echo(message)
        checked: list[str] = []
        for i, (label, _value, is_checked) in enumerate(choices, start=1):
            mark = "x" if is_checked else " "
            click.echo(f"  [{mark}] {i}) {label}")
            if is_checked:
                checked.append(str(i))

        while True:
            raw = click.prompt(
                "Numbers separated by commas",
                default=",".join(checked),
                show_default=True,
            )
            try:
                picked = _parse_indexes(raw, len(choices))
            except ValueError as e:
                click.echo(f"Invalid selection: {e}")
                continue
            return [choices[i - 1][1] for i in picked]

    def text(self, name: str, message: str, default: str = "") -> str:
        self._require_tty(name)
        return click.prompt(message, default=default)


class ScriptedPrompter(Prompter):
    """Replays prepared answers keyed by question name.

    Questions without a prepared answer fall back to their default
    (for checkbox: the pre-checked values).
    """

    def __init__(self, answers: dict[str, Any] | None = None):
        self.answers = dict(answers or {})
        self.asked: list[str] = []

    def confirm(self, name: str, message: str, default: bool = False) -> bool:
        self.asked.append(name)
        return bool(self.answers.get(name, default))

    def select(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str]],
        default: str | None = None,
    ) -> str:
        self.asked.append(name)
        if name in self.answers:
            return self.answers[name]
        return default if default is not None else choices[0][1]

    def checkbox(
        self,
        name: str,
        message: str,
        choices: list[tuple[str, str, bool]],
    ) -> list[str]:
        self.asked.append(name)
        if name in self.answers:
            return list(self.answers[name])
        return [value for _label, value, checked in choices if checked]

    def text(self, name: str, message: str, default: str = "") -> str:
        self.asked.append(name)
        return self.answers.get(name, default)


def _parse_indexes(raw: str, upper: int) -> list[int]:
    """Parse "1, 3,4" into [1, 3, 4], validating the 1..upper range."""
    picked: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        index = int(part)
        if not 1 <= index <= upper:
            raise ValueError(f"{index} is out of range 1-{upper}")
        if index not in picked:
            picked.append(index)
    return picked
