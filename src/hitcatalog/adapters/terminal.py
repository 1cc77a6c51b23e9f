"""Interactive conflict resolution on a terminal."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from hitcatalog.domain.importing import Cancel, Resolution

if TYPE_CHECKING:
    from collections.abc import Callable

    from hitcatalog.domain.importing import ConflictSet, Decision, FieldConflict, FieldValue
    from hitcatalog.domain.model import HitField

CANCEL_ANSWER = "q"


class TerminalResolver:
    """Ask the operator to pick one value per conflicting field.

    Answering ``q`` (or closing the input) cancels the whole import.
    """

    def __init__(
        self,
        *,
        input_func: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._input = input_func
        self._output = output or sys.stdout

    def __call__(self, conflicts: ConflictSet) -> Decision:
        location = f" (line {conflicts.line})" if conflicts.line is not None else ""
        self._print(f"Conflicting values for {conflicts.label} [{conflicts.yt_id}]{location}")

        chosen: dict[HitField, FieldValue] = {}
        for conflict in conflicts:
            value = self._ask(conflict)
            if value is None:
                return Cancel(reason=f"cancelled while resolving {conflicts.label}")
            chosen[conflict.field] = value
        return Resolution(chosen)

    def _ask(self, conflict: FieldConflict) -> FieldValue | None:
        options = conflict.options
        self._print(f"  {conflict.field}:")
        for number, option in enumerate(options, start=1):
            self._print(f"    {number}) {option}")

        prompt = f"  choose 1-{len(options)} or {CANCEL_ANSWER} to cancel: "
        while True:
            try:
                answer = self._input(prompt).strip().lower()
            except EOFError:
                return None
            if answer == CANCEL_ANSWER:
                return None
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            self._print(f"  invalid choice {answer!r}")

    def _print(self, message: str) -> None:
        print(message, file=self._output)  # noqa: T201
