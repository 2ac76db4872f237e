"""Interactive confirmations and the run-wide assume-yes decision."""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as typ

_YES = frozenset({"y", "yes"})
_ALL = frozenset({"a", "all"})


@dc.dataclass(frozen=True, slots=True)
class ConfirmationResult:
    """Answer to a confirmation prompt.

    ``apply_to_all`` is set when the user answered "a": the action is
    confirmed and later prompts in the same run are skipped.
    """

    confirmed: bool
    apply_to_all: bool = False


class ConfirmationPrompter(typ.Protocol):
    """Asks the user to confirm a mutating action."""

    def confirm(self, prompt: str) -> ConfirmationResult: ...


@dc.dataclass(slots=True)
class PromptState:
    """Mutable assume-yes flag shared by every operation in one run."""

    assume_yes: bool = False

    def enable_assume_yes(self) -> None:
        """Stop prompting for the remainder of the run."""
        self.assume_yes = True


class IOConfirmationPrompter:
    """Prompt on a text stream and read the answer from another."""

    def __init__(
        self,
        input_stream: typ.TextIO | None = None,
        output_stream: typ.TextIO | None = None,
    ) -> None:
        """Default to stdin and stderr."""
        self._input = input_stream or sys.stdin
        self._output = output_stream or sys.stderr

    def confirm(self, prompt: str) -> ConfirmationResult:
        """Write ``prompt`` and interpret the answer; EOF means "no"."""
        self._output.write(prompt)
        self._output.flush()
        answer = self._input.readline().strip().lower()
        if answer in _ALL:
            return ConfirmationResult(confirmed=True, apply_to_all=True)
        return ConfirmationResult(confirmed=answer in _YES)


def confirm_action(
    prompter: ConfirmationPrompter | None,
    state: PromptState,
    prompt: str,
) -> bool:
    """Return whether an action may proceed.

    No prompt is shown when assume-yes is active or no prompter is
    configured. An "apply to all" answer enables assume-yes on ``state``.
    """
    if state.assume_yes or prompter is None:
        return True
    result = prompter.confirm(prompt)
    if result.apply_to_all:
        state.enable_assume_yes()
    return result.confirmed
