"""
Confirmation gates.

Some intents (reset, cancelling an ultimate) only go through after the
user confirms. The engine asks through a plain callable so it can run
headless: the terminal view prompts on stdin, the HTTP layer answers
with what the client sent, tests use the stubs below.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

ConfirmFn = Callable[[str], bool]

RESET_PROMPT = "Really reset the game?"
CANCEL_ULTIMATE_PROMPT = "Cancel ultimate use?"


def always_confirm(prompt: str) -> bool:
    return True


def always_decline(prompt: str) -> bool:
    return False


@dataclass
class PromptRecorder:
    """
    Gate that answers every prompt with a fixed value.

    Remembers what it was asked so a caller can tell the client which
    confirmation the intent needed.
    """
    answer: bool = False
    prompts: list[str] = field(default_factory=list)

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer

    @property
    def last_prompt(self) -> str | None:
        return self.prompts[-1] if self.prompts else None
