"""Result values and the error taxonomy shared by parser and dispatch.

Parse failures and refused actions are ordinary values. Exceptions are kept
for broken content (``ContentError``) and broken world integrity
(``InvariantViolation``); neither escapes ``commands.handle_command``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParseErrorKind(Enum):
    EMPTY = "empty"
    UNKNOWN_WORD = "unknown_word"
    NO_VERB = "no_verb"
    MISSING_DIRECT = "missing_direct"
    MISSING_INDIRECT = "missing_indirect"
    NOT_IN_SCOPE = "not_in_scope"
    AMBIGUOUS = "ambiguous"
    BAD_PRONOUN = "bad_pronoun"


@dataclass(frozen=True)
class ParseFailure:
    kind: ParseErrorKind
    message: str
    candidates: tuple[str, ...] = ()


@dataclass(frozen=True)
class StateChange:
    """A record of one mutation, kept for logging."""

    kind: str
    subject: str | None = None
    old: Any = None
    new: Any = None


@dataclass
class ActionResult:
    success: bool
    message: str
    changes: list[StateChange] = field(default_factory=list)
    consumes_turn: bool | None = None

    @property
    def takes_turn(self) -> bool:
        if self.consumes_turn is None:
            return self.success
        return self.consumes_turn

    @classmethod
    def ok(cls, message: str, *changes: StateChange) -> "ActionResult":
        return cls(True, message, list(changes))

    @classmethod
    def failure(cls, message: str) -> "ActionResult":
        return cls(False, message)

    @classmethod
    def meta(cls, message: str) -> "ActionResult":
        """A successful bookkeeping action that does not use up a turn."""
        return cls(True, message, consumes_turn=False)


class InvariantViolation(Exception):
    """The world model reached a state the content should make impossible."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class ContentError(Exception):
    """The content file is malformed."""
