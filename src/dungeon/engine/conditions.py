"""Exit and message conditions.

A condition is a small immutable value evaluated against an explicit game
state, so it can live in static content and survive serialization.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .flags import GlobalFlag, ObjectFlag

if TYPE_CHECKING:
    from .state import GameState


@dataclass(frozen=True)
class FlagSet:
    """True when a global flag is set."""

    flag: GlobalFlag


@dataclass(frozen=True)
class VariableEquals:
    """True when a named global variable has the given value."""

    name: str
    value: int


@dataclass(frozen=True)
class ObjectHasFlag:
    """True when an object currently carries a flag."""

    object_id: str
    flag: ObjectFlag


@dataclass(frozen=True)
class Not:
    condition: "Condition"


@dataclass(frozen=True)
class AllOf:
    conditions: tuple["Condition", ...]


Condition = FlagSet | VariableEquals | ObjectHasFlag | Not | AllOf


def check_condition(state: "GameState", condition: Condition | None) -> bool:
    """Evaluate a condition; ``None`` always holds."""
    match condition:
        case None:
            return True
        case FlagSet(flag):
            return flag in state.flags
        case VariableEquals(name, value):
            return state.variables.get(name, 0) == value
        case ObjectHasFlag(object_id, flag):
            return state.has_flag(object_id, flag)
        case Not(inner):
            return not check_condition(state, inner)
        case AllOf(conditions):
            return all(check_condition(state, c) for c in conditions)
    raise TypeError(f"unknown condition: {condition!r}")
