"""Blow resolution between the player and the villains.

Each blow compares the attacker's strength with the defender's and rolls
against one of three outcome tables. All rolls go through the game's
GameRandom.
"""

from enum import Enum

from .rng import GameRandom
from .state import WOUNDS, GameState
from .world import World

MIN_STRENGTH = 2
MAX_STRENGTH = 7


class Blow(Enum):
    MISSED = "missed"
    LIGHT_WOUND = "light_wound"
    SERIOUS_WOUND = "serious_wound"
    KNOCKOUT = "knockout"
    KILLED = "killed"


# Cumulative percentages for MISSED, LIGHT_WOUND, SERIOUS_WOUND, KNOCKOUT;
# anything above the last entry is KILLED.
_STRONG = (10, 30, 60, 70)
_EVEN = (30, 60, 80, 90)
_WEAK = (50, 80, 95, 100)

_ORDER = (Blow.MISSED, Blow.LIGHT_WOUND, Blow.SERIOUS_WOUND, Blow.KNOCKOUT)

# Damage dealt by each outcome
DAMAGE = {
    Blow.MISSED: 0,
    Blow.LIGHT_WOUND: 1,
    Blow.SERIOUS_WOUND: 2,
    Blow.KNOCKOUT: 1,
    Blow.KILLED: 0,
}


def resolve_blow(rng: GameRandom, attack: int, defense: int) -> Blow:
    """Roll one blow of strength ``attack`` against ``defense``."""
    difference = attack - defense
    if difference >= 2:
        table = _STRONG
    elif difference <= -2:
        table = _WEAK
    else:
        table = _EVEN
    roll = rng.randint(1, 100)
    for blow, limit in zip(_ORDER, table):
        if roll <= limit:
            return blow
    return Blow.KILLED


def player_strength(world: World, state: GameState) -> int:
    """Fighting strength, growing from 2 to 7 as the score rises."""
    if world.max_score <= 0:
        return MIN_STRENGTH
    bonus = (MAX_STRENGTH - MIN_STRENGTH) * state.score // world.max_score
    return max(MIN_STRENGTH, min(MAX_STRENGTH, MIN_STRENGTH + bonus))


def player_defense(world: World, state: GameState) -> int:
    return player_strength(world, state) - state.variables.get(WOUNDS, 0)


def wound_player(world: World, state: GameState, blow: Blow) -> bool:
    """Apply a blow to the player; return True if it was fatal."""
    if blow == Blow.KILLED:
        return True
    state.variables[WOUNDS] = state.variables.get(WOUNDS, 0) + DAMAGE[blow]
    return state.variables[WOUNDS] >= player_strength(world, state)
