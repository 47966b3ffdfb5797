"""Closed flag sets for rooms, objects, globals and actors.

Content files name flags by their enum member name; anything else is a
content error caught at load time.
"""

from enum import Enum


class ObjectFlag(Enum):
    TAKEABLE = "takeable"
    CONTAINER = "container"
    OPEN = "open"
    TRANSPARENT = "transparent"
    SURFACE = "surface"
    LIGHT = "light"
    ON = "on"
    BURNED_OUT = "burned_out"
    ACTOR = "actor"
    FIXED = "fixed"
    DOOR = "door"
    READABLE = "readable"
    WEAPON = "weapon"
    FOOD = "food"
    DRINK = "drink"
    INVISIBLE = "invisible"
    NO_DESCRIBE = "no_describe"
    TOUCHED = "touched"
    CLIMBABLE = "climbable"
    SACRED = "sacred"


class RoomFlag(Enum):
    LIT = "lit"
    LAND = "land"
    SACRED = "sacred"
    ABOVE_GROUND = "above_ground"
    MAZE = "maze"


class GlobalFlag(Enum):
    TROLL_FLAG = "troll_flag"
    CYCLOPS_FLAG = "cyclops_flag"
    MAGIC_FLAG = "magic_flag"
    RUG_MOVED = "rug_moved"
    WON_FLAG = "won_flag"
    DEAD = "dead"
    LUCKY = "lucky"
    ALWAYS_LIT = "always_lit"
    GAME_OVER = "game_over"


class ActorState(Enum):
    NORMAL = "normal"
    FIGHTING = "fighting"
    FLEEING = "fleeing"
    SLEEPING = "sleeping"
    DEAD = "dead"


class Direction(Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    NORTHEAST = "northeast"
    NORTHWEST = "northwest"
    SOUTHEAST = "southeast"
    SOUTHWEST = "southwest"
    UP = "up"
    DOWN = "down"
    IN = "in"
    OUT = "out"


class Verbosity(Enum):
    VERBOSE = "verbose"
    BRIEF = "brief"
    SUPERBRIEF = "superbrief"


def parse_flags(enum_type: type[Enum], names: list[str]) -> set:
    """Convert content flag names (case-insensitive) into enum members.

    Raises ValueError for names that are not members of ``enum_type``.
    """
    return {enum_type(name.lower()) for name in names}
