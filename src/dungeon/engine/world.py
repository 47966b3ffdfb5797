"""Immutable data structures for the dungeon.

These are loaded once from the content file at startup and shared across all
players. Everything that changes during play lives in ``state.GameState``.
"""

from dataclasses import dataclass, field

from .conditions import Condition
from .flags import Direction, ObjectFlag, RoomFlag

# Pseudo-location for objects held by the player
PLAYER = "PLAYER"


@dataclass(frozen=True)
class Exit:
    """A way out of a room, possibly blocked or conditional."""

    direction: Direction
    destination: str | None
    message: str = ""
    condition: Condition | None = None


@dataclass
class Room:
    """A location in the game world."""

    id: str
    name: str
    description: str = ""
    exits: list[Exit] = field(default_factory=list)
    flags: frozenset[RoomFlag] = frozenset()
    global_objects: tuple[str, ...] = ()

    def exits_for(self, direction: Direction) -> list[Exit]:
        """All exits in a direction, in content order.

        Several entries may share a direction; the first whose condition holds
        decides where (or whether) the player goes.
        """
        return [e for e in self.exits if e.direction == direction]

    @property
    def is_lit(self) -> bool:
        return RoomFlag.LIT in self.flags


@dataclass
class Obj:
    """An object in the game world, as defined by content."""

    id: str
    name: str
    synonyms: tuple[str, ...] = ()
    adjectives: tuple[str, ...] = ()
    description: str = ""
    first_description: str = ""
    long_description: str = ""
    text: str = ""
    location: str | None = None
    flags: frozenset[ObjectFlag] = frozenset()
    capacity: int = 0
    size: int = 0
    value: int = 0
    treasure_value: int = 0
    strength: int = 0


@dataclass
class World:
    """The complete immutable game world, loaded from the content file."""

    rooms: dict[str, Room] = field(default_factory=dict)
    objects: dict[str, Obj] = field(default_factory=dict)
    start_room: str = ""
    respawn_room: str = ""
    hades_room: str = ""
    temple_room: str = ""
    trophy_case: str = ""
    treasure_room: str = ""
    above_ground: tuple[str, ...] = ()
    max_load: int = 100
    rank_table: tuple[tuple[int, str], ...] = ()

    @property
    def max_score(self) -> int:
        return sum(o.value + o.treasure_value for o in self.objects.values())
