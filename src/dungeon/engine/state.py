"""Mutable per-player game state.

All values are strings, ints, enums and containers of those. No World
references are held, so the state can be snapshotted to plain JSON
(see ``snapshot.py``) and rebuilt against the shared World.
"""

from dataclasses import dataclass, field

from .flags import ActorState, GlobalFlag, ObjectFlag, Verbosity
from .results import InvariantViolation, StateChange
from .world import PLAYER, World

# Key object ids
MAILBOX = "MAILBOX"
LEAFLET = "LEAFLET"
LAMP = "LAMP"
CANDLES = "CANDLES"
SWORD = "SWORD"
RUG = "RUG"
TRAP_DOOR = "TRAP-DOOR"
TROPHY_CASE = "TROPHY-CASE"
COFFIN = "COFFIN"
LUNCH = "LUNCH"
WATER = "WATER"
BOTTLE = "BOTTLE"
TROLL = "TROLL"
AXE = "AXE"
THIEF = "THIEF"
STILETTO = "STILETTO"
CYCLOPS = "CYCLOPS"
MATCH = "MATCH"

# Home rooms used when resurrecting
LAMP_HOME = "LIVING-ROOM"
COFFIN_HOME = "EGYPT-ROOM"

# Named variables
WOUNDS = "wounds"
CYCLOPS_WRATH = "cyclops_wrath"
MATCH_COUNT = "matches"

MATCHES_IN_BOOK = 5


@dataclass
class EventRecord:
    """Scheduler bookkeeping for one daemon or interrupt."""

    id: str
    enabled: bool = False
    daemon: bool = False
    ticks: int = 0
    stage: int = 0
    last_run: int = -1


@dataclass
class ActorRecord:
    """Mutable state of one NPC, keyed by the id of its object."""

    id: str
    state: ActorState = ActorState.NORMAL
    strength: int = 0
    health: int = 0
    knocked_out_on: int = -1


@dataclass
class GameState:
    """All mutable per-player state."""

    current_room: str = ""
    previous_room: str = ""

    # Held object ids in pick-up order; mirrors locations equal to PLAYER
    inventory: list[str] = field(default_factory=list)
    # Object locations: obj_id -> room id, container id, PLAYER or None
    object_locations: dict[str, str | None] = field(default_factory=dict)
    object_flags: dict[str, set[ObjectFlag]] = field(default_factory=dict)
    # Treasure values changed during play (the sword loses its value on death)
    treasure_overrides: dict[str, int] = field(default_factory=dict)

    visited_rooms: set[str] = field(default_factory=set)
    scored_objects: set[str] = field(default_factory=set)

    score: int = 0
    moves: int = 0
    deaths: int = 0
    flags: set[GlobalFlag] = field(default_factory=set)
    variables: dict[str, int] = field(default_factory=dict)
    verbosity: Verbosity = Verbosity.BRIEF

    last_command: str | None = None
    last_object: str | None = None

    events: dict[str, EventRecord] = field(default_factory=dict)
    actors: dict[str, ActorRecord] = field(default_factory=dict)

    @property
    def game_over(self) -> bool:
        return GlobalFlag.GAME_OVER in self.flags

    @property
    def is_dead(self) -> bool:
        return GlobalFlag.DEAD in self.flags

    def has_flag(self, obj_id: str, flag: ObjectFlag) -> bool:
        return flag in self.object_flags.get(obj_id, ())

    def set_flag(self, obj_id: str, flag: ObjectFlag) -> None:
        self.object_flags.setdefault(obj_id, set()).add(flag)

    def clear_flag(self, obj_id: str, flag: ObjectFlag) -> None:
        self.object_flags.get(obj_id, set()).discard(flag)

    def location_of(self, obj_id: str) -> str | None:
        return self.object_locations.get(obj_id)

    def is_held(self, obj_id: str) -> bool:
        return self.object_locations.get(obj_id) == PLAYER

    def contents(self, location: str) -> list[str]:
        """Objects directly inside a room, container or the player."""
        if location == PLAYER:
            return list(self.inventory)
        return [o for o, loc in self.object_locations.items() if loc == location]


def _size(world: World, obj_id: str) -> int:
    return world.objects[obj_id].size


def weight(world: World, state: GameState, obj_id: str) -> int:
    """Size of an object plus everything inside it."""
    return _size(world, obj_id) + sum(
        weight(world, state, inner) for inner in state.contents(obj_id)
    )


def inventory_weight(world: World, state: GameState) -> int:
    return sum(weight(world, state, obj_id) for obj_id in state.inventory)


def contents_size(world: World, state: GameState, container: str) -> int:
    return sum(weight(world, state, inner) for inner in state.contents(container))


def treasure_value(world: World, state: GameState, obj_id: str) -> int:
    if obj_id in state.treasure_overrides:
        return state.treasure_overrides[obj_id]
    return world.objects[obj_id].treasure_value


def is_inside(state: GameState, obj_id: str, ancestor: str) -> bool:
    """True when ``obj_id`` is (transitively) contained by ``ancestor``."""
    location = state.location_of(obj_id)
    seen = set()
    while location is not None and location not in seen:
        if location == ancestor:
            return True
        seen.add(location)
        location = state.location_of(location)
    return False


def room_of(world: World, state: GameState, obj_id: str) -> str | None:
    """The room an object is ultimately in (the player's room if held)."""
    location = state.location_of(obj_id)
    seen = set()
    while location is not None and location not in seen:
        if location == PLAYER:
            return state.current_room
        if location in world.rooms:
            return location
        seen.add(location)
        location = state.location_of(location)
    return None


def reveals_contents(state: GameState, obj_id: str) -> bool:
    """True for containers whose contents can be seen from outside."""
    return state.has_flag(obj_id, ObjectFlag.CONTAINER) and (
        state.has_flag(obj_id, ObjectFlag.OPEN)
        or state.has_flag(obj_id, ObjectFlag.TRANSPARENT)
    )


def visible_contents(world: World, state: GameState, location: str) -> list[str]:
    """Objects in a location, descending into open or transparent containers."""
    found = []
    for obj_id in state.contents(location):
        if state.has_flag(obj_id, ObjectFlag.INVISIBLE):
            continue
        found.append(obj_id)
        if reveals_contents(state, obj_id):
            found.extend(visible_contents(world, state, obj_id))
    return found


def is_lit(world: World, state: GameState) -> bool:
    """Whether the player can see in the current room."""
    if GlobalFlag.ALWAYS_LIT in state.flags:
        return True
    if world.rooms[state.current_room].is_lit:
        return True
    nearby = visible_contents(world, state, PLAYER) + visible_contents(
        world, state, state.current_room
    )
    return any(
        state.has_flag(o, ObjectFlag.LIGHT) and state.has_flag(o, ObjectFlag.ON)
        for o in nearby
    )


def move_object(
    world: World, state: GameState, obj_id: str, destination: str | None,
) -> StateChange:
    """Relocate an object, keeping inventory and locations consistent.

    This is the only place locations change. Raises InvariantViolation when
    the destination does not exist, is not a container, is full, or would
    place an object inside itself.
    """
    if obj_id not in world.objects:
        raise InvariantViolation("unknown object", object_id=obj_id)

    if destination is not None and destination != PLAYER:
        if destination in world.objects:
            if not state.has_flag(destination, ObjectFlag.CONTAINER) and not (
                state.has_flag(destination, ObjectFlag.ACTOR)
            ):
                raise InvariantViolation(
                    "destination is not a container",
                    object_id=obj_id, destination=destination,
                )
            if destination == obj_id or is_inside(state, destination, obj_id):
                raise InvariantViolation(
                    "object cannot contain itself",
                    object_id=obj_id, destination=destination,
                )
            capacity = world.objects[destination].capacity
            needed = contents_size(world, state, destination) + weight(world, state, obj_id)
            if capacity and needed > capacity:
                raise InvariantViolation(
                    "container overflow",
                    object_id=obj_id, destination=destination,
                )
        elif destination not in world.rooms:
            raise InvariantViolation(
                "unknown location", object_id=obj_id, destination=destination,
            )

    old = state.object_locations.get(obj_id)
    if old == PLAYER:
        state.inventory.remove(obj_id)
    state.object_locations[obj_id] = destination
    if destination == PLAYER:
        state.inventory.append(obj_id)
    return StateChange("object_moved", obj_id, old, destination)


def check_integrity(world: World, state: GameState) -> None:
    """Verify every location invariant; raise InvariantViolation on the first miss."""
    held = [o for o, loc in state.object_locations.items() if loc == PLAYER]
    if sorted(held) != sorted(state.inventory):
        raise InvariantViolation("inventory out of sync", inventory=state.inventory)
    if len(set(state.inventory)) != len(state.inventory):
        raise InvariantViolation("duplicate inventory entry", inventory=state.inventory)
    for obj_id, loc in state.object_locations.items():
        if loc is None or loc == PLAYER or loc in world.rooms:
            continue
        if loc not in world.objects:
            raise InvariantViolation("unknown location", object_id=obj_id, destination=loc)
        if not (
            state.has_flag(loc, ObjectFlag.CONTAINER)
            or state.has_flag(loc, ObjectFlag.ACTOR)
        ):
            raise InvariantViolation(
                "destination is not a container", object_id=obj_id, destination=loc,
            )
    for obj_id, obj in world.objects.items():
        if obj.capacity and contents_size(world, state, obj_id) > obj.capacity:
            raise InvariantViolation("container overflow", object_id=obj_id)


def new_game_state(world: World) -> GameState:
    """Create a fresh game state with objects in their starting positions."""
    state = GameState(current_room=world.start_room, previous_room=world.start_room)

    for obj_id, obj in world.objects.items():
        state.object_locations[obj_id] = obj.location
        state.object_flags[obj_id] = set(obj.flags)
        if obj.location == PLAYER:
            state.inventory.append(obj_id)

    state.visited_rooms.add(world.start_room)
    state.flags.add(GlobalFlag.LUCKY)
    state.variables[WOUNDS] = 0
    state.variables[CYCLOPS_WRATH] = 0
    if MATCH in world.objects:
        state.variables[MATCH_COUNT] = MATCHES_IN_BOOK
    return state
