"""Per-object and per-room special behaviour.

A Registry is built fresh for every game session by ``build_registry``.
Action handlers ask ``Registry.before`` first; a special handler either
returns an ActionResult (the action is fully handled) or None to fall
through to the generic behaviour.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..logging import get_logger
from .actors import Cyclops
from .daemons import put_out_match, strike_match
from .flags import ActorState, GlobalFlag, ObjectFlag
from .parser import Command
from .results import ActionResult, StateChange
from .state import CYCLOPS, MATCH, RUG, TRAP_DOOR, WATER, is_lit

if TYPE_CHECKING:
    from .commands import Game

logger = get_logger(__name__)

Special = Callable[["Game", Command], ActionResult | None]
RoomText = Callable[["Game", str], str | None]
EnterHook = Callable[["Game"], str | None]

KITCHEN_WINDOW = "KITCHEN-WINDOW"

WEST_OF_HOUSE = "WEST-OF-HOUSE"
EAST_OF_HOUSE = "EAST-OF-HOUSE"
KITCHEN = "KITCHEN"
LIVING_ROOM = "LIVING-ROOM"
CELLAR = "CELLAR"
SOUTH_TEMPLE = "SOUTH-TEMPLE"
CANYON_VIEW = "CANYON-VIEW"
CYCLOPS_ROOM = "CYCLOPS-ROOM"


class Registry:
    """Special handlers keyed by (verb, object) and (verb, room)."""

    def __init__(self):
        self._object_verbs: dict[tuple[str, str], Special] = {}
        self._room_verbs: dict[tuple[str, str], Special] = {}
        self._room_texts: dict[str, RoomText] = {}
        self._on_enter: dict[str, EnterHook] = {}

    def on_object(self, verbs: tuple[str, ...], obj_id: str, handler: Special) -> None:
        for verb in verbs:
            self._object_verbs[(verb, obj_id)] = handler

    def on_room(self, verbs: tuple[str, ...], room_id: str, handler: Special) -> None:
        for verb in verbs:
            self._room_verbs[(verb, room_id)] = handler

    def room_text(self, room_id: str, handler: RoomText) -> None:
        self._room_texts[room_id] = handler

    def on_enter(self, room_id: str, hook: EnterHook) -> None:
        self._on_enter[room_id] = hook

    def before(self, game: "Game", command: Command) -> ActionResult | None:
        """Run the first special that claims the command.

        The direct object is asked first, then the indirect object, then the
        current room.
        """
        candidates = []
        for obj_id in (command.direct, command.indirect):
            if obj_id is not None:
                candidates.append(self._object_verbs.get((command.verb, obj_id)))
        candidates.append(self._room_verbs.get((command.verb, game.state.current_room)))

        for handler in candidates:
            if handler is None:
                continue
            result = handler(game, command)
            if result is not None:
                logger.debug(
                    "special_handled", verb=command.verb, object_id=command.direct,
                    room=game.state.current_room,
                )
                return result
        return None

    def describe_room_text(self, game: "Game", room_id: str) -> str | None:
        """Room text that depends on the game state, or None for the stock text."""
        handler = self._room_texts.get(room_id)
        if handler is None:
            return None
        return handler(game, game.world.rooms[room_id].description)

    def entered(self, game: "Game", room_id: str) -> str | None:
        hook = self._on_enter.get(room_id)
        if hook is None:
            return None
        return hook(game)


def _move_rug(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if GlobalFlag.RUG_MOVED in state.flags:
        return ActionResult.failure(
            "Having moved the carpet previously, you find it impossible to move it again."
        )
    state.flags.add(GlobalFlag.RUG_MOVED)
    state.clear_flag(TRAP_DOOR, ObjectFlag.INVISIBLE)
    return ActionResult.ok(
        "With a great effort, the rug is moved to one side of the room, "
        "revealing the dusty cover of a closed trap door.",
        StateChange("flag_set", GlobalFlag.RUG_MOVED.value, False, True),
    )


def _take_rug(game: "Game", command: Command) -> ActionResult | None:
    return ActionResult.failure("The rug is extremely heavy and cannot be carried.")


def _open_trap_door(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if state.has_flag(TRAP_DOOR, ObjectFlag.OPEN):
        return None
    if state.current_room == CELLAR:
        if state.has_flag(TRAP_DOOR, ObjectFlag.TOUCHED):
            return ActionResult.failure("The door is locked from above.")
        return None
    state.set_flag(TRAP_DOOR, ObjectFlag.OPEN)
    return ActionResult.ok(
        "The door reluctantly opens to reveal a rickety staircase descending into darkness.",
        StateChange("flag_set", TRAP_DOOR, None, ObjectFlag.OPEN.value),
    )


def _close_trap_door(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if not state.has_flag(TRAP_DOOR, ObjectFlag.OPEN):
        return None
    state.clear_flag(TRAP_DOOR, ObjectFlag.OPEN)
    return ActionResult.ok(
        "The door swings shut and closes.",
        StateChange("flag_cleared", TRAP_DOOR, ObjectFlag.OPEN.value, None),
    )


def _open_window(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if state.has_flag(KITCHEN_WINDOW, ObjectFlag.OPEN):
        return None
    state.set_flag(KITCHEN_WINDOW, ObjectFlag.OPEN)
    return ActionResult.ok(
        "With great effort, you open the window far enough to allow entry.",
        StateChange("flag_set", KITCHEN_WINDOW, None, ObjectFlag.OPEN.value),
    )


def _close_window(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if not state.has_flag(KITCHEN_WINDOW, ObjectFlag.OPEN):
        return None
    state.clear_flag(KITCHEN_WINDOW, ObjectFlag.OPEN)
    return ActionResult.ok(
        "The window closes (more easily than it opened).",
        StateChange("flag_cleared", KITCHEN_WINDOW, ObjectFlag.OPEN.value, None),
    )


def _take_water(game: "Game", command: Command) -> ActionResult | None:
    return ActionResult.failure("The water slips through your fingers.")


def _pray_at_altar(game: "Game", command: Command) -> ActionResult | None:
    if not game.state.is_dead:
        return None
    return ActionResult.ok(game.death.revive())


def _jump_into_canyon(game: "Game", command: Command) -> ActionResult | None:
    return ActionResult.ok(game.death.kill("Nice view, lousy place to jump."))


def _light_match(game: "Game", command: Command) -> ActionResult | None:
    message = strike_match(game)
    if not game.state.has_flag(MATCH, ObjectFlag.ON):
        return ActionResult.failure(message)
    return ActionResult.ok(message, StateChange("flag_set", MATCH, None, ObjectFlag.ON.value))


def _extinguish_match(game: "Game", command: Command) -> ActionResult | None:
    state = game.state
    if not state.has_flag(MATCH, ObjectFlag.ON):
        return ActionResult.failure("It is already off.")
    put_out_match(game)
    message = "The match is out."
    if not is_lit(game.world, state):
        message = f"{message}\n\nIt is now pitch black."
    return ActionResult.ok(message, StateChange("flag_cleared", MATCH, ObjectFlag.ON.value, None))


def _cyclops(game: "Game") -> Cyclops | None:
    actor = game.actors.get(CYCLOPS)
    if isinstance(actor, Cyclops) and actor.is_alive(game) and actor.is_here(game):
        return actor
    return None


def _wake_cyclops(game: "Game", command: Command) -> ActionResult | None:
    cyclops = _cyclops(game)
    if cyclops is None:
        return None
    if cyclops.record(game).state != ActorState.SLEEPING:
        return ActionResult.failure("The cyclops is wide awake already.")
    return ActionResult.ok("\n".join(cyclops.wake(game)))


def _say_odysseus(game: "Game", command: Command) -> ActionResult | None:
    cyclops = _cyclops(game)
    if cyclops is None:
        return None
    return ActionResult.ok("\n".join(cyclops.flee(game)))


def _cellar_entered(game: "Game") -> str | None:
    """The trap door slams behind the player the first time down."""
    state = game.state
    if state.previous_room != LIVING_ROOM:
        return None
    if not state.has_flag(TRAP_DOOR, ObjectFlag.OPEN) or state.has_flag(
        TRAP_DOOR, ObjectFlag.TOUCHED
    ):
        return None
    state.clear_flag(TRAP_DOOR, ObjectFlag.OPEN)
    state.set_flag(TRAP_DOOR, ObjectFlag.TOUCHED)
    logger.debug("trap_door_barred", moves=state.moves)
    return "The trap door crashes shut, and you hear someone barring it."


def _west_of_house_text(game: "Game", base: str) -> str | None:
    if GlobalFlag.WON_FLAG not in game.state.flags:
        return None
    return f"{base} A secret path leads southwest into the forest."


def _window_text(game: "Game", base: str) -> str | None:
    if not game.state.has_flag(KITCHEN_WINDOW, ObjectFlag.OPEN):
        return None
    return base.replace("which is slightly ajar.", "which is open.")


_LIVING_ROOM = (
    "You are in the living room. There is a doorway to the east, a wooden "
    "door with strange gothic lettering to the west, which appears to be "
    "nailed shut, a trophy case, "
)
_LIVING_ROOM_MAGIC = (
    "You are in the living room. There is a doorway to the east. To the west "
    "is a cyclops-shaped opening in an old wooden door, above which is some "
    "strange gothic lettering, a trophy case, "
)


def _living_room_text(game: "Game", base: str) -> str | None:
    state = game.state
    rug_moved = GlobalFlag.RUG_MOVED in state.flags
    door_open = state.has_flag(TRAP_DOOR, ObjectFlag.OPEN)
    match (rug_moved, door_open):
        case (True, True):
            tail = "and a rug lying beside an open trap door."
        case (True, False):
            tail = "and a closed trap door at your feet."
        case (False, True):
            tail = "and an open trap door at your feet."
        case _:
            tail = "and a large oriental rug in the center of the room."
    prefix = _LIVING_ROOM_MAGIC if GlobalFlag.MAGIC_FLAG in state.flags else _LIVING_ROOM
    return prefix + tail


def build_registry() -> Registry:
    """Register the dungeon's special behaviour for one game session."""
    registry = Registry()

    registry.on_object(("move",), RUG, _move_rug)
    registry.on_object(("take",), RUG, _take_rug)
    registry.on_object(("open",), TRAP_DOOR, _open_trap_door)
    registry.on_object(("close",), TRAP_DOOR, _close_trap_door)
    registry.on_object(("open",), KITCHEN_WINDOW, _open_window)
    registry.on_object(("close",), KITCHEN_WINDOW, _close_window)
    registry.on_object(("take",), WATER, _take_water)
    registry.on_object(("wake",), CYCLOPS, _wake_cyclops)
    registry.on_object(("light",), MATCH, _light_match)
    registry.on_object(("extinguish",), MATCH, _extinguish_match)

    registry.on_room(("pray",), SOUTH_TEMPLE, _pray_at_altar)
    registry.on_room(("jump",), CANYON_VIEW, _jump_into_canyon)
    registry.on_room(("odysseus",), CYCLOPS_ROOM, _say_odysseus)

    registry.on_enter(CELLAR, _cellar_entered)

    registry.room_text(WEST_OF_HOUSE, _west_of_house_text)
    registry.room_text(EAST_OF_HOUSE, _window_text)
    registry.room_text(KITCHEN, _window_text)
    registry.room_text(LIVING_ROOM, _living_room_text)
    return registry
