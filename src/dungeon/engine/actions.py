"""Verb handlers and the dispatch boundary.

Every handler has the signature ``handler(game, command) -> ActionResult``.
A refusal is an ``ActionResult.failure`` and leaves the state untouched;
checks always run before the first mutation. ``dispatch`` consults the
game's Registry for special behaviour before the generic handler runs, and
is the only place an InvariantViolation raised by a handler is caught.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from ..logging import get_logger
from .combat import player_strength
from .conditions import check_condition
from .daemons import (
    CURE_EVENT,
    CURE_INTERVAL,
    resume_light,
    suspend_light,
    watch_sword,
)
from .describe import (
    describe_inventory,
    describe_object,
    describe_room,
    join_names,
    with_article,
)
from .flags import Direction, GlobalFlag, ObjectFlag, Verbosity
from .parser import Command
from .results import ActionResult, InvariantViolation, StateChange
from .scoring import award_take, note_move, score_message
from .state import (
    SWORD,
    WOUNDS,
    contents_size,
    inventory_weight,
    is_inside,
    is_lit,
    move_object,
    reveals_contents,
    weight,
)
from .world import PLAYER

if TYPE_CHECKING:
    from .commands import Game

logger = get_logger(__name__)

Handler = Callable[["Game", Command], ActionResult]

WORLD_BROKEN = "Something seems to be wrong with the world."
NO_EXIT = "You can't go that way."
GRUE_CHANCE = 0.8
GRUE = "Oh, no! You have walked into the slavering fangs of a lurking grue!"

_TAKE_REFUSALS = (
    "A valiant attempt.",
    "You can't be serious.",
    "An interesting idea...",
    "What a concept!",
)

# Verbs a ghost may still use
GHOST_VERBS = frozenset((
    "go", "look", "pray", "score", "verbose", "brief", "superbrief", "quit",
    "wait", "again",
))

_GHOST_REFUSALS = {
    "take": "Your hand passes through its object.",
    "drop": "You have no possessions.",
    "inventory": "You have no possessions.",
    "attack": "All such attacks are vain in your condition.",
    "diagnose": "You are dead.",
}

# Verbs that accept ALL and lists of objects
MULTI_VERBS = frozenset(("take", "drop"))


def room_text(game: "Game", *, look: bool = False, first_visit: bool = False) -> str:
    """Render the current room with any state-dependent wording applied."""
    return describe_room(
        game.world,
        game.state,
        look=look,
        first_visit=first_visit,
        description=game.registry.describe_room_text(game, game.state.current_room),
    )


def enter_room(game: "Game", room_id: str) -> str:
    """Move the player into a room and describe the arrival."""
    state = game.state
    state.previous_room = state.current_room
    state.current_room = room_id
    first_visit = room_id not in state.visited_rooms
    state.visited_rooms.add(room_id)

    parts = []
    arrival = game.registry.entered(game, room_id)
    if arrival:
        parts.append(arrival)
    parts.append(room_text(game, first_visit=first_visit))
    return "\n\n".join(parts)


def _name(game: "Game", obj_id: str) -> str:
    return game.world.objects[obj_id].name


def _listed(lines: list[tuple[str, ActionResult]]) -> ActionResult:
    """Combine per-object results for TAKE/DROP with several objects."""
    message = "\n".join(f"{name}: {result.message}" for name, result in lines)
    changes = [change for _, result in lines for change in result.changes]
    return ActionResult(any(result.success for _, result in lines), message, changes)


def _cmd_go(game: "Game", command: Command) -> ActionResult:
    """Handle movement in a direction."""
    world, state = game.world, game.state
    if command.direction is None:
        return ActionResult.failure("Where do you want to go?")

    exits = world.rooms[state.current_room].exits_for(command.direction)
    if not exits:
        return ActionResult.failure(NO_EXIT)

    chosen = None
    refusal = NO_EXIT
    for candidate in exits:
        if check_condition(state, candidate.condition):
            chosen = candidate
            break
        if refusal == NO_EXIT and candidate.message:
            refusal = candidate.message
    if chosen is None:
        return ActionResult.failure(refusal)
    if chosen.destination is None:
        return ActionResult.failure(chosen.message or NO_EXIT)

    if not is_lit(world, state) and game.rng.chance(GRUE_CHANCE):
        return ActionResult.ok(game.death.kill(GRUE))

    old = state.current_room
    text = enter_room(game, chosen.destination)
    return ActionResult.ok(text, StateChange("player_moved", PLAYER, old, chosen.destination))


def _cmd_climb(game: "Game", command: Command) -> ActionResult:
    """Handle CLIMB <object>: climbing something climbable goes up."""
    if command.direct is not None and not game.state.has_flag(
        command.direct, ObjectFlag.CLIMBABLE
    ):
        return ActionResult.failure(f"You can't climb the {_name(game, command.direct)}.")
    return _cmd_go(game, replace(command, verb="go", direction=Direction.UP))


def _cmd_enter(game: "Game", command: Command) -> ActionResult:
    return _cmd_go(game, replace(command, verb="go", direction=Direction.IN))


def _cmd_exit(game: "Game", command: Command) -> ActionResult:
    return _cmd_go(game, replace(command, verb="go", direction=Direction.OUT))


def _cmd_look(game: "Game", command: Command) -> ActionResult:
    """Handle LOOK."""
    return ActionResult.ok(room_text(game, look=True))


def _cmd_examine(game: "Game", command: Command) -> ActionResult:
    """Handle EXAMINE/LOOK AT."""
    return ActionResult.ok(describe_object(game.world, game.state, command.direct))


def _cmd_read(game: "Game", command: Command) -> ActionResult:
    """Handle READ."""
    obj = game.world.objects[command.direct]
    if not game.state.has_flag(obj.id, ObjectFlag.READABLE) or not obj.text:
        return ActionResult.failure(f"How does one read {with_article(obj.name)}?")
    return ActionResult.ok(obj.text)


def _cmd_inventory(game: "Game", command: Command) -> ActionResult:
    """Handle INVENTORY."""
    return ActionResult.ok(describe_inventory(game.world, game.state))


def _take_one(game: "Game", obj_id: str) -> ActionResult:
    world, state = game.world, game.state
    obj = world.objects[obj_id]

    if state.is_held(obj_id):
        return ActionResult.failure("You already have that!")
    if not state.has_flag(obj_id, ObjectFlag.TAKEABLE):
        return ActionResult.failure(game.rng.choice(_TAKE_REFUSALS))

    container = state.location_of(obj_id)
    if container in world.objects and not state.has_flag(container, ObjectFlag.OPEN):
        return ActionResult.failure(f"The {_name(game, container)} is closed.")
    if not is_inside(state, obj_id, PLAYER) and (
        inventory_weight(world, state) + weight(world, state, obj_id) > world.max_load
    ):
        return ActionResult.failure("Your load is too heavy.")

    change = move_object(world, state, obj_id, PLAYER)
    note_move(world, state, obj_id, container, PLAYER)
    award_take(world, state, obj_id)
    state.set_flag(obj_id, ObjectFlag.TOUCHED)
    if state.has_flag(obj_id, ObjectFlag.ON):
        resume_light(game, obj_id)
    if obj_id == SWORD:
        watch_sword(game)
    logger.debug("object_taken", object_id=obj.id, source=container)
    return ActionResult.ok("Taken.", change)


def _takeable_here(game: "Game") -> list[str]:
    """Objects TAKE ALL considers: loose items in the room and on open surfaces."""
    state = game.state
    if not is_lit(game.world, state):
        return []
    found = []
    for obj_id in state.contents(state.current_room):
        if state.has_flag(obj_id, ObjectFlag.INVISIBLE):
            continue
        if state.has_flag(obj_id, ObjectFlag.TAKEABLE):
            found.append(obj_id)
        elif state.has_flag(obj_id, ObjectFlag.SURFACE) and reveals_contents(state, obj_id):
            found.extend(
                o for o in state.contents(obj_id)
                if state.has_flag(o, ObjectFlag.TAKEABLE)
                and not state.has_flag(o, ObjectFlag.INVISIBLE)
            )
    return found


def _special_or(game: "Game", command: Command, obj_id: str, action: Handler) -> ActionResult:
    """Run one object of a multi-object command through the Registry first."""
    single = replace(command, direct=obj_id, extra=(), all_objects=False)
    special = game.registry.before(game, single)
    if special is not None:
        return special
    return action(game, single)


def _cmd_take(game: "Game", command: Command) -> ActionResult:
    """Handle TAKE/GET, including TAKE ALL and TAKE X FROM Y."""
    state = game.state
    if command.all_objects or command.extra:
        targets = list(command.objects)
        if command.all_objects:
            targets += [o for o in _takeable_here(game) if o not in targets]
            if not targets:
                return ActionResult.failure("There's nothing here you can take.")
        return _listed([
            (_name(game, o), _special_or(game, command, o, lambda g, c: _take_one(g, c.direct)))
            for o in targets
        ])

    if command.indirect is not None and state.location_of(command.direct) != command.indirect:
        return ActionResult.failure(
            f"The {_name(game, command.direct)} isn't in the {_name(game, command.indirect)}."
        )
    return _take_one(game, command.direct)


def _drop_one(game: "Game", obj_id: str) -> ActionResult:
    world, state = game.world, game.state
    if not is_inside(state, obj_id, PLAYER):
        return ActionResult.failure("You don't have that.")
    old = state.location_of(obj_id)
    change = move_object(world, state, obj_id, state.current_room)
    note_move(world, state, obj_id, old, state.current_room)
    return ActionResult.ok("Dropped.", change)


def _cmd_drop(game: "Game", command: Command) -> ActionResult:
    """Handle DROP, including DROP ALL."""
    if command.all_objects or command.extra:
        targets = list(command.objects)
        if command.all_objects:
            targets += [o for o in game.state.inventory if o not in targets]
            if not targets:
                return ActionResult.failure("You are empty-handed.")
        return _listed([
            (_name(game, o), _special_or(game, command, o, lambda g, c: _drop_one(g, c.direct)))
            for o in targets
        ])
    return _drop_one(game, command.direct)


def _cmd_put(game: "Game", command: Command) -> ActionResult:
    """Handle PUT X IN/ON Y."""
    world, state = game.world, game.state
    item, target = command.direct, command.indirect

    if not is_inside(state, item, PLAYER):
        return ActionResult.failure(f"You don't have the {_name(game, item)}.")
    if item == target or is_inside(state, target, item):
        return ActionResult.failure("How can you do that?")
    if not state.has_flag(target, ObjectFlag.CONTAINER):
        return ActionResult.failure("You can't do that.")
    if not state.has_flag(target, ObjectFlag.OPEN):
        return ActionResult.failure(f"The {_name(game, target)} isn't open.")
    capacity = world.objects[target].capacity
    if capacity and contents_size(world, state, target) + weight(world, state, item) > capacity:
        return ActionResult.failure("There's no room.")

    old = state.location_of(item)
    change = move_object(world, state, item, target)
    note_move(world, state, item, old, target)
    state.set_flag(item, ObjectFlag.TOUCHED)
    return ActionResult.ok("Done.", change)


def _cmd_open(game: "Game", command: Command) -> ActionResult:
    """Handle OPEN."""
    world, state = game.world, game.state
    obj_id = command.direct
    name = _name(game, obj_id)
    if not (
        state.has_flag(obj_id, ObjectFlag.CONTAINER) or state.has_flag(obj_id, ObjectFlag.DOOR)
    ) or state.has_flag(obj_id, ObjectFlag.SURFACE):
        return ActionResult.failure(f"You must tell me how to do that to {with_article(name)}.")
    if state.has_flag(obj_id, ObjectFlag.OPEN):
        return ActionResult.failure("It is already open.")

    was_visible = reveals_contents(state, obj_id)
    state.set_flag(obj_id, ObjectFlag.OPEN)
    change = StateChange("flag_set", obj_id, None, ObjectFlag.OPEN.value)
    inside = [
        o for o in state.contents(obj_id) if not state.has_flag(o, ObjectFlag.INVISIBLE)
    ]
    if state.has_flag(obj_id, ObjectFlag.CONTAINER) and inside and not was_visible:
        names = join_names([with_article(world.objects[o].name) for o in inside])
        return ActionResult.ok(f"Opening the {name} reveals {names}.", change)
    return ActionResult.ok("Opened.", change)


def _cmd_close(game: "Game", command: Command) -> ActionResult:
    """Handle CLOSE."""
    state = game.state
    obj_id = command.direct
    if not (
        state.has_flag(obj_id, ObjectFlag.CONTAINER) or state.has_flag(obj_id, ObjectFlag.DOOR)
    ) or state.has_flag(obj_id, ObjectFlag.SURFACE):
        return ActionResult.failure(
            f"You must tell me how to do that to {with_article(_name(game, obj_id))}."
        )
    if not state.has_flag(obj_id, ObjectFlag.OPEN):
        return ActionResult.failure("It is already closed.")
    state.clear_flag(obj_id, ObjectFlag.OPEN)
    return ActionResult.ok(
        "Closed.", StateChange("flag_cleared", obj_id, ObjectFlag.OPEN.value, None),
    )


def _cmd_move(game: "Game", command: Command) -> ActionResult:
    """Handle MOVE."""
    return ActionResult.ok(f"Moving the {_name(game, command.direct)} reveals nothing.")


def _cmd_light(game: "Game", command: Command) -> ActionResult:
    """Handle LIGHT/TURN ON."""
    world, state = game.world, game.state
    obj_id = command.direct
    name = _name(game, obj_id)
    if not state.has_flag(obj_id, ObjectFlag.LIGHT):
        return ActionResult.failure("You can't turn that on.")
    if state.has_flag(obj_id, ObjectFlag.BURNED_OUT):
        return ActionResult.failure("A burned-out lamp won't light.")
    if state.has_flag(obj_id, ObjectFlag.ON):
        return ActionResult.failure("It is already on.")

    was_lit = is_lit(world, state)
    state.set_flag(obj_id, ObjectFlag.ON)
    state.set_flag(obj_id, ObjectFlag.TOUCHED)
    resume_light(game, obj_id)
    message = f"The {name} is now on."
    if not was_lit:
        message = f"{message}\n\n{room_text(game, look=True)}"
    return ActionResult.ok(message, StateChange("flag_set", obj_id, None, ObjectFlag.ON.value))


def _cmd_extinguish(game: "Game", command: Command) -> ActionResult:
    """Handle EXTINGUISH/TURN OFF."""
    world, state = game.world, game.state
    obj_id = command.direct
    if not state.has_flag(obj_id, ObjectFlag.LIGHT):
        return ActionResult.failure("You can't turn that off.")
    if not state.has_flag(obj_id, ObjectFlag.ON):
        return ActionResult.failure("It is already off.")

    state.clear_flag(obj_id, ObjectFlag.ON)
    suspend_light(game, obj_id)
    message = f"The {_name(game, obj_id)} is now off."
    if not is_lit(world, state):
        message = f"{message}\n\nIt is now pitch black."
    return ActionResult.ok(message, StateChange("flag_cleared", obj_id, ObjectFlag.ON.value, None))


def _cmd_eat(game: "Game", command: Command) -> ActionResult:
    """Handle EAT."""
    obj_id = command.direct
    if not game.state.has_flag(obj_id, ObjectFlag.FOOD):
        return ActionResult.failure(
            f"I don't think that the {_name(game, obj_id)} would agree with you."
        )
    change = move_object(game.world, game.state, obj_id, None)
    return ActionResult.ok("Thank you very much. It really hit the spot.", change)


def _cmd_drink(game: "Game", command: Command) -> ActionResult:
    """Handle DRINK."""
    world, state = game.world, game.state
    obj_id = command.direct
    if not state.has_flag(obj_id, ObjectFlag.DRINK):
        return ActionResult.failure(
            f"I don't think that the {_name(game, obj_id)} would agree with you."
        )
    container = state.location_of(obj_id)
    if container in world.objects and not state.has_flag(container, ObjectFlag.OPEN):
        return ActionResult.failure(f"You'll have to open the {_name(game, container)} first.")
    change = move_object(world, state, obj_id, None)
    return ActionResult.ok(
        "Thank you very much. I was rather thirsty (from all this talking, probably).",
        change,
    )


def _held_weapon(game: "Game") -> str | None:
    state = game.state
    return next(
        (o for o in state.inventory if state.has_flag(o, ObjectFlag.WEAPON)), None,
    )


def _cmd_attack(game: "Game", command: Command) -> ActionResult:
    """Handle ATTACK X [WITH Y]; uses the first weapon carried if none is named."""
    state = game.state
    target = command.direct
    name = _name(game, target)
    actor = game.actors.get(target)
    if actor is None or not state.has_flag(target, ObjectFlag.ACTOR):
        return ActionResult.failure(f"I've known strange people, but fighting {with_article(name)}?")

    weapon = command.indirect or _held_weapon(game)
    if weapon is None:
        return ActionResult.failure(
            f"Trying to attack {with_article(name)} with your bare hands is suicidal."
        )
    if not is_inside(state, weapon, PLAYER):
        return ActionResult.failure(f"You don't have the {_name(game, weapon)}.")
    if not state.has_flag(weapon, ObjectFlag.WEAPON):
        return ActionResult.failure(
            f"Trying to attack {with_article(name)} with {with_article(_name(game, weapon))} is suicidal."
        )
    return ActionResult.ok("\n".join(actor.on_attacked(game, weapon)))


def _cmd_give(game: "Game", command: Command) -> ActionResult:
    """Handle GIVE X TO Y."""
    state = game.state
    item, recipient = command.direct, command.indirect
    if not is_inside(state, item, PLAYER):
        return ActionResult.failure(f"You don't have the {_name(game, item)}.")
    actor = game.actors.get(recipient)
    if actor is None or not state.has_flag(recipient, ObjectFlag.ACTOR):
        return ActionResult.failure(
            f"You can't give {with_article(_name(game, item))} to "
            f"{with_article(_name(game, recipient))}!"
        )
    return ActionResult.ok("\n".join(actor.on_receive_item(game, item)))


def _cmd_wake(game: "Game", command: Command) -> ActionResult:
    """Handle WAKE for anything the Registry does not claim."""
    return ActionResult.failure(f"The {_name(game, command.direct)} isn't sleeping.")


def _cmd_say(game: "Game", command: Command) -> ActionResult:
    """Handle SAY; the magic word is passed on as if typed alone."""
    text = command.text.strip().strip('"').lower()
    if not text:
        return ActionResult.failure("What do you want to say?")
    if text in ("odysseus", "ulysses"):
        return dispatch(game, Command("odysseus"))
    return ActionResult.ok("Talking to yourself is a sign of impending mental collapse.")


def _wound_text(wounds: int, cure_in: int) -> str:
    if wounds == 0:
        return "You are in perfect health."
    match wounds:
        case 1:
            kind = "a light wound"
        case 2:
            kind = "a serious wound"
        case 3:
            kind = "several wounds"
        case _:
            kind = "serious wounds"
    return f"You have {kind}, which will be cured after {cure_in} moves."


def _strength_text(remaining: int) -> str:
    match remaining:
        case r if r <= 0:
            return "You are at death's door."
        case 1:
            return "You can be killed by one more light wound."
        case 2:
            return "You can be killed by a serious wound."
        case 3:
            return "You can survive one serious wound."
    return "You can survive several wounds."


def _cmd_diagnose(game: "Game", command: Command) -> ActionResult:
    """Handle DIAGNOSE."""
    state = game.state
    wounds = state.variables.get(WOUNDS, 0)
    record = state.events.get(CURE_EVENT)
    ticks = record.ticks if record is not None and record.enabled else CURE_INTERVAL
    lines = [
        _wound_text(wounds, ticks + CURE_INTERVAL * max(0, wounds - 1)),
        _strength_text(player_strength(game.world, state) - wounds),
    ]
    if state.deaths == 1:
        lines.append("You have been killed once.")
    elif state.deaths > 1:
        lines.append(f"You have been killed {state.deaths} times.")
    return ActionResult.meta("\n".join(lines))


def _cmd_score(game: "Game", command: Command) -> ActionResult:
    """Handle SCORE."""
    return ActionResult.meta(score_message(game.world, game.state))


def _set_verbosity(level: Verbosity, message: str) -> Handler:
    def handler(game: "Game", command: Command) -> ActionResult:
        game.state.verbosity = level
        return ActionResult.meta(message)
    return handler


def _cmd_quit(game: "Game", command: Command) -> ActionResult:
    """Handle QUIT."""
    state = game.state
    state.flags.add(GlobalFlag.GAME_OVER)
    logger.info("game_quit", moves=state.moves, score=state.score)
    return ActionResult.meta(score_message(game.world, state))


def _static_response(msg: str, *, success: bool = True) -> Handler:
    """Create a handler that always returns a fixed message."""
    def handler(game: "Game", command: Command) -> ActionResult:
        return ActionResult.ok(msg) if success else ActionResult.failure(msg)
    return handler


VERB_HANDLERS: dict[str, Handler] = {
    "go": _cmd_go,
    "climb": _cmd_climb,
    "enter": _cmd_enter,
    "exit": _cmd_exit,
    "look": _cmd_look,
    "examine": _cmd_examine,
    "read": _cmd_read,
    "inventory": _cmd_inventory,
    "take": _cmd_take,
    "drop": _cmd_drop,
    "put": _cmd_put,
    "open": _cmd_open,
    "close": _cmd_close,
    "move": _cmd_move,
    "light": _cmd_light,
    "extinguish": _cmd_extinguish,
    "eat": _cmd_eat,
    "drink": _cmd_drink,
    "attack": _cmd_attack,
    "give": _cmd_give,
    "wake": _cmd_wake,
    "say": _cmd_say,
    "diagnose": _cmd_diagnose,
    "score": _cmd_score,
    "verbose": _set_verbosity(Verbosity.VERBOSE, "Maximum verbosity."),
    "brief": _set_verbosity(Verbosity.BRIEF, "Brief descriptions."),
    "superbrief": _set_verbosity(Verbosity.SUPERBRIEF, "Superbrief descriptions."),
    "quit": _cmd_quit,
    "wait": _static_response("Time passes..."),
    "pray": _static_response("If you pray enough, your prayers may be answered."),
    "jump": _static_response("Wheeeeeeeeee!!!!!"),
    "odysseus": _static_response("Wasn't he a sailor?"),
    **dict.fromkeys(("yes", "no"), _static_response(
        "That was just a rhetorical question.", success=False,
    )),
}


def dispatch(game: "Game", command: Command) -> ActionResult:
    """Run one parsed command against the game.

    Ghosts are limited to a handful of verbs. Special behaviour registered
    for the objects or the room wins over the generic handler.
    """
    state = game.state
    if state.is_dead and command.verb not in GHOST_VERBS:
        return ActionResult.failure(_GHOST_REFUSALS.get(command.verb, "You can't even do that."))

    handler = VERB_HANDLERS.get(command.verb)
    if handler is None:
        return ActionResult.failure("I don't know how to do that.")
    if (command.all_objects or command.extra) and command.verb not in MULTI_VERBS:
        return ActionResult.failure("You can't use multiple objects with that verb.")

    try:
        result = None
        if not (command.all_objects or command.extra):
            result = game.registry.before(game, command)
        if result is None:
            result = handler(game, command)
    except InvariantViolation as exc:
        logger.error(
            "invariant_violation", error=str(exc), verb=command.verb,
            object_id=command.direct, context=exc.context,
        )
        return ActionResult.failure(WORLD_BROKEN)
    return result
