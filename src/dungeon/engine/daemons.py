"""Turn-based event scheduler and the built-in daemons.

Events live in ``GameState.events`` as plain records so they survive a
snapshot; the scheduler only keeps the callback table, which is rebuilt by
id whenever a Game is created or restored.

An event is either a daemon (runs every turn while enabled) or an
interrupt (counts ``ticks`` down and fires when it reaches zero; the
callback may queue it again).
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..logging import get_logger
from .flags import ObjectFlag
from .results import InvariantViolation
from .state import (
    CANDLES,
    LAMP,
    MATCH,
    MATCH_COUNT,
    SWORD,
    WOUNDS,
    EventRecord,
    GameState,
    is_lit,
    room_of,
)

if TYPE_CHECKING:
    from .commands import Game

logger = get_logger(__name__)

Callback = Callable[["Game", EventRecord], str | None]

CURE_EVENT = "cure"
CURE_INTERVAL = 30
SWORD_EVENT = "sword"
MATCH_EVENT = "match"
MATCH_BURN_TICKS = 2


class EventScheduler:
    """Runs enabled events once per consumed turn, in registration order."""

    def __init__(self, state: GameState):
        self.state = state
        self._callbacks: dict[str, Callback] = {}

    def register(
        self,
        event_id: str,
        callback: Callback,
        *,
        daemon: bool = False,
        ticks: int = 0,
        enabled: bool = False,
    ) -> EventRecord:
        """Attach a callback; create the record unless a restored one exists."""
        self._callbacks[event_id] = callback
        record = self.state.events.get(event_id)
        if record is None:
            record = EventRecord(event_id, enabled=enabled, daemon=daemon, ticks=ticks)
            self.state.events[event_id] = record
        return record

    def record(self, event_id: str) -> EventRecord:
        try:
            return self.state.events[event_id]
        except KeyError:
            raise InvariantViolation("unknown event", event_id=event_id) from None

    def enable(self, event_id: str) -> None:
        self.record(event_id).enabled = True

    def disable(self, event_id: str) -> None:
        self.record(event_id).enabled = False

    def queue(self, event_id: str, ticks: int) -> None:
        """(Re)start an interrupt so it fires after ``ticks`` more turns."""
        record = self.record(event_id)
        record.ticks = ticks
        record.enabled = True

    def tick(self, game: "Game") -> list[str]:
        """Run every due event once and collect the messages they produce."""
        messages = []
        for event_id, callback in self._callbacks.items():
            record = self.state.events[event_id]
            if not record.enabled or record.last_run == self.state.moves:
                continue
            if not record.daemon:
                record.ticks -= 1
                if record.ticks > 0:
                    continue
                record.enabled = False
            record.last_run = self.state.moves
            message = callback(game, record)
            logger.debug(
                "daemon_fired", event_id=event_id, stage=record.stage,
                moves=self.state.moves,
            )
            if message:
                messages.append(message)
            if self.state.game_over:
                break
        return messages


@dataclass(frozen=True)
class LightSource:
    """Fuel schedule for a light that burns down.

    ``stages`` lists the fuel remaining at each warning, ending at 0;
    ``warnings`` holds the message for each stage.
    """

    obj_id: str
    fuel: int
    stages: tuple[int, ...]
    warnings: tuple[str, ...]

    @property
    def event_id(self) -> str:
        return self.obj_id.lower()


LIGHT_SOURCES = {
    LAMP: LightSource(
        LAMP,
        fuel=200,
        stages=(100, 70, 15, 0),
        warnings=(
            "The lamp appears a bit dimmer.",
            "The lamp is definitely dimmer now.",
            "The lamp is nearly out.",
            "You'd better have more light than from the brass lantern now.",
        ),
    ),
    CANDLES: LightSource(
        CANDLES,
        fuel=40,
        stages=(20, 10, 5, 0),
        warnings=(
            "The candles grow shorter.",
            "The candles are becoming quite short.",
            "The candles won't last long now.",
            "You'd better have more light than from the pair of candles now.",
        ),
    ),
}


def burn_light(game: "Game", record: EventRecord, source: LightSource) -> str | None:
    """Advance a light source one stage; the last stage puts it out for good."""
    state = game.state
    if not state.has_flag(source.obj_id, ObjectFlag.ON):
        return None

    stage = record.stage
    message = source.warnings[stage]
    record.stage = stage + 1
    if record.stage >= len(source.stages):
        state.clear_flag(source.obj_id, ObjectFlag.ON)
        state.set_flag(source.obj_id, ObjectFlag.BURNED_OUT)
        game.scheduler.disable(record.id)
        logger.info("light_burned_out", object_id=source.obj_id, moves=state.moves)
    else:
        game.scheduler.queue(
            record.id, source.stages[stage] - source.stages[stage + 1],
        )

    if room_of(game.world, state, source.obj_id) != state.current_room:
        return None
    return message


def arm_light_timer(game: "Game", obj_id: str) -> None:
    """Reset a light source's timer to its first stage.

    The event stays suspended until the source is lit, or, for a source that
    starts out burning, until the player first picks it up.
    """
    source = LIGHT_SOURCES[obj_id]
    state = game.state
    record = game.scheduler.record(source.event_id)
    record.stage = 0
    record.ticks = source.fuel - source.stages[0]
    record.enabled = (
        state.has_flag(obj_id, ObjectFlag.ON)
        and state.has_flag(obj_id, ObjectFlag.TOUCHED)
        and not state.has_flag(obj_id, ObjectFlag.BURNED_OUT)
    )


def resume_light(game: "Game", obj_id: str) -> None:
    """Continue burning from the preserved stage after the source is lit."""
    source = LIGHT_SOURCES.get(obj_id)
    if source is None:
        return
    record = game.scheduler.record(source.event_id)
    if record.stage < len(source.stages) and not record.enabled:
        record.enabled = True
        logger.debug("light_resumed", object_id=obj_id, stage=record.stage)


def suspend_light(game: "Game", obj_id: str) -> None:
    source = LIGHT_SOURCES.get(obj_id)
    if source is not None:
        game.scheduler.disable(source.event_id)


def _cure(game: "Game", record: EventRecord) -> str | None:
    """Heal one wound; keep going while any remain."""
    variables = game.state.variables
    if variables.get(WOUNDS, 0) > 0:
        variables[WOUNDS] -= 1
    if variables.get(WOUNDS, 0) > 0:
        game.scheduler.queue(record.id, CURE_INTERVAL)
    return None


def start_cure(game: "Game") -> None:
    """Begin healing unless a cure is already counting down."""
    if not game.scheduler.record(CURE_EVENT).enabled:
        game.scheduler.queue(CURE_EVENT, CURE_INTERVAL)


_GLOW = (
    "Your sword is no longer glowing.",
    "Your sword is glowing with a faint blue glow.",
    "Your sword has begun to glow very brightly.",
)


def _infested(game: "Game", room_id: str | None) -> bool:
    world, state = game.world, game.state
    return any(
        actor.is_alive(game) and room_of(world, state, actor.obj_id) == room_id
        for actor in game.actors.values()
    )


def sword_glow(game: "Game") -> int:
    """2 with a villain in the room, 1 with one a single exit away, else 0."""
    world, state = game.world, game.state
    if _infested(game, state.current_room):
        return 2
    neighbours = {
        e.destination for e in world.rooms[state.current_room].exits
        if e.destination is not None
    }
    return 1 if any(_infested(game, room) for room in neighbours) else 0


def _sword(game: "Game", record: EventRecord) -> str | None:
    """Report changes in the sword's glow while the player carries it."""
    if not game.state.is_held(SWORD):
        game.scheduler.disable(record.id)
        return None
    glow = sword_glow(game)
    if glow == record.stage:
        return None
    record.stage = glow
    return _GLOW[glow]


def watch_sword(game: "Game") -> None:
    if SWORD_EVENT in game.state.events:
        game.scheduler.enable(SWORD_EVENT)


def strike_match(game: "Game") -> str:
    """Light one match from the book, if any are left."""
    state = game.state
    remaining = state.variables.get(MATCH_COUNT, 0)
    if remaining <= 0:
        return "I'm afraid that you have run out of matches."
    state.variables[MATCH_COUNT] = remaining - 1
    state.set_flag(MATCH, ObjectFlag.ON)
    game.scheduler.queue(MATCH_EVENT, MATCH_BURN_TICKS)
    logger.debug("match_struck", remaining=remaining - 1, moves=state.moves)
    return "One of the matches starts to burn."


def put_out_match(game: "Game") -> None:
    game.state.clear_flag(MATCH, ObjectFlag.ON)
    if MATCH_EVENT in game.state.events:
        game.scheduler.disable(MATCH_EVENT)


def _match(game: "Game", record: EventRecord) -> str | None:
    state = game.state
    if not state.has_flag(MATCH, ObjectFlag.ON):
        return None
    state.clear_flag(MATCH, ObjectFlag.ON)
    if room_of(game.world, state, MATCH) != state.current_room:
        return None
    if not is_lit(game.world, state):
        return "The match has gone out.\n\nIt is now pitch black."
    return "The match has gone out."


def register_daemons(game: "Game", *, fresh: bool) -> None:
    """Attach the built-in events to a game's scheduler.

    ``fresh`` arms the light timers from their first stage; a restored game
    keeps the records it was saved with.
    """
    for obj_id, source in LIGHT_SOURCES.items():
        if obj_id not in game.world.objects:
            continue
        game.scheduler.register(
            source.event_id,
            lambda g, r, s=source: burn_light(g, r, s),
        )
        if fresh:
            arm_light_timer(game, obj_id)
    game.scheduler.register(CURE_EVENT, _cure)
    if SWORD in game.world.objects:
        game.scheduler.register(SWORD_EVENT, _sword, daemon=True)
    if MATCH in game.world.objects:
        game.scheduler.register(MATCH_EVENT, _match)
