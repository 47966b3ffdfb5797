"""The Game facade and the turn loop.

handle_command(game, text) -> str is the main entry point. It tokenizes and
parses the input, dispatches the command, and, when the action used up a
turn, advances the clock: daemons run first, then the actors. Nothing raised
inside escapes it.
"""

from typing import Any

from ..logging import get_logger
from .actions import WORLD_BROKEN, dispatch
from .actors import build_actors, run_actors
from .daemons import EventScheduler, register_daemons
from .death import DeathSystem
from .lexer import tokenize
from .parser import Command, Parser, compute_scope
from .registry import build_registry
from .results import InvariantViolation, ParseFailure
from .rng import GameRandom
from .scoring import score_message
from .snapshot import dump_state, load_rng, load_state
from .state import GameState, check_integrity, new_game_state
from .vocabulary import Vocabulary
from .world import World

logger = get_logger(__name__)

GAME_OVER = "The game is over. Start a new game to play again."
NOTHING_TO_REPEAT = "There is nothing to repeat."


class Game:
    """One player's session: the shared World plus everything per-player.

    The vocabulary may be shared between sessions; the registry, scheduler,
    actors and death system belong to this game alone.
    """

    def __init__(
        self,
        world: World,
        state: GameState | None = None,
        *,
        rng: GameRandom | None = None,
        seed: int | None = None,
        vocabulary: Vocabulary | None = None,
    ):
        fresh = state is None
        self.world = world
        self.state = state if state is not None else new_game_state(world)
        self.rng = rng if rng is not None else GameRandom(seed)
        self.vocabulary = vocabulary or Vocabulary.from_world(world)
        self.parser = Parser(world, self.vocabulary)
        self.registry = build_registry()
        self.scheduler = EventScheduler(self.state)
        self.death = DeathSystem(self)
        register_daemons(self, fresh=fresh)
        self.actors = build_actors(self)

    @classmethod
    def from_snapshot(
        cls, world: World, data: dict[str, Any], *, vocabulary: Vocabulary | None = None,
    ) -> "Game":
        """Restore a game saved with ``snapshot()``."""
        return cls(
            world, load_state(world, data), rng=load_rng(data), vocabulary=vocabulary,
        )

    def snapshot(self) -> dict[str, Any]:
        return dump_state(self.state, self.rng)

    def process_command(self, text: str) -> str:
        return handle_command(self, text)


def _parse(game: Game, text: str) -> Command | ParseFailure:
    tokens = tokenize(game.vocabulary, text)
    scope = compute_scope(game.world, game.state)
    return game.parser.parse(tokens, scope, game.state.last_object)


def _advance_clock(game: Game) -> list[str]:
    """Run daemons and then actors for the turn just taken.

    The world is checked for consistency once everyone has moved.
    """
    state = game.state
    deaths = state.deaths
    messages = []
    try:
        messages.extend(game.scheduler.tick(game))
        if state.deaths == deaths and not state.game_over:
            messages.extend(run_actors(game))
        check_integrity(game.world, state)
    except InvariantViolation as exc:
        logger.error(
            "invariant_violation", error=str(exc), phase="clock",
            moves=state.moves, context=exc.context,
        )
        messages.append(WORLD_BROKEN)
    return messages


def handle_command(game: Game, text: str) -> str:
    """Process one line of input and return the response text."""
    state = game.state
    text = text.strip()
    parsed = _parse(game, text)

    if state.game_over:
        if isinstance(parsed, Command) and parsed.verb == "score":
            return score_message(game.world, state)
        return GAME_OVER

    if isinstance(parsed, ParseFailure):
        logger.debug("parse_failed", kind=parsed.kind.value, text=text)
        return parsed.message

    if parsed.verb == "again":
        if state.last_command is None:
            return NOTHING_TO_REPEAT
        return handle_command(game, state.last_command)

    deaths = state.deaths
    was_dead = state.is_dead
    result = dispatch(game, parsed)
    messages = [result.message] if result.message else []

    if result.success:
        state.last_command = text
        if parsed.direct is not None:
            state.last_object = parsed.direct

    if result.takes_turn:
        state.moves += 1
        died = state.deaths != deaths or state.game_over or (state.is_dead and not was_dead)
        if not died:
            messages.extend(_advance_clock(game))

    logger.info(
        "command_processed",
        verb=parsed.verb,
        success=result.success,
        room=state.current_room,
        moves=state.moves,
        score=state.score,
    )
    return "\n\n".join(messages)
