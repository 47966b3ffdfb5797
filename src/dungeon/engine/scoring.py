"""Score keeping: first-take points, trophy case points, ranks."""

from ..logging import get_logger
from .state import GameState, treasure_value
from .world import World

logger = get_logger(__name__)

DEATH_PENALTY = 10


def award_take(world: World, state: GameState, obj_id: str) -> int:
    """Add an object's take value the first time it is picked up."""
    value = world.objects[obj_id].value
    if value <= 0 or obj_id in state.scored_objects:
        return 0
    state.scored_objects.add(obj_id)
    state.score += value
    logger.debug("points_awarded", object_id=obj_id, points=value, score=state.score)
    return value


def note_move(
    world: World, state: GameState, obj_id: str, old: str | None, new: str | None,
) -> int:
    """Adjust the score when an object enters or leaves the trophy case."""
    case = world.trophy_case
    if old == new or case not in (old, new):
        return 0
    points = treasure_value(world, state, obj_id)
    if new != case:
        points = -points
    state.score += points
    if points:
        logger.debug("case_points", object_id=obj_id, points=points, score=state.score)
    return points


def apply_death_penalty(state: GameState) -> None:
    state.score = max(0, state.score - DEATH_PENALTY)


def rank(world: World, score: int) -> str:
    """The highest rank whose threshold the score reaches."""
    for threshold, title in sorted(world.rank_table, reverse=True):
        if score >= threshold:
            return title
    return "Beginner"


def score_message(world: World, state: GameState) -> str:
    moves = "move" if state.moves == 1 else "moves"
    return (
        f"Your score is {state.score} (total of {world.max_score} points), "
        f"in {state.moves} {moves}.\n"
        f"This gives you the rank of {rank(world, state.score)}."
    )
