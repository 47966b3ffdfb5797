"""Play through the opening of the game from the field to the troll.

Route reference:
  West of House: north -> North of House -> north -> Forest Path -> up -> tree
  North of House: east -> Behind House -> (open window) west -> Kitchen
  Kitchen: west -> Living Room -> (move rug, open trap door) down -> Cellar
  Cellar: north -> Troll Room -> (troll dead) east -> East-West Passage
"""

from dungeon.engine.commands import Game
from dungeon.engine.flags import ActorState, GlobalFlag
from dungeon.engine.state import THIEF, TROLL, GameState, check_integrity, move_object

EGG_TO_CASE = [
    "north", "north", "up", "take egg", "down", "south", "east",
    "open window", "west", "west", "open case", "put egg in case",
]

INTO_THE_CELLAR = [
    "take lamp", "take sword", "turn on lamp", "move rug", "open trap door", "down",
]


def _run(game: Game, commands: list[str]) -> list[str]:
    """Run a list of commands and return all responses."""
    responses = []
    for cmd in commands:
        responses.append(game.process_command(cmd))
        assert not game.state.game_over, f"Game ended unexpectedly after {cmd!r}"
        check_integrity(game.world, game.state)
    return responses


def _assert_at(state: GameState, room: str) -> None:
    assert state.current_room == room, f"Expected {room}, at {state.current_room}"


def test_egg_to_trophy_case(game: Game) -> None:
    """Fetch the egg from the tree and display it in the living room."""
    responses = _run(game, EGG_TO_CASE)
    state = game.state

    _assert_at(state, "LIVING-ROOM")
    assert responses[2].startswith("Up a Tree")
    assert responses[3] == "Taken."
    assert state.location_of("EGG") == game.world.trophy_case
    assert state.score == 10
    assert state.moves == len(EGG_TO_CASE)
    assert "Novice Adventurer" in game.process_command("score")


def test_down_to_the_troll(game: Game, rng) -> None:
    """Through the trap door, past the troll and on into the dungeon."""
    move_object(game.world, game.state, THIEF, None)
    state = game.state
    _run(game, ["north", "east", "open window", "west", "west"])
    _assert_at(state, "LIVING-ROOM")

    responses = _run(game, INTO_THE_CELLAR)
    _assert_at(state, "CELLAR")
    assert responses[-1].startswith("The trap door crashes shut")

    rng.roll = 5  # every swing of the axe misses
    _run(game, ["north"])
    _assert_at(state, "TROLL-ROOM")
    assert _run(game, ["east"])[0].startswith("The troll fends you off")

    rng.roll = 95
    _run(game, ["kill troll with sword"])
    assert state.actors[TROLL].state == ActorState.DEAD
    assert GlobalFlag.TROLL_FLAG in state.flags

    _run(game, ["east"])
    _assert_at(state, "EW-PASSAGE")
    assert state.deaths == 0
