"""Tests for saving and restoring games."""

import json

import pytest

from dungeon.engine.commands import Game
from dungeon.engine.flags import ActorState, ObjectFlag
from dungeon.engine.results import ContentError
from dungeon.engine.snapshot import dump_state, load_state
from dungeon.engine.state import LAMP, LEAFLET, TROLL, WOUNDS
from dungeon.session import decode_snapshot, encode_snapshot

OPENING = ["open mailbox", "take leaflet", "north", "east", "open window", "west"]


def _restore(game: Game) -> Game:
    """Push a snapshot through JSON, the way it is stored."""
    data = json.loads(json.dumps(game.snapshot()))
    return Game.from_snapshot(game.world, data)


def test_snapshot_is_plain_json(game: Game):
    for command in OPENING:
        game.process_command(command)
    data = game.snapshot()
    assert json.loads(json.dumps(data)) == data


def test_round_trip_keeps_progress(game: Game):
    for command in OPENING:
        game.process_command(command)
    state = game.state
    state.variables[WOUNDS] = 1
    state.actors[TROLL].state = ActorState.SLEEPING
    state.actors[TROLL].knocked_out_on = 4

    restored = _restore(game).state

    assert restored.current_room == "KITCHEN"
    assert restored.inventory == [LEAFLET]
    assert restored.moves == state.moves
    assert restored.visited_rooms == state.visited_rooms
    assert restored.object_locations == state.object_locations
    assert restored.has_flag("KITCHEN-WINDOW", ObjectFlag.OPEN)
    assert restored.flags == state.flags
    assert restored.variables[WOUNDS] == 1
    assert restored.actors[TROLL].state == ActorState.SLEEPING
    assert restored.actors[TROLL].knocked_out_on == 4
    assert restored.last_command == "west"


def test_restored_timers_are_not_rearmed(game: Game):
    """A burning lamp keeps its countdown across a save."""
    state = game.state
    state.current_room = "LIVING-ROOM"
    game.process_command("take lamp")
    game.process_command("turn on lamp")
    for _ in range(10):
        game.process_command("wait")
    ticks = state.events["lamp"].ticks

    restored = _restore(game)
    assert restored.state.events["lamp"].enabled
    assert restored.state.events["lamp"].ticks == ticks
    assert restored.state.has_flag(LAMP, ObjectFlag.ON)


def test_restored_game_keeps_playing(game: Game):
    game.process_command("open mailbox")
    restored = _restore(game)
    assert restored.process_command("take leaflet") == "Taken."
    assert restored.process_command("again") == "You already have that!"


def test_seeded_games_replay_identically(world):
    commands = ["north", "east", "open window", "west", "west", "take lamp",
                "turn on lamp", "move rug", "open trap door", "down", "north"]
    first = Game(world, seed=42)
    second = Game(world, seed=42)
    assert [first.process_command(c) for c in commands] == [
        second.process_command(c) for c in commands
    ]


def test_rng_state_survives_restore(world):
    game = Game(world, seed=3)
    game.rng.randint(1, 100)
    restored = _restore(game)
    assert [restored.rng.randint(1, 100) for _ in range(5)] == [
        game.rng.randint(1, 100) for _ in range(5)
    ]


def test_unknown_room_rejected(game: Game):
    data = dump_state(game.state)
    data["current_room"] = "NARNIA"
    with pytest.raises(ContentError):
        load_state(game.world, data)


def test_unknown_object_rejected(game: Game):
    data = dump_state(game.state)
    data["object_locations"]["UNICORN"] = "WEST-OF-HOUSE"
    with pytest.raises(ContentError):
        load_state(game.world, data)


def test_compressed_blob_round_trip(game: Game):
    game.process_command("open mailbox")
    blob = encode_snapshot(game)
    assert isinstance(blob, bytes)
    assert decode_snapshot(blob) == game.snapshot()
