"""Tests for the event scheduler and the built-in daemons."""

from dungeon.engine.commands import Game
from dungeon.engine.daemons import (
    CURE_EVENT,
    CURE_INTERVAL,
    LIGHT_SOURCES,
    MATCH_EVENT,
    SWORD_EVENT,
    burn_light,
    start_cure,
)
from dungeon.engine.flags import ObjectFlag
from dungeon.engine.state import (
    CANDLES,
    LAMP,
    MATCH,
    MATCH_COUNT,
    MATCHES_IN_BOOK,
    SWORD,
    THIEF,
    WOUNDS,
    is_lit,
    move_object,
)
from dungeon.engine.world import PLAYER


def _tick_turns(game: Game, turns: int) -> list[str]:
    messages = []
    for _ in range(turns):
        game.state.moves += 1
        messages.extend(game.scheduler.tick(game))
    return messages


def test_interrupt_fires_once_after_countdown(game: Game):
    """An interrupt counts down and then disables itself."""
    fired = []

    def ring(game, record):
        fired.append(game.state.moves)
        return "Ring!"

    record = game.scheduler.register("alarm", ring, ticks=2, enabled=True)
    assert _tick_turns(game, 1) == []
    assert _tick_turns(game, 1) == ["Ring!"]
    assert not record.enabled
    assert _tick_turns(game, 3) == []
    assert fired == [2]


def test_daemon_runs_every_turn(game: Game):
    counts = []

    def count(game, record):
        counts.append(game.state.moves)
        return None

    game.scheduler.register("counter", count, daemon=True, enabled=True)
    _tick_turns(game, 3)
    assert counts == [1, 2, 3]


def test_event_runs_once_per_turn(game: Game):
    """Ticking twice in the same turn does not run an event twice."""
    counts = []
    game.scheduler.register(
        "counter", lambda g, r: counts.append(1), daemon=True, enabled=True,
    )
    game.state.moves = 1
    game.scheduler.tick(game)
    game.scheduler.tick(game)
    assert counts == [1]


def test_lamp_burns_out_after_four_stages(game: Game):
    """Each stage warns; the last one leaves the lamp dark for good."""
    state = game.state
    move_object(game.world, state, LAMP, PLAYER)
    state.set_flag(LAMP, ObjectFlag.ON)
    source = LIGHT_SOURCES[LAMP]
    record = state.events[source.event_id]

    messages = [burn_light(game, record, source) for _ in range(4)]

    assert messages == list(source.warnings)
    assert state.has_flag(LAMP, ObjectFlag.BURNED_OUT)
    assert not state.has_flag(LAMP, ObjectFlag.ON)
    assert not record.enabled


def test_burn_is_noop_when_off(game: Game):
    state = game.state
    source = LIGHT_SOURCES[LAMP]
    record = state.events[source.event_id]
    assert burn_light(game, record, source) is None
    assert record.stage == 0
    assert not state.has_flag(LAMP, ObjectFlag.BURNED_OUT)


def test_burn_warning_only_where_the_light_is(game: Game):
    """A lamp left in another room burns down silently."""
    state = game.state
    state.set_flag(LAMP, ObjectFlag.ON)
    source = LIGHT_SOURCES[LAMP]
    record = state.events[source.event_id]
    assert burn_light(game, record, source) is None
    assert record.stage == 1


def test_burned_out_lamp_will_not_light(game: Game):
    state = game.state
    state.current_room = "LIVING-ROOM"
    state.set_flag(LAMP, ObjectFlag.BURNED_OUT)
    assert game.process_command("turn on lamp") == "A burned-out lamp won't light."


def test_lamp_timer_starts_when_lit(game: Game):
    """Lighting the lamp starts the clock; the first warning comes 100 turns later."""
    state = game.state
    state.current_room = "LIVING-ROOM"
    game.process_command("take lamp")
    assert not state.events["lamp"].enabled
    game.process_command("turn on lamp")
    assert state.events["lamp"].enabled

    responses = [game.process_command("wait") for _ in range(99)]
    assert all("dimmer" not in r for r in responses[:-1])
    assert responses[-1] == "Time passes...\n\nThe lamp appears a bit dimmer."


def test_lamp_timer_pauses_when_off(game: Game):
    state = game.state
    state.current_room = "LIVING-ROOM"
    game.process_command("take lamp")
    game.process_command("turn on lamp")
    game.process_command("turn off lamp")
    ticks = state.events["lamp"].ticks
    for _ in range(150):
        game.process_command("wait")
    assert state.events["lamp"].ticks == ticks
    assert state.events["lamp"].stage == 0


def test_candles_start_burning_when_taken(game: Game):
    """The candles are lit from the start but only burn once picked up."""
    state = game.state
    state.current_room = "SOUTH-TEMPLE"
    assert state.has_flag(CANDLES, ObjectFlag.ON)
    assert not state.events["candles"].enabled
    assert game.process_command("take candles") == "Taken."
    assert state.events["candles"].enabled


def test_cure_heals_one_wound_per_interval(game: Game):
    state = game.state
    state.variables[WOUNDS] = 2
    start_cure(game)
    assert state.events[CURE_EVENT].enabled

    _tick_turns(game, CURE_INTERVAL)
    assert state.variables[WOUNDS] == 1
    assert state.events[CURE_EVENT].enabled

    _tick_turns(game, CURE_INTERVAL)
    assert state.variables[WOUNDS] == 0
    assert not state.events[CURE_EVENT].enabled


def test_sword_glows_near_villains(game: Game):
    """The glow follows the troll's distance and is only reported on change."""
    state = game.state
    move_object(game.world, state, THIEF, None)
    state.current_room = "LIVING-ROOM"
    assert game.process_command("take sword") == "Taken."
    assert state.events[SWORD_EVENT].enabled

    state.current_room = "CELLAR"
    assert _tick_turns(game, 1) == ["Your sword is glowing with a faint blue glow."]
    assert _tick_turns(game, 1) == []

    state.current_room = "TROLL-ROOM"
    assert _tick_turns(game, 1) == ["Your sword has begun to glow very brightly."]

    state.current_room = "KITCHEN"
    assert _tick_turns(game, 1) == ["Your sword is no longer glowing."]


def test_sword_stops_watching_once_dropped(game: Game):
    state = game.state
    state.current_room = "LIVING-ROOM"
    game.process_command("take sword")
    game.process_command("drop sword")
    state.current_room = "TROLL-ROOM"
    assert _tick_turns(game, 1) == []
    assert not state.events[SWORD_EVENT].enabled


def test_sword_is_dull_until_taken(game: Game):
    state = game.state
    move_object(game.world, state, SWORD, PLAYER)
    state.current_room = "TROLL-ROOM"
    assert _tick_turns(game, 2) == []


def test_match_burns_briefly(game: Game):
    state = game.state
    state.current_room = "KITCHEN"
    move_object(game.world, state, MATCH, PLAYER)
    assert state.variables[MATCH_COUNT] == MATCHES_IN_BOOK

    assert game.process_command("light match") == "One of the matches starts to burn."
    assert state.has_flag(MATCH, ObjectFlag.ON)
    assert state.variables[MATCH_COUNT] == MATCHES_IN_BOOK - 1

    assert game.process_command("wait") == "Time passes...\n\nThe match has gone out."
    assert not state.has_flag(MATCH, ObjectFlag.ON)
    assert not state.events[MATCH_EVENT].enabled


def test_match_lights_a_dark_room(game: Game):
    state = game.state
    state.current_room = "CELLAR"
    move_object(game.world, state, MATCH, PLAYER)
    game.process_command("light match")
    assert is_lit(game.world, state)
    assert _tick_turns(game, 1) == ["The match has gone out.\n\nIt is now pitch black."]
    assert not is_lit(game.world, state)


def test_blowing_out_a_match(game: Game):
    state = game.state
    state.current_room = "KITCHEN"
    move_object(game.world, state, MATCH, PLAYER)
    game.process_command("light match")
    assert game.process_command("extinguish match") == "The match is out."
    assert not state.has_flag(MATCH, ObjectFlag.ON)
    assert not state.events[MATCH_EVENT].enabled


def test_out_of_matches(game: Game):
    state = game.state
    state.current_room = "KITCHEN"
    move_object(game.world, state, MATCH, PLAYER)
    state.variables[MATCH_COUNT] = 0
    assert game.process_command("light match") == (
        "I'm afraid that you have run out of matches."
    )
    assert not state.has_flag(MATCH, ObjectFlag.ON)
