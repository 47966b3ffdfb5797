"""Tests for the troll, the thief and the cyclops.

The ``rng`` fixture decides every roll: ``rng.roll`` is the d100 result
used by combat and ``rng.lucky`` answers every chance check.
"""

from dungeon.engine.actors import Cyclops, run_actors
from dungeon.engine.commands import Game
from dungeon.engine.flags import ActorState, GlobalFlag, ObjectFlag
from dungeon.engine.state import (
    AXE,
    BOTTLE,
    CYCLOPS,
    CYCLOPS_WRATH,
    LAMP,
    LUNCH,
    STILETTO,
    SWORD,
    THIEF,
    TROLL,
    WATER,
    WOUNDS,
    move_object,
)
from dungeon.engine.world import PLAYER


def _arena(game: Game, room: str, *held: str, thief: bool = False) -> None:
    """Put the player in a room holding the given objects."""
    state = game.state
    if not thief:
        move_object(game.world, state, THIEF, None)
    state.current_room = room
    state.visited_rooms.add(room)
    for obj_id in held:
        move_object(game.world, state, obj_id, PLAYER)


def _lit_lamp(game: Game) -> str:
    game.state.set_flag(LAMP, ObjectFlag.ON)
    return LAMP


def test_troll_fight_exchange(game: Game, rng):
    """A light wound each way; the troll keeps fighting."""
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 50
    result = game.process_command("attack troll with sword")
    assert result == (
        "The troll is struck on the arm; blood begins to trickle down.\n\n"
        "The axe gets you right in the side. Ouch!"
    )
    record = game.state.actors[TROLL]
    assert record.health == 1
    assert record.state == ActorState.FIGHTING
    assert game.state.variables[WOUNDS] == 1
    assert game.state.events["cure"].enabled


def test_attack_uses_carried_weapon(game: Game, rng):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 5
    result = game.process_command("kill troll")
    assert result.startswith("A good slash, but it misses the troll by a mile.")


def test_attack_bare_handed(game: Game):
    _arena(game, "TROLL-ROOM", _lit_lamp(game))
    assert game.process_command("attack troll") == (
        "Trying to attack a troll with your bare hands is suicidal."
    )


def test_killing_the_troll_opens_the_way(game: Game, rng):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 95
    result = game.process_command("attack troll with sword")
    assert result.startswith("It's curtains for the troll as your sword removes his head.")
    assert "a cloud of sinister black fog envelops him" in result

    state = game.state
    assert state.location_of(TROLL) is None
    assert state.actors[TROLL].state == ActorState.DEAD
    assert state.location_of(AXE) == "TROLL-ROOM"
    assert GlobalFlag.TROLL_FLAG in state.flags

    game.process_command("east")
    assert state.current_room == "EW-PASSAGE"


def test_troll_blocks_passage(game: Game):
    _arena(game, "TROLL-ROOM", _lit_lamp(game))
    game.state.actors[TROLL].state = ActorState.SLEEPING
    assert game.process_command("east").startswith(
        "The troll fends you off with a menacing gesture."
    )
    assert game.state.current_room == "TROLL-ROOM"


def test_knocked_out_troll_comes_round(game: Game, rng):
    """A stunned troll sleeps through the blow's turn and revives later."""
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 85
    result = game.process_command("attack troll with sword")
    assert result == "The troll is battered into unconsciousness."
    assert game.state.actors[TROLL].state == ActorState.SLEEPING

    rng.lucky = True
    assert game.process_command("wait") == (
        "Time passes...\n\nThe troll stirs, quickly resuming a fighting stance."
    )
    assert game.state.actors[TROLL].state == ActorState.FIGHTING


def test_knocked_out_troll_stays_down_on_a_bad_roll(game: Game, rng):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 85
    game.process_command("attack troll with sword")
    rng.lucky = False
    assert game.process_command("wait") == "Time passes..."
    assert game.process_command("wait") == "Time passes..."
    assert game.state.actors[TROLL].state == ActorState.SLEEPING


def test_knockout_then_finishing_blow(game: Game, rng):
    """An unconscious troll cannot defend itself against the next swing."""
    state = game.state
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    rng.roll = 85
    game.process_command("attack troll with sword")
    rng.roll = 5
    result = game.process_command("attack troll with sword")
    assert result.startswith("It's curtains for the troll")
    assert state.actors[TROLL].state == ActorState.DEAD
    assert GlobalFlag.TROLL_FLAG in state.flags


def test_knocked_out_thief_slips_away(game: Game, rng):
    state = game.state
    _arena(game, "GALLERY", SWORD, thief=True)
    move_object(game.world, state, THIEF, "GALLERY")
    rng.roll = 97
    assert game.process_command("attack thief with sword") == (
        "The thief is battered into unconsciousness."
    )
    rng.lucky = True
    assert game.process_command("wait").endswith("scrambles away from you.")
    assert state.actors[THIEF].state == ActorState.FLEEING


def test_sleeping_troll_dies_to_one_blow(game: Game):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), SWORD)
    game.state.actors[TROLL].state = ActorState.SLEEPING
    result = game.process_command("attack troll with sword")
    assert result.startswith("It's curtains for the troll")
    assert game.state.actors[TROLL].state == ActorState.DEAD


def test_troll_recovers_dropped_axe(game: Game):
    _arena(game, "TROLL-ROOM", _lit_lamp(game))
    move_object(game.world, game.state, AXE, "TROLL-ROOM")
    assert game.process_command("wait") == (
        "Time passes...\n\nThe troll, angered and humiliated, recovers his weapon."
    )
    assert game.state.location_of(AXE) == TROLL


def test_disarmed_troll_cowers(game: Game):
    _arena(game, "TROLL-ROOM", _lit_lamp(game))
    move_object(game.world, game.state, AXE, "CELLAR")
    result = game.process_command("wait")
    assert "cowers in terror" in result


def test_troll_catches_his_axe(game: Game, rng):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), AXE)
    rng.roll = 5
    result = game.process_command("give axe to troll")
    assert result.startswith("The troll, who is remarkably coordinated, catches the bloody axe.")
    assert game.state.location_of(AXE) == TROLL


def test_troll_eats_gifts(game: Game, rng):
    _arena(game, "TROLL-ROOM", _lit_lamp(game), LUNCH)
    rng.roll = 5
    result = game.process_command("give lunch to troll")
    assert "graciously accepts the gift and eats it hungrily" in result
    assert game.state.location_of(LUNCH) is None


def test_troll_kills_player(game: Game, rng):
    """A fatal counterattack runs the death sequence."""
    _arena(game, "TROLL-ROOM", _lit_lamp(game))
    rng.roll = 100
    result = game.process_command("wait")
    assert "The troll's axe removes your head." in result
    assert "****  You have died  ****" in result
    assert game.state.deaths == 1
    assert game.state.current_room == "FOREST-1"


def test_thief_steals_treasure(game: Game, rng):
    _arena(game, "ROUND-ROOM", "EGG", thief=True)
    rng.lucky = True
    result = game.process_command("wait")
    assert "A seedy-looking individual with a large bag" in result
    assert game.state.location_of("EGG") == THIEF
    assert game.state.actors[THIEF].state == ActorState.FLEEING

    result = game.process_command("wait")
    assert "robbed you blind" in result
    assert game.state.location_of(THIEF) == "EW-PASSAGE"
    assert game.state.actors[THIEF].state == ActorState.NORMAL


def test_thief_leaves_when_nothing_to_steal(game: Game):
    _arena(game, "ROUND-ROOM", thief=True)
    result = game.process_command("wait")
    assert result == (
        "Time passes...\n\nThe holder of the large bag just left, looking disgusted."
    )
    assert game.state.location_of(THIEF) == "EW-PASSAGE"


def test_thief_only_takes_treasure_on_a_lucky_roll(game: Game, rng):
    _arena(game, "ROUND-ROOM", "EGG", thief=True)
    rng.lucky = False
    assert game.process_command("wait") == "Time passes..."
    assert game.state.is_held("EGG")


def test_thief_stashes_loot(game: Game):
    """Passing through the treasure room, the thief leaves his loot there."""
    state = game.state
    move_object(game.world, state, THIEF, "TREASURE-ROOM")
    move_object(game.world, state, "EGG", THIEF)
    run_actors(game)
    assert state.location_of("EGG") == "TREASURE-ROOM"
    assert state.location_of(STILETTO) == THIEF
    assert state.location_of(THIEF) == "CYCLOPS-ROOM"


def test_thief_roams_on_his_own(game: Game):
    """The thief moves every turn, wherever the player is."""
    run_actors(game)
    assert game.state.location_of(THIEF) == "EW-PASSAGE"


def test_thief_fights_back(game: Game, rng):
    _arena(game, "GALLERY", SWORD, thief=True)
    move_object(game.world, game.state, THIEF, "GALLERY")
    rng.roll = 5
    result = game.process_command("attack thief with sword")
    assert result == (
        "A good slash, but it misses the thief by a mile.\n\n"
        "The thief stabs nonchalantly with his stiletto and misses."
    )
    assert game.state.actors[THIEF].state == ActorState.FIGHTING


def test_killing_the_thief_drops_his_booty(game: Game):
    state = game.state
    _arena(game, "GALLERY", SWORD, thief=True)
    move_object(game.world, state, THIEF, "GALLERY")
    move_object(game.world, state, "EGG", THIEF)
    state.actors[THIEF].state = ActorState.SLEEPING

    result = game.process_command("attack thief with sword")
    assert result.startswith("It's curtains for the thief as your sword removes his head.")
    assert result.endswith("His booty remains.")
    assert state.location_of("EGG") == "GALLERY"
    assert state.location_of(STILETTO) == "GALLERY"
    assert state.location_of(THIEF) is None


def test_give_to_thief(game: Game):
    _arena(game, "GALLERY", "EGG", thief=True)
    move_object(game.world, game.state, THIEF, "GALLERY")
    result = game.process_command("give egg to thief")
    assert result.startswith(
        "The thief places the jewel-encrusted egg in his bag and thanks you politely."
    )
    assert game.state.location_of("EGG") == THIEF


def test_cyclops_grows_angry_and_eats_player(game: Game):
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game))
    responses = [game.process_command("wait") for _ in range(5)]
    for wrath, response in zip(range(1, 5), responses):
        assert response == f"Time passes...\n\n{Cyclops.WRATH[wrath]}"
    assert "Just like Mom used to make 'em." in responses[4]
    assert game.state.deaths == 1
    assert game.state.variables[CYCLOPS_WRATH] == 0


def test_cyclops_falls_asleep_after_lunch_and_water(game: Game):
    state = game.state
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game), LUNCH, BOTTLE)
    state.set_flag(BOTTLE, ObjectFlag.OPEN)

    assert game.process_command("give water to cyclops").startswith(
        "The cyclops apparently is not thirsty"
    )
    result = game.process_command("give lunch to cyclops")
    assert result.startswith("The cyclops says \"Mmm Mmm. I love hot peppers!")
    assert state.location_of(LUNCH) is None

    result = game.process_command("give water to cyclops")
    assert "falls fast asleep" in result
    assert state.actors[CYCLOPS].state == ActorState.SLEEPING
    assert state.location_of(WATER) is None
    assert state.location_of(BOTTLE) == "CYCLOPS-ROOM"
    assert GlobalFlag.CYCLOPS_FLAG in state.flags

    game.process_command("up")
    assert state.current_room == "TREASURE-ROOM"


def test_cyclops_refuses_other_food(game: Game):
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game), "GARLIC")
    result = game.process_command("give garlic to cyclops")
    assert result.startswith("The cyclops is not so stupid as to eat THAT!")


def test_cyclops_ignores_attacks(game: Game):
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game), SWORD)
    result = game.process_command("attack cyclops with sword")
    assert result.startswith("The cyclops shrugs but otherwise ignores your pitiful attempt.")


def test_waking_the_cyclops(game: Game):
    state = game.state
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game))
    assert game.process_command("wake cyclops") == "The cyclops is wide awake already."
    state.actors[CYCLOPS].state = ActorState.SLEEPING
    state.flags.add(GlobalFlag.CYCLOPS_FLAG)
    result = game.process_command("wake cyclops")
    assert result.startswith("The cyclops yawns and stares at the thing that woke him up.")
    assert GlobalFlag.CYCLOPS_FLAG not in state.flags


def test_odysseus_scares_the_cyclops(game: Game):
    state = game.state
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game))
    result = game.process_command("odysseus")
    assert "flees the room by knocking down the wall" in result
    assert state.location_of(CYCLOPS) is None
    assert {GlobalFlag.CYCLOPS_FLAG, GlobalFlag.MAGIC_FLAG} <= state.flags

    game.process_command("east")
    assert state.current_room == "STRANGE-PASSAGE"


def test_say_odysseus(game: Game):
    _arena(game, "CYCLOPS-ROOM", _lit_lamp(game))
    assert "flees the room" in game.process_command("say odysseus")


def test_odysseus_elsewhere(game: Game):
    assert game.process_command("ulysses") == "Wasn't he a sailor?"


def test_wake_something_awake(game: Game):
    assert game.process_command("wake mailbox") == "The small mailbox isn't sleeping."
