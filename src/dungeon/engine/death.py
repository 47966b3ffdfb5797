"""Death, the ghost state and resurrection."""

from typing import TYPE_CHECKING

from ..logging import get_logger
from .actions import enter_room
from .daemons import LIGHT_SOURCES, SWORD_EVENT, put_out_match
from .flags import ActorState, GlobalFlag, ObjectFlag, RoomFlag
from .scoring import apply_death_penalty
from .state import (
    COFFIN,
    COFFIN_HOME,
    LAMP,
    LAMP_HOME,
    SWORD,
    TRAP_DOOR,
    TROLL,
    WOUNDS,
    move_object,
    treasure_value,
)

if TYPE_CHECKING:
    from .commands import Game

logger = get_logger(__name__)

MAX_DEATHS = 2

BANNER = "\n    ****  You have died  ****\n\n"

ALREADY_DEAD = (
    "It takes a talented person to be killed while already dead. YOU are such "
    "a talent. Unfortunately, it takes a talented person to deal with it. "
    "I am not such a talent. Sorry."
)

SUICIDAL = (
    "You clearly are a suicidal maniac.  We don't allow psychotics in the "
    "cave, since they may harm other adventurers.  Your remains will be "
    "installed in the Land of the Living Dead, where your fellow "
    "adventurers may gloat over them."
)

GHOST = (
    "As you take your last breath, you feel relieved of your burdens. The "
    "feeling passes as you find yourself before the gates of Hell, where "
    "the spirits jeer at you and deny you entry.  Your senses are "
    "disturbed.  The objects in the dungeon appear indistinct, bleached of "
    "color, even unreal."
)

ANOTHER_CHANCE = (
    "Now, let's take a look here... Well, you probably deserve another "
    "chance. I can't quite fix you up completely, but you can't have "
    "everything."
)

REVIVED = (
    "From the distance the sound of a lone trumpet is heard. The room "
    "becomes very bright and you feel disembodied. In a moment, the "
    "brightness fades and you find yourself rising as if from a long "
    "sleep, deep in the woods. In the distance you can faintly hear a "
    "songbird and the sounds of the forest."
)


class DeathSystem:
    """Kills and revives the player of one game."""

    def __init__(self, game: "Game"):
        self.game = game

    def kill(self, message: str) -> str:
        """Handle the player's death and return the text to show.

        The third death, and any death while already a ghost, ends the game.
        """
        game = self.game
        state = game.state
        lines = []

        if state.is_dead:
            state.flags.add(GlobalFlag.GAME_OVER)
            logger.info("game_over", reason="killed_while_dead", moves=state.moves)
            return ALREADY_DEAD

        if message:
            lines.append(message)
        if GlobalFlag.LUCKY not in state.flags:
            lines.append("Bad luck, huh?")
        lines.append(BANNER)
        apply_death_penalty(state)

        if state.deaths >= MAX_DEATHS:
            state.flags.add(GlobalFlag.GAME_OVER)
            lines.append(SUICIDAL)
            logger.info("game_over", reason="too_many_deaths", deaths=state.deaths + 1)
            return "\n".join(lines)

        state.deaths += 1
        state.variables[WOUNDS] = 0
        logger.info(
            "player_died", deaths=state.deaths, room=state.current_room,
            score=state.score,
        )

        self._scatter_belongings()
        self._kill_interrupts()

        if game.world.temple_room in state.visited_rooms:
            state.flags.update((GlobalFlag.DEAD, GlobalFlag.TROLL_FLAG, GlobalFlag.ALWAYS_LIT))
            lines.append(GHOST)
            lines.append("")
            lines.append(enter_room(game, game.world.hades_room))
        else:
            lines.append(ANOTHER_CHANCE)
            lines.append("")
            lines.append(enter_room(game, game.world.respawn_room))
        return "\n".join(lines)

    def revive(self) -> str:
        """Bring a ghost back to life in the forest."""
        game = self.game
        state = game.state
        state.flags.difference_update((GlobalFlag.DEAD, GlobalFlag.ALWAYS_LIT))
        troll = state.actors.get(TROLL)
        if troll is not None and troll.state != ActorState.DEAD:
            state.flags.discard(GlobalFlag.TROLL_FLAG)
        logger.info("player_revived", moves=state.moves)
        return f"{REVIVED}\n\n{enter_room(game, game.world.respawn_room)}"

    def _scatter_belongings(self) -> None:
        """Return the lamp and coffin home and spread the rest of the inventory.

        Treasures land in dark land rooms (each room in turn gets an even
        chance, falling back to a random one); everything else is dropped
        somewhere above ground.
        """
        game = self.game
        world, state, rng = game.world, game.state, game.rng

        if SWORD in world.objects:
            state.treasure_overrides[SWORD] = 0

        homes = {LAMP: LAMP_HOME, COFFIN: COFFIN_HOME}
        land_rooms = [
            room.id for room in world.rooms.values()
            if RoomFlag.LAND in room.flags and RoomFlag.LIT not in room.flags
        ]

        for obj_id in list(state.inventory):
            if obj_id in homes and homes[obj_id] in world.rooms:
                destination = homes[obj_id]
            elif treasure_value(world, state, obj_id) > 0 and land_rooms:
                destination = next(
                    (room for room in land_rooms if rng.chance(0.5)), None,
                ) or rng.choice(land_rooms)
            else:
                destination = rng.choice(world.above_ground)
            move_object(world, state, obj_id, destination)

        if TRAP_DOOR in world.objects:
            state.clear_flag(TRAP_DOOR, ObjectFlag.TOUCHED)

    def _kill_interrupts(self) -> None:
        game = self.game
        for source in LIGHT_SOURCES.values():
            if source.event_id in game.state.events:
                game.scheduler.disable(source.event_id)
        if SWORD_EVENT in game.state.events:
            game.scheduler.disable(SWORD_EVENT)
            game.scheduler.record(SWORD_EVENT).stage = 0
        put_out_match(game)
        for record in game.state.actors.values():
            if record.state == ActorState.FIGHTING:
                record.state = ActorState.NORMAL
