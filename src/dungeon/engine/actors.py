"""Non-player characters: the troll, the thief and the cyclops.

Behaviour classes hold no state of their own. Everything that changes lives
in the ``ActorRecord`` kept in ``GameState.actors``, so a restored game only
needs ``build_actors`` to wire the behaviours back up by id.
"""

from typing import TYPE_CHECKING

from ..logging import get_logger
from .combat import Blow, player_defense, player_strength, resolve_blow, wound_player
from .daemons import start_cure
from .flags import ActorState, GlobalFlag, ObjectFlag, RoomFlag
from .state import (
    AXE,
    BOTTLE,
    CYCLOPS,
    CYCLOPS_WRATH,
    LUNCH,
    STILETTO,
    THIEF,
    TROLL,
    WATER,
    ActorRecord,
    move_object,
    room_of,
    treasure_value,
)
from .world import PLAYER

if TYPE_CHECKING:
    from .commands import Game

logger = get_logger(__name__)

CYCLOPS_THIRSTY = "cyclops_thirsty"

TOO_MUCH = "It appears that that last blow was too much for you. I'm afraid you are dead."

# Player blows against a villain
_PLAYER_BLOWS = {
    Blow.MISSED: "A good slash, but it misses the {name} by a mile.",
    Blow.LIGHT_WOUND: "The {name} is struck on the arm; blood begins to trickle down.",
    Blow.SERIOUS_WOUND: "The {name} receives a deep gash in his side.",
    Blow.KNOCKOUT: "The {name} is battered into unconsciousness.",
    Blow.KILLED: "It's curtains for the {name} as your {weapon} removes his head.",
}

_FOG = (
    "Almost as soon as the {name} breathes his last breath, a cloud of "
    "sinister black fog envelops him, and when the fog lifts, the carcass "
    "has disappeared."
)


class Actor:
    """Base behaviour shared by every NPC."""

    obj_id = ""
    REVIVE_CHANCE = 0.5

    def record(self, game: "Game") -> ActorRecord:
        return game.state.actors[self.obj_id]

    def name(self, game: "Game") -> str:
        return game.world.objects[self.obj_id].name

    def is_alive(self, game: "Game") -> bool:
        return (
            self.record(game).state != ActorState.DEAD
            and game.state.location_of(self.obj_id) is not None
        )

    def is_here(self, game: "Game") -> bool:
        return room_of(game.world, game.state, self.obj_id) == game.state.current_room

    def should_act(self, game: "Game") -> bool:
        """Villains only bother with a living player in the same room."""
        return self.is_alive(game) and self.is_here(game) and not game.state.is_dead

    def stays_down(self, game: "Game") -> bool:
        """Whether a knocked-out actor sleeps through this turn.

        Nobody comes round on the turn they were knocked out; after that each
        turn gives an even chance of reviving.
        """
        record = self.record(game)
        if record.state != ActorState.SLEEPING:
            return False
        if game.state.moves <= record.knocked_out_on:
            return True
        return not game.rng.chance(self.REVIVE_CHANCE)

    def transition_state(self, game: "Game") -> ActorState:
        return self.record(game).state

    def execute_turn(self, game: "Game") -> list[str]:
        self.record(game).state = self.transition_state(game)
        return []

    def on_attacked(self, game: "Game", weapon: str) -> list[str]:
        """Resolve one blow from the player and report it."""
        record = self.record(game)
        name = self.name(game)
        weapon_name = game.world.objects[weapon].name

        if record.state == ActorState.SLEEPING:
            blow = Blow.KILLED
        else:
            blow = resolve_blow(game.rng, player_strength(game.world, game.state), record.health)
        logger.debug("player_blow", actor_id=self.obj_id, blow=blow.value)

        messages = [_PLAYER_BLOWS[blow].format(name=name, weapon=weapon_name)]
        match blow:
            case Blow.KILLED:
                messages.extend(self.die(game))
                return messages
            case Blow.KNOCKOUT:
                record.state = ActorState.SLEEPING
                record.knocked_out_on = game.state.moves + 1
                return messages
            case Blow.LIGHT_WOUND:
                record.health -= 1
            case Blow.SERIOUS_WOUND:
                record.health -= 2

        if record.health <= 0:
            messages.append(f"The fatal blow strikes the {name} square in the heart: He dies.")
            messages.extend(self.die(game))
        else:
            record.state = ActorState.FIGHTING
        return messages

    def on_receive_item(self, game: "Game", item: str) -> list[str]:
        move_object(game.world, game.state, item, self.obj_id)
        return [f"The {self.name(game)} accepts the {game.world.objects[item].name}."]

    def die(self, game: "Game") -> list[str]:
        """Drop everything carried in place and leave play for good."""
        state = game.state
        room = room_of(game.world, state, self.obj_id)
        for obj_id in state.contents(self.obj_id):
            move_object(game.world, state, obj_id, room)
        move_object(game.world, state, self.obj_id, None)
        record = self.record(game)
        record.state = ActorState.DEAD
        record.health = 0
        logger.info("actor_died", actor_id=self.obj_id, room=room, moves=state.moves)
        return []

    def _counterattack(self, game: "Game", blows: dict[Blow, str]) -> list[str]:
        """One blow against the player; may end in the player's death."""
        world, state = game.world, game.state
        blow = resolve_blow(game.rng, self.record(game).health, player_defense(world, state))
        logger.debug("actor_blow", actor_id=self.obj_id, blow=blow.value)
        message = blows[blow]
        if blow == Blow.MISSED:
            return [message]

        if wound_player(world, state, blow):
            if blow != Blow.KILLED:
                message = f"{message}\n{TOO_MUCH}"
            return [game.death.kill(message)]
        start_cure(game)
        return [message]


class Troll(Actor):
    """Guards the troll room and fights anyone who stays."""

    obj_id = TROLL

    BLOWS = {
        Blow.MISSED: "The troll swings his axe, but it misses.",
        Blow.LIGHT_WOUND: "The axe gets you right in the side. Ouch!",
        Blow.SERIOUS_WOUND: "The flat of the troll's axe hits you hard. You stagger.",
        Blow.KNOCKOUT: "The troll hits you with a glancing blow, and you are momentarily stunned.",
        Blow.KILLED: "The troll's axe removes your head.",
    }

    def transition_state(self, game: "Game") -> ActorState:
        # Comes round ready to fight
        return ActorState.FIGHTING

    def execute_turn(self, game: "Game") -> list[str]:
        if self.stays_down(game):
            return []
        record = self.record(game)
        was_sleeping = record.state == ActorState.SLEEPING
        record.state = self.transition_state(game)
        if was_sleeping:
            return ["The troll stirs, quickly resuming a fighting stance."]

        state = game.state
        if state.location_of(AXE) != TROLL:
            if state.location_of(AXE) == state.current_room:
                move_object(game.world, state, AXE, TROLL)
                return ["The troll, angered and humiliated, recovers his weapon."]
            return [
                "The troll, disarmed, cowers in terror, pleading for his life in "
                "the guttural tongue of the trolls."
            ]
        return self._counterattack(game, self.BLOWS)

    def on_receive_item(self, game: "Game", item: str) -> list[str]:
        world, state = game.world, game.state
        name = world.objects[item].name
        if item == AXE:
            move_object(world, state, item, TROLL)
            return [f"The troll, who is remarkably coordinated, catches the {name}."]
        if state.has_flag(item, ObjectFlag.WEAPON):
            move_object(world, state, item, state.current_room)
            return [
                f"The troll scratches his head in confusion, then tosses the {name} back."
            ]
        move_object(world, state, item, None)
        return [
            "The troll, who is not overly proud, graciously accepts the gift and "
            "eats it hungrily."
        ]

    def die(self, game: "Game") -> list[str]:
        messages = [_FOG.format(name="troll")]
        super().die(game)
        game.state.flags.add(GlobalFlag.TROLL_FLAG)
        return messages


class Thief(Actor):
    """Wanders the dungeon, robbing the player and hoarding treasure."""

    obj_id = THIEF
    STEAL_CHANCE = 0.3

    BLOWS = {
        Blow.MISSED: "The thief stabs nonchalantly with his stiletto and misses.",
        Blow.LIGHT_WOUND: "A quick thrust pinks your left arm, and blood starts to trickle down.",
        Blow.SERIOUS_WOUND: "The stiletto flashes faster than you can follow, and blood wells from your leg.",
        Blow.KNOCKOUT: "The butt of his stiletto cracks you on the skull, and you stagger back.",
        Blow.KILLED: "Finishing you off, the thief inserts his blade into your heart.",
    }

    def should_act(self, game: "Game") -> bool:
        return self.is_alive(game)

    def transition_state(self, game: "Game") -> ActorState:
        record = self.record(game)
        match record.state:
            case ActorState.SLEEPING:
                return ActorState.FLEEING if self.is_here(game) else ActorState.NORMAL
            case ActorState.FIGHTING if self.is_here(game) and not game.state.is_dead:
                return ActorState.FIGHTING
            case ActorState.FLEEING | ActorState.FIGHTING:
                return ActorState.NORMAL
        return record.state

    def execute_turn(self, game: "Game") -> list[str]:
        if self.stays_down(game):
            return []
        record = self.record(game)
        previous = record.state
        record.state = self.transition_state(game)

        if previous == ActorState.SLEEPING:
            if record.state == ActorState.FLEEING:
                return [
                    "The robber revives, briefly feigning continued "
                    "unconsciousness, and, when he sees his moment, scrambles "
                    "away from you."
                ]
            return []
        if record.state == ActorState.FIGHTING:
            return self._counterattack(game, self.BLOWS)
        if previous == ActorState.FLEEING:
            was_here = self.is_here(game)
            self._wander(game)
            if was_here:
                return [
                    "The thief just left, still carrying his large bag. You may "
                    "not have noticed that he robbed you blind first."
                ]
            return []

        if self.is_here(game) and not game.state.is_dead:
            return self._visit(game)
        self._stash(game)
        self._wander(game)
        return []

    def _loot(self, game: "Game") -> list[str]:
        world, state = game.world, game.state
        candidates = state.contents(state.current_room) + list(state.inventory)
        return [
            o for o in candidates
            if o not in (THIEF, STILETTO)
            and not state.has_flag(o, ObjectFlag.ACTOR)
            and treasure_value(world, state, o) > 0
        ]

    def _visit(self, game: "Game") -> list[str]:
        """The thief shares the player's room: rob or move on."""
        loot = self._loot(game)
        if not loot:
            self._wander(game)
            return ["The holder of the large bag just left, looking disgusted."]
        if not game.rng.chance(self.STEAL_CHANCE):
            return []

        world, state = game.world, game.state
        for obj_id in loot:
            move_object(world, state, obj_id, THIEF)
        self.record(game).state = ActorState.FLEEING
        logger.info("items_stolen", objects=loot, room=state.current_room)
        return [
            "A seedy-looking individual with a large bag just wandered through "
            "the room. On the way through, he quietly abstracted some valuables "
            "from the room and from your possession, mumbling something about "
            "\"Doing unto others before...\""
        ]

    def _stash(self, game: "Game") -> None:
        """Leave the loot in the treasure room when passing through."""
        world, state = game.world, game.state
        if state.location_of(THIEF) != world.treasure_room:
            return
        for obj_id in state.contents(THIEF):
            if obj_id != STILETTO:
                move_object(world, state, obj_id, world.treasure_room)

    def _wander(self, game: "Game") -> None:
        world, state = game.world, game.state
        room = world.rooms.get(state.location_of(THIEF) or "")
        if room is None:
            return
        choices = [
            e.destination for e in room.exits
            if e.destination in world.rooms
            and RoomFlag.SACRED not in world.rooms[e.destination].flags
        ]
        if choices:
            move_object(world, state, THIEF, game.rng.choice(choices))

    def on_receive_item(self, game: "Game", item: str) -> list[str]:
        move_object(game.world, game.state, item, THIEF)
        name = game.world.objects[item].name
        return [
            f"The thief places the {name} in his bag and thanks you politely."
        ]

    def die(self, game: "Game") -> list[str]:
        booty = any(o != STILETTO for o in game.state.contents(THIEF))
        messages = [_FOG.format(name="thief")]
        super().die(game)
        if booty:
            messages.append("His booty remains.")
        return messages


class Cyclops(Actor):
    """Blocks the stairs to the treasure room until fed, watered or scared off."""

    obj_id = CYCLOPS

    WRATH = {
        1: "The cyclops seems somewhat agitated.",
        2: "The cyclops appears to be getting more agitated.",
        3: "The cyclops is moving about the room, looking for something.",
        4: (
            "The cyclops was looking for salt and pepper. No doubt they are "
            "condiments for his upcoming snack."
        ),
    }
    EATS = (
        "The cyclops, tired of all of your games and trickery, grabs you "
        "firmly. As he licks his chops, he says \"Mmm. Just like Mom used to "
        "make 'em.\" It's nice to be appreciated."
    )
    MAX_WRATH = 5

    def should_act(self, game: "Game") -> bool:
        return super().should_act(game) and self.record(game).state != ActorState.SLEEPING

    def execute_turn(self, game: "Game") -> list[str]:
        variables = game.state.variables
        variables[CYCLOPS_WRATH] = variables.get(CYCLOPS_WRATH, 0) + 1
        wrath = variables[CYCLOPS_WRATH]
        if wrath >= self.MAX_WRATH:
            variables[CYCLOPS_WRATH] = 0
            return [game.death.kill(self.EATS)]
        return [self.WRATH[wrath]]

    def on_attacked(self, game: "Game", weapon: str) -> list[str]:
        if self.record(game).state == ActorState.SLEEPING:
            return self.wake(game)
        return ["The cyclops shrugs but otherwise ignores your pitiful attempt."]

    def on_receive_item(self, game: "Game", item: str) -> list[str]:
        world, state = game.world, game.state
        if item == LUNCH:
            move_object(world, state, LUNCH, None)
            state.variables[CYCLOPS_THIRSTY] = 1
            state.variables[CYCLOPS_WRATH] = 0
            return [
                "The cyclops says \"Mmm Mmm. I love hot peppers! But oh, could I "
                "use a drink. Perhaps I could drink the blood of that thing.\"  "
                "From the gleam in his eye, it could be surmised that you are "
                "\"that thing\"."
            ]
        if item in (WATER, BOTTLE) and state.location_of(WATER) in (BOTTLE, state.current_room, PLAYER):
            if not state.variables.get(CYCLOPS_THIRSTY):
                return ["The cyclops apparently is not thirsty and refuses your generous offer."]
            move_object(world, state, WATER, None)
            if state.location_of(BOTTLE) is not None:
                move_object(world, state, BOTTLE, state.current_room)
            self.record(game).state = ActorState.SLEEPING
            state.variables[CYCLOPS_WRATH] = 0
            state.flags.add(GlobalFlag.CYCLOPS_FLAG)
            logger.info("cyclops_asleep", moves=state.moves)
            return [
                "The cyclops takes the bottle, checks that it's open, and drinks "
                "the water. A moment later, he lets out a yawn that nearly blows "
                "you over, and then falls fast asleep (what did you put in that "
                "drink, anyway?)."
            ]
        return ["The cyclops is not so stupid as to eat THAT!"]

    def wake(self, game: "Game") -> list[str]:
        record = self.record(game)
        if record.state != ActorState.SLEEPING:
            return ["The cyclops is wide awake already."]
        record.state = ActorState.NORMAL
        game.state.flags.discard(GlobalFlag.CYCLOPS_FLAG)
        return ["The cyclops yawns and stares at the thing that woke him up."]

    def flee(self, game: "Game") -> list[str]:
        """The cyclops hears his father's nemesis named and runs for it."""
        state = game.state
        move_object(game.world, state, CYCLOPS, None)
        self.record(game).state = ActorState.FLEEING
        state.flags.update((GlobalFlag.CYCLOPS_FLAG, GlobalFlag.MAGIC_FLAG))
        logger.info("cyclops_fled", moves=state.moves)
        return [
            "The cyclops, hearing the name of his father's deadly nemesis, flees "
            "the room by knocking down the wall on the east of the room."
        ]


ACTOR_TYPES: dict[str, type[Actor]] = {
    TROLL: Troll,
    THIEF: Thief,
    CYCLOPS: Cyclops,
}


def build_actors(game: "Game") -> dict[str, Actor]:
    """Behaviours for the actors present in the world, creating records as needed."""
    actors = {}
    for obj_id, actor_type in ACTOR_TYPES.items():
        obj = game.world.objects.get(obj_id)
        if obj is None:
            continue
        if obj_id not in game.state.actors:
            game.state.actors[obj_id] = ActorRecord(
                obj_id, strength=obj.strength, health=obj.strength,
            )
        actors[obj_id] = actor_type()
    return actors


def run_actors(game: "Game") -> list[str]:
    """Give every actor its turn; stop as soon as the player dies."""
    messages = []
    state = game.state
    for actor in game.actors.values():
        if state.game_over:
            break
        if not actor.should_act(game):
            continue
        deaths = state.deaths
        messages.extend(actor.execute_turn(game))
        if state.deaths != deaths or state.game_over:
            break
    return messages
