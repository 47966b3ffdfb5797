"""Plain-JSON snapshots of a GameState.

The snapshot holds ids, ints, strings and flag names only. Callbacks and
actor behaviours are not stored; ``commands.Game.from_snapshot`` wires them
back up by id.
"""

from typing import Any

from .flags import ActorState, GlobalFlag, ObjectFlag, Verbosity
from .results import ContentError
from .rng import GameRandom
from .state import ActorRecord, EventRecord, GameState
from .world import World

SNAPSHOT_VERSION = 1


def _names(flags) -> list[str]:
    return sorted(flag.value for flag in flags)


def dump_state(state: GameState, rng: GameRandom | None = None) -> dict[str, Any]:
    """Serialize a game state (and optionally its RNG) to a JSON-safe dict."""
    data = {
        "version": SNAPSHOT_VERSION,
        "current_room": state.current_room,
        "previous_room": state.previous_room,
        "inventory": list(state.inventory),
        "object_locations": dict(state.object_locations),
        "object_flags": {
            obj_id: _names(flags) for obj_id, flags in state.object_flags.items()
        },
        "treasure_overrides": dict(state.treasure_overrides),
        "visited_rooms": sorted(state.visited_rooms),
        "scored_objects": sorted(state.scored_objects),
        "score": state.score,
        "moves": state.moves,
        "deaths": state.deaths,
        "flags": _names(state.flags),
        "variables": dict(state.variables),
        "verbosity": state.verbosity.value,
        "last_command": state.last_command,
        "last_object": state.last_object,
        "events": [
            {
                "id": record.id,
                "enabled": record.enabled,
                "daemon": record.daemon,
                "ticks": record.ticks,
                "stage": record.stage,
                "last_run": record.last_run,
            }
            for record in state.events.values()
        ],
        "actors": [
            {
                "id": record.id,
                "state": record.state.value,
                "strength": record.strength,
                "health": record.health,
                "knocked_out_on": record.knocked_out_on,
            }
            for record in state.actors.values()
        ],
    }
    if rng is not None:
        data["rng"] = {"seed": rng.seed, "state": rng.get_state()}
    return data


def load_state(world: World, data: dict[str, Any]) -> GameState:
    """Rebuild a GameState from ``dump_state`` output.

    Raises ContentError when the snapshot refers to rooms or objects the
    world does not have.
    """
    state = GameState(
        current_room=data["current_room"],
        previous_room=data.get("previous_room", data["current_room"]),
        inventory=list(data.get("inventory", [])),
        object_locations=dict(data.get("object_locations", {})),
        object_flags={
            obj_id: {ObjectFlag(name) for name in names}
            for obj_id, names in data.get("object_flags", {}).items()
        },
        treasure_overrides=dict(data.get("treasure_overrides", {})),
        visited_rooms=set(data.get("visited_rooms", [])),
        scored_objects=set(data.get("scored_objects", [])),
        score=data.get("score", 0),
        moves=data.get("moves", 0),
        deaths=data.get("deaths", 0),
        flags={GlobalFlag(name) for name in data.get("flags", [])},
        variables=dict(data.get("variables", {})),
        verbosity=Verbosity(data.get("verbosity", Verbosity.BRIEF.value)),
        last_command=data.get("last_command"),
        last_object=data.get("last_object"),
    )
    for raw in data.get("events", []):
        state.events[raw["id"]] = EventRecord(**raw)
    for raw in data.get("actors", []):
        state.actors[raw["id"]] = ActorRecord(
            raw["id"],
            state=ActorState(raw["state"]),
            strength=raw.get("strength", 0),
            health=raw.get("health", 0),
            knocked_out_on=raw.get("knocked_out_on", -1),
        )

    if state.current_room not in world.rooms:
        raise ContentError(f"Snapshot room {state.current_room!r} does not exist")
    unknown = set(state.object_locations) - set(world.objects)
    if unknown:
        raise ContentError(f"Snapshot has unknown objects: {sorted(unknown)}")
    return state


def load_rng(data: dict[str, Any]) -> GameRandom:
    """The RNG saved alongside a snapshot, or a fresh one if none was saved."""
    saved = data.get("rng")
    if not saved:
        return GameRandom()
    rng = GameRandom(saved.get("seed"))
    rng.set_state(saved["state"])
    return rng
