"""Parse the JSON content file into a World object.

The file holds a header (start and special rooms, load limit, rank table)
followed by a ``rooms`` list and an ``objects`` list. Flags are named by
their enum values; conditions use a small tagged form:

    {"flag": "troll_flag"}
    {"variable": "name", "equals": 3}
    {"object": "KITCHEN-WINDOW", "has": "open"}
    {"not": <condition>}
    {"all": [<condition>, ...]}
"""

import json
from pathlib import Path
from typing import Any

from .conditions import AllOf, Condition, FlagSet, Not, ObjectHasFlag, VariableEquals
from .flags import Direction, GlobalFlag, ObjectFlag, RoomFlag, parse_flags
from .results import ContentError
from .world import PLAYER, Exit, Obj, Room, World


def _parse_condition(raw: dict[str, Any] | None) -> Condition | None:
    if raw is None:
        return None
    try:
        if "flag" in raw:
            return FlagSet(GlobalFlag(raw["flag"]))
        if "variable" in raw:
            return VariableEquals(raw["variable"], int(raw["equals"]))
        if "object" in raw:
            return ObjectHasFlag(raw["object"], ObjectFlag(raw["has"]))
        if "not" in raw:
            return Not(_parse_condition(raw["not"]))
        if "all" in raw:
            return AllOf(tuple(_parse_condition(c) for c in raw["all"]))
    except (KeyError, ValueError) as exc:
        raise ContentError(f"bad condition {raw!r}: {exc}") from exc
    raise ContentError(f"unknown condition {raw!r}")


def _parse_exit(room_id: str, raw: dict[str, Any]) -> Exit:
    try:
        direction = Direction(raw["dir"])
    except (KeyError, ValueError) as exc:
        raise ContentError(f"room {room_id}: bad exit direction {raw!r}") from exc
    return Exit(
        direction=direction,
        destination=raw.get("to") or None,
        message=raw.get("message", ""),
        condition=_parse_condition(raw.get("when")),
    )


def _parse_room(raw: dict[str, Any]) -> Room:
    room_id = raw["id"]
    try:
        flags = frozenset(parse_flags(RoomFlag, raw.get("flags", [])))
    except ValueError as exc:
        raise ContentError(f"room {room_id}: {exc}") from exc
    return Room(
        id=room_id,
        name=raw["name"],
        description=raw.get("description", ""),
        exits=[_parse_exit(room_id, e) for e in raw.get("exits", [])],
        flags=flags,
        global_objects=tuple(raw.get("globals", [])),
    )


def _parse_object(raw: dict[str, Any]) -> Obj:
    obj_id = raw["id"]
    try:
        flags = frozenset(parse_flags(ObjectFlag, raw.get("flags", [])))
    except ValueError as exc:
        raise ContentError(f"object {obj_id}: {exc}") from exc
    return Obj(
        id=obj_id,
        name=raw["name"],
        synonyms=tuple(s.lower() for s in raw.get("synonyms", [])),
        adjectives=tuple(a.lower() for a in raw.get("adjectives", [])),
        description=raw.get("description", ""),
        first_description=raw.get("first_description", ""),
        long_description=raw.get("long_description", ""),
        text=raw.get("text", ""),
        location=raw.get("location") or None,
        flags=flags,
        capacity=raw.get("capacity", 0),
        size=raw.get("size", 0),
        value=raw.get("value", 0),
        treasure_value=raw.get("treasure_value", 0),
        strength=raw.get("strength", 0),
    )


def _validate(world: World) -> None:
    """Check cross references between rooms and objects."""
    for room in world.rooms.values():
        for exit_ in room.exits:
            if exit_.destination and exit_.destination not in world.rooms:
                raise ContentError(
                    f"room {room.id}: exit {exit_.direction.value} leads to "
                    f"unknown room {exit_.destination}"
                )
        for obj_id in room.global_objects:
            if obj_id not in world.objects:
                raise ContentError(f"room {room.id}: unknown global object {obj_id}")

    for obj in world.objects.values():
        loc = obj.location
        if loc is None or loc == PLAYER or loc in world.rooms:
            continue
        if loc not in world.objects:
            raise ContentError(f"object {obj.id}: unknown location {loc}")
        holder = world.objects[loc]
        if not holder.flags & {ObjectFlag.CONTAINER, ObjectFlag.ACTOR}:
            raise ContentError(f"object {obj.id}: {loc} is not a container")

    for room_id in (
        world.start_room, world.respawn_room, world.hades_room,
        world.temple_room, world.treasure_room, *world.above_ground,
    ):
        if room_id not in world.rooms:
            raise ContentError(f"unknown special room {room_id!r}")
    if world.trophy_case not in world.objects:
        raise ContentError(f"unknown trophy case {world.trophy_case!r}")


def parse_world(data: dict[str, Any]) -> World:
    """Build a World from already-decoded content."""
    world = World(
        start_room=data["start_room"],
        respawn_room=data["respawn_room"],
        hades_room=data["hades_room"],
        temple_room=data["temple_room"],
        trophy_case=data["trophy_case"],
        treasure_room=data["treasure_room"],
        above_ground=tuple(data.get("above_ground", [])),
        max_load=data.get("max_load", 100),
        rank_table=tuple(
            (int(score), str(rank)) for score, rank in data.get("ranks", [])
        ),
    )

    for raw in data.get("rooms", []):
        room = _parse_room(raw)
        if room.id in world.rooms:
            raise ContentError(f"duplicate room {room.id}")
        world.rooms[room.id] = room

    for raw in data.get("objects", []):
        obj = _parse_object(raw)
        if obj.id in world.objects:
            raise ContentError(f"duplicate object {obj.id}")
        world.objects[obj.id] = obj

    _validate(world)
    return world


def load_world(data_path: Path) -> World:
    """Parse the content file and return a populated World."""
    with data_path.open(encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ContentError(f"{data_path}: {exc}") from exc
    return parse_world(data)
