"""Text rendering for rooms, objects and the inventory."""

from .flags import GlobalFlag, ObjectFlag, Verbosity
from .state import GameState, is_lit, reveals_contents
from .world import PLAYER, World

DARKNESS = "It is pitch black. You are likely to be eaten by a grue."
GHOST_SENSES = (
    "The room looks strange and unearthly and objects appear indistinct, "
    "bleached of color, even unreal."
)


def with_article(name: str) -> str:
    article = "an" if name[:1].lower() in "aeiou" else "a"
    return f"{article} {name}"


def join_names(names: list[str]) -> str:
    """``a leaflet``, ``a lunch and a clove of garlic``, ``a, b, and c``."""
    if len(names) <= 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + f", and {names[-1]}"


def _object_line(world: World, state: GameState, obj_id: str) -> str:
    obj = world.objects[obj_id]
    if obj.first_description and not state.has_flag(obj_id, ObjectFlag.TOUCHED):
        return obj.first_description
    if obj.long_description:
        return obj.long_description
    return f"There is {with_article(obj.name)} here."


def _contents_lines(world: World, state: GameState, container: str, indent: str) -> list[str]:
    """Describe what can be seen inside an open or transparent container."""
    if not reveals_contents(state, container):
        return []
    inner = [
        o for o in state.contents(container)
        if not state.has_flag(o, ObjectFlag.INVISIBLE)
    ]
    if not inner:
        return []

    lines = []
    listed = []
    for obj_id in inner:
        obj = world.objects[obj_id]
        if obj.first_description and not state.has_flag(obj_id, ObjectFlag.TOUCHED):
            lines.append(obj.first_description)
        else:
            listed.append(obj_id)
    if listed:
        holder = world.objects[container]
        if state.has_flag(container, ObjectFlag.SURFACE):
            lines.append(f"{indent}Sitting on the {holder.name} is:")
        else:
            lines.append(f"{indent}The {holder.name} contains:")
        for obj_id in listed:
            name = with_article(world.objects[obj_id].name)
            lines.append(f"{indent}  {name[0].upper()}{name[1:]}")
            lines.extend(_contents_lines(world, state, obj_id, indent + "  "))
    return lines


def describe_objects(world: World, state: GameState) -> list[str]:
    """Listing lines for the visible objects in the current room."""
    lines = []
    for obj_id in state.contents(state.current_room):
        if state.has_flag(obj_id, ObjectFlag.INVISIBLE):
            continue
        if not state.has_flag(obj_id, ObjectFlag.NO_DESCRIBE):
            lines.append(_object_line(world, state, obj_id))
        lines.extend(_contents_lines(world, state, obj_id, ""))
    return lines


def describe_room(
    world: World,
    state: GameState,
    *,
    look: bool = False,
    first_visit: bool = False,
    description: str | None = None,
) -> str:
    """Render the current room.

    LOOK always shows the full text. Otherwise VERBOSE shows it every time,
    BRIEF only on a first visit and SUPERBRIEF never. ``description``
    replaces the content text when a room's wording depends on the game
    state.
    """
    if not is_lit(world, state):
        return DARKNESS

    room = world.rooms[state.current_room]
    match state.verbosity:
        case Verbosity.VERBOSE:
            show_long = True
        case Verbosity.BRIEF:
            show_long = look or first_visit
        case _:
            show_long = look

    parts = [room.name]
    if show_long:
        parts.append(description if description is not None else room.description)

    if GlobalFlag.DEAD in state.flags:
        parts.append(GHOST_SENSES)
    else:
        parts.extend(describe_objects(world, state))
    return "\n".join(parts)


def describe_object(world: World, state: GameState, obj_id: str) -> str:
    """Text for EXAMINE."""
    obj = world.objects[obj_id]
    lines = []
    if obj.description:
        lines.append(obj.description)

    if state.has_flag(obj_id, ObjectFlag.LIGHT):
        if state.has_flag(obj_id, ObjectFlag.BURNED_OUT):
            lines.append(f"The {obj.name} has burned out.")
        elif state.has_flag(obj_id, ObjectFlag.ON):
            lines.append(f"The {obj.name} is on.")
        else:
            lines.append(f"The {obj.name} is turned off.")

    if state.has_flag(obj_id, ObjectFlag.CONTAINER) or state.has_flag(obj_id, ObjectFlag.DOOR):
        inside = _contents_lines(world, state, obj_id, "")
        if inside:
            lines.extend(inside)
        elif state.has_flag(obj_id, ObjectFlag.SURFACE):
            lines.append(f"There is nothing on the {obj.name}.")
        elif state.has_flag(obj_id, ObjectFlag.OPEN):
            if state.has_flag(obj_id, ObjectFlag.CONTAINER):
                lines.append(f"The {obj.name} is empty.")
            else:
                lines.append(f"The {obj.name} is open.")
        elif not state.has_flag(obj_id, ObjectFlag.TRANSPARENT):
            lines.append(f"The {obj.name} is closed.")
        else:
            lines.append(f"The {obj.name} is empty.")

    if not lines:
        return f"There's nothing special about the {obj.name}."
    return "\n".join(lines)


def describe_inventory(world: World, state: GameState) -> str:
    """Text for INVENTORY."""
    if not state.inventory:
        return "You are empty-handed."
    lines = ["You are carrying:"]
    for obj_id in state.contents(PLAYER):
        name = with_article(world.objects[obj_id].name)
        lines.append(f"  {name[0].upper()}{name[1:]}")
        lines.extend(_contents_lines(world, state, obj_id, "  "))
    return "\n".join(lines)
