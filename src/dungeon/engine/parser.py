"""Turn tokens into a Command bound to concrete objects.

Noun phrases are resolved against the objects in scope. The parser never
guesses: a phrase that matches several objects is reported back as
ambiguous, one that matches nothing is reported as not in scope.
"""

from dataclasses import dataclass

from .flags import Direction, ObjectFlag
from .lexer import Token
from .results import ParseErrorKind, ParseFailure
from .state import GameState, is_lit, visible_contents
from .vocabulary import Vocabulary, WordClass
from .world import PLAYER, World


@dataclass(frozen=True)
class Command:
    """A parsed command with objects resolved to ids."""

    verb: str
    direct: str | None = None
    indirect: str | None = None
    preposition: str | None = None
    direction: Direction | None = None
    all_objects: bool = False
    extra: tuple[str, ...] = ()
    text: str = ""

    @property
    def objects(self) -> tuple[str, ...]:
        """Every direct object named, in the order given."""
        if self.direct is None:
            return self.extra
        return (self.direct, *self.extra)


# (verb, particle) -> verb
PHRASAL_VERBS = {
    ("turn", "on"): "light",
    ("turn", "off"): "extinguish",
    ("blow", "out"): "extinguish",
    ("pick", "up"): "take",
    ("put", "down"): "drop",
    ("look", "at"): "examine",
    ("look", "in"): "examine",
    ("look", "on"): "examine",
}

# Verbs that only make sense with a particle
_PARTICLE_ONLY = frozenset(("turn", "pick", "blow"))

NEEDS_DIRECT = frozenset((
    "take", "drop", "put", "open", "close", "examine", "read", "move",
    "light", "extinguish", "attack", "give", "eat", "drink", "wake",
))

# Verb -> preposition used when asking for the missing indirect object
NEEDS_INDIRECT = {"put": "in", "give": "to"}

NO_OBJECTS = frozenset((
    "inventory", "wait", "score", "diagnose", "verbose", "brief",
    "superbrief", "quit", "again", "yes", "no", "odysseus", "pray",
))

ALL_WORDS = frozenset(("all", "everything"))

_UNRECOGNIZED = "That sentence isn't one I recognize."


def compute_scope(world: World, state: GameState) -> list[str]:
    """Objects the player can refer to right now.

    The inventory (and the contents of open held containers) is always in
    scope. In a lit room the room's contents and its global scenery join it.
    """
    scope = visible_contents(world, state, PLAYER)
    if not is_lit(world, state):
        return scope
    scope += visible_contents(world, state, state.current_room)
    for obj_id in world.rooms[state.current_room].global_objects:
        if obj_id not in scope and not state.has_flag(obj_id, ObjectFlag.INVISIBLE):
            scope.append(obj_id)
    return scope


def _name_list(names: list[str]) -> str:
    names = [f"the {n}" for n in names]
    if len(names) == 2:
        return f"{names[0]} or {names[1]}"
    return ", ".join(names[:-1]) + f" or {names[-1]}"


class Parser:
    """Parser bound to one World and its Vocabulary."""

    def __init__(self, world: World, vocabulary: Vocabulary):
        self.world = world
        self.vocabulary = vocabulary

    def _as_preposition(self, token: Token) -> str | None:
        if token.word_class == WordClass.PREPOSITION:
            return token.value
        if token.word_class == WordClass.DIRECTION:
            return self.vocabulary.preposition(token.text)
        return None

    def _matches(self, obj_id: str, noun: str | None, adjectives: list[str]) -> bool:
        obj = self.world.objects[obj_id]
        if noun is not None and noun not in obj.synonyms:
            return False
        return all(adj in obj.adjectives for adj in adjectives)

    def _resolve_phrase(
        self, group: list[Token], scope: list[str], last_object: str | None,
    ) -> str | ParseFailure:
        """Bind one noun phrase (no conjunctions) to a single object id."""
        phrase = " ".join(t.text for t in group)

        if len(group) == 1 and group[0].word_class == WordClass.PRONOUN:
            if last_object is not None and last_object in scope:
                return last_object
            return ParseFailure(
                ParseErrorKind.BAD_PRONOUN,
                "I don't see what you are referring to.",
            )

        if any(t.word_class not in (WordClass.NOUN, WordClass.ADJECTIVE) for t in group):
            return ParseFailure(ParseErrorKind.UNKNOWN_WORD, _UNRECOGNIZED)

        *leading, last = group
        if last.text in self.vocabulary.nouns:
            noun, adjectives = last.text, [t.text for t in leading]
        else:
            noun, adjectives = None, [t.text for t in group]

        candidates = [o for o in scope if self._matches(o, noun, adjectives)]
        if not candidates:
            return ParseFailure(
                ParseErrorKind.NOT_IN_SCOPE, f"You can't see any {phrase} here!",
            )
        if len(candidates) > 1:
            names = [self.world.objects[o].name for o in candidates]
            return ParseFailure(
                ParseErrorKind.AMBIGUOUS,
                f"Which {noun or phrase} do you mean, {_name_list(names)}?",
                tuple(candidates),
            )
        return candidates[0]

    def _resolve_segment(
        self, tokens: list[Token], scope: list[str], last_object: str | None,
    ) -> tuple[list[str], bool] | ParseFailure:
        """Resolve a conjunction-separated list of noun phrases.

        Returns the bound ids and whether ALL was used.
        """
        groups: list[list[Token]] = [[]]
        for token in tokens:
            if token.word_class == WordClass.CONJUNCTION:
                groups.append([])
            else:
                groups[-1].append(token)

        ids: list[str] = []
        all_objects = False
        for group in groups:
            if not group:
                continue
            if len(group) == 1 and group[0].text in ALL_WORDS:
                all_objects = True
                continue
            resolved = self._resolve_phrase(group, scope, last_object)
            if isinstance(resolved, ParseFailure):
                return resolved
            if resolved not in ids:
                ids.append(resolved)
        return ids, all_objects

    def parse(
        self, tokens: list[Token], scope: list[str], last_object: str | None = None,
    ) -> Command | ParseFailure:
        """Parse tokens against the given scope."""
        words = [t for t in tokens if t.word_class != WordClass.ARTICLE]
        if not words:
            return ParseFailure(ParseErrorKind.EMPTY, "I beg your pardon?")

        first, rest = words[0], words[1:]

        # SAY takes the rest of the line verbatim
        if first.word_class == WordClass.VERB and first.value == "say":
            return Command("say", text=" ".join(t.text for t in rest))

        for token in words:
            if token.word_class == WordClass.UNKNOWN:
                return ParseFailure(
                    ParseErrorKind.UNKNOWN_WORD,
                    f'I don\'t know the word "{token.text}".',
                )

        if first.word_class == WordClass.DIRECTION:
            if rest:
                return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)
            return Command("go", direction=first.value)

        if first.word_class != WordClass.VERB:
            return ParseFailure(
                ParseErrorKind.NO_VERB, "There was no verb in that sentence!",
            )

        verb = first.value
        verb_word = first.text

        movement = self._parse_movement(verb, rest)
        if movement is not None:
            return movement

        if rest and (verb, rest[0].text) in PHRASAL_VERBS:
            verb_word = f"{verb_word} {rest[0].text}"
            verb = PHRASAL_VERBS[(verb, rest[0].text)]
            rest = rest[1:]
        elif len(rest) > 1 and (verb, rest[-1].text) in PHRASAL_VERBS:
            verb_word = f"{verb_word} {rest[-1].text}"
            verb = PHRASAL_VERBS[(verb, rest[-1].text)]
            rest = rest[:-1]

        if verb in _PARTICLE_ONLY:
            return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)
        if verb == "look" and rest:
            verb = "examine"
        if verb in NO_OBJECTS and rest:
            return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)

        split_at = next(
            (i for i, t in enumerate(rest) if self._as_preposition(t)), None
        )
        preposition = None
        direct_tokens, indirect_tokens = rest, []
        if split_at is not None:
            preposition = self._as_preposition(rest[split_at])
            direct_tokens = rest[:split_at]
            indirect_tokens = rest[split_at + 1:]
            if any(self._as_preposition(t) for t in indirect_tokens):
                return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)

        resolved = self._resolve_segment(direct_tokens, scope, last_object)
        if isinstance(resolved, ParseFailure):
            return resolved
        direct_ids, all_objects = resolved

        indirect = None
        if indirect_tokens:
            if any(t.word_class == WordClass.CONJUNCTION for t in indirect_tokens):
                return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)
            bound = self._resolve_phrase(indirect_tokens, scope, last_object)
            if isinstance(bound, ParseFailure):
                return bound
            indirect = bound

        if verb in NEEDS_DIRECT and not direct_ids and not all_objects:
            return ParseFailure(
                ParseErrorKind.MISSING_DIRECT, f"What do you want to {verb_word}?",
            )
        if verb in NEEDS_INDIRECT and indirect is None:
            target = "them" if all_objects or len(direct_ids) > 1 else (
                f"the {self.world.objects[direct_ids[0]].name}"
            )
            return ParseFailure(
                ParseErrorKind.MISSING_INDIRECT,
                f"What do you want to {verb_word} {target} {NEEDS_INDIRECT[verb]}?",
            )

        return Command(
            verb=verb,
            direct=direct_ids[0] if direct_ids else None,
            indirect=indirect,
            preposition=preposition,
            all_objects=all_objects,
            extra=tuple(direct_ids[1:]),
        )

    def _parse_movement(self, verb: str, rest: list[Token]) -> Command | ParseFailure | None:
        """Handle GO/ENTER/EXIT/CLIMB forms that reduce to a direction."""
        if verb not in ("go", "enter", "exit", "climb"):
            return None
        if len(rest) == 1 and rest[0].word_class == WordClass.DIRECTION:
            return Command("go", direction=rest[0].value)
        if not rest:
            match verb:
                case "go":
                    return ParseFailure(
                        ParseErrorKind.MISSING_DIRECT, "Where do you want to go?",
                    )
                case "enter":
                    return Command("go", direction=Direction.IN)
                case "exit":
                    return Command("go", direction=Direction.OUT)
                case "climb":
                    return Command("go", direction=Direction.UP)
        if verb == "go":
            return ParseFailure(ParseErrorKind.NO_VERB, _UNRECOGNIZED)
        return None
