"""Word tables and classification.

The fixed tables (verbs, prepositions, directions, articles) are shared by
every game. Nouns and adjectives come from the loaded content, so a
Vocabulary is built once per World.
"""

from dataclasses import dataclass
from enum import Enum

from .flags import Direction
from .world import World


class WordClass(Enum):
    NOUN = "noun"
    ADJECTIVE = "adjective"
    VERB = "verb"
    PREPOSITION = "preposition"
    DIRECTION = "direction"
    ARTICLE = "article"
    PRONOUN = "pronoun"
    CONJUNCTION = "conjunction"
    UNKNOWN = "unknown"


ABBREVIATIONS = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
    "ne": "northeast",
    "nw": "northwest",
    "se": "southeast",
    "sw": "southwest",
    "i": "inventory",
    "x": "examine",
    "l": "look",
    "z": "wait",
    "q": "quit",
    "y": "yes",
    "g": "again",
}

DIRECTIONS = {
    "north": Direction.NORTH,
    "south": Direction.SOUTH,
    "east": Direction.EAST,
    "west": Direction.WEST,
    "northeast": Direction.NORTHEAST,
    "northwest": Direction.NORTHWEST,
    "southeast": Direction.SOUTHEAST,
    "southwest": Direction.SOUTHWEST,
    "up": Direction.UP,
    "upward": Direction.UP,
    "upstairs": Direction.UP,
    "down": Direction.DOWN,
    "downward": Direction.DOWN,
    "downstairs": Direction.DOWN,
    "in": Direction.IN,
    "inside": Direction.IN,
    "out": Direction.OUT,
    "outside": Direction.OUT,
}

# Canonical verb -> accepted words
VERBS: dict[str, tuple[str, ...]] = {
    "take": ("take", "get", "hold", "carry", "grab", "catch", "remove"),
    "drop": ("drop", "discard"),
    "put": ("put", "place", "insert", "stuff"),
    "open": ("open",),
    "close": ("close", "shut"),
    "look": ("look", "stare", "gaze"),
    "examine": ("examine", "describe", "inspect", "what"),
    "read": ("read", "skim"),
    "inventory": ("inventory",),
    "move": ("move", "push", "pull", "press", "roll", "tug", "shift"),
    "light": ("light", "activate"),
    "extinguish": ("extinguish", "douse"),
    "turn": ("turn", "switch", "flip"),
    "pick": ("pick",),
    "blow": ("blow",),
    "go": ("go", "walk", "run", "proceed", "step"),
    "enter": ("enter",),
    "exit": ("exit", "leave"),
    "climb": ("climb", "scale"),
    "attack": (
        "attack", "kill", "fight", "hurt", "injure", "hit", "murder", "slay",
        "stab", "strike",
    ),
    "give": ("give", "offer", "feed", "hand", "donate"),
    "eat": ("eat", "consume", "taste", "bite"),
    "drink": ("drink", "imbibe", "swallow", "sip"),
    "say": ("say", "speak", "shout", "yell"),
    "odysseus": ("odysseus", "ulysses"),
    "pray": ("pray", "repent"),
    "jump": ("jump", "leap"),
    "wake": ("wake", "awaken", "rouse", "startle"),
    "wait": ("wait",),
    "score": ("score",),
    "diagnose": ("diagnose",),
    "verbose": ("verbose",),
    "brief": ("brief",),
    "superbrief": ("superbrief", "super"),
    "quit": ("quit",),
    "again": ("again",),
    "yes": ("yes",),
    "no": ("no",),
}

PREPOSITIONS = {
    "in": "in",
    "into": "in",
    "inside": "in",
    "on": "on",
    "onto": "on",
    "with": "with",
    "using": "with",
    "to": "to",
    "at": "at",
    "from": "from",
    "off": "off",
    "out": "out",
    "up": "up",
    "down": "down",
    "under": "under",
}

ARTICLES = frozenset(("a", "an", "the", "some"))
PRONOUNS = frozenset(("it", "them", "all", "everything"))
CONJUNCTIONS = frozenset(("and", ","))


@dataclass(frozen=True)
class Vocabulary:
    """Classifies words for one World's content."""

    nouns: frozenset[str]
    adjectives: frozenset[str]

    @classmethod
    def from_world(cls, world: World) -> "Vocabulary":
        nouns: set[str] = set()
        adjectives: set[str] = set()
        for obj in world.objects.values():
            nouns.update(obj.synonyms)
            adjectives.update(obj.adjectives)
        return cls(frozenset(nouns), frozenset(adjectives))

    def expand(self, word: str) -> str:
        """Expand abbreviations (``n`` -> ``north``, ``x`` -> ``examine``)."""
        return ABBREVIATIONS.get(word, word)

    def canonical_verb(self, word: str) -> str | None:
        return _VERB_INDEX.get(word)

    def direction(self, word: str) -> Direction | None:
        return DIRECTIONS.get(word)

    def preposition(self, word: str) -> str | None:
        return PREPOSITIONS.get(word)

    def classify(self, word: str) -> WordClass:
        """Classify an already-expanded word.

        Directions win over prepositions and verbs win over nouns; the
        parser reinterprets ``in``/``out``/``up``/``down`` after a verb.
        """
        if word in ARTICLES:
            return WordClass.ARTICLE
        if word in PRONOUNS:
            return WordClass.PRONOUN
        if word in CONJUNCTIONS:
            return WordClass.CONJUNCTION
        if word in DIRECTIONS:
            return WordClass.DIRECTION
        if word in _VERB_INDEX:
            return WordClass.VERB
        if word in PREPOSITIONS:
            return WordClass.PREPOSITION
        if word in self.nouns:
            return WordClass.NOUN
        if word in self.adjectives:
            return WordClass.ADJECTIVE
        return WordClass.UNKNOWN


_VERB_INDEX = {word: verb for verb, words in VERBS.items() for word in words}
