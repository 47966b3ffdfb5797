"""Tests for word classification and the lexer."""

from dungeon.engine.flags import Direction
from dungeon.engine.lexer import tokenize
from dungeon.engine.vocabulary import Vocabulary, WordClass
from dungeon.engine.world import World


def _classes(vocabulary: Vocabulary, text: str) -> list[WordClass]:
    return [t.word_class for t in tokenize(vocabulary, text)]


def test_nouns_and_adjectives_come_from_content(world: World):
    """Object synonyms become nouns, object adjectives become adjectives."""
    vocabulary = Vocabulary.from_world(world)
    assert "mailbox" in vocabulary.nouns
    assert "lantern" in vocabulary.nouns
    assert "brass" in vocabulary.adjectives


def test_abbreviations_expand(world: World):
    """Single-letter shortcuts expand before classification."""
    vocabulary = Vocabulary.from_world(world)
    tokens = tokenize(vocabulary, "n")
    assert tokens[0].word_class == WordClass.DIRECTION
    assert tokens[0].value == Direction.NORTH

    tokens = tokenize(vocabulary, "x lamp")
    assert tokens[0].value == "examine"
    assert tokens[1].word_class == WordClass.NOUN


def test_verb_synonyms_map_to_canonical(world: World):
    """GET and GRAB are both TAKE."""
    vocabulary = Vocabulary.from_world(world)
    assert tokenize(vocabulary, "get")[0].value == "take"
    assert tokenize(vocabulary, "grab")[0].value == "take"
    assert tokenize(vocabulary, "shut")[0].value == "close"


def test_case_and_punctuation_are_ignored(world: World):
    """Input is lower-cased and stray punctuation dropped."""
    vocabulary = Vocabulary.from_world(world)
    tokens = tokenize(vocabulary, "  OPEN the Mailbox!! ")
    assert [t.text for t in tokens] == ["open", "the", "mailbox"]
    assert _classes(vocabulary, "OPEN the Mailbox!!") == [
        WordClass.VERB, WordClass.ARTICLE, WordClass.NOUN,
    ]


def test_commas_are_conjunctions(world: World):
    """``take lamp, sword`` splits on the comma."""
    vocabulary = Vocabulary.from_world(world)
    assert _classes(vocabulary, "take lamp, sword") == [
        WordClass.VERB, WordClass.NOUN, WordClass.CONJUNCTION, WordClass.NOUN,
    ]


def test_unknown_words_are_flagged(world: World):
    """Words nobody defined classify as UNKNOWN."""
    vocabulary = Vocabulary.from_world(world)
    assert _classes(vocabulary, "take xyzzy") == [WordClass.VERB, WordClass.UNKNOWN]


def test_prepositions_normalise(world: World):
    """INTO and INSIDE both mean IN; IN itself classifies as a direction."""
    vocabulary = Vocabulary.from_world(world)
    tokens = tokenize(vocabulary, "put leaflet into mailbox")
    assert tokens[2].word_class == WordClass.PREPOSITION
    assert tokens[2].value == "in"
    assert vocabulary.classify("in") == WordClass.DIRECTION


def test_empty_input_has_no_tokens(world: World):
    vocabulary = Vocabulary.from_world(world)
    assert tokenize(vocabulary, "   ") == []
