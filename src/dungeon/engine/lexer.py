"""Split raw input into classified tokens."""

import re
from dataclasses import dataclass
from typing import Any

from .vocabulary import Vocabulary, WordClass

# Commas act as conjunctions; every other non-word character separates words.
_COMMA = re.compile(r",")
_NOISE = re.compile(r"[^a-z0-9,' -]+")


@dataclass(frozen=True)
class Token:
    """A single word of input.

    ``text`` is the expanded word, ``value`` the resolved meaning: the
    canonical verb, a Direction, a normalised preposition, or the word itself.
    """

    text: str
    word_class: WordClass
    value: Any = None


def _split(text: str) -> list[str]:
    text = _NOISE.sub(" ", text.lower())
    text = _COMMA.sub(" , ", text)
    words = []
    for raw in text.split():
        word = raw.replace("'", "").strip("-")
        if word:
            words.append(word)
    return words


def tokenize(vocabulary: Vocabulary, text: str) -> list[Token]:
    """Lower-case, strip punctuation, expand and classify each word."""
    tokens = []
    for raw in _split(text):
        word = vocabulary.expand(raw)
        word_class = vocabulary.classify(word)
        match word_class:
            case WordClass.VERB:
                value = vocabulary.canonical_verb(word)
            case WordClass.DIRECTION:
                value = vocabulary.direction(word)
            case WordClass.PREPOSITION:
                value = vocabulary.preposition(word)
            case _:
                value = word
        tokens.append(Token(word, word_class, value))
    return tokens
