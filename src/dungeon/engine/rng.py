"""The single source of randomness for a game session.

Combat rolls, thief wandering, death scattering and flavour text all draw
from one ``GameRandom`` so a seeded session replays identically.
"""

import random
from collections.abc import Sequence
from typing import Any, TypeVar

T = TypeVar("T")


def _json_list_to_tuple(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_json_list_to_tuple(item) for item in value)
    return value


class GameRandom:
    """Seedable wrapper around ``random.Random``."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability (0.0 to 1.0)."""
        return self._random.random() < probability

    def randint(self, low: int, high: int) -> int:
        return self._random.randint(low, high)

    def choice(self, options: Sequence[T]) -> T:
        return self._random.choice(options)

    def get_state(self) -> list:
        """Return the generator state in a JSON-friendly shape."""
        version, internal, gauss = self._random.getstate()
        return [version, list(internal), gauss]

    def set_state(self, payload: list) -> None:
        self._random.setstate(_json_list_to_tuple(payload))
