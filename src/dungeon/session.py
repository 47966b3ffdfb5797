"""Session layer bridging the game engine and the database."""

import datetime as dt
import json
import zlib

from sqlmodel import Session

from .engine.actions import room_text
from .engine.commands import Game
from .engine.conditions import check_condition
from .engine.describe import describe_inventory
from .engine.scoring import score_message
from .engine.state import GameState, is_lit
from .engine.vocabulary import Vocabulary
from .engine.world import World
from .logging import get_logger
from .models import Player, SavedGame
from .users import saved_game_for

logger = get_logger(__name__)


def encode_snapshot(game: Game) -> bytes:
    return zlib.compress(json.dumps(game.snapshot(), separators=(",", ":")).encode("utf-8"))


def decode_snapshot(blob: bytes) -> dict:
    return json.loads(zlib.decompress(blob).decode("utf-8"))


class DungeonSession:
    """Wraps a Player, their SavedGame row and the live Game."""

    def __init__(
        self,
        db_session: Session,
        player: Player,
        saved_game: SavedGame | None,
        game: Game,
        *,
        seed: int | None = None,
    ):
        self.db_session = db_session
        self.player = player
        self.saved_game = saved_game
        self.game = game
        self.seed = seed

    @property
    def state(self) -> GameState:
        return self.game.state

    @property
    def world(self) -> World:
        return self.game.world

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        player: Player,
        world: World,
        *,
        vocabulary: Vocabulary | None = None,
        seed: int | None = None,
    ) -> "DungeonSession":
        """Resume the player's saved game or start a new one.

        A finished game is still loaded so its final score stays visible; the
        engine answers nothing but SCORE until the player asks for a new one.
        """
        saved_game = saved_game_for(db_session, player)

        if saved_game is not None:
            game = Game.from_snapshot(
                world, decode_snapshot(saved_game.snapshot_blob), vocabulary=vocabulary,
            )
            logger.debug(
                "game_loaded", fingerprint=player.fingerprint,
                moves=saved_game.moves, finished=saved_game.is_finished,
            )
        else:
            game = Game(world, seed=seed, vocabulary=vocabulary)
            logger.info("new_game_started", fingerprint=player.fingerprint)

        return cls(db_session, player, saved_game, game, seed=seed)

    def process_command(self, text: str) -> str:
        return self.game.process_command(text)

    def save(self) -> None:
        """Write the snapshot back to the database."""
        state = self.state
        now = dt.datetime.now(dt.UTC)
        blob = encode_snapshot(self.game)

        if self.saved_game is None:
            self.saved_game = SavedGame(player_id=self.player.id, snapshot_blob=blob, started_at=now)
            self.db_session.add(self.saved_game)
        self.saved_game.snapshot_blob = blob
        self.saved_game.moves = state.moves
        self.saved_game.score = state.score
        self.saved_game.deaths = state.deaths
        self.saved_game.is_finished = state.game_over
        self.saved_game.last_played = now

        self.db_session.commit()
        logger.debug(
            "game_saved",
            fingerprint=self.player.fingerprint,
            moves=state.moves,
            score=state.score,
            finished=state.game_over,
        )

    def reset(self) -> None:
        """Throw the current game away and start over."""
        self.game = Game(self.world, seed=self.seed, vocabulary=self.game.vocabulary)
        if self.saved_game is not None:
            self.db_session.delete(self.saved_game)
            self.db_session.commit()
            self.saved_game = None
        logger.info("game_reset", fingerprint=self.player.fingerprint)

    def get_room_description(self) -> str:
        return room_text(self.game, look=True)

    def get_exits(self) -> list[str]:
        """Directions that currently lead somewhere, if the player can see."""
        world, state = self.world, self.state
        if not is_lit(world, state):
            return []
        exits = []
        for direction in dict.fromkeys(e.direction for e in world.rooms[state.current_room].exits):
            chosen = next(
                (e for e in world.rooms[state.current_room].exits_for(direction)
                 if check_condition(state, e.condition)),
                None,
            )
            if chosen is not None and chosen.destination is not None:
                exits.append(direction.value)
        return exits

    def get_inventory(self) -> str:
        return describe_inventory(self.world, self.state)

    def get_score(self) -> str:
        return score_message(self.world, self.state)
