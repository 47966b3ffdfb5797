"""Player lookup by client certificate."""

import datetime as dt

from sqlmodel import Session, select

from .logging import bind_player_context, get_logger
from .models import Player, SavedGame

logger = get_logger(__name__)


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Return the player for a certificate fingerprint, registering new ones.

    The player is bound to the logging context, so every engine event logged
    while serving the request names them.
    """
    player = session.exec(select(Player).where(Player.fingerprint == fingerprint)).first()

    created = player is None
    if created:
        player = Player(fingerprint=fingerprint)
        session.add(player)
    else:
        player.last_seen = dt.datetime.now(dt.UTC)

    session.commit()
    session.refresh(player)
    bind_player_context(fingerprint, player.id)
    if created:
        logger.info("player_created")
    else:
        logger.debug("player_seen")
    return player


def saved_game_for(session: Session, player: Player) -> SavedGame | None:
    """The player's one saved game, finished or not."""
    return session.exec(select(SavedGame).where(SavedGame.player_id == player.id)).first()
