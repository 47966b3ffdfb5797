"""Gameplay routes. Every one of them needs a client certificate."""

from contextlib import contextmanager

from sqlmodel import Session
from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..engine.flags import Direction
from ..logging import clear_player_context
from ..session import DungeonSession
from ..users import get_or_create_player


@contextmanager
def _game_session(request: Request):
    """Load the player's game for the duration of one request."""
    identity = get_identity(request)
    app_state = request.app.state
    db_session = Session(app_state.engine)
    try:
        player = get_or_create_player(db_session, identity.fingerprint)
        yield DungeonSession.load_or_create(
            db_session,
            player,
            app_state.world,
            vocabulary=app_state.vocabulary,
            seed=app_state.config.seed,
        )
    finally:
        clear_player_context()
        db_session.close()


def _render_play(app: Xitzin, game: DungeonSession, message: str = ""):
    """Render the main play view."""
    state = game.state
    return app.template(
        "play.gmi",
        description=game.get_room_description(),
        exits=game.get_exits(),
        message=message,
        moves=state.moves,
        score=state.score,
        is_dead=state.is_dead,
        is_finished=state.game_over,
    )


def _run(app: Xitzin, request: Request, text: str):
    """Run one command, save, and show the result."""
    with _game_session(request) as game:
        message = game.process_command(text)
        game.save()
        return _render_play(app, game, message=message)


def _register_action_routes(app: Xitzin) -> None:
    """Register command and movement routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            if not game.state.game_over:
                game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @require_certificate
    def go(request: Request, direction: str):
        """Movement via clickable link."""
        if direction not in {d.value for d in Direction}:
            return Redirect("/play")
        return _run(app, request, direction)

    @app.input("/cmd", prompt="What do you want to do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        return _run(app, request, query)

    @app.gemini("/look", name="look")
    @require_certificate
    def look(request: Request):
        return _run(app, request, "look")


def _register_info_routes(app: Xitzin) -> None:
    """Register inventory, score, and game management routes."""

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """Show carried items without using up a turn."""
        with _game_session(request) as game:
            return _render_play(app, game, message=game.get_inventory())

    @app.gemini("/score", name="score")
    @require_certificate
    def score(request: Request):
        with _game_session(request) as game:
            return _render_play(app, game, message=game.get_score())

    @app.input(
        "/new",
        prompt="Are you sure you want to start over? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset game with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() != "YES":
                return Redirect("/play")
            game.reset()
            game.save()
            return _render_play(app, game, message="Welcome to Dungeon!")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_info_routes(app)
