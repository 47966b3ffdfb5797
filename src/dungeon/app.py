"""Xitzin application factory for the dungeon."""

from importlib import resources
from pathlib import Path

from sqlmodel import SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import load_world
from .engine.vocabulary import Vocabulary
from .logging import get_logger

logger = get_logger(__name__)


def _get_data_path() -> Path:
    """Locate the bundled content file (works when installed in a venv)."""
    return resources.files("dungeon.data").joinpath("dungeon.json")


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    app = Xitzin(
        title="Dungeon",
        version="0.1.0",
        templates_dir=Path(__file__).parent / "templates",
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Create tables and load the shared world."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")

        world = load_world(_get_data_path())
        app.state.world = world
        app.state.vocabulary = Vocabulary.from_world(world)
        logger.info(
            "world_loaded",
            rooms=len(world.rooms),
            objects=len(world.objects),
            max_score=world.max_score,
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app
