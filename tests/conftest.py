"""Shared test fixtures for Dungeon."""

from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from dungeon.app import _get_data_path, create_app
from dungeon.config import Config
from dungeon.engine.commands import Game
from dungeon.engine.loader import load_world
from dungeon.engine.rng import GameRandom
from dungeon.engine.world import World
from dungeon.models import Player


class RiggedRandom(GameRandom):
    """A GameRandom whose outcomes the test decides.

    ``chance`` always answers ``lucky``, ``randint`` returns ``roll``
    clamped to the range, and ``choice`` picks the first option.
    """

    def __init__(self):
        super().__init__(0)
        self.lucky = False
        self.roll = 50

    def chance(self, probability: float) -> bool:
        return self.lucky

    def randint(self, low: int, high: int) -> int:
        return max(low, min(high, self.roll))

    def choice(self, options):
        return options[0]


@pytest.fixture(scope="session")
def world() -> World:
    return load_world(_get_data_path())


@pytest.fixture
def rng() -> RiggedRandom:
    return RiggedRandom()


@pytest.fixture
def game(world: World, rng: RiggedRandom) -> Game:
    return Game(world, rng=rng)


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_player(db_session: Session) -> Player:
    player = Player(fingerprint="test-fingerprint-abc123")
    db_session.add(player)
    db_session.commit()
    db_session.refresh(player)
    return player


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db", seed=7)


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
