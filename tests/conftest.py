"""Shared fixtures: an in-memory sqlite database and a session bound to it."""
import pytest

from setlone.config.settings import Settings
from setlone.database import Database


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", environment="test")


@pytest.fixture
def database(settings):
    db = Database(settings)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session_factory()
    yield s
    s.close()
