import pytest

from mappify.database import DatabaseEngine
from mappify.session import Session


class RecordingEngine:
    """Wraps a DatabaseEngine and remembers every statement sent through it."""

    def __init__(self, engine):
        self.engine = engine
        self.calls = []

    def query(self, sql, params=None):
        self.calls.append((sql, tuple(params or ())))
        return self.engine.query(sql, params)

    def __getattr__(self, name):
        return getattr(self.engine, name)


@pytest.fixture
def engine():
    engine = DatabaseEngine(":memory:", log_sql=False)
    yield engine
    engine.close()


@pytest.fixture
def recorder(engine):
    return RecordingEngine(engine)


@pytest.fixture
def session(recorder):
    return Session(recorder)
