import pytest

from english_tutor.db import init_db


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def ready_db(tmp_db):
    """A temporary database with the schema created."""
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def clock():
    return FakeClock()
