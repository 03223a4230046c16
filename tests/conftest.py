import random
from datetime import datetime, timezone

import pytest

from log_ingest.config import Config
from log_ingest.db import close_store, make_session_factory, open_store
from log_ingest.entry_id import EntryIdGenerator

FIXED_NOW = datetime(2025, 5, 14, 10, 23, 45, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "store.db")


@pytest.fixture
def engine(db_path):
    eng = open_store(db_path, initialize=True)
    yield eng
    close_store(eng)


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def config(db_path):
    return Config(db_path=db_path)


@pytest.fixture
def id_generator():
    return EntryIdGenerator(rng=random.Random(1234))


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file and return its path."""
    def _write(lines, name="app.log"):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)
    return _write
