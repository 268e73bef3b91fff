from datetime import datetime

import pytest

from partnership.db import dispose_engine
from partnership.notifications import Notifier
from partnership.store import RecordStore


FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0)


@pytest.fixture
def store(tmp_path):
    url = f"sqlite:///{(tmp_path / 'test.db').as_posix()}"
    s = RecordStore(url)
    s.init_db()
    yield s
    dispose_engine(url)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def project(store):
    return store.insert("projects", {"name": "P1", "status": "planning"})


@pytest.fixture
def idea(store):
    return store.insert("ideas", {"title": "I1", "status": "new"})
