"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from blockpress.crud import models  # noqa: F401


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="content")
def content_fixture():
    """A small editor document as the client would send it."""
    return {
        "time": 1700000000000,
        "version": "2.28.2",
        "blocks": [
            {"id": "h1", "type": "header", "data": {"text": "Hello", "level": 2}},
            {"id": "p1", "type": "paragraph", "data": {"text": "First <b>post</b>"}},
            {"id": "i1", "type": "image", "data": {
                "file": {"url": "/api/storage/proxy?namespace=blog-images-paid&path=alice%2F1-abc.png"},
                "caption": "A heron",
            }},
        ],
    }
