"""
SQL-backed training record source against an in-memory SQLite database.
"""
import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gymhub.db.models import UserTraining
from gymhub.db.session import init_db
from gymhub.training.levels import compute_training_level
from gymhub.training.records import (
    InMemoryTrainingRecordSource,
    SqlTrainingRecordSource,
    TrainingRecordSource,
)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    with factory() as session:
        session.add_all([
            UserTraining(user_id="u1", module_id=1, status="completed", progress=100),
            UserTraining(user_id="u1", module_id=2, status="completed", progress=100),
            UserTraining(user_id="u1", module_id=3, status="in_progress", progress=40),
            UserTraining(user_id="u1", module_id=4, status="not_started", progress=0),
            UserTraining(user_id="u2", module_id=1, status="completed", progress=100),
        ])
        session.commit()
    yield factory
    engine.dispose()


def test_sql_source_returns_only_the_users_rows(session_factory):
    source = SqlTrainingRecordSource(session_factory)
    rows = asyncio.run(source.fetch_records("u1"))
    assert sorted(r.module_id for r in rows) == [1, 2, 3, 4]
    assert asyncio.run(source.fetch_records("nobody")) == []


def test_sql_rows_feed_level_computation(session_factory):
    source = SqlTrainingRecordSource(session_factory)
    level = compute_training_level(asyncio.run(source.fetch_records("u1")))
    assert level.progress == 50
    assert level.level.value == "Intermediate"


def test_sources_satisfy_protocol(session_factory):
    assert isinstance(SqlTrainingRecordSource(session_factory), TrainingRecordSource)
    assert isinstance(InMemoryTrainingRecordSource(), TrainingRecordSource)


def test_in_memory_source_copies_records():
    source = InMemoryTrainingRecordSource({"u1": [{"status": "completed"}]})
    source.add("u1", "in_progress", module_id=2)
    records = asyncio.run(source.fetch_records("u1"))
    assert [r["status"] for r in records] == ["completed", "in_progress"]
    records.clear()
    assert len(asyncio.run(source.fetch_records("u1"))) == 2
