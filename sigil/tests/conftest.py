"""
Shared fixtures for sigil tests.
"""
import os

os.environ.setdefault("SIGIL_DATABASE_URL", "sqlite://")
os.environ.setdefault("SIGIL_LOG_DIR", "./logs")

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sigil.database import Base
from sigil import models  # noqa: F401
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import RecordEntry, TaskDefinition, UserState

USER_ID = "user-1"


@pytest.fixture
def db_session():
    """In-memory database shared across threads for the duration of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def today():
    # A Friday, so the current Monday-start week already has five days behind it
    return date(2024, 6, 14)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def user_id():
    return USER_ID


def make_record(day: date, value: float = 1, task_type: str = None, record_id: str = None) -> RecordEntry:
    return RecordEntry(
        id=record_id or f"r-{day.isoformat()}-{task_type or 'none'}-{value}",
        date=day,
        value=value,
        task_type=task_type,
    )


def make_task(task_id: str, name: str = None, **fields) -> TaskDefinition:
    return TaskDefinition(id=task_id, name=name or task_id.title(), **fields)


def consecutive_records(end: date, days: int, task_type: str = None, value: float = 1) -> list:
    """One record per day for `days` days ending on `end`."""
    return [make_record(end - timedelta(days=offset), value, task_type) for offset in range(days)]


def store_state(db_session, user_id: str = USER_ID, **fields) -> UserState:
    """Persist a full state for a user, starting from the seeded defaults."""
    state = UserStateRepository.seed_state().model_copy(update=fields)
    UserStateRepository.save(db_session, user_id, UserStateRepository.dump(state))
    return UserStateRepository.load(db_session, user_id)


def created_on(day: date) -> datetime:
    return datetime.combine(day, datetime.min.time()).replace(hour=9)
