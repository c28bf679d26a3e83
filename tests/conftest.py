"""Pytest fixtures and configuration for LRH Flow tests."""

import pytest
from datetime import datetime
from typing import List
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from lrhflow.database.database import Base, get_db
from lrhflow.database.models import UserDB
from lrhflow.database.repository import TaskRepository
from lrhflow.models.task import Task, TaskStatus, HierarchyLevel
from lrhflow.models.recurrence import RecurrenceType
from lrhflow.models.user import User
from lrhflow.notifications.dispatcher import Notification, NotificationDispatcher


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed reference time for deterministic engine tests
NOW = datetime(2024, 3, 10, 8, 0)


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher that keeps every notification in memory."""

    def __init__(self):
        self.sent: List[Notification] = []

    def send(self, notification: Notification) -> bool:
        self.sent.append(notification)
        return True


@pytest.fixture
def ceo_id():
    return "user-ceo"


@pytest.fixture
def manager_id():
    return "user-manager"


@pytest.fixture
def worker_id():
    return "user-worker"


@pytest.fixture(scope="function")
def db_session(ceo_id, manager_id, worker_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test, seeded with
    a CEO, an executive (manager) and a user reporting to the manager.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    now = datetime.utcnow()
    session.add_all(
        [
            UserDB(id=ceo_id, email="ceo@example.com", name="Ana CEO", role="CEO",
                   created_at=now, updated_at=now),
            UserDB(id=manager_id, email="manager@example.com", name="Mihai Manager", role="EXECUTIVE",
                   created_at=now, updated_at=now),
            UserDB(id=worker_id, email="worker@example.com", name="Ioana Worker", role="USER",
                   supervisor_id=manager_id, created_at=now, updated_at=now),
        ]
    )
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def sample_task_base(worker_id, ceo_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "title": "Weekly stats report",
        "status": TaskStatus.TODO,
        "responsible_user_id": worker_id,
        "creator_id": ceo_id,
        "department_id": "dept-operations",
        "hierarchy_level": HierarchyLevel.PROGRAM,
        "parent_item_id": "program-1",
        "due_date": None,
        "occurrence_date": None,
        "created_at": NOW,
        "last_updated_at": NOW,
        "is_recurring": False,
        "recurrence_type": RecurrenceType.NONE,
        "recurrence_interval": 1,
        "recurrence_day_of_week": None,
        "recurrence_day_of_month": None,
        "recurrence_end_date": None,
        "parent_recurring_task_id": None,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample non-recurring Task object."""
    return Task(**sample_task_base)


@pytest.fixture
def make_task(task_repository, sample_task_base):
    """Factory persisting a task built from `sample_task_base` plus overrides."""

    def _make(**overrides) -> Task:
        data = {**sample_task_base, "id": str(uuid.uuid4()), **overrides}
        return task_repository.create(Task(**data))

    return _make


@pytest.fixture
def make_recurring_head(make_task):
    """Factory persisting a recurring chain head whose first occurrence is its due date."""

    def _make(due_date: datetime, recurrence_type: RecurrenceType = RecurrenceType.DAILY, **overrides) -> Task:
        return make_task(
            due_date=due_date,
            occurrence_date=due_date,
            is_recurring=True,
            recurrence_type=recurrence_type,
            **overrides,
        )

    return _make


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


def _user(db_session: Session, user_id: str) -> User:
    return db_session.query(UserDB).filter(UserDB.id == user_id).first().to_pydantic()


@pytest.fixture
def ceo_user(db_session, ceo_id) -> User:
    return _user(db_session, ceo_id)


@pytest.fixture
def worker_user(db_session, worker_id) -> User:
    return _user(db_session, worker_id)


@pytest.fixture
def raw_client(db_session: Session, dispatcher):
    """Test client with only the database (and notifications) overridden; real auth applies."""
    from lrhflow.api.app import app
    from lrhflow.notifications.dispatcher import get_dispatcher

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def test_client(raw_client, ceo_user):
    """Test client authenticated as the CEO."""
    from lrhflow.api.app import app
    from lrhflow.auth.dependencies import get_current_user

    app.dependency_overrides[get_current_user] = lambda: ceo_user
    return raw_client
