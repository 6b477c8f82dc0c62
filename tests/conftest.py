# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ["APP_ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("FEEDBACK_NOTIFY_EMAIL", None)

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from trustboard.api.v1.endpoints.deps import (  # noqa: E402
    get_email_notifier_dep,
    get_moderation_pipeline_dep,
)
from trustboard.db.session import Base  # noqa: E402
from trustboard.db.session import get_db as app_get_session  # noqa: E402
from trustboard.main import app as fastapi_app  # noqa: E402
from trustboard.models import Feedback  # noqa: E402
from trustboard.services.email_notifier import EmailNotifier  # noqa: E402
from trustboard.services.moderation import ModerationPipeline  # noqa: E402
from trustboard.services.moderation_result import ModerationResult  # noqa: E402

TEST_DB_URL = "sqlite://"

CLEAN_TEXT = "Great service and a friendly team"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def fake_classifier() -> MagicMock:
    """AI classifier stand-in that reports clean by default."""
    classifier = MagicMock()
    classifier.configured = True
    classifier.classify = AsyncMock(
        return_value=ModerationResult(flagged=False, provider="Google Gemini", reason="Clean")
    )
    return classifier


@pytest.fixture()
def pipeline(fake_classifier: MagicMock) -> ModerationPipeline:
    return ModerationPipeline(classifier=fake_classifier)


@pytest.fixture()
def mock_notifier() -> AsyncMock:
    notifier = AsyncMock(spec=EmailNotifier)
    notifier.send.return_value = "<test@trustboard>"
    return notifier


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    pipeline: ModerationPipeline,
    mock_notifier: AsyncMock,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides = {
        app_get_session: _get_session_override,
        get_moderation_pipeline_dep: lambda: pipeline,
        get_email_notifier_dep: lambda: mock_notifier,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def stored_feedback(db_session: Session) -> Iterator[Feedback]:
    """Create a persisted feedback row."""
    feedback = Feedback(
        name="Ada",
        email="ada@example.com",
        message=CLEAN_TEXT,
        rating=5,
        moderation_provider="All Checks Passed",
        moderation_reason="Clean",
    )
    db_session.add(feedback)
    db_session.flush()
    db_session.refresh(feedback)
    yield feedback

