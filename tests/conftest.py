"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from logiflow.db.base import Base
import logiflow.db.models  # noqa: F401  (registers tables on Base.metadata)
from logiflow.core.approval import ApprovalOrchestrator, SLAClock
from logiflow.services.events import EventBus
from tests.factories import FIXED_NOW


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine with the full schema, one per test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'logiflow.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()

@pytest.fixture
def clock():
    """SLA clock pinned to FIXED_NOW."""
    return SLAClock(clock=lambda: FIXED_NOW)

@pytest.fixture
def bus():
    """Event bus isolated from the module-level one."""
    return EventBus()

@pytest.fixture
def orchestrator(db_session, clock, bus):
    return ApprovalOrchestrator(db_session, clock=clock, events=bus)

@pytest.fixture
def client(db_session, clock, bus):
    """FastAPI test client bound to the test session."""
    from fastapi.testclient import TestClient

    from logiflow.api.deps import get_db, get_orchestrator
    from logiflow.api.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_orchestrator] = lambda: ApprovalOrchestrator(
        db_session, clock=clock, events=bus
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
