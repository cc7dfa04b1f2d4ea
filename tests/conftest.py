from __future__ import annotations

import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.distribution.dispatcher import DistributionDispatcher
from app.distribution.models import Payment
from tests.fakes import FakeRenderer, FakeTransport


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture()
def dispatcher(renderer: FakeRenderer, transport: FakeTransport) -> DistributionDispatcher:
    return DistributionDispatcher(renderer=renderer, transport=transport, sender="noreply@test.local")


@pytest.fixture()
def lunch_distribution() -> dict:
    return {
        "Alice": {
            "Bob": [Payment(description="lunch", amount=Decimal("10.00"), paid=False)],
        },
    }


# ---------------------------------------------------------------------------
# Database + API client
# ---------------------------------------------------------------------------

@pytest.fixture()
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture()
def client(
    db_session: Session,
    dispatcher: DistributionDispatcher,
    monkeypatch: pytest.MonkeyPatch,
) -> TestClient:
    """TestClient with the database and dispatcher replaced by test doubles."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")

    from app.core.settings import get_settings
    from app.db.session import reset_engine

    get_settings.cache_clear()
    reset_engine()

    from app.api.deps import get_db, get_dispatcher
    from app.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()

    reset_engine()
    get_settings.cache_clear()
    os.environ.pop("DATABASE_URL", None)
