from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.data.database import Base, get_db
from app.data import models  # noqa: F401
from app.data.models.product import ProductModel
from app.api.routers.carts import get_lock_service
from app.main import create_app


@pytest.fixture
def engine():
    """In-memory SQLite DB shared by every session of a test."""
    _engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(_engine)
    yield _engine
    Base.metadata.drop_all(_engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_product(db_session):
    def _make(name, price):
        product = ProductModel(name=name, price=Decimal(str(price)))
        db_session.add(product)
        db_session.commit()
        return product.id

    return _make


@pytest.fixture
def app(session_factory):
    """FastAPI app bound to the test database, cart locking off."""

    def override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    fastapi_app = create_app()
    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_lock_service] = lambda: None
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # no context manager: the lifespan would create tables on the real engine
    return TestClient(app)
