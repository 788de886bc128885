import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from product_service.main import app
from product_service.domain.models import Base
from product_service.infrastructure.db import get_db

JSON_API = "application/vnd.api+json"

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_product(client):
    def _create(name="Widget", price=9.99):
        resp = client.post(
            "/api/v1/products",
            content=json.dumps({"data": {"type": "products", "attributes": {"name": name, "price": price}}}),
            headers={"Content-Type": JSON_API, "Accept": JSON_API},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _create
