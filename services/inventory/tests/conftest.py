import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_service.main import app
from inventory_service.api.routes import get_product_client
from inventory_service.domain.models import Base
from inventory_service.infrastructure.db import get_db
from inventory_service.infrastructure.product_client import RemoteProduct


class FakeProductClient:
    """Stands in for ProductServiceClient; unknown ids resolve to None."""

    def __init__(self, products: Optional[Dict[int, RemoteProduct]] = None):
        self.products = products or {}
        self.calls: List[int] = []

    def add(self, product_id: int, name: str, price: str) -> RemoteProduct:
        product = RemoteProduct(id=product_id, name=name, price=Decimal(price))
        self.products[product_id] = product
        return product

    def fetch_product(self, product_id: int) -> Optional[RemoteProduct]:
        self.calls.append(product_id)
        return self.products.get(product_id)


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
def product_client():
    return FakeProductClient()


@pytest.fixture
def client(session_factory, product_client):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_product_client] = lambda: product_client
    yield TestClient(app)
    app.dependency_overrides.clear()
