from decimal import Decimal

import pytest

from shared.core import NotFoundError
from product_service.application.schemas import ProductCreate, ProductUpdate
from product_service.application.service import ProductService


def test_create_and_get(db_session):
    service = ProductService(db_session)
    created = service.create(ProductCreate(name="Widget", price=Decimal("9.99")))

    fetched = service.get(created.id)
    assert fetched.name == "Widget"
    assert fetched.price == Decimal("9.99")


def test_update_keeps_absent_fields(db_session):
    service = ProductService(db_session)
    created = service.create(ProductCreate(name="Widget", price=Decimal("9.99")))

    updated = service.update(created.id, ProductUpdate(name="Gadget"))
    assert updated.name == "Gadget"
    assert updated.price == Decimal("9.99")


def test_update_and_delete_missing_raise_not_found(db_session):
    service = ProductService(db_session)
    with pytest.raises(NotFoundError):
        service.update(42, ProductUpdate(name="Nope"))
    with pytest.raises(NotFoundError):
        service.delete(42)


def test_list_page_counts(db_session):
    service = ProductService(db_session)
    for i in range(5):
        service.create(ProductCreate(name=f"P{i}", price=Decimal(i)))

    page = service.list_page(page=2, size=2)
    assert [p.name for p in page.items] == ["P4"]
    assert page.total_elements == 5
    assert page.total_pages == 3
    assert page.has_previous
    assert not page.has_next


def test_list_page_beyond_last_page_is_empty(db_session):
    service = ProductService(db_session)
    service.create(ProductCreate(name="P0", price=Decimal("1")))

    page = service.list_page(page=10**18, size=100)
    assert page.items == []
    assert page.total_elements == 1
    assert page.has_previous
    assert not page.has_next
