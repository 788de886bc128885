from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlalchemy.orm import Session

from shared.core import (
    AuthenticationError,
    JSONAPIResponse,
    NotFoundError,
    ValidationError,
    collection_document,
    document,
)
from product_service.core_settings import get_settings
from product_service.infrastructure.db import get_db
from product_service.application.service import ProductService
from product_service.application.schemas import (
    PRODUCT_TYPE,
    ProductAttributes,
    ProductCreateDocument,
    ProductPage,
    ProductUpdateDocument,
)
from product_service.domain.models import Product

def verify_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    expected = get_settings().PRODUCTS_API_KEY
    if expected and x_api_key != expected:
        raise AuthenticationError("Missing or invalid X-API-KEY header")

router = APIRouter(prefix="/api/v1/products", tags=["products"], dependencies=[Depends(verify_api_key)])

def _product_document(request: Request, product: Product) -> dict:
    return document(
        PRODUCT_TYPE,
        product.id,
        ProductAttributes.model_validate(product),
        links={"self": str(request.url_for("get_product", product_id=product.id))},
    )

def _page_links(request: Request, page: ProductPage) -> dict:
    base = str(request.url_for("list_products"))

    def link(number: int) -> str:
        return f"{base}?page={number}&size={page.size}"

    return {
        "self": link(page.page),
        "first": link(0),
        "prev": link(page.page - 1) if page.has_previous else None,
        "next": link(page.page + 1) if page.has_next else None,
        "last": link(page.total_pages - 1) if page.total_pages > 0 else None,
    }

@router.get("", name="list_products")
def list_products(
    request: Request,
    page: int = Query(0, ge=0),
    size: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    settings = get_settings()
    size = min(size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    result = ProductService(db).list_page(page, size)
    body = collection_document(
        PRODUCT_TYPE,
        ((p.id, ProductAttributes.model_validate(p)) for p in result.items),
        meta={
            "totalPages": result.total_pages,
            "totalElements": result.total_elements,
            "currentPage": result.page,
            "pageSize": result.size,
        },
        links=_page_links(request, result),
    )
    return JSONAPIResponse(content=body)

@router.get("/{product_id}", name="get_product")
def get_product(product_id: int, request: Request, db: Session = Depends(get_db)):
    product = ProductService(db).get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return JSONAPIResponse(content=_product_document(request, product))

@router.post("", status_code=201)
def create_product(payload: ProductCreateDocument, request: Request, db: Session = Depends(get_db)):
    product = ProductService(db).create(payload.data.attributes)
    location = str(request.url_for("get_product", product_id=product.id))
    return JSONAPIResponse(
        status_code=status.HTTP_201_CREATED,
        content=_product_document(request, product),
        headers={"Location": location},
    )

@router.put("/{product_id}")
def update_product(product_id: int, payload: ProductUpdateDocument, request: Request, db: Session = Depends(get_db)):
    if payload.data.id is None or payload.data.id != str(product_id):
        raise ValidationError("Resource id in payload must be present and match the path id", field="data.id")
    product = ProductService(db).update(product_id, payload.data.attributes)
    return JSONAPIResponse(content=_product_document(request, product))

@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
