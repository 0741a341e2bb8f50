# storefront/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.schemas.product import (
    CategoryProductCount,
    LowStockItem,
    ProductCreate,
    ProductDetail,
    ProductListItem,
    ProductUpdate,
)
from storefront.services.product_service import LOW_STOCK_THRESHOLD, ProductService

settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])

service = ProductService(
    ProductRepository(),
    StockRepository(),
    location_id=settings.FULFILLMENT_LOCATION_ID,
)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductListItem])
def list_products(
    session: Session = Depends(get_session),
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    List products with total stock.

    - Public endpoint.
    - `search` filters by name, case-insensitive.
    """
    return service.list_products(session, search=search, skip=skip, limit=limit)


# -------- Admin dashboard --------


@router.get(
    "/stats/category",
    response_model=list[CategoryProductCount],
    dependencies=[Depends(require_admin)],
)
def get_category_stats(session: Session = Depends(get_session)):
    """
    Number of products in each category (admin dashboard).
    """
    return service.category_stats(session)


@router.get(
    "/stats/lowstock",
    response_model=list[LowStockItem],
    dependencies=[Depends(require_admin)],
)
def get_low_stock(
    session: Session = Depends(get_session),
    threshold: int = Query(default=LOW_STOCK_THRESHOLD, ge=0),
):
    """
    Stock rows at or below `threshold` (default 20), lowest first.
    """
    return service.low_stock(session, threshold)


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product with stock at the fulfillment location.
    """
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductDetail,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product and its initial stock (admin only).
    """
    return service.create_product(session, payload)


@router.put(
    "/{product_id}",
    response_model=ProductDetail,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product and/or its stock (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Delete a product that is not part of any order (admin only).
    """
    service.delete_product(session, product_id)
    return {"message": "Product removed"}
