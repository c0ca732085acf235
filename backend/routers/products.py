import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from config import Settings, get_settings
from counters import increment_clicks
from database import get_db
from deps_auth import require_admin
from errors import NotFoundError
from models import Product
from price_timeline import upsert_by_url
from product_store import ProductStore
from query_builder import DEFAULT_LIMIT, DEFAULT_PAGE, ProductFilterParams, build_product_query, run_product_query
from schemas import (
    PricePointOut,
    ProductCreate,
    ProductListResponse,
    ProductOut,
    ProductSavedResponse,
    ProductUpdate,
    ProductUpsertIn,
    payload_data,
)

logger = logging.getLogger(__name__)

products_router = APIRouter(prefix="/api/product", tags=["products"])


def get_store(db: Session = Depends(get_db)) -> ProductStore:
    return ProductStore(db)


# ======================
#   PRODUCTS – SEZNAM
# ======================

@products_router.get("/find/all", response_model=List[ProductOut])
def list_all_products(store: ProductStore = Depends(get_store)):
    return store.all()


@products_router.get("/find", response_model=ProductListResponse)
def find_products(
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    brands: Optional[List[str]] = Query(default=None),
    min_price: Optional[float] = Query(default=None, alias="minPrice"),
    max_price: Optional[float] = Query(default=None, alias="maxPrice"),
    shop: Optional[str] = None,
    stock_status: Optional[str] = Query(default=None, alias="stockStatus"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1),
    search: Optional[str] = None,
    store: ProductStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    params = ProductFilterParams(
        category=category,
        subcategory=subcategory,
        brands=brands,
        min_price=min_price,
        max_price=max_price,
        shop=shop,
        stock_status=stock_status,
        sort_by=sort_by,
        page=page,
        limit=limit,
        search=search,
    )
    plan = build_product_query(params)
    return run_product_query(store, plan, empty_is_not_found=settings.empty_results_not_found)


# ======================
#   PRODUCTS – DETAIL
# ======================

@products_router.get("/find/{product_id}", response_model=ProductOut)
def get_product_detail(product_id: int, store: ProductStore = Depends(get_store)):
    product = store.get_or_404(product_id)

    # zobrazení detailu = +1 klik; když produkt mezitím zmizel, vrátíme načtená data
    try:
        product = increment_clicks(store, product_id)
    except NotFoundError:
        logger.warning("Click counter miss for product id=%s", product_id)

    return product


@products_router.get("/{product_id}/price-timeline", response_model=List[PricePointOut])
def get_price_timeline(product_id: int, store: ProductStore = Depends(get_store)):
    return store.get_or_404(product_id).price_timeline


# ======================
#   PRODUCTS – ZÁPIS
# ======================

@products_router.post("/create", response_model=ProductSavedResponse, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, store: ProductStore = Depends(get_store)):
    product = store.add(Product(**payload.model_dump()))
    logger.info("Created product id=%s url=%s", product.id, product.url)
    return {"message": "Product created successfully", "data": product}


@products_router.post("/new", response_model=ProductSavedResponse, status_code=status.HTTP_201_CREATED)
def create_or_update_product(payload: ProductUpsertIn, store: ProductStore = Depends(get_store)):
    product, created = upsert_by_url(store, payload_data(payload))
    message = "Product created successfully" if created else "Product updated successfully"
    return {"message": message, "data": product}


@products_router.put("/update/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    store: ProductStore = Depends(get_store),
):
    return store.update(product_id, payload_data(payload))


@products_router.delete("/delete/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    store: ProductStore = Depends(get_store),
    admin=Depends(require_admin),
):
    store.delete(product_id)
    logger.info("Admin %s deleted product id=%s", admin.id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ======================
#   KATEGORIE / ZNAČKY
# ======================

@products_router.get("/categories", response_model=Dict[str, List[str]])
def get_categories(store: ProductStore = Depends(get_store)):
    return store.categories()


@products_router.get("/brands", response_model=List[str])
def get_brands(store: ProductStore = Depends(get_store)):
    return store.brands()
