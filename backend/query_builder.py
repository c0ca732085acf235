"""Filter / sort / pagination plan for the product catalogue.

``build_product_query`` turns the recognised query options into a
:class:`ProductQuery`; ``run_product_query`` executes it against a
:class:`ProductStore` and shapes the paginated response.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from errors import NotFoundError, ValidationError
from models import Product
from product_store import ProductStore

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
DEFAULT_SORT = "date-high"

# sortBy -> (sloupec, sestupně?)
SORT_OPTIONS = {
    "date-high": (Product.updated_at, True),
    "date-low": (Product.updated_at, False),
    "price-high": (Product.price, True),
    "price-low": (Product.price, False),
    "popularity-high": (Product.total_favorites, True),
    "popularity-low": (Product.total_favorites, False),
    "views-high": (Product.total_clicks, True),
    "views-low": (Product.total_clicks, False),
}


@dataclass
class ProductFilterParams:
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brands: Union[str, Sequence[str], None] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    shop: Optional[str] = None
    stock_status: Optional[str] = None
    sort_by: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None


@dataclass
class ProductQuery:
    filters: List[Any] = field(default_factory=list)
    order_by: List[Any] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def parse_brands(brands: Union[str, Sequence[str], None]) -> List[str]:
    """Accepts ``"a,b"``, ``["a", "b"]`` or ``["a,b"]``."""
    if not brands:
        return []
    raw = [brands] if isinstance(brands, str) else list(brands)

    parsed: List[str] = []
    for item in raw:
        for brand in str(item).split(","):
            brand = brand.strip()
            if brand and brand not in parsed:
                parsed.append(brand)
    return parsed


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains_ci(column, value: str):
    return column.ilike(f"%{escape_like(value)}%", escape="\\")


def resolve_sort(sort_by: Optional[str]) -> str:
    return sort_by if sort_by in SORT_OPTIONS else DEFAULT_SORT


def build_product_query(params: ProductFilterParams) -> ProductQuery:
    if params.page < 1:
        raise ValidationError("page must be >= 1", details={"page": params.page})
    if params.limit < 1:
        raise ValidationError("limit must be >= 1", details={"limit": params.limit})

    filters: List[Any] = []

    if params.category:
        filters.append(Product.category == params.category)
    if params.subcategory:
        filters.append(Product.subcategory == params.subcategory)
    if params.shop:
        filters.append(Product.shop == params.shop)
    if params.stock_status:
        filters.append(_contains_ci(Product.stock_status, params.stock_status))

    brands = parse_brands(params.brands)
    if brands:
        filters.append(Product.brand.in_(brands))

    if params.min_price is not None:
        filters.append(Product.price >= params.min_price)
    if params.max_price is not None:
        filters.append(Product.price <= params.max_price)

    # fulltext jen přes název
    if params.search and params.search.strip():
        filters.append(_contains_ci(Product.name, params.search.strip()))

    sort_by = resolve_sort(params.sort_by)
    column, descending = SORT_OPTIONS[sort_by]
    # shodné hodnoty řadí podle id, aby stránkování nepřeskakovalo produkty
    order_by = [column.desc() if descending else column.asc(), Product.id.asc()]

    return ProductQuery(
        filters=filters,
        order_by=order_by,
        page=params.page,
        limit=params.limit,
        sort_by=sort_by,
    )


def run_product_query(
    store: ProductStore,
    plan: ProductQuery,
    empty_is_not_found: bool = True,
) -> Dict[str, Any]:
    total = store.count(plan)
    products = store.find(plan) if plan.skip < total else []

    if not products and empty_is_not_found:
        raise NotFoundError(
            "No products found",
            details={"totalProducts": total, "currentPage": plan.page},
        )

    return {
        "products": products,
        "total_pages": math.ceil(total / plan.limit),
        "current_page": plan.page,
        "total_products": total,
        "limit": plan.limit,
    }
