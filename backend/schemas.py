import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

URL_PATTERN = re.compile(r"^https?://[\w\-]+(\.[\w\-]+)+[/#?]?.*$")


def _check_url(value: str) -> str:
    value = value.strip()
    if not URL_PATTERN.match(value):
        raise ValueError(f"{value} is not a valid URL!")
    return value


class CamelModel(BaseModel):
    # API používá camelCase (regularPrice, stockStatus, ...), Python snake_case
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ======================
#   PRODUCTS
# ======================

class ProductCreate(CamelModel):
    url: str
    name: str = Field(min_length=1)
    price: float = Field(default=0, ge=0)
    regular_price: Optional[float] = Field(default=None, ge=0)
    stock_status: str = "Out Of Stock"
    brand: str
    model: str
    warranty: str
    category: str
    subcategory: str
    images: List[str] = Field(min_length=1)
    shop: str
    features: Dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def url_format(cls, value: str) -> str:
        return _check_url(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Product name is required")
        return name


CLEARABLE_FIELDS = {"regular_price"}


class ProductUpdate(CamelModel):
    url: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    regular_price: Optional[float] = Field(default=None, ge=0)
    stock_status: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    warranty: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    images: Optional[List[str]] = Field(default=None, min_length=1)
    shop: Optional[str] = None
    features: Optional[Dict[str, str]] = None

    @field_validator("url")
    @classmethod
    def url_format(cls, value: Optional[str]) -> Optional[str]:
        return _check_url(value) if value is not None else None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        name = value.strip()
        if not name:
            raise ValueError("Product name is required")
        return name

    @model_validator(mode="after")
    def only_optional_columns_cleared(self):
        # null smí dostat jen regularPrice, ostatní sloupce jsou povinné
        cleared = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in CLEARABLE_FIELDS
        )
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(cleared)}")
        return self


class ProductUpsertIn(ProductUpdate):
    url: str
    price: float = Field(ge=0)


class PricePointOut(CamelModel):
    date: datetime
    price: float


class ProductOut(CamelModel):
    id: int
    url: str
    name: str
    price: float
    regular_price: Optional[float] = None
    stock_status: str
    brand: str
    model: str
    warranty: str
    category: str
    subcategory: str
    images: List[str]
    shop: str
    features: Dict[str, str] = {}
    total_clicks: int = 0
    total_favorites: int = 0
    price_timeline: List[PricePointOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductSavedResponse(BaseModel):
    message: str
    data: ProductOut


class ProductListResponse(CamelModel):
    products: List[ProductOut]
    total_pages: int
    current_page: int
    total_products: int
    limit: int


# ======================
#   USER LISTS
# ======================

class ToggleProductIn(CamelModel):
    product_id: int


class ToggleWishlistIn(CamelModel):
    product_id: int
    # kontrola > 0 až při přidání, odebrání cenu ignoruje
    expected_price: Optional[float] = None


class WishlistItemOut(CamelModel):
    product: ProductOut
    expected_price: float


class OwnerListsOut(CamelModel):
    favorite_list: List[ProductOut]
    wishlist: List[WishlistItemOut]
    compares: List[ProductOut]


# ======================
#   ADMIN STATS
# ======================

class ShopStockStats(CamelModel):
    shop: str
    count: int
    stock_status_counts: Dict[str, int]


class ShopStatsResponse(CamelModel):
    shops: List[ShopStockStats]
    total_shops: int
    total_products: int
    unique_stock_statuses: List[str]


def payload_data(payload: Any) -> Dict[str, Any]:
    """Only the fields the client actually sent, keyed by attribute name."""
    return payload.model_dump(exclude_unset=True)
