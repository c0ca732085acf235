from datetime import datetime

import pytest

from errors import ValidationError
from price_timeline import upsert_by_url
from product_store import ProductStore


def _fields(**overrides):
    data = {
        "url": "https://shop.example.com/p/rtx-4070",
        "name": "RTX 4070",
        "price": 599.0,
        "brand": "Nvidia",
        "model": "4070",
        "warranty": "3 years",
        "category": "components",
        "subcategory": "gpu",
        "images": ["https://cdn.example.com/rtx.jpg"],
        "shop": "Example Shop",
    }
    data.update(overrides)
    return data


def test_first_upsert_creates_with_empty_timeline(db_session):
    product, created = upsert_by_url(ProductStore(db_session), _fields())

    assert created is True
    assert product.id is not None
    assert product.price == 599.0
    assert product.stock_status == "Out Of Stock"
    assert product.price_timeline == []


def test_update_appends_superseded_price(db_session):
    store = ProductStore(db_session)
    upsert_by_url(store, _fields(price=599.0))

    when = datetime(2026, 1, 2, 12, 0, 0)
    product, created = upsert_by_url(store, {"url": _fields()["url"], "price": 549.0}, now=when)

    assert created is False
    assert product.price == 549.0
    assert [(s.date, s.price) for s in product.price_timeline] == [(when, 599.0)]


def test_timeline_never_holds_current_price(db_session):
    store = ProductStore(db_session)
    url = _fields()["url"]
    upsert_by_url(store, _fields(price=10.0))

    for price in (20.0, 30.0, 40.0):
        product, _ = upsert_by_url(store, {"url": url, "price": price})

    assert [s.price for s in product.price_timeline] == [10.0, 20.0, 30.0]
    assert product.price == 40.0


def test_same_price_twice_records_two_entries(db_session):
    store = ProductStore(db_session)
    url = _fields()["url"]
    upsert_by_url(store, _fields(price=100.0))

    upsert_by_url(store, {"url": url, "price": 100.0}, now=datetime(2026, 3, 1))
    product, _ = upsert_by_url(store, {"url": url, "price": 100.0}, now=datetime(2026, 3, 2))

    assert [s.price for s in product.price_timeline] == [100.0, 100.0]
    assert product.price_timeline[0].date != product.price_timeline[1].date


def test_update_overwrites_other_fields(db_session):
    store = ProductStore(db_session)
    upsert_by_url(store, _fields())

    product, _ = upsert_by_url(store, {"url": _fields()["url"], "price": 500.0, "stock_status": "In Stock"})

    assert product.stock_status == "In Stock"
    assert product.name == "RTX 4070"


def test_create_requires_full_product(db_session):
    with pytest.raises(ValidationError) as excinfo:
        upsert_by_url(ProductStore(db_session), {"url": "https://shop.example.com/x", "price": 1.0})

    missing = {tuple(err["loc"]) for err in excinfo.value.details}
    assert ("brand",) in missing
    assert ("images",) in missing
