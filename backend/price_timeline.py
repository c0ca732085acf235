import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from models import PriceSnapshot, Product
from product_store import ProductStore
from schemas import ProductCreate

logger = logging.getLogger(__name__)


def validation_details(exc: PydanticValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def upsert_by_url(
    store: ProductStore,
    fields: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Tuple[Product, bool]:
    """
    Create-or-update keyed by ``url``. Returns ``(product, created)``.

    On update the price that is about to be replaced is appended to the
    timeline first, so the timeline only ever holds superseded prices.
    Same price twice still produces two entries (the price was confirmed).
    """
    url = fields["url"]
    product = store.get_by_url(url)

    if product is None:
        try:
            data = ProductCreate.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid product data", details=validation_details(exc))

        product = store.add(Product(**data.model_dump()))
        logger.info("Created product id=%s url=%s price=%s", product.id, product.url, product.price)
        return product, True

    snapshot_at = now or datetime.now(timezone.utc)
    old_price = product.price
    product.price_timeline.append(PriceSnapshot(date=snapshot_at, price=old_price))

    for key, value in fields.items():
        setattr(product, key, value)

    product = store.save(product)
    logger.info(
        "Updated product id=%s url=%s price %s -> %s (timeline=%d)",
        product.id, product.url, old_price, product.price, len(product.price_timeline),
    )
    return product, False
