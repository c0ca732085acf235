import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError
from models import Product

if TYPE_CHECKING:
    from query_builder import ProductQuery

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("total_clicks", "total_favorites")


class ProductStore:
    """Product persistence on top of a SQLAlchemy session.

    Every write commits on its own; callers that need two writes (list toggle
    + favorite counter) get two independent commits.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- čtení ----------

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_or_404(self, product_id: int) -> Product:
        product = self.get(product_id)
        if not product:
            raise NotFoundError("Product not found", details={"productId": product_id})
        return product

    def get_by_url(self, url: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.url == url).first()

    def get_many(self, product_ids: List[int]) -> Dict[int, Product]:
        if not product_ids:
            return {}
        rows = self.db.query(Product).filter(Product.id.in_(product_ids)).all()
        return {row.id: row for row in rows}

    def all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def find(self, plan: "ProductQuery") -> List[Product]:
        return (
            self.db.query(Product)
            .filter(*plan.filters)
            .order_by(*plan.order_by)
            .offset(plan.skip)
            .limit(plan.limit)
            .all()
        )

    def count(self, plan: "ProductQuery") -> int:
        return self.db.query(Product).filter(*plan.filters).count()

    # ---------- zápis ----------

    def add(self, product: Product) -> Product:
        self.db.add(product)
        return self._commit(product)

    def save(self, product: Product) -> Product:
        self.db.add(product)
        return self._commit(product)

    def update(self, product_id: int, fields: Dict[str, Any]) -> Product:
        product = self.get_or_404(product_id)
        for key, value in fields.items():
            setattr(product, key, value)
        return self.save(product)

    def delete(self, product_id: int) -> Product:
        product = self.get_or_404(product_id)
        self.db.delete(product)
        self.db.commit()
        return product

    def increment(self, product_id: int, field: str, amount: int = 1) -> Product:
        """Atomic ``field = field + amount`` in a single UPDATE statement."""
        if field not in COUNTER_FIELDS:
            raise ValueError(f"{field} is not a counter field")

        column = getattr(Product, field)
        matched = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .update({column: column + amount}, synchronize_session=False)
        )
        if not matched:
            self.db.rollback()
            raise NotFoundError("Product not found", details={"productId": product_id})

        self.db.commit()
        return self.get_or_404(product_id)

    def _commit(self, product: Product) -> Product:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Duplicate product url rejected: %s", product.url)
            raise ConflictError(
                "Product with this url already exists",
                details={"url": product.url},
            )
        self.db.refresh(product)
        return product

    # ---------- agregace ----------

    def categories(self) -> Dict[str, List[str]]:
        rows = self.db.query(Product.category, Product.subcategory).distinct().all()
        result: Dict[str, set] = defaultdict(set)
        for category, subcategory in rows:
            result[category].add(subcategory)
        return {category: sorted(subs) for category, subs in sorted(result.items())}

    def brands(self) -> List[str]:
        rows = self.db.query(Product.brand).distinct().order_by(Product.brand).all()
        return [brand for (brand,) in rows]

    def stock_status_by_shop(self) -> List[Dict[str, Any]]:
        rows = self.db.query(Product.shop, Product.stock_status).all()

        shops: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for shop, status in rows:
            shops[shop][(status or "").lower()] += 1

        stats = [
            {
                "shop": shop,
                "count": sum(counts.values()),
                "stock_status_counts": dict(counts),
            }
            for shop, counts in shops.items()
        ]
        stats.sort(key=lambda item: item["count"], reverse=True)
        return stats

    def stock_statuses(self) -> List[str]:
        rows = self.db.query(Product.stock_status).distinct().order_by(Product.stock_status).all()
        return [status for (status,) in rows]
