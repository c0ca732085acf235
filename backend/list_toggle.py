"""
Favorite list, wishlist and compare list of a user or admin.

Each list lives on the account row (JSON column). ``add_to_list`` and
``remove_from_list`` are the explicit operations, ``toggle`` picks one of them
from the current membership. A product appears at most once per list.

Favorite changes are followed by a separate write of the product's
``total_favorites`` counter; there is no rollback if that second write fails.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from counters import decrement_favorites, increment_favorites
from errors import CapacityError, ValidationError
from models import Admin, User
from product_store import ProductStore

logger = logging.getLogger(__name__)

COMPARE_LIMIT = 2

Owner = Union[User, Admin]


class ListKind(str, Enum):
    FAVORITES = "favoriteList"
    WISHLIST = "wishlist"
    COMPARES = "compares"


LIST_ATTRS = {
    ListKind.FAVORITES: "favorite_list",
    ListKind.WISHLIST: "wishlist",
    ListKind.COMPARES: "compares",
}

LIST_LABELS = {
    ListKind.FAVORITES: "favorites",
    ListKind.WISHLIST: "wishlist",
    ListKind.COMPARES: "comparison",
}


@dataclass
class ToggleResult:
    kind: ListKind
    action: str  # "added" / "removed"
    items: List[Any]

    @property
    def added(self) -> bool:
        return self.action == "added"

    @property
    def message(self) -> str:
        label = LIST_LABELS[self.kind]
        if self.added:
            return f"Product added to {label}"
        return f"Product removed from {label}"


def _entry_product_id(kind: ListKind, entry: Any) -> Optional[int]:
    if kind is ListKind.WISHLIST:
        return entry.get("product") if isinstance(entry, dict) else None
    return entry


def current_items(owner: Owner, kind: ListKind) -> List[Any]:
    # vždy nová kopie, JSON sloupec musí dostat nový objekt, jinak se změna neuloží
    return list(getattr(owner, LIST_ATTRS[kind]) or [])


def contains(owner: Owner, kind: ListKind, product_id: int) -> bool:
    return any(_entry_product_id(kind, entry) == product_id for entry in current_items(owner, kind))


def _write_list(db: Session, owner: Owner, kind: ListKind, items: List[Any]) -> List[Any]:
    setattr(owner, LIST_ATTRS[kind], items)
    db.add(owner)
    db.commit()
    db.refresh(owner)
    return current_items(owner, kind)


def add_to_list(
    db: Session,
    owner: Owner,
    kind: ListKind,
    product_id: int,
    expected_price: Optional[float] = None,
) -> List[Any]:
    items = current_items(owner, kind)
    if contains(owner, kind, product_id):
        return items

    if kind is ListKind.WISHLIST and (expected_price is None or expected_price <= 0):
        raise ValidationError(
            "Expected price must be greater than 0",
            details={"expectedPrice": expected_price},
        )

    store = ProductStore(db)
    if kind is ListKind.COMPARES:
        # smazané produkty nezabírají místo v porovnání
        live = store.get_many(items)
        items = [pid for pid in items if pid in live]
        if len(items) >= COMPARE_LIMIT:
            raise CapacityError(
                f"You can only compare up to {COMPARE_LIMIT} products",
                details={"compares": items},
            )

    store.get_or_404(product_id)

    if kind is ListKind.WISHLIST:
        items.append({"product": product_id, "expectedPrice": float(expected_price)})
    else:
        items.append(product_id)

    items = _write_list(db, owner, kind, items)
    logger.info("%s %s: added product %s to %s", owner.role, owner.id, product_id, kind.value)

    if kind is ListKind.FAVORITES:
        increment_favorites(store, product_id)
    return items


def remove_from_list(db: Session, owner: Owner, kind: ListKind, product_id: int) -> List[Any]:
    items = current_items(owner, kind)
    remaining = [entry for entry in items if _entry_product_id(kind, entry) != product_id]
    if len(remaining) == len(items):
        return items

    remaining = _write_list(db, owner, kind, remaining)
    logger.info("%s %s: removed product %s from %s", owner.role, owner.id, product_id, kind.value)

    if kind is ListKind.FAVORITES:
        store = ProductStore(db)
        if store.get(product_id) is None:
            logger.info("Product %s no longer exists, favorites counter left alone", product_id)
        else:
            decrement_favorites(store, product_id)
    return remaining


def toggle(
    db: Session,
    owner: Owner,
    kind: ListKind,
    product_id: int,
    expected_price: Optional[float] = None,
) -> ToggleResult:
    # druhý toggle wishlistu s jinou cenou produkt odebere, cenu neaktualizuje
    if contains(owner, kind, product_id):
        items = remove_from_list(db, owner, kind, product_id)
        return ToggleResult(kind=kind, action="removed", items=items)

    items = add_to_list(db, owner, kind, product_id, expected_price)
    return ToggleResult(kind=kind, action="added", items=items)


def get_owner_lists(db: Session, owner: Owner) -> Dict[str, Any]:
    """All three lists with product records in place of ids.

    Entries whose product no longer exists are skipped.
    """
    favorites = current_items(owner, ListKind.FAVORITES)
    wishlist = current_items(owner, ListKind.WISHLIST)
    compares = current_items(owner, ListKind.COMPARES)

    wanted = set(favorites) | set(compares)
    wanted |= {_entry_product_id(ListKind.WISHLIST, entry) for entry in wishlist}
    wanted.discard(None)
    products = ProductStore(db).get_many(list(wanted))

    return {
        "favorite_list": [products[pid] for pid in favorites if pid in products],
        "wishlist": [
            {"product": products[entry["product"]], "expected_price": entry["expectedPrice"]}
            for entry in wishlist
            if entry.get("product") in products
        ],
        "compares": [products[pid] for pid in compares if pid in products],
    }
