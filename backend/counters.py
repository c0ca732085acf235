from models import Product
from product_store import ProductStore


def increment_clicks(store: ProductStore, product_id: int) -> Product:
    return store.increment(product_id, "total_clicks", 1)


def increment_favorites(store: ProductStore, product_id: int) -> Product:
    return store.increment(product_id, "total_favorites", 1)


def decrement_favorites(store: ProductStore, product_id: int) -> Product:
    # bez spodní hranice, při souběhu může jít do záporu
    return store.increment(product_id, "total_favorites", -1)
