import pytest

from errors import CapacityError, NotFoundError, ValidationError
from list_toggle import (
    COMPARE_LIMIT,
    ListKind,
    add_to_list,
    get_owner_lists,
    remove_from_list,
    toggle,
)
from product_store import ProductStore


def _favorites_of(db_session, product):
    db_session.refresh(product)
    return product.total_favorites


def test_favorite_toggle_twice_is_net_zero(db_session, user, make_product):
    product = make_product()

    first = toggle(db_session, user, ListKind.FAVORITES, product.id)
    assert first.action == "added"
    assert first.items == [product.id]
    assert _favorites_of(db_session, product) == 1

    second = toggle(db_session, user, ListKind.FAVORITES, product.id)
    assert second.action == "removed"
    assert second.items == []
    assert _favorites_of(db_session, product) == 0


def test_explicit_add_is_idempotent(db_session, user, make_product):
    product = make_product()

    add_to_list(db_session, user, ListKind.FAVORITES, product.id)
    items = add_to_list(db_session, user, ListKind.FAVORITES, product.id)

    assert items == [product.id]
    assert _favorites_of(db_session, product) == 1


def test_remove_of_absent_product_changes_nothing(db_session, user, make_product):
    product = make_product()

    assert remove_from_list(db_session, user, ListKind.FAVORITES, product.id) == []
    assert _favorites_of(db_session, product) == 0


def test_lists_are_independent(db_session, user, make_product):
    product = make_product()

    toggle(db_session, user, ListKind.FAVORITES, product.id)
    toggle(db_session, user, ListKind.COMPARES, product.id)
    toggle(db_session, user, ListKind.WISHLIST, product.id, expected_price=50)

    db_session.refresh(user)
    assert user.favorite_list == [product.id]
    assert user.compares == [product.id]
    assert user.wishlist == [{"product": product.id, "expectedPrice": 50.0}]


def test_compare_list_is_capped(db_session, user, make_product):
    products = [make_product() for _ in range(COMPARE_LIMIT + 1)]

    for product in products[:COMPARE_LIMIT]:
        assert toggle(db_session, user, ListKind.COMPARES, product.id).action == "added"

    with pytest.raises(CapacityError) as excinfo:
        toggle(db_session, user, ListKind.COMPARES, products[-1].id)

    assert excinfo.value.message == "You can only compare up to 2 products"
    db_session.refresh(user)
    assert user.compares == [p.id for p in products[:COMPARE_LIMIT]]


def test_compare_slot_frees_after_removal(db_session, user, make_product):
    a, b, c = make_product(), make_product(), make_product()
    toggle(db_session, user, ListKind.COMPARES, a.id)
    toggle(db_session, user, ListKind.COMPARES, b.id)

    toggle(db_session, user, ListKind.COMPARES, a.id)
    result = toggle(db_session, user, ListKind.COMPARES, c.id)

    assert result.items == [b.id, c.id]


@pytest.mark.parametrize("expected_price", [0, -5, None])
def test_wishlist_rejects_non_positive_price(db_session, user, make_product, expected_price):
    product = make_product()

    with pytest.raises(ValidationError):
        toggle(db_session, user, ListKind.WISHLIST, product.id, expected_price=expected_price)

    db_session.refresh(user)
    assert user.wishlist == []


def test_wishlist_entry_added_once(db_session, user, make_product):
    product = make_product()

    result = toggle(db_session, user, ListKind.WISHLIST, product.id, expected_price=100)

    assert result.action == "added"
    assert result.items == [{"product": product.id, "expectedPrice": 100.0}]


def test_wishlist_second_toggle_removes_even_with_new_price(db_session, user, make_product):
    product = make_product()
    toggle(db_session, user, ListKind.WISHLIST, product.id, expected_price=100)

    result = toggle(db_session, user, ListKind.WISHLIST, product.id, expected_price=80)

    assert result.action == "removed"
    assert result.items == []


def test_adding_missing_product_fails(db_session, user):
    with pytest.raises(NotFoundError):
        toggle(db_session, user, ListKind.FAVORITES, 999)

    db_session.refresh(user)
    assert user.favorite_list == []


def test_admin_lists_work_the_same(db_session, admin, make_product):
    product = make_product()

    result = toggle(db_session, admin, ListKind.FAVORITES, product.id)

    assert result.action == "added"
    assert _favorites_of(db_session, product) == 1


def test_owner_lists_are_populated(db_session, user, make_product):
    fav, wished = make_product(), make_product()
    toggle(db_session, user, ListKind.FAVORITES, fav.id)
    toggle(db_session, user, ListKind.WISHLIST, wished.id, expected_price=42)

    lists = get_owner_lists(db_session, user)

    assert [p.id for p in lists["favorite_list"]] == [fav.id]
    assert lists["wishlist"][0]["product"].id == wished.id
    assert lists["wishlist"][0]["expected_price"] == 42.0
    assert lists["compares"] == []


def test_unfavorite_of_deleted_product(db_session, user, make_product):
    product = make_product()
    toggle(db_session, user, ListKind.FAVORITES, product.id)
    ProductStore(db_session).delete(product.id)

    result = toggle(db_session, user, ListKind.FAVORITES, product.id)

    assert result.action == "removed"
    db_session.refresh(user)
    assert user.favorite_list == []


def test_deleted_product_does_not_hold_compare_slot(db_session, user, make_product):
    gone, kept, new = make_product(), make_product(), make_product()
    toggle(db_session, user, ListKind.COMPARES, gone.id)
    toggle(db_session, user, ListKind.COMPARES, kept.id)
    ProductStore(db_session).delete(gone.id)

    result = toggle(db_session, user, ListKind.COMPARES, new.id)

    assert result.action == "added"
    assert result.items == [kept.id, new.id]
