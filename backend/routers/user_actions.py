from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from deps_auth import get_current_owner
from list_toggle import ListKind, ToggleResult, get_owner_lists, toggle
from schemas import OwnerListsOut, ToggleProductIn, ToggleWishlistIn

user_actions_router = APIRouter(prefix="/api/user-actions", tags=["user actions"])


def _toggle_response(result: ToggleResult) -> dict:
    return {
        "message": result.message,
        "action": result.action,
        result.action: True,
        result.kind.value: result.items,
    }


@user_actions_router.post("/favoriteList")
def toggle_favorite(
    payload: ToggleProductIn,
    db: Session = Depends(get_db),
    owner=Depends(get_current_owner),
):
    result = toggle(db, owner, ListKind.FAVORITES, payload.product_id)
    return _toggle_response(result)


@user_actions_router.post("/wishlist")
def toggle_wishlist(
    payload: ToggleWishlistIn,
    db: Session = Depends(get_db),
    owner=Depends(get_current_owner),
):
    result = toggle(db, owner, ListKind.WISHLIST, payload.product_id, payload.expected_price)
    return _toggle_response(result)


@user_actions_router.post("/compares")
def toggle_compare(
    payload: ToggleProductIn,
    db: Session = Depends(get_db),
    owner=Depends(get_current_owner),
):
    result = toggle(db, owner, ListKind.COMPARES, payload.product_id)
    return _toggle_response(result)


@user_actions_router.get("/data", response_model=OwnerListsOut)
def get_user_data(db: Session = Depends(get_db), owner=Depends(get_current_owner)):
    return get_owner_lists(db, owner)
