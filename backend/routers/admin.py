import logging
import math
from collections import Counter
from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from deps_auth import require_admin
from errors import NotFoundError
from models import Admin, User
from product_store import ProductStore
from query_builder import escape_like
from schemas import ShopStatsResponse
from schemas_auth import AccountPageOut

logger = logging.getLogger(__name__)

admin_router = APIRouter(
    prefix="/api/admin-actions",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@admin_router.get("/shop-stats", response_model=ShopStatsResponse)
def get_shop_stats(db: Session = Depends(get_db)):
    store = ProductStore(db)
    shops = store.stock_status_by_shop()
    if not shops:
        raise NotFoundError("No products found")

    return {
        "shops": shops,
        "total_shops": len(shops),
        "total_products": sum(item["count"] for item in shops),
        "unique_stock_statuses": store.stock_statuses(),
    }


@admin_router.get("/user-admin-stats")
def get_user_admin_stats(db: Session = Depends(get_db)):
    users = db.query(User).count()
    admins = db.query(Admin).count()
    return {"users": users, "admins": admins, "total": users + admins}


@admin_router.get("/users-by-date")
def get_users_by_date(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    query = db.query(User.created_at)
    if start_date:
        query = query.filter(User.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date:
        query = query.filter(User.created_at <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))

    per_day = Counter(created_at.date() for (created_at,) in query.all())
    users_by_date = [
        {"date": day.isoformat(), "count": count}
        for day, count in sorted(per_day.items())
    ]
    return {
        "usersByDate": users_by_date,
        "total": sum(per_day.values()),
    }


def _page_of_users(query, page: int, limit: int) -> dict:
    total = query.count()
    users = query.order_by(User.id).offset((page - 1) * limit).limit(limit).all()
    if not users:
        raise NotFoundError("No users found.")

    return {
        "users": users,
        "current_page": page,
        "total_pages": math.ceil(total / limit),
        "total_users": total,
        "results_per_page": limit,
    }


@admin_router.get("/all-users", response_model=AccountPageOut)
def get_all_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    db: Session = Depends(get_db),
):
    return _page_of_users(db.query(User), page, limit)


@admin_router.get("/search-users", response_model=AccountPageOut)
def search_users(
    query: Optional[str] = None,
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    users_query = db.query(User)
    if query:
        pattern = f"%{escape_like(query)}%"
        users_query = users_query.filter(
            or_(
                User.first_name.ilike(pattern, escape="\\"),
                User.last_name.ilike(pattern, escape="\\"),
                User.username.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            )
        )

    if page and limit:
        return _page_of_users(users_query, page, limit)

    # bez stránkování vracíme vše na jedné stránce
    total = users_query.count()
    return _page_of_users(users_query, 1, max(total, 1))


@admin_router.delete("/delete-user/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found.")

    db.delete(user)
    db.commit()
    logger.info("Admin deleted user id=%s", user_id)
    return {"ok": True, "message": "User deleted successfully."}


@admin_router.delete("/delete-product/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductStore(db).delete(product_id)
    logger.info("Admin deleted product id=%s", product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
