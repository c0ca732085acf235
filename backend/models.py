from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(1000), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Float, nullable=False, default=0, index=True)
    regular_price = Column(Float)
    stock_status = Column(String(100), nullable=False, default="Out Of Stock")
    brand = Column(String(100), nullable=False, index=True)
    model = Column(String(255), nullable=False)
    warranty = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    subcategory = Column(String(100), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    shop = Column(String(100), nullable=False, index=True)
    features = Column(JSON, nullable=False, default=dict)

    # denormalizované čítače, udržuje je counters.py
    total_clicks = Column(Integer, nullable=False, default=0, index=True)
    total_favorites = Column(Integer, nullable=False, default=0, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, index=True)

    price_timeline = relationship(
        "PriceSnapshot",
        back_populates="product",
        order_by="PriceSnapshot.id",
        cascade="all, delete-orphan",
    )


class PriceSnapshot(Base):
    __tablename__ = "price_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    price = Column(Float, nullable=False)

    product = relationship("Product", back_populates="price_timeline")


class AccountMixin:
    """Columns shared by users and admins.

    The three product lists are stored on the account row itself:
    ``favorite_list`` and ``compares`` hold product ids, ``wishlist`` holds
    ``{"product": id, "expectedPrice": float}`` entries.
    """

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    favorite_list = Column(JSON, nullable=False, default=list)
    wishlist = Column(JSON, nullable=False, default=list)
    compares = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class User(AccountMixin, Base):
    __tablename__ = "users"

    role = Column(String(20), nullable=False, default="user")


class Admin(AccountMixin, Base):
    __tablename__ = "admins"

    role = Column(String(20), nullable=False, default="admin")


class OtpCode(Base):
    """One live code per email; regenerating overwrites the row."""

    __tablename__ = "otp_codes"

    email = Column(String(255), primary_key=True)
    otp = Column(String(6), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)


ACCOUNT_MODELS = {
    "user": User,
    "admin": Admin,
}
