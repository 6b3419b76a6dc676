from typing import Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint

from cartapi.core.errors import InvalidOwner


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cart(SQLModel, table=True):
    __tablename__ = "carts"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Item(SQLModel, table=True):
    """A fixed quantity of a single product in a cart."""

    __tablename__ = "items"
    # A product appears at most once per cart
    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="uq_items_cart_product"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    # References
    cart_id: int = Field(foreign_key="carts.id", index=True)
    product_id: int

    # Line Details
    quantity: int
    # Total price of the line, i.e. product price * quantity
    price: float

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def new_cart(user_id: Optional[int]) -> Cart:
    """Build an unsaved cart owned by user_id."""
    if not user_id:
        raise InvalidOwner()
    return Cart(user_id=user_id)
