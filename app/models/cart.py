# app/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    Shopping cart owned by either a user or a guest id.

    At most one active cart exists per owner; the two partial unique
    indexes below turn a concurrent second insert into an IntegrityError
    that the repository resolves by re-reading the winner.
    """

    __tablename__ = "carts"
    __table_args__ = (
        Index(
            "uq_carts_active_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index(
            "uq_carts_active_guest",
            "guest_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    cart_id: int | None = Field(default=None, primary_key=True)

    user_id: int | None = Field(
        default=None,
        foreign_key="users.user_id",
        index=True,
    )

    guest_id: str | None = Field(default=None, max_length=50, index=True)

    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    Cart line. One row per (cart, product); adding again increments quantity.

    No price is stored here: it is resolved live from the inventory channel
    (`shop_id`) every time the cart is read.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
    )

    item_id: int | None = Field(default=None, primary_key=True)

    cart_id: int = Field(foreign_key="carts.cart_id", index=True)

    product_id: int = Field(foreign_key="products.product_id", index=True)

    shop_id: int | None = Field(
        default=None,
        foreign_key="shops.shop_id",
        description="Inventory channel the line was added from",
    )

    quantity: int = Field(gt=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
