# app/models/product.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Shop(SQLModel, table=True):
    """
    A shopkeeper's storefront. Orders are placed against exactly one shop.
    """

    __tablename__ = "shops"

    shop_id: int | None = Field(default=None, primary_key=True)

    owner_id: int = Field(foreign_key="users.user_id", index=True)

    name: str = Field(max_length=150)

    image_url: str | None = None

    is_deleted: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Product(SQLModel, table=True):
    """
    Catalog entry shared by every shop that stocks it.

    `base_price` is the catalog (MRP) price; the price a customer pays is
    the shop's `Inventory.selling_price` when one is active.
    """

    __tablename__ = "products"

    product_id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=150, index=True)

    description: str | None = None

    base_price: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
    )

    image_url: str | None = None

    is_deleted: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Inventory(SQLModel, table=True):
    """
    Stock and selling price of a product within one shop's channel.

    Authoritative source for both cart pricing and order stock decrements.
    """

    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("shop_id", "product_id", name="uq_inventory_shop_product"),
    )

    inventory_id: int | None = Field(default=None, primary_key=True)

    shop_id: int = Field(foreign_key="shops.shop_id", index=True)

    product_id: int = Field(foreign_key="products.product_id", index=True)

    stock_quantity: int = Field(default=0, ge=0)

    selling_price: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
    )

    is_deleted: bool = Field(default=False)

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
