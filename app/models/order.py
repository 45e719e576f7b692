# app/models/order.py
import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PACKED = "PACKED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Order(SQLModel, table=True):
    """
    Order header.

    Written once by the placement transaction; afterwards only
    `order_status` / `payment_status` / `updated_at` change.
    """

    __tablename__ = "orders"

    order_id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.user_id", index=True)

    shop_id: int = Field(foreign_key="shops.shop_id", index=True)

    total_amount: Decimal = Field(max_digits=10, decimal_places=2)

    # Number of distinct lines, not units
    item_count: int = Field(ge=0)

    order_status: str = Field(
        default=OrderStatus.PENDING.value,
        index=True,
        max_length=20,
    )

    payment_status: str = Field(default="PENDING", max_length=20)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Immutable order line with the price captured at placement time.
    """

    __tablename__ = "order_items"

    order_item_id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="orders.order_id", index=True)

    product_id: int = Field(foreign_key="products.product_id")

    quantity: int = Field(gt=0)

    price_at_time: Decimal = Field(max_digits=10, decimal_places=2)


class OrderAddress(SQLModel, table=True):
    """
    Field-for-field copy of the user's default address at placement time.
    Deliberately not a foreign key to user_addresses.
    """

    __tablename__ = "order_addresses"

    order_address_id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="orders.order_id", index=True, unique=True)

    full_name: str
    phone: str
    house: str
    landmark: str | None = None
    city: str
    state: str
    pincode: str


class Payment(SQLModel, table=True):
    """
    Append-only payment record. Payment is recorded, never processed here.
    """

    __tablename__ = "payments"

    payment_id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="orders.order_id", index=True)

    amount: Decimal = Field(max_digits=10, decimal_places=2)

    payment_method: str = Field(max_length=20)

    transaction_id: str | None = None

    payment_status: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
